import logging
import sys

from pythonjsonlogger import jsonlogger

HANDLER_NAME = "compaction_tts"
UVICORN_LOGGERS = ("uvicorn", "uvicorn.access", "uvicorn.error")


def setup_logging():
    """
    Installs the service's JSON stdout handler and returns the root logger.

    Records carry timestamp, level, logger name, message and the ddtrace
    trace_id/span_id. Every module calls this at import time; the handler is
    identified by name, so repeated calls leave exactly one copy of it and
    any handler someone else attached to the root logger stays in place.
    Uvicorn's loggers write through the same handler and stop propagating so
    their records are not emitted twice.

    Returns:
        logging.Logger: The root logger.
    """
    formatter = jsonlogger.JsonFormatter(
        "%(asctime)s %(levelname)s %(name)s %(message)s %(trace_id)s %(span_id)s"
    )
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)
    handler.set_name(HANDLER_NAME)

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.INFO)
    root_logger.handlers = [
        h for h in root_logger.handlers if h.get_name() != HANDLER_NAME
    ]
    root_logger.addHandler(handler)

    for name in UVICORN_LOGGERS:
        server_logger = logging.getLogger(name)
        server_logger.setLevel(logging.INFO)
        server_logger.handlers = [handler]
        server_logger.propagate = False

    return root_logger
