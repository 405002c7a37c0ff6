"""FastAPI dependency injection configuration."""

from contextlib import contextmanager

import httpx
from minio import Minio
from sqlmodel import Session, SQLModel, create_engine

from compaction_tts.config import load_config
from compaction_tts.domain import AudioPublisher, TokenValidator
from compaction_tts.handlers import TTSRequestHandler
from compaction_tts.infrastructure import CartesiaSpeechSynthesizer, MinioStorageClient
from compaction_tts.logging import setup_logging
from compaction_tts.repositories import CompactionRepository

logger = setup_logging()

_config = load_config()

# PostgreSQL database
_db_engine = create_engine(_config.postgres.url, pool_pre_ping=True)


@contextmanager
def _session_factory():
    """Creates a database session context manager."""
    with Session(_db_engine) as session:
        yield session


_repository = CompactionRepository(_session_factory)

# MinIO storage
_minio_client = Minio(
    endpoint=_config.minio.endpoint,
    access_key=_config.minio.user,
    secret_key=_config.minio.password,
    secure=_config.minio.secure,
)
_storage = MinioStorageClient(
    _minio_client, _config.minio.bucket_name, _config.minio.base_url
)
_publisher = AudioPublisher(_storage, _config.minio.cache_control)

# Cartesia
_http_client = httpx.Client(timeout=_config.cartesia.timeout_seconds)
_synthesizer = CartesiaSpeechSynthesizer(_http_client, _config.cartesia)

_validator = TokenValidator(_config.auth.token, _config.auth.min_token_length)


def init_resources() -> None:
    """Creates the database schema and the audio bucket if missing."""
    SQLModel.metadata.create_all(_db_engine)
    logger.info("Database initialized", extra={"host": _config.postgres.host})
    _storage.ensure_bucket_exists()


def close_resources() -> None:
    """Releases pooled connections."""
    _http_client.close()
    _db_engine.dispose()


def get_handler() -> TTSRequestHandler:
    """Returns a TTS request handler for a single request."""
    return TTSRequestHandler(_validator, _repository, _synthesizer, _publisher)
