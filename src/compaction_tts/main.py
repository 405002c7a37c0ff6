"""FastAPI application entry point."""

from ddtrace import patch_all

from compaction_tts.app import create_app, resources_lifespan

patch_all()

app = create_app(lifespan=resources_lifespan)
