"""Shared fixtures: in-memory database, fake storage and fake synthesizer."""
from contextlib import contextmanager

import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from compaction_tts.db_models import CompactionEntity
from compaction_tts.domain.models import SynthesisResult
from compaction_tts.infrastructure.interfaces import SpeechSynthesizer, StorageClient
from compaction_tts.repositories import CompactionRepository

AUTH_TOKEN = "test-secret-token-123"
AUTH_HEADER = f"Bearer {AUTH_TOKEN}"

COMPLETE_FIELDS = {
    "compaction_text_human": "Hello from the compaction.",
    "voice_id": "voice-abc",
    "video_id": "vid-1",
}


class InMemoryStorage(StorageClient):
    """StorageClient double that keeps objects in a dict."""

    def __init__(self, base_url: str = "https://storage.example.com", bucket: str = "audio"):
        self.base_url = base_url
        self.bucket = bucket
        self.objects: dict[str, dict] = {}
        self.public: set[str] = set()
        self.upload_error: Exception | None = None
        self.upload_calls = 0

    def upload(self, object_name, data, size, content_type, cache_control=None):
        self.upload_calls += 1
        if self.upload_error is not None:
            raise self.upload_error
        self.objects[object_name] = {
            "data": data.read(),
            "size": size,
            "content_type": content_type,
            "cache_control": cache_control,
        }

    def make_public(self, object_name):
        self.public.add(object_name)

    def public_url(self, object_name):
        return f"{self.base_url}/{self.bucket}/{object_name}"

    def exists(self, object_name):
        return object_name in self.objects

    def delete(self, object_name):
        self.objects.pop(object_name, None)
        self.public.discard(object_name)


class StubSynthesizer(SpeechSynthesizer):
    """SpeechSynthesizer double returning canned audio or raising."""

    def __init__(self, audio: bytes = b"ID3fake-mp3-bytes", error: Exception | None = None):
        self.audio = audio
        self.error = error
        self.calls: list[dict] = []

    def synthesize(self, transcript, voice_id, compaction_id=None):
        self.calls.append(
            {"transcript": transcript, "voice_id": voice_id, "compaction_id": compaction_id}
        )
        if self.error is not None:
            raise self.error
        return SynthesisResult(audio=self.audio, request_id="req-123", duration_seconds=1.5)


@pytest.fixture
def engine():
    """In-memory SQLite engine shared across threads."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    @contextmanager
    def factory():
        with Session(engine) as session:
            yield session

    return factory


@pytest.fixture
def repository(session_factory):
    return CompactionRepository(session_factory)


@pytest.fixture
def load_entity(session_factory):
    """Reads a raw row, bypassing validation."""

    def load(compaction_id: str) -> CompactionEntity | None:
        with session_factory() as session:
            return session.get(CompactionEntity, compaction_id)

    return load


@pytest.fixture
def storage():
    return InMemoryStorage()


@pytest.fixture
def synthesizer():
    return StubSynthesizer()
