"""
Tests for MinioStorageClient and AudioPublisher.

Tests cover:
- put_object arguments (content type, cache directive)
- Error taxonomy mapping
- Bucket-wide public-read grant (fixed size, safe under overlap)
- Publishing, overwriting and deleting audio
"""
import io
import json
import threading
from unittest.mock import MagicMock

import pytest

from compaction_tts.domain import AudioPublisher, audio_object_name
from compaction_tts.exceptions import (
    StorageConfigurationError,
    StorageError,
    StoragePermissionError,
    StorageQuotaError,
    StorageUploadError,
)
from compaction_tts.infrastructure import MinioStorageClient
from compaction_tts.infrastructure import minio_storage


class FakeS3Error(Exception):
    """Stands in for minio.error.S3Error, whose constructor varies by release."""

    def __init__(self, code, message="s3 failure"):
        self.code = code
        self.message = message
        super().__init__(message)


@pytest.fixture
def minio_client():
    return MagicMock()


@pytest.fixture
def client(minio_client, monkeypatch):
    monkeypatch.setattr(minio_storage, "S3Error", FakeS3Error)
    return MinioStorageClient(minio_client, "audio", "http://localhost:9000/")


class TestUpload:

    def test_put_object_arguments(self, client, minio_client):
        data = io.BytesIO(b"mp3")
        client.upload("vid1.mp3", data, 3, "audio/mpeg", cache_control="public, max-age=60")

        minio_client.put_object.assert_called_once_with(
            bucket_name="audio",
            object_name="vid1.mp3",
            data=data,
            length=3,
            content_type="audio/mpeg",
            metadata={"Cache-Control": "public, max-age=60"},
        )

    @pytest.mark.parametrize(
        "error, error_type, message",
        [
            (FakeS3Error("NoSuchBucket"), StorageConfigurationError, "Storage bucket not found"),
            (FakeS3Error("AccessDenied"), StoragePermissionError, "Storage permission denied"),
            (PermissionError("denied"), StoragePermissionError, "Storage permission denied"),
            (Exception("Storage quota exceeded for tenant"), StorageQuotaError, "Storage quota exceeded"),
            (Exception("boom"), StorageUploadError, "Storage upload failed: boom"),
        ],
    )
    def test_error_taxonomy(self, client, minio_client, error, error_type, message):
        minio_client.put_object.side_effect = error

        with pytest.raises(error_type) as exc_info:
            client.upload("vid1.mp3", io.BytesIO(b"x"), 1, "audio/mpeg")

        assert str(exc_info.value) == message
        assert exc_info.value.cause is error
        assert exc_info.value.status_code == 500


class PolicyStore:
    """Keeps one bucket policy the way the MinIO server does."""

    def __init__(self, barrier=None):
        self.policy = None
        self.writes = 0
        self._barrier = barrier

    def get(self, bucket_name):
        raw = self.policy
        if self._barrier is not None:
            self._barrier.wait(timeout=5)
        if raw is None:
            raise FakeS3Error("NoSuchBucketPolicy")
        return raw

    def set(self, bucket_name, policy):
        self.policy = policy
        self.writes += 1

    def attach(self, minio_client):
        minio_client.get_bucket_policy.side_effect = self.get
        minio_client.set_bucket_policy.side_effect = self.set


class TestMakePublic:

    def test_installs_bucket_wide_grant(self, client, minio_client):
        minio_client.get_bucket_policy.side_effect = FakeS3Error("NoSuchBucketPolicy")

        client.make_public("vid1.mp3")

        bucket, raw = minio_client.set_bucket_policy.call_args.args
        policy = json.loads(raw)
        assert bucket == "audio"
        statement = policy["Statement"][0]
        assert statement["Sid"] == minio_storage.PUBLIC_READ_SID
        assert statement["Effect"] == "Allow"
        assert statement["Action"] == ["s3:GetObject"]
        assert statement["Resource"] == ["arn:aws:s3:::audio/*"]

    def test_collapses_per_object_entries(self, client, minio_client):
        existing = {
            "Version": "2012-10-17",
            "Statement": [
                {
                    "Sid": minio_storage.PUBLIC_READ_SID,
                    "Effect": "Allow",
                    "Principal": {"AWS": ["*"]},
                    "Action": ["s3:GetObject"],
                    "Resource": ["arn:aws:s3:::audio/old.mp3", "arn:aws:s3:::audio/older.mp3"],
                },
                {"Sid": "Other", "Effect": "Deny", "Resource": "arn:aws:s3:::audio/private/*"},
            ],
        }
        minio_client.get_bucket_policy.return_value = json.dumps(existing)

        client.make_public("vid1.mp3")

        policy = json.loads(minio_client.set_bucket_policy.call_args.args[1])
        assert policy["Statement"][0]["Resource"] == ["arn:aws:s3:::audio/*"]
        assert policy["Statement"][1]["Sid"] == "Other"

    def test_existing_grant_is_not_rewritten(self, client, minio_client):
        minio_client.get_bucket_policy.return_value = json.dumps(
            {
                "Version": "2012-10-17",
                "Statement": [
                    {"Sid": minio_storage.PUBLIC_READ_SID, "Resource": "arn:aws:s3:::audio/*"}
                ],
            }
        )

        client.make_public("vid1.mp3")

        minio_client.set_bucket_policy.assert_not_called()

    def test_policy_is_read_once(self, client, minio_client):
        PolicyStore().attach(minio_client)

        for i in range(500):
            client.make_public(f"vid{i}.mp3")

        assert minio_client.get_bucket_policy.call_count == 1
        assert minio_client.set_bucket_policy.call_count == 1

    def test_policy_size_does_not_grow_with_objects(self, minio_client, monkeypatch):
        monkeypatch.setattr(minio_storage, "S3Error", FakeS3Error)
        store = PolicyStore()
        store.attach(minio_client)

        MinioStorageClient(minio_client, "audio", "http://x").make_public("vid0.mp3")
        first_size = len(store.policy)
        for i in range(1, 500):
            MinioStorageClient(minio_client, "audio", "http://x").make_public(f"vid{i}.mp3")

        assert len(store.policy) == first_size
        assert store.writes == 1

    def test_overlapping_publishes_keep_both_public(self, client, minio_client):
        store = PolicyStore(barrier=threading.Barrier(2))
        store.attach(minio_client)
        errors = []

        def publish(name):
            try:
                client.make_public(name)
            except Exception as e:
                errors.append(e)

        threads = [threading.Thread(target=publish, args=(n,)) for n in ("a.mp3", "b.mp3")]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=5)

        assert errors == []
        statement = json.loads(store.policy)["Statement"][0]
        assert statement["Resource"] == ["arn:aws:s3:::audio/*"]

    def test_policy_failure_is_mapped(self, client, minio_client):
        minio_client.get_bucket_policy.side_effect = FakeS3Error("AccessDenied")

        with pytest.raises(StoragePermissionError):
            client.make_public("vid1.mp3")


class TestObjectHelpers:

    def test_public_url(self, client):
        assert client.public_url("vid1.mp3") == "http://localhost:9000/audio/vid1.mp3"

    def test_exists(self, client, minio_client):
        assert client.exists("vid1.mp3") is True
        minio_client.stat_object.assert_called_once_with("audio", "vid1.mp3")

    def test_exists_missing_object(self, client, minio_client):
        minio_client.stat_object.side_effect = FakeS3Error("NoSuchKey")
        assert client.exists("vid1.mp3") is False

    def test_exists_other_error_raises(self, client, minio_client):
        minio_client.stat_object.side_effect = FakeS3Error("AccessDenied")
        with pytest.raises(StoragePermissionError):
            client.exists("vid1.mp3")

    def test_exists_transport_error_is_mapped(self, client, minio_client):
        error = ConnectionError("connection refused")
        minio_client.stat_object.side_effect = error

        with pytest.raises(StorageUploadError) as exc_info:
            client.exists("vid1.mp3")

        assert exc_info.value.cause is error

    def test_delete_missing_object_is_ok(self, client, minio_client):
        minio_client.remove_object.side_effect = FakeS3Error("NoSuchKey")
        client.delete("vid1.mp3")

    def test_delete_transport_error_is_mapped(self, client, minio_client):
        minio_client.remove_object.side_effect = ConnectionError("connection refused")
        with pytest.raises(StorageError):
            client.delete("vid1.mp3")

    def test_ensure_bucket_creates_missing_bucket(self, client, minio_client):
        minio_client.bucket_exists.return_value = False
        minio_client.get_bucket_policy.side_effect = FakeS3Error("NoSuchBucketPolicy")

        client.ensure_bucket_exists()

        minio_client.make_bucket.assert_called_once_with("audio")
        policy = json.loads(minio_client.set_bucket_policy.call_args.args[1])
        assert policy["Statement"][0]["Resource"] == ["arn:aws:s3:::audio/*"]

    def test_grant_from_startup_skips_policy_on_publish(self, client, minio_client):
        minio_client.bucket_exists.return_value = True
        PolicyStore().attach(minio_client)

        client.ensure_bucket_exists()
        client.make_public("vid1.mp3")

        assert minio_client.get_bucket_policy.call_count == 1


class TestAudioPublisher:

    def test_object_name(self):
        assert audio_object_name("vid1") == "vid1.mp3"

    def test_publish_returns_public_url(self, storage):
        url = AudioPublisher(storage).publish(b"audio-1", audio_object_name("vid1"))

        assert url.endswith("vid1.mp3")
        stored = storage.objects["vid1.mp3"]
        assert stored["data"] == b"audio-1"
        assert stored["content_type"] == "audio/mpeg"
        assert stored["cache_control"] == "public, max-age=31536000"
        assert "vid1.mp3" in storage.public

    def test_second_publish_overwrites(self, storage):
        publisher = AudioPublisher(storage)
        first = publisher.publish(b"audio-1", "vid1.mp3")
        second = publisher.publish(b"audio-2", "vid1.mp3")

        assert first == second
        assert storage.objects["vid1.mp3"]["data"] == b"audio-2"

    def test_upload_failure_propagates_without_publishing(self, storage):
        storage.upload_error = StorageQuotaError("vid1.mp3")

        with pytest.raises(StorageError):
            AudioPublisher(storage).publish(b"audio", "vid1.mp3")

        assert storage.upload_calls == 1
        assert storage.public == set()

    def test_exists_and_delete(self, storage):
        publisher = AudioPublisher(storage)
        publisher.publish(b"audio", audio_object_name("vid1"))

        assert publisher.audio_exists("vid1") is True
        publisher.delete_audio("vid1")
        assert publisher.audio_exists("vid1") is False
