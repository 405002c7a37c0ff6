"""MinIO implementation of the StorageClient interface."""

import json
from typing import BinaryIO

from minio import Minio
from minio.error import S3Error

from compaction_tts.exceptions import (
    StorageConfigurationError,
    StorageError,
    StoragePermissionError,
    StorageQuotaError,
    StorageUploadError,
)
from compaction_tts.logging import setup_logging

from .interfaces import StorageClient

logger = setup_logging()

PUBLIC_READ_SID = "PublicReadAudio"

_MISSING_BUCKET_CODES = {"NoSuchBucket"}
_PERMISSION_CODES = {"AccessDenied", "InvalidAccessKeyId", "SignatureDoesNotMatch"}
_MISSING_OBJECT_CODES = {"NoSuchKey", "NoSuchObject", "ResourceNotFound"}


def map_storage_error(object_name: str, error: Exception) -> StorageError:
    """Translates a storage SDK failure into the service's error taxonomy."""
    code = getattr(error, "code", None)
    if code in _MISSING_BUCKET_CODES:
        return StorageConfigurationError(object_name, error)
    if code in _PERMISSION_CODES or isinstance(error, PermissionError):
        return StoragePermissionError(object_name, error)
    if "quota" in str(error).lower():
        return StorageQuotaError(object_name, error)
    return StorageUploadError(object_name, error)


class MinioStorageClient(StorageClient):
    """Handles audio storage operations using MinIO."""

    def __init__(self, client: Minio, bucket_name: str, public_base_url: str):
        self._client = client
        self._bucket_name = bucket_name
        self._public_base_url = public_base_url.rstrip("/")
        self._public_read_granted = False

    @property
    def bucket_name(self) -> str:
        return self._bucket_name

    def upload(
        self,
        object_name: str,
        data: BinaryIO,
        size: int,
        content_type: str,
        cache_control: str | None = None,
    ) -> None:
        metadata = {"Cache-Control": cache_control} if cache_control else None
        try:
            self._client.put_object(
                bucket_name=self._bucket_name,
                object_name=object_name,
                data=data,
                length=size,
                content_type=content_type,
                metadata=metadata,
            )
            logger.info(
                "File uploaded to MinIO",
                extra={
                    "bucket_name": self._bucket_name,
                    "object_name": object_name,
                    "size": size,
                },
            )
        except Exception as e:
            logger.exception(
                "MinIO upload failed",
                extra={"bucket_name": self._bucket_name, "object_name": object_name},
            )
            raise map_storage_error(object_name, e) from e

    def make_public(self, object_name: str) -> None:
        """
        Ensures the bucket-wide anonymous-read grant covers the object.

        MinIO has no per-object ACLs. Public access comes from a single
        policy statement on ``<bucket>/*`` whose content is the same for
        every object. Once the grant is confirmed the policy is not read
        again.
        """
        if self._public_read_granted:
            return
        try:
            self._grant_public_read()
        except Exception as e:
            logger.exception(
                "MinIO make public failed",
                extra={"bucket_name": self._bucket_name, "object_name": object_name},
            )
            raise map_storage_error(object_name, e) from e

    def public_url(self, object_name: str) -> str:
        return f"{self._public_base_url}/{self._bucket_name}/{object_name}"

    def exists(self, object_name: str) -> bool:
        try:
            self._client.stat_object(self._bucket_name, object_name)
            return True
        except Exception as e:
            if isinstance(e, S3Error) and e.code in _MISSING_OBJECT_CODES:
                return False
            logger.exception(
                "MinIO exists check failed",
                extra={"bucket_name": self._bucket_name, "object_name": object_name},
            )
            raise map_storage_error(object_name, e) from e

    def delete(self, object_name: str) -> None:
        try:
            self._client.remove_object(self._bucket_name, object_name)
            logger.info(
                "Object deleted from MinIO",
                extra={"bucket_name": self._bucket_name, "object_name": object_name},
            )
        except Exception as e:
            if isinstance(e, S3Error) and e.code in _MISSING_OBJECT_CODES:
                logger.warning(
                    "Object to delete not found",
                    extra={
                        "bucket_name": self._bucket_name,
                        "object_name": object_name,
                    },
                )
                return
            logger.exception(
                "MinIO delete failed",
                extra={"bucket_name": self._bucket_name, "object_name": object_name},
            )
            raise map_storage_error(object_name, e) from e

    def ensure_bucket_exists(self) -> None:
        """Creates the bucket if missing and installs the public-read grant."""
        if not self._client.bucket_exists(self._bucket_name):
            self._client.make_bucket(self._bucket_name)
            logger.info("Bucket created", extra={"bucket_name": self._bucket_name})
        else:
            logger.info(
                "Bucket already exists", extra={"bucket_name": self._bucket_name}
            )
        self._grant_public_read()

    def _grant_public_read(self) -> None:
        resource = f"arn:aws:s3:::{self._bucket_name}/*"
        policy = self._load_policy()
        statement = self._public_read_statement(policy)
        if statement["Resource"] != [resource]:
            # Per-object entries collapse into the wildcard.
            statement["Resource"] = [resource]
            self._client.set_bucket_policy(self._bucket_name, json.dumps(policy))
            logger.info(
                "Public read policy installed",
                extra={"bucket_name": self._bucket_name, "resource": resource},
            )
        self._public_read_granted = True

    def _load_policy(self) -> dict:
        try:
            raw = self._client.get_bucket_policy(self._bucket_name)
        except S3Error as e:
            if e.code == "NoSuchBucketPolicy":
                return {"Version": "2012-10-17", "Statement": []}
            raise
        return json.loads(raw)

    def _public_read_statement(self, policy: dict) -> dict:
        for statement in policy.setdefault("Statement", []):
            if statement.get("Sid") == PUBLIC_READ_SID:
                resources = statement.get("Resource", [])
                if isinstance(resources, str):
                    resources = [resources]
                statement["Resource"] = resources
                return statement

        statement = {
            "Sid": PUBLIC_READ_SID,
            "Effect": "Allow",
            "Principal": {"AWS": ["*"]},
            "Action": ["s3:GetObject"],
            "Resource": [],
        }
        policy["Statement"].append(statement)
        return statement
