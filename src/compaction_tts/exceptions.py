"""Custom exceptions for the compaction TTS service."""


class PipelineError(Exception):
    """Base class for failures that end a TTS request."""

    status_code = 500

    def __init__(self, message: str, cause: Exception | None = None):
        self.message = message
        self.cause = cause
        super().__init__(message)


class UnauthorizedError(PipelineError):
    """Raised when the caller's bearer token is rejected."""

    status_code = 401

    def __init__(self):
        super().__init__("Unauthorized")


class CompactionNotFoundError(PipelineError):
    """Raised when a compaction document does not exist."""

    status_code = 404

    def __init__(self, compaction_id: str):
        self.compaction_id = compaction_id
        super().__init__("Compaction document not found")


class CompactionValidationError(PipelineError):
    """Raised when a compaction document lacks fields required for synthesis."""

    def __init__(self, compaction_id: str, missing_fields: list[str]):
        self.compaction_id = compaction_id
        self.missing_fields = missing_fields
        super().__init__(f"Missing required fields: {', '.join(missing_fields)}")


class CompactionReadError(PipelineError):
    """Raised when reading a compaction document fails."""

    def __init__(self, compaction_id: str, cause: Exception | None = None):
        self.compaction_id = compaction_id
        super().__init__(
            f"Failed to read compaction document '{compaction_id}'", cause
        )


class CompactionUpdateError(PipelineError):
    """Raised when writing to a compaction document fails."""

    def __init__(self, compaction_id: str, cause: Exception | None = None):
        self.compaction_id = compaction_id
        super().__init__(
            f"Failed to update compaction document '{compaction_id}'", cause
        )


class SynthesisError(PipelineError):
    """Base class for Cartesia TTS failures."""


class SynthesisConfigurationError(SynthesisError):
    """Raised when the synthesis client is missing its API key."""

    def __init__(self):
        super().__init__("Cartesia API key not provided")


class SynthesisAuthenticationError(SynthesisError):
    """Raised when Cartesia rejects the API key (HTTP 401)."""

    def __init__(self, cause: Exception | None = None):
        super().__init__("Cartesia API authentication failed", cause)


class SynthesisRateLimitError(SynthesisError):
    """Raised when Cartesia throttles the request (HTTP 429)."""

    def __init__(self, cause: Exception | None = None):
        super().__init__("Cartesia API rate limit exceeded", cause)


class SynthesisServerError(SynthesisError):
    """Raised when Cartesia responds with a 5xx status."""

    def __init__(self, upstream_status: int, cause: Exception | None = None):
        self.upstream_status = upstream_status
        super().__init__(f"Cartesia API server error: {upstream_status}", cause)


class SynthesisClientError(SynthesisError):
    """Raised when Cartesia responds with a 4xx status other than 401 and 429."""

    def __init__(self, upstream_status: int, cause: Exception | None = None):
        self.upstream_status = upstream_status
        super().__init__(f"Cartesia API error: {upstream_status}", cause)


class SynthesisTimeoutError(SynthesisError):
    """Raised when a Cartesia request times out."""

    def __init__(self, cause: Exception | None = None):
        super().__init__("Cartesia API request timeout", cause)


class SynthesisNetworkError(SynthesisError):
    """Raised on transport failures talking to Cartesia."""

    def __init__(self, cause: Exception | None = None):
        super().__init__(f"Cartesia API network error: {cause}", cause)


class EmptyAudioError(SynthesisError):
    """Raised when Cartesia returns an empty audio payload."""

    def __init__(self):
        super().__init__("Empty audio response from Cartesia API")


class StorageError(PipelineError):
    """Base class for audio storage failures."""

    def __init__(
        self, object_name: str, message: str, cause: Exception | None = None
    ):
        self.object_name = object_name
        super().__init__(message, cause)


class StorageConfigurationError(StorageError):
    """Raised when the target bucket does not exist."""

    def __init__(self, object_name: str, cause: Exception | None = None):
        super().__init__(object_name, "Storage bucket not found", cause)


class StoragePermissionError(StorageError):
    """Raised when storage credentials lack access to the bucket."""

    def __init__(self, object_name: str, cause: Exception | None = None):
        super().__init__(object_name, "Storage permission denied", cause)


class StorageQuotaError(StorageError):
    """Raised when the storage backend reports an exhausted quota."""

    def __init__(self, object_name: str, cause: Exception | None = None):
        super().__init__(object_name, "Storage quota exceeded", cause)


class StorageUploadError(StorageError):
    """Raised when uploading or publishing an object fails for any other reason."""

    def __init__(self, object_name: str, cause: Exception | None = None):
        detail = getattr(cause, "message", None) or str(cause)
        super().__init__(object_name, f"Storage upload failed: {detail}", cause)
