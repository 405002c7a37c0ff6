"""Application configuration loaded from environment variables."""

import os

from pydantic import BaseModel, computed_field


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class AuthConfig(BaseModel, frozen=True):
    """Caller-facing bearer token configuration."""

    token: str = ""
    min_token_length: int = 10


class RetryConfig(BaseModel, frozen=True):
    """Backoff settings for outbound synthesis calls."""

    max_retries: int = 3
    min_delay_seconds: float = 1.0
    factor: float = 2.0
    max_delay_seconds: float = 60.0


class CartesiaConfig(BaseModel, frozen=True):
    """Cartesia TTS API configuration."""

    api_key: str = ""
    url: str = "https://api.cartesia.ai/tts/bytes"
    api_version: str = "2025-04-16"
    model_id: str = "sonic-2"
    language: str = "en"
    container: str = "mp3"
    bit_rate: int = 128000
    sample_rate: int = 44100
    timeout_seconds: float = 30.0
    retry_client_errors: bool = True
    retry: RetryConfig = RetryConfig()


class MinioConfig(BaseModel, frozen=True):
    """MinIO connection configuration."""

    endpoint: str
    user: str
    password: str
    bucket_name: str = "compaction-audio"
    secure: bool = False
    public_base_url: str = ""
    cache_control: str = "public, max-age=31536000"

    @computed_field
    @property
    def base_url(self) -> str:
        """Returns the public base URL objects are served from."""
        if self.public_base_url:
            return self.public_base_url.rstrip("/")
        scheme = "https" if self.secure else "http"
        return f"{scheme}://{self.endpoint}"


class PostgresConfig(BaseModel, frozen=True):
    """PostgreSQL connection configuration."""

    host: str
    port: int
    user: str
    password: str
    database: str

    @computed_field
    @property
    def url(self) -> str:
        """Returns the full PostgreSQL connection URL."""
        return (
            f"postgresql+psycopg://{self.user}:{self.password}"
            f"@{self.host}:{self.port}/{self.database}"
        )


class AppConfig(BaseModel, frozen=True):
    """Root application configuration."""

    auth: AuthConfig
    cartesia: CartesiaConfig
    minio: MinioConfig
    postgres: PostgresConfig


def load_config() -> AppConfig:
    """Loads configuration from environment variables."""
    return AppConfig(
        auth=AuthConfig(
            token=os.getenv("AUTH_TOKEN", ""),
        ),
        cartesia=CartesiaConfig(
            api_key=os.getenv("CARTESIA_API_KEY", ""),
            retry_client_errors=_env_bool("CARTESIA_RETRY_CLIENT_ERRORS", True),
        ),
        minio=MinioConfig(
            endpoint=os.getenv("MINIO_ENDPOINT", "minio:9000"),
            user=os.getenv("MINIO_USER", ""),
            password=os.getenv("MINIO_PASSWORD", ""),
            bucket_name=os.getenv("MINIO_BUCKET", "compaction-audio"),
            secure=_env_bool("MINIO_SECURE", False),
            public_base_url=os.getenv("MINIO_PUBLIC_BASE_URL", ""),
        ),
        postgres=PostgresConfig(
            host=os.getenv("POSTGRES_HOST", "postgres"),
            port=int(os.getenv("POSTGRES_PORT", "5432")),
            user=os.getenv("POSTGRES_USER", ""),
            password=os.getenv("POSTGRES_PASSWORD", ""),
            database=os.getenv("POSTGRES_DB", "compactions"),
        ),
    )
