"""
Centralized configuration management with validation.
"""
import os
import logging
from dataclasses import dataclass, field
from typing import Mapping, Optional

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

# S3 multipart parts must be 5 MiB to 5 GiB (only the last may be smaller)
MIN_PART_SIZE = 5 * 1024 * 1024
MAX_PART_SIZE = 5 * 1024 * 1024 * 1024
DEFAULT_PART_SIZE = 10 * 1024 * 1024

_TRUTHY = ("1", "true", "yes")


def _env_bool(env: Mapping[str, str], key: str, default: str = "false") -> bool:
    return env.get(key, default).strip().lower() in _TRUTHY


def _env_int(env: Mapping[str, str], key: str, default: str) -> int:
    raw = env.get(key, "").strip() or default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{key} must be an integer, got {raw!r}", config_key=key)


def _env_float(env: Mapping[str, str], key: str) -> Optional[float]:
    raw = env.get(key, "").strip()
    if not raw:
        return None
    try:
        return float(raw)
    except ValueError:
        raise ConfigurationError(f"{key} must be a number, got {raw!r}", config_key=key)


@dataclass(frozen=True)
class MinioConfig:
    """MinIO connection and bucket configuration."""
    host: str = ""
    port: int = 9000
    access_key: str = ""
    secret_key: str = ""
    use_ssl: bool = False
    bucket: str = ""
    timeout: Optional[float] = None
    part_size: int = DEFAULT_PART_SIZE

    # field name -> environment variable, in validation order
    REQUIRED = (
        ("host", "MINIO_HOST"),
        ("access_key", "MINIO_USERNAME"),
        ("secret_key", "MINIO_PASSWORD"),
        ("bucket", "MINIO_DEFAULT_BUCKET"),
    )

    @property
    def endpoint(self) -> str:
        """host:port as the MinIO SDK expects it."""
        return f"{self.host}:{self.port}"

    @property
    def secure(self) -> bool:
        return self.use_ssl

    def validate(self) -> None:
        """Raise ConfigurationError naming the first missing or invalid field."""
        for attr, env_key in self.REQUIRED:
            value = getattr(self, attr)
            if not value or not str(value).strip():
                raise ConfigurationError(
                    f"{attr} is not set ({env_key}). Is the MinIO service deployed?",
                    config_key=env_key,
                )
        if not 0 < self.port < 65536:
            raise ConfigurationError(f"port out of range: {self.port}", config_key="MINIO_PORT")
        if not MIN_PART_SIZE <= self.part_size <= MAX_PART_SIZE:
            raise ConfigurationError(
                f"part_size must be between {MIN_PART_SIZE} and {MAX_PART_SIZE} bytes, got {self.part_size}",
                config_key="MINIO_PART_SIZE",
            )
        if self.timeout is not None and self.timeout <= 0:
            raise ConfigurationError(f"timeout must be positive, got {self.timeout}", config_key="MINIO_TIMEOUT")

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> 'MinioConfig':
        """Load from environment variables."""
        env = os.environ if env is None else env
        return cls(
            host=env.get("MINIO_HOST", "").strip(),
            port=_env_int(env, "MINIO_PORT", "9000"),
            access_key=env.get("MINIO_USERNAME", ""),
            secret_key=env.get("MINIO_PASSWORD", ""),
            use_ssl=_env_bool(env, "MINIO_USE_SSL"),
            bucket=env.get("MINIO_DEFAULT_BUCKET", "").strip(),
            timeout=_env_float(env, "MINIO_TIMEOUT"),
            part_size=_env_int(env, "MINIO_PART_SIZE", str(DEFAULT_PART_SIZE)),
        )


@dataclass(frozen=True)
class ServerConfig:
    """HTTP listener configuration."""
    host: str = "0.0.0.0"
    port: int = 3000
    public_url: str = ""
    log_level: str = "INFO"

    def validate(self) -> None:
        if not 0 < self.port < 65536:
            raise ConfigurationError(f"port out of range: {self.port}", config_key="PORT")

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> 'ServerConfig':
        """Load from environment variables."""
        env = os.environ if env is None else env
        return cls(
            host=env.get("HOST", "0.0.0.0"),
            port=_env_int(env, "PORT", "3000"),
            public_url=env.get("PUBLIC_URL", "").strip().rstrip("/"),
            log_level=env.get("LOG_LEVEL", "INFO"),
        )


@dataclass(frozen=True)
class AppConfig:
    """Main application configuration aggregating all sub-configs."""
    minio: MinioConfig = field(default_factory=MinioConfig)
    server: ServerConfig = field(default_factory=ServerConfig)

    def validate(self) -> None:
        self.minio.validate()
        self.server.validate()

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> 'AppConfig':
        """Load complete configuration from environment."""
        return cls(
            minio=MinioConfig.from_env(env),
            server=ServerConfig.from_env(env),
        )
