"""Tests for environment configuration loading and validation."""
import pytest

from libs.common.config import DEFAULT_PART_SIZE, MAX_PART_SIZE, AppConfig, MinioConfig, ServerConfig
from libs.common.exceptions import ConfigurationError

FULL_ENV = {
    "MINIO_HOST": "minio",
    "MINIO_USERNAME": "user",
    "MINIO_PASSWORD": "pass",
    "MINIO_DEFAULT_BUCKET": "uploads",
}


def test_defaults():
    config = AppConfig.from_env(FULL_ENV)

    assert config.minio.port == 9000
    assert config.minio.use_ssl is False
    assert config.minio.timeout is None
    assert config.minio.part_size == DEFAULT_PART_SIZE
    assert config.minio.endpoint == "minio:9000"
    assert config.server.port == 3000
    assert config.server.public_url == ""
    config.validate()


def test_overrides():
    env = dict(
        FULL_ENV,
        MINIO_PORT="9443",
        MINIO_USE_SSL="yes",
        MINIO_TIMEOUT="2.5",
        PORT="8080",
        PUBLIC_URL="https://files.example.com/",
    )

    config = AppConfig.from_env(env)

    assert config.minio.port == 9443
    assert config.minio.secure is True
    assert config.minio.timeout == 2.5
    assert config.server.port == 8080
    assert config.server.public_url == "https://files.example.com"


@pytest.mark.parametrize("raw, expected", [("1", True), ("TRUE", True), ("no", False), ("", False)])
def test_ssl_flag_parsing(raw, expected):
    assert MinioConfig.from_env(dict(FULL_ENV, MINIO_USE_SSL=raw)).use_ssl is expected


def test_blank_port_uses_default():
    assert MinioConfig.from_env(dict(FULL_ENV, MINIO_PORT="")).port == 9000


def test_invalid_port_names_variable():
    with pytest.raises(ConfigurationError) as excinfo:
        ServerConfig.from_env({"PORT": "http"})

    assert excinfo.value.config_key == "PORT"


@pytest.mark.parametrize("missing", ["MINIO_HOST", "MINIO_USERNAME", "MINIO_PASSWORD", "MINIO_DEFAULT_BUCKET"])
def test_missing_required_variable(missing):
    env = {k: v for k, v in FULL_ENV.items() if k != missing}

    with pytest.raises(ConfigurationError) as excinfo:
        AppConfig.from_env(env).validate()

    assert excinfo.value.config_key == missing


def test_part_size_floor():
    config = MinioConfig.from_env(dict(FULL_ENV, MINIO_PART_SIZE="1024"))

    with pytest.raises(ConfigurationError) as excinfo:
        config.validate()

    assert excinfo.value.config_key == "MINIO_PART_SIZE"


def test_part_size_ceiling():
    config = MinioConfig.from_env(dict(FULL_ENV, MINIO_PART_SIZE=str(MAX_PART_SIZE + 1)))

    with pytest.raises(ConfigurationError) as excinfo:
        config.validate()

    assert excinfo.value.config_key == "MINIO_PART_SIZE"


def test_part_size_at_ceiling_is_accepted():
    MinioConfig.from_env(dict(FULL_ENV, MINIO_PART_SIZE=str(MAX_PART_SIZE))).validate()


def test_port_range():
    with pytest.raises(ConfigurationError):
        MinioConfig.from_env(dict(FULL_ENV, MINIO_PORT="70000")).validate()


def test_config_is_immutable():
    config = MinioConfig.from_env(FULL_ENV)

    with pytest.raises(AttributeError):
        config.host = "elsewhere"
