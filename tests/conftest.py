from __future__ import annotations

import pytest

from objstore.common.config import get_settings
from tests.infra.mock_s3 import MockS3Client

STORAGE_ENV_VARS = (
    "S3_ENDPOINT_URL",
    "S3_REGION",
    "S3_ACCESS_KEY_ID",
    "S3_SECRET_ACCESS_KEY",
    "S3_USE_SSL",
    "S3_ADDRESSING_STYLE",
    "S3_CONNECT_TIMEOUT",
    "S3_READ_TIMEOUT",
    "S3_MAX_ATTEMPTS",
    "STORAGE_PROJECT_ID",
    "LOG_LEVEL",
    "LOG_FORMAT",
)


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch, tmp_path):
    """Isolate every test from the caller's storage env and any local .env."""
    for name in STORAGE_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(
        "objstore.common.config.ENV_FILE", tmp_path / "missing.env"
    )
    get_settings.cache_clear()  # type: ignore[attr-defined]
    yield
    get_settings.cache_clear()  # type: ignore[attr-defined]


@pytest.fixture()
def mock_s3():
    return MockS3Client()
