"""S3-compatible client construction.

Builds the boto3 client used by every helper in ``operations``. The same
client works against AWS S3, MinIO and Google Cloud Storage's XML API
(``https://storage.googleapis.com`` with HMAC keys).

Dependencies:
    - boto3
    - botocore
"""

from __future__ import annotations

import logging
import uuid
from contextlib import contextmanager
from typing import Any, Iterator

import boto3
from botocore.config import Config

from objstore.common.config import Settings, get_settings
from objstore.infra.storage.client import StorageError

logger = logging.getLogger(__name__)

PROJECT_HEADER = "x-goog-project-id"


def build_config(settings: Settings) -> Config:
    """Translate settings into a botocore ``Config``.

    Connect/read timeouts bound every call made through the client, and the
    SDK's own standard retry mode handles transient failures.
    """
    return Config(
        s3={"addressing_style": settings.S3_ADDRESSING_STYLE},
        connect_timeout=settings.S3_CONNECT_TIMEOUT,
        read_timeout=settings.S3_READ_TIMEOUT,
        retries={"max_attempts": settings.S3_MAX_ATTEMPTS, "mode": "standard"},
    )


def create_client(settings: Settings | None = None) -> Any:
    """Create a boto3 S3 client from settings.

    Args:
        settings: Storage settings; defaults to the environment-derived
            settings from ``get_settings()``.

    Returns:
        A boto3 S3 client.

    Raises:
        StorageError: If the client cannot be constructed.
    """
    settings = settings or get_settings()
    kwargs: dict[str, Any] = {
        "region_name": settings.S3_REGION,
        "use_ssl": bool(settings.S3_USE_SSL),
        "config": build_config(settings),
    }
    if settings.S3_ENDPOINT_URL:
        kwargs["endpoint_url"] = settings.S3_ENDPOINT_URL
    if settings.has_static_credentials:
        kwargs["aws_access_key_id"] = settings.S3_ACCESS_KEY_ID
        kwargs["aws_secret_access_key"] = settings.S3_SECRET_ACCESS_KEY

    try:
        client = boto3.client("s3", **kwargs)
    except Exception as exc:
        logger.error(
            "Failed to create storage client: %s",
            exc,
            extra={"extra": {"endpoint": settings.S3_ENDPOINT_URL}},
        )
        raise StorageError(f"Failed to create storage client: {exc}") from exc

    logger.debug(
        "Created storage client",
        extra={
            "extra": {
                "endpoint": settings.S3_ENDPOINT_URL or "<default>",
                "region": settings.S3_REGION,
            }
        },
    )
    return client


@contextmanager
def project_header(client: Any, operation: str, project_id: str | None) -> Iterator[None]:
    """Attach the project header to one operation for the duration of the block.

    GCS scopes bucket creation and listing by project; S3 and MinIO ignore the
    header. Nothing is registered when ``project_id`` is empty.
    """
    if not project_id:
        yield
        return

    def _add_header(params: dict[str, Any], **_: Any) -> None:
        params.setdefault("headers", {})[PROJECT_HEADER] = project_id

    event_name = f"before-call.s3.{operation}"
    unique_id = f"objstore-project-{uuid.uuid4().hex}"
    events = client.meta.events
    events.register(event_name, _add_header, unique_id=unique_id)
    try:
        yield
    finally:
        events.unregister(event_name, unique_id=unique_id)
