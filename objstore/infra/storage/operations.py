"""Bucket and object helpers.

Each helper wraps one remote call on an already-constructed S3 client,
guarded by a single existence probe where the operation needs one. Errors
are logged and raised as ``StorageError`` subclasses; nothing here exits the
process.
"""

from __future__ import annotations

import logging
import mimetypes
import os
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator

from objstore.infra.observability.metrics import LATENCY, OPERATIONS
from objstore.infra.storage.client import (
    BucketAttrs,
    BucketNotFoundError,
    LocalFileError,
    ObjectNotFoundError,
    StorageError,
    is_bucket_not_found,
    is_object_not_found,
)
from objstore.infra.storage.s3_client import project_header

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "application/octet-stream"


def _fields(operation: str, **fields: Any) -> dict[str, Any]:
    return {"extra": {"operation": operation, **fields}}


@contextmanager
def observe_operation(operation: str) -> Iterator[None]:
    start = time.perf_counter()
    outcome = "error"
    try:
        yield
        outcome = "success"
    except (BucketNotFoundError, ObjectNotFoundError):
        outcome = "not_found"
        raise
    finally:
        OPERATIONS.labels(operation, outcome).inc()
        LATENCY.labels(operation).observe(time.perf_counter() - start)


def _bucket_exists(client: Any, bucket: str, operation: str) -> bool:
    try:
        client.head_bucket(Bucket=bucket)
    except Exception as exc:
        if is_bucket_not_found(exc):
            return False
        logger.error(
            "Error while loading bucket %s: %s",
            bucket,
            exc,
            extra=_fields(operation, bucket=bucket),
        )
        raise StorageError(f"Failed to load bucket {bucket}: {exc}") from exc
    return True


def _require_bucket(client: Any, bucket: str, operation: str) -> None:
    if not _bucket_exists(client, bucket, operation):
        logger.error(
            "Bucket %s does not exist",
            bucket,
            extra=_fields(operation, bucket=bucket),
        )
        raise BucketNotFoundError(bucket)


def create_bucket(
    client: Any,
    bucket: str,
    *,
    project_id: str | None = None,
    attrs: BucketAttrs | None = None,
) -> bool:
    """Create ``bucket`` unless it already exists.

    Returns:
        True if the bucket was created, False if it already existed.

    Raises:
        StorageError: If the probe or the create call fails.
    """
    with observe_operation("create_bucket"):
        if _bucket_exists(client, bucket, "create_bucket"):
            logger.debug(
                "Bucket %s already exists",
                bucket,
                extra=_fields("create_bucket", bucket=bucket),
            )
            return False

        logger.debug(
            "Creating bucket %s", bucket, extra=_fields("create_bucket", bucket=bucket)
        )
        params: dict[str, Any] = {"Bucket": bucket}
        if attrs is not None:
            params.update(attrs.to_params())
        try:
            with project_header(client, "CreateBucket", project_id):
                client.create_bucket(**params)
        except Exception as exc:
            logger.error(
                "Error while creating bucket %s: %s",
                bucket,
                exc,
                extra=_fields("create_bucket", bucket=bucket, project_id=project_id),
            )
            raise StorageError(f"Failed to create bucket {bucket}: {exc}") from exc
        return True


def list_buckets(client: Any, *, project_id: str | None = None) -> list[str]:
    """Return the names of every bucket visible to the client."""
    with observe_operation("list_buckets"):
        names: list[str] = []
        params: dict[str, Any] = {}
        try:
            with project_header(client, "ListBuckets", project_id):
                while True:
                    response = client.list_buckets(**params)
                    names.extend(b["Name"] for b in response.get("Buckets") or [])
                    token = response.get("ContinuationToken")
                    if not token:
                        break
                    params["ContinuationToken"] = token
        except Exception as exc:
            logger.error(
                "Error while iterating through buckets: %s",
                exc,
                extra=_fields("list_buckets", project_id=project_id),
            )
            raise StorageError(f"Failed to list buckets: {exc}") from exc
        return names


def delete_bucket(client: Any, bucket: str) -> None:
    """Delete ``bucket``.

    Raises:
        BucketNotFoundError: If the bucket does not exist.
        StorageError: If the probe or the delete call fails.
    """
    with observe_operation("delete_bucket"):
        _require_bucket(client, bucket, "delete_bucket")
        logger.warning(
            "Deleting bucket %s", bucket, extra=_fields("delete_bucket", bucket=bucket)
        )
        try:
            client.delete_bucket(Bucket=bucket)
        except Exception as exc:
            logger.error(
                "Error while deleting bucket %s: %s",
                bucket,
                exc,
                extra=_fields("delete_bucket", bucket=bucket),
            )
            raise StorageError(f"Failed to delete bucket {bucket}: {exc}") from exc


def upload_local_file(
    client: Any,
    bucket: str,
    local_path: str | os.PathLike[str],
    key: str,
    *,
    content_type: str | None = None,
) -> None:
    """Upload the file at ``local_path`` as object ``key`` in ``bucket``.

    Args:
        client: boto3 S3 client.
        bucket: Target bucket name; must already exist.
        local_path: Path of the local file to upload.
        key: Object key in the bucket.
        content_type: MIME type; guessed from the file name when omitted.

    Raises:
        BucketNotFoundError: If the bucket does not exist.
        LocalFileError: If the local file cannot be read.
        StorageError: If the write fails.
    """
    with observe_operation("upload_local_file"):
        _require_bucket(client, bucket, "upload_local_file")

        path = Path(local_path)
        try:
            body = path.read_bytes()
        except OSError as exc:
            logger.error(
                "Error while opening file %s: %s",
                path,
                exc,
                extra=_fields("upload_local_file", local_path=str(path)),
            )
            raise LocalFileError(f"Failed to read local file {path}: {exc}") from exc

        if content_type is None:
            content_type = mimetypes.guess_type(path.name)[0] or DEFAULT_CONTENT_TYPE

        try:
            client.put_object(
                Bucket=bucket,
                Key=key,
                Body=body,
                ContentType=content_type,
            )
        except Exception as exc:
            logger.error(
                "Error while writing object %s: %s",
                key,
                exc,
                extra=_fields("upload_local_file", bucket=bucket, key=key),
            )
            raise StorageError(f"Failed to upload object {key}: {exc}") from exc

        logger.debug(
            "Uploaded %s to %s/%s",
            path,
            bucket,
            key,
            extra=_fields(
                "upload_local_file", bucket=bucket, key=key, size_bytes=len(body)
            ),
        )


def read_object(client: Any, bucket: str, key: str) -> bytes:
    """Read the full contents of object ``key``.

    Raises:
        BucketNotFoundError: If the bucket does not exist.
        ObjectNotFoundError: If the object does not exist.
        StorageError: If the read fails.
    """
    with observe_operation("read_object"):
        try:
            response = client.get_object(Bucket=bucket, Key=key)
        except Exception as exc:
            # a bare 404 is reported as a missing object
            if is_bucket_not_found(exc) and not is_object_not_found(exc):
                logger.error(
                    "Bucket %s does not exist",
                    bucket,
                    extra=_fields("read_object", bucket=bucket, key=key),
                )
                raise BucketNotFoundError(bucket) from exc
            if is_object_not_found(exc):
                logger.error(
                    "Object %s does not exist",
                    key,
                    extra=_fields("read_object", bucket=bucket, key=key),
                )
                raise ObjectNotFoundError(bucket, key) from exc
            logger.error(
                "Error while reading object %s: %s",
                key,
                exc,
                extra=_fields("read_object", bucket=bucket, key=key),
            )
            raise StorageError(f"Failed to read object {key}: {exc}") from exc

        stream = response["Body"]
        try:
            return stream.read()
        except Exception as exc:
            logger.error(
                "Error while reading object %s: %s",
                key,
                exc,
                extra=_fields("read_object", bucket=bucket, key=key),
            )
            raise StorageError(f"Failed to read object {key}: {exc}") from exc
        finally:
            stream.close()


def list_objects(client: Any, bucket: str, *, prefix: str | None = None) -> list[str]:
    """Return every object key in ``bucket``, optionally under ``prefix``."""
    with observe_operation("list_objects"):
        params: dict[str, Any] = {"Bucket": bucket}
        if prefix:
            params["Prefix"] = prefix
        keys: list[str] = []
        try:
            for page in client.get_paginator("list_objects_v2").paginate(**params):
                keys.extend(obj["Key"] for obj in page.get("Contents") or [])
        except Exception as exc:
            if is_bucket_not_found(exc):
                logger.error(
                    "Bucket %s does not exist",
                    bucket,
                    extra=_fields("list_objects", bucket=bucket),
                )
                raise BucketNotFoundError(bucket) from exc
            logger.error(
                "Error reading objects from %s: %s",
                bucket,
                exc,
                extra=_fields("list_objects", bucket=bucket),
            )
            raise StorageError(f"Failed to list objects in {bucket}: {exc}") from exc
        return keys
