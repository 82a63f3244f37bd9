"""Storage error types and bucket attributes.

This module defines the exceptions raised by the storage helpers and the
optional attributes accepted when creating a bucket.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from botocore.exceptions import ClientError

BUCKET_NOT_FOUND_CODES = frozenset({"404", "NoSuchBucket", "NotFound"})
OBJECT_NOT_FOUND_CODES = frozenset({"404", "NoSuchKey", "NotFound"})


class StorageError(RuntimeError):
    """Raised when object storage operations fail."""


class BucketNotFoundError(StorageError):
    """Raised when the target bucket does not exist."""

    def __init__(self, bucket: str) -> None:
        super().__init__(f"Bucket {bucket} does not exist")
        self.bucket = bucket


class ObjectNotFoundError(StorageError):
    """Raised when the target object does not exist."""

    def __init__(self, bucket: str, key: str) -> None:
        super().__init__(f"Object {key} does not exist in bucket {bucket}")
        self.bucket = bucket
        self.key = key


class LocalFileError(StorageError):
    """Raised when a local upload source cannot be read."""


@dataclass(frozen=True, slots=True)
class BucketAttrs:
    """Optional attributes applied when a bucket is created.

    Attributes:
        location: Region or location constraint for the bucket.
        acl: Canned ACL, e.g. ``private`` or ``public-read``.
        object_lock_enabled: Enable object lock on the new bucket.
    """

    location: str | None = None
    acl: str | None = None
    object_lock_enabled: bool = False

    def to_params(self) -> dict[str, Any]:
        """Map the attributes onto ``CreateBucket`` request parameters."""
        params: dict[str, Any] = {}
        # us-east-1 is the implicit default and S3 rejects it as a constraint
        if self.location and self.location != "us-east-1":
            params["CreateBucketConfiguration"] = {
                "LocationConstraint": self.location
            }
        if self.acl:
            params["ACL"] = self.acl
        if self.object_lock_enabled:
            params["ObjectLockEnabledForBucket"] = True
        return params


def error_code(exc: BaseException) -> str | None:
    """Return the service error code carried by a botocore ``ClientError``."""
    if not isinstance(exc, ClientError):
        return None
    code = exc.response.get("Error", {}).get("Code")
    return str(code) if code is not None else None


def is_bucket_not_found(exc: BaseException) -> bool:
    return error_code(exc) in BUCKET_NOT_FOUND_CODES


def is_object_not_found(exc: BaseException) -> bool:
    return error_code(exc) in OBJECT_NOT_FOUND_CODES
