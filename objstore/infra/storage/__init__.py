"""Object storage helpers.

This module provides thin wrappers over an S3-compatible client for bucket
and object management, working with AWS S3, MinIO and the GCS XML API.
"""

from .client import (
    BucketAttrs,
    BucketNotFoundError,
    LocalFileError,
    ObjectNotFoundError,
    StorageError,
)
from .operations import (
    create_bucket,
    delete_bucket,
    list_buckets,
    list_objects,
    read_object,
    upload_local_file,
)
from .s3_client import create_client

__all__ = [
    "BucketAttrs",
    "BucketNotFoundError",
    "LocalFileError",
    "ObjectNotFoundError",
    "StorageError",
    "create_bucket",
    "create_client",
    "delete_bucket",
    "list_buckets",
    "list_objects",
    "read_object",
    "upload_local_file",
]
