"""Command line access to the storage helpers.

Usage:
  objstore create-bucket my-bucket --project-id my-project --location EU
  objstore list-buckets
  objstore upload my-bucket ./report.pdf --key reports/2024.pdf
  objstore read my-bucket reports/2024.pdf --output /tmp/report.pdf
  objstore list-objects my-bucket --prefix reports/
  objstore delete-bucket my-bucket --yes

Connection settings come from the environment (S3_ENDPOINT_URL, S3_REGION,
S3_ACCESS_KEY_ID, S3_SECRET_ACCESS_KEY, ...), see objstore.common.config.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Any, Sequence

from objstore.common.config import get_settings
from objstore.common.logging import setup_logging
from objstore.infra.storage import (
    BucketAttrs,
    StorageError,
    create_bucket,
    create_client,
    delete_bucket,
    list_buckets,
    list_objects,
    read_object,
    upload_local_file,
)

EXIT_OK = 0
EXIT_STORAGE_ERROR = 1
EXIT_USAGE = 2


def _cmd_create_bucket(client: Any, args: argparse.Namespace) -> int:
    attrs = BucketAttrs(
        location=args.location,
        acl=args.acl,
        object_lock_enabled=args.object_lock,
    )
    created = create_bucket(
        client, args.bucket, project_id=args.project_id, attrs=attrs
    )
    if created:
        print(f"Created bucket {args.bucket}", file=sys.stderr)
    else:
        print(f"Bucket {args.bucket} already exists", file=sys.stderr)
    return EXIT_OK


def _cmd_list_buckets(client: Any, args: argparse.Namespace) -> int:
    for name in list_buckets(client, project_id=args.project_id):
        print(name)
    return EXIT_OK


def _cmd_delete_bucket(client: Any, args: argparse.Namespace) -> int:
    if not args.yes:
        print(
            f"Refusing to delete bucket {args.bucket} without --yes", file=sys.stderr
        )
        return EXIT_USAGE
    delete_bucket(client, args.bucket)
    print(f"Deleted bucket {args.bucket}", file=sys.stderr)
    return EXIT_OK


def _cmd_upload(client: Any, args: argparse.Namespace) -> int:
    key = args.key or Path(args.path).name
    upload_local_file(
        client, args.bucket, args.path, key, content_type=args.content_type
    )
    print(f"Uploaded {args.path} to {args.bucket}/{key}", file=sys.stderr)
    return EXIT_OK


def _cmd_read(client: Any, args: argparse.Namespace) -> int:
    data = read_object(client, args.bucket, args.key)
    if args.output:
        Path(args.output).write_bytes(data)
    else:
        sys.stdout.buffer.write(data)
        sys.stdout.buffer.flush()
    return EXIT_OK


def _cmd_list_objects(client: Any, args: argparse.Namespace) -> int:
    for key in list_objects(client, args.bucket, prefix=args.prefix):
        print(key)
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="objstore", description="Manage buckets and objects"
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("create-bucket", help="Create a bucket if it does not exist")
    p.add_argument("bucket")
    p.add_argument("--project-id", default=None, help="Owning project (GCS)")
    p.add_argument("--location", default=None, help="Bucket location/region")
    p.add_argument("--acl", default=None, help="Canned ACL, e.g. private")
    p.add_argument(
        "--object-lock", action="store_true", help="Enable object lock on the bucket"
    )
    p.set_defaults(handler=_cmd_create_bucket)

    p = sub.add_parser("list-buckets", help="List bucket names")
    p.add_argument("--project-id", default=None, help="Owning project (GCS)")
    p.set_defaults(handler=_cmd_list_buckets)

    p = sub.add_parser("delete-bucket", help="Delete an existing bucket")
    p.add_argument("bucket")
    p.add_argument("--yes", action="store_true", help="Confirm the deletion")
    p.set_defaults(handler=_cmd_delete_bucket)

    p = sub.add_parser("upload", help="Upload a local file as an object")
    p.add_argument("bucket")
    p.add_argument("path")
    p.add_argument("--key", default=None, help="Object key (default: file name)")
    p.add_argument("--content-type", default=None)
    p.set_defaults(handler=_cmd_upload)

    p = sub.add_parser("read", help="Read an object's bytes")
    p.add_argument("bucket")
    p.add_argument("key")
    p.add_argument("--output", default=None, help="Write to file instead of stdout")
    p.set_defaults(handler=_cmd_read)

    p = sub.add_parser("list-objects", help="List object keys in a bucket")
    p.add_argument("bucket")
    p.add_argument("--prefix", default=None)
    p.set_defaults(handler=_cmd_list_objects)

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = get_settings()
        setup_logging(settings.LOG_LEVEL, settings.LOG_FORMAT)
    except ValueError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return EXIT_USAGE

    if getattr(args, "project_id", "unset") is None:
        args.project_id = settings.STORAGE_PROJECT_ID

    try:
        client = create_client(settings)
        return args.handler(client, args)
    except StorageError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return EXIT_STORAGE_ERROR


if __name__ == "__main__":
    sys.exit(main())
