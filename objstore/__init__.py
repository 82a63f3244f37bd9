"""Helpers for bucket and object management on S3-compatible storage."""

__version__ = "0.1.0"
