"""Object storage adapters."""

from __future__ import annotations

from docbackfill.adapters.storage.s3 import (
    KeyPage,
    S3Config,
    S3KeyLister,
    S3ListingError,
    S3StorageError,
)

__all__ = [
    "KeyPage",
    "S3Config",
    "S3KeyLister",
    "S3ListingError",
    "S3StorageError",
]
