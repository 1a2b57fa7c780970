"""S3 key listing adapter (boto3)."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from loguru import logger

# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class S3StorageError(Exception):
    """Base error for S3 storage operations."""


class S3ListingError(S3StorageError):
    """Failed to list a page of keys from S3."""


# ---------------------------------------------------------------------------
# Data types
# ---------------------------------------------------------------------------

MAX_KEYS_LIMIT = 1000


@dataclass(frozen=True, slots=True)
class S3Config:
    """Bucket and region to list keys from."""

    bucket: str
    region: str = "us-west-2"


@dataclass(frozen=True, slots=True)
class KeyPage:
    """One page of a paged key listing."""

    keys: list[str] = field(default_factory=list)
    is_truncated: bool = False
    next_continuation_token: str | None = None


# ---------------------------------------------------------------------------
# Listing
# ---------------------------------------------------------------------------


def _build_client(config: S3Config) -> Any:
    """Create a boto3 S3 client for the configured region."""
    return boto3.client("s3", region_name=config.region)


class S3KeyLister:
    """Lists bucket keys one page at a time via ``list_objects_v2``."""

    def __init__(self, config: S3Config, *, client: Any | None = None) -> None:
        self._config = config
        self._client = client

    @property
    def bucket(self) -> str:
        return self._config.bucket

    def _get_client(self) -> Any:
        if self._client is None:
            self._client = _build_client(self._config)
        return self._client

    def list_page(
        self,
        *,
        prefix: str,
        max_keys: int,
        continuation_token: str | None = None,
    ) -> KeyPage:
        """Fetch one page of keys under ``prefix``.

        Args:
            prefix: Key prefix to list (may be empty).
            max_keys: Upper bound on keys returned (1-1000).
            continuation_token: Cursor from the previous page, if any.

        Returns:
            KeyPage with keys in listing order and the next cursor.

        Raises:
            S3ListingError: If the request fails or the response is unusable.
        """
        if not 1 <= max_keys <= MAX_KEYS_LIMIT:
            raise ValueError(f"max_keys must be between 1 and {MAX_KEYS_LIMIT}")

        list_kwargs: dict[str, object] = {
            "Bucket": self.bucket,
            "Prefix": prefix,
            "MaxKeys": max_keys,
        }
        if continuation_token:
            list_kwargs["ContinuationToken"] = continuation_token

        try:
            response = self._get_client().list_objects_v2(**list_kwargs)
        except (BotoCoreError, ClientError) as exc:
            msg = f"Failed to list {prefix!r} in {self.bucket}: {exc}"
            raise S3ListingError(msg) from exc

        keys = [obj["Key"] for obj in response.get("Contents", [])]
        is_truncated = bool(response.get("IsTruncated", False))
        next_token = response.get("NextContinuationToken")
        if is_truncated and not next_token:
            raise S3ListingError(
                f"Listing of {prefix!r} in {self.bucket} is truncated "
                "but returned no continuation token"
            )

        logger.bind(bucket=self.bucket, prefix=prefix, count=len(keys)).debug(
            "Listed {} keys from S3", len(keys)
        )
        return KeyPage(
            keys=keys,
            is_truncated=is_truncated,
            next_continuation_token=next_token if is_truncated else None,
        )
