from __future__ import annotations

from dataclasses import dataclass
import os

from docbackfill.adapters.clients.backfill import (
    DEFAULT_BACKFILL_HOST,
    DEFAULT_BACKFILL_PATH,
    DEFAULT_TIMEOUT_SECONDS,
)
from docbackfill.adapters.storage.s3 import MAX_KEYS_LIMIT
from docbackfill.pipeline.driver import DEFAULT_PAGE_SIZE, SubmissionFailurePolicy

_LOG_LEVELS = {"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"}


class MigrationConfigError(ValueError):
    """Missing or invalid migration configuration."""


@dataclass(frozen=True, slots=True)
class MigrationConfig:
    """Settings for one migration run, loaded at process startup."""

    bucket: str
    region: str = "us-west-2"
    prefix: str = ""
    page_size: int = DEFAULT_PAGE_SIZE
    backfill_host: str = DEFAULT_BACKFILL_HOST
    backfill_path: str = DEFAULT_BACKFILL_PATH
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    on_submit_failure: SubmissionFailurePolicy = "abort"
    log_level: str = "INFO"


def _require_env(name: str) -> str:
    value = os.environ.get(name, "").strip()
    if not value:
        raise MigrationConfigError(f"Missing required environment variable: {name}")
    return value


def _int_env(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise MigrationConfigError(f"{name} must be an integer, got {raw!r}") from e


def _float_env(name: str, default: float) -> float:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise MigrationConfigError(f"{name} must be a number, got {raw!r}") from e


def validate_page_size(page_size: int) -> int:
    if not 1 <= page_size <= MAX_KEYS_LIMIT:
        raise MigrationConfigError(
            f"Page size must be between 1 and {MAX_KEYS_LIMIT}, got {page_size}"
        )
    return page_size


def validate_failure_policy(value: str) -> SubmissionFailurePolicy:
    policy = value.strip().lower()
    if policy not in {"abort", "continue"}:
        raise MigrationConfigError(
            f"Submission failure policy must be 'abort' or 'continue', got {value!r}"
        )
    return policy  # type: ignore[return-value]


def load_migration_config_from_env() -> MigrationConfig:
    """Load migration settings from environment variables.

    Required: DOCBACKFILL_S3_BUCKET. Everything else has a default.

    Raises:
        MigrationConfigError: If a variable is missing or invalid.
    """
    bucket = _require_env("DOCBACKFILL_S3_BUCKET")
    region = os.environ.get("DOCBACKFILL_AWS_REGION", "us-west-2").strip()
    prefix = os.environ.get("DOCBACKFILL_PREFIX", "")

    page_size = validate_page_size(_int_env("DOCBACKFILL_PAGE_SIZE", DEFAULT_PAGE_SIZE))

    timeout_seconds = _float_env(
        "DOCBACKFILL_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS
    )
    if timeout_seconds <= 0:
        raise MigrationConfigError("DOCBACKFILL_TIMEOUT_SECONDS must be > 0")

    backfill_host = (
        os.environ.get("DOCBACKFILL_BACKFILL_HOST", "").strip()
        or DEFAULT_BACKFILL_HOST
    )
    backfill_path = (
        os.environ.get("DOCBACKFILL_BACKFILL_PATH", "").strip()
        or DEFAULT_BACKFILL_PATH
    )

    on_submit_failure = validate_failure_policy(
        os.environ.get("DOCBACKFILL_ON_SUBMIT_FAILURE", "").strip() or "abort"
    )

    log_level = os.environ.get("DOCBACKFILL_LOG_LEVEL", "INFO").strip().upper()
    if log_level not in _LOG_LEVELS:
        raise MigrationConfigError(
            f"DOCBACKFILL_LOG_LEVEL must be one of: {', '.join(sorted(_LOG_LEVELS))}"
        )

    return MigrationConfig(
        bucket=bucket,
        region=region or "us-west-2",
        prefix=prefix,
        page_size=page_size,
        backfill_host=backfill_host,
        backfill_path=backfill_path,
        timeout_seconds=timeout_seconds,
        on_submit_failure=on_submit_failure,
        log_level=log_level,
    )
