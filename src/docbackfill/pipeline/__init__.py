"""Paginated listing -> classification -> backfill pipeline."""

from __future__ import annotations

from docbackfill.pipeline.driver import (
    DEFAULT_PAGE_SIZE,
    DriverLogger,
    FailedPage,
    MigrationAbortedError,
    PaginationDriver,
    RunState,
    RunSummary,
    SubmissionFailurePolicy,
)
from docbackfill.pipeline.protocol import BatchSink, KeySource

__all__ = [
    "DEFAULT_PAGE_SIZE",
    "BatchSink",
    "DriverLogger",
    "FailedPage",
    "KeySource",
    "MigrationAbortedError",
    "PaginationDriver",
    "RunState",
    "RunSummary",
    "SubmissionFailurePolicy",
]
