"""HTTP clients."""

from __future__ import annotations

from docbackfill.adapters.clients.backfill import (
    BackfillClient,
    BackfillClientError,
    BackfillClientLogger,
    BackfillDocument,
    BackfillRequest,
    BackfillSubmissionError,
    DryRunSubmitter,
)

__all__ = [
    "BackfillClient",
    "BackfillClientError",
    "BackfillClientLogger",
    "BackfillDocument",
    "BackfillRequest",
    "BackfillSubmissionError",
    "DryRunSubmitter",
]
