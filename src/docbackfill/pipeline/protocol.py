"""Collaborator protocols for the pagination driver."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from docbackfill.adapters.storage.s3 import KeyPage
from docbackfill.models.document import Document


@runtime_checkable
class KeySource(Protocol):
    """A paged key listing. ``S3KeyLister`` is the production implementation."""

    def list_page(
        self,
        *,
        prefix: str,
        max_keys: int,
        continuation_token: str | None = None,
    ) -> KeyPage: ...


@runtime_checkable
class BatchSink(Protocol):
    """Receives one classified batch per listing page."""

    def submit_batch(self, documents: Sequence[Document]) -> None: ...
