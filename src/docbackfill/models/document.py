"""Classified seller document records."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Document:
    """One storage key classified into a registry document.

    ``storage_key`` is always the verbatim key the record was built from.
    Usually only one of ``user_id`` / ``seller_id`` is set, depending on the
    folder the key lives under.
    """

    document_type: str
    storage_key: str
    user_id: int | None = None
    seller_id: int | None = None
