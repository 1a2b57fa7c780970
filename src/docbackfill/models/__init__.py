"""Domain models."""

from __future__ import annotations

from docbackfill.models.document import Document

__all__ = ["Document"]
