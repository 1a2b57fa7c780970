"""Logging for storage key classification."""

from __future__ import annotations

from typing import TYPE_CHECKING

import loguru
from loguru import logger

if TYPE_CHECKING:
    from docbackfill.classification.classifier import SkipReason


class ClassifierLogger:
    """Handles all logging for KeyClassifier with business logic separated."""

    def __init__(self, logger_instance: loguru.Logger = logger) -> None:
        """Initialize logger.

        Args:
            logger_instance: Logger instance to use (defaults to loguru.logger)
        """
        self._logger = logger_instance

    def excluded(self, key: str, root_folder: str) -> None:
        """Log a key dropped because its root folder is excluded."""
        self._logger.bind(key=key, root=root_folder).debug(
            "Skipping excluded key: {}", key
        )

    def unknown_root(self, key: str, root_folder: str) -> None:
        """Log a key whose root folder has no classification rule."""
        self._logger.bind(key=key, root=root_folder).debug(
            "No rule for root folder {!r}, skipping {}", root_folder, key
        )

    def too_few_segments(self, key: str, root_folder: str, required: int) -> None:
        """Log a key too short for its root folder's branch."""
        self._logger.bind(key=key, root=root_folder, required=required).warning(
            "{} key missing expected segments (need {}): {}",
            root_folder,
            required,
            key,
        )

    def unknown_report_kind(self, key: str, report_kind: str) -> None:
        """Log a reports key with an unrecognised report kind."""
        self._logger.bind(key=key, report_kind=report_kind).warning(
            "Unknown report kind {!r}, skipping {}", report_kind, key
        )

    def invalid_identifier(self, key: str, field_name: str, raw_value: str) -> None:
        """Log an identifier segment that is not a 64-bit integer."""
        self._logger.bind(key=key, field=field_name, value=raw_value).warning(
            "Failed to parse {} from {!r}: {}", field_name, raw_value, key
        )

    def skipped_summary(self, skipped: dict[SkipReason, int]) -> None:
        """Log per-reason skip counts for a batch of keys."""
        for reason, count in skipped.items():
            self._logger.bind(reason=reason.value, count=count).debug(
                "  {} skipped: {}", count, reason.value
            )
