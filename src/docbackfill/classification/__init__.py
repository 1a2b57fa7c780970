"""Storage key classification."""

from __future__ import annotations

from docbackfill.classification.classifier import (
    Classification,
    ClassifiedBatch,
    KeyClassifier,
    SkipReason,
    parse_int64,
)
from docbackfill.classification.logger import ClassifierLogger
from docbackfill.classification.rules import DEFAULT_RULES, ClassificationRules

__all__ = [
    "Classification",
    "ClassificationRules",
    "ClassifiedBatch",
    "ClassifierLogger",
    "DEFAULT_RULES",
    "KeyClassifier",
    "SkipReason",
    "parse_int64",
]
