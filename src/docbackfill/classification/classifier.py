"""Classify legacy storage keys into seller registry documents.

A key is split on ``/`` and dispatched on its root folder:

- excluded roots (``tax``) are always skipped
- common roots map to a fixed document type with no identifiers
- ``sto_zips``, ``seller`` and ``reports`` keys carry a seller or user id at a
  fixed segment index and are parsed positionally
- anything else is skipped

Classification never raises for malformed keys. A key that cannot be
classified yields a skip with a reason and is logged.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
import re

from docbackfill.classification import rules as r
from docbackfill.classification.logger import ClassifierLogger
from docbackfill.classification.rules import DEFAULT_RULES, ClassificationRules
from docbackfill.models.document import Document

_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1
_DECIMAL_RE = re.compile(r"[+-]?[0-9]+")


class SkipReason(Enum):
    """Reasons a storage key produced no document."""

    EXCLUDED_ROOT = "excluded_root"
    UNKNOWN_ROOT = "unknown_root"
    UNKNOWN_REPORT_KIND = "unknown_report_kind"
    TOO_FEW_SEGMENTS = "too_few_segments"
    INVALID_IDENTIFIER = "invalid_identifier"


@dataclass(frozen=True, slots=True)
class Classification:
    """Outcome of classifying one key: a document or a skip reason."""

    key: str
    document: Document | None = None
    skip_reason: SkipReason | None = None

    @property
    def skipped(self) -> bool:
        return self.document is None


@dataclass
class ClassifiedBatch:
    """Documents and skip counts for a sequence of keys, in input order."""

    documents: list[Document] = field(default_factory=list)
    skipped: dict[SkipReason, int] = field(default_factory=dict)

    @property
    def skipped_count(self) -> int:
        return sum(self.skipped.values())


def parse_int64(value: str) -> int | None:
    """Parse a base-10 signed 64-bit integer, or return None."""
    if not _DECIMAL_RE.fullmatch(value):
        return None
    number = int(value)
    if number < _INT64_MIN or number > _INT64_MAX:
        return None
    return number


class KeyClassifier:
    """Maps storage keys to ``Document`` records using a fixed rule table."""

    def __init__(
        self,
        rules: ClassificationRules = DEFAULT_RULES,
        *,
        classifier_logger: ClassifierLogger | None = None,
    ) -> None:
        self._rules = rules
        self._logger = classifier_logger or ClassifierLogger()

    def classify(self, key: str) -> Classification:
        """Classify a single storage key."""
        parts = key.split("/")
        root_folder = parts[0]

        if root_folder in self._rules.excluded_root_folders:
            self._logger.excluded(key, root_folder)
            return Classification(key=key, skip_reason=SkipReason.EXCLUDED_ROOT)

        # Common folders win over any dedicated branch with the same name.
        if root_folder in self._rules.common_root_folders:
            document_type = self._rules.document_type_for(root_folder) or root_folder
            return Classification(
                key=key,
                document=Document(document_type=document_type, storage_key=key),
            )

        if root_folder == r.STO_ROOT:
            return self._classify_sto(key, parts)
        if root_folder == r.SELLER_ROOT:
            return self._classify_seller(key, parts)
        if root_folder == r.REPORTS_ROOT:
            return self._classify_report(key, parts)

        self._logger.unknown_root(key, root_folder)
        return Classification(key=key, skip_reason=SkipReason.UNKNOWN_ROOT)

    def classify_many(self, keys: Iterable[str]) -> ClassifiedBatch:
        """Classify keys in order, dropping skips and counting them by reason."""
        batch = ClassifiedBatch()
        for key in keys:
            result = self.classify(key)
            if result.document is not None:
                batch.documents.append(result.document)
            elif result.skip_reason is not None:
                batch.skipped[result.skip_reason] = (
                    batch.skipped.get(result.skip_reason, 0) + 1
                )
        self._logger.skipped_summary(batch.skipped)
        return batch

    # Branches ------------------------------------------------------------

    def _classify_sto(self, key: str, parts: list[str]) -> Classification:
        if len(parts) < r.MIN_STO_SEGMENTS:
            self._logger.too_few_segments(key, r.STO_ROOT, r.MIN_STO_SEGMENTS)
            return Classification(key=key, skip_reason=SkipReason.TOO_FEW_SEGMENTS)

        document_type = self._rules.document_type_for(r.STO_ROOT) or r.STO_ROOT
        return self._with_identifier(
            key, document_type, seller_id_raw=parts[1], user_id_raw=None
        )

    def _classify_seller(self, key: str, parts: list[str]) -> Classification:
        # "seller/42/x/" is a folder marker with an empty type segment.
        if len(parts) < r.MIN_SELLER_SEGMENTS or not parts[3]:
            self._logger.too_few_segments(key, r.SELLER_ROOT, r.MIN_SELLER_SEGMENTS)
            return Classification(key=key, skip_reason=SkipReason.TOO_FEW_SEGMENTS)

        token = parts[3]
        document_type = self._rules.document_type_for(token) or token
        if document_type == r.DASHBOARD_TOKEN:
            document_type = r.INTERNAL_DASHBOARD_TYPE
        elif document_type == r.INVENTORY_TOKEN:
            document_type = _refine_inventory(parts)

        return self._with_identifier(
            key, document_type, seller_id_raw=None, user_id_raw=parts[1]
        )

    def _classify_report(self, key: str, parts: list[str]) -> Classification:
        if len(parts) < r.MIN_REPORT_SEGMENTS:
            self._logger.too_few_segments(key, r.REPORTS_ROOT, r.MIN_REPORT_SEGMENTS)
            return Classification(key=key, skip_reason=SkipReason.TOO_FEW_SEGMENTS)

        report_kind = parts[1]
        seller_id_index = self._rules.report_seller_id_index.get(report_kind)
        document_type = self._rules.document_type_for(report_kind)
        if seller_id_index is None or document_type is None:
            self._logger.unknown_report_kind(key, report_kind)
            return Classification(key=key, skip_reason=SkipReason.UNKNOWN_REPORT_KIND)

        return self._with_identifier(
            key,
            document_type,
            seller_id_raw=parts[seller_id_index],
            user_id_raw=None,
        )

    def _with_identifier(
        self,
        key: str,
        document_type: str,
        *,
        seller_id_raw: str | None,
        user_id_raw: str | None,
    ) -> Classification:
        user_id: int | None = None
        seller_id: int | None = None

        if user_id_raw is not None:
            user_id = parse_int64(user_id_raw)
            if user_id is None:
                self._logger.invalid_identifier(key, "user_id", user_id_raw)
                return Classification(
                    key=key, skip_reason=SkipReason.INVALID_IDENTIFIER
                )
        if seller_id_raw is not None:
            seller_id = parse_int64(seller_id_raw)
            if seller_id is None:
                self._logger.invalid_identifier(key, "seller_id", seller_id_raw)
                return Classification(
                    key=key, skip_reason=SkipReason.INVALID_IDENTIFIER
                )

        return Classification(
            key=key,
            document=Document(
                document_type=document_type,
                storage_key=key,
                user_id=user_id,
                seller_id=seller_id,
            ),
        )


def _refine_inventory(parts: list[str]) -> str:
    """Refine the seller inventory type from the trailing path shape."""
    if len(parts) == r.SOH_SHEET_SEGMENTS and parts[6] == r.SOH_SHEET_FILENAME:
        return r.SOH_SHEET_TYPE
    if len(parts) == r.BULK_STO_SEGMENTS and parts[5].startswith(
        r.BULK_SHIPMENT_PREFIX
    ):
        return r.BULK_STO_TYPE
    return r.INVENTORY_TOKEN
