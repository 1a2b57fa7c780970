"""Static rule tables used to classify legacy storage keys.

Keys are dispatched on their root folder (the first ``/`` segment). Common
folders map straight to a fixed document type; ``sto_zips``, ``seller`` and
``reports`` need positional parsing and are handled by the classifier.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

EXCLUDED_ROOT_FOLDERS = frozenset({"tax"})

COMMON_ROOT_FOLDERS = frozenset(
    {
        "iocc",
        "ownership_documents",
        "terms_and_condition",
        "search_insights",
    }
)

STO_ROOT = "sto_zips"
SELLER_ROOT = "seller"
REPORTS_ROOT = "reports"

DOCUMENT_TYPES: Mapping[str, str] = MappingProxyType(
    {
        "iocc": "IOCC",
        "ownership_documents": "OWNERSHIP",
        "terms_and_condition": "T_AND_C",
        "search_insights": "SEARCH_INSIGHTS",
        "sto_zips": "STO",
        "payout": "PAYOUT",
        "GST": "GST",
        "PAN": "PAN",
        "FSSAI": "FSSAI",
        "Brand_Authorization": "Brand_Authorization",
        "Brand_Trademark": "Brand_Trademark",
        "Brand_Logo": "Brand_Logo",
        "ARN_Certificate": "ARN_Certificate",
        "Digital_Signature": "Digital_Signature",
        "CIN": "CIN",
        "MSME": "MSME",
        "Cancelled_Cheque": "Cancelled_Cheque",
        "noc": "NOC",
        "serviceability": "SERVICEABILITY",
        "soa": "SOA",
        "availability": "AVAILABILITY",
        "daily-ageing": "DAILY_AGEING",
        "movement_invoice": "MOVEMENT_INVOICE",
        "sales-performance": "SALES_PERFORMANCE",
    }
)

# Seller-folder overrides applied after the document-type lookup.
DASHBOARD_TOKEN = "active_sellers"
INTERNAL_DASHBOARD_TYPE = "INTERNAL_DASHBOARD"
INVENTORY_TOKEN = "inventory"
SOH_SHEET_TYPE = "SOH_SHEET"
SOH_SHEET_FILENAME = "InventoryData.xlsx"
SOH_SHEET_SEGMENTS = 7
BULK_STO_TYPE = "BULK_STO"
BULK_SHIPMENT_PREFIX = "SELLER_BULK_SHIPMENT"
BULK_STO_SEGMENTS = 6

# Report kind -> index of the seller id segment. The two report families are
# written with different folder depth.
REPORT_SELLER_ID_INDEX: Mapping[str, int] = MappingProxyType(
    {
        "sales-performance": 2,
        "availability": 2,
        "soa": 2,
        "movement_invoice": 3,
        "daily-ageing": 3,
    }
)

# Minimum segment counts for the dedicated branches.
MIN_STO_SEGMENTS = 2
MIN_SELLER_SEGMENTS = 4
MIN_REPORT_SEGMENTS = 4


@dataclass(frozen=True, slots=True)
class ClassificationRules:
    """Read-only rule table handed to a ``KeyClassifier`` at construction."""

    excluded_root_folders: frozenset[str] = EXCLUDED_ROOT_FOLDERS
    common_root_folders: frozenset[str] = COMMON_ROOT_FOLDERS
    document_types: Mapping[str, str] = field(default_factory=lambda: DOCUMENT_TYPES)
    report_seller_id_index: Mapping[str, int] = field(
        default_factory=lambda: REPORT_SELLER_ID_INDEX
    )

    def document_type_for(self, token: str) -> str | None:
        return self.document_types.get(token)


DEFAULT_RULES = ClassificationRules()
