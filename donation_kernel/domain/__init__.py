"""
Pure domain layer.

Dataclasses and functions with NO dependencies on the ORM, the database,
the wall clock (outside SystemClock) or any other I/O.
"""

from donation_kernel.domain.amil_settings import SETTINGS_CATEGORY, AmilSettings
from donation_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from donation_kernel.domain.ledger_lines import LedgerLineSpec, validate_lines
from donation_kernel.domain.ownership import NO_OWNER, Ownership
from donation_kernel.domain.product import (
    CampaignDetails,
    GenericDetails,
    PaidTransaction,
    ProductDetails,
    ProductType,
    QurbanDetails,
    ZakatDetails,
    parse_product_details,
)
from donation_kernel.domain.revenue_split import (
    EXCLUDED_PILLARS,
    RevenueSplit,
    SkipReason,
    calculate_split,
    percentage_of,
    skip_reason,
)

__all__ = [
    "AmilSettings",
    "CampaignDetails",
    "Clock",
    "DeterministicClock",
    "EXCLUDED_PILLARS",
    "GenericDetails",
    "LedgerLineSpec",
    "NO_OWNER",
    "Ownership",
    "PaidTransaction",
    "ProductDetails",
    "ProductType",
    "QurbanDetails",
    "RevenueSplit",
    "SETTINGS_CATEGORY",
    "SkipReason",
    "SystemClock",
    "ZakatDetails",
    "calculate_split",
    "parse_product_details",
    "percentage_of",
    "skip_reason",
]
