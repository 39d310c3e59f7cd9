"""Read-only selectors.  Selectors never write."""

from donation_kernel.selectors.ledger_selector import LedgerSelector
from donation_kernel.selectors.revenue_share_selector import (
    RevenueShareFilters,
    RevenueSharePage,
    RevenueShareSelector,
    RevenueShareSummary,
)

__all__ = [
    "LedgerSelector",
    "RevenueShareFilters",
    "RevenueSharePage",
    "RevenueShareSelector",
    "RevenueShareSummary",
]
