"""Write-side services.  Every service flushes; the caller commits."""

from donation_kernel.services.commission_sync import FundraiserCommissionSynchronizer
from donation_kernel.services.ledger_service import (
    DEFAULT_BANK_ACCOUNT_CODE,
    FUNDS_HELD_ACCOUNT_CODE,
    LedgerService,
    PostedEntry,
)
from donation_kernel.services.mitra_revenue import MitraRevenueAccumulator
from donation_kernel.services.ownership_resolver import OwnershipResolver
from donation_kernel.services.revenue_share_service import (
    CalculationResult,
    CalculationStatus,
    RevenueShareService,
)
from donation_kernel.services.settings_provider import SettingsProvider

__all__ = [
    "CalculationResult",
    "CalculationStatus",
    "DEFAULT_BANK_ACCOUNT_CODE",
    "FUNDS_HELD_ACCOUNT_CODE",
    "FundraiserCommissionSynchronizer",
    "LedgerService",
    "MitraRevenueAccumulator",
    "OwnershipResolver",
    "PostedEntry",
    "RevenueShareService",
    "SettingsProvider",
]
