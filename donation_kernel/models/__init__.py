"""ORM models for the donation kernel."""

from donation_kernel.models.ledger import (
    LedgerAccount,
    LedgerEntry,
    LedgerEntryStatus,
    LedgerLine,
    LedgerRefType,
    NormalSide,
)
from donation_kernel.models.partners import (
    Fundraiser,
    FundraiserReferral,
    Mitra,
    ReferralStatus,
)
from donation_kernel.models.programs import (
    Campaign,
    QurbanPackage,
    QurbanPackagePeriod,
    ZakatPeriod,
    ZakatType,
)
from donation_kernel.models.revenue_share import (
    REVENUE_SHARE_TRANSACTION_CONSTRAINT,
    RevenueShare,
    RevenueShareStatus,
)
from donation_kernel.models.setting import Setting
from donation_kernel.models.transaction import PaymentStatus, Transaction

__all__ = [
    "Campaign",
    "Fundraiser",
    "FundraiserReferral",
    "LedgerAccount",
    "LedgerEntry",
    "LedgerEntryStatus",
    "LedgerLine",
    "LedgerRefType",
    "Mitra",
    "NormalSide",
    "PaymentStatus",
    "QurbanPackage",
    "QurbanPackagePeriod",
    "REVENUE_SHARE_TRANSACTION_CONSTRAINT",
    "ReferralStatus",
    "RevenueShare",
    "RevenueShareStatus",
    "Setting",
    "Transaction",
    "ZakatPeriod",
    "ZakatType",
]
