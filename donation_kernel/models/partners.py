"""
Module: donation_kernel.models.partners
Responsibility: ORM persistence for revenue recipients -- partner
    organizations (mitra), referral agents (fundraisers) and the per-transaction
    referral commission rows.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - At most one FundraiserReferral per transaction
      (uq_fundraiser_referral_transaction).
    - Running totals are only ever changed with SQL-side increments
      (column + delta) so concurrent writers never lose an update.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID

from sqlalchemy import (
    BigInteger,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from donation_kernel.db.base import TrackedBase, UTCDateTime, UUIDString


class ReferralStatus(str, Enum):
    """Commission payout status of a referral."""

    UNPAID = "unpaid"
    PAID = "paid"


class Mitra(TrackedBase):
    """Partner organization that owns programs and earns a revenue share."""

    __tablename__ = "mitra"

    __table_args__ = (Index("idx_mitra_user", "user_id"),)

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    # Platform user who operates this mitra
    user_id: Mapped[UUID | None] = mapped_column(UUIDString(), nullable=True)

    total_donation_received: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)

    total_revenue_earned: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)

    current_balance: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)

    def __repr__(self) -> str:
        return f"<Mitra {self.name}>"


class Fundraiser(TrackedBase):
    """Individual referral agent earning commission on referred donations."""

    __tablename__ = "fundraisers"

    __table_args__ = (UniqueConstraint("code", name="uq_fundraiser_code"),)

    code: Mapped[str] = mapped_column(String(50), nullable=False)

    user_id: Mapped[UUID | None] = mapped_column(UUIDString(), nullable=True)

    total_referrals: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    total_donation_amount: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)

    total_commission_earned: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)

    current_balance: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)

    def __repr__(self) -> str:
        return f"<Fundraiser {self.code}>"


class FundraiserReferral(TrackedBase):
    """Commission actually applied to one referred transaction."""

    __tablename__ = "fundraiser_referrals"

    __table_args__ = (
        UniqueConstraint("transaction_id", name="uq_fundraiser_referral_transaction"),
        Index("idx_fundraiser_referral_fundraiser", "fundraiser_id"),
    )

    fundraiser_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("fundraisers.id"),
        nullable=False,
    )

    transaction_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("transactions.id"),
        nullable=False,
    )

    donation_amount: Mapped[int] = mapped_column(BigInteger, nullable=False)

    commission_percentage: Mapped[Decimal] = mapped_column(
        Numeric(5, 2),
        default=Decimal("0"),
        nullable=False,
    )

    commission_amount: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)

    status: Mapped[ReferralStatus] = mapped_column(
        String(10),
        default=ReferralStatus.UNPAID,
        nullable=False,
    )

    paid_at: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)
