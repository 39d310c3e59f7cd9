"""
Module: donation_kernel.models.revenue_share
Responsibility: ORM persistence for the per-transaction revenue split.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - Exactly one RevenueShare per transaction: UNIQUE(transaction_id) is the
      idempotency key.  RevenueShareService catches violations of
      uq_revenue_shares_transaction and returns the winning row.
    - Write-once: the kernel never updates or deletes a RevenueShare
      (db/immutability.py).

Failure modes:
    - IntegrityError on a concurrent duplicate insert for the same transaction.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID

from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    ForeignKey,
    Index,
    Numeric,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from donation_kernel.db.base import TrackedBase, UTCDateTime, UUIDString

REVENUE_SHARE_TRANSACTION_CONSTRAINT = "uq_revenue_shares_transaction"

_NON_NEGATIVE_AMOUNTS = (
    "donation_amount",
    "amil_total_amount",
    "developer_amount",
    "fundraiser_amount",
    "mitra_amount",
    "amil_net_amount",
    "program_amount",
)


class RevenueShareStatus(str, Enum):
    """Distribution status.  The kernel only ever writes CALCULATED."""

    CALCULATED = "calculated"
    DISTRIBUTED = "distributed"


def _percentage_column(nullable: bool = False):
    return mapped_column(Numeric(5, 2), default=Decimal("0"), nullable=nullable)


def _amount_column():
    return mapped_column(BigInteger, default=0, nullable=False)


class RevenueShare(TrackedBase):
    """
    Distribution of one paid transaction's basis amount.

    donation_amount is the basis actually split: the transaction total for
    campaigns and zakat, the admin fee for qurban.
    """

    __tablename__ = "revenue_shares"

    __table_args__ = (
        UniqueConstraint("transaction_id", name=REVENUE_SHARE_TRANSACTION_CONSTRAINT),
        *(
            CheckConstraint(f"{column} >= 0", name=f"ck_revenue_share_{column}_non_negative")
            for column in _NON_NEGATIVE_AMOUNTS
        ),
        Index("idx_revenue_share_fundraiser", "fundraiser_id"),
        Index("idx_revenue_share_mitra", "mitra_id"),
        Index("idx_revenue_share_calculated_at", "calculated_at"),
    )

    transaction_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("transactions.id"),
        nullable=False,
    )

    donation_amount: Mapped[int] = mapped_column(BigInteger, nullable=False)

    amil_percentage: Mapped[Decimal] = mapped_column(Numeric(5, 2), nullable=False)
    amil_total_amount: Mapped[int] = mapped_column(BigInteger, nullable=False)

    developer_percentage: Mapped[Decimal] = _percentage_column()
    developer_amount: Mapped[int] = _amount_column()

    fundraiser_percentage: Mapped[Decimal] = _percentage_column()
    fundraiser_amount: Mapped[int] = _amount_column()
    fundraiser_id: Mapped[UUID | None] = mapped_column(
        UUIDString(),
        ForeignKey("fundraisers.id"),
        nullable=True,
    )

    mitra_percentage: Mapped[Decimal] = _percentage_column()
    mitra_amount: Mapped[int] = _amount_column()
    mitra_id: Mapped[UUID | None] = mapped_column(
        UUIDString(),
        ForeignKey("mitra.id"),
        nullable=True,
    )

    amil_net_amount: Mapped[int] = mapped_column(BigInteger, nullable=False)

    program_amount: Mapped[int] = mapped_column(BigInteger, nullable=False)

    status: Mapped[RevenueShareStatus] = mapped_column(
        String(20),
        default=RevenueShareStatus.CALCULATED,
        nullable=False,
    )

    calculated_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)

    distributed_at: Mapped[datetime | None] = mapped_column(
        UTCDateTime(),
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<RevenueShare tx={self.transaction_id} basis={self.donation_amount}>"
