"""
Module: donation_kernel.models.ledger
Responsibility: ORM persistence for ledger accounts, ledger entries and ledger
    lines -- the balanced-books trail kept alongside donations and disbursements.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - LedgerAccount.code is unique (uq_ledger_account_code).
    - LedgerEntry.entry_number is unique (uq_ledger_entry_number).
    - Debits == Credits per entry (checked by LedgerService BEFORE any row is
      written; is_balanced is a read-side convenience only).
    - Entries and lines are write-once (db/immutability.py).

Failure modes:
    - IntegrityError on duplicate entry_number (retried by LedgerService).
    - ImmutabilityViolationError on UPDATE/DELETE of an entry or line.
"""

from datetime import datetime
from enum import Enum
from uuid import UUID

from sqlalchemy import (
    BigInteger,
    Boolean,
    CheckConstraint,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from donation_kernel.db.base import TrackedBase, UTCDateTime, UUIDString


class NormalSide(str, Enum):
    """Normal balance side for a ledger account."""

    DEBIT = "debit"
    CREDIT = "credit"


class LedgerEntryStatus(str, Enum):
    """Status of a ledger entry.  Entries are created already posted."""

    POSTED = "posted"


class LedgerRefType(str, Enum):
    """Kind of business object a ledger entry was posted for."""

    DONATION = "donation"
    DISBURSEMENT = "disbursement"


class LedgerAccount(TrackedBase):
    """
    Chart of accounts row, addressed by its human-assigned code.

    Seeded and managed outside the kernel; posting only reads it by code.
    """

    __tablename__ = "ledger_accounts"

    __table_args__ = (
        UniqueConstraint("code", name="uq_ledger_account_code"),
        Index("idx_ledger_account_active", "is_active"),
    )

    code: Mapped[str] = mapped_column(String(50), nullable=False)

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    normal_side: Mapped[NormalSide] = mapped_column(String(10), nullable=False)

    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    lines: Mapped[list["LedgerLine"]] = relationship(
        back_populates="account",
        lazy="dynamic",
    )

    def __repr__(self) -> str:
        return f"<LedgerAccount {self.code}: {self.name}>"

    @property
    def is_debit_normal(self) -> bool:
        return self.normal_side == NormalSide.DEBIT


class LedgerEntry(TrackedBase):
    """
    Ledger entry header.

    Contract:
        Linked to the originating business object through (ref_type, ref_id).
        One business object may own several entries.  Once flushed, the entry
        and its lines never change.
    """

    __tablename__ = "ledger_entries"

    __table_args__ = (
        UniqueConstraint("entry_number", name="uq_ledger_entry_number"),
        Index("idx_ledger_entry_ref", "ref_type", "ref_id"),
        Index("idx_ledger_entry_posted_at", "posted_at"),
    )

    # JE-YYYYMM-XXXX
    entry_number: Mapped[str] = mapped_column(String(32), nullable=False)

    ref_type: Mapped[LedgerRefType] = mapped_column(String(30), nullable=False)

    ref_id: Mapped[str] = mapped_column(String(64), nullable=False)

    posted_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)

    memo: Mapped[str | None] = mapped_column(String(500), nullable=True)

    status: Mapped[LedgerEntryStatus] = mapped_column(
        String(10),
        default=LedgerEntryStatus.POSTED,
        nullable=False,
    )

    lines: Mapped[list["LedgerLine"]] = relationship(
        back_populates="entry",
        order_by="LedgerLine.line_seq",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<LedgerEntry {self.entry_number} {self.ref_type}:{self.ref_id}>"

    @property
    def total_debits(self) -> int:
        return sum(line.debit for line in self.lines)

    @property
    def total_credits(self) -> int:
        return sum(line.credit for line in self.lines)

    @property
    def is_balanced(self) -> bool:
        return self.total_debits == self.total_credits


class LedgerLine(TrackedBase):
    """
    One debit or credit line of a ledger entry.

    Exactly one of debit/credit is positive, the other zero.
    """

    __tablename__ = "ledger_lines"

    __table_args__ = (
        CheckConstraint(
            "(debit > 0 AND credit = 0) OR (credit > 0 AND debit = 0)",
            name="ck_ledger_line_one_side",
        ),
        Index("idx_ledger_line_entry", "entry_id"),
        Index("idx_ledger_line_account", "account_id"),
    )

    entry_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("ledger_entries.id"),
        nullable=False,
    )

    account_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("ledger_accounts.id"),
        nullable=False,
    )

    description: Mapped[str | None] = mapped_column(String(500), nullable=True)

    debit: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)

    credit: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)

    # Position within the entry
    line_seq: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    entry: Mapped["LedgerEntry"] = relationship(back_populates="lines")

    account: Mapped["LedgerAccount"] = relationship(back_populates="lines")

    def __repr__(self) -> str:
        return f"<LedgerLine debit={self.debit} credit={self.credit}>"
