"""
DTOs -- Immutable records handed out by services and selectors.

Responsibility:
    Frozen snapshots of persisted rows so callers never hold live ORM
    instances: revenue shares, ledger entries and lines, account balances.

Architecture position:
    Kernel > Domain -- pure data, zero I/O.
    from_model() class methods are boundary converters, only invoked from
    the service and selector layers.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, Any
from uuid import UUID

if TYPE_CHECKING:
    from donation_kernel.models.ledger import LedgerEntry as LedgerEntryModel
    from donation_kernel.models.ledger import LedgerLine as LedgerLineModel
    from donation_kernel.models.revenue_share import RevenueShare as RevenueShareModel


def _plain(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


@dataclass(frozen=True)
class RevenueShareRecord:
    """
    One persisted revenue share.

    The trailing optional fields are filled by RevenueShareSelector from the
    joined transaction, fundraiser and mitra rows; services leave them None.
    """

    id: UUID
    transaction_id: UUID
    donation_amount: int
    amil_percentage: Decimal
    amil_total_amount: int
    developer_percentage: Decimal
    developer_amount: int
    fundraiser_percentage: Decimal
    fundraiser_amount: int
    fundraiser_id: UUID | None
    mitra_percentage: Decimal
    mitra_amount: int
    mitra_id: UUID | None
    amil_net_amount: int
    program_amount: int
    status: str
    calculated_at: datetime
    distributed_at: datetime | None = None
    transaction_number: str | None = None
    product_type: str | None = None
    product_name: str | None = None
    fundraiser_code: str | None = None
    mitra_name: str | None = None

    @classmethod
    def from_model(cls, model: RevenueShareModel, **joined: Any) -> RevenueShareRecord:
        return cls(
            id=model.id,
            transaction_id=model.transaction_id,
            donation_amount=model.donation_amount,
            amil_percentage=Decimal(model.amil_percentage),
            amil_total_amount=model.amil_total_amount,
            developer_percentage=Decimal(model.developer_percentage),
            developer_amount=model.developer_amount,
            fundraiser_percentage=Decimal(model.fundraiser_percentage),
            fundraiser_amount=model.fundraiser_amount,
            fundraiser_id=model.fundraiser_id,
            mitra_percentage=Decimal(model.mitra_percentage),
            mitra_amount=model.mitra_amount,
            mitra_id=model.mitra_id,
            amil_net_amount=model.amil_net_amount,
            program_amount=model.program_amount,
            status=_plain(model.status),
            calculated_at=model.calculated_at,
            distributed_at=model.distributed_at,
            **joined,
        )


@dataclass(frozen=True)
class LedgerLineRecord:
    line_seq: int
    account_id: UUID
    account_code: str | None
    description: str | None
    debit: int
    credit: int

    @classmethod
    def from_model(cls, model: LedgerLineModel, account_code: str | None = None) -> LedgerLineRecord:
        return cls(
            line_seq=model.line_seq,
            account_id=model.account_id,
            account_code=account_code,
            description=model.description,
            debit=model.debit,
            credit=model.credit,
        )


@dataclass(frozen=True)
class LedgerEntryRecord:
    id: UUID
    entry_number: str
    ref_type: str
    ref_id: str
    posted_at: datetime
    memo: str | None
    status: str
    lines: tuple[LedgerLineRecord, ...]

    @property
    def total_debit(self) -> int:
        return sum(line.debit for line in self.lines)

    @property
    def total_credit(self) -> int:
        return sum(line.credit for line in self.lines)

    @classmethod
    def from_model(
        cls,
        model: LedgerEntryModel,
        account_codes: dict[UUID, str] | None = None,
    ) -> LedgerEntryRecord:
        codes = account_codes or {}
        return cls(
            id=model.id,
            entry_number=model.entry_number,
            ref_type=_plain(model.ref_type),
            ref_id=model.ref_id,
            posted_at=model.posted_at,
            memo=model.memo,
            status=_plain(model.status),
            lines=tuple(
                LedgerLineRecord.from_model(line, codes.get(line.account_id))
                for line in model.lines
            ),
        )


@dataclass(frozen=True)
class AccountBalance:
    """Derived balance of one ledger account; never stored."""

    account_code: str
    name: str
    normal_side: str
    total_debit: int
    total_credit: int
    balance: int
