"""
RevenueShareService -- Calculates and persists the revenue split of a paid
transaction exactly once.

Responsibility:
    Orchestrates one calculation: load the transaction, serialize on its id,
    short-circuit if a share already exists, apply the skip rules, resolve
    ownership, compute the split (domain/revenue_split.py), insert it, and
    apply the fundraiser and mitra side effects.

Architecture position:
    Kernel > Services -- imperative shell around the pure split.

Invariants enforced:
    - At most one RevenueShare per transaction.  Concurrent callers are
      serialized by a PostgreSQL advisory lock on the transaction id; the
      UNIQUE(transaction_id) constraint is the final guard.  A caller that
      loses the insert race rolls back its SAVEPOINT, re-reads the winner and
      returns it without side effects.
    - Side effects are applied only after this call inserted the row, and in
      the caller's database transaction, so the share and the balance
      increments commit or roll back together.
    - Skips write no RevenueShare.  They still sync the referral commission
      to zero so a stale commission is reversed.

Failure modes:
    - TransactionNotFoundError, TransactionNotPaidError: preconditions.
    - InvalidPercentageError: qurban owner percentage outside 0..100.
    - DeductionsExceedAmilError, NegativeAmilNetError: misconfigured table.

Usage:
    with session_scope() as session:
        result = RevenueShareService(session).calculate_for_paid_transaction(tx_id)
        if result.status is CalculationStatus.SKIPPED:
            print(result.reason)
"""

import time
from dataclasses import dataclass
from enum import Enum
from uuid import UUID, uuid4

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from donation_kernel.db.locks import acquire_transaction_lock
from donation_kernel.domain.amil_settings import ZERO, AmilSettings
from donation_kernel.domain.clock import Clock, SystemClock
from donation_kernel.domain.dtos import RevenueShareRecord
from donation_kernel.domain.product import PaidTransaction
from donation_kernel.domain.revenue_split import (
    RevenueSplit,
    SkipReason,
    calculate_split,
    pre_ownership_skip_reason,
    skip_reason,
)
from donation_kernel.exceptions import TransactionNotFoundError, TransactionNotPaidError
from donation_kernel.logging_config import LogContext, get_logger
from donation_kernel.models.revenue_share import (
    REVENUE_SHARE_TRANSACTION_CONSTRAINT,
    RevenueShare,
    RevenueShareStatus,
)
from donation_kernel.models.transaction import PaymentStatus, Transaction
from donation_kernel.services.base import BaseService
from donation_kernel.services.commission_sync import FundraiserCommissionSynchronizer
from donation_kernel.services.mitra_revenue import MitraRevenueAccumulator
from donation_kernel.services.ownership_resolver import OwnershipResolver
from donation_kernel.services.settings_provider import SettingsProvider

logger = get_logger("services.revenue_share")

LOCK_NAMESPACE = "revenue_share"


class CalculationStatus(str, Enum):
    """Outcome of a calculation request."""

    CALCULATED = "calculated"
    ALREADY_EXISTS = "already_exists"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class CalculationResult:
    status: CalculationStatus
    reason: SkipReason | None = None
    revenue_share: RevenueShareRecord | None = None

    @classmethod
    def calculated(cls, record: RevenueShareRecord) -> "CalculationResult":
        return cls(status=CalculationStatus.CALCULATED, revenue_share=record)

    @classmethod
    def already_exists(cls, record: RevenueShareRecord) -> "CalculationResult":
        return cls(status=CalculationStatus.ALREADY_EXISTS, revenue_share=record)

    @classmethod
    def skipped(cls, reason: SkipReason) -> "CalculationResult":
        return cls(status=CalculationStatus.SKIPPED, reason=reason)

    @property
    def is_skipped(self) -> bool:
        return self.status is CalculationStatus.SKIPPED


def _is_transaction_conflict(exc: IntegrityError) -> bool:
    message = str(exc.orig)
    return (
        REVENUE_SHARE_TRANSACTION_CONSTRAINT in message
        or "revenue_shares.transaction_id" in message
    )


def _coerce_transaction_id(transaction_id: UUID | str) -> UUID:
    if isinstance(transaction_id, UUID):
        return transaction_id
    try:
        return UUID(str(transaction_id))
    except ValueError:
        raise TransactionNotFoundError(str(transaction_id)) from None


class RevenueShareService(BaseService):
    """
    Write side of revenue sharing.

    Collaborators default to the database-backed implementations and may be
    injected for tests.
    """

    def __init__(
        self,
        session: Session,
        settings_provider: SettingsProvider | None = None,
        clock: Clock | None = None,
        ownership_resolver: OwnershipResolver | None = None,
    ):
        super().__init__(session)
        self._clock = clock or SystemClock()
        self._settings_provider = settings_provider or SettingsProvider(session)
        self._ownership_resolver = ownership_resolver or OwnershipResolver(session)
        self._commissions = FundraiserCommissionSynchronizer(session, self._clock)
        self._mitra_revenue = MitraRevenueAccumulator(session)

    def calculate_for_paid_transaction(
        self,
        transaction_id: UUID | str,
        settings: AmilSettings | None = None,
    ) -> CalculationResult:
        """
        Calculate, persist and apply the revenue share of a paid transaction.

        Args:
            transaction_id: Transaction to share.
            settings: Percentage table; loaded from the settings table when
                omitted.

        Returns:
            CalculationResult: CALCULATED with the new record, ALREADY_EXISTS
            with the existing record, or SKIPPED with the reason.
        """
        tx_id = _coerce_transaction_id(transaction_id)
        with LogContext.bind(transaction_id=str(tx_id)):
            return self._calculate(tx_id, settings)

    def _calculate(self, tx_id: UUID, settings: AmilSettings | None) -> CalculationResult:
        t0 = time.monotonic()

        tx = self._load_transaction(tx_id)
        if tx.payment_status != PaymentStatus.PAID.value:
            logger.warning(
                "revenue_share_transaction_not_paid",
                extra={"payment_status": tx.payment_status},
            )
            raise TransactionNotPaidError(str(tx_id), tx.payment_status)

        acquire_transaction_lock(self.session, LOCK_NAMESPACE, str(tx_id))

        existing = self._find_existing(tx_id)
        if existing is not None:
            logger.info("revenue_share_already_exists", extra={"revenue_share_id": str(existing.id)})
            return CalculationResult.already_exists(existing)

        reason = pre_ownership_skip_reason(tx)
        if reason is not None:
            return self._skip(tx, reason)

        if settings is None:
            settings = self._settings_provider.load()
        settings.validate_qurban_owner()

        ownership = self._ownership_resolver.resolve(tx)

        reason = skip_reason(tx, ownership)
        if reason is not None:
            return self._skip(tx, reason)

        split = calculate_split(tx, ownership, settings)

        try:
            with self.session.begin_nested():
                row = self._insert(tx, split)
        except IntegrityError as exc:
            if not _is_transaction_conflict(exc):
                raise
            winner = self._load_share(tx_id)
            if winner is None:
                raise
            logger.warning(
                "revenue_share_insert_conflict",
                extra={"revenue_share_id": str(winner.id)},
            )
            return CalculationResult.already_exists(winner)

        self._commissions.sync(tx, split.fundraiser_percentage, split.fundraiser_amount)
        if split.mitra_id is not None:
            self._mitra_revenue.apply(split.mitra_id, split.donation_amount, split.mitra_amount)

        record = RevenueShareRecord.from_model(row)
        logger.info(
            "revenue_share_calculated",
            extra={
                "revenue_share_id": str(record.id),
                "product_type": tx.product_type,
                "donation_amount": split.donation_amount,
                "amil_total_amount": split.amil_total_amount,
                "amil_net_amount": split.amil_net_amount,
                "developer_amount": split.developer_amount,
                "fundraiser_amount": split.fundraiser_amount,
                "mitra_amount": split.mitra_amount,
                "program_amount": split.program_amount,
                "duration_ms": round((time.monotonic() - t0) * 1000, 2),
            },
        )
        return CalculationResult.calculated(record)

    def _skip(self, tx: PaidTransaction, reason: SkipReason) -> CalculationResult:
        self._commissions.sync(tx, ZERO, 0)
        logger.info("revenue_share_skipped", extra={"reason": reason.value})
        return CalculationResult.skipped(reason)

    def _load_transaction(self, tx_id: UUID) -> PaidTransaction:
        model = self.session.get(Transaction, tx_id)
        if model is None:
            logger.warning("revenue_share_transaction_not_found")
            raise TransactionNotFoundError(str(tx_id))
        return PaidTransaction.from_model(model)

    def _find_existing(self, tx_id: UUID) -> RevenueShareRecord | None:
        """Idempotency gate: the share already recorded for this transaction."""
        return self._load_share(tx_id)

    def _load_share(self, tx_id: UUID) -> RevenueShareRecord | None:
        row = self.session.execute(
            select(RevenueShare).where(RevenueShare.transaction_id == tx_id)
        ).scalar_one_or_none()
        return RevenueShareRecord.from_model(row) if row is not None else None

    def _insert(self, tx: PaidTransaction, split: RevenueSplit) -> RevenueShare:
        row = RevenueShare(
            id=uuid4(),
            transaction_id=tx.id,
            donation_amount=split.donation_amount,
            amil_percentage=split.amil_percentage,
            amil_total_amount=split.amil_total_amount,
            developer_percentage=split.developer_percentage,
            developer_amount=split.developer_amount,
            fundraiser_percentage=split.fundraiser_percentage,
            fundraiser_amount=split.fundraiser_amount,
            fundraiser_id=split.fundraiser_id,
            mitra_percentage=split.mitra_percentage,
            mitra_amount=split.mitra_amount,
            mitra_id=split.mitra_id,
            amil_net_amount=split.amil_net_amount,
            program_amount=split.program_amount,
            status=RevenueShareStatus.CALCULATED.value,
            calculated_at=self._clock.now(),
        )
        self.session.add(row)
        self.session.flush()
        return row
