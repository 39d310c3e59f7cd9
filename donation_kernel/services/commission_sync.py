"""
FundraiserCommissionSynchronizer -- Keeps referral rows and fundraiser
running totals in step with the revenue share.

Responsibility:
    Upserts the FundraiserReferral for a transaction and moves the referring
    fundraiser's counters by exactly the commission that changed.

Architecture position:
    Kernel > Services.  Called by RevenueShareService inside the same
    database transaction as the RevenueShare insert.

Invariants enforced:
    - Running totals only move through SQL-side increments
      (``column + :delta``); concurrent writers never lose an update.
    - A referral is created only when the transaction names a fundraiser
      and the commission is positive.
    - Re-syncing an existing referral applies only the difference from the
      previously recorded commission.
"""

from decimal import Decimal
from uuid import uuid4

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from donation_kernel.domain.clock import Clock, SystemClock
from donation_kernel.domain.product import PaidTransaction
from donation_kernel.domain.revenue_split import as_percentage
from donation_kernel.logging_config import get_logger
from donation_kernel.models.partners import Fundraiser, FundraiserReferral, ReferralStatus
from donation_kernel.services.base import BaseService

logger = get_logger("services.commission_sync")


class FundraiserCommissionSynchronizer(BaseService):
    def __init__(self, session: Session, clock: Clock | None = None):
        super().__init__(session)
        self._clock = clock or SystemClock()

    def sync(self, tx: PaidTransaction, percentage: Decimal, amount: int) -> None:
        """
        Record ``amount`` as the commission for ``tx``.

        Skip paths call this with (0, 0) so a previously recorded commission
        is reversed out of the fundraiser's balance.
        """
        referral = self.session.execute(
            select(FundraiserReferral).where(FundraiserReferral.transaction_id == tx.id)
        ).scalar_one_or_none()

        if referral is None:
            self._create_referral(tx, percentage, amount)
            return

        previous = referral.commission_amount or 0
        delta = amount - previous

        referral.commission_percentage = as_percentage(percentage)
        referral.commission_amount = amount
        referral.status = ReferralStatus.PAID.value
        referral.paid_at = self._clock.now()
        self.session.flush()

        if delta != 0:
            self.session.execute(
                update(Fundraiser)
                .where(Fundraiser.id == referral.fundraiser_id)
                .values(
                    total_commission_earned=Fundraiser.total_commission_earned + delta,
                    current_balance=Fundraiser.current_balance + delta,
                )
            )

        logger.info(
            "fundraiser_commission_resynced",
            extra={
                "transaction_id": str(tx.id),
                "fundraiser_id": str(referral.fundraiser_id),
                "previous_amount": previous,
                "commission_amount": amount,
                "delta": delta,
            },
        )

    def _create_referral(self, tx: PaidTransaction, percentage: Decimal, amount: int) -> None:
        if tx.referred_by_fundraiser_id is None or amount <= 0:
            return

        self.session.add(
            FundraiserReferral(
                id=uuid4(),
                fundraiser_id=tx.referred_by_fundraiser_id,
                transaction_id=tx.id,
                donation_amount=tx.total_amount,
                commission_percentage=as_percentage(percentage),
                commission_amount=amount,
                status=ReferralStatus.PAID.value,
                paid_at=self._clock.now(),
            )
        )
        self.session.flush()

        self.session.execute(
            update(Fundraiser)
            .where(Fundraiser.id == tx.referred_by_fundraiser_id)
            .values(
                total_referrals=Fundraiser.total_referrals + 1,
                total_donation_amount=Fundraiser.total_donation_amount + tx.total_amount,
                total_commission_earned=Fundraiser.total_commission_earned + amount,
                current_balance=Fundraiser.current_balance + amount,
            )
        )

        logger.info(
            "fundraiser_referral_created",
            extra={
                "transaction_id": str(tx.id),
                "fundraiser_id": str(tx.referred_by_fundraiser_id),
                "commission_amount": amount,
            },
        )
