"""
MitraRevenueAccumulator -- Credits a mitra with its share of a donation.

Increments mitra running totals with SQL-side arithmetic so concurrent
calculations for different transactions of the same mitra never lose an
update.  A zero share leaves the mitra untouched, including
total_donation_received.
"""

from uuid import UUID

from sqlalchemy import update

from donation_kernel.logging_config import get_logger
from donation_kernel.models.partners import Mitra
from donation_kernel.services.base import BaseService

logger = get_logger("services.mitra_revenue")


class MitraRevenueAccumulator(BaseService):
    def apply(self, mitra_id: UUID, donation_amount: int, mitra_amount: int) -> bool:
        """
        Add ``donation_amount`` (the basis) and ``mitra_amount`` to the mitra.

        Returns:
            True if the mitra's totals were incremented.
        """
        if mitra_amount <= 0:
            return False

        self.session.execute(
            update(Mitra)
            .where(Mitra.id == mitra_id)
            .values(
                total_donation_received=Mitra.total_donation_received + donation_amount,
                total_revenue_earned=Mitra.total_revenue_earned + mitra_amount,
                current_balance=Mitra.current_balance + mitra_amount,
            )
        )

        logger.info(
            "mitra_revenue_applied",
            extra={
                "mitra_id": str(mitra_id),
                "donation_amount": donation_amount,
                "mitra_amount": mitra_amount,
            },
        )
        return True
