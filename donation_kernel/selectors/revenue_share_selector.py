"""
Module: donation_kernel.selectors.revenue_share_selector
Responsibility: Read side of revenue sharing: single records, filtered and
    paginated lists, and aggregate totals for reporting.
Architecture position: Kernel > Selectors.

Invariants enforced:
    - Only shares of paid transactions are listed or summed.
    - page >= 1 and 1 <= limit <= 100, whatever the caller passes.
"""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from sqlalchemy import func, select

from donation_kernel.domain.dtos import RevenueShareRecord
from donation_kernel.models.partners import Fundraiser, Mitra
from donation_kernel.models.revenue_share import RevenueShare
from donation_kernel.models.transaction import PaymentStatus, Transaction
from donation_kernel.selectors.base import BaseSelector

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


@dataclass(frozen=True)
class RevenueShareFilters:
    transaction_id: UUID | None = None
    fundraiser_id: UUID | None = None
    mitra_id: UUID | None = None
    status: str | None = None
    product_type: str | None = None
    date_from: datetime | None = None
    date_to: datetime | None = None


@dataclass(frozen=True)
class RevenueSharePage:
    items: tuple[RevenueShareRecord, ...]
    page: int
    limit: int
    total: int

    @property
    def total_pages(self) -> int:
        return max(1, -(-self.total // self.limit))


@dataclass(frozen=True)
class RevenueShareSummary:
    total_records: int
    total_donation_amount: int
    total_amil_amount: int
    total_amil_net: int
    total_developer: int
    total_fundraiser: int
    total_mitra: int
    total_program: int


def normalize_paging(page: int | None, limit: int | None) -> tuple[int, int]:
    page = max(page or 1, 1)
    limit = min(max(limit or DEFAULT_PAGE_SIZE, 1), MAX_PAGE_SIZE)
    return page, limit


class RevenueShareSelector(BaseSelector):
    """Selector for persisted revenue shares."""

    def get(self, revenue_share_id: UUID) -> RevenueShareRecord | None:
        row = self.session.execute(
            self._joined_query().where(RevenueShare.id == revenue_share_id)
        ).first()
        return self._to_record(row) if row is not None else None

    def get_by_transaction(self, transaction_id: UUID) -> RevenueShareRecord | None:
        row = self.session.execute(
            self._joined_query().where(RevenueShare.transaction_id == transaction_id)
        ).first()
        return self._to_record(row) if row is not None else None

    def list(
        self,
        filters: RevenueShareFilters | None = None,
        page: int = 1,
        limit: int = DEFAULT_PAGE_SIZE,
    ) -> RevenueSharePage:
        """Newest first: by transaction paid_at, then calculated_at."""
        page, limit = normalize_paging(page, limit)
        conditions = self._conditions(filters or RevenueShareFilters())

        rows = self.session.execute(
            self._joined_query()
            .where(*conditions)
            .order_by(Transaction.paid_at.desc(), RevenueShare.calculated_at.desc())
            .limit(limit)
            .offset((page - 1) * limit)
        ).all()

        total = self.session.execute(
            select(func.count(RevenueShare.id))
            .select_from(RevenueShare)
            .join(Transaction, RevenueShare.transaction_id == Transaction.id)
            .where(*conditions)
        ).scalar_one()

        return RevenueSharePage(
            items=tuple(self._to_record(row) for row in rows),
            page=page,
            limit=limit,
            total=int(total or 0),
        )

    def summary(self, filters: RevenueShareFilters | None = None) -> RevenueShareSummary:
        conditions = self._conditions(filters or RevenueShareFilters())

        def total(column):
            return func.coalesce(func.sum(column), 0)

        row = self.session.execute(
            select(
                func.count(RevenueShare.id),
                total(RevenueShare.donation_amount),
                total(RevenueShare.amil_total_amount),
                total(RevenueShare.amil_net_amount),
                total(RevenueShare.developer_amount),
                total(RevenueShare.fundraiser_amount),
                total(RevenueShare.mitra_amount),
                total(RevenueShare.program_amount),
            )
            .select_from(RevenueShare)
            .join(Transaction, RevenueShare.transaction_id == Transaction.id)
            .where(*conditions)
        ).one()

        return RevenueShareSummary(*(int(value or 0) for value in row))

    def _joined_query(self):
        return (
            select(
                RevenueShare,
                Transaction.transaction_number,
                Transaction.product_type,
                Transaction.product_name,
                Fundraiser.code,
                Mitra.name,
            )
            .join(Transaction, RevenueShare.transaction_id == Transaction.id)
            .outerjoin(Fundraiser, RevenueShare.fundraiser_id == Fundraiser.id)
            .outerjoin(Mitra, RevenueShare.mitra_id == Mitra.id)
        )

    @staticmethod
    def _to_record(row) -> RevenueShareRecord:
        share, transaction_number, product_type, product_name, fundraiser_code, mitra_name = row
        return RevenueShareRecord.from_model(
            share,
            transaction_number=transaction_number,
            product_type=product_type,
            product_name=product_name,
            fundraiser_code=fundraiser_code,
            mitra_name=mitra_name,
        )

    @staticmethod
    def _conditions(filters: RevenueShareFilters):
        conditions = [Transaction.payment_status == PaymentStatus.PAID.value]
        if filters.transaction_id is not None:
            conditions.append(RevenueShare.transaction_id == filters.transaction_id)
        if filters.fundraiser_id is not None:
            conditions.append(RevenueShare.fundraiser_id == filters.fundraiser_id)
        if filters.mitra_id is not None:
            conditions.append(RevenueShare.mitra_id == filters.mitra_id)
        if filters.status:
            conditions.append(RevenueShare.status == filters.status)
        if filters.product_type:
            conditions.append(Transaction.product_type == filters.product_type)
        if filters.date_from is not None:
            conditions.append(RevenueShare.calculated_at >= filters.date_from)
        if filters.date_to is not None:
            conditions.append(RevenueShare.calculated_at <= filters.date_to)
        return conditions
