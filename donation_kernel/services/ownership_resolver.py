"""
OwnershipResolver -- Finds the mitra that owns a transaction's product.

Responsibility:
    Follows the foreign keys from a transaction's product to the partner
    organization (mitra) that owns it, and reports the campaign pillar used
    by the wakaf/fidyah exclusion.

Architecture position:
    Kernel > Services.  Read-only lookups over the program catalog tables.

Resolution chains:
    campaign -- campaigns.mitra_id.  Pillar from the transaction payload,
                else campaigns.pillar.
    zakat    -- zakat_periods.mitra_id.  Otherwise the zakat type (payload,
                else zakat_periods.zakat_type_id, else a legacy product id
                that names a zakat type directly) and its creator user,
                mapped to a mitra through mitra.user_id.
    qurban   -- qurban_package_periods -> qurban_packages.created_by_user_id
                -> mitra.user_id.  A match makes it a qurban owner mitra.
    other    -- no owner.

Failure modes:
    None.  Missing rows anywhere along a chain mean "no owner".
"""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from donation_kernel.domain.ownership import NO_OWNER, Ownership
from donation_kernel.domain.product import CampaignDetails, PaidTransaction, ZakatDetails
from donation_kernel.logging_config import get_logger
from donation_kernel.models.partners import Mitra
from donation_kernel.models.programs import (
    Campaign,
    QurbanPackage,
    QurbanPackagePeriod,
    ZakatPeriod,
    ZakatType,
)

logger = get_logger("services.ownership_resolver")


def _as_uuid(value) -> UUID | None:
    if value is None or isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except ValueError:
        return None


class OwnershipResolver:
    """Resolves product ownership for paid transactions."""

    def __init__(self, session: Session):
        self.session = session

    def resolve(self, tx: PaidTransaction) -> Ownership:
        if tx.is_campaign:
            ownership = self._resolve_campaign(tx)
        elif tx.is_zakat:
            ownership = self._resolve_zakat(tx)
        elif tx.is_qurban:
            ownership = self._resolve_qurban(tx)
        else:
            ownership = NO_OWNER

        logger.debug(
            "ownership_resolved",
            extra={
                "product_type": tx.product_type,
                "product_id": str(tx.product_id),
                "mitra_id": str(ownership.mitra_id) if ownership.mitra_id else None,
                "is_qurban_owner_mitra": ownership.is_qurban_owner_mitra,
                "pillar": ownership.pillar,
            },
        )
        return ownership

    def _resolve_campaign(self, tx: PaidTransaction) -> Ownership:
        payload_pillar = tx.details.pillar if isinstance(tx.details, CampaignDetails) else None

        row = self.session.execute(
            select(Campaign.mitra_id, Campaign.pillar).where(Campaign.id == tx.product_id)
        ).first()
        if row is None:
            return Ownership(pillar=payload_pillar)

        return Ownership(mitra_id=row.mitra_id, pillar=payload_pillar or row.pillar)

    def _resolve_zakat(self, tx: PaidTransaction) -> Ownership:
        payload_type_id = None
        if isinstance(tx.details, ZakatDetails):
            payload_type_id = _as_uuid(tx.details.zakat_type_id)

        period = self.session.execute(
            select(ZakatPeriod.mitra_id, ZakatPeriod.zakat_type_id).where(
                ZakatPeriod.id == tx.product_id
            )
        ).first()

        if period is not None and period.mitra_id is not None:
            return Ownership(mitra_id=period.mitra_id)

        zakat_type_id = payload_type_id
        if zakat_type_id is None and period is not None:
            zakat_type_id = period.zakat_type_id
        if zakat_type_id is None:
            zakat_type_id = self.session.execute(
                select(ZakatType.id).where(ZakatType.id == tx.product_id)
            ).scalar_one_or_none()
        if zakat_type_id is None:
            return NO_OWNER

        creator = self.session.execute(
            select(ZakatType.created_by_user_id).where(ZakatType.id == zakat_type_id)
        ).scalar_one_or_none()
        return Ownership(mitra_id=self._mitra_for_user(creator))

    def _resolve_qurban(self, tx: PaidTransaction) -> Ownership:
        creator = self.session.execute(
            select(QurbanPackage.created_by_user_id)
            .select_from(QurbanPackagePeriod)
            .outerjoin(QurbanPackage, QurbanPackagePeriod.package_id == QurbanPackage.id)
            .where(QurbanPackagePeriod.id == tx.product_id)
            .limit(1)
        ).scalar_one_or_none()

        mitra_id = self._mitra_for_user(creator)
        if mitra_id is None:
            return NO_OWNER
        return Ownership(mitra_id=mitra_id, is_qurban_owner_mitra=True)

    def _mitra_for_user(self, user_id: UUID | None) -> UUID | None:
        if user_id is None:
            return None
        return self.session.execute(
            select(Mitra.id).where(Mitra.user_id == user_id).limit(1)
        ).scalar_one_or_none()
