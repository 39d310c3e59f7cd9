"""
Product -- Typed product details and the PaidTransaction DTO.

Responsibility:
    Replaces ad hoc sniffing of the ``type_specific_data`` JSON blob with a
    tagged union of product details, parsed exactly once when the
    PaidTransaction DTO is built from the ORM row.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    ``PaidTransaction.from_model()`` is a boundary converter invoked only from
    the service layer.

Recognized payload keys:
    campaign -- ``pillar`` (string)
    zakat    -- ``zakat_type_id`` (string; ``zakatTypeId`` accepted for rows
                written by older clients)
    qurban   -- ``is_admin_fee_entry`` (truthy marks the synthetic admin-fee
                row of a qurban order)

Anything else in the payload is kept verbatim on GenericDetails only for
product types the kernel does not split specially.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Union
from uuid import UUID

if TYPE_CHECKING:
    from donation_kernel.models.transaction import Transaction as TransactionModel


class ProductType(str, Enum):
    """Product types with dedicated split rules.  Others are generic donations."""

    CAMPAIGN = "campaign"
    ZAKAT = "zakat"
    QURBAN = "qurban"


@dataclass(frozen=True)
class CampaignDetails:
    pillar: str | None = None

    def to_payload(self) -> dict[str, Any]:
        return {"pillar": self.pillar} if self.pillar is not None else {}


@dataclass(frozen=True)
class ZakatDetails:
    zakat_type_id: str | None = None

    def to_payload(self) -> dict[str, Any]:
        if self.zakat_type_id is None:
            return {}
        return {"zakat_type_id": self.zakat_type_id}


@dataclass(frozen=True)
class QurbanDetails:
    is_admin_fee_entry: bool = False

    def to_payload(self) -> dict[str, Any]:
        return {"is_admin_fee_entry": True} if self.is_admin_fee_entry else {}


@dataclass(frozen=True)
class GenericDetails:
    product_type: str
    payload: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))

    def to_payload(self) -> dict[str, Any]:
        return dict(self.payload)


ProductDetails = Union[CampaignDetails, ZakatDetails, QurbanDetails, GenericDetails]


def _enum_value(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


def _string_or_none(value: Any) -> str | None:
    return value if isinstance(value, str) else None


def parse_product_details(product_type: str, payload: Mapping[str, Any] | None) -> ProductDetails:
    """Parse a raw ``type_specific_data`` payload into its ProductDetails variant."""
    data = payload or {}

    if product_type == ProductType.CAMPAIGN.value:
        return CampaignDetails(pillar=_string_or_none(data.get("pillar")))

    if product_type == ProductType.ZAKAT.value:
        zakat_type_id = _string_or_none(data.get("zakat_type_id"))
        if zakat_type_id is None:
            zakat_type_id = _string_or_none(data.get("zakatTypeId"))
        return ZakatDetails(zakat_type_id=zakat_type_id)

    if product_type == ProductType.QURBAN.value:
        return QurbanDetails(is_admin_fee_entry=bool(data.get("is_admin_fee_entry")))

    return GenericDetails(product_type=product_type, payload=MappingProxyType(dict(data)))


@dataclass(frozen=True)
class PaidTransaction:
    """
    Immutable snapshot of the transaction facts the split depends on.

    Built once per calculation; the pure split functions never see the ORM row.
    """

    id: UUID
    payment_status: str
    product_type: str
    product_id: UUID
    total_amount: int
    admin_fee: int
    referred_by_fundraiser_id: UUID | None
    details: ProductDetails

    @property
    def is_qurban(self) -> bool:
        return self.product_type == ProductType.QURBAN.value

    @property
    def is_zakat(self) -> bool:
        return self.product_type == ProductType.ZAKAT.value

    @property
    def is_campaign(self) -> bool:
        return self.product_type == ProductType.CAMPAIGN.value

    @property
    def is_admin_fee_entry(self) -> bool:
        return isinstance(self.details, QurbanDetails) and self.details.is_admin_fee_entry

    @classmethod
    def from_model(cls, model: TransactionModel) -> PaidTransaction:
        return cls(
            id=model.id,
            payment_status=_enum_value(model.payment_status),
            product_type=_enum_value(model.product_type),
            product_id=model.product_id,
            total_amount=int(model.total_amount or 0),
            admin_fee=int(model.admin_fee or 0),
            referred_by_fundraiser_id=model.referred_by_fundraiser_id,
            details=parse_product_details(
                _enum_value(model.product_type), model.type_specific_data
            ),
        )
