"""
Module: donation_kernel.models.transaction
Responsibility: ORM shape of the checkout transaction that the rest of the
    platform writes.  The kernel only reads it.
Architecture position: Kernel > Models.  May import from db/base.py only.

type_specific_data holds the serialized product details written when the
transaction is created (see domain/product.py); the kernel parses it once into
a ProductDetails variant and never sniffs ad hoc keys afterwards.
"""

from datetime import datetime
from enum import Enum
from uuid import UUID

from sqlalchemy import JSON, BigInteger, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from donation_kernel.db.base import TrackedBase, UTCDateTime, UUIDString


class PaymentStatus(str, Enum):
    """Payment lifecycle of a transaction."""

    PENDING = "pending"
    PARTIAL = "partial"
    PAID = "paid"
    CANCELLED = "cancelled"


class Transaction(TrackedBase):
    """A donor checkout for one product (campaign, zakat, qurban, ...)."""

    __tablename__ = "transactions"

    __table_args__ = (
        UniqueConstraint("transaction_number", name="uq_transaction_number"),
        Index("idx_transaction_product", "product_type", "product_id"),
        Index("idx_transaction_payment_status", "payment_status"),
    )

    transaction_number: Mapped[str] = mapped_column(String(50), nullable=False)

    product_type: Mapped[str] = mapped_column(String(30), nullable=False)

    product_id: Mapped[UUID] = mapped_column(UUIDString(), nullable=False)

    product_name: Mapped[str] = mapped_column(String(255), nullable=False, default="")

    total_amount: Mapped[int] = mapped_column(BigInteger, nullable=False)

    admin_fee: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)

    donor_name: Mapped[str] = mapped_column(String(255), nullable=False, default="")

    payment_status: Mapped[str] = mapped_column(
        String(20),
        default=PaymentStatus.PENDING,
        nullable=False,
    )

    paid_at: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)

    referred_by_fundraiser_id: Mapped[UUID | None] = mapped_column(
        UUIDString(),
        nullable=True,
    )

    type_specific_data: Mapped[dict | None] = mapped_column(JSON, nullable=True)

    def __repr__(self) -> str:
        return f"<Transaction {self.transaction_number} {self.product_type} {self.payment_status}>"
