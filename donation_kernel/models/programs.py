"""
Module: donation_kernel.models.programs
Responsibility: The slice of the program catalog (campaigns, zakat types and
    periods, qurban packages and package periods) that ownership resolution
    reads.  Only the foreign keys that decide which mitra owns a program are
    mapped; every other column belongs to the CRUD side of the platform.
Architecture position: Kernel > Models.  May import from db/base.py only.
"""

from uuid import UUID

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from donation_kernel.db.base import TrackedBase, UUIDString


class Campaign(TrackedBase):
    __tablename__ = "campaigns"

    title: Mapped[str] = mapped_column(String(255), nullable=False, default="")

    # e.g. "wakaf", "fidyah", "pendidikan"
    pillar: Mapped[str | None] = mapped_column(String(50), nullable=True)

    mitra_id: Mapped[UUID | None] = mapped_column(
        UUIDString(),
        ForeignKey("mitra.id"),
        nullable=True,
    )


class ZakatType(TrackedBase):
    __tablename__ = "zakat_types"

    name: Mapped[str] = mapped_column(String(255), nullable=False, default="")

    # User who created the type; mapped to a mitra through Mitra.user_id
    created_by_user_id: Mapped[UUID | None] = mapped_column(UUIDString(), nullable=True)


class ZakatPeriod(TrackedBase):
    __tablename__ = "zakat_periods"

    name: Mapped[str] = mapped_column(String(255), nullable=False, default="")

    zakat_type_id: Mapped[UUID | None] = mapped_column(
        UUIDString(),
        ForeignKey("zakat_types.id"),
        nullable=True,
    )

    # Null for global periods
    mitra_id: Mapped[UUID | None] = mapped_column(
        UUIDString(),
        ForeignKey("mitra.id"),
        nullable=True,
    )


class QurbanPackage(TrackedBase):
    __tablename__ = "qurban_packages"

    name: Mapped[str] = mapped_column(String(255), nullable=False, default="")

    created_by_user_id: Mapped[UUID | None] = mapped_column(UUIDString(), nullable=True)


class QurbanPackagePeriod(TrackedBase):
    """A package offered in one qurban period; transactions point here."""

    __tablename__ = "qurban_package_periods"

    package_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("qurban_packages.id"),
        nullable=False,
    )
