"""
Module: donation_kernel.models.setting
Responsibility: Key/value platform settings grouped by category.  The kernel
    reads the "amil" category as its percentage table.
Architecture position: Kernel > Models.  May import from db/base.py only.
"""

from sqlalchemy import String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from donation_kernel.db.base import TrackedBase


class Setting(TrackedBase):
    __tablename__ = "settings"

    __table_args__ = (UniqueConstraint("category", "key", name="uq_setting_category_key"),)

    category: Mapped[str] = mapped_column(String(50), nullable=False)

    key: Mapped[str] = mapped_column(String(100), nullable=False)

    # Stored as text; numeric settings are decimal strings such as "12.5"
    value: Mapped[str | None] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<Setting {self.category}.{self.key}={self.value!r}>"
