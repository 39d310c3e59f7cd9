"""Ownership -- which mitra, if any, owns the product behind a transaction."""

from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True)
class Ownership:
    """
    Result of ownership resolution.

    is_qurban_owner_mitra is True only for qurban packages whose creator is
    a mitra; it switches the split to the qurban owner rules.
    pillar is only meaningful for campaigns.
    """

    mitra_id: UUID | None = None
    is_qurban_owner_mitra: bool = False
    pillar: str | None = None

    @property
    def has_mitra(self) -> bool:
        return self.mitra_id is not None

    @property
    def normalized_pillar(self) -> str:
        return (self.pillar or "").strip().lower()


NO_OWNER = Ownership()
