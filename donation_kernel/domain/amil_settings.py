"""
AmilSettings -- Percentage table for the revenue split.

Responsibility:
    Immutable value object holding every percentage the split needs, built
    once per invocation from the "amil" settings category (or a YAML file)
    and passed explicitly into the pure calculation.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Invariants enforced:
    - Every field is a finite Decimal.  Missing, empty, unparseable or
      non-finite raw values fall back to the documented default.
    - The qurban owner percentage must be within 0..100 before it is used
      (validate_qurban_owner).

Failure modes:
    - InvalidPercentageError from validate_qurban_owner().
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, fields
from decimal import Decimal, InvalidOperation
from typing import Any

from donation_kernel.exceptions import InvalidPercentageError

SETTINGS_CATEGORY = "amil"

ZERO = Decimal("0")
HUNDRED = Decimal("100")

# Settings key -> AmilSettings field
SETTING_KEYS: dict[str, str] = {
    "amil_zakat_percentage": "zakat_percentage",
    "amil_donation_percentage": "donation_percentage",
    "amil_fundraiser_percentage": "fundraiser_percentage",
    "amil_mitra_percentage": "mitra_zakat_percentage",
    "amil_mitra_donation_percentage": "mitra_donation_percentage",
    "amil_developer_percentage": "developer_percentage",
    "amil_qurban_owner_percentage": "qurban_owner_percentage",
}

QURBAN_OWNER_KEY = "amil_qurban_owner_percentage"


def parse_percentage(raw: Any, fallback: Decimal) -> Decimal:
    """
    Parse a raw setting value into a Decimal percentage.

    Floats are converted through ``str`` so 12.5 stays exactly 12.5.
    """
    if raw is None or isinstance(raw, bool):
        return fallback
    text = str(raw).strip()
    if not text:
        return fallback
    try:
        value = Decimal(text)
    except InvalidOperation:
        return fallback
    if not value.is_finite():
        return fallback
    return value


@dataclass(frozen=True)
class AmilSettings:
    """
    Percentages that drive one revenue split.

    Field defaults are the platform's documented fallbacks.
    """

    zakat_percentage: Decimal = Decimal("12.5")
    donation_percentage: Decimal = Decimal("20")
    fundraiser_percentage: Decimal = ZERO
    mitra_zakat_percentage: Decimal = ZERO
    mitra_donation_percentage: Decimal = ZERO
    developer_percentage: Decimal = ZERO
    qurban_owner_percentage: Decimal = ZERO

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> AmilSettings:
        """
        Build settings from a ``{setting_key: raw_value}`` mapping.

        Unknown keys are ignored.
        """
        defaults = cls()
        kwargs = {}
        for key, field_name in SETTING_KEYS.items():
            fallback = getattr(defaults, field_name)
            kwargs[field_name] = parse_percentage(values.get(key), fallback)
        return cls(**kwargs)

    def as_mapping(self) -> dict[str, Decimal]:
        """Inverse of from_mapping, keyed by setting key."""
        by_field = {f.name: getattr(self, f.name) for f in fields(self)}
        return {key: by_field[name] for key, name in SETTING_KEYS.items()}

    def validate_qurban_owner(self) -> None:
        pct = self.qurban_owner_percentage
        if pct < ZERO or pct > HUNDRED:
            raise InvalidPercentageError(QURBAN_OWNER_KEY, str(pct))
