"""
RevenueSplit -- Pure revenue share computation.

Responsibility:
    Given a paid transaction, its resolved ownership and the amil percentage
    table, decide whether the transaction is shared at all and, if so, how
    the basis amount is divided among amil, developer, fundraiser, mitra and
    the program.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    RevenueShareService supplies the inputs and persists the output.

Invariants enforced:
    - Every percentage amount is floor(basis * pct / 100) on whole currency
      units; no fractional units are ever produced.
    - Non-qurban:  amil_net + developer + fundraiser + mitra == amil_total
                   amil_total + program == basis
    - Qurban with an owning mitra:
                   amil_total + mitra == basis
                   amil_net + developer + fundraiser == amil_total
    - Floor residuals end up in program_amount / amil_net_amount because those
      two are computed by subtraction.

Failure modes:
    - DeductionsExceedAmilError: non-qurban developer% + fundraiser% + mitra%
      exceeds amil%.
    - NegativeAmilNetError: deduction amounts exceed amil_total.
"""

from dataclasses import dataclass
from decimal import ROUND_FLOOR, Decimal
from enum import Enum
from uuid import UUID

from donation_kernel.domain.amil_settings import HUNDRED, ZERO, AmilSettings
from donation_kernel.domain.ownership import Ownership
from donation_kernel.domain.product import PaidTransaction
from donation_kernel.exceptions import DeductionsExceedAmilError, NegativeAmilNetError

EXCLUDED_PILLARS = frozenset({"wakaf", "fidyah"})


class SkipReason(str, Enum):
    """Why a paid transaction produces no revenue share."""

    QURBAN_ADMIN_FEE_ENTRY = "qurban_admin_fee_entry"
    WAKAF = "wakaf"
    FIDYAH = "fidyah"
    QURBAN_ADMIN_FEE_ZERO = "qurban_admin_fee_zero"


@dataclass(frozen=True)
class RevenueSplit:
    """Computed distribution of one basis amount."""

    donation_amount: int
    amil_percentage: Decimal
    amil_total_amount: int
    developer_percentage: Decimal
    developer_amount: int
    fundraiser_percentage: Decimal
    fundraiser_amount: int
    fundraiser_id: UUID | None
    mitra_percentage: Decimal
    mitra_amount: int
    mitra_id: UUID | None
    amil_net_amount: int
    program_amount: int


def percentage_of(basis: int, percentage: Decimal) -> int:
    """floor(basis * percentage / 100), exact in Decimal."""
    raw = Decimal(basis) * Decimal(percentage) / HUNDRED
    return int(raw.to_integral_value(rounding=ROUND_FLOOR))


def as_percentage(value: Decimal) -> Decimal:
    """Two-decimal form stored in Numeric(5, 2) columns."""
    return Decimal(value).quantize(Decimal("0.01"))


def basis_amount(tx: PaidTransaction) -> int:
    """Amount that is split: the admin fee for qurban, the total otherwise."""
    return tx.admin_fee if tx.is_qurban else tx.total_amount


def pre_ownership_skip_reason(tx: PaidTransaction) -> SkipReason | None:
    """Skip decisions that do not need ownership lookups."""
    if tx.is_admin_fee_entry:
        return SkipReason.QURBAN_ADMIN_FEE_ENTRY
    return None


def skip_reason(tx: PaidTransaction, ownership: Ownership) -> SkipReason | None:
    """
    Return why ``tx`` is not shared, or None when it must be shared.

    Checked in order: synthetic admin-fee entry, excluded campaign pillar,
    zero qurban admin fee.
    """
    reason = pre_ownership_skip_reason(tx)
    if reason is not None:
        return reason

    if tx.is_campaign and ownership.normalized_pillar in EXCLUDED_PILLARS:
        return SkipReason(ownership.normalized_pillar)

    if tx.is_qurban and basis_amount(tx) <= 0:
        return SkipReason.QURBAN_ADMIN_FEE_ZERO

    return None


def _amil_percentage(tx: PaidTransaction, ownership: Ownership, settings: AmilSettings) -> Decimal:
    if tx.is_qurban:
        return settings.qurban_owner_percentage if ownership.is_qurban_owner_mitra else HUNDRED
    if tx.is_zakat:
        return settings.zakat_percentage
    return settings.donation_percentage


def _mitra_percentage(
    tx: PaidTransaction,
    ownership: Ownership,
    settings: AmilSettings,
    amil_percentage: Decimal,
) -> Decimal:
    if tx.is_qurban:
        if not ownership.is_qurban_owner_mitra:
            return ZERO
        return max(ZERO, HUNDRED - amil_percentage)
    if not ownership.has_mitra:
        return ZERO
    if tx.is_zakat:
        return settings.mitra_zakat_percentage
    return settings.mitra_donation_percentage


def calculate_split(
    tx: PaidTransaction,
    ownership: Ownership,
    settings: AmilSettings,
) -> RevenueSplit:
    """
    Compute the revenue split for a transaction that is not skipped.

    Callers must check skip_reason() first.
    """
    basis = basis_amount(tx)
    qurban_owned = tx.is_qurban and ownership.is_qurban_owner_mitra

    amil_pct = _amil_percentage(tx, ownership, settings)
    if tx.is_qurban and not qurban_owned:
        amil_total = basis
    else:
        amil_total = percentage_of(basis, amil_pct)

    # Developer and fundraiser come off the basis, not off the amil portion
    developer_pct = settings.developer_percentage
    developer_amount = percentage_of(basis, developer_pct)

    if tx.referred_by_fundraiser_id is not None:
        fundraiser_pct = settings.fundraiser_percentage
        fundraiser_amount = percentage_of(basis, fundraiser_pct)
    else:
        fundraiser_pct = ZERO
        fundraiser_amount = 0

    mitra_pct = _mitra_percentage(tx, ownership, settings, amil_pct)
    if tx.is_qurban:
        mitra_amount = basis - amil_total if qurban_owned else 0
    elif ownership.has_mitra:
        mitra_amount = percentage_of(basis, mitra_pct)
    else:
        mitra_amount = 0

    if not tx.is_qurban:
        deduction_pct = developer_pct + fundraiser_pct + mitra_pct
        if deduction_pct > amil_pct:
            raise DeductionsExceedAmilError(
                transaction_id=str(tx.id),
                deduction_percentage=str(deduction_pct),
                amil_percentage=str(amil_pct),
            )

    if tx.is_qurban:
        amil_net = amil_total - developer_amount - fundraiser_amount
    else:
        amil_net = amil_total - developer_amount - fundraiser_amount - mitra_amount
    if amil_net < 0:
        raise NegativeAmilNetError(
            transaction_id=str(tx.id),
            amil_total_amount=amil_total,
            amil_net_amount=amil_net,
        )

    program_amount = 0 if tx.is_qurban else basis - amil_total

    return RevenueSplit(
        donation_amount=basis,
        amil_percentage=as_percentage(amil_pct),
        amil_total_amount=amil_total,
        developer_percentage=as_percentage(developer_pct),
        developer_amount=developer_amount,
        fundraiser_percentage=as_percentage(fundraiser_pct),
        fundraiser_amount=fundraiser_amount,
        fundraiser_id=tx.referred_by_fundraiser_id,
        mitra_percentage=as_percentage(mitra_pct),
        mitra_amount=mitra_amount,
        mitra_id=ownership.mitra_id,
        amil_net_amount=amil_net,
        program_amount=program_amount,
    )
