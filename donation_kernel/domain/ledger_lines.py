"""
LedgerLines -- Line specifications and the balance check.

Responsibility:
    Describes the lines of a ledger entry before any row exists and rejects
    malformed or unbalanced entries.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Invariants enforced:
    - At least one line per entry.
    - Every line names an account code and carries non-negative integer
      debit and credit amounts, exactly one of which is positive.
    - Sum of debits == sum of credits.  Checked before LedgerService writes
      anything.

Failure modes:
    - EmptyEntryError, InvalidLineError, UnbalancedEntryError.
"""

from collections.abc import Sequence
from dataclasses import dataclass

from donation_kernel.exceptions import (
    EmptyEntryError,
    InvalidLineError,
    UnbalancedEntryError,
)


@dataclass(frozen=True)
class LedgerLineSpec:
    """One proposed ledger line, addressed by account code."""

    account_code: str
    debit: int = 0
    credit: int = 0
    description: str | None = None

    @classmethod
    def debit_line(cls, account_code: str, amount: int, description: str | None = None):
        return cls(account_code=account_code, debit=amount, description=description)

    @classmethod
    def credit_line(cls, account_code: str, amount: int, description: str | None = None):
        return cls(account_code=account_code, credit=amount, description=description)


def _check_amount(line_seq: int, name: str, value) -> None:
    # bool is an int subclass; reject it explicitly
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidLineError(line_seq, f"{name} must be an integer amount, got {value!r}")
    if value < 0:
        raise InvalidLineError(line_seq, f"{name} must not be negative, got {value}")


def validate_lines(ref_type: str, ref_id: str, lines: Sequence[LedgerLineSpec]) -> tuple[int, int]:
    """
    Validate the proposed lines of one entry.

    Returns:
        (total_debit, total_credit), which are equal on success.
    """
    if not lines:
        raise EmptyEntryError(ref_type, ref_id)

    total_debit = 0
    total_credit = 0
    for seq, line in enumerate(lines):
        if not line.account_code or not line.account_code.strip():
            raise InvalidLineError(seq, "account code is required")
        _check_amount(seq, "debit", line.debit)
        _check_amount(seq, "credit", line.credit)
        if (line.debit > 0) == (line.credit > 0):
            raise InvalidLineError(seq, "exactly one of debit and credit must be positive")
        total_debit += line.debit
        total_credit += line.credit

    if total_debit != total_credit:
        raise UnbalancedEntryError(debits=total_debit, credits=total_credit)

    return total_debit, total_credit
