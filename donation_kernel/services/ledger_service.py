"""
LedgerService -- Ledger posting engine.

Responsibility:
    Writes balanced double-entry ledger entries for donations and
    disbursements.  One entry header plus N lines, addressed by account code.

Architecture position:
    Kernel > Services -- imperative shell, owns ledger persistence.
    Consumes domain/ledger_lines.py for validation; reads are in
    selectors/ledger_selector.py.

Invariants enforced:
    - Debits == Credits, checked BEFORE any row is written.
    - Every account code resolves to an active LedgerAccount BEFORE any row
      is written.
    - The entry and its lines are written inside one SAVEPOINT: either all
      rows exist after the call or none do.
    - Entry numbers are unique; a collision is retried with a fresh number.

Failure modes:
    - EmptyEntryError / InvalidLineError / UnbalancedEntryError: bad lines.
    - AccountNotFoundError / AccountInactiveError: unknown or retired code.
    - EntryNumberExhaustedError: entry number collided on every attempt.

Usage:
    with session_scope() as session:
        posted = LedgerService(session).post_donation(
            donation_id="don-123",
            amount=100_000,
            donor_name="Hamba Allah",
            program_title="Sumur Wakaf",
        )
"""

from collections.abc import Sequence
from dataclasses import dataclass
from uuid import UUID, uuid4

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from donation_kernel.domain.clock import Clock, SystemClock
from donation_kernel.domain.ledger_lines import LedgerLineSpec, validate_lines
from donation_kernel.exceptions import (
    AccountInactiveError,
    AccountNotFoundError,
    EntryNumberExhaustedError,
)
from donation_kernel.logging_config import get_logger
from donation_kernel.models.ledger import (
    LedgerAccount,
    LedgerEntry,
    LedgerEntryStatus,
    LedgerLine,
    LedgerRefType,
)
from donation_kernel.services.base import BaseService
from donation_kernel.utils.entry_number import generate_entry_number

logger = get_logger("services.ledger")

DEFAULT_BANK_ACCOUNT_CODE = "1020"  # Bank Operasional
FUNDS_HELD_ACCOUNT_CODE = "2010"  # Titipan Dana Campaign

MAX_ENTRY_NUMBER_ATTEMPTS = 3

DEFAULT_PAYMENT_METHOD = "bank transfer"


@dataclass(frozen=True)
class PostedEntry:
    """Identifiers of a freshly posted ledger entry."""

    entry_id: UUID
    entry_number: str


def _is_entry_number_conflict(exc: IntegrityError) -> bool:
    return "entry_number" in str(exc.orig)


class LedgerService(BaseService):
    """
    Posts balanced ledger entries.

    Contract:
        Flushes only; the caller commits.  A failed post leaves no rows
        behind and does not disturb earlier work in the same transaction.
    """

    def __init__(self, session: Session, clock: Clock | None = None):
        super().__init__(session)
        self._clock = clock or SystemClock()

    def post_entry(
        self,
        ref_type: LedgerRefType,
        ref_id: str,
        memo: str | None,
        lines: Sequence[LedgerLineSpec],
        created_by: UUID | None = None,
    ) -> PostedEntry:
        """
        Post one balanced entry.

        Args:
            ref_type: Kind of business object the entry belongs to.
            ref_id: Identifier of that business object.
            memo: Free-text entry memo.
            lines: Proposed lines, in order; line_seq follows this order.
            created_by: Optional acting user.

        Returns:
            PostedEntry with the new entry id and entry number.
        """
        ref_type = LedgerRefType(ref_type)
        total_debit, _ = validate_lines(ref_type.value, ref_id, lines)

        accounts = self._resolve_accounts(lines)

        for attempt in range(1, MAX_ENTRY_NUMBER_ATTEMPTS + 1):
            posted_at = self._clock.now()
            entry_number = generate_entry_number(posted_at)
            try:
                with self.session.begin_nested():
                    entry = self._write_entry(
                        entry_number=entry_number,
                        ref_type=ref_type,
                        ref_id=ref_id,
                        memo=memo,
                        lines=lines,
                        accounts=accounts,
                        posted_at=posted_at,
                        created_by=created_by,
                    )
            except IntegrityError as exc:
                if not _is_entry_number_conflict(exc):
                    raise
                logger.warning(
                    "ledger_entry_number_collision",
                    extra={"entry_number": entry_number, "attempt": attempt},
                )
                continue

            logger.info(
                "ledger_entry_posted",
                extra={
                    "entry_id": str(entry.id),
                    "entry_number": entry_number,
                    "ref_type": ref_type.value,
                    "ref_id": ref_id,
                    "line_count": len(lines),
                    "total_debit": total_debit,
                },
            )
            return PostedEntry(entry_id=entry.id, entry_number=entry_number)

        logger.error(
            "ledger_entry_number_exhausted",
            extra={"ref_type": ref_type.value, "ref_id": ref_id},
        )
        raise EntryNumberExhaustedError(MAX_ENTRY_NUMBER_ATTEMPTS)

    def post_donation(
        self,
        donation_id: str,
        amount: int,
        donor_name: str,
        program_title: str,
        payment_method: str | None = None,
        bank_account_code: str = DEFAULT_BANK_ACCOUNT_CODE,
        liability_account_code: str = FUNDS_HELD_ACCOUNT_CODE,
        created_by: UUID | None = None,
    ) -> PostedEntry:
        """Money in: debit the bank, credit funds held for the program."""
        method = payment_method or DEFAULT_PAYMENT_METHOD
        return self.post_entry(
            ref_type=LedgerRefType.DONATION,
            ref_id=donation_id,
            memo=f"Donation from {donor_name} for {program_title}",
            created_by=created_by,
            lines=[
                LedgerLineSpec.debit_line(
                    bank_account_code,
                    amount,
                    f"Donation received via {method}",
                ),
                LedgerLineSpec.credit_line(
                    liability_account_code,
                    amount,
                    f"Funds held for {program_title}",
                ),
            ],
        )

    def post_disbursement(
        self,
        disbursement_id: str,
        amount: int,
        recipient_name: str,
        purpose: str,
        program_title: str,
        payment_method: str | None = None,
        bank_account_code: str = DEFAULT_BANK_ACCOUNT_CODE,
        liability_account_code: str = FUNDS_HELD_ACCOUNT_CODE,
        created_by: UUID | None = None,
    ) -> PostedEntry:
        """Money out: debit funds held for the program, credit the bank."""
        method = payment_method or DEFAULT_PAYMENT_METHOD
        return self.post_entry(
            ref_type=LedgerRefType.DISBURSEMENT,
            ref_id=disbursement_id,
            memo=f"Disbursement: {purpose} to {recipient_name} for {program_title}",
            created_by=created_by,
            lines=[
                LedgerLineSpec.debit_line(
                    liability_account_code,
                    amount,
                    f"Distribution for {program_title}",
                ),
                LedgerLineSpec.credit_line(
                    bank_account_code,
                    amount,
                    f"Paid to {recipient_name} via {method}",
                ),
            ],
        )

    def _resolve_accounts(self, lines: Sequence[LedgerLineSpec]) -> dict[str, LedgerAccount]:
        """Load every referenced account in one query; fail on the first bad code."""
        codes = {line.account_code for line in lines}
        rows = self.session.execute(
            select(LedgerAccount).where(LedgerAccount.code.in_(codes))
        ).scalars()
        accounts = {account.code: account for account in rows}

        for line in lines:
            account = accounts.get(line.account_code)
            if account is None:
                logger.warning(
                    "ledger_account_not_found",
                    extra={"account_code": line.account_code},
                )
                raise AccountNotFoundError(line.account_code)
            if not account.is_active:
                logger.warning(
                    "ledger_account_inactive",
                    extra={"account_code": line.account_code},
                )
                raise AccountInactiveError(line.account_code)

        return accounts

    def _write_entry(
        self,
        entry_number: str,
        ref_type: LedgerRefType,
        ref_id: str,
        memo: str | None,
        lines: Sequence[LedgerLineSpec],
        accounts: dict[str, LedgerAccount],
        posted_at,
        created_by: UUID | None,
    ) -> LedgerEntry:
        entry = LedgerEntry(
            id=uuid4(),
            entry_number=entry_number,
            ref_type=ref_type.value,
            ref_id=ref_id,
            posted_at=posted_at,
            memo=memo,
            status=LedgerEntryStatus.POSTED.value,
            created_by_id=created_by,
        )
        self.session.add(entry)
        self.session.flush()

        for seq, line in enumerate(lines):
            self.session.add(
                LedgerLine(
                    id=uuid4(),
                    entry_id=entry.id,
                    account_id=accounts[line.account_code].id,
                    description=line.description,
                    debit=line.debit,
                    credit=line.credit,
                    line_seq=seq,
                    created_by_id=created_by,
                )
            )
        self.session.flush()
        return entry
