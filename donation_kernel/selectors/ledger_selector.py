"""
Module: donation_kernel.selectors.ledger_selector
Responsibility: Read-only ledger queries: account balances derived from ledger
    lines, and posted entries looked up by id or by business reference.
Architecture position: Kernel > Selectors.

Invariants enforced:
    - No stored balances.  Every balance is summed from LedgerLine rows at
      query time and signed by the account's normal side.
"""

from uuid import UUID

from sqlalchemy import func, select

from donation_kernel.domain.dtos import AccountBalance, LedgerEntryRecord
from donation_kernel.models.ledger import (
    LedgerAccount,
    LedgerEntry,
    LedgerRefType,
    NormalSide,
)
from donation_kernel.models.ledger import LedgerLine as LedgerLineModel
from donation_kernel.selectors.base import BaseSelector


class LedgerSelector(BaseSelector):
    """Selector for ledger balances and entries."""

    def get_account_balance(self, account_code: str) -> AccountBalance | None:
        """
        Balance of one account.

        balance = debit - credit for debit-normal accounts, and
        credit - debit for credit-normal accounts.

        Returns:
            AccountBalance, or None if no account has this code.
        """
        account = self.session.execute(
            select(LedgerAccount).where(LedgerAccount.code == account_code)
        ).scalar_one_or_none()
        if account is None:
            return None

        total_debit, total_credit = self.session.execute(
            select(
                func.coalesce(func.sum(LedgerLineModel.debit), 0),
                func.coalesce(func.sum(LedgerLineModel.credit), 0),
            ).where(LedgerLineModel.account_id == account.id)
        ).one()
        total_debit = int(total_debit)
        total_credit = int(total_credit)

        normal_side = NormalSide(account.normal_side)
        if normal_side == NormalSide.DEBIT:
            balance = total_debit - total_credit
        else:
            balance = total_credit - total_debit

        return AccountBalance(
            account_code=account.code,
            name=account.name,
            normal_side=normal_side.value,
            total_debit=total_debit,
            total_credit=total_credit,
            balance=balance,
        )

    def get_entry(self, entry_id: UUID) -> LedgerEntryRecord | None:
        entry = self.session.get(LedgerEntry, entry_id)
        if entry is None:
            return None
        return LedgerEntryRecord.from_model(entry, self._account_codes([entry]))

    def entries_for_reference(
        self,
        ref_type: LedgerRefType,
        ref_id: str,
    ) -> list[LedgerEntryRecord]:
        """All entries posted for one business object, oldest first."""
        entries = list(
            self.session.execute(
                select(LedgerEntry)
                .where(
                    LedgerEntry.ref_type == LedgerRefType(ref_type).value,
                    LedgerEntry.ref_id == ref_id,
                )
                .order_by(LedgerEntry.posted_at, LedgerEntry.entry_number)
            ).scalars()
        )
        codes = self._account_codes(entries)
        return [LedgerEntryRecord.from_model(entry, codes) for entry in entries]

    def _account_codes(self, entries: list[LedgerEntry]) -> dict[UUID, str]:
        account_ids = {line.account_id for entry in entries for line in entry.lines}
        if not account_ids:
            return {}
        rows = self.session.execute(
            select(LedgerAccount.id, LedgerAccount.code).where(
                LedgerAccount.id.in_(account_ids)
            )
        ).all()
        return {account_id: code for account_id, code in rows}
