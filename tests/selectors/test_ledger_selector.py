"""Tests for derived ledger balances and entry lookups."""

from uuid import uuid4

from donation_kernel.models.ledger import LedgerRefType
from donation_kernel.selectors.ledger_selector import LedgerSelector
from donation_kernel.services.ledger_service import LedgerService


class TestAccountBalance:
    def test_unused_account_has_zero_balance(self, session, ledger_accounts):
        balance = LedgerSelector(session).get_account_balance("1010")

        assert balance.name == "Kas"
        assert balance.normal_side == "debit"
        assert (balance.total_debit, balance.total_credit, balance.balance) == (0, 0, 0)

    def test_balance_sign_follows_normal_side(self, session, ledger_accounts, deterministic_clock):
        ledger = LedgerService(session, clock=deterministic_clock)
        ledger.post_donation("don-1", 100_000, "A", "P")
        ledger.post_donation("don-2", 50_000, "B", "P")
        ledger.post_disbursement("dis-1", 30_000, "R", "Purpose", "P")

        selector = LedgerSelector(session)
        bank = selector.get_account_balance("1020")
        held = selector.get_account_balance("2010")

        assert (bank.total_debit, bank.total_credit, bank.balance) == (150_000, 30_000, 120_000)
        assert (held.total_debit, held.total_credit, held.balance) == (30_000, 150_000, 120_000)

    def test_unknown_account(self, session, ledger_accounts):
        assert LedgerSelector(session).get_account_balance("0000") is None


class TestEntries:
    def test_entries_for_reference(self, session, ledger_accounts, deterministic_clock):
        ledger = LedgerService(session, clock=deterministic_clock)
        first = ledger.post_donation("don-7", 10_000, "A", "P")
        deterministic_clock.advance(60)
        second = ledger.post_donation("don-7", 2_000, "A", "P")
        ledger.post_donation("don-8", 5_000, "A", "P")

        entries = LedgerSelector(session).entries_for_reference(LedgerRefType.DONATION, "don-7")

        assert [e.id for e in entries] == [first.entry_id, second.entry_id]
        assert all(e.total_debit == e.total_credit for e in entries)

    def test_reference_type_is_part_of_the_key(self, session, ledger_accounts, deterministic_clock):
        LedgerService(session, clock=deterministic_clock).post_donation("ref-1", 10_000, "A", "P")

        assert LedgerSelector(session).entries_for_reference("disbursement", "ref-1") == []

    def test_missing_entry(self, session, ledger_accounts):
        assert LedgerSelector(session).get_entry(uuid4()) is None
