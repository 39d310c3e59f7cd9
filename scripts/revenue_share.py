#!/usr/bin/env python3
"""
Operator CLI for revenue sharing and ledger balances.

Usage:
    python3 scripts/revenue_share.py calculate <transaction_id> [--settings amil.yaml]
    python3 scripts/revenue_share.py balance <account_code>
    python3 scripts/revenue_share.py summary [--mitra-id ID] [--product-type zakat]

The database URL comes from DATABASE_URL unless --db-url is given.
"""

import argparse
import logging
import sys
from uuid import UUID

W = 60


def _fmt(amount: int) -> str:
    return f"{amount:>18,}"


def _cmd_calculate(args) -> int:
    from donation_config import load_amil_settings_file
    from donation_kernel.db.engine import session_scope
    from donation_kernel.exceptions import DonationKernelError
    from donation_kernel.services.revenue_share_service import RevenueShareService

    settings = load_amil_settings_file(args.settings) if args.settings else None

    try:
        with session_scope() as session:
            result = RevenueShareService(session).calculate_for_paid_transaction(
                args.transaction_id, settings=settings
            )
    except DonationKernelError as exc:
        print(f"  ERROR [{exc.code}]: {exc}", file=sys.stderr)
        return 2

    print(f"  Status: {result.status.value}")
    if result.reason is not None:
        print(f"  Reason: {result.reason.value}")
    share = result.revenue_share
    if share is not None:
        print("-" * W)
        print(f"  {'Basis':<24}{_fmt(share.donation_amount)}")
        print(f"  {'Amil (' + str(share.amil_percentage) + '%)':<24}{_fmt(share.amil_total_amount)}")
        print(f"  {'  Developer':<24}{_fmt(share.developer_amount)}")
        print(f"  {'  Fundraiser':<24}{_fmt(share.fundraiser_amount)}")
        print(f"  {'  Amil net':<24}{_fmt(share.amil_net_amount)}")
        print(f"  {'Mitra':<24}{_fmt(share.mitra_amount)}")
        print(f"  {'Program':<24}{_fmt(share.program_amount)}")
    return 0


def _cmd_balance(args) -> int:
    from donation_kernel.db.engine import get_session
    from donation_kernel.selectors.ledger_selector import LedgerSelector

    session = get_session()
    try:
        balance = LedgerSelector(session).get_account_balance(args.account_code)
    finally:
        session.close()

    if balance is None:
        print(f"  Unknown account: {args.account_code}", file=sys.stderr)
        return 1

    print(f"  {balance.account_code}  {balance.name}  ({balance.normal_side} normal)")
    print(f"  {'Debit':<24}{_fmt(balance.total_debit)}")
    print(f"  {'Credit':<24}{_fmt(balance.total_credit)}")
    print(f"  {'Balance':<24}{_fmt(balance.balance)}")
    return 0


def _cmd_summary(args) -> int:
    from donation_kernel.db.engine import get_session
    from donation_kernel.selectors.revenue_share_selector import (
        RevenueShareFilters,
        RevenueShareSelector,
    )

    filters = RevenueShareFilters(
        fundraiser_id=args.fundraiser_id,
        mitra_id=args.mitra_id,
        product_type=args.product_type,
    )
    session = get_session()
    try:
        summary = RevenueShareSelector(session).summary(filters)
    finally:
        session.close()

    print("=" * W)
    print("REVENUE SHARE SUMMARY".center(W))
    print("=" * W)
    print(f"  {'Records':<24}{summary.total_records:>18}")
    print(f"  {'Donations':<24}{_fmt(summary.total_donation_amount)}")
    print(f"  {'Amil':<24}{_fmt(summary.total_amil_amount)}")
    print(f"  {'Amil net':<24}{_fmt(summary.total_amil_net)}")
    print(f"  {'Developer':<24}{_fmt(summary.total_developer)}")
    print(f"  {'Fundraiser':<24}{_fmt(summary.total_fundraiser)}")
    print(f"  {'Mitra':<24}{_fmt(summary.total_mitra)}")
    print(f"  {'Program':<24}{_fmt(summary.total_program)}")
    return 0


def main() -> int:
    from donation_config import get_database_url

    parser = argparse.ArgumentParser(description="Revenue share and ledger operator CLI.")
    parser.add_argument("--db-url", type=str, default=get_database_url())
    parser.add_argument("-v", "--verbose", action="store_true", help="Emit JSON logs to stderr")
    sub = parser.add_subparsers(dest="command", required=True)

    calc = sub.add_parser("calculate", help="Calculate the revenue share of a paid transaction")
    calc.add_argument("transaction_id", type=str)
    calc.add_argument("--settings", type=str, default=None, help="YAML amil settings file")
    calc.set_defaults(func=_cmd_calculate)

    bal = sub.add_parser("balance", help="Show a ledger account balance")
    bal.add_argument("account_code", type=str)
    bal.set_defaults(func=_cmd_balance)

    summ = sub.add_parser("summary", help="Totals over calculated revenue shares")
    summ.add_argument("--fundraiser-id", type=UUID, default=None)
    summ.add_argument("--mitra-id", type=UUID, default=None)
    summ.add_argument("--product-type", type=str, default=None)
    summ.set_defaults(func=_cmd_summary)

    args = parser.parse_args()

    from donation_kernel.db.engine import init_engine_from_url
    from donation_kernel.logging_config import configure_logging

    if args.verbose:
        configure_logging(level=logging.DEBUG)
    else:
        logging.disable(logging.CRITICAL)

    try:
        init_engine_from_url(args.db_url, echo=False)
    except Exception as exc:
        print(f"  ERROR: {exc}", file=sys.stderr)
        return 1

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
