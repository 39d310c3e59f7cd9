#!/usr/bin/env python3
"""
Create the kernel tables and seed the default ledger accounts.

Existing accounts (matched by code) are left untouched, so the script can be
re-run safely.

Usage:
    DATABASE_URL=postgresql://... python3 scripts/seed_accounts.py
    python3 scripts/seed_accounts.py --db-url sqlite:///donations.db
"""

import argparse
import logging
import sys

DEFAULT_ACCOUNTS = (
    # code, name, normal side
    ("1010", "Kas", "debit"),
    ("1020", "Bank Operasional", "debit"),
    ("2010", "Titipan Dana Campaign", "credit"),
)


def main() -> int:
    from donation_config import get_database_url

    parser = argparse.ArgumentParser(description="Seed default ledger accounts.")
    parser.add_argument("--db-url", type=str, default=get_database_url())
    args = parser.parse_args()

    from sqlalchemy import select

    from donation_kernel.db.engine import create_tables, init_engine_from_url, session_scope
    from donation_kernel.logging_config import configure_logging
    from donation_kernel.models.ledger import LedgerAccount, NormalSide

    configure_logging(level=logging.WARNING)

    try:
        init_engine_from_url(args.db_url, echo=False)
        create_tables()
    except Exception as exc:
        print(f"  ERROR: {exc}", file=sys.stderr)
        return 1

    created = 0
    with session_scope() as session:
        existing = set(session.execute(select(LedgerAccount.code)).scalars())
        for code, name, side in DEFAULT_ACCOUNTS:
            if code in existing:
                print(f"  = {code}  {name} (exists)")
                continue
            session.add(
                LedgerAccount(
                    code=code,
                    name=name,
                    normal_side=NormalSide(side).value,
                    is_active=True,
                )
            )
            created += 1
            print(f"  + {code}  {name}")

    print(f"\n  {created} account(s) created.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
