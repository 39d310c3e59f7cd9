"""
Module: donation_kernel.db.locks
Responsibility: Transaction-scoped advisory locks keyed by business identifiers.
Architecture position: Kernel > DB.  MUST NOT import from models/, services/,
    selectors/, or domain/.

Invariants enforced:
    - A lock taken here is held until the surrounding database transaction
      ends (commit or rollback); there is no explicit unlock.
    - Lock keys are derived deterministically from (namespace, key) so that
      every process computes the same 64-bit key for the same transaction.

Failure modes:
    - On PostgreSQL, a caller blocks until the holder's transaction ends.
    - On other dialects the call is a no-op.  SQLite serializes writers at the
      file level, and the unique constraints remain the final safety net.
"""

import hashlib

from sqlalchemy import text
from sqlalchemy.orm import Session

from donation_kernel.logging_config import get_logger

logger = get_logger("db.locks")


def advisory_lock_key(namespace: str, key: str) -> int:
    """Map (namespace, key) onto a signed 64-bit PostgreSQL advisory lock key."""
    digest = hashlib.sha256(f"{namespace}:{key}".encode("utf-8")).digest()
    return int.from_bytes(digest[:8], byteorder="big", signed=True)


def acquire_transaction_lock(session: Session, namespace: str, key: str) -> bool:
    """
    Take a transaction-scoped advisory lock for (namespace, key).

    Returns:
        True if a lock was taken, False if the dialect has no advisory locks.
    """
    dialect = session.get_bind().dialect.name
    if dialect != "postgresql":
        return False

    lock_key = advisory_lock_key(namespace, key)
    session.execute(text("SELECT pg_advisory_xact_lock(:key)"), {"key": lock_key})
    logger.debug(
        "advisory_lock_acquired",
        extra={"namespace": namespace, "key": key, "lock_key": lock_key},
    )
    return True
