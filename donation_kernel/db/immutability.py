"""
ORM-Level Immutability Enforcement.

===============================================================================
WHY THIS EXISTS
===============================================================================

Ledger entries are the auditable trail behind every donation and
disbursement, and a revenue share is the record of who was credited how much
for a paid transaction.  Mitra and fundraiser balances were incremented from
that record; editing it afterwards would silently disagree with them.
Corrections are new rows, never edits.

===============================================================================
PROTECTED ENTITIES
===============================================================================

Entity          | When Immutable           | Why
----------------|--------------------------|-----------------------------------
LedgerEntry     | ALWAYS (created posted)  | Posted = finalized, auditable
LedgerLine      | ALWAYS                   | Lines are part of the entry
RevenueShare    | ALWAYS (from creation)   | Balances were derived from it

updated_at / updated_by_id may still change; they are audit metadata, not
financial data.

===============================================================================
HOW IT WORKS
===============================================================================

    session.flush()
         |
         v
    [before_update event] --> _check_*_update() --> ImmutabilityViolationError
         |
         v
    [before_delete event] --> _check_*_delete() --> ImmutabilityViolationError
         |
         v
    SQL sent to database (only if checks pass)

before_update fires for every instance marked dirty, including ones with no
net change, so the update checks inspect attribute history and only reject
real modifications.

Bulk UPDATE/DELETE statements bypass mapper events.  The kernel never issues
them against these tables.

===============================================================================
USAGE
===============================================================================

Called once at application startup:

    from donation_kernel.db.immutability import register_immutability_listeners
    register_immutability_listeners()

To temporarily disable (TESTS ONLY):

    unregister_immutability_listeners()
    # ... do forbidden operation ...
    register_immutability_listeners()

===============================================================================
"""

from sqlalchemy import event, inspect

from donation_kernel.exceptions import ImmutabilityViolationError
from donation_kernel.logging_config import get_logger

logger = get_logger("db.immutability")

_AUDIT_FIELDS = frozenset({"updated_at", "updated_by_id"})


def _changed_field(target) -> str | None:
    """Return the first non-audit attribute with pending changes, if any."""
    insp = inspect(target)
    for attr in insp.attrs:
        if attr.key in _AUDIT_FIELDS:
            continue
        if attr.history.has_changes():
            return attr.key
    return None


def _block(entity_type: str, target, operation: str, reason: str, field: str | None = None):
    extra = {
        "entity_type": entity_type,
        "entity_id": str(target.id),
        "operation": operation,
    }
    if field is not None:
        extra["field"] = field
    logger.error("immutability_violation_blocked", extra=extra)
    raise ImmutabilityViolationError(
        entity_type=entity_type,
        entity_id=str(target.id),
        reason=reason,
    )


def _check_ledger_entry_update(mapper, connection, target):
    """Prevent updates to LedgerEntry records.  Entries are created posted."""
    field = _changed_field(target)
    if field is not None:
        _block(
            "LedgerEntry",
            target,
            "UPDATE",
            f"Cannot modify field '{field}' on posted ledger entry",
            field=field,
        )


def _check_ledger_entry_delete(mapper, connection, target):
    _block("LedgerEntry", target, "DELETE", "Posted ledger entries cannot be deleted")


def _check_ledger_line_update(mapper, connection, target):
    field = _changed_field(target)
    if field is not None:
        _block(
            "LedgerLine",
            target,
            "UPDATE",
            f"Cannot modify field '{field}' on a ledger line",
            field=field,
        )


def _check_ledger_line_delete(mapper, connection, target):
    _block("LedgerLine", target, "DELETE", "Ledger lines cannot be deleted")


def _check_revenue_share_update(mapper, connection, target):
    """
    Prevent updates to RevenueShare records.

    Distribution status transitions are owned by a separate workflow and are
    not performed through the kernel's session.
    """
    field = _changed_field(target)
    if field is not None:
        _block(
            "RevenueShare",
            target,
            "UPDATE",
            f"Cannot modify field '{field}' on a calculated revenue share",
            field=field,
        )


def _check_revenue_share_delete(mapper, connection, target):
    _block("RevenueShare", target, "DELETE", "Revenue shares cannot be deleted")


def _listeners():
    from donation_kernel.models.ledger import LedgerEntry, LedgerLine
    from donation_kernel.models.revenue_share import RevenueShare

    return (
        (LedgerEntry, "before_update", _check_ledger_entry_update),
        (LedgerEntry, "before_delete", _check_ledger_entry_delete),
        (LedgerLine, "before_update", _check_ledger_line_update),
        (LedgerLine, "before_delete", _check_ledger_line_delete),
        (RevenueShare, "before_update", _check_revenue_share_update),
        (RevenueShare, "before_delete", _check_revenue_share_delete),
    )


def register_immutability_listeners():
    """
    Register all immutability enforcement event listeners.

    Call this after all models are imported but before any database
    operations begin.  Calling it twice is harmless.
    """
    for target, event_name, listener_fn in _listeners():
        if not event.contains(target, event_name, listener_fn):
            event.listen(target, event_name, listener_fn)


def _safe_remove_listener(target, event_name, listener_fn):
    """Remove an event listener, ignoring it if not registered."""
    if event.contains(target, event_name, listener_fn):
        event.remove(target, event_name, listener_fn)


def unregister_immutability_listeners():
    """
    Remove immutability enforcement event listeners.

    WARNING: Only use this in tests where you need to intentionally
    violate immutability rules to verify detection.
    """
    for target, event_name, listener_fn in _listeners():
        _safe_remove_listener(target, event_name, listener_fn)
