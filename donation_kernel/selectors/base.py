"""
Module: donation_kernel.selectors.base
Responsibility: Abstract base class for all read-only query selectors.
Architecture position: Kernel > Selectors.  May import from db/, models/ and
    the DTOs in domain/dtos.py.  MUST NOT import from services/.

Invariants enforced:
    - Read-only access: selectors accept a Session from the caller but MUST
      NOT call session.add(), session.delete(), session.commit(), or
      session.flush().
    - DTO return convention: selectors return frozen dataclasses, not ORM
      instances.
    - Balances are derived from ledger lines at query time; none are stored.
"""

from abc import ABC

from sqlalchemy.orm import Session


class BaseSelector(ABC):
    """Common constructor for read-only selectors."""

    def __init__(self, session: Session):
        self.session = session
