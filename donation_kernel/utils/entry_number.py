"""
Ledger entry number generation.

Format: ``JE-YYYYMM-XXXX`` where YYYYMM is the posting month and XXXX is four
random characters from 0-9A-Z.  Numbers are not sequential; uniqueness is
enforced by uq_ledger_entry_number and LedgerService retries collisions.
"""

import re
import secrets
import string
from datetime import datetime

ENTRY_NUMBER_PREFIX = "JE"
SUFFIX_ALPHABET = string.digits + string.ascii_uppercase
SUFFIX_LENGTH = 4

ENTRY_NUMBER_PATTERN = re.compile(r"^JE-\d{6}-[0-9A-Z]{4}$")


def generate_entry_number(now: datetime) -> str:
    """Generate a fresh entry number for an entry posted at ``now``."""
    suffix = "".join(secrets.choice(SUFFIX_ALPHABET) for _ in range(SUFFIX_LENGTH))
    return f"{ENTRY_NUMBER_PREFIX}-{now:%Y%m}-{suffix}"


def is_valid_entry_number(value: str) -> bool:
    return bool(ENTRY_NUMBER_PATTERN.match(value))
