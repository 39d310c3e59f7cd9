"""
Donation Kernel - accounting core of the donation platform.

Provides:
- Balanced double-entry ledger posting for donations and disbursements
- Exactly-once revenue share calculation for paid transactions
- Fundraiser commission and mitra revenue accumulation
- Structured JSON logging and typed, machine-readable errors
"""

__version__ = "0.1.0"
