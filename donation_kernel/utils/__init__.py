"""Utility modules for the donation kernel."""

from donation_kernel.utils.entry_number import (
    generate_entry_number,
    is_valid_entry_number,
)

__all__ = [
    "generate_entry_number",
    "is_valid_entry_number",
]
