"""Tests for ledger entry number generation."""

from datetime import datetime, timezone

from donation_kernel.utils.entry_number import (
    SUFFIX_ALPHABET,
    generate_entry_number,
    is_valid_entry_number,
)


def test_format_uses_posting_month():
    number = generate_entry_number(datetime(2024, 3, 9, tzinfo=timezone.utc))

    assert number.startswith("JE-202403-")
    assert is_valid_entry_number(number)


def test_suffix_alphabet():
    number = generate_entry_number(datetime(2025, 12, 31, tzinfo=timezone.utc))
    suffix = number.rsplit("-", 1)[1]

    assert len(suffix) == 4
    assert all(ch in SUFFIX_ALPHABET for ch in suffix)


def test_numbers_vary():
    now = datetime(2024, 1, 1, tzinfo=timezone.utc)
    numbers = {generate_entry_number(now) for _ in range(50)}

    # 36**4 possible suffixes; 50 draws essentially never collapse to a handful
    assert len(numbers) > 40


def test_rejects_malformed_numbers():
    assert not is_valid_entry_number("JE-2024-ABCD")
    assert not is_valid_entry_number("JE-202401-abcd")
    assert not is_valid_entry_number("XX-202401-ABCD")
