"""Tests for mitra running totals."""

from donation_kernel.services.mitra_revenue import MitraRevenueAccumulator


def test_apply_increments_totals(session, make_mitra):
    mitra = make_mitra()
    accumulator = MitraRevenueAccumulator(session)

    assert accumulator.apply(mitra.id, donation_amount=100_000, mitra_amount=5_000)
    assert accumulator.apply(mitra.id, donation_amount=50_000, mitra_amount=2_500)

    session.refresh(mitra)
    assert mitra.total_donation_received == 150_000
    assert mitra.total_revenue_earned == 7_500
    assert mitra.current_balance == 7_500


def test_zero_share_leaves_mitra_untouched(session, make_mitra, captured_logs):
    mitra = make_mitra()

    assert not MitraRevenueAccumulator(session).apply(mitra.id, 100_000, 0)

    session.refresh(mitra)
    assert mitra.total_donation_received == 0
    assert mitra.current_balance == 0
    assert not any(r["message"] == "mitra_revenue_applied" for r in captured_logs())
