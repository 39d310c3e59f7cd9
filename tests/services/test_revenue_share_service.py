"""
RevenueShareService tests.

Verifies:
- Paid transactions produce exactly one persisted split
- Repeat calls return the stored split without reapplying side effects
- Preconditions (unknown / unpaid transaction) are typed errors
- Skip rules write nothing and reverse stale commissions
- Mitra and fundraiser running totals move with the split
- Misconfigured percentage tables abort without partial writes
"""

from decimal import Decimal
from uuid import uuid4

import pytest
from sqlalchemy import func, select

from donation_kernel.domain.amil_settings import AmilSettings
from donation_kernel.domain.product import PaidTransaction
from donation_kernel.domain.revenue_split import SkipReason
from donation_kernel.exceptions import (
    DeductionsExceedAmilError,
    InvalidPercentageError,
    TransactionNotFoundError,
    TransactionNotPaidError,
)
from donation_kernel.models.partners import FundraiserReferral
from donation_kernel.models.revenue_share import RevenueShare
from donation_kernel.services.commission_sync import FundraiserCommissionSynchronizer
from donation_kernel.services.revenue_share_service import (
    CalculationStatus,
    RevenueShareService,
)


class _UnusedSettingsProvider:
    """Fails the test if the percentage table is consulted."""

    def load(self):
        raise AssertionError("settings should not be loaded")


@pytest.fixture
def service(session, deterministic_clock):
    return RevenueShareService(session, clock=deterministic_clock)


def _share_count(session) -> int:
    return session.execute(select(func.count(RevenueShare.id))).scalar_one()


class TestCalculate:
    def test_plain_donation(self, session, service, make_transaction, deterministic_clock):
        tx = make_transaction(total_amount=100_000)

        result = service.calculate_for_paid_transaction(tx.id)

        assert result.status is CalculationStatus.CALCULATED
        assert result.reason is None
        share = result.revenue_share
        assert share.transaction_id == tx.id
        assert share.donation_amount == 100_000
        assert share.amil_percentage == Decimal("20")
        assert share.amil_total_amount == 20_000
        assert share.amil_net_amount == 20_000
        assert share.program_amount == 80_000
        assert share.mitra_id is None
        assert share.fundraiser_id is None
        assert share.status == "calculated"
        assert share.calculated_at == deterministic_clock.now()
        assert share.distributed_at is None
        assert _share_count(session) == 1

    def test_accepts_string_id(self, service, make_transaction):
        tx = make_transaction()

        result = service.calculate_for_paid_transaction(str(tx.id))

        assert result.status is CalculationStatus.CALCULATED

    def test_settings_are_read_from_settings_table(self, service, make_transaction, set_amil_settings):
        set_amil_settings(amil_zakat_percentage="10")
        tx = make_transaction("zakat", total_amount=100_000)

        share = service.calculate_for_paid_transaction(tx.id).revenue_share

        assert share.amil_total_amount == 10_000
        assert share.program_amount == 90_000

    def test_explicit_settings_take_precedence(self, session, make_transaction, set_amil_settings):
        set_amil_settings(amil_donation_percentage="20")
        tx = make_transaction(total_amount=100_000)
        service = RevenueShareService(session, settings_provider=_UnusedSettingsProvider())

        share = service.calculate_for_paid_transaction(
            tx.id, settings=AmilSettings(donation_percentage=Decimal("5"))
        ).revenue_share

        assert share.amil_total_amount == 5_000

    def test_mitra_owned_qurban(
        self,
        session,
        service,
        make_mitra,
        make_qurban_package_period,
        make_transaction,
        set_amil_settings,
    ):
        set_amil_settings(amil_qurban_owner_percentage="30", amil_developer_percentage="2")
        mitra = make_mitra()
        period = make_qurban_package_period(created_by_user_id=mitra.user_id)
        tx = make_transaction(
            "qurban", product_id=period.id, total_amount=3_050_000, admin_fee=50_000
        )

        share = service.calculate_for_paid_transaction(tx.id).revenue_share

        assert share.donation_amount == 50_000
        assert share.amil_total_amount == 15_000
        assert share.mitra_amount == 35_000
        assert share.mitra_id == mitra.id
        assert share.developer_amount == 1_000
        assert share.amil_net_amount == 14_000
        assert share.program_amount == 0

        session.refresh(mitra)
        assert mitra.total_donation_received == 50_000
        assert mitra.total_revenue_earned == 35_000
        assert mitra.current_balance == 35_000

    def test_campaign_mitra_without_share_is_not_credited(
        self, session, service, make_mitra, make_campaign, make_transaction
    ):
        mitra = make_mitra()
        campaign = make_campaign(pillar="kesehatan", mitra=mitra)
        tx = make_transaction(product_id=campaign.id)

        share = service.calculate_for_paid_transaction(tx.id).revenue_share

        assert share.mitra_id == mitra.id
        assert share.mitra_amount == 0
        session.refresh(mitra)
        assert mitra.total_donation_received == 0

    def test_referred_donation_pays_fundraiser(
        self, session, service, make_fundraiser, make_transaction, set_amil_settings
    ):
        set_amil_settings(amil_fundraiser_percentage="5")
        fundraiser = make_fundraiser()
        tx = make_transaction(total_amount=200_000, referred_by_fundraiser_id=fundraiser.id)

        share = service.calculate_for_paid_transaction(tx.id).revenue_share

        assert share.fundraiser_id == fundraiser.id
        assert share.fundraiser_amount == 10_000
        assert share.amil_net_amount == 30_000
        session.refresh(fundraiser)
        assert fundraiser.total_referrals == 1
        assert fundraiser.current_balance == 10_000

    def test_calculation_is_logged_with_transaction_context(self, service, make_transaction, captured_logs):
        tx = make_transaction(total_amount=100_000)

        service.calculate_for_paid_transaction(tx.id)

        (record,) = [r for r in captured_logs() if r["message"] == "revenue_share_calculated"]
        assert record["transaction_id"] == str(tx.id)
        assert record["program_amount"] == 80_000
        assert "duration_ms" in record


class TestIdempotency:
    def test_second_call_returns_existing_share(
        self, session, service, make_fundraiser, make_transaction, set_amil_settings
    ):
        set_amil_settings(amil_fundraiser_percentage="5")
        fundraiser = make_fundraiser()
        tx = make_transaction(total_amount=100_000, referred_by_fundraiser_id=fundraiser.id)

        first = service.calculate_for_paid_transaction(tx.id)
        second = service.calculate_for_paid_transaction(tx.id)

        assert second.status is CalculationStatus.ALREADY_EXISTS
        assert second.revenue_share.id == first.revenue_share.id
        assert second.revenue_share.fundraiser_amount == first.revenue_share.fundraiser_amount
        assert _share_count(session) == 1
        session.refresh(fundraiser)
        assert fundraiser.current_balance == 5_000
        assert fundraiser.total_referrals == 1

    def test_existing_share_is_returned_even_if_settings_changed(
        self, service, make_transaction, set_amil_settings
    ):
        tx = make_transaction(total_amount=100_000)
        service.calculate_for_paid_transaction(tx.id)
        set_amil_settings(amil_donation_percentage="50")

        result = service.calculate_for_paid_transaction(tx.id)

        assert result.status is CalculationStatus.ALREADY_EXISTS
        assert result.revenue_share.amil_total_amount == 20_000


class TestPreconditions:
    def test_unknown_transaction(self, service, db_tables):
        missing = uuid4()

        with pytest.raises(TransactionNotFoundError) as exc_info:
            service.calculate_for_paid_transaction(missing)

        assert exc_info.value.transaction_id == str(missing)

    def test_malformed_transaction_id(self, service, db_tables):
        with pytest.raises(TransactionNotFoundError):
            service.calculate_for_paid_transaction("not-a-uuid")

    @pytest.mark.parametrize("status", ["pending", "partial", "cancelled"])
    def test_unpaid_transaction(self, session, service, make_transaction, status):
        tx = make_transaction(payment_status=status)

        with pytest.raises(TransactionNotPaidError) as exc_info:
            service.calculate_for_paid_transaction(tx.id)

        assert exc_info.value.payment_status == status
        assert exc_info.value.retryable is False
        assert _share_count(session) == 0


class TestSkips:
    @pytest.mark.parametrize("pillar,reason", [
        ("wakaf", SkipReason.WAKAF),
        ("Fidyah", SkipReason.FIDYAH),
    ])
    def test_excluded_pillar_writes_nothing(
        self, session, service, make_campaign, make_transaction, pillar, reason
    ):
        campaign = make_campaign(pillar=pillar)
        tx = make_transaction(product_id=campaign.id)

        result = service.calculate_for_paid_transaction(tx.id)

        assert result.is_skipped
        assert result.reason is reason
        assert result.revenue_share is None
        assert _share_count(session) == 0

    def test_skip_reverses_stale_commission(
        self, session, service, make_fundraiser, make_campaign, make_transaction, deterministic_clock
    ):
        fundraiser = make_fundraiser()
        campaign = make_campaign(pillar="wakaf")
        tx = make_transaction(product_id=campaign.id, referred_by_fundraiser_id=fundraiser.id)
        FundraiserCommissionSynchronizer(session, deterministic_clock).sync(
            PaidTransaction.from_model(tx), Decimal("5"), 5_000
        )

        service.calculate_for_paid_transaction(tx.id)

        session.refresh(fundraiser)
        assert fundraiser.current_balance == 0
        referral = session.execute(
            select(FundraiserReferral).where(FundraiserReferral.transaction_id == tx.id)
        ).scalar_one()
        assert referral.commission_amount == 0

    def test_admin_fee_entry_skips_before_loading_settings(self, session, make_transaction):
        tx = make_transaction(
            "qurban",
            total_amount=50_000,
            admin_fee=50_000,
            type_specific_data={"is_admin_fee_entry": True},
        )
        service = RevenueShareService(session, settings_provider=_UnusedSettingsProvider())

        result = service.calculate_for_paid_transaction(tx.id)

        assert result.reason is SkipReason.QURBAN_ADMIN_FEE_ENTRY

    def test_zero_qurban_admin_fee(self, session, service, make_transaction, captured_logs):
        tx = make_transaction("qurban", total_amount=2_500_000, admin_fee=0)

        result = service.calculate_for_paid_transaction(tx.id)

        assert result.reason is SkipReason.QURBAN_ADMIN_FEE_ZERO
        assert _share_count(session) == 0
        skipped = [r for r in captured_logs() if r["message"] == "revenue_share_skipped"]
        assert skipped[0]["reason"] == "qurban_admin_fee_zero"


class TestMisconfiguration:
    def test_invalid_qurban_owner_percentage(self, session, service, make_transaction, set_amil_settings):
        set_amil_settings(amil_qurban_owner_percentage="120")
        tx = make_transaction("qurban", admin_fee=50_000)

        with pytest.raises(InvalidPercentageError):
            service.calculate_for_paid_transaction(tx.id)

        assert _share_count(session) == 0

    def test_invalid_qurban_owner_percentage_blocks_every_product(
        self, session, service, make_transaction, set_amil_settings
    ):
        set_amil_settings(amil_qurban_owner_percentage="-5")
        tx = make_transaction("campaign")

        with pytest.raises(InvalidPercentageError):
            service.calculate_for_paid_transaction(tx.id)

    def test_deductions_exceeding_amil_apply_no_side_effects(
        self, session, service, make_fundraiser, make_transaction, set_amil_settings
    ):
        set_amil_settings(
            amil_donation_percentage="10",
            amil_fundraiser_percentage="8",
            amil_developer_percentage="5",
        )
        fundraiser = make_fundraiser()
        tx = make_transaction(referred_by_fundraiser_id=fundraiser.id)

        with pytest.raises(DeductionsExceedAmilError):
            service.calculate_for_paid_transaction(tx.id)

        assert _share_count(session) == 0
        session.refresh(fundraiser)
        assert fundraiser.current_balance == 0
