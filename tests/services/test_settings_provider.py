"""Tests for loading the amil table from the settings table."""

from decimal import Decimal

from donation_kernel.domain.amil_settings import AmilSettings
from donation_kernel.models.setting import Setting
from donation_kernel.services.settings_provider import SettingsProvider


def test_empty_table_gives_defaults(session, db_tables):
    assert SettingsProvider(session).load() == AmilSettings()


def test_reads_amil_category(session, set_amil_settings):
    set_amil_settings(
        amil_donation_percentage="17.5",
        amil_fundraiser_percentage="2",
        amil_qurban_owner_percentage="30",
    )

    settings = SettingsProvider(session).load()

    assert settings.donation_percentage == Decimal("17.5")
    assert settings.fundraiser_percentage == Decimal("2")
    assert settings.qurban_owner_percentage == Decimal("30")
    assert settings.zakat_percentage == Decimal("12.5")


def test_ignores_other_categories(session, db_tables):
    session.add(Setting(category="general", key="amil_donation_percentage", value="99"))
    session.flush()

    assert SettingsProvider(session).load().donation_percentage == Decimal("20")


def test_unparseable_and_null_values_fall_back(session, set_amil_settings):
    set_amil_settings(amil_zakat_percentage="dua belas", amil_donation_percentage=None)

    settings = SettingsProvider(session).load()

    assert settings.zakat_percentage == Decimal("12.5")
    assert settings.donation_percentage == Decimal("20")
