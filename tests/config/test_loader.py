"""Tests for YAML amil tables and database URL resolution."""

from decimal import Decimal

import pytest
import yaml

from donation_config import (
    DATABASE_URL_ENV,
    DEFAULT_DATABASE_URL,
    compute_checksum,
    get_database_url,
    load_amil_settings_file,
    load_default_amil_settings,
    parse_amil_settings,
)
from donation_kernel.domain.amil_settings import AmilSettings


class TestAmilSettingsFiles:
    def test_shipped_defaults_match_documented_defaults(self):
        assert load_default_amil_settings() == AmilSettings()

    def test_section_layout(self, tmp_path):
        path = tmp_path / "amil.yaml"
        path.write_text(
            "amil:\n"
            "  amil_donation_percentage: 15\n"
            "  amil_developer_percentage: '2.5'\n"
        )

        settings = load_amil_settings_file(path)

        assert settings.donation_percentage == Decimal("15")
        assert settings.developer_percentage == Decimal("2.5")
        assert settings.zakat_percentage == Decimal("12.5")

    def test_flat_layout(self):
        settings = parse_amil_settings({"amil_qurban_owner_percentage": 30})

        assert settings.qurban_owner_percentage == Decimal("30")

    def test_empty_file_gives_defaults(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")

        assert load_amil_settings_file(str(path)) == AmilSettings()

    @pytest.mark.parametrize("data", [["a", "b"], "text", {"amil": [1, 2]}])
    def test_non_mapping_is_rejected(self, data):
        with pytest.raises(ValueError):
            parse_amil_settings(data)

    def test_malformed_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("amil: [unclosed")

        with pytest.raises(yaml.YAMLError):
            load_amil_settings_file(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_amil_settings_file(tmp_path / "nope.yaml")

    def test_load_is_logged_with_checksum(self, tmp_path, captured_logs):
        path = tmp_path / "amil.yaml"
        path.write_text("amil_donation_percentage: 18\n")

        settings = load_amil_settings_file(path)

        (record,) = [r for r in captured_logs() if r["message"] == "amil_settings_file_loaded"]
        assert record["checksum"] == compute_checksum(settings)
        assert record["path"] == str(path)


class TestChecksum:
    def test_stable_for_equal_tables(self):
        assert compute_checksum(AmilSettings()) == compute_checksum(AmilSettings.from_mapping({}))

    def test_changes_with_any_percentage(self):
        changed = AmilSettings(developer_percentage=Decimal("1"))

        assert compute_checksum(changed) != compute_checksum(AmilSettings())


class TestDatabaseUrl:
    def test_env_wins(self, monkeypatch):
        monkeypatch.setenv(DATABASE_URL_ENV, "sqlite:///x.db")

        assert get_database_url() == "sqlite:///x.db"

    def test_default(self, monkeypatch):
        monkeypatch.delenv(DATABASE_URL_ENV, raising=False)

        assert get_database_url() == DEFAULT_DATABASE_URL
