"""
Configuration Loader (``donation_config.loader``).

Responsibility
--------------
Loads amil percentage tables from YAML files and parses them into the
kernel's frozen ``AmilSettings`` value object.  Used by operator scripts and
tests to run calculations against a table that does not live in the
``settings`` database table.

Accepted layouts
----------------
Either the keys under an ``amil`` mapping::

    amil:
      amil_zakat_percentage: 12.5
      amil_donation_percentage: 20

or the same keys at the top level.  Missing keys fall back to the documented
defaults, exactly as they do for the database-backed SettingsProvider.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Top level (or ``amil`` section) not a mapping  -> ``ValueError``.
"""

from __future__ import annotations

import hashlib
import json
import logging
from pathlib import Path
from typing import Any

import yaml

from donation_kernel.domain.amil_settings import SETTINGS_CATEGORY, AmilSettings

_logger = logging.getLogger("donation_kernel.config")

DEFAULT_AMIL_SETTINGS_PATH = Path(__file__).parent / "defaults" / "amil.yaml"


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Postconditions:
        - Returns a ``dict`` (possibly empty if the YAML is empty).
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def parse_amil_settings(data: Any) -> AmilSettings:
    """Parse an already-loaded YAML document into AmilSettings."""
    if not isinstance(data, dict):
        raise ValueError(f"Amil settings must be a mapping, got {type(data).__name__}")

    section = data.get(SETTINGS_CATEGORY, data)
    if not isinstance(section, dict):
        raise ValueError(
            f"'{SETTINGS_CATEGORY}' section must be a mapping, got {type(section).__name__}"
        )
    return AmilSettings.from_mapping(section)


def load_amil_settings_file(path: Path | str) -> AmilSettings:
    path = Path(path)
    settings = parse_amil_settings(load_yaml_file(path))
    _logger.info(
        "amil_settings_file_loaded",
        extra={"path": str(path), "checksum": compute_checksum(settings)},
    )
    return settings


def load_default_amil_settings() -> AmilSettings:
    """The table shipped with the package."""
    return load_amil_settings_file(DEFAULT_AMIL_SETTINGS_PATH)


def compute_checksum(settings: AmilSettings) -> str:
    """Deterministic SHA-256 of a percentage table, for change detection."""
    canonical = json.dumps(
        {key: str(value) for key, value in settings.as_mapping().items()},
        sort_keys=True,
        separators=(",", ":"),
    )
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()
