"""
SettingsProvider -- Loads the amil percentage table from the settings table.

Responsibility:
    Reads every row of the "amil" settings category once and turns it into
    the immutable AmilSettings value object.  Missing or malformed values
    fall back to the documented defaults (see domain/amil_settings.py).

Architecture position:
    Kernel > Services.  Read-only; it never writes settings.
"""

from sqlalchemy import select
from sqlalchemy.orm import Session

from donation_kernel.domain.amil_settings import SETTINGS_CATEGORY, AmilSettings
from donation_kernel.logging_config import get_logger
from donation_kernel.models.setting import Setting

logger = get_logger("services.settings_provider")


class SettingsProvider:
    """Produces AmilSettings from the database."""

    def __init__(self, session: Session):
        self.session = session

    def load(self) -> AmilSettings:
        rows = self.session.execute(
            select(Setting.key, Setting.value).where(Setting.category == SETTINGS_CATEGORY)
        ).all()
        raw = {key: value for key, value in rows}
        settings = AmilSettings.from_mapping(raw)

        logger.debug(
            "amil_settings_loaded",
            extra={
                "configured_keys": sorted(raw),
                "settings": {k: str(v) for k, v in settings.as_mapping().items()},
            },
        )
        return settings
