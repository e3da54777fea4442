import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from y2m_device_store.storage.json_store import load_json, save_json

_LOGGER = logging.getLogger(__name__)

SETTINGS_FILE = Path(os.getenv("Y2M_APP_SETTINGS_FILE") or Path.cwd() / "app-settings.json")
BOOTSTRAP_FILE = Path(os.getenv("Y2M_BOOTSTRAP_FILE") or Path.cwd() / "attached_assets" / "config.js")
DEFAULT_DEVICES_FILE = os.getenv("Y2M_DEVICES_FILE", "/opt/yandex2mqtt/config.js")


class AppSettings(BaseModel):
    """Where the yandex2mqtt configuration file lives."""

    model_config = ConfigDict(populate_by_name=True)

    devices_file_path: str = Field(default=DEFAULT_DEVICES_FILE, alias="devicesFilePath")

    def to_file(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


DEFAULTS = AppSettings().to_file()
_ALIASES = {name: field.alias for name, field in AppSettings.model_fields.items() if field.alias}


def load_app_settings(path: Union[str, Path] = SETTINGS_FILE) -> AppSettings:
    data = load_json(path)
    if data is None:
        _LOGGER.info("using default app settings")
        return AppSettings()
    if not isinstance(data, dict):
        _LOGGER.warning("app settings in %s are not an object, using defaults", path)
        return AppSettings()
    try:
        return AppSettings.model_validate({**DEFAULTS, **data})
    except ValidationError as e:
        _LOGGER.warning("invalid app settings in %s, using defaults: %s", path, e)
        return AppSettings()


def save_app_settings(path: Union[str, Path], settings: AppSettings) -> bool:
    try:
        save_json(path, settings.to_file())
    except OSError:
        _LOGGER.exception("failed to save app settings to %s", path)
        return False
    return True


def merge_app_settings(settings: AppSettings, updates: Optional[Dict[str, Any]]) -> AppSettings:
    """Apply a partial update; raises ValidationError on bad values."""
    patch = {_ALIASES.get(k, k): v for k, v in (updates or {}).items()}
    return AppSettings.model_validate({**settings.to_file(), **patch})
