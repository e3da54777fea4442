import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from y2m_device_store import app_config
from y2m_device_store.app_config import AppSettings
from y2m_device_store.models.configuration import default_configuration, normalize_configuration
from y2m_device_store.models.device import create_device as build_device
from y2m_device_store.models.device import index_devices, merge_device, sorted_rooms
from y2m_device_store.storage import js_object
from y2m_device_store.storage.json_store import write_text_atomic

_LOGGER = logging.getLogger(__name__)


class ConfigStore:
    """
    Devices of a yandex2mqtt ``config.js`` kept in memory.

    The id -> device map is the source of truth for devices. The rest of the
    configuration (mqtt, https, clients, users) is held as parsed; its
    ``devices`` list is rebuilt from the map whenever the configuration is
    read or written.

    Construction loads the app settings and then the configuration file,
    falling back to defaults on any problem. Calls are expected to be
    serialized by the caller; nothing here is safe for concurrent mutation.
    """

    def __init__(self, settings_path: Union[str, Path, None] = None,
                 bootstrap_path: Union[str, Path, None] = None) -> None:
        self._settings_path = Path(settings_path) if settings_path else app_config.SETTINGS_FILE
        self._bootstrap_path = Path(bootstrap_path) if bootstrap_path else app_config.BOOTSTRAP_FILE
        self._devices: Dict[str, Dict[str, Any]] = {}
        self._configuration: Optional[Dict[str, Any]] = None
        self._app_settings = AppSettings()
        self._config_path = Path(self._app_settings.devices_file_path)

        self._load_app_settings()
        self._load_configuration()

    # ---- settings file

    def _load_app_settings(self) -> None:
        self._app_settings = app_config.load_app_settings(self._settings_path)
        self._config_path = Path(self._app_settings.devices_file_path)

    def _save_app_settings(self) -> bool:
        return app_config.save_app_settings(self._settings_path, self._app_settings)

    async def load_app_settings(self) -> AppSettings:
        self._load_app_settings()
        return self._app_settings

    async def save_app_settings(self) -> None:
        self._save_app_settings()

    # ---- configuration file

    def _read_config_text(self) -> str:
        try:
            return self._config_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            _LOGGER.warning("cannot read %s (%s), trying %s", self._config_path, e, self._bootstrap_path)
        return self._bootstrap_path.read_text(encoding="utf-8")

    def _load_configuration(self) -> None:
        try:
            text = self._read_config_text()
            config = normalize_configuration(js_object.load_module(text))
        except (OSError, UnicodeDecodeError, ValueError, RecursionError) as e:
            _LOGGER.error("failed to load configuration from %s, using defaults: %s", self._config_path, e)
            config = default_configuration()

        self._devices = index_devices(config.pop("devices"))
        self._configuration = config
        _LOGGER.info("configuration loaded: %d device(s)", len(self._devices))

    async def load_configuration(self) -> None:
        self._load_configuration()

    def _snapshot(self) -> Dict[str, Any]:
        return {**self._configuration, "devices": list(self._devices.values())}

    async def get_configuration(self) -> Dict[str, Any]:
        if self._configuration is None:
            self._load_configuration()
        return self._snapshot()

    async def save_configuration(self, config: Dict[str, Any]) -> None:
        """
        Replace the whole configuration and write it to the devices file.

        The device map is rebuilt from ``config["devices"]`` (last entry wins
        for a repeated id). Write errors are raised to the caller.
        """
        config = normalize_configuration(config)
        self._devices = index_devices(config.pop("devices"))
        self._configuration = config

        text = js_object.render_module(self._snapshot())
        write_text_atomic(self._config_path, text)
        _LOGGER.info("saved %d device(s) to %s", len(self._devices), self._config_path)

    # ---- devices

    async def get_devices(self) -> List[Dict[str, Any]]:
        return list(self._devices.values())

    async def get_device(self, device_id: str) -> Optional[Dict[str, Any]]:
        return self._devices.get(device_id)

    async def create_device(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        device = build_device(fields or {}, self._devices)
        self._devices[device["id"]] = device
        _LOGGER.debug("created device %s", device["id"])
        return device

    async def update_device(self, device_id: str, updates: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        device = self._devices.get(device_id)
        if device is None:
            return None
        updated = merge_device(device, updates or {})
        self._devices[device_id] = updated
        _LOGGER.debug("updated device %s", device_id)
        return updated

    async def delete_device(self, device_id: str) -> bool:
        if self._devices.pop(device_id, None) is None:
            return False
        _LOGGER.debug("deleted device %s", device_id)
        return True

    async def get_rooms(self) -> List[str]:
        return sorted_rooms(self._devices.values())

    # ---- app settings

    async def get_app_settings(self) -> AppSettings:
        return self._app_settings

    async def update_app_settings(self, updates: Dict[str, Any]) -> AppSettings:
        """
        Merge ``updates`` into the app settings. Pointing ``devicesFilePath``
        somewhere new reloads the configuration from there.
        """
        self._app_settings = app_config.merge_app_settings(self._app_settings, updates)

        new_path = Path(self._app_settings.devices_file_path)
        if new_path != self._config_path:
            _LOGGER.info("devices file changed: %s -> %s", self._config_path, new_path)
            self._config_path = new_path
            self._load_configuration()

        self._save_app_settings()
        return self._app_settings

    def get_devices_file_path(self) -> str:
        return self._app_settings.devices_file_path

    async def set_devices_file_path(self, path: str) -> None:
        await self.update_app_settings({"devicesFilePath": path})
