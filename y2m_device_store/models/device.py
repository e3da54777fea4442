import logging
from typing import Any, Container, Dict, Iterable, List, Optional

from y2m_device_store import utils

_LOGGER = logging.getLogger(__name__)

DEVICE_ID_PREFIX = "id_device"


def create_device(fields: Dict[str, Any], existing_ids: Container[str] = ()) -> Dict[str, Any]:
    """Build a new device record; the generated id replaces any id in ``fields``."""
    device_id = utils.make_unique_id(DEVICE_ID_PREFIX, existing_ids)
    return {**fields, "id": device_id}


def merge_device(device: Dict[str, Any], updates: Dict[str, Any]) -> Dict[str, Any]:
    # id is immutable
    return {**device, **updates, "id": device["id"]}


def device_room(device: Dict[str, Any]) -> Optional[str]:
    room = device.get("room")
    if isinstance(room, str) and room:
        return room
    return None


def index_devices(devices: Iterable[Any]) -> Dict[str, Dict[str, Any]]:
    """
    Key device records by id. Later entries win over earlier ones with the
    same id; anything that is not a dict with a string id is dropped.
    """
    indexed: Dict[str, Dict[str, Any]] = {}
    for d in devices or []:
        if not isinstance(d, dict):
            _LOGGER.warning("skipping device entry that is not an object: %r", d)
            continue
        device_id = d.get("id")
        if not isinstance(device_id, str) or not device_id:
            _LOGGER.warning("skipping device without id: %r", d)
            continue
        indexed[device_id] = d
    return indexed


def sorted_rooms(devices: Iterable[Dict[str, Any]]) -> List[str]:
    return sorted({r for r in (device_room(d) for d in devices) if r is not None})
