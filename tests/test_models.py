import pytest

from y2m_device_store import utils
from y2m_device_store.models.configuration import default_configuration, normalize_configuration
from y2m_device_store.models.device import (
    DEVICE_ID_PREFIX,
    create_device,
    index_devices,
    merge_device,
    sorted_rooms,
)


def test_make_id_has_prefix_and_hex_suffix():
    new_id = utils.make_id("id_device")
    prefix, _, suffix = new_id.rpartition("_")
    assert prefix == "id_device"
    assert len(suffix) == 8
    int(suffix, 16)


def test_make_unique_id_avoids_existing(monkeypatch):
    ids = iter(["id_device_aaaaaaaa", "id_device_aaaaaaaa", "id_device_bbbbbbbb"])
    monkeypatch.setattr(utils, "make_id", lambda prefix: next(ids))
    assert utils.make_unique_id("id_device", {"id_device_aaaaaaaa"}) == "id_device_bbbbbbbb"


def test_create_device_overrides_id():
    device = create_device({"id": "mine", "room": "Hall"})
    assert device["id"].startswith(DEVICE_ID_PREFIX + "_")
    assert device["room"] == "Hall"


def test_merge_device_keeps_id_and_does_not_mutate():
    original = {"id": "a", "room": "Hall", "name": "Lamp"}
    merged = merge_device(original, {"id": "b", "room": "Loft"})
    assert merged == {"id": "a", "room": "Loft", "name": "Lamp"}
    assert original["room"] == "Hall"


def test_index_devices_last_wins_and_skips_bad_entries(caplog):
    indexed = index_devices([{"id": "a", "v": 1}, "junk", {"v": 2}, {"id": ""}, {"id": "a", "v": 3}])
    assert indexed == {"a": {"id": "a", "v": 3}}
    assert "skipping device" in caplog.text


def test_sorted_rooms():
    devices = [{"room": "Kitchen"}, {"room": "Hall"}, {"room": "Kitchen"}, {}, {"room": None}, {"room": ""}]
    assert sorted_rooms(devices) == ["Hall", "Kitchen"]


def test_default_configuration_is_fresh_each_call():
    first = default_configuration()
    first["devices"].append({"id": "x"})
    assert default_configuration()["devices"] == []


def test_normalize_fills_missing_sections_and_keeps_extras():
    config = normalize_configuration({"devices": [{"id": "a"}], "users": None, "notification": {"on": True}})
    assert config["mqtt"]["host"] == "localhost"
    assert config["users"] == []
    assert config["devices"] == [{"id": "a"}]
    assert config["notification"] == {"on": True}


@pytest.mark.parametrize("data", [
    [],
    "text",
    {"mqtt": "localhost"},
    {"clients": {}},
])
def test_normalize_rejects_wrong_shapes(data):
    with pytest.raises(ValueError):
        normalize_configuration(data)
