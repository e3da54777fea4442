import json

import pytest

from y2m_device_store.storage.config_store import ConfigStore

SAMPLE_CONFIG = """\
// yandex2mqtt bridge settings
module.exports = {
    mqtt: {
        host: 'mqtt.home.lan',
        port: 1883,
        user: 'bridge',
        password: 'secret'
    },
    https: {
        privateKey: '/etc/letsencrypt/live/home.example/privkey.pem',
        certificate: '/etc/letsencrypt/live/home.example/fullchain.pem',
        port: 4433
    },
    clients: [
        {
            id: '1',
            name: 'Yandex',
            clientId: 'yandex-smart-home',
            clientSecret: 'client-secret',
            isTrusted: false
        },
    ],
    users: [
        {
            id: '1',
            username: 'admin',
            password: 'admin',
            name: 'Administrator'
        },
    ],
    devices: [
        {
            id: 'id_device_kitchen_light',
            name: 'Kitchen light',
            room: 'Kitchen',
            type: 'devices.types.light',
            mqtt: [
                {
                    instance: 'on',
                    set: '/yandex/controls/kitchen_light/on',
                    state: '/yandex/controls/kitchen_light/on/state',
                },
            ],
            valueMapping: [
                {
                    type: 'on_off',
                    mapping: [[false, true], [0, 1]], // [yandex, mqtt]
                },
            ],
            capabilities: [
                {
                    type: 'devices.capabilities.on_off',
                    retrievable: true,
                    state: {instance: 'on', value: false},
                },
            ],
        },
        {
            id: 'id_device_hall_sensor',
            name: 'Hall sensor',
            room: 'Hall',
            type: 'devices.types.sensor',
            properties: [
                {
                    type: 'devices.properties.float',
                    parameters: {instance: 'temperature', unit: 'unit.temperature.celsius'},
                },
            ],
        },
        {
            id: 'id_device_kitchen_socket',
            name: 'Kettle',
            room: 'Kitchen',
            type: 'devices.types.socket',
        },
    ],
};
"""


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "y2m" / "config.js"
    path.parent.mkdir()
    path.write_text(SAMPLE_CONFIG, encoding="utf-8")
    return path


@pytest.fixture
def settings_file(tmp_path, config_file):
    path = tmp_path / "app-settings.json"
    path.write_text(json.dumps({"devicesFilePath": str(config_file)}), encoding="utf-8")
    return path


@pytest.fixture
def make_store(tmp_path):
    def _make(settings_path=None, bootstrap_path=None):
        return ConfigStore(
            settings_path=settings_path or tmp_path / "app-settings.json",
            bootstrap_path=bootstrap_path or tmp_path / "no-bootstrap.js",
        )
    return _make


@pytest.fixture
def store(make_store, settings_file):
    return make_store(settings_file)
