from typing import Any, Dict

SECTIONS = ("mqtt", "https", "clients", "users", "devices")


def default_configuration() -> Dict[str, Any]:
    return {
        "mqtt": {"host": "localhost", "port": 1883, "user": "", "password": ""},
        "https": {"privateKey": "", "certificate": "", "port": 443},
        "clients": [],
        "users": [],
        "devices": [],
    }


def normalize_configuration(data: Any) -> Dict[str, Any]:
    """
    Shape parsed file content into a configuration aggregate.

    Sections the file omits get their default value; sections of the wrong
    type raise ValueError. Extra top-level keys are kept as they are.
    """
    if not isinstance(data, dict):
        raise ValueError(f"configuration must be an object, got {type(data).__name__}")

    defaults = default_configuration()
    config = {**defaults, **data}
    for key in ("mqtt", "https"):
        if not isinstance(config[key], dict):
            raise ValueError(f"'{key}' must be an object")
    for key in ("clients", "users", "devices"):
        if config[key] is None:
            config[key] = []
        elif not isinstance(config[key], list):
            raise ValueError(f"'{key}' must be an array")
    return config
