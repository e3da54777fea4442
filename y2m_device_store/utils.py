from typing import Container
import uuid


def make_id(prefix="dv"):
    return f"{prefix}_{uuid.uuid4().hex[:8]}"


def make_unique_id(prefix: str, existing: Container[str]) -> str:
    new_id = make_id(prefix)
    while new_id in existing:
        new_id = make_id(prefix)
    return new_id
