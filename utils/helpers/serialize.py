from dataclasses import fields, is_dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any


def to_camel(name: str) -> str:
    """snake_case -> camelCase, the casing the front end and the request schemas use."""
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


def to_json(value: Any) -> Any:
    """
    Convert engine dataclasses into JSON-friendly dicts with camelCase keys.

    Computed properties that are part of a record's public shape (such as a
    makeup record's `status`) are included alongside the stored fields.
    """
    if is_dataclass(value) and not isinstance(value, type):
        out = {to_camel(f.name): to_json(getattr(value, f.name)) for f in fields(value)}
        for prop in ("status", "balance"):
            attr = getattr(type(value), prop, None)
            if isinstance(attr, property):
                out[prop] = to_json(getattr(value, prop))
        return out
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: to_json(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_json(v) for v in value]
    return value
