"""Copy log payloads, hiding byte fields marked for masking.

A dataclass field is marked by ``field(metadata={"mask": True})``.
"""

from __future__ import annotations

import copy
import dataclasses
from typing import Any

MASK_TAG = "mask"
SLICE_BYTE_MASK = b"X@BQ1"


def _is_container(value: Any) -> bool:
    return isinstance(value, (list, tuple, dict)) or (
        dataclasses.is_dataclass(value) and not isinstance(value, type)
    )


def _mask_dataclass(data: Any) -> Any:
    clone = copy.copy(data)
    for f in dataclasses.fields(data):
        value = getattr(data, f.name)
        if value is None:
            continue
        if isinstance(value, (bytes, bytearray)):
            new_value = SLICE_BYTE_MASK if MASK_TAG in f.metadata else value
        elif _is_container(value):
            new_value = mask(value)
        else:
            new_value = value
        object.__setattr__(clone, f.name, new_value)
    return clone


def _mask_sequence(data: list | tuple) -> list | tuple:
    items = [mask(item) if _is_container(item) else item for item in data]
    return type(data)(items) if isinstance(data, tuple) else items


def _mask_mapping(data: dict) -> dict:
    result = {}
    for key, value in data.items():
        if value is None:
            continue
        result[key] = mask(value) if _is_container(value) else value
    return result


def mask(data: Any) -> Any:
    """Return a copy of ``data`` with marked byte fields replaced.

    Dataclasses are copied field by field, lists and tuples element by
    element, and dicts entry by entry (entries holding ``None`` are
    dropped). Anything else is returned as it is.
    """
    if data is None:
        return None
    if dataclasses.is_dataclass(data) and not isinstance(data, type):
        return _mask_dataclass(data)
    if isinstance(data, (list, tuple)):
        return _mask_sequence(data)
    if isinstance(data, dict):
        return _mask_mapping(data)
    return data