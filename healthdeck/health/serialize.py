"""Bounded-depth conversion of resources, targets and results to plain data.

Resources can point back at each other (a global resource keeps the whole
fleet, itself included), so the walk stops after ``depth`` levels and
renders anything deeper as ``None``.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from datetime import datetime
from enum import Enum
from typing import Any

DEFAULT_DEPTH = 6


def to_mapping(value: Any, depth: int = DEFAULT_DEPTH) -> Any:
    if depth <= 0:
        return None
    if value is None or isinstance(value, (bool, int, float)):
        return value
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, str):
        return value
    if isinstance(value, datetime):
        return value.isoformat()

    as_mapping = getattr(value, "as_mapping", None)
    if callable(as_mapping):
        value = as_mapping()
    elif dataclasses.is_dataclass(value) and not isinstance(value, type):
        value = {f.name: getattr(value, f.name) for f in dataclasses.fields(value)}

    if isinstance(value, Mapping):
        return {str(_key(k)): to_mapping(v, depth - 1) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [to_mapping(v, depth - 1) for v in value]
    return str(value)


def _key(k: Any) -> Any:
    return k.value if isinstance(k, Enum) else k
