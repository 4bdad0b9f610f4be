"""JSON-ready conversion of detection results."""

from __future__ import annotations

import dataclasses
import json
from enum import Enum
from typing import Any, Mapping, Optional

import numpy as np


def to_serializable(obj: Any) -> Any:
    """Recursively convert results into plain JSON types.

    Dataclasses become dicts, enums their values, numpy scalars and arrays
    Python numbers and lists.
    """
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return {
            f.name: to_serializable(getattr(obj, f.name))
            for f in dataclasses.fields(obj)
        }
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, np.ndarray):
        return [to_serializable(v) for v in obj.tolist()]
    if isinstance(obj, np.bool_):
        return bool(obj)
    if isinstance(obj, np.integer):
        return int(obj)
    if isinstance(obj, np.floating):
        return float(obj)
    if isinstance(obj, Mapping):
        return {str(k): to_serializable(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [to_serializable(v) for v in obj]
    if isinstance(obj, Exception) and hasattr(obj, "to_dict"):
        return obj.to_dict()
    return obj


def result_to_json(obj: Any, indent: Optional[int] = None) -> str:
    """Serialize a result deterministically (sorted keys)."""
    return json.dumps(to_serializable(obj), indent=indent, sort_keys=True, ensure_ascii=False)


class SerializableResult:
    """Mixin giving frozen result dataclasses ``to_dict``/``to_json``."""

    def to_dict(self) -> dict:
        return to_serializable(self)

    def to_json(self, indent: Optional[int] = None) -> str:
        return result_to_json(self, indent=indent)
