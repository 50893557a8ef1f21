"""
JSON serialization utilities for converting analysis objects to JSON-serializable types.

This module provides utilities for recursively converting complex Python objects
(value objects with ``to_dict``, NumPy arrays and scalars, datetimes) into JSON-serializable formats.
"""

import math
from datetime import datetime
from typing import Any

import numpy as np


def serialize_for_json(obj: Any) -> Any:
    """
    Recursively convert analysis objects and numpy values to JSON-serializable types.

    This function handles:
    - Objects exposing ``to_dict()`` (converted, then processed recursively)
    - Dictionaries (recursively processes values)
    - Lists and tuples (recursively processes elements)
    - NumPy arrays and scalars (converted to Python primitives)
    - Non-finite floats (converted to None, JSON has no NaN)
    - datetimes (ISO 8601 strings)

    Args:
        obj: Object to serialize (can be of any type)

    Returns:
        JSON-serializable representation of the object

    Examples:
        >>> serialize_for_json({"data": np.float64(3.14)})
        {'data': 3.14}
        >>> serialize_for_json([np.nan, 1.0])
        [None, 1.0]
    """
    if hasattr(obj, "to_dict") and callable(obj.to_dict):
        return serialize_for_json(obj.to_dict())

    if isinstance(obj, dict):
        return {str(k): serialize_for_json(v) for k, v in obj.items()}

    if isinstance(obj, (list, tuple)):
        return [serialize_for_json(v) for v in obj]

    if isinstance(obj, np.ndarray):
        return [serialize_for_json(v) for v in obj.tolist()]

    if isinstance(obj, np.generic):
        return serialize_for_json(obj.item())

    if isinstance(obj, float):
        return obj if math.isfinite(obj) else None

    if isinstance(obj, datetime):
        return obj.isoformat()

    if isinstance(obj, (str, int, bool)) or obj is None:
        return obj

    return str(obj)
