"""Lenient numeric parameter handling shared by the chunking and retrieval engines."""
import math
from typing import Any


def coerce_int(value: Any, default: int) -> int:
    """
    Round a loosely typed numeric value down to an int.

    Args:
        value: Anything ``float()`` accepts (int, float, numeric string)
        default: Returned when the value is missing, non-numeric or not finite

    Returns:
        The floored integer value or the default
    """
    if value is None:
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if math.isnan(number) or math.isinf(number):
        return default
    return math.floor(number)
