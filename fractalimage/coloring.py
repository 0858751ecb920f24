"""Iteration count -> normalized colour index.

The shaping curves are empirical contrast stretches fitted once and kept with
their exact constants so renders stay reproducible.
"""

from __future__ import annotations

import enum
import math
from typing import Callable, Dict

RECLOG_A = 1.014009359709570
RECLOG_B = -17.04643869463363

BLEASDALE_A = 27.6277171798044
BLEASDALE_B = -26.6272707081079
BLEASDALE_THETA = 1.94519115131745


class ColoringFunction(enum.Enum):
    LINEAR = "linear"
    RECLOG = "reclog"
    BLEASDALE = "bleasdale"
    BLEASDALE_INV = "bleasdale_inv"


def linear_index(count: float, max_iterations: int) -> float:
    return 1 - count / max_iterations


def reclog(index: float) -> float:
    return 1 / (RECLOG_A + RECLOG_B * math.log(index))


def bleasdale(index: float) -> float:
    inner = BLEASDALE_A + BLEASDALE_B * math.pow(index, BLEASDALE_THETA)
    return index * math.pow(inner, -1 / BLEASDALE_THETA)


def inversion(index: float) -> float:
    return 1 - index


def bleasdale_inverse(index: float) -> float:
    return inversion(bleasdale(index))


_SHAPES: Dict[ColoringFunction, Callable[[float], float]] = {
    ColoringFunction.LINEAR: lambda x: x,
    ColoringFunction.RECLOG: reclog,
    ColoringFunction.BLEASDALE: bleasdale,
    ColoringFunction.BLEASDALE_INV: bleasdale_inverse,
}


def map_to_index(count: float, max_iterations: int, fn: ColoringFunction) -> float:
    """Shape the linear index of ``count``. The result is not range-bounded;
    math domain errors come back as NaN for ``clamp01`` to resolve."""
    linear = linear_index(count, max_iterations)
    try:
        return _SHAPES[fn](linear)
    except (ValueError, ZeroDivisionError, OverflowError):
        return math.nan


def clamp01(value: float) -> float:
    if math.isnan(value):
        return 0.0
    return min(1.0, max(0.0, value))
