from __future__ import annotations

import math
from typing import Optional, Tuple

from numba import njit

from fractalimage.complex_number import ComplexNumber

BAILOUT = 2.0
POWER = 2

# Returned by the evaluators for points that never escape.
IN_SET = None

_LOG_BAILOUT = math.log(BAILOUT)
_LOG_POWER = math.log(POWER)


@njit
def _orbit(re, im, max_iterations):
    # Iterate z <- z^2 + c from z = 0. Returns the loop index at which |z|
    # first exceeds the bailout radius together with that modulus, or -1.
    zr = 0.0
    zi = 0.0
    modulus = 0.0
    for i in range(max_iterations):
        zr, zi = zr * zr - zi * zi + re, 2.0 * zr * zi + im
        modulus = math.hypot(zr, zi)
        if modulus > BAILOUT:
            return i, modulus
    return -1, modulus


def orbit(c: ComplexNumber, max_iterations: int) -> Tuple[int, float]:
    index, modulus = _orbit(float(c.re), float(c.im), int(max_iterations))
    return int(index), float(modulus)


def escape_count(c: ComplexNumber, max_iterations: int) -> Optional[int]:
    index, _ = orbit(c, max_iterations)
    if index < 0:
        return IN_SET
    return index


def smooth_escape_count(c: ComplexNumber, max_iterations: int) -> Optional[float]:
    """Continuous escape count u = i + 1 + ln(ln M / ln|z_i|) / ln p.

    The result is real-valued and may fall outside [0, max_iterations); an
    escape modulus too large for float64 gives -inf, the limit of the formula.
    """
    index, modulus = orbit(c, max_iterations)
    if index < 0:
        return IN_SET
    if math.isinf(modulus):
        return -math.inf
    return index + 1 + math.log(_LOG_BAILOUT / math.log(modulus)) / _LOG_POWER


def evaluate(c: ComplexNumber, max_iterations: int, continuous: bool) -> Optional[float]:
    if continuous:
        return smooth_escape_count(c, max_iterations)
    count = escape_count(c, max_iterations)
    return None if count is None else float(count)
