from __future__ import annotations

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class ComplexNumber:
    re: float
    im: float

    def add(self, other: ComplexNumber) -> ComplexNumber:
        return ComplexNumber(self.re + other.re, self.im + other.im)

    def square(self) -> ComplexNumber:
        return ComplexNumber(self.re * self.re - self.im * self.im, 2.0 * self.re * self.im)

    def mod_squared(self) -> float:
        return self.re * self.re + self.im * self.im

    def mod(self) -> float:
        return math.sqrt(self.mod_squared())
