from __future__ import annotations

import math
from fractions import Fraction
from numbers import Real

from .base import AttendanceCalculator


def _exact(value: Real) -> Fraction:
    # str() first so 75.5 means 151/2 rather than its binary float expansion.
    return Fraction(str(value))


class StandardAttendanceCalculator(AttendanceCalculator):
    """Standard rule: percent = present/held*100; safe bunks from the required ratio.

    Safe bunks left is the largest x >= 0 with present / (held + x) >= req,
    i.e. floor(present / req - held), evaluated in exact rationals so a ratio
    sitting exactly on the threshold yields 0 rather than -1 from float error.
    """

    def percent(self, present: int, held: int) -> float:
        if held <= 0:
            return 0.0
        return present / held * 100

    def safe_bunks_left(self, present: int, held: int, min_required_percent: Real) -> int:
        req = _exact(min_required_percent) / 100
        if req <= 0:
            return 0
        x = math.floor(Fraction(int(present)) / req - int(held))
        return max(0, x)
