from __future__ import annotations

from abc import ABC, abstractmethod
from numbers import Real


class AttendanceCalculator(ABC):
    """Calculator interface (Strategy Pattern for attendance figures)."""

    @abstractmethod
    def percent(self, present: int, held: int) -> float:
        raise NotImplementedError

    @abstractmethod
    def safe_bunks_left(self, present: int, held: int, min_required_percent: Real) -> int:
        raise NotImplementedError
