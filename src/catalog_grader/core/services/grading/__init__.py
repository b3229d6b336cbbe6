"""Human grading queue."""

from .queue import GradingQueue

__all__ = ["GradingQueue"]
