"""
Exceptions raised by the metric grid overlay.

Only ConfigurationError is expected to reach callers of the renderer.
The others are raised and handled inside a single redraw so that one bad
line, label or clip edge never aborts the rest of the frame.
"""

from typing import Optional, List, Tuple


class MetricGridError(Exception):
    """Base metric grid error."""
    def __init__(self, message: str, original_exception: Optional[Exception] = None):
        super().__init__(message)
        self.original_exception = original_exception


class ConfigurationError(MetricGridError, ValueError):
    """Raised at construction when a grid definition is missing or invalid."""
    pass


class ProjectionError(MetricGridError):
    """Raised when a forward or inverse transform is undefined for a coordinate."""
    def __init__(
        self,
        message: str,
        coordinates: Optional[Tuple[float, float]] = None,
        original_exception: Optional[Exception] = None
    ):
        super().__init__(message, original_exception)
        self.coordinates = coordinates


class DegenerateExtentError(MetricGridError):
    """Raised when the visible extent lies entirely outside the grid bounds."""
    pass


class FlattenerBudgetExceeded(MetricGridError):
    """Raised by a strict flatten when the iteration budget runs out.

    Attributes:
        points: The ordered partial polyline accumulated before the budget ran out
    """
    def __init__(self, message: str, points: List[Tuple[float, float]]):
        super().__init__(message)
        self.points = points
