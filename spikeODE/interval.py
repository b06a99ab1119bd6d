from dataclasses import dataclass
from enum import Enum


class IntervalType(Enum):
    """Which borders of an `Interval` belong to it."""

    CLOSED = "closed"
    LEFT_CLOSED_RIGHT_OPEN = "left_closed_right_open"
    LEFT_OPEN_RIGHT_CLOSED = "left_open_right_closed"
    OPEN = "open"


@dataclass(frozen=True)
class Interval:
    r"""
    Immutable numeric range $[min, max]$.

    Used as descriptive metadata of an activation (typical internal state range,
    output range). Instances are computed per membrane and never modified.

    Attributes:
        min: Lower border.
        max: Upper border.
    """

    min: float
    max: float

    def __post_init__(self):
        if self.min > self.max:
            raise ValueError(
                f"Interval min ({self.min}) must not be greater than max ({self.max})"
            )

    @property
    def mid(self) -> float:
        return self.min + (self.max - self.min) / 2.0

    @property
    def span(self) -> float:
        return self.max - self.min

    def belongs_to(
        self, value: float, interval_type: IntervalType = IntervalType.CLOSED
    ) -> bool:
        if interval_type == IntervalType.CLOSED:
            return self.min <= value <= self.max
        if interval_type == IntervalType.LEFT_CLOSED_RIGHT_OPEN:
            return self.min <= value < self.max
        if interval_type == IntervalType.LEFT_OPEN_RIGHT_CLOSED:
            return self.min < value <= self.max
        return self.min < value < self.max

    def rescale(self, value: float, value_range: "Interval") -> float:
        r"""
        Linearly maps `value` from `value_range` into this interval.

        $$x' = min + \frac{x - r_{min}}{r_{span}} \cdot span$$

        Raises:
            ValueError: If `value_range` has zero span.
        """
        if value_range.span == 0:
            raise ValueError("Cannot rescale from an interval with zero span")
        return self.min + ((value - value_range.min) / value_range.span) * self.span
