"""Numeric and rectangle helpers.

This module provides small pure utilities for:
- Half-up rounding (glyph geometry snaps to whole pixels)
- Decimal rounding of descriptor values
- Power-of-two sizes
- Axis-aligned rectangle tests used by the packer

All functions are pure and stateless.
"""

import math
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any


def round_half_up(value: float) -> int:
    """Round to the nearest integer, rounding halves up.

    Python's round() rounds halves to even, which would shift glyph
    images by a pixel for exact .5 bounds.

    Examples:
        >>> round_half_up(2.5)
        3
        >>> round_half_up(-2.5)
        -2
    """
    return math.floor(value + 0.5)


def round_number(value: float, decimals: int) -> float:
    """Round a float to a fixed number of decimals, halves up.

    Args:
        value: Number to round
        decimals: Decimal places to keep

    Returns:
        Rounded value

    Examples:
        >>> round_number(1.23456, 2)
        1.23
        >>> round_number(0.125, 2)
        0.13
    """
    if not math.isfinite(value):
        return value
    quantum = Decimal(1).scaleb(-decimals)
    return float(Decimal(repr(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def round_all_values(data: Any, decimals: int) -> Any:
    """Round every float in a nested structure.

    Integers, booleans and strings are left untouched. Returns a new
    structure; the input is not modified.

    Args:
        data: Nested dicts, lists and tuples of values
        decimals: Decimal places to keep

    Returns:
        Structure of the same shape with floats rounded
    """
    if isinstance(data, bool):
        return data
    if isinstance(data, float):
        return round_number(data, decimals)
    if isinstance(data, dict):
        return {key: round_all_values(value, decimals) for key, value in data.items()}
    if isinstance(data, list):
        return [round_all_values(value, decimals) for value in data]
    if isinstance(data, tuple):
        return tuple(round_all_values(value, decimals) for value in data)
    return data


def next_power_of_two(value: int) -> int:
    """Smallest power of two greater than or equal to value.

    Examples:
        >>> next_power_of_two(100)
        128
        >>> next_power_of_two(64)
        64
    """
    if value <= 0:
        return 0
    return 1 << (value - 1).bit_length()


@dataclass(slots=True)
class Rect:
    """Axis-aligned integer rectangle.

    Attributes:
        x: Left edge
        y: Top edge
        width: Width
        height: Height
    """

    x: int
    y: int
    width: int
    height: int

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def bottom(self) -> int:
        return self.y + self.height

    def area(self) -> int:
        return self.width * self.height

    def collides(self, other: "Rect") -> bool:
        """Check if the two rectangles overlap with positive area."""
        return (
            other.x < self.right
            and other.y < self.bottom
            and other.right > self.x
            and other.bottom > self.y
        )

    def contains(self, other: "Rect") -> bool:
        """Check if other lies entirely inside this rectangle."""
        return (
            other.x >= self.x
            and other.y >= self.y
            and other.right <= self.right
            and other.bottom <= self.bottom
        )
