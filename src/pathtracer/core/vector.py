"""Host-side vector, point and color types.

These immutable triples are used when building scenes and cameras from
Python. Keeping positions, directions and colors in distinct types makes
mistakes such as adding two positions fail loudly:

    Point3 - Point3 -> Vec3
    Point3 + Vec3   -> Point3
    Point3 - Vec3   -> Point3
    Point3 + Point3 -> TypeError

Kernel code uses ``taichi.math.vec3`` instead; ``to_list()`` converts a host
value into the form Taichi fields accept.

Example:
    >>> from pathtracer.core.vector import Point3, Vec3
    >>> d = Point3(1.0, 2.0, 3.0) - Point3(0.0, 0.0, 0.0)
    >>> d.length_squared()
    14.0
"""

from __future__ import annotations

import math
from collections.abc import Iterator
from dataclasses import dataclass

import numpy as np

# Scatter directions shorter than this are treated as degenerate
NEAR_ZERO_EPSILON = 1e-8

_SCALAR_TYPES = (int, float, np.floating)


@dataclass(frozen=True)
class Vec3:
    """A free direction or displacement in 3D space."""

    x: float
    y: float
    z: float

    def __iter__(self) -> Iterator[float]:
        return iter((self.x, self.y, self.z))

    def __add__(self, other: Vec3) -> Vec3:
        if not isinstance(other, Vec3):
            return NotImplemented
        return Vec3(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: Vec3) -> Vec3:
        if not isinstance(other, Vec3):
            return NotImplemented
        return Vec3(self.x - other.x, self.y - other.y, self.z - other.z)

    def __neg__(self) -> Vec3:
        return Vec3(-self.x, -self.y, -self.z)

    def __mul__(self, scalar: float) -> Vec3:
        if not isinstance(scalar, _SCALAR_TYPES):
            return NotImplemented
        return Vec3(self.x * scalar, self.y * scalar, self.z * scalar)

    __rmul__ = __mul__

    def __truediv__(self, scalar: float) -> Vec3:
        if not isinstance(scalar, _SCALAR_TYPES):
            return NotImplemented
        return Vec3(self.x / scalar, self.y / scalar, self.z / scalar)

    def dot(self, other: Vec3) -> float:
        return self.x * other.x + self.y * other.y + self.z * other.z

    def cross(self, other: Vec3) -> Vec3:
        return Vec3(
            self.y * other.z - self.z * other.y,
            self.z * other.x - self.x * other.z,
            self.x * other.y - self.y * other.x,
        )

    def length_squared(self) -> float:
        return self.dot(self)

    def length(self) -> float:
        return math.sqrt(self.length_squared())

    def normalize(self) -> Vec3:
        """Return the unit vector in the same direction.

        Raises:
            ValueError: If the vector has zero length.
        """
        length = self.length()
        if length == 0.0:
            raise ValueError("Cannot normalize a zero-length vector")
        return self / length

    def near_zero(self) -> bool:
        """Check if all components are within NEAR_ZERO_EPSILON of zero."""
        return all(abs(c) < NEAR_ZERO_EPSILON for c in self)

    def to_list(self) -> list[float]:
        return [self.x, self.y, self.z]


@dataclass(frozen=True)
class Point3:
    """A position in 3D space."""

    x: float
    y: float
    z: float

    def __iter__(self) -> Iterator[float]:
        return iter((self.x, self.y, self.z))

    def __add__(self, other: Vec3) -> Point3:
        if not isinstance(other, Vec3):
            return NotImplemented
        return Point3(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: Point3 | Vec3) -> Vec3 | Point3:
        if isinstance(other, Point3):
            return Vec3(self.x - other.x, self.y - other.y, self.z - other.z)
        if isinstance(other, Vec3):
            return Point3(self.x - other.x, self.y - other.y, self.z - other.z)
        return NotImplemented

    def to_list(self) -> list[float]:
        return [self.x, self.y, self.z]


@dataclass(frozen=True)
class Color:
    """A linear RGB color (each channel nominally in [0, 1])."""

    r: float
    g: float
    b: float

    def __iter__(self) -> Iterator[float]:
        return iter((self.r, self.g, self.b))

    def __add__(self, other: Color) -> Color:
        if not isinstance(other, Color):
            return NotImplemented
        return Color(self.r + other.r, self.g + other.g, self.b + other.b)

    def __mul__(self, other: Color | float) -> Color:
        if isinstance(other, Color):
            return Color(self.r * other.r, self.g * other.g, self.b * other.b)
        if isinstance(other, _SCALAR_TYPES):
            return Color(self.r * other, self.g * other, self.b * other)
        return NotImplemented

    __rmul__ = __mul__

    def __truediv__(self, scalar: float) -> Color:
        if not isinstance(scalar, _SCALAR_TYPES):
            return NotImplemented
        return Color(self.r / scalar, self.g / scalar, self.b / scalar)

    def lerp(self, end: Color, t: float) -> Color:
        """Linearly interpolate from this color to ``end``.

        Raises:
            ValueError: If t is outside [0, 1].
        """
        if not 0.0 <= t <= 1.0:
            raise ValueError(f"Interpolation parameter t = {t} is outside [0, 1]")
        return (1.0 - t) * self + t * end

    def to_list(self) -> list[float]:
        return [self.r, self.g, self.b]


def random_color(rng: np.random.Generator, low: float = 0.0, high: float = 1.0) -> Color:
    """Draw a color with each channel uniform in [low, high).

    Args:
        rng: NumPy random generator owned by the caller.
        low: Lower bound of each channel.
        high: Upper bound of each channel (exclusive).

    Returns:
        A random Color.

    Raises:
        ValueError: If low >= high.
    """
    if low >= high:
        raise ValueError(f"Color range is empty: low = {low} must be less than high = {high}")
    r, g, b = rng.uniform(low, high, size=3)
    return Color(float(r), float(g), float(b))


def as_point3(value: Point3 | tuple[float, float, float]) -> Point3:
    """Coerce a tuple or Point3 into a Point3."""
    if isinstance(value, Point3):
        return value
    x, y, z = value
    return Point3(float(x), float(y), float(z))


def as_vec3(value: Vec3 | tuple[float, float, float]) -> Vec3:
    """Coerce a tuple or Vec3 into a Vec3."""
    if isinstance(value, Vec3):
        return value
    x, y, z = value
    return Vec3(float(x), float(y), float(z))


def as_color(value: Color | tuple[float, float, float]) -> Color:
    """Coerce a tuple or Color into a Color."""
    if isinstance(value, Color):
        return value
    r, g, b = value
    return Color(float(r), float(g), float(b))
