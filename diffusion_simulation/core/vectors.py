"""
Three dimensional vector and ray primitives.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import ClassVar, Iterator

import numpy as np


@dataclass(frozen=True)
class Vec3:
    """Immutable 3-D vector.

    Equality is an exact component comparison, use :meth:`isclose` when a
    tolerance is needed.
    """

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    ZERO: ClassVar["Vec3"]
    X: ClassVar["Vec3"]
    Y: ClassVar["Vec3"]
    Z: ClassVar["Vec3"]

    @classmethod
    def from_array(cls, values) -> "Vec3":
        arr = np.asarray(values, dtype=float).reshape(3)
        return cls(float(arr[0]), float(arr[1]), float(arr[2]))

    def to_array(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z], dtype=float)

    def __iter__(self) -> Iterator[float]:
        return iter((self.x, self.y, self.z))

    def __add__(self, other: "Vec3") -> "Vec3":
        return Vec3(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: "Vec3") -> "Vec3":
        return Vec3(self.x - other.x, self.y - other.y, self.z - other.z)

    def __neg__(self) -> "Vec3":
        return Vec3(-self.x, -self.y, -self.z)

    def __mul__(self, scalar: float) -> "Vec3":
        return Vec3(self.x * scalar, self.y * scalar, self.z * scalar)

    __rmul__ = __mul__

    def __truediv__(self, scalar: float) -> "Vec3":
        return Vec3(self.x / scalar, self.y / scalar, self.z / scalar)

    def dot(self, other: "Vec3") -> float:
        return self.x * other.x + self.y * other.y + self.z * other.z

    def cross(self, other: "Vec3") -> "Vec3":
        return Vec3(
            self.y * other.z - self.z * other.y,
            self.z * other.x - self.x * other.z,
            self.x * other.y - self.y * other.x,
        )

    def magnitude(self) -> float:
        return math.sqrt(self.dot(self))

    def normalize(self) -> "Vec3":
        """Return the unit vector pointing in the same direction.

        Raises
        ------
        ValueError
            If the vector has zero length.
        """
        length = self.magnitude()
        if length == 0.0:
            raise ValueError(f"Cannot normalize a zero-length vector: {self.describe()}")
        return self / length

    def isclose(self, other: "Vec3", tolerance: float = 1e-6) -> bool:
        return (
            abs(self.x - other.x) <= tolerance
            and abs(self.y - other.y) <= tolerance
            and abs(self.z - other.z) <= tolerance
        )

    def describe(self) -> str:
        return f"Vec3({self.x:.6g}, {self.y:.6g}, {self.z:.6g})"


Vec3.ZERO = Vec3(0.0, 0.0, 0.0)
Vec3.X = Vec3(1.0, 0.0, 0.0)
Vec3.Y = Vec3(0.0, 1.0, 0.0)
Vec3.Z = Vec3(0.0, 0.0, 1.0)


@dataclass(frozen=True)
class Ray:
    """Half-line ``origin + direction * t`` carrying acoustic energy.

    The direction is not required to be a unit vector.
    """

    origin: Vec3
    direction: Vec3
    power: float = 0.0

    def at(self, time: float) -> Vec3:
        return self.origin + self.direction * time

    def normalized(self) -> "Ray":
        """Return the same ray with a unit direction."""
        return Ray(self.origin, self.direction.normalize(), self.power)

    def describe(self) -> str:
        return (
            f"Ray origin: {self.origin.describe()}, direction: {self.direction.describe()}, "
            f"power: {self.power:.6g}"
        )
