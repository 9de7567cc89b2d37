"""
Hittable geometry and ray intersection utilities.

Every hittable object exposes ``hit(ray, frequency)`` which returns a
:class:`HitRecord` or ``None``. Hit tests never modify the object or the ray.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

import numpy as np

from .constants import DEFAULT_CONSTANTS, SimulationConstants
from .data_classes import HitRecord
from .vectors import Ray, Vec3


class Sphere:
    """Sphere defined by its origin and a positive radius."""

    def __init__(self, origin: Vec3, radius: float, constants: SimulationConstants = DEFAULT_CONSTANTS):
        if radius <= 0:
            raise ValueError(f"Sphere radius must be positive, got {radius}")
        self._origin = origin
        self._radius = float(radius)
        self.constants = constants

    @property
    def origin(self) -> Vec3:
        return self._origin

    @property
    def radius(self) -> float:
        return self._radius

    def normal(self, surface_point: Vec3) -> Vec3:
        return (surface_point - self._origin).normalize()

    def hit(self, ray: Ray, frequency: float) -> Optional[HitRecord]:
        """Intersect ``ray`` with the sphere surface.

        A ray starting inside the sphere hits it on the way out, a ray in
        front of the sphere hits the nearest side. Roots closer than
        ``constants.accuracy`` to the ray origin are treated as the surface
        the ray starts on and ignored.
        """
        eps = self.constants.accuracy
        offset = ray.origin - self._origin
        a = ray.direction.dot(ray.direction)
        if a == 0.0:
            return None
        beta = 2.0 * offset.dot(ray.direction)
        gamma = offset.dot(offset) - self._radius * self._radius
        discriminant = beta * beta - 4.0 * a * gamma

        if discriminant < 0:
            return None

        root = math.sqrt(discriminant)
        time1 = (-beta - root) / (2.0 * a)
        time2 = (-beta + root) / (2.0 * a)

        if time1 < -eps and time2 > eps:
            time = time2
        elif time1 > eps and time2 > eps:
            time = min(time1, time2)
        else:
            return None

        return HitRecord(time, self.normal(ray.at(time)), ray, frequency)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Sphere):
            return NotImplemented
        return type(self) is type(other) and self._origin == other._origin and self._radius == other._radius

    __hash__ = None

    def describe(self) -> str:
        return f"Sphere origin: {self._origin.describe()}, radius: {self._radius:g} [m]"

    def __repr__(self) -> str:
        return f"{type(self).__name__}(origin={self._origin!r}, radius={self._radius!r})"


class SphereWall(Sphere):
    """Enclosing sphere centred at the world origin."""

    def __init__(self, radius: Optional[float] = None, constants: SimulationConstants = DEFAULT_CONSTANTS):
        if radius is None:
            radius = constants.sphere_wall_radius
        super().__init__(Vec3.ZERO, radius, constants)

    def describe(self) -> str:
        return f"SphereWall origin: {self.origin.describe()}, radius: {self.radius:g} [m]"

    def __repr__(self) -> str:
        return f"SphereWall(radius={self.radius!r})"


def _validate_triangle_points(point1: Vec3, point2: Vec3, point3: Vec3, accuracy: float) -> float:
    """Check that three points form a proper triangle and return its area."""
    if point1 == point2 or point1 == point3 or point2 == point3:
        raise ValueError(
            "one point is duplicate of another\n"
            f"point 1: {point1.describe()}\n"
            f"point 2: {point2.describe()}\n"
            f"point 3: {point3.describe()}"
        )

    perpendicular = (point1 - point2).cross(point1 - point3)
    if perpendicular == Vec3.ZERO:
        raise ValueError(
            "points of the triangle cannot be at the same line\n"
            f"point 1: {point1.describe()}\n"
            f"point 2: {point2.describe()}\n"
            f"point 3: {point3.describe()}"
        )

    area = perpendicular.magnitude() / 2.0
    if area < accuracy:
        raise ValueError(f"area of triangle is too small: {area:.3g}")
    return area


class Triangle:
    """Flat triangle with cached area, unit normal and centroid.

    The cached attributes are recomputed whenever a vertex changes. Assigning
    a vertex that would make the triangle degenerate raises ``ValueError``
    and leaves the triangle untouched.
    """

    def __init__(
        self,
        point1: Vec3,
        point2: Vec3,
        point3: Vec3,
        constants: SimulationConstants = DEFAULT_CONSTANTS,
    ):
        self.constants = constants
        self._set_points(point1, point2, point3)

    def _set_points(self, point1: Vec3, point2: Vec3, point3: Vec3):
        area = _validate_triangle_points(point1, point2, point3, self.constants.accuracy)
        self._point1, self._point2, self._point3 = point1, point2, point3
        self._area = area
        self._normal = (point1 - point2).cross(point1 - point3).normalize()
        self._origin = (point1 + point2 + point3) / 3.0

    @property
    def point1(self) -> Vec3:
        return self._point1

    @point1.setter
    def point1(self, point: Vec3):
        self._set_points(point, self._point2, self._point3)

    @property
    def point2(self) -> Vec3:
        return self._point2

    @point2.setter
    def point2(self, point: Vec3):
        self._set_points(self._point1, point, self._point3)

    @property
    def point3(self) -> Vec3:
        return self._point3

    @point3.setter
    def point3(self, point: Vec3):
        self._set_points(self._point1, self._point2, point)

    @property
    def points(self) -> Tuple[Vec3, Vec3, Vec3]:
        return self._point1, self._point2, self._point3

    @property
    def area(self) -> float:
        return self._area

    @property
    def origin(self) -> Vec3:
        return self._origin

    def normal(self, surface_point: Optional[Vec3] = None) -> Vec3:
        return self._normal

    def contains(self, point: Vec3) -> bool:
        """Check whether a point of the triangle plane lies inside the triangle.

        The point splits the triangle into three sub-triangles; it is inside
        when their areas add up to the triangle area within
        ``constants.hit_accuracy``.
        """
        vec_a = self._point1 - point
        vec_b = self._point2 - point
        vec_c = self._point3 - point

        alpha = vec_b.cross(vec_c).magnitude() / 2.0
        beta = vec_c.cross(vec_a).magnitude() / 2.0
        gamma = vec_a.cross(vec_b).magnitude() / 2.0

        return alpha + beta + gamma <= self._area + self.constants.hit_accuracy

    def hit(self, ray: Ray, frequency: float) -> Optional[HitRecord]:
        parallel = ray.direction.dot(self._normal)
        if abs(parallel) <= self.constants.accuracy:
            return None

        time = (self._point3 - ray.origin).dot(self._normal) / parallel

        # Reject the surface the ray has just been reflected from
        if time < self.constants.hit_accuracy:
            return None

        if not self.contains(ray.at(time)):
            return None
        return HitRecord(time, self._normal, ray, frequency)

    def __eq__(self, other) -> bool:
        # Same vertices in any order describe the same triangle
        if not isinstance(other, Triangle):
            return NotImplemented
        return all(point in self.points for point in other.points)

    __hash__ = None

    def describe(self) -> str:
        return (
            f"Triangle vertices: {self._point1.describe()}, "
            f"{self._point2.describe()}, {self._point3.describe()}"
        )

    def __repr__(self) -> str:
        return f"Triangle({self._point1!r}, {self._point2!r}, {self._point3!r})"


@dataclass
class MeshGeometry:
    """Contiguous arrays of all model triangles for vectorised ray tests.

    Triangles are referred to by their row index.
    """

    point1: np.ndarray
    point2: np.ndarray
    point3: np.ndarray
    normals: np.ndarray
    areas: np.ndarray

    def __len__(self) -> int:
        return int(self.areas.shape[0])


def prepare_mesh_geometry(triangles: Sequence[Triangle]) -> MeshGeometry:
    """Pack validated triangles into a :class:`MeshGeometry` arena."""
    if len(triangles) == 0:
        empty = np.zeros((0, 3), dtype=float)
        return MeshGeometry(empty, empty.copy(), empty.copy(), empty.copy(), np.zeros(0, dtype=float))

    point1 = np.array([t.point1.to_array() for t in triangles], dtype=float)
    point2 = np.array([t.point2.to_array() for t in triangles], dtype=float)
    point3 = np.array([t.point3.to_array() for t in triangles], dtype=float)
    normals = np.array([t.normal().to_array() for t in triangles], dtype=float)
    areas = np.array([t.area for t in triangles], dtype=float)
    return MeshGeometry(point1=point1, point2=point2, point3=point3, normals=normals, areas=areas)


def ray_mesh_intersection(
    ray: Ray,
    geometry: MeshGeometry,
    frequency: float,
    constants: SimulationConstants = DEFAULT_CONSTANTS,
) -> Optional[Tuple[int, HitRecord]]:
    """Return the index and hit record of the nearest triangle hit, if any.

    Applies the same tests as :meth:`Triangle.hit` to every triangle of the
    arena at once.
    """
    if len(geometry) == 0:
        return None

    origin = ray.origin.to_array()
    direction = ray.direction.to_array()

    parallel = geometry.normals @ direction
    mask = np.abs(parallel) > constants.accuracy
    if not np.any(mask):
        return None

    safe_parallel = np.where(mask, parallel, 1.0)
    t = np.einsum("ij,ij->i", geometry.point3 - origin[np.newaxis, :], geometry.normals) / safe_parallel
    mask &= t >= constants.hit_accuracy
    if not np.any(mask):
        return None

    points = origin[np.newaxis, :] + t[:, np.newaxis] * direction[np.newaxis, :]
    vec_a = geometry.point1 - points
    vec_b = geometry.point2 - points
    vec_c = geometry.point3 - points
    alpha = np.linalg.norm(np.cross(vec_b, vec_c), axis=1) / 2.0
    beta = np.linalg.norm(np.cross(vec_c, vec_a), axis=1) / 2.0
    gamma = np.linalg.norm(np.cross(vec_a, vec_b), axis=1) / 2.0
    mask &= (alpha + beta + gamma) <= geometry.areas + constants.hit_accuracy
    if not np.any(mask):
        return None

    indices = np.where(mask)[0]
    best_idx = int(indices[np.argmin(t[indices])])
    normal = Vec3.from_array(geometry.normals[best_idx])
    return best_idx, HitRecord(float(t[best_idx]), normal, ray, frequency)
