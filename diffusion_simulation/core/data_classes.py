"""
Data classes for the acoustic diffusion simulation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List

from .vectors import Ray, Vec3


@dataclass(frozen=True)
class HitRecord:
    """Result of a successful ray/object intersection test.

    Attributes
    ----------
    time : float
        Ray parameter at which the hit occurs, ``ray.at(time)`` is the
        collision point.
    normal : Vec3
        Unit surface normal at the collision point.
    ray : Ray
        The ray that produced the hit.
    frequency : float
        Frequency (Hz) the ray belongs to.
    """

    time: float
    normal: Vec3
    ray: Ray
    frequency: float

    @property
    def collision_point(self) -> Vec3:
        return self.ray.at(self.time)

    @property
    def energy(self) -> float:
        return self.ray.power

    @property
    def origin(self) -> Vec3:
        return self.ray.origin

    @property
    def direction(self) -> Vec3:
        return self.ray.direction

    def describe(self) -> str:
        return (
            f"HitRecord time: {self.time:.6g}, collision point: {self.collision_point.describe()}, "
            f"normal: {self.normal.describe()}, frequency: {self.frequency:g} Hz, "
            f"energy: {self.energy:.6g}"
        )


@dataclass
class RayTracking:
    """Consecutive segments travelled by one ray, kept for visualisation."""

    frequency: float
    segments: List[HitRecord] = field(default_factory=list)


@dataclass
class SimulationResults:
    """Outcome of a full run for one model.

    Attributes
    ----------
    diffusion_coefficients : dict
        Frequency (Hz) -> diffusion coefficient.
    sound_pressure_levels : dict
        Frequency (Hz) -> level (dB) of every collector, in collector order.
    """

    diffusion_coefficients: Dict[float, float]
    sound_pressure_levels: Dict[float, List[float]]
