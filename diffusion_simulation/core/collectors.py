"""
Energy collectors and their placement around the model.
"""

from __future__ import annotations

import math
from typing import Dict, List, Optional

from .constants import DEBUG, DEFAULT_CONSTANTS, SimulationConstants
from .data_classes import HitRecord
from .geometry import Sphere
from .vectors import Vec3


class EnergyCollector(Sphere):
    """Spherical sensor accumulating ray energy by arrival time.

    ``energy`` maps the arrival time in seconds (measured from ray emission)
    to the energy accumulated at that time.
    """

    def __init__(self, origin: Vec3, radius: float, constants: SimulationConstants = DEFAULT_CONSTANTS):
        super().__init__(origin, radius, constants)
        self.energy: Dict[float, float] = {}

    def collect_energy(self, hit: HitRecord, arrival_time: Optional[float] = None, weight: float = 1.0):
        """Add the energy carried by ``hit`` at ``arrival_time``.

        Parameters
        ----------
        hit : HitRecord
            Hit of a ray with this collector.
        arrival_time : float, optional
            Time since the ray was emitted. The caller is responsible for
            accumulating it over all reflections; defaults to ``hit.time``.
        weight : float
            Fraction of the ray energy given to this collector.
        """
        time = hit.time if arrival_time is None else arrival_time
        if time < 0:
            raise ValueError(f"Arrival time cannot be less than 0, got {time} s in {self.describe()}")
        self.energy[time] = self.energy.get(time, 0.0) + hit.energy * weight

    def distance_at(self, point: Vec3) -> float:
        return (self.origin - point).magnitude()

    def total_energy(self) -> float:
        return float(sum(self.energy.values()))

    def __eq__(self, other) -> bool:
        if not isinstance(other, EnergyCollector):
            return NotImplemented
        return self.origin == other.origin and self.radius == other.radius and self.energy == other.energy

    __hash__ = None

    def describe(self) -> str:
        return f"Energy Collector. Origin: {self.origin.describe()}, Radius: {self.radius:g}"


def _arc_angles(num_collectors: int) -> tuple[float, int]:
    """Return the angular step and number of steps of one placement arc."""
    if num_collectors % 2 == 1:
        steps = (num_collectors - 1) // 2
    else:
        steps = (num_collectors - 2) // 2
    return math.pi / steps, steps


def build_collectors(
    model,
    num_collectors: int,
    constants: SimulationConstants = DEFAULT_CONSTANTS,
) -> List[EnergyCollector]:
    """Place ``num_collectors`` energy collectors on the simulation sphere.

    Collectors lie on two perpendicular vertical half-circles of radius
    ``constants.simulation_radius``: the XZ arc from +X over the top to -X,
    then the YZ arc from +Y over the top to -Y. Neighbours on an arc are
    ``theta`` apart, with ``theta = 2*pi/(n - 1)`` for odd ``n`` and
    ``theta = 2*pi/(n - 2)`` for even ``n``. For odd ``n`` one collector sits
    at the top pole and is shared by both arcs; for even ``n`` the pole falls
    between two collectors of each arc.

    The collector radius equals the chord between neighbours,
    ``R * sqrt(2 - 2*cos(theta))``, so neighbouring collectors overlap and
    the arcs have no gaps.

    Parameters
    ----------
    model : Model
        Model the collectors surround. It must not be empty.
    num_collectors : int
        Number of collectors; at least 4, and either ``n`` or ``n - 1``
        divisible by 4.
    constants : SimulationConstants
        Provides the placement radius.

    Returns
    -------
    list of EnergyCollector
        Collectors in placement order.
    """
    if model.is_empty:
        raise ValueError("Cannot build energy collectors around an empty model")
    if num_collectors < 4:
        raise ValueError(f"numCollectors: {num_collectors} is less than 4")
    if num_collectors % 4 != 0 and (num_collectors - 1) % 4 != 0:
        raise ValueError(
            "numCollectors or numCollectors-1 has to be divisible by 4, "
            f"got numCollectors = {num_collectors}"
        )

    radius = constants.simulation_radius
    theta, steps = _arc_angles(num_collectors)
    collector_radius = radius * math.sqrt(2.0 - 2.0 * math.cos(theta))
    has_pole = num_collectors % 2 == 1

    collectors: List[EnergyCollector] = []
    for index in range(steps + 1):
        angle = index * theta
        origin = Vec3(radius * math.cos(angle), 0.0, radius * math.sin(angle))
        collectors.append(EnergyCollector(origin, collector_radius, constants))

    pole_index = steps // 2 if has_pole else None
    for index in range(steps + 1):
        if index == pole_index:
            continue
        angle = index * theta
        origin = Vec3(0.0, radius * math.cos(angle), radius * math.sin(angle))
        collectors.append(EnergyCollector(origin, collector_radius, constants))

    if has_pole:
        # The pole of the XZ arc is computed from cos(pi/2); pin it exactly
        collectors[pole_index] = EnergyCollector(Vec3(0.0, 0.0, radius), collector_radius, constants)

    if DEBUG:
        print(f"[debug] Built {len(collectors)} collectors, radius {collector_radius:.4f} m, "
              f"angular step {math.degrees(theta):.3f} deg")
    return collectors
