"""
Ray bouncing and the per-frequency simulation driver.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from tqdm import tqdm

from .collectors import EnergyCollector, build_collectors
from .constants import DEBUG, DEFAULT_CONSTANTS, SimulationConstants
from .data_classes import HitRecord, RayTracking
from .generators import PointSpeakerRayFactory
from .geometry import SphereWall, ray_mesh_intersection
from .model import Model
from .vectors import Ray


class EnergyCollectionRules:
    """Decides how much of a ray's energy a struck collector receives."""

    name = "Energy collection rules"

    def weight(self, collector: EnergyCollector, hit: HitRecord) -> float:
        raise NotImplementedError

    def collect(self, collector: EnergyCollector, hit: HitRecord, arrival_time: float):
        weight = self.weight(collector, hit)
        if weight > 0.0:
            collector.collect_energy(hit, arrival_time, weight)

    def describe(self) -> str:
        return self.name


class OriginalCollectionRules(EnergyCollectionRules):
    """Every struck collector receives the full ray energy."""

    name = "Original collection rules"

    def weight(self, collector: EnergyCollector, hit: HitRecord) -> float:
        return 1.0


class LinearCollectionRules(EnergyCollectionRules):
    """Energy falls linearly with the distance of the ray from the collector centre."""

    name = "Linear collection rules"

    def weight(self, collector: EnergyCollector, hit: HitRecord) -> float:
        ray = hit.ray
        closest_time = (collector.origin - ray.origin).dot(ray.direction) / ray.direction.dot(ray.direction)
        distance = collector.distance_at(ray.at(closest_time))
        return max(0.0, 1.0 - distance / collector.radius)


COLLECTION_RULES = {
    "original": OriginalCollectionRules,
    "linear": LinearCollectionRules,
}


def get_collection_rules(name: str) -> EnergyCollectionRules:
    try:
        return COLLECTION_RULES[name]()
    except KeyError:
        raise ValueError(
            f"Unknown energy collection rules '{name}', expected one of {sorted(COLLECTION_RULES)}"
        ) from None


class SampledPositionTracker:
    """Keeps the paths of an evenly spaced subset of rays.

    Out of a grid of ``num_of_rays_along_each_axis**2`` rays, roughly
    ``num_of_visible_rays_along_each_axis**2`` are recorded.
    """

    def __init__(self, num_of_rays_along_each_axis: int, num_of_visible_rays_along_each_axis: int):
        errors = []
        if num_of_rays_along_each_axis < 1:
            errors.append("Number of rays along each axis cannot be less than 1")
        if num_of_visible_rays_along_each_axis < 1:
            errors.append("Number of visible rays along each axis cannot be less than 1")
        elif num_of_visible_rays_along_each_axis > num_of_rays_along_each_axis:
            errors.append("Number of visible rays cannot exceed the number of rays")
        if errors:
            raise ValueError("Invalid SampledPositionTracker settings:\n" + "\n".join(errors))

        self.num_of_rays_along_each_axis = num_of_rays_along_each_axis
        self.num_of_visible_rays_along_each_axis = num_of_visible_rays_along_each_axis
        self.trackings: Dict[float, List[RayTracking]] = {}
        self._frequency: Optional[float] = None
        self._tracking_number = 0
        self._current: Optional[RayTracking] = None

    def is_sampling(self, tracking_number: int) -> bool:
        x_index = tracking_number % self.num_of_rays_along_each_axis
        y_index = tracking_number // self.num_of_rays_along_each_axis
        divider = self.num_of_rays_along_each_axis // self.num_of_visible_rays_along_each_axis
        return x_index % divider == 0 and y_index % divider == 0

    def initialize_new_frequency(self, frequency: float):
        self._frequency = frequency
        self._tracking_number = 0
        self.trackings[frequency] = []

    def initialize_new_tracking(self):
        if self._frequency is None:
            raise ValueError("initialize_new_frequency() must be called before tracking rays")
        if self.is_sampling(self._tracking_number):
            self._current = RayTracking(self._frequency)
        else:
            self._current = None
        self._tracking_number += 1

    def add_position(self, hit: HitRecord):
        if self._current is not None:
            self._current.segments.append(hit)

    def end_current_tracking(self):
        # A single segment is the direct path only, not worth drawing
        if self._current is not None and len(self._current.segments) > 1:
            self.trackings[self._frequency].append(self._current)
        self._current = None


@dataclass
class BasicSimulationProperties:
    """Validated user settings of one simulation run."""

    frequencies: Sequence[float]
    source_power: float
    num_of_collectors: int = DEFAULT_CONSTANTS.num_collectors
    num_of_rays_along_each_axis: int = DEFAULT_CONSTANTS.population
    max_tracking: int = 10
    absorption: float = 0.0

    def __post_init__(self):
        self.frequencies = [float(f) for f in self.frequencies]
        errors = []
        if not self.frequencies:
            errors.append("frequencies cannot be empty")
        if self.source_power < 0:
            errors.append(f"source power cannot be < 0, got {self.source_power}")
        if self.num_of_collectors < 4:
            errors.append(f"number of collectors cannot be less than 4, got {self.num_of_collectors}")
        if self.num_of_collectors % 4 != 0 and (self.num_of_collectors - 1) % 4 != 0:
            errors.append(
                "number of collectors or number of collectors - 1 must be divisible by 4, "
                f"got {self.num_of_collectors}"
            )
        if self.num_of_rays_along_each_axis < 1:
            errors.append(f"number of rays along each axis must be greater than 0, got {self.num_of_rays_along_each_axis}")
        if self.max_tracking < 1:
            errors.append(f"max tracking must be at least 1, got {self.max_tracking}")
        if not 0.0 <= self.absorption <= 1.0:
            errors.append(f"absorption must be within [0, 1], got {self.absorption}")
        if errors:
            raise ValueError("Error detected in BasicSimulationProperties:\n" + "\n".join(errors))


@dataclass
class SimulationProperties:
    basic: BasicSimulationProperties
    collection_rules: EnergyCollectionRules = field(default_factory=OriginalCollectionRules)


class Simulator:
    """Bounces the rays of one source through the model for one frequency.

    Collectors are transparent: a ray passes through every collector lying
    before the next model surface and each of them receives energy
    according to the collection rules. Arrival times are the travelled
    path length divided by the speed of sound. Model surfaces reflect rays
    specularly; rays leaving through the enclosing sphere wall stop.
    """

    def __init__(
        self,
        model: Model,
        ray_factory: PointSpeakerRayFactory,
        collection_rules: Optional[EnergyCollectionRules] = None,
        absorption: float = 0.0,
        position_tracker: Optional[SampledPositionTracker] = None,
        constants: SimulationConstants = DEFAULT_CONSTANTS,
    ):
        self.model = model
        self.ray_factory = ray_factory
        self.collection_rules = collection_rules or OriginalCollectionRules()
        self.absorption = absorption
        self.position_tracker = position_tracker
        self.constants = constants
        self.wall = SphereWall(constants.sphere_wall_radius, constants)

        source_distance = ray_factory.origin.magnitude()
        if source_distance >= self.wall.radius:
            raise ValueError(
                f"Source at {ray_factory.origin.describe()} lies outside the sphere wall of radius "
                f"{self.wall.radius:g} m - increase sphere_wall_radius"
            )

    def trace_ray(self, ray: Ray, frequency: float, collectors: Sequence[EnergyCollector], max_tracking: int) -> int:
        """Follow one ray through at most ``max_tracking`` segments.

        Returns the number of reflections on the model.
        """
        tracker = self.position_tracker
        if tracker is not None:
            tracker.initialize_new_tracking()

        travelled = 0.0
        reflections = 0
        current = ray.normalized()
        for _ in range(max_tracking):
            surface = ray_mesh_intersection(current, self.model.geometry, frequency, self.constants)
            wall_hit = self.wall.hit(current, frequency)

            if surface is not None and (wall_hit is None or surface[1].time <= wall_hit.time):
                segment_end = surface[1]
            else:
                segment_end = wall_hit
                surface = None
            limit = segment_end.time if segment_end is not None else math.inf

            for collector in collectors:
                collector_hit = collector.hit(current, frequency)
                if collector_hit is not None and collector_hit.time <= limit:
                    arrival_time = (travelled + collector_hit.time) / self.constants.sound_speed
                    self.collection_rules.collect(collector, collector_hit, arrival_time)

            if tracker is not None and segment_end is not None:
                tracker.add_position(segment_end)

            if surface is None:
                break

            _, hit = surface
            travelled += hit.time
            reflections += 1
            direction = current.direction - hit.normal * (2.0 * current.direction.dot(hit.normal))
            power = current.power * (1.0 - self.absorption)
            if power <= 0.0:
                break
            current = Ray(hit.collision_point, direction, power).normalized()

        if tracker is not None:
            tracker.end_current_tracking()
        if DEBUG:
            print(f"[debug] Ray traced: {reflections} reflections, {travelled:.4f} m travelled")
        return reflections

    def run(
        self,
        frequency: float,
        collectors: Sequence[EnergyCollector],
        max_tracking: int,
        show_progress: bool = True,
    ):
        """Trace every ray the factory produces into ``collectors``."""
        for ray in tqdm(
            self.ray_factory,
            total=self.ray_factory.total_rays,
            desc=f"Tracing {frequency:g} Hz",
            disable=not show_progress,
        ):
            self.trace_ray(ray, frequency, collectors, max_tracking)


class SceneManager:
    """Runs the simulation for every configured frequency.

    Each frequency gets a fresh ray factory and a fresh collector array, so
    no energy leaks between frequencies. Frequencies are processed in the
    configured order.
    """

    def __init__(
        self,
        model: Model,
        properties: SimulationProperties,
        position_tracker: Optional[SampledPositionTracker] = None,
        constants: SimulationConstants = DEFAULT_CONSTANTS,
    ):
        if model.is_empty:
            raise ValueError("Model cannot be empty")
        self.model = model
        self.properties = properties
        self.position_tracker = position_tracker
        self.constants = constants

    def run(self, show_progress: bool = True) -> Dict[float, List[EnergyCollector]]:
        basic = self.properties.basic
        collectors_per_frequency: Dict[float, List[EnergyCollector]] = {}

        for frequency in basic.frequencies:
            if self.position_tracker is not None:
                self.position_tracker.initialize_new_frequency(frequency)

            ray_factory = PointSpeakerRayFactory(
                basic.num_of_rays_along_each_axis, basic.source_power, self.model, self.constants
            )
            simulator = Simulator(
                self.model,
                ray_factory,
                collection_rules=self.properties.collection_rules,
                absorption=basic.absorption,
                position_tracker=self.position_tracker,
                constants=self.constants,
            )
            collectors = build_collectors(self.model, basic.num_of_collectors, self.constants)
            simulator.run(frequency, collectors, basic.max_tracking, show_progress=show_progress)

            collected = sum(collector.total_energy() for collector in collectors)
            print(f"[info] {frequency:g} Hz: {ray_factory.total_rays} rays traced, "
                  f"energy collected: {collected:.6g}")
            collectors_per_frequency[frequency] = collectors

        return collectors_per_frequency


def run_simulation(
    model: Model,
    properties: SimulationProperties,
    position_tracker: Optional[SampledPositionTracker] = None,
    constants: SimulationConstants = DEFAULT_CONSTANTS,
    show_progress: bool = True,
) -> Dict[float, List[EnergyCollector]]:
    """Run all frequencies and return the collectors of each one."""
    return SceneManager(model, properties, position_tracker, constants).run(show_progress=show_progress)
