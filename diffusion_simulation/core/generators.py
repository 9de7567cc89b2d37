"""
Ray generators (sound sources).
"""

from __future__ import annotations

from typing import Iterator, Optional

from .constants import DEFAULT_CONSTANTS, SimulationConstants
from .vectors import Ray, Vec3


class PointSpeakerRayFactory:
    """Point source emitting a square grid of rays onto the model.

    The source stands on the +Z axis at ``max(H, H * model.height)`` where
    ``H = constants.simulation_height``; ISO 17497-2 requires the source to be
    at least twice as high as the collector radius. Rays sweep the model
    footprint ``[-side_size, side_size]^2`` at model height, row by row, and
    each carries ``source_power / n**2`` energy.

    Parameters
    ----------
    num_of_rays_along_each_axis : int
        Grid size ``n``; ``n**2`` rays are produced in total.
    source_power : float
        Total power emitted by the source.
    model : Model
        Model the rays are aimed at. It must not be empty.
    constants : SimulationConstants
        Provides the source height.
    """

    def __init__(
        self,
        num_of_rays_along_each_axis: int,
        source_power: float,
        model,
        constants: SimulationConstants = DEFAULT_CONSTANTS,
    ):
        if num_of_rays_along_each_axis <= 0:
            raise ValueError(
                "num_of_rays_along_each_axis cannot be equal or less than zero, "
                f"got {num_of_rays_along_each_axis}"
            )
        if source_power < 0:
            raise ValueError(f"source_power cannot be less than zero, got {source_power}")
        if model.is_empty:
            raise ValueError("Model cannot be empty")

        self.model = model
        self.num_of_rays_along_each_axis = int(num_of_rays_along_each_axis)
        self.energy_per_ray = source_power / (self.num_of_rays_along_each_axis ** 2)
        self._current_ray_index = 0

        height = constants.simulation_height
        self.origin = Vec3(0.0, 0.0, max(height, height * model.height))

        size_factor = -model.side_size
        self.target_reference_direction = Vec3(size_factor, size_factor, model.height) - self.origin

    @property
    def total_rays(self) -> int:
        return self.num_of_rays_along_each_axis ** 2

    @property
    def current_ray_index(self) -> int:
        return self._current_ray_index

    def is_ray_available(self) -> bool:
        return self._current_ray_index < self.total_rays

    def direction(self, ray_index: int) -> Vec3:
        """Direction of the ray with the given grid index."""
        n = self.num_of_rays_along_each_axis
        if n == 1:
            return -Vec3.Z

        x_index = ray_index % n
        y_index = ray_index // n
        u = 2.0 * x_index / (n - 1) * self.model.side_size
        v = 2.0 * y_index / (n - 1) * self.model.side_size
        return self.target_reference_direction + Vec3(u, v, 0.0)

    def next_ray(self) -> Optional[Ray]:
        """Return the next ray, or ``None`` once all rays have been emitted."""
        if not self.is_ray_available():
            return None
        ray = Ray(self.origin, self.direction(self._current_ray_index), self.energy_per_ray)
        self._current_ray_index += 1
        return ray

    def __iter__(self) -> Iterator[Ray]:
        ray = self.next_ray()
        while ray is not None:
            yield ray
            ray = self.next_ray()

    def describe(self) -> str:
        return (
            "POINT SPEAKER RAY FACTORY\n"
            f"Origin: {self.origin.describe()}\n"
            f"Num Of Rays Along Each Axis: {self.num_of_rays_along_each_axis}\n"
            f"Current Ray Index: {self._current_ray_index}\n"
            f"Energy Per Ray: {self.energy_per_ray:.6g}\n"
            f"Target Reference Direction: {self.target_reference_direction.describe()}"
        )
