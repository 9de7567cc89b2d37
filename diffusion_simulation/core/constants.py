"""
Numerical tolerances and simulation constants.
"""

from __future__ import annotations

from dataclasses import dataclass, fields, replace

# Debug flag
DEBUG = False


@dataclass(frozen=True)
class SimulationConstants:
    """Immutable set of constants shared by the simulation components.

    Every component accepts a ``constants`` argument so that tests can use
    modified tolerances without touching module-level state.

    Attributes
    ----------
    accuracy : float
        Tolerance used to reject self-intersections and parallel rays.
    hit_accuracy : float
        Larger tolerance for triangle hits, avoids re-hitting the surface a
        ray has just been reflected from.
    sound_speed : float
        Speed of sound in m/s (20 °C, 1000 hPa).
    simulation_radius : float
        Radius (m) of the sphere the energy collectors are placed on.
    simulation_height : float
        Minimum height (m) of the point source. ISO 17497-2 requires the
        source to stand at least twice as high as the collector radius.
    sphere_wall_radius : float
        Radius (m) of the enclosing sphere that terminates escaping rays.
    num_collectors : int
        Default number of energy collectors.
    population : int
        Default number of rays along each axis of the source grid.
    sample_rate : int
        Sample rate (Hz) used to reconstruct collector signals.
    """

    accuracy: float = 1.0e-8
    hit_accuracy: float = 1.0e-4
    sound_speed: float = 343.216
    simulation_radius: float = 4.0
    simulation_height: float = 8.0
    sphere_wall_radius: float = 16.0
    num_collectors: int = 37
    population: int = 37
    sample_rate: int = 96000

    def __post_init__(self):
        for field in fields(self):
            value = getattr(self, field.name)
            if value <= 0:
                raise ValueError(f"Simulation constant '{field.name}' must be positive, got {value}")

    def with_overrides(self, **changes) -> "SimulationConstants":
        """Return a copy with the given constants replaced."""
        return replace(self, **changes)


DEFAULT_CONSTANTS = SimulationConstants()
