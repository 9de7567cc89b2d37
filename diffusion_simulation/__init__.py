"""
Acoustic Diffusion Simulation Package
=====================================

This package estimates the acoustic diffusion coefficient of a sample
(ISO 17497-2) by ray tracing sound energy from a point source over the
sample into a set of spherical energy collectors.

Modules:
--------
- config: Configurable simulation parameters
- core.constants: Numerical tolerances and simulation constants
- core.vectors: Vector and ray primitives
- core.geometry: Spheres, triangles and ray intersection
- core.collectors: Energy collectors and their placement
- core.generators: Point source ray factory
- core.results: Wave objects, sound pressure levels, diffusion coefficient
- core.model: Simulated model, STL/OBJ loading
- core.simulation: Ray bouncing and per-frequency driver
- core.io_utils: Data export utilities
- runner: Full simulation run and command-line entry point
"""

from . import config
from .core import *
from .core import __all__ as _core_all
from .runner import run_full_simulation, simulate_model

__version__ = "1.0.0"
__all__ = ["config", "run_full_simulation", "simulate_model"] + list(_core_all)
