"""
Core modules of the diffusion simulation:
- constants: numerical tolerances and simulation constants
- vectors: Vec3 and Ray primitives
- data_classes: hit records and ray trackings
- geometry: hittable spheres and triangles, vectorised mesh intersection
- collectors: energy collectors and their placement
- generators: point source ray factory
- results: wave objects, sound pressure levels, diffusion coefficient
- mesh_utils: STL/OBJ file loading
- model: simulated model
- simulation: ray bouncing and per-frequency driver
- io_utils: JSON/CSV export
"""

# Constants
from .constants import (
    DEBUG,
    DEFAULT_CONSTANTS,
    SimulationConstants,
)

# Primitives and data classes
from .vectors import Vec3, Ray
from .data_classes import HitRecord, RayTracking, SimulationResults

# Geometry
from .geometry import (
    Sphere,
    SphereWall,
    Triangle,
    MeshGeometry,
    prepare_mesh_geometry,
    ray_mesh_intersection,
)

# Collectors
from .collectors import EnergyCollector, build_collectors

# Sources
from .generators import PointSpeakerRayFactory

# Results
from .results import (
    WaveObject,
    DiffusionCoefficient,
    create_wave_objects,
    calculate_sound_pressure_levels,
    calculate_diffusion_coefficient,
    convert_energy_to_decibels,
)

# Model
from .mesh_utils import load_stl_mesh, load_obj_mesh, load_mesh
from .model import Model

# Simulation
from .simulation import (
    EnergyCollectionRules,
    OriginalCollectionRules,
    LinearCollectionRules,
    get_collection_rules,
    SampledPositionTracker,
    BasicSimulationProperties,
    SimulationProperties,
    Simulator,
    SceneManager,
    run_simulation,
)

# IO
from .io_utils import (
    save_collectors_to_json,
    save_model_to_json,
    save_results_to_json,
    save_trackings_to_json,
    results_to_dataframe,
    export_results_to_csv,
)

__all__ = [
    # Constants
    'DEBUG',
    'DEFAULT_CONSTANTS',
    'SimulationConstants',
    # Primitives
    'Vec3',
    'Ray',
    'HitRecord',
    'RayTracking',
    'SimulationResults',
    # Geometry
    'Sphere',
    'SphereWall',
    'Triangle',
    'MeshGeometry',
    'prepare_mesh_geometry',
    'ray_mesh_intersection',
    # Collectors
    'EnergyCollector',
    'build_collectors',
    # Sources
    'PointSpeakerRayFactory',
    # Results
    'WaveObject',
    'DiffusionCoefficient',
    'create_wave_objects',
    'calculate_sound_pressure_levels',
    'calculate_diffusion_coefficient',
    'convert_energy_to_decibels',
    # Model
    'load_stl_mesh',
    'load_obj_mesh',
    'load_mesh',
    'Model',
    # Simulation
    'EnergyCollectionRules',
    'OriginalCollectionRules',
    'LinearCollectionRules',
    'get_collection_rules',
    'SampledPositionTracker',
    'BasicSimulationProperties',
    'SimulationProperties',
    'Simulator',
    'SceneManager',
    'run_simulation',
    # IO
    'save_collectors_to_json',
    'save_model_to_json',
    'save_results_to_json',
    'save_trackings_to_json',
    'results_to_dataframe',
    'export_results_to_csv',
]
