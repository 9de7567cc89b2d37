"""
Configuration settings for the acoustic diffusion simulation.

Users can modify these values to customise a run without changing the core
code. Numerical tolerances and geometric constants live in
``diffusion_simulation.core.constants``.
"""

from __future__ import annotations

# =============================================================================
# Output
# =============================================================================

# Output directory, relative to the working directory (用户工作目录)
DATA_OUTPUT_DIR = "data"

COLLECTORS_JSON = "energyCollectors.json"
MODEL_JSON = "model.json"
REFERENCE_MODEL_JSON = "referenceModel.json"
RESULTS_JSON = "results.json"
REFERENCE_RESULTS_JSON = "referenceResults.json"
TRACKING_JSON = "trackingData.json"
DIFFUSION_RESULTS_CSV = "diffusion_results.csv"

# =============================================================================
# Source
# =============================================================================

# Octave band centre frequencies (Hz), processed in this order
DEFAULT_FREQUENCIES = [125.0, 250.0, 500.0, 1000.0, 2000.0, 4000.0]

# Total source power
DEFAULT_SOURCE_POWER = 500.0

# Grid size of the point source; rays = value ** 2
DEFAULT_RAYS_ALONG_EACH_AXIS = 37

# =============================================================================
# Simulation
# =============================================================================

DEFAULT_NUM_COLLECTORS = 37

# Maximum number of ray segments followed per ray
DEFAULT_MAX_TRACKING = 10

# Fraction of energy absorbed on each reflection
DEFAULT_ABSORPTION = 0.0

# "original" or "linear"
DEFAULT_COLLECTION_RULES = "original"

# Half-width (m) of the flat reference plate
DEFAULT_REFERENCE_SIDE_SIZE = 1.0

# Scale applied to loaded model coordinates (e.g. 1e-3 for millimetres)
DEFAULT_MODEL_SCALE = 1.0

# =============================================================================
# Ray tracking export
# =============================================================================

# Grid size of the subset of rays whose paths are exported
DEFAULT_VISIBLE_RAYS_ALONG_EACH_AXIS = 5
