"""
Testing subpackage for the diffusion simulation.

This subpackage provides tools for testing and debugging the simulation:
- Simple analytical models for isolating geometry-related issues
- Validation functions

Example usage:
    from diffusion_simulation import Model
    from diffusion_simulation.testing import create_sawtooth_diffuser

    model = Model.from_mesh_array(create_sawtooth_diffuser(n_teeth=8))
"""

from .simple_models import (
    create_flat_plate,
    create_simple_box,
    create_sawtooth_diffuser,
    print_mesh_info,
)

from .validation import (
    validate_mesh,
    validate_simple_models,
)

__all__ = [
    # Simple models
    "create_flat_plate",
    "create_simple_box",
    "create_sawtooth_diffuser",
    "print_mesh_info",
    # Validation
    "validate_mesh",
    "validate_simple_models",
]
