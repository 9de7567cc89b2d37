"""
Acoustic Diffusion Simulation Runner Module

This module provides the main simulation runner function that can be called
from scripts or imported directly.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Sequence

from . import config
from .core.collectors import build_collectors
from .core.constants import DEFAULT_CONSTANTS, SimulationConstants
from .core.data_classes import SimulationResults
from .core.io_utils import (
    export_results_to_csv,
    save_collectors_to_json,
    save_model_to_json,
    save_results_to_json,
    save_trackings_to_json,
)
from .core.model import Model
from .core.results import DiffusionCoefficient
from .core.simulation import (
    BasicSimulationProperties,
    SampledPositionTracker,
    SimulationProperties,
    get_collection_rules,
    run_simulation,
)


def load_model(model_path: Optional[Path], scale: float, constants: SimulationConstants) -> Model:
    """Load the model under test, or build the reference plate when no path is given."""
    if model_path is None:
        print(f"[info] No model file given, using reference plate "
              f"(side size {config.DEFAULT_REFERENCE_SIDE_SIZE} m)")
        return Model.new_reference_model(config.DEFAULT_REFERENCE_SIDE_SIZE, constants)

    model_path = Path(model_path)
    if not model_path.exists():
        raise FileNotFoundError(f"Model file not found: {model_path}")
    print(f"[info] Loading model: {model_path.name}")
    model = Model.load_from_file(str(model_path), scale=scale, constants=constants)
    print(f"[info] {model.describe()}")
    return model


def simulate_model(
    model: Model,
    properties: SimulationProperties,
    constants: SimulationConstants = DEFAULT_CONSTANTS,
    position_tracker: Optional[SampledPositionTracker] = None,
    show_progress: bool = True,
) -> SimulationResults:
    """Run every frequency on ``model`` and reduce the collectors to results."""
    collectors_per_frequency = run_simulation(
        model, properties, position_tracker=position_tracker, constants=constants, show_progress=show_progress
    )
    return DiffusionCoefficient(constants.sample_rate).evaluate(collectors_per_frequency)


def print_results(results: SimulationResults, reference: Optional[SimulationResults] = None):
    print("\n" + "=" * 60)
    print("DIFFUSION COEFFICIENT")
    print("=" * 60)
    header = f"{'Frequency [Hz]':>15} {'Model':>12}"
    if reference is not None:
        header += f" {'Reference':>12}"
    print(header)
    for frequency, coefficient in results.diffusion_coefficients.items():
        line = f"{frequency:>15g} {coefficient:>12.4f}"
        if reference is not None:
            line += f" {reference.diffusion_coefficients[frequency]:>12.4f}"
        print(line)
    print("=" * 60 + "\n")


def run_full_simulation(
    model_path: Optional[Path] = None,
    output_dir: Optional[Path] = None,
    frequencies: Optional[Sequence[float]] = None,
    source_power: Optional[float] = None,
    num_rays_along_each_axis: Optional[int] = None,
    num_collectors: Optional[int] = None,
    max_tracking: Optional[int] = None,
    collection_rules: Optional[str] = None,
    with_reference: bool = True,
    save_results: bool = True,
    show_progress: bool = True,
    constants: SimulationConstants = DEFAULT_CONSTANTS,
) -> SimulationResults:
    """Run the complete diffusion simulation.

    This is the main entry point for running simulations. It handles:
    1. Loading the model (or building the reference plate)
    2. Ray tracing every frequency into fresh energy collectors
    3. Reducing collected energy to levels and diffusion coefficients
    4. Optionally repeating the run on the flat reference plate
    5. Exporting results

    Parameters
    ----------
    model_path : Path, optional
        STL or OBJ file of the model. If None, the reference plate is used.
    output_dir : Path, optional
        Directory for output files. If None, uses current working directory.
    with_reference : bool
        Whether to also simulate the flat reference plate.
    save_results : bool
        Whether to write JSON and CSV output files.

    Other parameters default to the values in ``config``.

    Returns
    -------
    SimulationResults
        Results of the model run.
    """
    output_dir = Path.cwd() if output_dir is None else Path(output_dir)
    data_dir = output_dir / config.DATA_OUTPUT_DIR

    basic = BasicSimulationProperties(
        frequencies=config.DEFAULT_FREQUENCIES if frequencies is None else frequencies,
        source_power=config.DEFAULT_SOURCE_POWER if source_power is None else source_power,
        num_of_collectors=config.DEFAULT_NUM_COLLECTORS if num_collectors is None else num_collectors,
        num_of_rays_along_each_axis=(
            config.DEFAULT_RAYS_ALONG_EACH_AXIS if num_rays_along_each_axis is None else num_rays_along_each_axis
        ),
        max_tracking=config.DEFAULT_MAX_TRACKING if max_tracking is None else max_tracking,
        absorption=config.DEFAULT_ABSORPTION,
    )
    properties = SimulationProperties(
        basic=basic,
        collection_rules=get_collection_rules(collection_rules or config.DEFAULT_COLLECTION_RULES),
    )

    model = load_model(model_path, config.DEFAULT_MODEL_SCALE, constants)

    print("\n" + "=" * 60)
    print("SIMULATION CONFIGURATION")
    print("=" * 60)
    print(f"Frequencies: {', '.join(f'{f:g}' for f in basic.frequencies)} Hz")
    print(f"Source power: {basic.source_power:g}")
    print(f"Rays: {basic.num_of_rays_along_each_axis}^2 = {basic.num_of_rays_along_each_axis ** 2}")
    print(f"Energy collectors: {basic.num_of_collectors} at radius {constants.simulation_radius:g} m")
    print(f"Max tracking: {basic.max_tracking}")
    print(f"Collection rules: {properties.collection_rules.describe()}")
    print("=" * 60 + "\n")

    visible = min(config.DEFAULT_VISIBLE_RAYS_ALONG_EACH_AXIS, basic.num_of_rays_along_each_axis)
    tracker = SampledPositionTracker(basic.num_of_rays_along_each_axis, visible) if save_results else None

    print("[info] Simulating model...")
    results = simulate_model(model, properties, constants, tracker, show_progress)

    reference_results = None
    reference_model = None
    if with_reference:
        print("[info] Simulating reference plate...")
        reference_model = Model.new_reference_model(max(model.side_size, config.DEFAULT_REFERENCE_SIDE_SIZE), constants)
        reference_results = simulate_model(reference_model, properties, constants, None, show_progress)

    print_results(results, reference_results)

    if save_results:
        save_collectors_to_json(
            build_collectors(model, basic.num_of_collectors, constants),
            str(data_dir / config.COLLECTORS_JSON),
        )
        save_model_to_json(model, str(data_dir / config.MODEL_JSON))
        save_results_to_json(results.sound_pressure_levels, str(data_dir / config.RESULTS_JSON))
        save_trackings_to_json(tracker.trackings, str(data_dir / config.TRACKING_JSON))
        export_results_to_csv(
            results.diffusion_coefficients,
            results.sound_pressure_levels,
            str(data_dir / config.DIFFUSION_RESULTS_CSV),
        )
        if reference_results is not None:
            save_model_to_json(reference_model, str(data_dir / config.REFERENCE_MODEL_JSON))
            save_results_to_json(reference_results.sound_pressure_levels, str(data_dir / config.REFERENCE_RESULTS_JSON))

    return results


def main():
    """Command-line entry point."""
    import argparse

    parser = argparse.ArgumentParser(description="Run acoustic diffusion coefficient simulation")
    parser.add_argument("model", nargs="?", type=Path, default=None,
                        help="STL or OBJ model file (default: flat reference plate)")
    parser.add_argument("-f", "--frequencies", type=float, nargs="+", default=None,
                        help="Frequencies to simulate (Hz)")
    parser.add_argument("-p", "--power", type=float, default=None,
                        help="Source power")
    parser.add_argument("-r", "--rays", type=int, default=None,
                        help="Number of rays along each axis of the source grid")
    parser.add_argument("-c", "--collectors", type=int, default=None,
                        help="Number of energy collectors")
    parser.add_argument("-t", "--max-tracking", type=int, default=None,
                        help="Maximum number of ray segments per ray")
    parser.add_argument("--rules", choices=["original", "linear"], default=None,
                        help="Energy collection rules")
    parser.add_argument("--no-reference", action="store_true",
                        help="Don't simulate the reference plate")
    parser.add_argument("--no-save", action="store_true",
                        help="Don't save results")
    parser.add_argument("--output-dir", type=Path, default=None,
                        help="Output directory for results")

    args = parser.parse_args()

    run_full_simulation(
        model_path=args.model,
        output_dir=args.output_dir,
        frequencies=args.frequencies,
        source_power=args.power,
        num_rays_along_each_axis=args.rays,
        num_collectors=args.collectors,
        max_tracking=args.max_tracking,
        collection_rules=args.rules,
        with_reference=not args.no_reference,
        save_results=not args.no_save,
    )


if __name__ == "__main__":
    main()
