"""
Data export utilities: JSON documents for the viewer and result tables.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence

import pandas as pd

from .collectors import EnergyCollector
from .data_classes import RayTracking
from .model import Model
from .vectors import Vec3


def _point_to_dict(point: Vec3) -> Dict[str, float]:
    return {"x": point.x, "y": point.y, "z": point.z}


def _write_json(document: dict, filename: str, indent: Optional[int] = 1):
    output_path = Path(filename)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, 'w', encoding='utf-8') as f:
        json.dump(document, f, indent=indent)


def collectors_to_dict(collectors: Sequence[EnergyCollector]) -> dict:
    """Describe collector positions; ``number`` is the index in the array."""
    return {
        "energyCollectors": [
            {
                "number": number,
                "x": collector.origin.x,
                "y": collector.origin.y,
                "z": collector.origin.z,
                "radius": collector.radius,
            }
            for number, collector in enumerate(collectors)
        ]
    }


def model_to_dict(model: Model) -> dict:
    return {
        "model": [
            {
                "point1": _point_to_dict(triangle.point1),
                "point2": _point_to_dict(triangle.point2),
                "point3": _point_to_dict(triangle.point3),
            }
            for triangle in model.triangles
        ]
    }


def results_to_dict(levels_per_frequency: Mapping[float, Sequence[float]]) -> dict:
    return {
        "results": [
            {"frequency": frequency, "data": [float(level) for level in levels]}
            for frequency, levels in levels_per_frequency.items()
        ]
    }


def trackings_to_dict(trackings: Mapping[float, Sequence[RayTracking]]) -> dict:
    output = []
    for frequency, frequency_trackings in trackings.items():
        tracks = []
        for tracking in frequency_trackings:
            tracks.append([
                {
                    "origin": _point_to_dict(hit.origin),
                    "direction": _point_to_dict(hit.direction),
                    "energy": hit.energy,
                    "length": (hit.collision_point - hit.origin).magnitude(),
                }
                for hit in tracking.segments
            ])
        output.append({"frequency": frequency, "trackings": tracks})
    return {"trackingData": output}


def save_collectors_to_json(collectors: Sequence[EnergyCollector], filename: str = "energyCollectors.json"):
    """Export collector positions and radii to a JSON file."""
    _write_json(collectors_to_dict(collectors), filename)
    print(f"[info] Energy collectors exported to {filename}")


def save_model_to_json(model: Model, filename: str = "model.json"):
    """Export model triangles to a JSON file."""
    if model is None:
        raise ValueError("Model given to save_model_to_json() cannot be None")
    _write_json(model_to_dict(model), filename)
    print(f"[info] Model exported to {filename} ({len(model.triangles)} triangles)")


def save_results_to_json(levels_per_frequency: Mapping[float, Sequence[float]], filename: str = "results.json"):
    """Export the sound pressure levels of every collector per frequency."""
    _write_json(results_to_dict(levels_per_frequency), filename)
    print(f"[info] Results exported to {filename}")


def save_trackings_to_json(trackings: Mapping[float, Sequence[RayTracking]], filename: str = "trackingData.json"):
    """Export sampled ray paths to a JSON file."""
    _write_json(trackings_to_dict(trackings), filename, indent=None)
    total = sum(len(t) for t in trackings.values())
    print(f"[info] Ray trackings exported to {filename} ({total} paths)")


def results_to_dataframe(
    diffusion_coefficients: Mapping[float, float],
    levels_per_frequency: Optional[Mapping[float, Sequence[float]]] = None,
) -> pd.DataFrame:
    """Tabulate results, one row per frequency.

    Columns are ``frequency_hz`` and ``diffusion_coefficient`` followed by
    ``spl_<n>_db`` for the level of collector ``n`` when levels are given.
    """
    rows: List[dict] = []
    for frequency, coefficient in diffusion_coefficients.items():
        row = {"frequency_hz": frequency, "diffusion_coefficient": coefficient}
        if levels_per_frequency is not None:
            for number, level in enumerate(levels_per_frequency[frequency]):
                row[f"spl_{number}_db"] = level
        rows.append(row)
    return pd.DataFrame(rows)


def export_results_to_csv(
    diffusion_coefficients: Mapping[float, float],
    levels_per_frequency: Optional[Mapping[float, Sequence[float]]] = None,
    filename: str = "diffusion_results.csv",
):
    """Export the results table to a CSV file."""
    if not diffusion_coefficients:
        print("[warning] No results to export.")
        return

    output_path = Path(filename)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    results_to_dataframe(diffusion_coefficients, levels_per_frequency).to_csv(output_path, index=False)
    print(f"[info] Diffusion results exported to {filename}")
    print(f"[info] Total frequencies: {len(diffusion_coefficients)}")
