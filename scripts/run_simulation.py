#!/usr/bin/env python
"""
Acoustic Diffusion Simulation - Main Runner Script

Usage:
    python run_simulation.py
    python run_simulation.py sample.stl -r 51
    python run_simulation.py sample.obj -f 500 1000 --no-reference

Without arguments a sawtooth diffuser is simulated against the flat
reference plate and the data/ directory is written next to this project.
"""

from pathlib import Path
import sys

# 添加项目根目录到路径（确保可以导入 diffusion_simulation）
project_dir = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_dir))

from diffusion_simulation import config
from diffusion_simulation.core.io_utils import save_model_to_json
from diffusion_simulation.core.model import Model
from diffusion_simulation.core.simulation import BasicSimulationProperties, SimulationProperties
from diffusion_simulation.runner import main as runner_main, print_results, simulate_model
from diffusion_simulation.testing import create_sawtooth_diffuser


def run_demo():
    """默认运行 - 锯齿扩散体与参考平板对比"""
    properties = SimulationProperties(basic=BasicSimulationProperties(
        frequencies=config.DEFAULT_FREQUENCIES,
        source_power=config.DEFAULT_SOURCE_POWER,
    ))
    diffuser = Model.from_mesh_array(create_sawtooth_diffuser(side_size=config.DEFAULT_REFERENCE_SIDE_SIZE))
    reference = Model.new_reference_model(config.DEFAULT_REFERENCE_SIDE_SIZE)

    print(f"[info] {diffuser.describe()}")
    results = simulate_model(diffuser, properties)
    reference_results = simulate_model(reference, properties)
    print_results(results, reference_results)

    save_model_to_json(diffuser, str(project_dir / config.DATA_OUTPUT_DIR / config.MODEL_JSON))


def main():
    """脚本入口点"""
    if len(sys.argv) > 1:
        runner_main()
    else:
        run_demo()


if __name__ == "__main__":
    main()
