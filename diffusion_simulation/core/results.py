"""
Signal reconstruction and acoustic parameter calculation.

Collected energy is turned into a sampled energy-over-time signal per
collector (:class:`WaveObject`), reduced to a sound pressure level and
finally to the ISO 17497-2 diffusion coefficient.
"""

from __future__ import annotations

import math
from typing import Dict, List, Mapping, Sequence

import numpy as np

from .collectors import EnergyCollector
from .constants import DEFAULT_CONSTANTS
from .data_classes import SimulationResults

# Zero samples the buffer starts with
DATA_MARGIN = 2


def convert_energy_to_decibels(energy: float) -> float:
    """Convert an integrated energy to dB; non-positive energy maps to 0 dB."""
    return 120.0 + 10.0 * math.log10(energy) if energy > 0 else 0.0


class WaveObject:
    """Energy-over-time signal sampled at a fixed rate.

    Imitates the recording a microphone would produce in a real
    measurement. Energy is binned to ``floor(time * sample_rate)`` without
    interpolating between neighbouring samples.
    """

    def __init__(self, sample_rate: int = DEFAULT_CONSTANTS.sample_rate):
        if sample_rate <= 0:
            raise ValueError(f"sample_rate must be positive, got {sample_rate}")
        self.sample_rate = int(sample_rate)
        self._data = np.zeros(DATA_MARGIN, dtype=float)

    @property
    def data(self) -> np.ndarray:
        return self._data.copy()

    def __len__(self) -> int:
        return int(self._data.shape[0])

    def time_index(self, time: float) -> int:
        return int(math.floor(time * self.sample_rate))

    def add_energy_at_time(self, time: float, energy: float):
        if time < 0:
            raise ValueError(f"Time given to add_energy_at_time() cannot be less than 0, got {time} s")
        index = self.time_index(time)
        if index >= len(self._data):
            self._data = np.concatenate([self._data, np.zeros(index + 1 - len(self._data), dtype=float)])
        self._data[index] += energy

    def get_energy_at_time(self, time: float) -> float:
        if time < 0:
            return 0.0
        index = self.time_index(time)
        if index >= len(self._data):
            return 0.0
        return float(self._data[index])

    def total_energy(self) -> float:
        """Trapezoidal integral of the signal over its whole duration."""
        dt = 1.0 / self.sample_rate
        return float(np.sum(self._data[1:] + self._data[:-1]) * dt / 2.0)

    def total_pressure_level(self) -> float:
        """Sound pressure level of the whole signal in dB."""
        return convert_energy_to_decibels(self.total_energy())

    def describe(self) -> str:
        return f"Wave Object\nSample rate: {self.sample_rate} Hz\nData size: {len(self)}"


def create_wave_objects(
    collectors: Sequence[EnergyCollector],
    sample_rate: int = DEFAULT_CONSTANTS.sample_rate,
) -> List[WaveObject]:
    """Build one wave object per collector from its recorded energy."""
    waves = []
    for collector in collectors:
        wave = WaveObject(sample_rate)
        for time, energy in collector.energy.items():
            wave.add_energy_at_time(time, energy)
        waves.append(wave)
    return waves


def calculate_sound_pressure_levels(waves: Sequence[WaveObject]) -> List[float]:
    return [wave.total_pressure_level() for wave in waves]


def calculate_diffusion_coefficient(sound_pressure_levels: Sequence[float]) -> float:
    """Diffusion coefficient of a set of sound pressure levels (ISO 17497-2).

    ``d = ((sum L)^2 - sum L^2) / ((n - 1) * sum L^2)``. A perfectly uniform
    set of levels gives 1.

    Raises
    ------
    ValueError
        If fewer than two levels are given, ``n - 1`` would be zero.

    Returns ``nan`` when every level is zero, i.e. no collector received
    any energy.
    """
    levels = np.asarray(sound_pressure_levels, dtype=float)
    if levels.size < 2:
        raise ValueError(f"Diffusion coefficient needs at least 2 sound pressure levels, got {levels.size}")

    alpha = float(np.sum(levels)) ** 2
    beta = float(np.sum(levels ** 2))
    gamma = (levels.size - 1) * beta
    if gamma == 0.0:
        print("[warning] All sound pressure levels are zero - diffusion coefficient is undefined")
        return float("nan")
    return (alpha - beta) / gamma


class DiffusionCoefficient:
    """Diffusion coefficient per frequency from the collectors of each run.

    The diffusion coefficient measures how uniformly a sample scatters sound
    over a complete hemisphere of receivers.
    """

    name = "Acoustic Diffusion Coefficient"

    def __init__(self, sample_rate: int = DEFAULT_CONSTANTS.sample_rate):
        self.sample_rate = sample_rate

    def sound_pressure_levels(self, collectors: Sequence[EnergyCollector]) -> List[float]:
        return calculate_sound_pressure_levels(create_wave_objects(collectors, self.sample_rate))

    def calculate_parameter(self, collectors: Sequence[EnergyCollector]) -> float:
        return calculate_diffusion_coefficient(self.sound_pressure_levels(collectors))

    def get_results(self, collectors_per_frequency: Mapping[float, Sequence[EnergyCollector]]) -> Dict[float, float]:
        """Map every frequency to its diffusion coefficient, keeping the input order."""
        return {
            frequency: self.calculate_parameter(collectors)
            for frequency, collectors in collectors_per_frequency.items()
        }

    def evaluate(self, collectors_per_frequency: Mapping[float, Sequence[EnergyCollector]]) -> SimulationResults:
        """Compute both the per-collector levels and the coefficient of every frequency."""
        levels = {
            frequency: self.sound_pressure_levels(collectors)
            for frequency, collectors in collectors_per_frequency.items()
        }
        coefficients = {
            frequency: calculate_diffusion_coefficient(frequency_levels)
            for frequency, frequency_levels in levels.items()
        }
        return SimulationResults(diffusion_coefficients=coefficients, sound_pressure_levels=levels)

    def describe(self) -> str:
        return self.name
