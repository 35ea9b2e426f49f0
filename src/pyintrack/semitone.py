"""
Frequency quantization onto a logarithmic state grid.

States are spaced evenly in log-frequency between the pitch floor and
ceiling:

    step = log2(ceiling / floor) / n_states     (octaves per state)
    state(f) = round(log2(f / floor) / step)    clipped to [0, n_states - 1]
    frequency(s) = floor * 2^(s * step)

With the default 50-800 Hz range and 480 states that is 10 states per
semitone (10 cents per state).
"""

import numpy as np
from typing import Union


class SemitoneGrid:
    """
    Bidirectional mapping between frequency and pitch state.

    Attributes:
        pitch_floor: Frequency of state 0 in Hz
        pitch_ceiling: Upper end of the range in Hz
        n_states: Number of states
    """

    def __init__(self, pitch_floor: float, pitch_ceiling: float, n_states: int):
        self._pitch_floor = float(pitch_floor)
        self._pitch_ceiling = float(pitch_ceiling)
        self._n_states = int(n_states)
        self._step = np.log2(self._pitch_ceiling / self._pitch_floor) / self._n_states

    @classmethod
    def from_parameters(cls, params) -> "SemitoneGrid":
        return cls(params.pitch_floor, params.pitch_ceiling, params.n_states)

    @property
    def pitch_floor(self) -> float:
        return self._pitch_floor

    @property
    def pitch_ceiling(self) -> float:
        return self._pitch_ceiling

    @property
    def n_states(self) -> int:
        return self._n_states

    @property
    def step(self) -> float:
        """Width of one state in octaves."""
        return self._step

    @property
    def states_per_semitone(self) -> float:
        return 1.0 / (12.0 * self._step)

    def state_from_frequency(self, frequency: Union[float, np.ndarray]):
        """
        Nearest state for a frequency (or array of frequencies).

        Frequencies outside the range clamp to the edge states.
        """
        position = np.log2(np.asarray(frequency, dtype=np.float64) / self._pitch_floor) / self._step
        state = np.clip(np.rint(position), 0, self._n_states - 1).astype(int)
        if state.ndim == 0:
            return int(state)
        return state

    def state_from_period(self, period: float, sample_rate: float) -> int:
        """Nearest state for a period given in samples."""
        return self.state_from_frequency(sample_rate / period)

    def frequency_from_state(self, state: Union[int, np.ndarray]):
        """Center frequency of a state (or array of states)."""
        frequency = self._pitch_floor * np.exp2(np.asarray(state, dtype=np.float64) * self._step)
        if frequency.ndim == 0:
            return float(frequency)
        return frequency

    def __repr__(self) -> str:
        return (f"SemitoneGrid({self._pitch_floor} Hz - {self._pitch_ceiling} Hz, "
                f"{self._n_states} states)")
