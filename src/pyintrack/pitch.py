"""
Pitch - Fundamental frequency (F0) contour produced by pYIN.

Frame i is centered at i * time_step seconds. Unvoiced frames have a
frequency of 0 and state n_states.
"""

import numpy as np
from typing import Optional


def _convert_unit(value: float, unit: str) -> float:
    unit = unit.lower()
    if unit == "hertz":
        return float(value)
    elif unit == "semitones":
        # Semitones relative to 100 Hz
        return float(12.0 * np.log2(value / 100.0))
    elif unit == "mel":
        return float(1127.0 * np.log(1.0 + value / 700.0))
    elif unit == "erb":
        return float(21.4 * np.log10(0.00437 * value + 1.0))
    raise ValueError(f"Unknown unit: {unit}")


class Pitch:
    """
    Pitch (F0) contour.

    Attributes:
        time_step: Time step between frames in seconds
        pitch_floor: Minimum pitch in Hz
        pitch_ceiling: Maximum pitch in Hz
        n_states: Number of pitch states (also the unvoiced state)
    """

    def __init__(
        self,
        frequencies: np.ndarray,
        states: np.ndarray,
        time_step: float,
        pitch_floor: float,
        pitch_ceiling: float,
        n_states: int
    ):
        """
        Create a Pitch object.

        Args:
            frequencies: Frequency per frame in Hz (0 = unvoiced)
            states: Decoded state per frame
            time_step: Time step between frames
            pitch_floor: Minimum pitch in Hz
            pitch_ceiling: Maximum pitch in Hz
            n_states: Number of pitch states
        """
        self._frequencies = np.asarray(frequencies, dtype=np.float64)
        self._states = np.asarray(states, dtype=int)
        self._time_step = time_step
        self._pitch_floor = pitch_floor
        self._pitch_ceiling = pitch_ceiling
        self._n_states = n_states

    @property
    def n_frames(self) -> int:
        """Number of frames."""
        return len(self._frequencies)

    @property
    def time_step(self) -> float:
        """Time step between frames."""
        return self._time_step

    @property
    def pitch_floor(self) -> float:
        return self._pitch_floor

    @property
    def pitch_ceiling(self) -> float:
        return self._pitch_ceiling

    @property
    def n_states(self) -> int:
        return self._n_states

    def times(self) -> np.ndarray:
        """Get array of frame times."""
        return np.arange(self.n_frames) * self._time_step

    def values(self) -> np.ndarray:
        """Get array of pitch values (0 for unvoiced)."""
        return self._frequencies.copy()

    def states(self) -> np.ndarray:
        """Decoded states (n_states for unvoiced frames)."""
        return self._states.copy()

    def voiced(self) -> np.ndarray:
        """
        Boolean mask of frames with a pitch value (frequency > 0).

        Frames back-filled before a voicing onset count as voiced here,
        while states() still reports n_states for them. Use
        states() < n_states for the decoded voicing.
        """
        return self._frequencies > 0.0

    def get_value_in_frame(self, index: int, unit: str = "Hertz") -> Optional[float]:
        """
        Get pitch value of a frame (0-based index).

        Returns:
            Pitch value, or None if unvoiced or out of range
        """
        if index < 0 or index >= self.n_frames:
            return None
        value = self._frequencies[index]
        if value <= 0.0:
            return None
        return _convert_unit(value, unit)

    def get_value_at_time(
        self,
        time: float,
        unit: str = "Hertz",
        interpolation: str = "linear"
    ) -> Optional[float]:
        """
        Get pitch value at a specific time.

        Args:
            time: Time in seconds
            unit: Unit for result ("Hertz", "semitones", "mel", "erb")
            interpolation: Interpolation method ("linear", "nearest")

        Returns:
            Pitch value, or None if unvoiced or outside range
        """
        if self.n_frames == 0:
            return None

        idx_float = time / self._time_step
        if idx_float < -0.5 or idx_float > self.n_frames - 0.5:
            return None

        if interpolation == "nearest":
            idx = max(0, min(self.n_frames - 1, int(round(idx_float))))
            value = self._frequencies[idx]
            if value <= 0.0:
                return None

        elif interpolation == "linear":
            idx = int(np.floor(idx_float))
            frac = idx_float - idx

            i1 = max(0, min(self.n_frames - 1, idx))
            i2 = max(0, min(self.n_frames - 1, idx + 1))
            f1, f2 = self._frequencies[i1], self._frequencies[i2]

            # Both frames must be voiced for interpolation
            if f1 <= 0.0 or f2 <= 0.0:
                if frac < 0.5 and f1 > 0.0:
                    value = f1
                elif f2 > 0.0:
                    value = f2
                elif f1 > 0.0:
                    value = f1
                else:
                    return None
            else:
                value = f1 * (1 - frac) + f2 * frac
        else:
            raise ValueError(f"Unknown interpolation method: {interpolation}")

        return _convert_unit(value, unit)

    def __repr__(self) -> str:
        return (f"Pitch({self.n_frames} frames, {int(np.sum(self.voiced()))} voiced, "
                f"{self._pitch_floor}-{self._pitch_ceiling} Hz)")
