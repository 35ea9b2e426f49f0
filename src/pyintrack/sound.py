"""
Sound - Audio samples with sample rate.

A Sound holds mono float64 samples and their sample rate, and runs pYIN
pitch tracking on them.

Usage:
------
    from pyintrack import Sound

    sound = Sound.from_file("audio.wav")
    pitch = sound.to_pitch_pyin(hop_length=256)
    f0 = pitch.values()
"""

import numpy as np
from pathlib import Path
from typing import Optional, Union


class Sound:
    """
    Represents audio samples with sample rate.

    Attributes:
        samples: 1D numpy array of audio samples (mono only)
        sample_rate: Sample rate in Hz
    """

    def __init__(self, samples: np.ndarray, sample_rate: float):
        """
        Create a Sound from samples and sample rate.

        Raises:
            ValueError: If samples is not 1D (mono only supported)
        """
        samples = np.asarray(samples, dtype=np.float64)
        if samples.ndim != 1:
            raise ValueError("Only mono audio supported. Got shape: {}".format(samples.shape))

        self._samples = samples
        self._sample_rate = float(sample_rate)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "Sound":
        """
        Load audio from a file (any format soundfile/libsndfile reads).

        Multi-channel files raise an error - use from_file_channel() instead.

        Raises:
            ValueError: If file has multiple channels
        """
        import soundfile as sf

        data, sample_rate = sf.read(path, dtype='float64')

        if data.ndim > 1:
            raise ValueError(
                f"Only mono audio supported. File has {data.shape[1]} channels. "
                "Use Sound.from_file_channel() to select a specific channel."
            )

        return cls(data, sample_rate)

    @classmethod
    def from_file_channel(cls, path: Union[str, Path], channel: int = 0) -> "Sound":
        """
        Load a specific channel from an audio file.

        Args:
            path: Path to audio file
            channel: Channel index (0-based)
        """
        import soundfile as sf

        data, sample_rate = sf.read(path, dtype='float64')

        if data.ndim == 1:
            if channel != 0:
                raise ValueError(f"File is mono, channel {channel} does not exist")
            return cls(data, sample_rate)

        if channel >= data.shape[1]:
            raise ValueError(f"Channel {channel} does not exist. File has {data.shape[1]} channels.")

        return cls(data[:, channel], sample_rate)

    @property
    def samples(self) -> np.ndarray:
        """Audio samples as 1D numpy array."""
        return self._samples

    @property
    def sample_rate(self) -> float:
        """Sample rate in Hz."""
        return self._sample_rate

    @property
    def n_samples(self) -> int:
        """Number of samples."""
        return len(self._samples)

    @property
    def duration(self) -> float:
        """Total duration in seconds."""
        return self.n_samples / self._sample_rate

    def __repr__(self) -> str:
        return f"Sound({self.n_samples} samples, {self.sample_rate} Hz, {self.duration:.3f}s)"

    def to_pitch_pyin(
        self,
        hop_length: int = 256,
        params: Optional["PyinParameters"] = None,
        decoder: Optional["SequenceDecoder"] = None,
        n_jobs: int = 1
    ) -> "Pitch":
        """
        Track pitch with probabilistic YIN.

        Args:
            hop_length: Frame step in samples (ignored when params is given)
            params: Full analysis parameters (default: stock parameters)
            decoder: Sequence decoder (default SparseViterbiDecoder)
            n_jobs: Worker threads for per-frame analysis

        Returns:
            Pitch object
        """
        from .params import default_parameters
        from .pitch import Pitch
        from .pyin import analyze_states

        if params is None:
            params = default_parameters(hop_length)

        states, frequencies = analyze_states(
            params, self._samples, self._sample_rate, decoder=decoder, n_jobs=n_jobs
        )
        return Pitch(
            frequencies,
            states,
            params.hop_length / self._sample_rate,
            params.pitch_floor,
            params.pitch_ceiling,
            params.n_states,
        )
