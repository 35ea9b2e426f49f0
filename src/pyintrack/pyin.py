"""
pYIN - Probabilistic YIN pitch tracking.

Documentation sources:
- Mauch & Dixon (2014): "pYIN: A Fundamental Frequency Estimator Using
  Probabilistic Threshold Distributions"
- de Cheveigné & Kawahara (2002): "YIN, a fundamental frequency estimator
  for speech and music"

Pipeline:
1. For every frame: extract (centered, zero-padded), remove the mean,
   compute the normalized difference function and its valleys.
2. Each valley becomes an observation (quantized state, confidence).
3. A SequenceDecoder resolves the observations into one state per frame,
   with state n_states meaning unvoiced.
4. States are converted to Hz (0 = unvoiced) and each voicing onset is
   back-filled over the frames the analysis window needed to detect it.

Decisions:
- Zero-length input raises EmptyInput; input shorter than one hop
  yields an empty trajectory.
- Frames are centered on i * hop_length.
"""

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Tuple

import numpy as np

from .confidence import ConfidenceModel
from .decoder import (
    DecoderContractError,
    Observation,
    ObservationSlice,
    SequenceDecoder,
    SparseViterbiDecoder,
    TransitionModel,
)
from .params import PyinError, InvalidParameters, PyinParameters
from .semitone import SemitoneGrid
from .yin import difference_function, fetch_frame, find_valleys, refine_valley

logger = logging.getLogger(__name__)

STAY_PROBABILITY = 0.998
SWITCH_PROBABILITY = 0.002


class EmptyInput(PyinError, ValueError):
    """Raised when there are no samples to analyze."""
    pass


class PitchTransitions(TransitionModel):
    """
    Triangular transition kernel over pitch states.

    Weight for a jump of ds states is prior * (1 - ds/(r+1)) * (r+1),
    where r is the transition range: largest for ds = 0, falling linearly
    and reaching zero beyond r.
    """

    def __init__(
        self,
        transition_range: int,
        stay: float = STAY_PROBABILITY,
        switch: float = SWITCH_PROBABILITY
    ):
        self._range = int(transition_range)
        self._stay = stay
        self._switch = switch

    def _kernel(self, ds):
        width = self._range + 1
        return np.maximum((1.0 - np.asarray(ds, dtype=np.float64) / width) * width, 0.0)

    def same_state_weight(self, ds, t: int):
        return self._stay * self._kernel(ds)

    def different_state_weight(self, ds, t: int):
        return self._switch * self._kernel(ds)

    def transition_range(self, t: int) -> int:
        return self._range


def _prepare_samples(samples, sample_rate: float) -> np.ndarray:
    samples = np.asarray(samples, dtype=np.float64)
    if samples.ndim != 1:
        raise ValueError("Only mono audio supported. Got shape: {}".format(samples.shape))
    if len(samples) == 0:
        raise EmptyInput("Cannot analyze an empty sample buffer")
    if sample_rate <= 0:
        raise InvalidParameters(f"sample_rate must be positive, got {sample_rate}")
    return samples


def _n_workers(n_jobs: int) -> int:
    if n_jobs == -1:
        return os.cpu_count() or 1
    return max(1, int(n_jobs))


def _analyze_frame(
    samples: np.ndarray,
    index: int,
    params: PyinParameters,
    sample_rate: float,
    grid: SemitoneGrid,
    confidence: ConfidenceModel
) -> ObservationSlice:
    frame = fetch_frame(samples, index * params.hop_length, params.frame_length)
    frame -= np.mean(frame)

    d = difference_function(frame, params.correlation_window)
    valleys = find_valleys(d)
    probabilities = confidence.valley_confidences(d, valleys)

    return [
        Observation(grid.state_from_period(refine_valley(d, lag), sample_rate), p)
        for lag, p in zip(valleys, probabilities)
    ]


def build_observations(
    params: PyinParameters,
    samples: np.ndarray,
    sample_rate: float,
    n_jobs: int = 1
) -> List[ObservationSlice]:
    """
    Observation slice for every frame of a signal.

    Args:
        params: Analysis parameters
        samples: Mono signal
        sample_rate: Sample rate in Hz
        n_jobs: Worker threads (-1 = one per CPU)

    Returns:
        One list of Observation per frame, ordered by decreasing frequency
    """
    params.validate()
    samples = _prepare_samples(samples, sample_rate)
    n_frames = len(samples) // params.hop_length

    grid = SemitoneGrid.from_parameters(params)
    confidence = ConfidenceModel.from_parameters(params)

    def analyze_frame(i):
        return _analyze_frame(samples, i, params, sample_rate, grid, confidence)

    workers = _n_workers(n_jobs)
    if workers > 1 and n_frames > 1:
        with ThreadPoolExecutor(max_workers=workers) as executor:
            observations = list(executor.map(analyze_frame, range(n_frames)))
    else:
        observations = [analyze_frame(i) for i in range(n_frames)]

    logger.debug(
        "Built observations for %d frames (%d with candidates, %d worker(s))",
        n_frames, sum(1 for s in observations if s), workers
    )
    return observations


def fill_voicing_gaps(
    path: np.ndarray,
    frequencies: np.ndarray,
    sentinel: int,
    max_fill: int
) -> np.ndarray:
    """
    Back-fill frequencies before each unvoiced -> voiced transition.

    For every onset at frame i, up to max_fill preceding frames take the
    frequency of frame i, stopping at the signal start or at the first
    frame that was decoded as voiced.

    Args:
        path: Decoded states
        frequencies: Frequencies per frame, modified in place
        sentinel: Unvoiced state
        max_fill: Maximum number of frames to fill per onset

    Returns:
        frequencies
    """
    n_filled = 0
    for i in range(1, len(path)):
        if path[i] < sentinel and path[i - 1] >= sentinel:
            for j in range(i - 1, max(i - max_fill, 0) - 1, -1):
                if path[j] < sentinel:
                    break
                frequencies[j] = frequencies[i]
                n_filled += 1

    logger.debug("Back-filled %d unvoiced frame(s)", n_filled)
    return frequencies


def decode_states(
    params: PyinParameters,
    observations: List[ObservationSlice],
    decoder: Optional[SequenceDecoder] = None
) -> np.ndarray:
    """
    Run a decoder over an observation sequence and check its output.

    Raises:
        DecoderContractError: If the path has the wrong length or states
            outside [0, n_states]
    """
    if decoder is None:
        decoder = SparseViterbiDecoder()

    transitions = PitchTransitions(params.transition_range)
    logger.debug("Decoding with %s", type(decoder).__name__)
    path = np.asarray(decoder.decode(observations, params.n_states, transitions))

    if path.shape != (len(observations),):
        raise DecoderContractError(
            f"Decoder returned path of shape {path.shape}, expected ({len(observations)},)"
        )
    if len(path) and (np.any(path < 0) or np.any(path > params.n_states)):
        raise DecoderContractError(
            f"Decoder returned states outside [0, {params.n_states}]"
        )
    return path.astype(int)


def analyze_states(
    params: PyinParameters,
    samples: np.ndarray,
    sample_rate: float,
    decoder: Optional[SequenceDecoder] = None,
    n_jobs: int = 1
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Full analysis, returning both the decoded states and frequencies.

    Returns:
        (states, frequencies): states use n_states for unvoiced;
        frequencies are in Hz with 0 for unvoiced
    """
    params.validate()
    logger.debug("Analyzing with %s", params)

    observations = build_observations(params, samples, sample_rate, n_jobs=n_jobs)
    path = decode_states(params, observations, decoder)

    grid = SemitoneGrid.from_parameters(params)
    voiced = path < params.n_states
    frequencies = np.zeros(len(path))
    frequencies[voiced] = grid.frequency_from_state(path[voiced])

    fill_voicing_gaps(path, frequencies, params.n_states, params.fill_frames)
    return path, frequencies


def analyze(
    params: PyinParameters,
    samples: np.ndarray,
    sample_rate: float,
    decoder: Optional[SequenceDecoder] = None,
    n_jobs: int = 1
) -> Tuple[np.ndarray, int]:
    """
    Estimate the F0 trajectory of a monophonic signal.

    Args:
        params: Analysis parameters
        samples: Mono signal
        sample_rate: Sample rate in Hz
        decoder: Sequence decoder (default SparseViterbiDecoder)
        n_jobs: Worker threads for observation building (-1 = one per CPU)

    Returns:
        (frequencies, n_frames): one frequency per frame in Hz, 0 for
        unvoiced frames; n_frames = len(samples) // hop_length

    Raises:
        InvalidParameters: If params or sample_rate are invalid
        EmptyInput: If samples is empty
        DecoderContractError: If the decoder violates its contract
    """
    _, frequencies = analyze_states(params, samples, sample_rate, decoder, n_jobs)
    return frequencies, len(frequencies)
