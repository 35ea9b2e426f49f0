"""
Hidden-state sequence decoding over sparse observations.

The decoder is independent of pitch: it sees integer states, per-frame
observation probabilities, and a TransitionModel giving unnormalized
transition weights as a function of state distance. State n_states is the
"no state" sentinel (unvoiced, for pitch tracking).

SparseViterbiDecoder runs a log-domain Viterbi search in which the hidden
states of a frame are sampled from its observations: only the observed
states plus the sentinel are candidates. This keeps each step at
O(candidates²) instead of O(n_states²) and never builds a full
transition matrix.

Transition weights between frame t and t+1:
- voiced s -> voiced s':   same_state_weight(|s - s'|, t), only if
                           |s - s'| <= transition_range(t)
- sentinel -> sentinel:    same_state_weight(0, t)
- voiced <-> sentinel:     different_state_weight(0, t)

The sentinel is a single state with no pitch, so a voicing switch has no
state distance and the cross-regime kernel is always evaluated at ds = 0.
The pitch before an unvoiced run is not remembered: the first voiced
frame after it is reached from the sentinel with the same weight
whatever its state. Far pitch jumps therefore go through the sentinel.

Emission of an observed state is its probability; emission of the
sentinel is the probability that none of the frame's observations is
correct, Π(1 - p).
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Sequence, Tuple

import numpy as np

from .params import PyinError

logger = logging.getLogger(__name__)


class DecoderContractError(PyinError, RuntimeError):
    """Raised when a decoder returns a path that violates its contract."""
    pass


@dataclass
class Observation:
    """A candidate state for a frame."""
    state: int          # State index in [0, n_states)
    probability: float  # Observation probability (0-1)


ObservationSlice = List[Observation]


class TransitionModel(ABC):
    """Unnormalized transition weights as a function of state distance."""

    @abstractmethod
    def same_state_weight(self, ds, t: int):
        """Weight for staying within a regime, ds states apart."""
        pass

    @abstractmethod
    def different_state_weight(self, ds, t: int):
        """Weight for switching regime (voiced <-> unvoiced)."""
        pass

    @abstractmethod
    def transition_range(self, t: int) -> int:
        """Largest allowed state distance between frame t and t+1."""
        pass


class SequenceDecoder(ABC):
    """Resolves an observation sequence into a single best state path."""

    @abstractmethod
    def decode(
        self,
        observations: Sequence[ObservationSlice],
        n_states: int,
        transitions: TransitionModel
    ) -> np.ndarray:
        """
        Find the most likely state path.

        Args:
            observations: One observation slice per frame
            n_states: Number of real states; n_states itself is the sentinel
            transitions: Transition weight provider

        Returns:
            Integer array with one state per frame, values in [0, n_states]
        """
        pass


def _candidates(obs_slice: ObservationSlice, sentinel: int) -> Tuple[np.ndarray, np.ndarray]:
    """Candidate states and log emissions of one frame, sentinel last."""
    best = {}
    for obs in obs_slice:
        if obs.state not in best or obs.probability > best[obs.state]:
            best[obs.state] = obs.probability

    probabilities = np.array(list(best.values()), dtype=np.float64)
    unvoiced = float(np.prod(1.0 - probabilities)) if len(probabilities) else 1.0

    states = np.array(list(best.keys()) + [sentinel], dtype=int)
    with np.errstate(divide="ignore"):
        log_emission = np.log(np.append(probabilities, max(unvoiced, 0.0)))
    return states, log_emission


class SparseViterbiDecoder(SequenceDecoder):
    """Viterbi search over observed states plus the sentinel."""

    def _log_transitions(
        self,
        prev_states: np.ndarray,
        cur_states: np.ndarray,
        sentinel: int,
        transitions: TransitionModel,
        t: int
    ) -> np.ndarray:
        """Log weights, shape (len(cur_states), len(prev_states))."""
        ds = np.abs(cur_states[:, None] - prev_states[None, :])
        cur_voiced = (cur_states < sentinel)[:, None]
        prev_voiced = (prev_states < sentinel)[None, :]

        both_voiced = cur_voiced & prev_voiced
        both_unvoiced = ~cur_voiced & ~prev_voiced
        in_range = ds <= transitions.transition_range(t)

        weights = np.zeros(ds.shape)
        mask = both_voiced & in_range
        weights[mask] = transitions.same_state_weight(ds[mask], t)
        weights[both_unvoiced] = transitions.same_state_weight(0, t)
        weights[cur_voiced != prev_voiced] = transitions.different_state_weight(0, t)

        with np.errstate(divide="ignore"):
            return np.log(np.maximum(weights, 0.0))

    def decode(
        self,
        observations: Sequence[ObservationSlice],
        n_states: int,
        transitions: TransitionModel
    ) -> np.ndarray:
        n_frames = len(observations)
        if n_frames == 0:
            return np.zeros(0, dtype=int)

        sentinel = n_states
        states, log_emission = _candidates(observations[0], sentinel)
        scores = log_emission

        frame_states = [states]
        back_pointers = []

        # Forward pass
        for t in range(1, n_frames):
            cur_states, log_emission = _candidates(observations[t], sentinel)
            log_trans = self._log_transitions(states, cur_states, sentinel, transitions, t - 1)

            total = scores[None, :] + log_trans
            best_prev = np.argmax(total, axis=1)
            scores = total[np.arange(len(cur_states)), best_prev] + log_emission

            back_pointers.append(best_prev)
            frame_states.append(cur_states)
            states = cur_states

        # Backward pass
        path = np.zeros(n_frames, dtype=int)
        index = int(np.argmax(scores))
        path[-1] = frame_states[-1][index]
        for t in range(n_frames - 2, -1, -1):
            index = int(back_pointers[t][index])
            path[t] = frame_states[t][index]

        logger.debug("Decoded %d frames, %d voiced", n_frames, int(np.sum(path < sentinel)))
        return path
