"""
pyintrack - Probabilistic YIN (pYIN) pitch tracking.

Estimates the fundamental frequency of a monophonic signal frame by frame.
Each frame yields candidate periods with confidences; a hidden-state
decoder then picks the most likely pitch trajectory, including unvoiced
frames.

Usage:
    import numpy as np
    from pyintrack import analyze, default_parameters

    params = default_parameters(hop_length=256)
    f0, n_frames = analyze(params, samples, sample_rate=16000)

    # Or through a Sound object
    from pyintrack import Sound
    pitch = Sound.from_file("audio.wav").to_pitch_pyin(hop_length=256)
    print(pitch.values())

Parameters can also be read from a TOML file, see pyintrack.config.
"""

from .params import PyinParameters, PyinError, InvalidParameters, default_parameters
from .config import load_parameters
from .decoder import (
    DecoderContractError,
    Observation,
    SequenceDecoder,
    SparseViterbiDecoder,
    TransitionModel,
)
from .pyin import (
    EmptyInput,
    PitchTransitions,
    analyze,
    analyze_states,
    build_observations,
    fill_voicing_gaps,
)
from .semitone import SemitoneGrid
from .confidence import ConfidenceModel
from .pitch import Pitch
from .sound import Sound

__version__ = "0.1.0"
__all__ = [
    "PyinParameters",
    "PyinError",
    "InvalidParameters",
    "EmptyInput",
    "DecoderContractError",
    "default_parameters",
    "load_parameters",
    "Observation",
    "SequenceDecoder",
    "SparseViterbiDecoder",
    "TransitionModel",
    "PitchTransitions",
    "SemitoneGrid",
    "ConfidenceModel",
    "analyze",
    "analyze_states",
    "build_observations",
    "fill_voicing_gaps",
    "Pitch",
    "Sound",
]
