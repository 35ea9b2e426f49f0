"""
Analysis parameters for probabilistic YIN pitch tracking.

A PyinParameters object is the complete, immutable configuration of one
analysis run. default_parameters() gives the stock configuration, which
only needs the hop length from the caller.

Defaults:
- Pitch range 50-800 Hz quantized into 480 states (10 per semitone)
- Difference-function window of 300 samples inside a 1024-sample frame
- Beta threshold distribution with alpha 1.7 and mean 0.2
- Confidence emphasis 0.5
- Pitch may move at most 12 states between adjacent frames
"""

from dataclasses import dataclass, asdict, replace as _replace


class PyinError(Exception):
    """Base class for pyintrack errors."""
    pass


class InvalidParameters(PyinError, ValueError):
    """Raised when analysis parameters are inconsistent."""
    pass


@dataclass(frozen=True)
class PyinParameters:
    """
    Configuration for one pYIN analysis.

    Attributes:
        pitch_floor: Lowest trackable frequency in Hz
        pitch_ceiling: Highest trackable frequency in Hz
        n_states: Number of pitch states between floor and ceiling
        correlation_window: Difference-function window length in samples
        beta_alpha: Alpha shape of the threshold distribution
        beta_mean: Mean of the threshold distribution
        emphasis: Confidence emphasis factor (0 = raw, 1 = strongest)
        transition_range: Max state jump between adjacent frames
        frame_length: Analysis frame length in samples
        hop_length: Frame step in samples
    """
    pitch_floor: float = 50.0
    pitch_ceiling: float = 800.0
    n_states: int = 480
    correlation_window: int = 300
    beta_alpha: float = 1.7
    beta_mean: float = 0.2
    emphasis: float = 0.5
    transition_range: int = 12
    frame_length: int = 1024
    hop_length: int = 256

    @property
    def n_lags(self) -> int:
        """Length of the difference function."""
        return self.frame_length - self.correlation_window

    @property
    def fill_frames(self) -> int:
        """Frames to back-fill before a voicing onset (ceil(frame / hop))."""
        return -(-self.frame_length // self.hop_length)

    def validate(self) -> "PyinParameters":
        """
        Check parameter consistency.

        Returns:
            self, so calls can be chained

        Raises:
            InvalidParameters: If any value is out of range
        """
        if self.pitch_floor <= 0:
            raise InvalidParameters(f"pitch_floor must be positive, got {self.pitch_floor}")
        if self.pitch_floor >= self.pitch_ceiling:
            raise InvalidParameters(
                f"pitch_floor ({self.pitch_floor}) must be below "
                f"pitch_ceiling ({self.pitch_ceiling})"
            )
        if self.n_states < 1:
            raise InvalidParameters(f"n_states must be at least 1, got {self.n_states}")
        if self.correlation_window < 1:
            raise InvalidParameters(
                f"correlation_window must be at least 1, got {self.correlation_window}"
            )
        if self.frame_length <= self.correlation_window:
            raise InvalidParameters(
                f"frame_length ({self.frame_length}) must exceed "
                f"correlation_window ({self.correlation_window})"
            )
        if self.hop_length < 1:
            raise InvalidParameters(f"hop_length must be at least 1, got {self.hop_length}")
        if self.beta_alpha <= 0:
            raise InvalidParameters(f"beta_alpha must be positive, got {self.beta_alpha}")
        if not 0.0 < self.beta_mean < 1.0:
            raise InvalidParameters(f"beta_mean must be in (0, 1), got {self.beta_mean}")
        if not 0.0 <= self.emphasis <= 1.0:
            raise InvalidParameters(f"emphasis must be in [0, 1], got {self.emphasis}")
        if self.transition_range < 0:
            raise InvalidParameters(
                f"transition_range must be non-negative, got {self.transition_range}"
            )
        return self

    def replace(self, **changes) -> "PyinParameters":
        """Return a validated copy with some fields changed."""
        return _replace(self, **changes).validate()

    def to_dict(self) -> dict:
        return asdict(self)


def default_parameters(hop_length: int) -> PyinParameters:
    """
    Stock parameters for a given hop length.

    Args:
        hop_length: Frame step in samples

    Returns:
        Validated PyinParameters
    """
    return PyinParameters(hop_length=int(hop_length)).validate()
