"""
Confidence model for YIN valleys.

pYIN treats the YIN threshold as a random variable with a beta
distribution. A valley's confidence is the probability mass of threshold
values that would select it: the mass between its own depth and the depth
of the previous (shallower) valley, or 1.0 for the first valley.

The distribution is parameterised by alpha and its mean:
    b = a * (1 - mean) / mean

Raw confidences are capped at MAX_CONFIDENCE and then emphasized:
    p' = emphasis * (sqrt(1 - (1 - p)²) - p) + p
which pushes mid-range values toward 1 while keeping 0 and 1 fixed.
"""

import numpy as np
from typing import List, Sequence

N_BINS = 100
MAX_CONFIDENCE = 0.99
EPS = 1e-8


def beta_b_from_mean(alpha: float, mean: float) -> float:
    """Beta shape b giving the requested mean for shape a."""
    return alpha * (1.0 - mean) / mean


def normalized_beta_pdf(alpha: float, beta: float, n_bins: int = N_BINS) -> np.ndarray:
    """
    Beta density sampled at bin centers over [0, 1], normalized to sum 1.

    Args:
        alpha: Shape a
        beta: Shape b
        n_bins: Number of bins

    Returns:
        Array of n_bins probabilities
    """
    from scipy import stats

    centers = (np.arange(n_bins) + 0.5) / n_bins
    pdf = stats.beta.pdf(centers, alpha, beta)
    return pdf / np.sum(pdf)


def emphasize(p, emphasis: float):
    """Push confidence p toward certainty by the emphasis factor."""
    return emphasis * (np.sqrt(1.0 - (1.0 - p) ** 2) - p) + p


class ConfidenceModel:
    """
    Maps valley depths to observation probabilities.

    Attributes:
        table: Normalized beta probability table (N_BINS entries)
        emphasis: Emphasis factor in [0, 1]
    """

    def __init__(self, beta_alpha: float, beta_mean: float, emphasis: float):
        self._table = normalized_beta_pdf(beta_alpha, beta_b_from_mean(beta_alpha, beta_mean))
        self._emphasis = float(emphasis)

    @classmethod
    def from_parameters(cls, params) -> "ConfidenceModel":
        return cls(params.beta_alpha, params.beta_mean, params.emphasis)

    @property
    def table(self) -> np.ndarray:
        return self._table

    @property
    def emphasis(self) -> float:
        return self._emphasis

    def raw_confidence(self, depth: float, previous_depth: float = 1.0) -> float:
        """
        Probability mass between a valley and the previous one, capped.

        Args:
            depth: Difference-function value at the valley
            previous_depth: Value at the previous valley (1.0 for the first)

        Returns:
            Confidence in [0, MAX_CONFIDENCE]
        """
        n = len(self._table)
        lo = int(np.clip(np.floor(depth * n), 0, n))
        hi = int(np.clip(np.floor(previous_depth * n), 0, n))
        p = float(np.sum(self._table[lo:hi]))
        return min(p, MAX_CONFIDENCE)

    def valley_confidences(self, d: np.ndarray, valleys: Sequence[int]) -> List[float]:
        """
        Emphasized confidence for each valley of a difference function.

        Args:
            d: Difference function
            valleys: Valley indices in increasing order

        Returns:
            One probability per valley
        """
        confidences = []
        previous = 1.0
        for index in valleys:
            depth = d[index] + EPS
            p = self.raw_confidence(depth, previous)
            confidences.append(float(emphasize(p, self._emphasis)))
            previous = depth
        return confidences
