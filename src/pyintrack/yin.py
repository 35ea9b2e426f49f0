"""
YIN periodicity candidates.

Documentation sources:
- de Cheveigné & Kawahara (2002): "YIN, a fundamental frequency estimator
  for speech and music"
- Mauch & Dixon (2014): "pYIN: A Fundamental Frequency Estimator Using
  Probabilistic Threshold Distributions"

Key facts:
- Difference function (YIN step 2):
      d(τ) = Σ_{j=0}^{W-1} (x[j] - x[j+τ])²
- Cumulative mean normalized difference (YIN step 3):
      d'(0) = 1,  d'(τ) = d(τ) / ((1/τ) Σ_{k=1}^{τ} d(k))
- Instead of a single absolute threshold, every local minimum below a
  tightening threshold is kept as a candidate. Each accepted valley must
  be deeper than the previous one by at least VALLEY_STEP.
- Each valley is refined to a fractional lag by parabolic interpolation
  (YIN step 5); selection and confidence use the integer index.

Frame boundary policy: frames are centered on their hop position and
zero-padded where they extend past either end of the signal.
"""

import numpy as np
from numpy.lib.stride_tricks import sliding_window_view
from typing import List

VALLEY_THRESHOLD = 1.0
VALLEY_STEP = 0.01


def fetch_frame(samples: np.ndarray, center: int, frame_length: int) -> np.ndarray:
    """
    Extract a frame centered on a sample, zero-padded at the boundaries.

    Args:
        samples: Signal
        center: Center sample index
        frame_length: Frame length in samples

    Returns:
        New array of length frame_length
    """
    start_sample = center - frame_length // 2
    end_sample = start_sample + frame_length

    # Handle boundaries
    if start_sample < 0 or end_sample > len(samples):
        frame = np.zeros(frame_length)
        src_start = max(0, start_sample)
        src_end = min(len(samples), end_sample)
        if src_end > src_start:
            dst_start = src_start - start_sample
            frame[dst_start:dst_start + (src_end - src_start)] = samples[src_start:src_end]
        return frame

    return samples[start_sample:end_sample].astype(np.float64, copy=True)


def difference_function(frame: np.ndarray, window: int) -> np.ndarray:
    """
    Cumulative mean normalized difference function of a frame.

    Args:
        frame: Frame samples (already de-meaned)
        window: Integration window W; must be shorter than the frame

    Returns:
        Array of length len(frame) - window. Low values mean strong
        periodicity at that lag. Flat stretches (zero cumulative
        difference) are reported as 1.
    """
    n_lags = len(frame) - window

    # Direct sum: silent frames stay exactly zero
    lagged = sliding_window_view(frame, window)[:n_lags]
    d = np.sum((lagged - frame[:window]) ** 2, axis=1)

    cmndf = np.ones(n_lags)
    if n_lags > 1:
        cumulative = np.cumsum(d[1:])
        tau = np.arange(1, n_lags)
        positive = cumulative > 0
        cmndf[1:][positive] = d[1:][positive] * tau[positive] / cumulative[positive]
    return cmndf


def find_valleys(
    d: np.ndarray,
    threshold: float = VALLEY_THRESHOLD,
    step: float = VALLEY_STEP
) -> List[int]:
    """
    Find strict local minima of d below a tightening threshold.

    Each accepted valley lowers the threshold to (its value - step), so
    successive valleys are strictly deeper.

    Args:
        d: Difference function
        threshold: Initial threshold
        step: Margin by which each next valley must be deeper

    Returns:
        Valley indices in increasing order (decreasing frequency)
    """
    valleys = []
    for i in range(1, len(d) - 1):
        if d[i - 1] > d[i] and d[i + 1] > d[i] and d[i] < threshold:
            threshold = d[i] - step
            valleys.append(i)
    return valleys


def refine_valley(d: np.ndarray, index: int) -> float:
    """
    Sub-sample position of a valley by parabolic interpolation (YIN step 5).

    Args:
        d: Difference function
        index: Integer valley index

    Returns:
        Fractional lag; the integer index when the fit is degenerate or
        moves the vertex by a full sample or more
    """
    if index <= 0 or index >= len(d) - 1:
        return float(index)

    d_prev = d[index - 1]
    d_curr = d[index]
    d_next = d[index + 1]

    denom = d_prev - 2 * d_curr + d_next
    if abs(denom) > 1e-10:
        delta = 0.5 * (d_prev - d_next) / denom
        if abs(delta) < 1:
            return index + delta
    return float(index)
