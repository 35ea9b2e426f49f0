"""Shared fixtures for pyintrack tests."""

import numpy as np
import pytest

from pyintrack import default_parameters

SAMPLE_RATE = 16000


def sine(frequency, duration=1.0, sample_rate=SAMPLE_RATE, amplitude=0.5):
    """Pure sine wave."""
    t = np.arange(int(duration * sample_rate)) / sample_rate
    return amplitude * np.sin(2 * np.pi * frequency * t)


@pytest.fixture
def params():
    """Stock parameters with a 128-sample hop."""
    return default_parameters(128)
