"""Tests for the frequency quantizer and the confidence model."""

import numpy as np
import pytest

from pyintrack import ConfidenceModel, SemitoneGrid, default_parameters
from pyintrack.confidence import (
    MAX_CONFIDENCE,
    beta_b_from_mean,
    emphasize,
    normalized_beta_pdf,
)
from pyintrack.yin import difference_function, find_valleys


@pytest.fixture
def grid():
    return SemitoneGrid.from_parameters(default_parameters(256))


# =============================================================================
# Frequency quantizer
# =============================================================================

class TestSemitoneGrid:
    """Frequency <-> state mapping."""

    def test_default_resolution(self, grid):
        assert grid.n_states == 480
        assert grid.states_per_semitone == pytest.approx(10.0)

    def test_floor_is_state_zero(self, grid):
        assert grid.state_from_frequency(50.0) == 0
        assert grid.frequency_from_state(0) == pytest.approx(50.0)

    def test_octaves_land_on_states(self, grid):
        assert grid.state_from_frequency(100.0) == 120
        assert grid.state_from_frequency(200.0) == 240
        assert grid.frequency_from_state(240) == pytest.approx(200.0)

    def test_out_of_range_clamps(self, grid):
        assert grid.state_from_frequency(10.0) == 0
        assert grid.state_from_frequency(800.0) == 479
        assert grid.state_from_frequency(5000.0) == 479

    def test_period(self, grid):
        assert grid.state_from_period(80, 16000) == 240

    def test_round_trip(self, grid):
        states = np.arange(grid.n_states)
        frequencies = grid.frequency_from_state(states)
        assert np.all(frequencies >= 50.0)
        assert np.all(frequencies < 800.0)
        np.testing.assert_array_equal(grid.state_from_frequency(frequencies), states)

    def test_forward_round_trip(self, grid):
        frequencies = np.geomspace(50.0, 799.0, 1000)
        states = grid.state_from_frequency(frequencies)
        back = grid.state_from_frequency(grid.frequency_from_state(states))
        np.testing.assert_array_equal(back, states)

    def test_monotonic(self, grid):
        frequencies = np.linspace(40.0, 900.0, 2000)
        states = grid.state_from_frequency(frequencies)
        assert np.all(np.diff(states) >= 0)

    def test_quantization_error_is_half_a_step(self, grid):
        frequencies = np.geomspace(50.0, 790.0, 500)
        centers = grid.frequency_from_state(grid.state_from_frequency(frequencies))
        error = np.abs(np.log2(frequencies / centers))
        assert np.all(error <= grid.step / 2 + 1e-12)

    def test_scalar_and_array_types(self, grid):
        assert isinstance(grid.state_from_frequency(123.0), int)
        assert isinstance(grid.frequency_from_state(12), float)
        assert grid.state_from_frequency(np.array([100.0, 200.0])).shape == (2,)


# =============================================================================
# Confidence model
# =============================================================================

class TestBetaTable:
    """Precomputed threshold distribution."""

    def test_b_from_mean(self):
        assert beta_b_from_mean(1.7, 0.2) == pytest.approx(6.8)
        b = beta_b_from_mean(2.0, 0.1)
        assert 2.0 / (2.0 + b) == pytest.approx(0.1)

    def test_table_sums_to_one(self):
        table = normalized_beta_pdf(1.7, 6.8)
        assert len(table) == 100
        assert np.sum(table) == pytest.approx(1.0)
        assert np.all(table >= 0)

    def test_table_mass_near_mean(self):
        table = normalized_beta_pdf(1.7, 6.8)
        mean = np.sum(table * (np.arange(100) + 0.5) / 100)
        assert mean == pytest.approx(0.2, abs=0.01)


class TestEmphasis:
    """Confidence reshaping."""

    def test_fixed_points(self):
        for emphasis in (0.0, 0.5, 1.0):
            assert emphasize(0.0, emphasis) == pytest.approx(0.0)
            assert emphasize(1.0, emphasis) == pytest.approx(1.0)

    def test_zero_emphasis_is_identity(self):
        p = np.linspace(0, 1, 11)
        np.testing.assert_allclose(emphasize(p, 0.0), p)

    def test_full_emphasis(self):
        assert emphasize(0.5, 1.0) == pytest.approx(np.sqrt(0.75))

    def test_pushes_upward_within_unit_interval(self):
        p = np.linspace(0, 1, 101)
        for emphasis in (0.25, 0.5, 1.0):
            q = emphasize(p, emphasis)
            assert np.all(q >= p - 1e-12)
            assert np.all((q >= 0) & (q <= 1))


class TestConfidenceModel:
    """Valley depth -> observation probability."""

    def test_deep_first_valley_is_capped(self):
        model = ConfidenceModel(1.7, 0.2, 0.0)
        assert model.raw_confidence(1e-8) == pytest.approx(MAX_CONFIDENCE)

    def test_mass_between_valleys(self):
        model = ConfidenceModel(1.7, 0.2, 0.0)
        d = np.array([1.0, 0.5, 0.9, 0.1, 0.8])
        first, second = model.valley_confidences(d, [1, 3])
        assert first == pytest.approx(np.sum(model.table[50:100]))
        assert second == pytest.approx(np.sum(model.table[10:50]))

    def test_emphasis_applied(self):
        raw = ConfidenceModel(1.7, 0.2, 0.0)
        emphasized = ConfidenceModel(1.7, 0.2, 0.5)
        d = np.array([1.0, 0.3, 0.9])
        p = raw.valley_confidences(d, [1])[0]
        q = emphasized.valley_confidences(d, [1])[0]
        assert q == pytest.approx(emphasize(p, 0.5))
        assert q > p

    def test_confidence_bounds_on_noise(self):
        model = ConfidenceModel.from_parameters(default_parameters(256))
        raw = ConfidenceModel(1.7, 0.2, 0.0)
        rng = np.random.default_rng(4)
        for _ in range(10):
            n = np.arange(1024)
            frame = np.sin(2 * np.pi * n / rng.uniform(20, 200)) + rng.normal(size=1024)
            d = difference_function(frame - frame.mean(), 300)
            valleys = find_valleys(d)
            for p in raw.valley_confidences(d, valleys):
                assert 0.0 < p <= MAX_CONFIDENCE
            for p in model.valley_confidences(d, valleys):
                assert 0.0 <= p <= 1.0

    def test_no_valleys(self):
        model = ConfidenceModel(1.7, 0.2, 0.5)
        assert model.valley_confidences(np.ones(10), []) == []
