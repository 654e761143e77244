"""
Embedding dimension validation on systems of known dimension.

Ground truth:
- Lorenz attractor: embedding dimension 3 (Kennel et al. 1992)
- Sine wave:        embedding dimension 2 (closed curve)
- White noise:      no saturation, E2 ~ 1 (Cao 1997)
"""
import numpy as np
import pytest

from tsembed import (
    estimate_dimension,
    fnn,
    optimal_delay,
    optimal_dimension,
    stochastic_indicator,
)

LORENZ_TAU = 10


class TestFalseNeighboursLorenz:
    """Kennel's FNN drop at the attractor's embedding dimension."""

    def test_counts_vanish(self, lorenz_x):
        counts = fnn(lorenz_x, LORENZ_TAU, range(0, 5))
        n = len(lorenz_x)
        assert counts[0] > 3 * counts[3], \
            f"FNN should drop from 1 to 4 dimensions, got {counts}"
        assert counts[-1] < 0.02 * n, \
            f"FNN fraction at dimension 5 should be ~0, got {counts[-1] / n:.4f}"

    def test_optimal_dimension(self, lorenz_x):
        dimension = optimal_dimension(
            lorenz_x, LORENZ_TAU, range(0, 6), method='fnn', threshold=0.02
        )
        assert 3 <= dimension <= 4, f"Lorenz embeds in 3 dimensions, got {dimension}"


class TestCaoLorenz:
    """Cao's E1 saturates, E2 reveals determinism."""

    def test_e1_saturates(self, lorenz_x):
        e1 = estimate_dimension(lorenz_x, LORENZ_TAU, range(0, 6))
        assert e1[0] < 0.9, f"E1 should rise from dimension 1, got {e1[0]:.4f}"
        assert abs(e1[-1] - 1) < 0.1, \
            f"E1 should saturate near 1, got {e1[-1]:.4f}"

    def test_e2_deterministic(self, lorenz_x):
        e2 = stochastic_indicator(lorenz_x, LORENZ_TAU, range(0, 4))
        assert np.any(np.abs(e2 - 1) > 0.1), \
            f"Deterministic series should have E2 != 1 somewhere, got {e2}"


class TestCaoNoise:

    def test_e2_flat(self, white_noise):
        e2 = stochastic_indicator(white_noise, 1, range(1, 5))
        assert np.all(np.abs(e2 - 1) < 0.1), \
            f"White noise E2 should be ~1 for every dimension, got {e2}"

    def test_e1_finite(self, white_noise):
        """E1 on noise also approaches 1; only E2 tells it apart."""
        e1 = estimate_dimension(white_noise, 1, range(1, 5))
        assert np.all(np.isfinite(e1))


class TestSineScenario:
    """Delay from the first zero of the ACF, then E1 over dimensions 2..6."""

    def test_saturates_at_two(self, sine_wave):
        tau = optimal_delay(sine_wave, method='autocorr')
        # quarter of the 100-sample period
        assert 20 <= tau <= 30, f"Expected tau ~ 25, got {tau}"

        e1 = estimate_dimension(sine_wave, tau, range(1, 6))
        assert np.all(np.abs(e1 - 1) < 0.15), \
            f"E1 should be ~1 from dimension 2 on, got {e1}"
