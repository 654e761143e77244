"""
Shared test signals with known embedding properties.

Every signal here has a dimension or delay structure that the published
estimators agree on. No ambiguous cases.
"""
import numpy as np
import pytest


@pytest.fixture
def white_noise():
    """White noise: no determinism, E2 ~ 1 for every dimension."""
    rng = np.random.RandomState(42)
    return rng.randn(3000)


@pytest.fixture
def sine_wave():
    """Sine over 10 periods: a closed curve, embeds in 2 dimensions."""
    return np.sin(np.linspace(0, 20 * np.pi, 1000))


@pytest.fixture
def lorenz_x():
    """Lorenz attractor x-component. Fractal dimension ~ 2.06, embeds in 3.

    Integrated with standard parameters: sigma=10, rho=28, beta=8/3,
    sampled at dt = 0.01 after a transient of 10 time units.
    """
    from scipy.integrate import solve_ivp

    def lorenz(t, state):
        x, y, z = state
        return [10 * (y - x), x * (28 - z) - y, x * y - (8/3) * z]

    t_eval = np.arange(10, 40, 0.01)
    sol = solve_ivp(lorenz, [0, 40], [1.0, 1.0, 1.0], t_eval=t_eval, rtol=1e-10)
    return sol.y[0]
