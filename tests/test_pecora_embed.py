"""Tests for the Pecora embedding loop and its stop conditions."""
import numpy as np
import pytest

from tsembed.embedding.delay import standardize
from tsembed.errors import InsufficientNeighborsError, InvalidInputError
from tsembed.pecora import (
    ContinuityDecay,
    EmbeddingCycle,
    UndersamplingLevel,
    pecora_embed,
    select_delay,
)

SMALL_RUN = dict(tau_max=8, eps_tries=10, sample_size=0.1, stop_conditions=())


@pytest.fixture
def quasi_periodic():
    t = np.arange(600)
    rng = np.random.RandomState(11)
    return np.sin(0.21 * t) + 0.6 * np.sin(0.057 * t) + 0.05 * rng.randn(600)


# ---------------------------------------------------------------------------
# select_delay
# ---------------------------------------------------------------------------

def test_select_first_pronounced_peak():
    assert select_delay([0, 1, 0, 2, 0, 1.5, 0]) == 3


def test_select_highest_peak_without_pronounced_one():
    assert select_delay([0, 3, 0, 2, 0, 1, 0]) == 1


def test_select_monotone_curve():
    assert select_delay([0.0, 0.1, 0.2, 0.3]) == 3


def test_select_single_value():
    assert select_delay([0.5]) == 0


# ---------------------------------------------------------------------------
# pecora_embed
# ---------------------------------------------------------------------------

def test_result_invariants(quasi_periodic):
    result = pecora_embed(quasi_periodic, max_cycles=2, rng=0, **SMALL_RUN)

    assert result.points.shape[1] == 1 + len(result.delays)
    assert len(result.delays) == 2
    assert len(result.continuity) == len(result.undersampling) == len(result.delays)
    assert all(0 <= d <= 8 for d in result.delays)
    assert all(len(c) == 9 for c in result.continuity)
    assert all(len(u) == 9 for u in result.undersampling)

    series = standardize(quasi_periodic)
    n = len(result.points)
    for column, lag in enumerate(result.lags):
        np.testing.assert_allclose(result.points[:, column], series[lag:lag + n])


def test_seed_reproducible(quasi_periodic):
    first = pecora_embed(quasi_periodic, max_cycles=1, rng=5, **SMALL_RUN)
    second = pecora_embed(quasi_periodic, max_cycles=1, rng=5, **SMALL_RUN)

    assert first.delays == second.delays
    np.testing.assert_array_equal(first.continuity[0], second.continuity[0])


def test_parallel_matches_serial(quasi_periodic):
    serial = pecora_embed(quasi_periodic, max_cycles=1, rng=2, n_jobs=1, **SMALL_RUN)
    parallel = pecora_embed(quasi_periodic, max_cycles=1, rng=2, n_jobs=2, **SMALL_RUN)

    assert serial.delays == parallel.delays
    np.testing.assert_allclose(serial.continuity[0], parallel.continuity[0])
    np.testing.assert_allclose(serial.undersampling[0], parallel.undersampling[0])


def test_out_of_range_settings_warn(quasi_periodic):
    options = dict(SMALL_RUN, sample_size=1.5)
    with pytest.warns(UserWarning, match="sample_size"):
        pecora_embed(quasi_periodic, max_cycles=1, rng=0, **options)

    with pytest.warns(UserWarning):
        result = pecora_embed(quasi_periodic, norm='manhattan', max_cycles=1, rng=0, **SMALL_RUN)
    assert result.points.shape[1] == 2


def test_nan_settings_fall_back_to_defaults(quasi_periodic):
    for name in ("sample_size", "break_percentage", "beta"):
        options = dict(SMALL_RUN, **{name: float("nan")})
        with pytest.warns(UserWarning, match=name):
            result = pecora_embed(quasi_periodic, max_cycles=1, rng=0, **options)
        assert len(result.delays) == 1


def test_beta_out_of_range_warns(quasi_periodic):
    with pytest.warns(UserWarning, match="beta"):
        result = pecora_embed(quasi_periodic, beta=1.5, max_cycles=1, rng=0, **SMALL_RUN)
    assert all(np.all(u <= 0.5) for u in result.undersampling)


def test_warnings_point_at_the_caller(quasi_periodic):
    """Clamping and norm warnings are attributed to the calling line."""
    with pytest.warns(UserWarning) as record:
        pecora_embed(quasi_periodic, norm="manhattan", max_cycles=1, rng=0,
                     **dict(SMALL_RUN, sample_size=2.0))

    ours = [w for w in record if "sample_size" in str(w.message) or "norm" in str(w.message)]
    assert len(ours) == 2
    assert all(w.filename == __file__ for w in ours)


def test_theiler_window_too_wide():
    series = np.random.RandomState(0).randn(60)
    with pytest.raises(InsufficientNeighborsError):
        pecora_embed(series, tau_max=2, theiler=30, max_cycles=1, rng=0)


def test_invalid_arguments(quasi_periodic):
    with pytest.raises(InvalidInputError):
        pecora_embed(quasi_periodic, tau_max=-1)
    with pytest.raises(InvalidInputError):
        pecora_embed(quasi_periodic, eps_tries=0)
    with pytest.raises(InvalidInputError):
        pecora_embed(np.ones(200))
    with pytest.raises(InvalidInputError):
        pecora_embed(quasi_periodic[:20], tau_max=10)


def test_custom_stop_condition(quasi_periodic):
    seen = []

    def stop_now(cycles):
        seen.append(list(cycles))
        return True

    result = pecora_embed(
        quasi_periodic, max_cycles=3, rng=0, **dict(SMALL_RUN, stop_conditions=[stop_now])
    )

    assert len(result.delays) == 1
    assert result.points.shape[1] == 2
    assert len(seen) == 1
    assert isinstance(seen[0][0], EmbeddingCycle)
    assert seen[0][0].delay == result.delays[0]


def test_timeout_stops_after_first_cycle(quasi_periodic):
    result = pecora_embed(quasi_periodic, max_cycles=3, rng=0, timeout=0, **SMALL_RUN)
    assert len(result.delays) == 1


# ---------------------------------------------------------------------------
# Stop conditions
# ---------------------------------------------------------------------------

def _cycle(continuity, delay=1, undersampling=(0.0,)):
    return EmbeddingCycle(2, delay, np.asarray(continuity, dtype=float),
                          np.asarray(undersampling, dtype=float))


def test_continuity_decay():
    wavy = _cycle([0, 1, 0, 1, 0])
    flat = _cycle([0.5, 0.5, 0.5, 0.5, 0.5])
    condition = ContinuityDecay(0.1)

    assert not condition([wavy])
    assert not condition([wavy, wavy])
    assert condition([wavy, flat])


def test_undersampling_level():
    condition = UndersamplingLevel(0.05)

    assert not condition([])
    assert not condition([_cycle([0, 1], undersampling=[0.01, 0.02])])
    assert condition([_cycle([0, 1], undersampling=[0.01, 0.2])])
