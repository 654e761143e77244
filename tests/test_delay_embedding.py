"""Tests for delay embedding and delay estimation."""
import numpy as np
import pytest


def test_time_delay_embedding():
    """Time delay embedding produces correct shape."""
    signal = np.arange(100, dtype=np.float64)

    from tsembed.embedding.delay import time_delay_embedding
    emb = time_delay_embedding(signal, dimension=3, delay=2)
    assert emb.shape == (96, 3)
    # First point: [0, 2, 4]
    np.testing.assert_array_equal(emb[0], [0, 2, 4])


def test_reconstruct_counts_temporal_neighbours():
    signal = np.arange(50, dtype=np.float64)

    from tsembed.embedding.delay import reconstruct, time_delay_embedding
    np.testing.assert_array_equal(
        reconstruct(signal, 2, 3), time_delay_embedding(signal, 3, 3)
    )


def test_embed_shift_appends_delayed_column():
    """Growing by one coordinate keeps the old columns and trims the tail."""
    signal = np.arange(10, dtype=np.float64)

    from tsembed.embedding.delay import embed_shift
    grown = embed_shift(signal, signal, 3)
    assert grown.shape == (7, 2)
    np.testing.assert_array_equal(grown[:, 0], signal[:7])
    np.testing.assert_array_equal(grown[:, 1], signal[3:10])

    grown = embed_shift(grown, signal, 1)
    assert grown.shape == (6, 3)
    np.testing.assert_array_equal(grown[:, 1], signal[3:9])
    np.testing.assert_array_equal(grown[:, 2], signal[1:7])


def test_embed_shift_zero_delay_duplicates_first_column():
    signal = np.arange(5, dtype=np.float64)

    from tsembed.embedding.delay import embed_shift
    grown = embed_shift(signal[:, None], signal, 0)
    np.testing.assert_array_equal(grown[:, 0], grown[:, 1])


def test_embed_shift_too_short():
    from tsembed.embedding.delay import embed_shift
    from tsembed.errors import InvalidInputError

    with pytest.raises(InvalidInputError):
        embed_shift(np.arange(4.0), np.arange(4.0), 4)


def test_embedding_too_short():
    from tsembed.embedding.delay import time_delay_embedding
    from tsembed.errors import InvalidInputError

    with pytest.raises(InvalidInputError):
        time_delay_embedding(np.arange(5.0), dimension=4, delay=2)


def test_autocorr_method():
    """Autocorrelation zero crossing of a sine is a quarter period."""
    signal = np.sin(np.linspace(0, 20 * np.pi, 1000))

    from tsembed.embedding.delay import optimal_delay
    tau = optimal_delay(signal, method='autocorr')
    assert isinstance(tau, int)
    assert 20 <= tau <= 30


def test_mutual_info_method():
    """Mutual information method returns reasonable delay."""
    signal = np.sin(np.linspace(0, 20 * np.pi, 1000))

    from tsembed.embedding.delay import optimal_delay
    tau = optimal_delay(signal, method='mutual_info')
    assert isinstance(tau, int)
    assert tau >= 1


def test_autocorr_e_method():
    signal = np.sin(np.linspace(0, 20 * np.pi, 1000))

    from tsembed.embedding.delay import optimal_delay
    assert 1 <= optimal_delay(signal, method='autocorr_e') <= optimal_delay(signal, method='autocorr')


def test_constant_signal():
    """Constant signal returns delay=1."""
    from tsembed.embedding.delay import optimal_delay
    assert optimal_delay(np.ones(100)) == 1


def test_short_signal():
    from tsembed.embedding.delay import optimal_delay
    assert optimal_delay(np.array([1.0, 2.0, 3.0])) == 1


def test_unknown_method():
    from tsembed.embedding.delay import optimal_delay
    with pytest.raises(ValueError):
        optimal_delay(np.random.RandomState(0).randn(100), method='spectral')


def test_standardize():
    from tsembed.embedding.delay import standardize
    from tsembed.errors import InvalidInputError

    z = standardize(np.random.RandomState(42).randn(500) * 3 + 7)
    assert np.mean(z) == pytest.approx(0.0, abs=1e-12)
    assert np.std(z, ddof=1) == pytest.approx(1.0)

    with pytest.raises(InvalidInputError):
        standardize(np.ones(10))


def test_lag_curves():
    from tsembed.embedding.delay import lag_autocorrelation, lag_mutual_information
    signal = np.sin(np.linspace(0, 20 * np.pi, 1000))

    acf = lag_autocorrelation(signal, 50)
    assert acf.shape == (51,)
    assert acf[0] == pytest.approx(1.0)
    assert acf[50] < -0.8

    mi = lag_mutual_information(signal, 10)
    assert mi.shape == (10,)
    assert np.all(mi >= 0)
