"""
Delay Embedding

Time delay reconstruction, single-coordinate growth and delay estimation.
"""

import numpy as np
from typing import Optional

from tsembed.errors import InvalidInputError


def standardize(signal: np.ndarray, ddof: int = 1) -> np.ndarray:
    """
    Z-score a signal: (x - mean) / std.

    Raises InvalidInputError for a constant signal, which carries no
    information to embed.
    """
    signal = np.asarray(signal, dtype=np.float64).flatten()
    std = np.std(signal, ddof=ddof) if len(signal) > ddof else 0.0

    if not np.isfinite(std) or std < 1e-15:
        raise InvalidInputError("Cannot standardize a constant signal")

    return (signal - np.mean(signal)) / std


def time_delay_embedding(
    signal: np.ndarray,
    dimension: int = 3,
    delay: int = 1
) -> np.ndarray:
    """
    Uniform delay reconstruction of a scalar signal.

    Row i is [x(i), x(i + delay), ..., x(i + (dimension - 1) * delay)], so
    the trajectory has len(signal) - (dimension - 1) * delay points.
    """
    signal = np.asarray(signal, dtype=np.float64).flatten()

    if dimension < 1:
        raise InvalidInputError(f"Embedding dimension must be >= 1, got {dimension}")
    if delay < 0:
        raise InvalidInputError(f"Delay must be >= 0, got {delay}")

    span = (dimension - 1) * delay
    n_points = len(signal) - span
    if n_points <= 0:
        raise InvalidInputError(
            f"{len(signal)} samples cannot hold a {dimension}-dimensional "
            f"embedding with delay {delay}"
        )

    rows = np.arange(n_points)[:, None]
    offsets = delay * np.arange(dimension)[None, :]
    return signal[rows + offsets]


def reconstruct(signal: np.ndarray, gamma: int, delay: int) -> np.ndarray:
    """Delay reconstruction with `gamma` temporal neighbours (dimension gamma + 1)."""
    return time_delay_embedding(signal, gamma + 1, delay)


def embed_shift(points: np.ndarray, signal: np.ndarray, delay: int) -> np.ndarray:
    """
    Append one delayed coordinate to a phase space trajectory.

    Parameters
    ----------
    points : np.ndarray
        Trajectory (n_points x d) whose first column is signal[:n_points],
        or a 1D signal for the unembedded case
    signal : np.ndarray
        The scalar series the trajectory was built from
    delay : int
        Shift of the new coordinate relative to the first one

    Returns
    -------
    np.ndarray
        Trajectory ((n_points - delay) x (d + 1)); the new column is
        signal[delay:n_points]
    """
    points = np.asarray(points, dtype=np.float64)
    if points.ndim == 1:
        points = points[:, None]
    signal = np.asarray(signal, dtype=np.float64).flatten()

    n = points.shape[0]
    m = n - delay

    if delay < 0:
        raise InvalidInputError(f"Delay must be >= 0, got {delay}")
    if m <= 0:
        raise InvalidInputError(
            f"Trajectory too short for delay {delay}: {n} points"
        )
    if len(signal) < n:
        raise InvalidInputError(
            f"Signal has {len(signal)} samples, trajectory has {n} points"
        )

    grown = np.empty((m, points.shape[1] + 1))
    grown[:, :-1] = points[:m]
    grown[:, -1] = signal[delay:n]

    return grown


def lag_autocorrelation(signal: np.ndarray, max_lag: int) -> np.ndarray:
    """Autocorrelation of a signal at lags 0..max_lag (biased estimate)."""
    centered = signal - np.mean(signal)
    var = np.dot(centered, centered)
    return np.array([
        np.dot(centered[:len(centered) - lag], centered[lag:]) / var
        for lag in range(max_lag + 1)
    ])


def lag_mutual_information(signal: np.ndarray, max_lag: int, bins: int = 16) -> np.ndarray:
    """Mutual information between the signal and its lagged copy, lags 1..max_lag."""
    return np.array([_lagged_mutual_info(signal, lag, bins) for lag in range(1, max_lag + 1)])


def optimal_delay(
    signal: np.ndarray,
    max_lag: Optional[int] = None,
    method: str = 'mutual_info'
) -> int:
    """
    Delay for a uniform embedding from a lag curve of the signal.

    Parameters
    ----------
    signal : np.ndarray
        1D time series
    max_lag : int, optional
        Largest lag examined, n // 4 by default and never above n // 2
    method : str
        'mutual_info': first local minimum of the lagged mutual information
        (Fraser & Swinney, 1986)
        'autocorr': first lag with autocorrelation <= 0
        'autocorr_e': first lag with autocorrelation <= 1/e

    Returns
    -------
    int
        Delay >= 1; 1 for constant or very short signals

    Notes
    -----
    When the autocorrelation never reaches its threshold, max_lag is
    returned. A mutual information curve without a local minimum falls back
    to the first lag where it halves, then to max_lag // 4.
    """
    if method not in ('mutual_info', 'autocorr', 'autocorr_e'):
        raise InvalidInputError(f"Unknown method: {method}")

    signal = np.asarray(signal, dtype=np.float64).flatten()
    n = len(signal)

    if n < 4 or np.ptp(signal) < 1e-15:
        return 1

    max_lag = min(n // 4 if max_lag is None else max_lag, n // 2)
    if max_lag < 2:
        return 1

    if method == 'mutual_info':
        mi = lag_mutual_information(signal, max_lag)
        # mi[k] belongs to lag k + 1
        minima = np.flatnonzero((mi[1:-1] < mi[:-2]) & (mi[1:-1] < mi[2:]))
        if len(minima):
            return int(minima[0]) + 2

        halved = np.flatnonzero(mi < 0.5 * mi[0])
        if len(halved):
            return int(halved[0]) + 1
        return max(1, max_lag // 4)

    threshold = 0.0 if method == 'autocorr' else 1 / np.e
    below = np.flatnonzero(lag_autocorrelation(signal, max_lag)[1:] <= threshold)
    return int(below[0]) + 1 if len(below) else max_lag


def _lagged_mutual_info(signal: np.ndarray, lag: int, bins: int = 16) -> float:
    joint, _, _ = np.histogram2d(signal[:-lag], signal[lag:], bins=bins)
    joint = joint / joint.sum()

    marginal = np.outer(joint.sum(axis=1), joint.sum(axis=0))
    occupied = joint > 0
    return float(np.sum(joint[occupied] * np.log(joint[occupied] / marginal[occupied])))
