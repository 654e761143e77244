"""
Cao's Method (E1, E2)

Embedding dimension from the growth of nearest neighbour distances, and a
determinism check.

References
----------
L. Cao, "Practical method for determining the minimum embedding dimension
of a scalar time series", Physica D 110, 43-50 (1997).
"""

import logging
from typing import Dict, Iterable

import numpy as np

from tsembed.config import EMBEDDING_CONFIG as cfg
from tsembed.embedding.delay import reconstruct
from tsembed.errors import InvalidInputError
from tsembed.neighbors.distance import NormLike, increase_distance, resolve_norm
from tsembed.neighbors.index import NeighborIndex

logger = logging.getLogger(__name__)


def _check_series(series, tau: int, gammas: Iterable[int]):
    series = np.asarray(series, dtype=np.float64).flatten()
    gammas = [int(g) for g in gammas]

    if tau < 1:
        raise InvalidInputError(f"Delay must be >= 1, got {tau}")
    if not gammas:
        raise InvalidInputError("No candidate gammas given")
    if min(gammas) < 0:
        raise InvalidInputError(f"Gammas must be >= 0, got {min(gammas)}")

    return series, gammas


def average_a(
    series: np.ndarray,
    gamma: int,
    tau: int,
    norm: NormLike = cfg.dimension.cao_norm
) -> float:
    """
    Mean relative growth of nearest neighbour distances, E(d) of eq. (2).

    Parameters
    ----------
    series : np.ndarray
        1D time series
    gamma : int
        Temporal neighbours of the reconstruction (dimension gamma + 1)
    tau : int
        Embedding delay
    norm : Norm or str
        Distance norm (Cao uses the maximum norm)

    Returns
    -------
    float
        sum_i a(i, d) / (n_points - 1), with
        a(i, d) = ||y_i(d+1) - y_j(d+1)|| / ||y_i(d) - y_j(d)||
        and j the nearest neighbour of i in dimension d

    Notes
    -----
    The last tau samples are held back so every point can gain its extra
    coordinate. Coincident neighbours are skipped in favour of the next
    nearest one.
    """
    series = np.asarray(series, dtype=np.float64).flatten()
    norm = resolve_norm(norm)

    points = reconstruct(series[:-tau], gamma, tau)
    n_points = len(points)

    if n_points < cfg.dimension.min_points:
        raise InvalidInputError(
            f"Series too short for gamma={gamma}, tau={tau}: {n_points} points"
        )

    index = NeighborIndex(points, norm)
    nearest = index.nearest_neighbors()

    total = 0.0
    for i, j in enumerate(nearest):
        dist = norm.distance(points[i], points[j])
        if dist == 0.0:
            j, dist = index.nearest_nonzero(i)
        total += increase_distance(dist, series, i, j, gamma, tau, norm) / dist

    return total / (n_points - 1)


def dimension_indicator(
    series: np.ndarray,
    gamma: int,
    tau: int,
    norm: NormLike = cfg.dimension.cao_norm
) -> float:
    """E1 for a single gamma: E(gamma + 1) / E(gamma), eq. (3)."""
    return average_a(series, gamma + 1, tau, norm) / average_a(series, gamma, tau, norm)


def estimate_dimension(
    series: np.ndarray,
    tau: int,
    gammas: Iterable[int] = cfg.dimension.gammas,
    norm: NormLike = cfg.dimension.cao_norm
) -> np.ndarray:
    """
    Cao's E1 for each candidate number of temporal neighbours.

    Parameters
    ----------
    series : np.ndarray
        1D time series
    tau : int
        Embedding delay
    gammas : iterable of int
        Candidate temporal neighbours (embedding dimension = gamma + 1)
    norm : Norm or str
        Distance norm, maximum norm by default

    Returns
    -------
    np.ndarray
        E1(gamma) = E(gamma + 1) / E(gamma), one value per gamma

    Notes
    -----
    E1 saturates around 1 once gamma + 1 is a sufficient embedding
    dimension; read it off with `saturation_point(gammas, E1)`.
    Perfectly periodic signals are a known weak spot of the method.
    """
    series, gammas = _check_series(series, tau, gammas)
    norm = resolve_norm(norm)

    averages: Dict[int, float] = {}

    def _average(gamma: int) -> float:
        if gamma not in averages:
            averages[gamma] = average_a(series, gamma, tau, norm)
        return averages[gamma]

    e1 = np.zeros(len(gammas))
    for k, gamma in enumerate(gammas):
        e1[k] = _average(gamma + 1) / _average(gamma)
        logger.debug(f"E1(gamma={gamma}) = {e1[k]:.4f}")

    return e1


def _mean_shifted_difference(series: np.ndarray, gamma: int, tau: int, norm) -> float:
    """E*(d): mean |x(i + d*tau) - x(j + d*tau)| over nearest neighbour pairs (i, j)."""
    points = reconstruct(series, gamma, tau)
    n_indexed = len(points) - tau

    if n_indexed < cfg.dimension.min_points:
        raise InvalidInputError(
            f"Series too short for gamma={gamma}, tau={tau}: {len(points)} points"
        )

    # neighbours are restricted to points that still have a tau-step future
    index = NeighborIndex(points[:n_indexed], norm)
    nearest = index.nearest_neighbors()

    total = 0.0
    for i, j in enumerate(nearest):
        if norm.distance(points[i], points[j]) == 0.0:
            j, _ = index.nearest_nonzero(i)
        total += abs(points[i + tau, -1] - points[j + tau, -1])

    return total / n_indexed


def stochastic_indicator(
    series: np.ndarray,
    tau: int,
    gammas: Iterable[int] = cfg.dimension.stochastic_gammas,
    norm: NormLike = cfg.dimension.cao_norm
) -> np.ndarray:
    """
    Cao's E2 for each candidate number of temporal neighbours, eq. (5).

    Parameters
    ----------
    series : np.ndarray
        1D time series
    tau : int
        Embedding delay
    gammas : iterable of int
        Candidate temporal neighbours
    norm : Norm or str
        Distance norm used for the neighbour search

    Returns
    -------
    np.ndarray
        E2(gamma) = E*(gamma + 1) / E*(gamma)

    Notes
    -----
    For random data future values are independent of the past, so
    E2 ≈ 1 for every gamma. Deterministic data has E2 ≠ 1 for some gamma.
    Use it to validate the result of `estimate_dimension`.
    """
    series, gammas = _check_series(series, tau, gammas)
    norm = resolve_norm(norm)

    e2 = np.zeros(len(gammas))
    for k, gamma in enumerate(gammas):
        upper = _mean_shifted_difference(series, gamma + 1, tau, norm)
        lower = _mean_shifted_difference(series, gamma, tau, norm)
        e2[k] = upper / lower if lower > 0 else np.nan
        logger.debug(f"E2(gamma={gamma}) = {e2[k]:.4f}")

    return e2
