"""
False Nearest Neighbour Primitives

Kennel's false nearest neighbours (FNN), Krakovská's false first nearest
neighbours (F1NN) and dimension selection from the resulting curves.
"""

import logging
from typing import Iterable, Optional

import numpy as np

from tsembed.config import EMBEDDING_CONFIG as cfg
from tsembed.dimension.cao import _check_series, estimate_dimension
from tsembed.embedding.delay import reconstruct
from tsembed.errors import InvalidInputError
from tsembed.neighbors.distance import Norm, increase_distance
from tsembed.neighbors.index import NeighborIndex
from tsembed.regions.linear import saturation_point

logger = logging.getLogger(__name__)


def fnn(
    series: np.ndarray,
    tau: int,
    gammas: Iterable[int] = cfg.dimension.gammas,
    rtol: float = cfg.dimension.rtol,
    atol: float = cfg.dimension.atol
) -> np.ndarray:
    """
    Number of false nearest neighbours for each candidate gamma.

    Parameters
    ----------
    series : np.ndarray
        1D time series
    tau : int
        Embedding delay
    gammas : iterable of int
        Candidate temporal neighbours (embedding dimension = gamma + 1)
    rtol : float
        Threshold for the relative distance increase (eq. 4 of Kennel)
    atol : float
        Threshold for the increased distance over the attractor size
        (eq. 5 of Kennel)

    Returns
    -------
    np.ndarray
        Count of false nearest neighbours per gamma

    Notes
    -----
    False Nearest Neighbors (Kennel et al., 1992): pairs that are nearest
    neighbours at dimension gamma + 1 but separate at gamma + 2. A pair
    (i, j) with distances d -> d1 is false when

        (d1 / d)^2 - 1 > rtol^2    or    d1 / R_a > atol

    with R_a the standard deviation of the series. The optimal gamma is
    where the count approaches zero.
    """
    series, gammas = _check_series(series, tau, gammas)

    rtol2 = rtol ** 2
    attractor_size = np.std(series)
    if attractor_size == 0:
        raise InvalidInputError("Cannot count false neighbours of a constant series")

    counts = np.zeros(len(gammas), dtype=int)

    for k, gamma in enumerate(gammas):
        points = reconstruct(series[:-tau], gamma, tau)
        if len(points) < cfg.dimension.min_points:
            raise InvalidInputError(
                f"Series too short for gamma={gamma}, tau={tau}: {len(points)} points"
            )

        index = NeighborIndex(points, Norm.EUCLIDEAN)
        nearest = index.nearest_neighbors()

        for i, j in enumerate(nearest):
            dist = Norm.EUCLIDEAN.distance(points[i], points[j])
            # coincident pair: use the next nearest, as in Cao's algorithm
            if dist == 0.0:
                j, dist = index.nearest_nonzero(i)

            increased = increase_distance(dist, series, i, j, gamma, tau, Norm.EUCLIDEAN)

            relative = (increased / dist) ** 2 - 1 > rtol2
            absolute = increased / attractor_size > atol
            if relative or absolute:
                counts[k] += 1

        logger.debug(f"FNN(gamma={gamma}) = {counts[k]} / {len(points)}")

    return counts


class _ReconstructionCache:
    """
    Holds the gamma reconstruction of series[:-tau] between F1NN steps.

    After comparing gamma with gamma + 1, the gamma + 1 reconstruction of
    the full series, trimmed by tau points, is exactly the reconstruction
    needed by a following gamma + 1 step. Any other gamma rebuilds.
    """

    def __init__(self, series: np.ndarray, tau: int):
        self.series = series
        self.tau = tau
        self.gamma = None
        self.points = None

    def get(self, gamma: int) -> np.ndarray:
        if self.gamma != gamma:
            self.points = reconstruct(self.series[:-self.tau], gamma, self.tau)
            self.gamma = gamma
        return self.points

    def advance(self, gamma: int, grown: np.ndarray):
        self.points = grown[:-self.tau]
        self.gamma = gamma + 1


def _compare_first_nn(points: np.ndarray, grown: np.ndarray) -> int:
    """Number of points whose first nearest neighbour differs between two reconstructions."""
    nearest = NeighborIndex(points).nearest_neighbors()
    nearest_grown = NeighborIndex(grown).nearest_neighbors()

    n = len(points)
    return int(np.sum(nearest != nearest_grown[:n]))


def f1nn(
    series: np.ndarray,
    tau: int,
    gammas: Iterable[int] = cfg.dimension.gammas
) -> np.ndarray:
    """
    Ratio of false first nearest neighbours for each candidate gamma.

    Parameters
    ----------
    series : np.ndarray
        1D time series
    tau : int
        Embedding delay
    gammas : iterable of int
        Candidate temporal neighbours (embedding dimension = gamma + 1)

    Returns
    -------
    np.ndarray
        Fraction of points whose first nearest neighbour at gamma is not
        their first nearest neighbour at gamma + 1

    Notes
    -----
    Krakovská et al., J. Complex Systems 932750 (2015). The optimal gamma
    is where the ratio approaches zero. Contiguous candidate lists reuse
    the previous step's reconstruction.
    """
    series, gammas = _check_series(series, tau, gammas)
    cache = _ReconstructionCache(series, tau)

    ratios = np.zeros(len(gammas))

    for k, gamma in enumerate(gammas):
        points = cache.get(gamma)
        grown = reconstruct(series, gamma + 1, tau)

        if len(points) < cfg.dimension.min_points:
            raise InvalidInputError(
                f"Series too short for gamma={gamma}, tau={tau}: {len(points)} points"
            )

        ratios[k] = _compare_first_nn(points, grown) / len(points)
        logger.debug(f"F1NN(gamma={gamma}) = {ratios[k]:.4f}")

        cache.advance(gamma, grown)

    return ratios


def optimal_dimension(
    series: np.ndarray,
    tau: int,
    gammas: Iterable[int] = range(1, 8),
    method: str = 'cao',
    threshold: Optional[float] = None
) -> int:
    """
    Estimate the embedding dimension (gamma + 1).

    Parameters
    ----------
    series : np.ndarray
        1D time series
    tau : int
        Embedding delay
    gammas : iterable of int
        Candidate temporal neighbours, ascending
    method : str
        'cao': saturation point of E1
        'fnn': first gamma whose FNN fraction is below threshold
        'f1nn': first gamma whose F1NN ratio is below threshold
    threshold : float, optional
        Saturation slope ('cao') or ratio threshold ('fnn', 'f1nn')

    Returns
    -------
    int
        Embedding dimension; the largest candidate + 1 when no gamma
        qualifies
    """
    series, gammas = _check_series(series, tau, gammas)

    if method == 'cao':
        if threshold is None:
            threshold = cfg.segmentation.saturation_threshold
        e1 = estimate_dimension(series, tau, gammas)
        gamma = saturation_point(np.asarray(gammas, dtype=np.float64), e1, threshold=threshold)
        return int(round(gamma)) + 1

    if method == 'fnn':
        if threshold is None:
            threshold = cfg.dimension.fnn_ratio_threshold
        n_points = np.array([len(series) - (g + 1) * tau for g in gammas])
        ratios = fnn(series, tau, gammas) / n_points
    elif method == 'f1nn':
        if threshold is None:
            threshold = cfg.dimension.f1nn_ratio_threshold
        ratios = f1nn(series, tau, gammas)
    else:
        raise InvalidInputError(f"Unknown method: {method}")

    below = np.flatnonzero(ratios < threshold)
    if len(below) == 0:
        return gammas[-1] + 1

    return gammas[below[0]] + 1
