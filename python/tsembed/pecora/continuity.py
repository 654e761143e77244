"""
Continuity Statistic

For a fiducial point, the smallest scale ε at which its δ nearest
neighbours in dimension d can no longer be shown to map into an ε-interval
of the candidate (d+1)-th coordinate. Large ε* means the candidate
coordinate is not a function of the existing ones, i.e. it adds
independent information.
"""

from typing import Sequence, Tuple

import numpy as np

from tsembed.config import EMBEDDING_CONFIG as cfg
from tsembed.neighbors.distance import Norm, all_distances
from tsembed.neighbors.index import NeighborIndex
from tsembed.pecora.undersampling import UndersamplingDensity

DELTA_TABLE: Tuple[Tuple[int, int], ...] = tuple(
    zip(cfg.pecora.delta_points, cfg.pecora.epsilon_points)
)


def epsilon_grid(series: np.ndarray, eps_tries: int, range_factor: float = 1.0) -> np.ndarray:
    """Decreasing ε values from range(series) / range_factor down to 0."""
    return np.linspace(np.ptp(series) / range_factor, 0.0, eps_tries + 1)


def continuity_statistic(
    values: np.ndarray,
    fiducial: int,
    neighbors: np.ndarray,
    epsilons: np.ndarray,
    table: Sequence[Tuple[int, int]] = DELTA_TABLE
) -> float:
    """
    ε* of one fiducial point.

    Parameters
    ----------
    values : np.ndarray
        Candidate coordinate for every point of the trajectory
    fiducial : int
        Index of the fiducial point
    neighbors : np.ndarray
        Indices of its nearest neighbours in the current dimension, ordered
        by distance, Theiler window already removed; at least max(δ) long
    epsilons : np.ndarray
        Decreasing ε values; the last one is never tested
    table : sequence of (δ, minimum)
        Neighbourhood sizes and the number of projections that must fall
        inside the ε-interval to reject the null at the chosen level

    Returns
    -------
    float
        Maximum over δ of ε*_δ, the last ε at which the null was still
        rejected (0 if it is rejected down to the smallest ε tested)

    Notes
    -----
    Binomial test with p = 1/2 (Pecora et al. 2007, Table 1): for δ
    neighbours at least `minimum` must land inside
    [values[fiducial] - ε, values[fiducial] + ε] to reject independence.
    """
    max_delta = max(delta for delta, _ in table)
    projected = np.abs(values[np.asarray(neighbors[:max_delta])] - values[fiducial])

    scanned = np.asarray(epsilons[:-1])
    inside = projected[None, :] <= scanned[:, None]
    counts = np.cumsum(inside, axis=1)

    eps_star = np.zeros(len(table))
    for k, (delta, minimum) in enumerate(table):
        short = np.flatnonzero(counts[:, delta - 1] < minimum)
        if len(short):
            first = short[0]
            eps_star[k] = scanned[first - 1] if first > 0 else scanned[0]

    return float(np.max(eps_star))


def delay_statistics(
    points: np.ndarray,
    samples: np.ndarray,
    epsilons: np.ndarray,
    theiler: int = cfg.pecora.theiler,
    norm: Norm = Norm.CHEBYSHEV,
    beta: float = cfg.pecora.beta,
    table: Sequence[Tuple[int, int]] = DELTA_TABLE
) -> Tuple[float, float]:
    """
    Averaged continuity and undersampling statistics for one candidate delay.

    Parameters
    ----------
    points : np.ndarray
        Trajectory including the candidate coordinate as last column
        (n_points x (d + 1))
    samples : np.ndarray
        Fiducial point indices
    epsilons : np.ndarray
        Decreasing ε grid
    theiler : int
        Temporal exclusion window for neighbours
    norm : Norm
        Phase space norm
    beta : float
        Confidence level of the undersampling test
    table : sequence of (δ, minimum)
        Continuity test table

    Returns
    -------
    tuple
        (mean ε*, mean γ) over the fiducial points

    Raises
    ------
    InsufficientNeighborsError
        If a fiducial point has fewer than max(δ) neighbours outside its
        Theiler window.
    """
    points = np.asarray(points, dtype=np.float64)
    max_delta = max(delta for delta, _ in table)

    density = UndersamplingDensity(points[:, 0], points[:, -1])
    index = NeighborIndex(points[:, :-1], norm)
    candidate = points[:, -1]

    eps_star = np.zeros(len(samples))
    gammas = np.zeros(len(samples))

    for k, fiducial in enumerate(samples):
        # undersampling: component distances to the nearest neighbour in d + 1
        distances, components = all_distances(points[fiducial], points, norm)
        distances[fiducial] = np.inf
        nearest = int(np.argmin(distances))
        _, gamma = density.test(components[nearest], beta)
        gammas[k] = np.max(gamma)

        _, neighbors = index.query_index(fiducial, k=max_delta, theiler=theiler)
        eps_star[k] = continuity_statistic(candidate, fiducial, neighbors, epsilons, table)

    return float(np.mean(eps_star)), float(np.mean(gammas))
