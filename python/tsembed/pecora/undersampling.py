"""
Undersampling Statistic

Probability that a phase space distance is explained by sampling two
(independent) coordinates of the attractor rather than by its dynamics.

References
----------
L. M. Pecora, L. Moniz, J. Nichols, T. L. Carroll, "A unified approach to
attractor reconstruction", Chaos 17, 013110 (2007).
"""

from typing import Tuple, Union

import numpy as np

from tsembed.errors import InvalidInputError


def _normalize(x: np.ndarray) -> np.ndarray:
    x = np.asarray(x, dtype=np.float64).flatten()
    std = np.std(x, ddof=1) if len(x) > 1 else 0.0
    if std == 0 or not np.isfinite(std):
        raise InvalidInputError("Undersampling statistic needs non-constant series")
    return (x - np.mean(x)) / std


class UndersamplingDensity:
    """
    Distance distribution of two normalised series.

    Both series are histogrammed on the bins of the one with the larger
    range, the two densities are convolved and the result is resampled onto
    a grid of 2 * max(len(x1), len(x2)) points. Build once per pair of
    coordinates and evaluate for any number of distances.
    """

    def __init__(self, x1: np.ndarray, x2: np.ndarray):
        x1 = _normalize(x1)
        x2 = _normalize(x2)

        if np.ptp(x1) > np.ptp(x2):
            hist1, edges = np.histogram(x1, bins='auto', density=True)
            hist2, _ = np.histogram(x2, bins=edges, density=True)
        else:
            hist2, edges = np.histogram(x2, bins='auto', density=True)
            hist1, _ = np.histogram(x1, bins=edges, density=True)

        binwidth = np.mean(np.diff(edges))
        n_bins = len(edges) - 1

        sigma = np.convolve(hist1, hist2)
        sigma = sigma / np.sum(sigma)

        # bin centres extended by half the support on each side
        start = edges[0] + binwidth / 2 - (n_bins // 2) * binwidth
        domain = start + binwidth * np.arange(len(sigma))

        self.grid = np.linspace(domain[0], domain[-1], 2 * max(len(x1), len(x2)))
        density = np.interp(self.grid, domain, sigma)
        self.density = density / np.sum(density)

    def gamma(self, eps: Union[float, np.ndarray]) -> np.ndarray:
        """Probability mass within (-eps, eps), halved."""
        eps = np.atleast_1d(np.asarray(eps, dtype=np.float64))
        if np.any(eps < 0):
            raise InvalidInputError("Distances must be non-negative")

        cumulative = np.concatenate(([0.0], np.cumsum(self.density)))
        # grid points strictly inside (-eps, eps)
        lower = np.searchsorted(self.grid, -eps, side='right')
        upper = np.searchsorted(self.grid, eps, side='left')

        mass = np.where(upper > lower, cumulative[upper] - cumulative[lower], 0.0)
        return 0.5 * mass

    def test(self, eps: Union[float, np.ndarray], beta: float = 0.05) -> Tuple[np.ndarray, np.ndarray]:
        """(rejected, gamma) for each distance; rejected where gamma < beta."""
        gamma = self.gamma(eps)
        return gamma < beta, gamma


def undersampling(
    x1: np.ndarray,
    x2: np.ndarray,
    eps: Union[float, np.ndarray],
    beta: float = 0.05
) -> Tuple[Union[bool, np.ndarray], Union[float, np.ndarray]]:
    """
    Undersampling statistic for two coordinate series.

    Parameters
    ----------
    x1, x2 : np.ndarray
        Coordinate series (normalised internally)
    eps : float or np.ndarray
        Distance(s) to test, non-negative
    beta : float
        Confidence level in [0, 1]

    Returns
    -------
    rejected : bool or np.ndarray
        True where the null "distance explained by undersampling" is
        rejected at level beta
    gamma : float or np.ndarray
        Probability of finding a distance of at most eps between two
        randomly drawn values of the coordinates

    Notes
    -----
    Scalar eps gives scalar outputs, vector eps gives vectors of the same
    length.
    """
    if not 0 <= beta <= 1:
        raise InvalidInputError(f"Confidence level must be in [0, 1], got {beta}")

    eps_arr = np.asarray(eps, dtype=np.float64)
    if eps_arr.ndim > 1:
        raise InvalidInputError("Provide a scalar distance or a distance vector")

    rejected, gamma = UndersamplingDensity(x1, x2).test(eps_arr, beta)

    if eps_arr.ndim == 0:
        return bool(rejected[0]), float(gamma[0])
    return rejected, gamma
