"""
Phase Space Distances

Point-to-point and point-to-set distances, and distance growth when a
delayed coordinate is appended.
"""

import warnings
from enum import Enum
from typing import Optional, Tuple, Union

import numpy as np

from tsembed.errors import InvalidInputError


class Norm(str, Enum):
    """Norm used for distances in phase space."""
    EUCLIDEAN = "euc"
    CHEBYSHEV = "max"

    @property
    def p(self) -> float:
        """Minkowski order (as used by scipy's KD-tree queries)."""
        return 2.0 if self is Norm.EUCLIDEAN else np.inf

    def distance(self, a: np.ndarray, b: np.ndarray) -> float:
        diff = np.abs(np.asarray(a, dtype=np.float64) - np.asarray(b, dtype=np.float64))
        if self is Norm.EUCLIDEAN:
            return float(np.sqrt(np.sum(diff ** 2)))
        return float(np.max(diff)) if diff.size else 0.0

    def combine(self, dist: float, delta: float) -> float:
        """Distance after one more coordinate with absolute difference `delta`."""
        delta = abs(delta)
        if self is Norm.CHEBYSHEV:
            return max(dist, delta)
        p = self.p
        return (dist ** p + delta ** p) ** (1 / p)


_ALIASES = {
    "euc": Norm.EUCLIDEAN,
    "euclidean": Norm.EUCLIDEAN,
    "l2": Norm.EUCLIDEAN,
    "2": Norm.EUCLIDEAN,
    "max": Norm.CHEBYSHEV,
    "maximum": Norm.CHEBYSHEV,
    "chebyshev": Norm.CHEBYSHEV,
    "inf": Norm.CHEBYSHEV,
}

NormLike = Union[Norm, str, float, int]


def resolve_norm(norm: NormLike, default: Optional[NormLike] = None) -> Norm:
    """
    Parse a norm given as Norm, name or Minkowski order (2 or inf).

    Unknown norms fall back to `default` with a warning when a default is
    given, and raise InvalidInputError otherwise.
    """
    if isinstance(norm, Norm):
        return norm

    key = None
    if isinstance(norm, str):
        key = norm.strip().lower()
    elif isinstance(norm, (int, float)):
        key = "inf" if np.isinf(norm) else str(int(norm)) if float(norm).is_integer() else None

    if key in _ALIASES:
        return _ALIASES[key]

    if default is None:
        raise InvalidInputError(
            f"Unknown norm {norm!r}; expected one of 'euc', 'max'"
        )

    fallback = resolve_norm(default)
    warnings.warn(
        f"Unknown norm {norm!r}; expected one of 'euc', 'max'. "
        f"Using {fallback.value!r}.",
        UserWarning,
        stacklevel=3,
    )
    return fallback


def distance(a: np.ndarray, b: np.ndarray, norm: NormLike = Norm.EUCLIDEAN) -> float:
    """Distance between two phase space points."""
    return resolve_norm(norm).distance(a, b)


def all_distances(
    fiducial: np.ndarray,
    points: np.ndarray,
    norm: NormLike = Norm.EUCLIDEAN
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Distances from one point to every point of a set.

    Parameters
    ----------
    fiducial : np.ndarray
        Reference point (d,)
    points : np.ndarray
        Point set (n_points x d); a 1D array is treated as d = 1
    norm : Norm or str
        'euc' or 'max'

    Returns
    -------
    distances : np.ndarray
        (n_points,) distance of every point to the fiducial point
    component_distances : np.ndarray
        (n_points x d) absolute coordinate-wise differences

    Notes
    -----
    Avoids the full pairwise distance matrix; only the neighbourhood of a
    single point is needed.
    """
    norm = resolve_norm(norm)
    points = np.asarray(points, dtype=np.float64)
    if points.ndim == 1:
        points = points[:, None]
    fiducial = np.asarray(fiducial, dtype=np.float64).reshape(1, -1)

    if fiducial.shape[1] != points.shape[1]:
        raise InvalidInputError(
            f"Fiducial point has dimension {fiducial.shape[1]}, "
            f"point set has dimension {points.shape[1]}"
        )

    component_distances = np.abs(points - fiducial)

    if norm is Norm.EUCLIDEAN:
        distances = np.sqrt(np.sum(component_distances ** 2, axis=1))
    else:
        distances = np.max(component_distances, axis=1)

    return distances, component_distances


def increase_distance(
    dist: float,
    series: np.ndarray,
    i: int,
    j: int,
    gamma: int,
    tau: int,
    norm: NormLike = Norm.EUCLIDEAN
) -> float:
    """
    Distance between points i and j after adding one temporal neighbour.

    `dist` is the distance of the points in a reconstruction of `series`
    with `gamma` temporal neighbours and delay `tau`; the added coordinates
    are series[i + gamma*tau + tau] and series[j + gamma*tau + tau].
    """
    offset = gamma * tau + tau
    delta = series[i + offset] - series[j + offset]
    return resolve_norm(norm).combine(dist, delta)
