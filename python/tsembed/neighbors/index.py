"""
Nearest Neighbour Index

KD-tree over a phase space point set with self and Theiler-window
exclusion applied at query time.
"""

from typing import Tuple

import numpy as np
from scipy.spatial import cKDTree

from tsembed.errors import InsufficientNeighborsError, InvalidInputError
from tsembed.neighbors.distance import Norm, NormLike, resolve_norm


class NeighborIndex:
    """
    k-nearest-neighbour queries over a fixed point set.

    Parameters
    ----------
    points : np.ndarray
        Point set (n_points x d); a 1D array is treated as d = 1
    norm : Norm or str
        Distance used for all queries ('euc' or 'max')

    Notes
    -----
    Duplicate points are not merged. A caller that needs a non-zero
    distance (Cao, FNN) asks for `nearest_nonzero`, which walks past
    coincident points.
    """

    def __init__(self, points: np.ndarray, norm: NormLike = Norm.EUCLIDEAN):
        points = np.asarray(points, dtype=np.float64)
        if points.ndim == 1:
            points = points[:, None]
        if points.ndim != 2 or len(points) == 0:
            raise InvalidInputError("Point set must be a non-empty (n_points, d) array")

        self.points = points
        self.norm = resolve_norm(norm)
        self.tree = cKDTree(points)

    def __len__(self) -> int:
        return len(self.points)

    def _query(self, point: np.ndarray, k: int) -> Tuple[np.ndarray, np.ndarray]:
        k = min(k, len(self))
        dists, idx = self.tree.query(point, k=k, p=self.norm.p)
        return np.atleast_1d(dists), np.atleast_1d(idx)

    def query(self, point: np.ndarray, k: int = 1) -> Tuple[np.ndarray, np.ndarray]:
        """k nearest stored points to an external point, ascending distance."""
        point = np.asarray(point, dtype=np.float64).reshape(-1)
        return self._query(point, k)

    def query_index(
        self,
        i: int,
        k: int = 1,
        theiler: int = 0
    ) -> Tuple[np.ndarray, np.ndarray]:
        """
        k nearest neighbours of stored point i.

        Every index j with |j - i| <= theiler is skipped, so theiler = 0
        only removes the point itself.
        """
        n = len(self)
        # at most 2 * theiler + 1 indices fall inside the window
        k_query = min(k + 2 * theiler + 1, n)
        dists, idx = self._query(self.points[i], k_query)

        valid = np.abs(idx - i) > theiler
        dists, idx = dists[valid], idx[valid]

        if len(idx) < k:
            raise InsufficientNeighborsError(
                f"Point {i}: need {k} neighbours outside a Theiler window of "
                f"{theiler}, found {len(idx)} among {n} points",
                index=i, required=k, available=len(idx),
            )

        return dists[:k], idx[:k]

    def nearest_neighbors(self) -> np.ndarray:
        """Index of the first nearest neighbour of every stored point, self excluded."""
        n = len(self)
        if n < 2:
            raise InsufficientNeighborsError(
                "Need at least 2 points for a nearest neighbour", required=2, available=n
            )

        _, idx = self.tree.query(self.points, k=2, p=self.norm.p)
        own = np.arange(n)
        # with coincident points the point itself can come second
        return np.where(idx[:, 0] != own, idx[:, 0], idx[:, 1])

    def nearest_nonzero(self, i: int) -> Tuple[int, float]:
        """
        Nearest neighbour of stored point i at non-zero distance.

        Re-queries with a doubled neighbour count until a point not
        coinciding with point i turns up.
        """
        n = len(self)
        k = 3
        while True:
            dists, idx = self._query(self.points[i], k)
            found = np.flatnonzero((idx != i) & (dists > 0))
            if len(found):
                first = found[0]
                return int(idx[first]), float(dists[first])
            if k >= n:
                raise InsufficientNeighborsError(
                    f"Point {i}: every other point coincides with it",
                    index=i, required=1, available=0,
                )
            k = min(2 * k, n)
