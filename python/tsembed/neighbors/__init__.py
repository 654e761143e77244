"""Distances and nearest neighbour search in phase space."""

from tsembed.neighbors.distance import (
    Norm,
    resolve_norm,
    distance,
    all_distances,
    increase_distance,
)
from tsembed.neighbors.index import NeighborIndex

__all__ = [
    "Norm",
    "resolve_norm",
    "distance",
    "all_distances",
    "increase_distance",
    "NeighborIndex",
]
