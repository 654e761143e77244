"""Delay embedding primitives."""

from tsembed.embedding.delay import (
    standardize,
    time_delay_embedding,
    reconstruct,
    embed_shift,
    lag_autocorrelation,
    lag_mutual_information,
    optimal_delay,
)

__all__ = [
    "standardize",
    "time_delay_embedding",
    "reconstruct",
    "embed_shift",
    "lag_autocorrelation",
    "lag_mutual_information",
    "optimal_delay",
]
