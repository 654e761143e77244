"""
tsembed: embedding parameters for scalar time series.

Delay, dimension and temporal neighbours for state space reconstruction:
Cao's E1/E2, Kennel's FNN, Krakovská's F1NN and Pecora's continuity /
undersampling statistics.

Usage:
    from tsembed import estimate_dimension, fnn, pecora_embed

    e1 = estimate_dimension(x, tau=10, gammas=range(1, 6))
    result = pecora_embed(x, tau_max=30, rng=0)
    result.points, result.delays

    # Or import by category:
    from tsembed.regions.linear import saturation_point
    from tsembed.neighbors.index import NeighborIndex
"""
__version__ = "0.1.0"

from tsembed.config import EMBEDDING_CONFIG
from tsembed.errors import (
    EmbeddingError,
    InvalidInputError,
    InsufficientNeighborsError,
)
from tsembed.embedding.delay import (
    standardize,
    time_delay_embedding,
    reconstruct,
    embed_shift,
    optimal_delay,
)
from tsembed.neighbors.distance import (
    Norm,
    distance,
    all_distances,
    increase_distance,
)
from tsembed.neighbors.index import NeighborIndex
from tsembed.regions.linear import (
    linear_regions,
    max_linear_region,
    linear_region,
    saturation_point,
)
from tsembed.dimension.cao import estimate_dimension, stochastic_indicator
from tsembed.dimension.fnn import fnn, f1nn, optimal_dimension
from tsembed.pecora.undersampling import undersampling
from tsembed.pecora.embed import pecora_embed, PecoraEmbedding

# Subpackages
from tsembed import embedding  # noqa: F401
from tsembed import neighbors  # noqa: F401
from tsembed import regions  # noqa: F401
from tsembed import dimension  # noqa: F401
from tsembed import pecora  # noqa: F401

__all__ = [
    "EMBEDDING_CONFIG",
    "EmbeddingError",
    "InvalidInputError",
    "InsufficientNeighborsError",
    # Phase space
    "standardize",
    "time_delay_embedding",
    "reconstruct",
    "embed_shift",
    "optimal_delay",
    "Norm",
    "distance",
    "all_distances",
    "increase_distance",
    "NeighborIndex",
    # Curves
    "linear_regions",
    "max_linear_region",
    "linear_region",
    "saturation_point",
    # Dimension
    "estimate_dimension",
    "stochastic_indicator",
    "fnn",
    "f1nn",
    "optimal_dimension",
    # Pecora
    "undersampling",
    "pecora_embed",
    "PecoraEmbedding",
    # Subpackages
    "embedding",
    "neighbors",
    "regions",
    "dimension",
    "pecora",
]
