"""Embedding dimension estimators: Cao (E1, E2), FNN, F1NN."""

from tsembed.dimension.cao import (
    average_a,
    dimension_indicator,
    estimate_dimension,
    stochastic_indicator,
)
from tsembed.dimension.fnn import fnn, f1nn, optimal_dimension

__all__ = [
    "average_a",
    "dimension_indicator",
    "estimate_dimension",
    "stochastic_indicator",
    "fnn",
    "f1nn",
    "optimal_dimension",
]
