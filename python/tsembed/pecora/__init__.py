"""Continuity and undersampling statistics (Pecora et al. 2007)."""

from tsembed.pecora.undersampling import undersampling, UndersamplingDensity
from tsembed.pecora.continuity import (
    DELTA_TABLE,
    epsilon_grid,
    continuity_statistic,
    delay_statistics,
)
from tsembed.pecora.stopping import ContinuityDecay, UndersamplingLevel
from tsembed.pecora.embed import (
    EmbeddingCycle,
    PecoraEmbedding,
    select_delay,
    pecora_embed,
)

__all__ = [
    "undersampling",
    "UndersamplingDensity",
    "DELTA_TABLE",
    "epsilon_grid",
    "continuity_statistic",
    "delay_statistics",
    "ContinuityDecay",
    "UndersamplingLevel",
    "EmbeddingCycle",
    "PecoraEmbedding",
    "select_delay",
    "pecora_embed",
]
