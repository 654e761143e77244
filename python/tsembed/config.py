"""
Embedding Configuration

Centralized defaults for all estimators.
Avoids hardcoded magic numbers scattered across modules.

Usage:
    from tsembed.config import EMBEDDING_CONFIG as cfg

    # Access values
    tau_max = cfg.pecora.tau_max
    if n < cfg.dimension.min_points:
        ...
"""

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class SegmentationConfig:
    """Configuration for piecewise linear segmentation."""

    # Window width (in samples) scanned at each step
    step: int = 1

    # Relative tolerance for two slopes to belong to one region
    tol: float = 0.2

    # Slope below which a curve is considered saturated
    saturation_threshold: float = 0.01


@dataclass(frozen=True)
class DimensionConfig:
    """Configuration for Cao / FNN / F1NN estimators."""

    # Candidate temporal neighbours (embedding dimension = gamma + 1)
    gammas: Tuple[int, ...] = (1, 2, 3, 4, 5)
    stochastic_gammas: Tuple[int, ...] = (1, 2, 3, 4)

    # Norm used by Cao's method
    cao_norm: str = "max"

    # Kennel's criteria
    rtol: float = 10.0    # relative distance increase (eq. 4)
    atol: float = 2.0     # increase relative to attractor size (eq. 5)

    # optimal_dimension thresholds
    fnn_ratio_threshold: float = 0.01
    f1nn_ratio_threshold: float = 0.01

    # Minimum reconstructed points for a nearest-neighbour statistic
    min_points: int = 3


@dataclass(frozen=True)
class PecoraConfig:
    """Configuration for the continuity / undersampling embedding loop."""

    tau_max: int = 50
    eps_tries: int = 20
    sample_size: float = 0.5      # fraction of points used as fiducials
    theiler: int = 1
    norm: str = "max"
    break_percentage: float = 0.1

    # Confidence level of the undersampling statistic
    beta: float = 0.05

    # Hard cap on embedding cycles (one added coordinate per cycle)
    max_cycles: int = 4

    # First ε is range(series) / range_factor
    range_factor: float = 1.0

    # Binomial table for β = 0.05: δ neighbours, minimum count inside ε
    delta_points: Tuple[int, ...] = (5, 6, 7, 8, 9, 10, 11, 12, 13)
    epsilon_points: Tuple[int, ...] = (5, 6, 7, 7, 8, 9, 9, 9, 10)


@dataclass(frozen=True)
class EmbeddingConfig:
    """Master configuration for all estimators."""

    segmentation: SegmentationConfig = SegmentationConfig()
    dimension: DimensionConfig = DimensionConfig()
    pecora: PecoraConfig = PecoraConfig()


# Global singleton instance
EMBEDDING_CONFIG = EmbeddingConfig()
