"""
Stop conditions for the Pecora embedding loop.

A stop condition is any callable taking the list of completed
`EmbeddingCycle` records and returning True when no further coordinate
should be added. The record that triggered the stop keeps its coordinate.
"""

from typing import Sequence

import numpy as np

from tsembed.config import EMBEDDING_CONFIG as cfg


class ContinuityDecay:
    """
    Stop when the continuity curve has flattened.

    Compares the standard deviation of the latest ε* curve right of its
    chosen delay with the same quantity of the first curve; stops once it
    drops below `break_percentage` of that reference. A curve that
    "remains small out to large τ" means no further independent
    coordinate is available.
    """

    def __init__(self, break_percentage: float = cfg.pecora.break_percentage):
        self.break_percentage = break_percentage

    @staticmethod
    def _tail_std(cycle) -> float:
        return float(np.std(cycle.continuity[cycle.delay:], ddof=1)) \
            if len(cycle.continuity) - cycle.delay > 1 else 0.0

    def __call__(self, cycles: Sequence) -> bool:
        if len(cycles) < 2:
            return False
        reference = self._tail_std(cycles[0])
        return self._tail_std(cycles[-1]) < self.break_percentage * reference

    def __repr__(self):
        return f"ContinuityDecay(break_percentage={self.break_percentage})"


class UndersamplingLevel:
    """Stop once the undersampling statistic of the latest cycle exceeds beta."""

    def __init__(self, beta: float = cfg.pecora.beta):
        self.beta = beta

    def __call__(self, cycles: Sequence) -> bool:
        if not cycles:
            return False
        return bool(np.max(cycles[-1].undersampling) > self.beta)

    def __repr__(self):
        return f"UndersamplingLevel(beta={self.beta})"


def default_stop_conditions(
    break_percentage: float = cfg.pecora.break_percentage,
    beta: float = cfg.pecora.beta
):
    return (ContinuityDecay(break_percentage), UndersamplingLevel(beta))
