"""
Pecora Embedding

Unified selection of delays and embedding dimension from the continuity
and undersampling statistics (Pecora et al., Chaos 17, 013110, 2007).
Each cycle scans candidate delays 0..tau_max for the next coordinate,
picks a delay at a local maximum of the averaged continuity statistic and
appends that coordinate.
"""

import logging
import time
import warnings
from dataclasses import dataclass
from typing import Callable, List, NamedTuple, Optional, Sequence, Union

import numpy as np
from joblib import Parallel, delayed
from scipy.signal import find_peaks

from tsembed.config import EMBEDDING_CONFIG as cfg
from tsembed.embedding.delay import embed_shift, standardize
from tsembed.errors import InvalidInputError
from tsembed.neighbors.distance import NormLike, resolve_norm
from tsembed.pecora.continuity import DELTA_TABLE, delay_statistics, epsilon_grid
from tsembed.pecora.stopping import default_stop_conditions

logger = logging.getLogger(__name__)

StopCondition = Callable[[Sequence["EmbeddingCycle"]], bool]


@dataclass(frozen=True)
class EmbeddingCycle:
    """Outcome of one dimension-growth cycle."""
    dimension: int                # dimension after adding the chosen coordinate
    delay: int                    # chosen delay
    continuity: np.ndarray        # mean ε* per candidate delay 0..tau_max
    undersampling: np.ndarray     # mean γ per candidate delay 0..tau_max


class PecoraEmbedding(NamedTuple):
    """Result of `pecora_embed`."""
    points: np.ndarray            # reconstructed trajectory
    delays: List[int]             # one chosen delay per added coordinate
    continuity: List[np.ndarray]  # ε* curve of every cycle
    undersampling: List[np.ndarray]  # γ curve of every cycle

    @property
    def lags(self) -> List[int]:
        """Lag of every column of `points` relative to the first one."""
        return [0] + list(self.delays)


def select_delay(curve: np.ndarray) -> int:
    """
    Delay at the first pronounced local maximum of a continuity curve.

    Local maxima are found with a minimum peak distance of 2. The first
    peak that is higher than both neighbouring peaks wins; otherwise the
    highest peak. A curve without any interior maximum falls back to its
    global maximum.
    """
    curve = np.asarray(curve, dtype=np.float64)
    locs, _ = find_peaks(curve, distance=2)

    if len(locs) == 0:
        return int(np.argmax(curve))

    peaks = curve[locs]
    for i in range(1, len(peaks) - 1):
        if peaks[i] > peaks[i - 1] and peaks[i] > peaks[i + 1]:
            return int(locs[i])

    return int(locs[np.argmax(peaks)])


def _clamp(value, low, high, default, name):
    if not low <= value <= high:
        warnings.warn(
            f"{name} must be a value in the interval [{low}, {high}], got {value}. "
            f"Using {default}.",
            UserWarning,
            stacklevel=3,
        )
        return default
    return value


def _sample_fiducials(rng: np.random.Generator, n_points: int, sample_size: float) -> np.ndarray:
    n_samples = max(1, int(np.floor(sample_size * n_points)))
    return rng.choice(n_points, size=n_samples, replace=False)


def pecora_embed(
    series: np.ndarray,
    tau_max: int = cfg.pecora.tau_max,
    eps_tries: int = cfg.pecora.eps_tries,
    sample_size: float = cfg.pecora.sample_size,
    theiler: int = cfg.pecora.theiler,
    norm: NormLike = cfg.pecora.norm,
    break_percentage: float = cfg.pecora.break_percentage,
    *,
    beta: float = cfg.pecora.beta,
    max_cycles: int = cfg.pecora.max_cycles,
    stop_conditions: Optional[Sequence[StopCondition]] = None,
    rng: Union[None, int, np.random.Generator] = None,
    n_jobs: int = 1,
    timeout: Optional[float] = None
) -> PecoraEmbedding:
    """
    Embed a scalar time series with delays chosen by the continuity statistic.

    Parameters
    ----------
    series : np.ndarray
        1D time series (normalised internally)
    tau_max : int
        Largest candidate delay
    eps_tries : int
        Number of ε refinements between range(series) and 0
    sample_size : float
        Fraction of trajectory points used as fiducial points, in [0, 1]
    theiler : int
        Temporal correlation window excluded from neighbourhoods
    norm : str
        'euc' or 'max'
    break_percentage : float
        Fraction of the first cycle's continuity spread below which
        `ContinuityDecay` stops the loop, in [0, 1]
    beta : float
        Confidence level of the undersampling statistic
    max_cycles : int
        Hard cap on the number of added coordinates
    stop_conditions : sequence of callables, optional
        Called with the completed cycle records after every cycle.
        Default: ContinuityDecay(break_percentage) and
        UndersamplingLevel(beta). Pass () to stop on `max_cycles` only.
    rng : int or np.random.Generator, optional
        Source of the fiducial point samples
    n_jobs : int
        Workers for the per-delay statistics (joblib)
    timeout : float, optional
        Seconds after which no new cycle is started

    Returns
    -------
    PecoraEmbedding
        (points, delays, continuity, undersampling); points has
        1 + len(delays) columns and every curve has tau_max + 1 entries

    Raises
    ------
    InvalidInputError
        Constant or too short series, negative tau_max / theiler,
        eps_tries < 1, max_cycles < 1
    InsufficientNeighborsError
        The Theiler window and the δ table need more neighbours than the
        trajectory provides; no partial result is returned

    Notes
    -----
    Out-of-range (or NaN) sample_size, break_percentage and beta, and
    unknown norms, are replaced by their defaults (0.5, 0.1, 0.05, 'max')
    with a warning.
    """
    sample_size = _clamp(sample_size, 0, 1, cfg.pecora.sample_size, "sample_size")
    break_percentage = _clamp(
        break_percentage, 0, 1, cfg.pecora.break_percentage, "break_percentage"
    )
    beta = _clamp(beta, 0, 1, cfg.pecora.beta, "beta")
    norm = resolve_norm(norm, default=cfg.pecora.norm)

    if tau_max < 0:
        raise InvalidInputError(f"tau_max must be >= 0, got {tau_max}")
    if eps_tries < 1:
        raise InvalidInputError(f"eps_tries must be >= 1, got {eps_tries}")
    if theiler < 0:
        raise InvalidInputError(f"theiler must be >= 0, got {theiler}")
    if max_cycles < 1:
        raise InvalidInputError(f"max_cycles must be >= 1, got {max_cycles}")

    series = standardize(series)
    if len(series) - max_cycles * tau_max < 2:
        raise InvalidInputError(
            f"Series of {len(series)} samples too short for "
            f"{max_cycles} cycles with tau_max={tau_max}"
        )

    if stop_conditions is None:
        stop_conditions = default_stop_conditions(break_percentage, beta)

    rng = np.random.default_rng(rng)
    epsilons = epsilon_grid(series, eps_tries, cfg.pecora.range_factor)
    deadline = time.monotonic() + timeout if timeout is not None else None

    points = series[:, None]
    cycles: List[EmbeddingCycle] = []

    while True:
        candidates = [embed_shift(points, series, tau) for tau in range(tau_max + 1)]
        samples = [_sample_fiducials(rng, len(c), sample_size) for c in candidates]

        stats = Parallel(n_jobs=n_jobs)(
            delayed(delay_statistics)(c, s, epsilons, theiler, norm, beta, DELTA_TABLE)
            for c, s in zip(candidates, samples)
        )
        continuity = np.array([eps for eps, _ in stats])
        undersampling = np.array([gamma for _, gamma in stats])

        tau = select_delay(continuity)
        points = candidates[tau]
        cycles.append(EmbeddingCycle(points.shape[1], tau, continuity, undersampling))

        logger.info(
            f"Pecora cycle {len(cycles)}: delay={tau}, dimension={points.shape[1]}, "
            f"max continuity={continuity.max():.4f}, max undersampling={undersampling.max():.4f}"
        )

        if len(cycles) >= max_cycles:
            break

        triggered = [c for c in stop_conditions if c(cycles)]
        if triggered:
            logger.info(f"Pecora stopped after cycle {len(cycles)} by {triggered[0]!r}")
            break

        if deadline is not None and time.monotonic() > deadline:
            logger.warning(
                f"Pecora timeout ({timeout}s) after {len(cycles)} cycles; "
                f"returning dimension {points.shape[1]}"
            )
            break

    return PecoraEmbedding(
        points=points,
        delays=[c.delay for c in cycles],
        continuity=[c.continuity for c in cycles],
        undersampling=[c.undersampling for c in cycles],
    )
