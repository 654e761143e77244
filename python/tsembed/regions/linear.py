"""
Linear Region Primitives

Piecewise linear segmentation of a curve y(x), largest linear region and
saturation point detection.
"""

import numpy as np
from scipy import stats
from typing import Tuple

from tsembed.config import EMBEDDING_CONFIG as cfg
from tsembed.errors import InvalidInputError


def _slope(x: np.ndarray, y: np.ndarray) -> float:
    """Least squares slope of y over x; NaN when every x is the same."""
    if np.ptp(x) == 0:
        return np.nan
    return float(stats.linregress(x, y).slope)


def _check_curve(x, y) -> Tuple[np.ndarray, np.ndarray]:
    x = np.asarray(x, dtype=np.float64).flatten()
    y = np.asarray(y, dtype=np.float64).flatten()

    if len(x) != len(y):
        raise InvalidInputError(
            f"x has length {len(x)} and y has length {len(y)}, "
            f"but these must be the same length"
        )
    if len(x) < 2:
        raise InvalidInputError("Need at least 2 samples to fit a slope")

    return x, y


def linear_regions(
    x: np.ndarray,
    y: np.ndarray,
    step: int = cfg.segmentation.step,
    tol: float = cfg.segmentation.tol
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Identify regions where the curve y(x) is linear.

    Parameters
    ----------
    x, y : np.ndarray
        Curve samples (same length n)
    step : int
        Scan the x-axis every `step` indices
    tol : float
        Relative tolerance for two slopes to be considered equal

    Returns
    -------
    breakpoints : np.ndarray
        Indices into x where linear regions start/stop. The first is always
        0 and the last always n - 1; region i spans
        x[breakpoints[i]:breakpoints[i + 1] + 1].
    slopes : np.ndarray
        Slope of each region (len(breakpoints) - 1 values)

    Notes
    -----
    Windows x[0:step], x[step-1:2*step], x[2*step-1:3*step], ... are fitted
    by least squares. A window whose slope is within `tol` (relative) of the
    slope that opened the current region joins it; otherwise a new region
    starts at the window's first index. The reference slope only changes
    when a region is opened.
    """
    x, y = _check_curve(x, y)

    if step < 1:
        raise InvalidInputError(f"step must be >= 1, got {step}")

    n = len(x)
    maxit = n // step

    first = max(step, 2)
    slopes = [_slope(x[:first], y[:first])]
    breakpoints = [0]
    reference = slopes[0]

    for k in range(1, maxit):
        window = slice(k * step - 1, (k + 1) * step)
        slope = _slope(x[window], y[window])

        # consecutive windows without a defined slope stay in one region
        if np.isnan(slope) and np.isnan(reference):
            continue
        if abs(slope - reference) <= tol * abs(reference):
            continue

        slopes.append(slope)
        breakpoints.append(k * step - 1)
        reference = slope

    breakpoints.append(n - 1)

    return np.array(breakpoints, dtype=int), np.array(slopes)


def max_linear_region(
    breakpoints: np.ndarray,
    slopes: np.ndarray = None
) -> Tuple[int, int]:
    """
    Largest linear region as (start, end) indices.

    Ties go to the first region.
    """
    breakpoints = np.asarray(breakpoints, dtype=int)

    if len(breakpoints) < 2:
        raise InvalidInputError("Need at least 2 breakpoints to form a region")

    spans = np.diff(breakpoints)
    i = int(np.argmax(spans))

    return int(breakpoints[i]), int(breakpoints[i + 1])


def linear_region(
    x: np.ndarray,
    y: np.ndarray,
    step: int = cfg.segmentation.step,
    tol: float = cfg.segmentation.tol
) -> Tuple[Tuple[int, int], float]:
    """
    Largest linear region of y(x) and its least squares slope.

    Returns ((start, end), slope) with the region spanning x[start:end + 1].
    """
    x, y = _check_curve(x, y)
    start, end = max_linear_region(*linear_regions(x, y, step=step, tol=tol))
    return (start, end), _slope(x[start:end + 1], y[start:end + 1])


def saturation_point(
    x: np.ndarray,
    y: np.ndarray,
    threshold: float = cfg.segmentation.saturation_threshold,
    step: int = cfg.segmentation.step,
    tol: float = cfg.segmentation.tol
) -> float:
    """
    x value where y(x) saturates.

    Decomposes the curve with `linear_regions` and returns the x value at
    the start of the first region whose slope is below `threshold`, or the
    last x value if no region qualifies.
    """
    x, y = _check_curve(x, y)
    breakpoints, slopes = linear_regions(x, y, step=step, tol=tol)

    below = np.flatnonzero(slopes < threshold)
    if len(below) == 0:
        return float(x[-1])

    return float(x[breakpoints[below[0]]])
