"""Piecewise linear analysis of estimator curves."""

from tsembed.regions.linear import (
    linear_regions,
    max_linear_region,
    linear_region,
    saturation_point,
)

__all__ = [
    "linear_regions",
    "max_linear_region",
    "linear_region",
    "saturation_point",
]
