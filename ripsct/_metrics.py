"""
Distance functions between points.

A metric is any callable ``d(x, y) -> float`` on two objects carrying an
``absolute`` coordinate array. ``squared_euclidean`` is not a metric in the
strict sense but avoids the square root; use it together with a squared
threshold (e.g. ``delta = 2.4 ** 2``).
"""
from __future__ import annotations

from typing import Callable

import numpy as np

from ripsct._errors import InvalidConfiguration

Metric = Callable[[object, object], float]


def squared_euclidean(x, y) -> float:
    """Squared Euclidean distance from x to y."""
    diff = x.absolute - y.absolute
    return float(np.dot(diff, diff))


def euclidean(x, y) -> float:
    """Euclidean distance from x to y."""
    return float(np.sqrt(squared_euclidean(x, y)))


def uniform(x, y) -> float:
    """Uniform (maximum norm) distance from x to y."""
    diff = np.abs(x.absolute - y.absolute)
    return float(diff.max()) if diff.size else 0.0


def euclidean_length(p) -> float:
    """Euclidean distance from p to the origin."""
    return float(np.linalg.norm(p.absolute))


def uniform_length(p) -> float:
    """Uniform distance from p to the origin."""
    a = np.abs(p.absolute)
    return float(a.max()) if a.size else 0.0


METRICS: dict[str, Metric] = {
    "euclidean": euclidean,
    "squared_euclidean": squared_euclidean,
    "uniform": uniform,
}


def get_metric(metric: str | Metric) -> Metric:
    """Resolve a metric given by name, or pass a callable through."""
    if callable(metric):
        return metric
    try:
        return METRICS[metric]
    except KeyError:
        raise InvalidConfiguration(
            f"Unknown metric {metric!r}. Available: {list(METRICS.keys())}"
        ) from None
