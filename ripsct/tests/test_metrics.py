"""Tests for the distance functions."""
import math

import pytest

from ripsct._errors import InvalidConfiguration
from ripsct._lattice import LatticeIndex
from ripsct._metrics import (euclidean, euclidean_length, get_metric,
                             squared_euclidean, uniform, uniform_length)
from ripsct._vertex import Point


@pytest.fixture
def pair():
    lattice = LatticeIndex([(-5, 5), (-5, 5)])
    return Point.at(0, [1.0, 1.0], lattice), Point.at(1, [4.0, -3.0], lattice)


class TestMetrics:

    def test_euclidean(self, pair):
        assert euclidean(*pair) == pytest.approx(5.0)

    def test_squared_euclidean(self, pair):
        assert squared_euclidean(*pair) == pytest.approx(25.0)

    def test_uniform(self, pair):
        assert uniform(*pair) == pytest.approx(4.0)

    def test_symmetric(self, pair):
        x, y = pair
        for metric in (euclidean, squared_euclidean, uniform):
            assert metric(x, y) == metric(y, x)
            assert metric(x, x) == 0.0

    def test_lengths(self, pair):
        _, y = pair
        assert euclidean_length(y) == pytest.approx(5.0)
        assert uniform_length(y) == pytest.approx(4.0)

    def test_uniform_bounded_by_euclidean(self, pair):
        assert uniform(*pair) <= euclidean(*pair) <= \
            math.sqrt(2) * uniform(*pair)


class TestGetMetric:

    @pytest.mark.parametrize("name,metric", [
        ("euclidean", euclidean),
        ("squared_euclidean", squared_euclidean),
        ("uniform", uniform),
    ])
    def test_by_name(self, name, metric):
        assert get_metric(name) is metric

    def test_callable_passes_through(self):
        def manhattan(x, y):
            return float(abs(x.absolute - y.absolute).sum())
        assert get_metric(manhattan) is manhattan

    def test_unknown_raises(self):
        with pytest.raises(InvalidConfiguration, match="Unknown metric"):
            get_metric("chebyshev")
