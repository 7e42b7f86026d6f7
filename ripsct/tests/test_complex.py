"""Tests for SimplicialComplex and the Vietoris-Rips construction."""
import math

import pytest
import numpy

from ripsct._backend import get_backend
from ripsct._complex import SimplicialComplex, VietorisRipsComplex
from ripsct._errors import InvalidConfiguration, PreconditionViolation
from ripsct._lattice import LatticeIndex
from ripsct._metrics import euclidean, squared_euclidean, uniform
from ripsct._process import PointGenerator
from ripsct._vertex import Point

COORDS = [
    (3.0, 3.0),
    (2.0, 5.0),
    (4.0, 5.0),
    (6.0, 2.0),
    (4.0, 2.0),
    (5.2, 2.8),
    (5.5, 3.5),
]


@pytest.fixture
def lattice():
    return LatticeIndex([(1, 7), (1, 7)])


@pytest.fixture
def vertices(lattice):
    return [Point.at(i, x, lattice) for i, x in enumerate(COORDS)]


def brute_force_cliques(vertices, metric, delta):
    """All simplices by checking every pair, no spatial pruning."""
    adjacent = {
        (x.id, y.id) for x in vertices for y in vertices
        if x.id < y.id and metric(x, y) < delta
    }
    levels = {0: {(p.id,) for p in vertices}}
    ids = sorted(p.id for p in vertices)
    k = 0
    while levels[k]:
        levels[k + 1] = {
            s + (v,) for s in levels[k] for v in ids
            if v > s[-1] and all((u, v) in adjacent for u in s)
        }
        k += 1
    del levels[k]
    return levels


class TestSimplicialComplex:

    def test_empty_vertices_raises(self):
        with pytest.raises(PreconditionViolation):
            SimplicialComplex([])

    def test_mixed_dimensions_raise(self, vertices):
        other = LatticeIndex([(0, 2), (0, 2), (0, 2)])
        p3 = Point.at(99, [0.5, 0.5, 0.5], other)
        with pytest.raises(PreconditionViolation):
            SimplicialComplex(vertices + [p3])

    def test_duplicate_ids_raise(self, vertices):
        with pytest.raises(PreconditionViolation):
            SimplicialComplex(vertices + [vertices[0]])

    def test_vertices_seeded(self, vertices):
        """The complex contains its vertices right after construction."""
        HC = SimplicialComplex(vertices)
        assert HC.f_vector == {0: 7}
        assert HC.simplex_identifiers(0) == {(i,) for i in range(7)}

    def test_points_by_cell_sorted(self, lattice):
        pts = [Point.at(i, x, lattice)
               for i, x in [(5, (1.2, 1.2)), (2, (1.8, 1.1)), (9, (3.0, 3.0))]]
        HC = SimplicialComplex(pts)
        cell = lattice.cell_of_base([1, 1])
        assert [p.id for p in HC.points_by_cell[cell]] == [2, 5]
        assert len(HC.points_by_cell) == 2

    def test_adjacency_from_edges(self, vertices):
        """The base class derives adjacency from the stored 1-simplices."""
        HC = VietorisRipsComplex(vertices, squared_euclidean, 5.76)
        HC.calculate_adjacency()
        HC.generate(1)
        expected = HC.adjacency.edges()
        SimplicialComplex.calculate_adjacency(HC)
        assert HC.adjacency.edges() == expected


class TestVietorisRipsComplex:

    def test_f_vector(self, vertices):
        HC = VietorisRipsComplex(vertices, squared_euclidean, 5.76)
        HC.calculate_adjacency()
        HC.generate()
        assert HC.f_vector == {0: 7, 1: 12, 2: 6, 3: 1}

    def test_edges_and_simplices(self, vertices):
        """Compare by vertex id sets, not by simplex ids."""
        HC = VietorisRipsComplex(vertices, squared_euclidean, 5.76)
        HC.calculate_adjacency()
        HC.generate()
        assert HC.simplex_identifiers(1) == {
            (0, 1), (0, 2), (0, 4), (0, 5), (1, 2), (2, 6),
            (3, 4), (3, 5), (3, 6), (4, 5), (4, 6), (5, 6),
        }
        assert HC.simplex_identifiers(2) == {
            (0, 1, 2), (0, 4, 5), (3, 4, 5), (3, 4, 6), (3, 5, 6), (4, 5, 6),
        }
        assert HC.simplex_identifiers(3) == {(3, 4, 5, 6)}
        assert HC.dimension == 3

    def test_explicit_cluster_extension(self, vertices):
        """ceil(sqrt(delta)) is enough for the squared metric."""
        HC = VietorisRipsComplex(vertices, squared_euclidean, 5.76,
                                 cluster_extension=3)
        HC.calculate_adjacency()
        HC.generate()
        assert HC.f_vector == {0: 7, 1: 12, 2: 6, 3: 1}

    def test_complete_complex(self, vertices):
        """With every pair connected all subsets are simplices."""
        HC = VietorisRipsComplex(vertices, squared_euclidean, 100.0)
        HC.calculate_adjacency()
        HC.generate()
        assert HC.f_vector == {0: 7, 1: 21, 2: 35, 3: 35, 4: 21, 5: 7, 6: 1}
        assert HC.euler_characteristic() == 1

    @pytest.mark.parametrize("n", [1, 3, 5])
    def test_binomial_f_vector_for_infinite_delta(self, lattice, n):
        """delta = inf gives C(n, k + 1) simplices in dimension k."""
        pts = [Point.at(i, x, lattice) for i, x in enumerate(COORDS[:n])]
        HC = VietorisRipsComplex(pts, euclidean, math.inf)
        HC.calculate_adjacency()
        HC.generate()
        assert HC.f_vector == {k: math.comb(n, k + 1) for k in range(n)}

    def test_complete_complex_up_to_dimension(self, vertices):
        HC = VietorisRipsComplex(vertices, squared_euclidean, 100.0)
        HC.calculate_adjacency()
        HC.generate(3)
        assert HC.f_vector == {0: 7, 1: 21, 2: 35, 3: 35}

    def test_graph_only(self, vertices):
        HC = VietorisRipsComplex(vertices, squared_euclidean, 5.76)
        HC.calculate_adjacency()
        HC.generate(1)
        assert HC.f_vector == {0: 7, 1: 12}

    @pytest.mark.parametrize("delta", [0.0, 5.76, 100.0])
    def test_dimension_zero_only_vertices(self, vertices, delta):
        HC = VietorisRipsComplex(vertices, squared_euclidean, delta)
        assert HC.f_vector == {0: 7}
        HC.calculate_adjacency()
        HC.generate(0)
        assert HC.f_vector == {0: 7}

    def test_negative_max_dimension_raises(self, vertices):
        HC = VietorisRipsComplex(vertices, squared_euclidean, 5.76)
        with pytest.raises(
                InvalidConfiguration,
                match="VietorisRipsComplex generation max_dimension can not "
                      "be negative."):
            HC.generate(-1)

    def test_negative_delta_raises(self, vertices):
        with pytest.raises(InvalidConfiguration):
            VietorisRipsComplex(vertices, euclidean, -1.0)

    def test_unknown_metric_raises(self, vertices):
        with pytest.raises(InvalidConfiguration):
            VietorisRipsComplex(vertices, "manhattan", 1.0)

    def test_metric_by_name(self, vertices):
        HC = VietorisRipsComplex(vertices, "squared_euclidean", 5.76)
        HC.generate()
        assert HC.f_vector == {0: 7, 1: 12, 2: 6, 3: 1}

    def test_generate_calculates_missing_adjacency(self, vertices):
        HC = VietorisRipsComplex(vertices, squared_euclidean, 5.76)
        HC.generate(1)
        assert HC.adjacency.count() == 12

    def test_adjacency_recalculation_is_idempotent(self, vertices):
        HC = VietorisRipsComplex(vertices, squared_euclidean, 5.76)
        HC.calculate_adjacency()
        first = HC.adjacency.edges()
        HC.adjacency.reset()
        HC.calculate_adjacency()
        assert HC.adjacency.edges() == first

    def test_regenerate_resets_simplices(self, vertices):
        HC = VietorisRipsComplex(vertices, squared_euclidean, 5.76)
        HC.generate()
        HC.generate(1)
        assert HC.f_vector == {0: 7, 1: 12}

    def test_simplex_ids_unique(self, vertices):
        HC = VietorisRipsComplex(vertices, squared_euclidean, 100.0)
        HC.generate()
        ids = [s.id for simplices in HC.simplices.values() for s in simplices]
        assert len(ids) == len(set(ids)) == 127

    def test_isolated_vertices(self, vertices):
        HC = VietorisRipsComplex(vertices, euclidean, 0.5)
        HC.generate()
        assert HC.f_vector == {0: 7, 1: 0}
        assert HC.dimension == 0

    @pytest.mark.parametrize("metric,delta", [
        (euclidean, 0.45),
        (uniform, 0.3),
        (squared_euclidean, 0.2),
        (euclidean, 1.2),
    ])
    def test_matches_brute_force(self, metric, delta):
        """Spatial pruning finds exactly the cliques of the full search."""
        lattice = LatticeIndex([(0, 3), (0, 3)])
        result = PointGenerator.poisson(lattice, 4.0, seed=11).generate()
        pts = list(result.accepted.values())
        HC = VietorisRipsComplex(pts, metric, delta)
        HC.calculate_adjacency()
        HC.generate()
        expected = brute_force_cliques(pts, metric, delta)
        for k, simplices in expected.items():
            assert HC.simplex_identifiers(k) == simplices
        for k in HC.simplices:
            if k not in expected:
                assert HC.simplices[k] == []

    def test_three_dimensional_points(self):
        lattice = LatticeIndex([(0, 2), (0, 2), (0, 2)])
        result = PointGenerator.poisson(lattice, 3.0, seed=3).generate()
        pts = list(result.accepted.values())
        HC = VietorisRipsComplex(pts, euclidean, 0.6)
        HC.generate()
        expected = brute_force_cliques(pts, euclidean, 0.6)
        for k, simplices in expected.items():
            assert HC.simplex_identifiers(k) == simplices

    def test_threads_match_serial(self):
        """Scheduling changes simplex ids at most, never the simplices."""
        lattice = LatticeIndex([(0, 4), (0, 4)])
        pts = list(PointGenerator.poisson(lattice, 4.0, seed=21)
                   .generate().accepted.values())
        serial = VietorisRipsComplex(pts, euclidean, 0.7)
        serial.generate()

        backend = get_backend("threads", workers=4)
        try:
            threaded = VietorisRipsComplex(pts, euclidean, 0.7,
                                           backend=backend)
            threaded.generate()
        finally:
            backend.terminate()

        assert threaded.f_vector == serial.f_vector
        for k in serial.simplices:
            assert threaded.simplex_identifiers(k) == \
                serial.simplex_identifiers(k)

    def test_serial_ids_are_deterministic(self, vertices):
        a = VietorisRipsComplex(vertices, squared_euclidean, 5.76)
        b = VietorisRipsComplex(vertices, squared_euclidean, 5.76)
        a.generate()
        b.generate()
        for k in a.simplices:
            assert [(s.id, s.identifier) for s in a.simplices[k]] == \
                [(s.id, s.identifier) for s in b.simplices[k]]

    def test_simplex_coordinates(self, vertices):
        HC = VietorisRipsComplex(vertices, squared_euclidean, 5.76)
        HC.generate()
        (tetra,) = HC.simplices[3]
        numpy.testing.assert_allclose(
            tetra.x_a, [COORDS[3], COORDS[4], COORDS[5], COORDS[6]])


class TestLargeThresholds:
    """Finite but huge thresholds behave like delta = inf."""

    def test_two_points(self):
        lattice = LatticeIndex([(0, 2), (0, 2)])
        pts = [Point.at(0, [0.5, 0.5], lattice),
               Point.at(1, [1.5, 1.5], lattice)]
        HC = VietorisRipsComplex(pts, euclidean, 1e20)
        HC.generate()
        assert HC.f_vector == {0: 2, 1: 1}

    def test_complete_complex(self, vertices):
        HC = VietorisRipsComplex(vertices, euclidean, 1e20)
        assert HC.cluster_extension == 6
        HC.generate()
        assert HC.f_vector == {0: 7, 1: 21, 2: 35, 3: 35, 4: 21, 5: 7, 6: 1}

    def test_explicit_extension_clamped_to_box(self, vertices):
        HC = VietorisRipsComplex(vertices, squared_euclidean, 100.0,
                                 cluster_extension=10 ** 30)
        assert HC.cluster_extension == 6
        HC.generate(2)
        assert HC.f_vector == {0: 7, 1: 21, 2: 35}


class TestUpperCellFace:
    """Points whose absolute coordinate rounds onto the upper face of their
    cell still belong to that cell for the simplex search."""

    def test_triangle_in_last_cell(self):
        lattice = LatticeIndex([(0, 6), (0, 6)])
        cell = lattice.cell_of_base([5, 0])
        below_one = numpy.nextafter(1.0, 0.0)
        pts = [Point(i, [u, 0.5], cell)
               for i, u in enumerate([0.5, below_one, 0.7])]
        assert pts[1].absolute[0] == 6.0

        HC = VietorisRipsComplex(pts, euclidean, 1.0)
        HC.generate()
        assert HC.f_vector == {0: 3, 1: 3, 2: 1}
        assert HC.simplex_identifiers(2) == {(0, 1, 2)}

    def test_tetrahedron_across_cells(self):
        """Rounded points in two neighbouring cells on the top edge of the
        box."""
        lattice = LatticeIndex([(0, 3), (0, 3)])
        below_one = numpy.nextafter(1.0, 0.0)
        left = lattice.cell_of_base([1, 2])
        right = lattice.cell_of_base([2, 2])
        pts = [Point(0, [below_one, 0.2], left),
               Point(1, [below_one, below_one], left),
               Point(2, [0.1, 0.5], right),
               Point(3, [0.3, below_one], right)]
        HC = VietorisRipsComplex(pts, euclidean, 1.5)
        HC.generate()
        assert HC.f_vector == {0: 4, 1: 6, 2: 4, 3: 1}
        assert HC.simplex_identifiers(3) == \
            brute_force_cliques(pts, euclidean, 1.5)[3]
