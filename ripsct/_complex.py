"""
Simplicial complexes over lattice anchored point clouds.

``SimplicialComplex`` stores simplices by dimension together with the
adjacency relation of its vertices. ``VietorisRipsComplex`` builds the
Vietoris-Rips complex: a set of k + 1 vertices spans a k-simplex iff every
pair of them is closer than ``delta`` under the chosen metric.

The construction never compares all pairs of points. Cells are unit cubes,
so two points whose cells are more than ``ceil(delta)`` lattice steps apart
are further than ``delta`` from each other. Each occupied cell therefore only
looks at the points (and, for higher dimensions, the simplices) inside its
precomputed neighbourhood cluster.

Usage::

    from ripsct import LatticeIndex, PointGenerator, VietorisRipsComplex

    lattice = LatticeIndex([(0, 4), (0, 4)])
    points = PointGenerator.poisson(lattice, 5.0, seed=1).generate()
    HC = VietorisRipsComplex(points.accepted.values(), "euclidean", 0.5)
    HC.calculate_adjacency()
    HC.generate(max_dimension=3)
    HC.f_vector
"""
import logging
import math
from functools import partial

from ripsct._adjacency import AdjacencyMatrix
from ripsct._backend import AtomicCounter, resolve_backend
from ripsct._connectivity import Connectivity
from ripsct._errors import InvalidConfiguration, PreconditionViolation
from ripsct._metrics import get_metric
from ripsct._simplex import Simplex

logger = logging.getLogger(__name__)


class SimplicialComplex:
    def __init__(self, vertices):
        """
        A simplicial complex whose 0-simplices are the given points.

        Important objects:
            HC.simplices: dict, dimension --> list of Simplex
            HC.adjacency: AdjacencyMatrix of the vertices
            HC.points_by_cell: dict, Cell --> points of the cell sorted by id

        :param vertices: iterable of Point, all anchored in the same lattice
        """
        vertices = list(vertices)
        if not vertices:
            raise PreconditionViolation(
                "A simplicial complex must have at least one vertex!")

        self.lattice = vertices[0].cell.lattice
        self.dim = self.lattice.dim  # Dimension of the ambient space
        for p in vertices:
            if p.dim != self.dim:
                raise PreconditionViolation(
                    f"Point #{p.id} has dimension {p.dim}, the complex lives "
                    f"in dimension {self.dim}.")

        self.vertices = vertices
        self.points_by_id = {p.id: p for p in vertices}
        if len(self.points_by_id) != len(vertices):
            raise PreconditionViolation("Vertex ids must be unique.")

        # Cells in lattice order, points of a cell sorted by id
        by_cell = {}
        for p in vertices:
            by_cell.setdefault(p.cell, []).append(p)
        self.points_by_cell = {
            cell: sorted(by_cell[cell], key=lambda p: p.id)
            for cell in sorted(by_cell, key=lambda c: c.base)
        }

        self.adjacency = AdjacencyMatrix(self.points_by_id)
        self.simplices = {}
        self._seed_vertices(AtomicCounter())
        self._connectivity = None

    def _seed_vertices(self, counter):
        """Reset the complex to its 0-simplices, one per vertex."""
        self.simplices = {
            0: [Simplex(counter.next(), [p]) for p in self.vertices]
        }
        logger.debug("Simplices generated: dim=0 count=%d",
                     len(self.simplices[0]))

    def simplex_collection(self, dim):
        """Return the list of ``dim``-simplices, creating it if needed."""
        return self.simplices.setdefault(dim, [])

    @property
    def f_vector(self):
        """Number of simplices per dimension."""
        return {k: len(v) for k, v in sorted(self.simplices.items())}

    @property
    def dimension(self):
        """Highest dimension that contains a simplex."""
        return max(k for k, v in self.simplices.items() if v)

    def simplex_identifiers(self, dim):
        """Set of sorted vertex id tuples of the ``dim``-simplices."""
        return {s.identifier for s in self.simplices.get(dim, ())}

    def euler_characteristic(self):
        return sum((-1) ** k * n for k, n in self.f_vector.items())

    def calculate_adjacency(self):
        """Rebuild the adjacency matrix from the stored 1-simplices."""
        self.adjacency.reset()
        for edge in self.simplices.get(1, ()):
            self.adjacency.connect(edge.V[0], edge.V[1])

    @property
    def connectivity(self):
        """Connected component analysis of the current adjacency matrix."""
        if self._connectivity is None:
            self._connectivity = Connectivity(self.vertices, self.adjacency)
        return self._connectivity


class VietorisRipsComplex(SimplicialComplex):
    def __init__(self, vertices, metric, delta, cluster_extension=None,
                 backend=None, workers=None):
        """
        Vietoris-Rips complex of ``vertices`` with distance threshold ``delta``.

        :param vertices: iterable of Point
        :param metric: callable d(x, y) -> float, or one of "euclidean",
                "squared_euclidean", "uniform"
        :param delta: float, two vertices are adjacent iff d(x, y) < delta;
                ``math.inf`` connects every pair
        :param cluster_extension: int, optional
                Number of lattice steps searched around a cell. Defaults to
                ceil(delta), which is safe for all metrics that dominate the
                coordinate differences. A smaller value is valid when the
                metric allows it, e.g. ceil(sqrt(delta)) for squared_euclidean.
        :param backend: TaskBackend or backend name, optional
        :param workers: int, optional, number of threads if backend is None
        """
        super().__init__(vertices)
        self.metric = get_metric(metric)
        if math.isnan(delta) or delta < 0:
            raise InvalidConfiguration(
                f"delta must be a non negative number, got {delta}.")
        self.delta = float(delta)

        # No cell is further than the box span from any other cell
        span = max(hi - lo for lo, hi in self.lattice.bounds)
        if cluster_extension is None:
            if math.isfinite(self.delta):
                cluster_extension = math.ceil(self.delta)
            else:
                cluster_extension = span
        if cluster_extension < 0:
            raise InvalidConfiguration(
                f"cluster_extension can not be negative, got "
                f"{cluster_extension}.")
        self.cluster_extension = int(min(cluster_extension, span))
        self.backend = resolve_backend(backend, workers)

        # delta is fixed for the lifetime of the complex, compute once
        self.neighbourhood = {
            cell: self.lattice.neighborhood(cell, self.cluster_extension)
            for cell in self.points_by_cell
        }
        self._candidates = {}
        self._adjacency_ready = False

    def candidate_points(self, cell):
        """Points that may be adjacent to points of ``cell``, sorted by id.

        Points outside the returned list are too far away by construction.
        """
        try:
            return self._candidates[cell]
        except KeyError:
            candidates = sorted(
                (p for c in self.neighbourhood[cell]
                 for p in self.points_by_cell.get(c, ())),
                key=lambda p: p.id)
            logger.debug("Candidate points: cell=%s count=%d", cell.base,
                         len(candidates))
            self._candidates[cell] = candidates
            return candidates

    def candidate_simplices(self, cell, supply):
        """Simplices of ``supply`` lying completely in the neighbourhood of
        ``cell``; any other simplex has a vertex out of reach."""
        cluster = self.neighbourhood[cell]
        return [s for s in supply if s.contained_in(cluster)]

    def calculate_adjacency(self):
        """Connect every pair of vertices with d(x, y) < delta."""
        self.adjacency.reset()
        for cell, core in self.points_by_cell.items():
            candidates = self.candidate_points(cell)
            for x in core:
                for y in candidates:
                    # Symmetric relation, x.id < y.id suffices
                    if x.id < y.id:
                        self.adjacency.set(x, y, self.metric(x, y) < self.delta)

        self._adjacency_ready = True
        logger.debug("Vietoris-Rips adjacency calculated: connections=%d",
                     self.adjacency.count())

    def generate(self, max_dimension=None):
        """
        Determine all simplices up to dimension ``max_dimension``.

        Dimension 0 holds the vertices, dimension 1 the edges and dimension
        k the (k+1)-cliques of the adjacency graph. ``None`` generates every
        simplex there is. The adjacency matrix is calculated first if that
        has not happened yet.

        Note that the number of simplices grows very quickly with the
        connectivity of the graph and all of them are kept in memory.

        :param max_dimension: int >= 0 or None
        :return: dict, the f-vector
        """
        if max_dimension is not None and max_dimension < 0:
            raise InvalidConfiguration(
                "VietorisRipsComplex generation max_dimension can not be "
                "negative.")
        if max_dimension is None:
            # n + 1 vertices are needed for an n-simplex
            max_dimension = len(self.vertices) - 1
        if not self._adjacency_ready:
            self.calculate_adjacency()

        logger.debug("Generating Vietoris-Rips complex: max_dimension=%d "
                     "vertices=%d", max_dimension, len(self.vertices))

        counter = AtomicCounter()
        self._seed_vertices(counter)
        if max_dimension == 0:
            return self.f_vector

        cells = list(self.points_by_cell.items())
        found = self.backend.map(partial(self._edges_in_cell, counter=counter),
                                 cells)
        collection = self.simplex_collection(1)
        for edges in found:
            collection.extend(edges)
        logger.debug("Simplices generated: dim=1 count=%d", len(collection))
        if max_dimension == 1:
            return self.f_vector

        dim = 2
        count_before = len(self.simplices[1])
        while self._should_continue(max_dimension, dim, count_before):
            supply = self.simplices[dim - 1]
            found = self.backend.map(
                partial(self._extend_in_cell, supply=supply, counter=counter),
                cells)
            collection = self.simplex_collection(dim)
            for simplices in found:
                collection.extend(simplices)
            logger.debug("Simplices generated: dim=%d count=%d", dim,
                         len(collection))

            count_before = len(collection)
            dim += 1

        return self.f_vector

    def _edges_in_cell(self, item, counter):
        cell, core = item
        candidates = self.candidate_points(cell)
        trace = logger.isEnabledFor(logging.DEBUG)
        edges = []
        for x in core:
            for y in candidates:
                # Each edge is found once, from the cell of its lower id
                if x.id < y.id and self.adjacency.get(x, y):
                    s = Simplex(counter.next(), (x, y))
                    edges.append(s)
                    if trace:
                        logger.debug("Simplex constructed: id=%d dim=1 "
                                     "vertices=%s", s.id, s.identifier)
        return edges

    def _extend_in_cell(self, item, supply, counter):
        cell, core = item
        candidates = self.candidate_simplices(cell, supply)
        trace = logger.isEnabledFor(logging.DEBUG)
        found = []
        for p in core:
            for simplex in candidates:
                # Adding p in front of the lowest vertex produces each
                # simplex once, from its lowest vertex
                if (p.id < simplex.lowest_vertex_id
                        and self.adjacency.all(p, simplex.V)):
                    s = Simplex(counter.next(), [p, *simplex.V])
                    found.append(s)
                    if trace:
                        logger.debug("Simplex constructed: id=%d dim=%d "
                                     "vertices=%s", s.id, s.dim, s.identifier)
        return found

    def _should_continue(self, max_dimension, next_dimension, count_before):
        """
        An n-simplex is a complete graph on n + 1 vertices and contains
        n + 1 faces of dimension n - 1, so fewer than n + 1 simplices of the
        previous dimension rule out any n-simplex.
        """
        if max_dimension < next_dimension:
            logger.info("Vietoris-Rips generation reached max_dimension=%d",
                        max_dimension)
            return False
        if count_before < next_dimension + 1:
            logger.info("Vietoris-Rips generation exhausted all simplices: "
                        "next_dimension=%d count_before=%d",
                        next_dimension, count_before)
            return False
        return True
