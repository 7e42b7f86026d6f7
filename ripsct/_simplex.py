import numpy

from ripsct._errors import PreconditionViolation


"""Simplex objects"""
class Simplex:
    def __init__(self, id, vertices):
        """
        A simplex spanned by a non-empty set of points.

        The vertices are stored sorted by point id, which makes the tuple of
        ids a canonical identifier: two simplices are the same simplex exactly
        when their identifiers agree, independent of the ``id`` they were
        assigned during construction.

        :param id: int, unique id of the simplex inside its complex
        :param vertices: iterable of Point
        """
        vertices = sorted(vertices, key=lambda p: p.id)
        if not vertices:
            raise PreconditionViolation("Simplex must have at least one vertex!")

        self.id = id
        self.V = vertices
        self.dim = len(vertices) - 1  # Not the dimension of the space
        self.identifier = tuple(v.id for v in vertices)
        self.lowest_vertex_id = self.identifier[0]
        self.vertex_ids = frozenset(self.identifier)

        self.x_a = numpy.array([v.absolute for v in vertices])
        # Bounding box of all vertices
        self.lower = self.x_a.min(axis=0)
        self.upper = self.x_a.max(axis=0)
        # Same box in cell base positions
        bases = numpy.array([v.cell.base for v in vertices], dtype=int)
        self.lower_base = bases.min(axis=0)
        self.upper_base = bases.max(axis=0)

    @property
    def vertices(self):
        return self.V

    @property
    def space_dim(self):
        return self.x_a.shape[1]

    @property
    def bounding_box(self):
        return self.lower, self.upper

    def contains_vertex(self, p):
        return getattr(p, 'id', p) in self.vertex_ids

    def contained_in(self, cluster):
        """The simplex lies in ``cluster`` iff the cells of all its vertices
        do."""
        return cluster.contains_cells(self.lower_base, self.upper_base)

    def __hash__(self):
        return hash(self.identifier)

    def __eq__(self, other):
        if not isinstance(other, Simplex):
            return NotImplemented
        return self.identifier == other.identifier

    def __len__(self):
        return len(self.V)

    def __repr__(self):
        return f"Simplex(id={self.id}, vertices={self.identifier})"
