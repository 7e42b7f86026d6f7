"""Point objects"""
import numpy

from ripsct._errors import PreconditionViolation


class Point:
    """A point of the point cloud, anchored in a lattice cell.

    The point stores its coordinates relative to the cell (``uniform``, each
    entry normally in [0, 1)) and derives its absolute position from the
    cell's base position. Points are identified by their integer ``id``.
    """

    __slots__ = ('id', 'uniform', 'cell', 'absolute', 'x')

    def __init__(self, id, uniform, cell):
        """
        :param id: int, unique sequential identifier
        :param uniform: vector of coordinates relative to the cell base
        :param cell: Cell, the lattice cell the point is located in
        """
        uniform = numpy.asarray(uniform, dtype=float)
        if uniform.shape != (cell.dim,):
            raise PreconditionViolation(
                f"Point #{id} has dimension {uniform.size} but its cell "
                f"lives in dimension {cell.dim}.")

        self.id = int(id)
        self.uniform = uniform
        self.cell = cell
        self.absolute = cell.absolute(uniform)
        self.x = tuple(self.absolute.tolist())  # Hashable absolute position

    @classmethod
    def at(cls, id, absolute, lattice):
        """Create a point from absolute coordinates inside ``lattice``."""
        cell = lattice.cell_at(absolute)
        if cell is None:
            raise PreconditionViolation(
                f"Point #{id} at {list(absolute)} lies outside of the box "
                f"{lattice.bounds}.")
        return cls(id, cell.relative(absolute), cell)

    @property
    def dim(self):
        return self.cell.dim

    def __hash__(self):
        return hash(self.id)

    def __eq__(self, other):
        if not isinstance(other, Point):
            return NotImplemented
        return self.id == other.id

    def __repr__(self):
        return f"Point(id={self.id}, x={self.x})"
