"""
Unit cell segmentation of an integer bounded box.

The box ``[lo_1, hi_1) x ... x [lo_d, hi_d)`` is cut into unit cubes
("cells") whose lower corners lie on the integer lattice. Cells are looked up
by their base position, and the neighbourhood of a cell (all cells within a
given lattice radius) is returned as a ``SpatialCluster`` whose bounding
corners are computed once, so that containment queries cost O(d).
"""
import itertools
import logging
import math

import numpy

from ripsct._errors import InvalidConfiguration, PreconditionViolation

logger = logging.getLogger(__name__)


def lattice_points(lower, upper):
    """Generate all integer vectors v with lower[i] <= v[i] <= upper[i].

    Both corners are inclusive. Vectors are yielded as tuples in
    lexicographic order; an empty range in any coordinate yields nothing.

    :param lower: sequence of int, lower corner
    :param upper: sequence of int, upper corner
    :return: generator of tuples
    """
    ranges = [range(int(lo), int(up) + 1) for lo, up in zip(lower, upper)]
    return itertools.product(*ranges)


class Cell:
    """Unit cube ``base + [0, 1)^d`` owned by a ``LatticeIndex``.

    Cells compare equal and hash by their base position only.
    """

    def __init__(self, lattice, base):
        base = tuple(int(b) for b in base)
        if len(base) != lattice.dim:
            raise PreconditionViolation(
                "The given base position is of a different dimension than "
                "the lattice!")

        self.lattice = lattice
        self.base = base
        self.base_a = numpy.array(base, dtype=float)  # Array version of base
        self.midpoint = self.base_a + 0.5

    @property
    def key(self):
        return self.base

    @property
    def dim(self):
        return self.lattice.dim

    def _check(self, x):
        x = numpy.asarray(x, dtype=float)
        if x.shape != (self.dim,):
            raise PreconditionViolation(
                f"Expected coordinates of dimension {self.dim}, "
                f"got shape {x.shape}.")
        return x

    def absolute(self, relative):
        """Translate cell relative coordinates to absolute coordinates."""
        return self._check(relative) + self.base_a

    def relative(self, absolute):
        """Translate absolute coordinates to cell relative coordinates."""
        return self._check(absolute) - self.base_a

    def contains(self, absolute):
        """Lower bound inclusive, upper bound exclusive, so every position
        in the box belongs to exactly one cell."""
        x = self._check(absolute)
        return bool(numpy.all(x >= self.base_a)
                    and numpy.all(x < self.base_a + 1.0))

    def neighborhood(self, radius=1):
        return self.lattice.neighborhood(self, radius)

    def __hash__(self):
        return hash(self.base)

    def __eq__(self, other):
        if not isinstance(other, Cell):
            return NotImplemented
        return self.base == other.base

    def __repr__(self):
        return f"Cell{self.base}"


class SpatialCluster:
    """A union of cells with cached bounding corners.

    ``lower_bound`` is the component wise minimum of the base positions and
    ``upper_bound`` the component wise maximum plus one (the width of a cell).
    """

    def __init__(self, lattice, cells):
        cells = list(cells)
        if not cells:
            raise PreconditionViolation(
                "Cluster must be created with at least one cell.")

        self.lattice = lattice
        self.cells = cells
        self._cell_set = frozenset(cells)
        bases = numpy.array([c.base for c in cells], dtype=int)
        self.lower_bound = bases.min(axis=0)
        self.upper_bound = bases.max(axis=0) + 1

        logger.debug("Cluster created: lower_bound=%s upper_bound=%s "
                     "cells=%d", self.lower_bound.tolist(),
                     self.upper_bound.tolist(), len(cells))

    @property
    def dim(self):
        return self.lattice.dim

    def contains(self, absolute):
        """True if the absolute position lies inside the cluster box."""
        x = numpy.asarray(absolute, dtype=float)
        return bool(numpy.all(self.lower_bound <= x)
                    and numpy.all(x < self.upper_bound))

    def contains_box(self, lower, upper):
        """True if the closed box [lower, upper] lies inside the cluster."""
        lower = numpy.asarray(lower, dtype=float)
        upper = numpy.asarray(upper, dtype=float)
        if lower.shape != (self.dim,) or upper.shape != (self.dim,):
            return False
        return bool(numpy.all(lower >= self.lower_bound)
                    and numpy.all(upper < self.upper_bound))

    def contains_cells(self, lower_base, upper_base):
        """True if every cell with lower_base <= base <= upper_base lies in
        the cluster.

        Works on integer base positions only, so points rounded onto the
        upper face of their cell are still inside.
        """
        lower_base = numpy.asarray(lower_base, dtype=int)
        upper_base = numpy.asarray(upper_base, dtype=int)
        if lower_base.shape != (self.dim,) or upper_base.shape != (self.dim,):
            return False
        return bool(numpy.all(lower_base >= self.lower_bound)
                    and numpy.all(upper_base < self.upper_bound))

    def __len__(self):
        return len(self.cells)

    def __iter__(self):
        return iter(self.cells)

    def __contains__(self, cell):
        return cell in self._cell_set


class LatticeIndex:
    def __init__(self, box):
        """
        Segmentation of an integer bounded box into unit cells.

        :param box: sequence of (lo, hi) integer pairs, one per dimension,
                    describing the half open intervals [lo, hi)
                    ex. [(0, 4), (0, 4)] creates 16 cells covering [0,4)^2
        """
        if box is None or len(box) == 0:
            raise InvalidConfiguration(
                "The box specification must contain at least one interval.")

        self.bounds = []
        for lo, hi in box:
            lo, hi = int(lo), int(hi)
            if hi <= lo:
                raise InvalidConfiguration(
                    f"The interval [{lo}, {hi}) does not contain a cell.")
            self.bounds.append((lo, hi))

        self.dim = len(self.bounds)
        self.lower = numpy.array([lo for lo, _ in self.bounds], dtype=int)
        self.upper = numpy.array([hi for _, hi in self.bounds], dtype=int)

        # Base positions run up to hi - 1 so that the union ends at hi
        self.cells = {}
        for base in lattice_points(self.lower, self.upper - 1):
            self.cells[base] = Cell(self, base)

        logger.debug("LatticeIndex created: bounds=%s cells=%d",
                     self.bounds, len(self.cells))

    def __len__(self):
        return len(self.cells)

    def __iter__(self):
        return iter(self.cells.values())

    def __contains__(self, cell):
        return isinstance(cell, Cell) and cell.base in self.cells

    def cell_of_base(self, base):
        """Return the cell with the given integer base position or None."""
        return self.cells.get(tuple(int(b) for b in base))

    def cell_at(self, absolute):
        """Return the cell that contains the absolute coordinates, or None
        if they lie outside the box."""
        x = numpy.asarray(absolute, dtype=float)
        if x.shape != (self.dim,):
            raise PreconditionViolation(
                f"Expected coordinates of dimension {self.dim}, "
                f"got shape {x.shape}.")
        if not numpy.all(numpy.isfinite(x)):
            return None
        return self.cells.get(tuple(math.floor(c) for c in x))

    def contains(self, absolute):
        return self.cell_at(absolute) is not None

    def neighborhood(self, cell, radius=1):
        """
        All cells whose base position is at most ``radius`` lattice steps
        away from ``cell`` in every coordinate.

        Cells outside the box are simply absent from the result.

        :param cell: Cell (or base position) at the centre
        :param radius: int >= 0
        :return: SpatialCluster
        """
        if radius < 0:
            raise InvalidConfiguration(
                f"The neighborhood radius can not be negative, got {radius}.")
        base = numpy.array(cell.base if isinstance(cell, Cell) else cell,
                           dtype=int)
        if base.shape != (self.dim,):
            raise PreconditionViolation(
                "The given base position is of a different dimension than "
                "the lattice!")

        # Clip to the box before enumerating, cells outside never exist
        radius = int(min(radius, max(hi - lo for lo, hi in self.bounds)))
        lower = numpy.maximum(base - radius, self.lower)
        upper = numpy.minimum(base + radius, self.upper - 1)
        cells = [self.cells[p] for p in lattice_points(lower, upper)
                 if p in self.cells]
        return SpatialCluster(self, cells)
