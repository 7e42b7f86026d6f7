"""
Random point processes on a ``LatticeIndex``.

Every cell of the lattice is assigned

- a count distribution, sampled once for the number of points in the cell,
- a position distribution, sampled per coordinate for the cell relative
  position of each point,
- a point filter, deciding whether a generated point is accepted.

Assigners are callables ``assigner(cell) -> value``; passing a distribution
or filter directly assigns it to every cell. The constant intensity Poisson
process is available as ``PointGenerator.poisson``.

Usage::

    from ripsct import LatticeIndex, PointGenerator

    lattice = LatticeIndex([(0, 4), (0, 4)])
    result = PointGenerator.poisson(lattice, intensity=5.0, seed=42).generate()
    vertices = list(result.accepted.values())
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import SimpleNamespace
from typing import Protocol, runtime_checkable, Any, Callable

import numpy as np

from ripsct._backend import resolve_backend
from ripsct._errors import InvalidConfiguration, PreconditionViolation
from ripsct._metrics import euclidean
from ripsct._vertex import Point

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Distributions
# ---------------------------------------------------------------------------
@runtime_checkable
class CountDistribution(Protocol):
    """Distribution of the number of points in a cell."""

    def sample(self, rng: np.random.Generator) -> int:
        ...


@runtime_checkable
class PositionDistribution(Protocol):
    """Distribution of the cell relative coordinates of a point."""

    def sample(self, rng: np.random.Generator, dim: int) -> np.ndarray:
        ...


class PoissonCount:
    """Poisson distributed point count with mean ``intensity``."""

    def __init__(self, intensity: float):
        if intensity < 0:
            raise InvalidConfiguration(
                f"Poisson intensity can not be negative, got {intensity}.")
        self.intensity = float(intensity)

    def sample(self, rng):
        return int(rng.poisson(self.intensity))

    def __repr__(self):
        return f"PoissonCount({self.intensity})"


class ConstantCount:
    """Always the same number of points."""

    def __init__(self, n: int):
        self.n = int(n)

    def sample(self, rng):
        return self.n

    def __repr__(self):
        return f"ConstantCount({self.n})"


class UniformPosition:
    """Independent uniform coordinates on [low, high)."""

    def __init__(self, low: float = 0.0, high: float = 1.0):
        self.low = low
        self.high = high

    def sample(self, rng, dim):
        return rng.uniform(self.low, self.high, size=dim)

    def __repr__(self):
        return f"UniformPosition({self.low}, {self.high})"


class FixedPosition:
    """Every point at the same cell relative position (e.g. the midpoint)."""

    def __init__(self, uniform):
        self.uniform = np.asarray(uniform, dtype=float)

    def sample(self, rng, dim):
        if self.uniform.shape != (dim,):
            raise PreconditionViolation(
                f"FixedPosition of dimension {self.uniform.size} used in "
                f"dimension {dim}.")
        return self.uniform.copy()


# ---------------------------------------------------------------------------
# Point filters
# ---------------------------------------------------------------------------
PointFilter = Callable[[Point], bool]


def accept_all(point) -> bool:
    return True


def reject_all(point) -> bool:
    return False


def box_filter(lower, upper) -> PointFilter:
    """Accept points with lower <= absolute < upper in every coordinate."""
    lower = np.asarray(lower, dtype=float)
    upper = np.asarray(upper, dtype=float)

    def evaluate(point):
        return bool(np.all(lower <= point.absolute)
                    and np.all(point.absolute < upper))

    return evaluate


def ball_filter(center, radius: float, metric=euclidean) -> PointFilter:
    """Accept points within ``radius`` of ``center`` under ``metric``."""
    origin = SimpleNamespace(absolute=np.asarray(center, dtype=float))

    def evaluate(point):
        return metric(point, origin) <= radius

    return evaluate


# ---------------------------------------------------------------------------
# Assigners
# ---------------------------------------------------------------------------
def constant(value: Any) -> Callable:
    """Assigner returning ``value`` for every cell."""
    def assigner(cell):
        return value
    return assigner


def _count_assigner(count):
    if isinstance(count, CountDistribution):
        return constant(count)
    if callable(count):
        return count
    raise InvalidConfiguration(
        f"Expected a count distribution or a per-cell assigner, got {count!r}.")


def _position_assigner(position):
    if position is None:
        return constant(UniformPosition())
    if isinstance(position, PositionDistribution):
        return constant(position)
    if callable(position):
        return position
    raise InvalidConfiguration(
        f"Expected a position distribution or a per-cell assigner, "
        f"got {position!r}.")


# ---------------------------------------------------------------------------
# Generation
# ---------------------------------------------------------------------------
class CellSample:
    """Points generated inside a single cell.

    Ids run from ``first_point_id`` to ``first_point_id + number_of_points - 1``.
    All writes go to the local ``all_points``/``accepted``/``rejected`` maps,
    so several cells can be generated concurrently.
    """

    def __init__(self, cell, number_of_points, first_point_id, position,
                 point_filter=accept_all, seed=None):
        if number_of_points < 0:
            raise PreconditionViolation(
                f"Cell {cell.base} sampled a negative number of points "
                f"({number_of_points}).")
        self.cell = cell
        self.number_of_points = number_of_points
        self.first_point_id = first_point_id
        self.position = position
        self.point_filter = point_filter
        self.seed = seed

        self.all_points = {}
        self.accepted = {}
        self.rejected = {}

    def generate(self):
        self.all_points.clear()
        self.accepted.clear()
        self.rejected.clear()

        rng = np.random.default_rng(self.seed)
        trace = logger.isEnabledFor(logging.DEBUG)
        for i in range(self.number_of_points):
            p = Point(self.first_point_id + i,
                      self.position.sample(rng, self.cell.dim), self.cell)
            self.all_points[p.id] = p
            if trace:
                logger.debug("Point generated: cell=%s id=%d absolute=%s",
                             self.cell.base, p.id, p.absolute.tolist())

        for p in self.all_points.values():
            if self.point_filter(p):
                self.accepted[p.id] = p
            else:
                self.rejected[p.id] = p

        logger.debug("Cell generation completed: cell=%s accepted=%d "
                     "rejected=%d", self.cell.base, len(self.accepted),
                     len(self.rejected))
        return self


@dataclass
class GenerationResult:
    """Merged output of ``PointGenerator.generate``; maps are ordered by id."""
    all_points: dict = field(default_factory=dict)
    accepted: dict = field(default_factory=dict)
    rejected: dict = field(default_factory=dict)
    samples: dict = field(default_factory=dict)

    def coordinates(self, which: str = "accepted") -> np.ndarray:
        """Absolute coordinates as an (N, dim) array in id order."""
        points = getattr(self, which)
        if not points:
            # Keep the column count of the lattice
            dim = next(iter(self.samples.values())).cell.dim \
                if self.samples else 0
            return np.empty((0, dim))
        return np.array([p.absolute for p in points.values()])


class PointGenerator:
    def __init__(self, lattice, count, position=None, point_filter=None,
                 filter_assigner=None, seed=None, backend=None, workers=None):
        """
        Random point process over all cells of ``lattice``.

        :param lattice: LatticeIndex, the cells to populate
        :param count: CountDistribution or callable(cell) -> CountDistribution
        :param position: PositionDistribution or
                callable(cell) -> PositionDistribution, optional
                Default is uniform on [0, 1) in every coordinate.
        :param point_filter: callable(point) -> bool applied in every cell,
                optional (default accepts every point)
        :param filter_assigner: callable(cell) -> point filter, optional,
                takes precedence over point_filter
        :param seed: int or numpy.random.SeedSequence, optional
                Runs with the same seed produce the same points, independent
                of the backend and the number of workers.
        :param backend: TaskBackend or backend name, optional
        :param workers: int, optional, number of threads if backend is None
        """
        self.lattice = lattice
        self.count_assigner = _count_assigner(count)
        self.position_assigner = _position_assigner(position)
        if filter_assigner is not None:
            self.filter_assigner = filter_assigner
        else:
            self.filter_assigner = constant(point_filter or accept_all)
        self.seed = seed
        self.backend = resolve_backend(backend, workers)

    @classmethod
    def poisson(cls, lattice, intensity, **kwargs):
        """Homogeneous Poisson process with ``intensity`` points per cell on
        average and uniform positions."""
        return cls(lattice, PoissonCount(intensity), UniformPosition(), **kwargs)

    def generate(self):
        """Sample every cell and merge the per-cell results.

        Counts are drawn in cell order to hand out contiguous id ranges; the
        positions are then sampled per cell on the backend, each cell with
        its own random stream spawned from the seed.

        :return: GenerationResult
        """
        root = self.seed
        if not isinstance(root, np.random.SeedSequence):
            root = np.random.SeedSequence(root)
        count_seed, position_seed = root.spawn(2)
        count_rng = np.random.default_rng(count_seed)
        cell_seeds = position_seed.spawn(len(self.lattice))

        samples = {}
        next_id = 0
        for cell, cell_seed in zip(self.lattice, cell_seeds):
            n = self.count_assigner(cell).sample(count_rng)
            logger.debug("Creating CellSample: cell=%s points=%d "
                         "first_id=%d", cell.base, n, next_id)
            samples[cell.key] = CellSample(
                cell, n, next_id,
                position=self.position_assigner(cell),
                point_filter=self.filter_assigner(cell),
                seed=cell_seed)
            next_id += n

        # Barrier: map returns once every cell is done
        self.backend.map(CellSample.generate, list(samples.values()))

        result = GenerationResult(samples=samples)
        for sample in samples.values():
            result.all_points.update(sample.all_points)
            result.accepted.update(sample.accepted)
            result.rejected.update(sample.rejected)

        logger.info("Point generation completed: all=%d accepted=%d "
                    "rejected=%d", len(result.all_points),
                    len(result.accepted), len(result.rejected))
        return result
