"""
Vietoris-Rips complexes of random point clouds on unit cell lattices.

Usage::

    from ripsct import LatticeIndex, PointGenerator, RipsConfig, build_complex

    lattice = LatticeIndex([(0, 4), (0, 4)])
    points = PointGenerator.poisson(lattice, intensity=5.0, seed=7).generate()
    HC = build_complex(points, RipsConfig(delta=0.5, max_dimension=3))

    HC.f_vector                              # simplices per dimension
    HC.connectivity.connected_components     # component id --> component
"""
import logging

from ripsct._adjacency import AdjacencyMatrix
from ripsct._backend import (AtomicCounter, SerialBackend, ThreadBackend,
                             get_backend)
from ripsct._complex import SimplicialComplex, VietorisRipsComplex
from ripsct._connectivity import Connectivity, GraphComponent
from ripsct._errors import InvalidConfiguration, PreconditionViolation
from ripsct._lattice import Cell, LatticeIndex, SpatialCluster, lattice_points
from ripsct._metrics import euclidean, squared_euclidean, uniform
from ripsct._pipeline import RipsConfig, build_complex
from ripsct._process import (CellSample, ConstantCount, FixedPosition,
                             GenerationResult, PointGenerator, PoissonCount,
                             UniformPosition, accept_all, ball_filter,
                             box_filter, constant, reject_all)
from ripsct._simplex import Simplex
from ripsct._vertex import Point

# Optional modules for plotting:
try:
    from ripsct._plotting import plot_complex, plot_lattice, plot_points
except ImportError:
    logging.warning("Plotting functions are unavailable. To use install "
                    "matplotlib, install using ex. `pip install matplotlib` ")
    matplotlib_available = False
else:
    matplotlib_available = True

__all__ = [
    "AdjacencyMatrix",
    "AtomicCounter",
    "Cell",
    "CellSample",
    "Connectivity",
    "ConstantCount",
    "FixedPosition",
    "GenerationResult",
    "GraphComponent",
    "InvalidConfiguration",
    "LatticeIndex",
    "Point",
    "PointGenerator",
    "PoissonCount",
    "PreconditionViolation",
    "RipsConfig",
    "SerialBackend",
    "Simplex",
    "SimplicialComplex",
    "SpatialCluster",
    "ThreadBackend",
    "UniformPosition",
    "VietorisRipsComplex",
    "accept_all",
    "ball_filter",
    "box_filter",
    "build_complex",
    "constant",
    "euclidean",
    "get_backend",
    "lattice_points",
    "reject_all",
    "squared_euclidean",
    "uniform",
]
