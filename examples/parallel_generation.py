"""
Thread parallel construction.

Point generation and simplex search work cell by cell, so both can run on a
thread pool. With a fixed seed the points are identical for any number of
workers, and so is the complex (up to the ids handed to the simplices).
"""
import time

from ripsct import (LatticeIndex, PointGenerator, VietorisRipsComplex,
                    get_backend)

lattice = LatticeIndex([(0, 12), (0, 12), (0, 4)])

for workers in (1, 2, 4):
    backend = get_backend("threads", workers=workers)
    start = time.perf_counter()
    points = PointGenerator.poisson(lattice, 4.0, seed=1,
                                    backend=backend).generate()
    HC = VietorisRipsComplex(points.accepted.values(), "euclidean", 0.6,
                             backend=backend)
    HC.calculate_adjacency()
    HC.generate(max_dimension=3)
    elapsed = time.perf_counter() - start
    backend.terminate()
    print(f"workers={workers}: f_vector={HC.f_vector} ({elapsed:.2f} s)")
