"""
Point processes on a filtered domain.

Points are generated in every cell but only those passing a filter become
vertices. Here a disc is cut out of a square box, and the inner and outer
rings are compared by their connected components.
"""
import matplotlib.pyplot as plt

from ripsct import (LatticeIndex, PointGenerator, RipsConfig, accept_all,
                    ball_filter, build_complex, plot_points)

lattice = LatticeIndex([(-4, 4), (-4, 4)])

# Keep the disc of radius 3 around the origin
generator = PointGenerator.poisson(lattice, 2.0, seed=7,
                                   point_filter=ball_filter([0, 0], 3.0))
points = generator.generate()
print(f"Accepted {len(points.accepted)} of {len(points.all_points)} points")

fig, ax = plot_points(points, lattice=lattice)
plt.savefig("filtered_domain.png", dpi=150, bbox_inches="tight")

HC = build_complex(points, RipsConfig(delta=0.7, max_dimension=2))
sizes = sorted(HC.connectivity.sizes(), reverse=True)
print(f"f_vector: {HC.f_vector}")
print(f"Largest components: {sizes[:5]}")


# Per-cell filters: only cells on the left half of the box keep their points
def left_half(cell):
    return accept_all if cell.base[0] < 0 else (lambda p: False)


points = PointGenerator.poisson(lattice, 2.0, seed=7,
                                filter_assigner=left_half).generate()
print(f"Left half keeps {len(points.accepted)} points")
