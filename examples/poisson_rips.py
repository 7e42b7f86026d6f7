"""
Vietoris-Rips complex of a Poisson point cloud.

Samples a homogeneous Poisson process on a 2D unit cell lattice, builds the
Vietoris-Rips complex for a few thresholds and prints how the number of
simplices and connected components changes with delta.
"""
import logging

import matplotlib.pyplot as plt

from ripsct import (LatticeIndex, PointGenerator, RipsConfig, build_complex,
                    plot_complex)

logging.basicConfig(level=logging.INFO)

lattice = LatticeIndex([(0, 6), (0, 6)])
points = PointGenerator.poisson(lattice, intensity=3.0, seed=2024).generate()
print(f"Points generated: {len(points.accepted)}")

for delta in (0.3, 0.5, 0.8):
    HC = build_complex(points, RipsConfig(delta=delta, max_dimension=3))
    n_components = len(HC.connectivity.connected_components)
    print(f"delta={delta}: f_vector={HC.f_vector} "
          f"components={n_components} "
          f"euler_characteristic={HC.euler_characteristic()}")

# Plot the last complex with the delta / 2 discs around each point
fig, ax = plot_complex(HC, show_delta=True)
ax.set_title(f"Vietoris-Rips complex, delta = {HC.delta}")
plt.savefig("poisson_rips.png", dpi=150, bbox_inches="tight")
