"""Matplotlib rendering of planar point processes and complexes."""
import numpy
from matplotlib import pyplot
from matplotlib.collections import LineCollection
from matplotlib.patches import Circle, Polygon

from ripsct._errors import PreconditionViolation

# Define colours:
lo = numpy.array([242, 189, 138]) / 255  # light orange
do = numpy.array([235, 129, 27]) / 255  # Dark alert orange
nb = numpy.array([49, 78, 151]) / 255  # navy blue


def _axes(ax):
    if ax is None:
        fig = pyplot.figure()
        ax = fig.add_subplot(1, 1, 1)
    return ax.figure, ax


def _check_planar(lattice):
    if lattice.dim != 2:
        raise PreconditionViolation(
            f"Only 2 dimensional point sets can be plotted, got dimension "
            f"{lattice.dim}.")


def plot_lattice(lattice, ax=None, color='0.85', lw=0.5):
    """Draw the cell boundaries of a planar lattice."""
    _check_planar(lattice)
    fig, ax = _axes(ax)
    (x0, x1), (y0, y1) = lattice.bounds
    for x in range(x0, x1 + 1):
        ax.plot([x, x], [y0, y1], color=color, lw=lw, zorder=0)
    for y in range(y0, y1 + 1):
        ax.plot([x0, x1], [y, y], color=color, lw=lw, zorder=0)
    ax.set_xlim(x0, x1)
    ax.set_ylim(y0, y1)
    ax.set_aspect('equal')
    return fig, ax


def plot_points(result, lattice=None, ax=None, show_rejected=True,
                pointsize=5):
    """
    Plot the points of a ``GenerationResult``.

    Accepted points are drawn as dots, rejected points as crosses.

    :param result: GenerationResult
    :param lattice: LatticeIndex, optional, drawn as a grid if given
    :param ax: matplotlib axes, optional
    :return: fig, ax
    """
    if lattice is not None:
        fig, ax = plot_lattice(lattice, ax=ax)
    else:
        fig, ax = _axes(ax)

    points = list(result.all_points.values())
    if points:
        _check_planar(points[0].cell.lattice)

    if result.accepted:
        x_a = result.coordinates('accepted')
        ax.plot(x_a[:, 0], x_a[:, 1], '.', color='k', markersize=pointsize)
    if show_rejected and result.rejected:
        x_a = result.coordinates('rejected')
        ax.plot(x_a[:, 0], x_a[:, 1], 'x', color=do, markersize=pointsize)
    return fig, ax


def plot_complex(HC, ax=None, show_delta=False, show_ids=False,
                 show_lattice=True, pointsize=5):
    """
    Plot a planar simplicial complex.

    Simplices of dimension 2 and higher are filled (translucent, so that
    overlapping simplices darken), edges are drawn as lines and vertices
    as dots.

    :param HC: SimplicialComplex (or VietorisRipsComplex)
    :param show_delta: draw a disc of radius delta / 2 around each vertex,
            two discs overlap exactly for adjacent vertices when the
            metric is euclidean
    :param show_ids: label each vertex with its id
    :return: fig, ax
    """
    _check_planar(HC.lattice)
    if show_lattice:
        fig, ax = plot_lattice(HC.lattice, ax=ax)
    else:
        fig, ax = _axes(ax)

    if show_delta:
        for p in HC.vertices:
            ax.add_patch(Circle(p.absolute, HC.delta / 2, color=lo,
                                alpha=0.5, lw=0, zorder=1))

    for dim, simplices in HC.simplices.items():
        if dim < 2:
            continue
        for s in simplices:
            ax.add_patch(Polygon(s.x_a, closed=True, color=nb, alpha=0.25,
                                 lw=0, zorder=2))

    edges = [s.x_a for s in HC.simplices.get(1, ())]
    if edges:
        ax.add_collection(LineCollection(edges, colors=[do], lw=1, zorder=3))

    x_a = numpy.array([p.absolute for p in HC.vertices])
    ax.plot(x_a[:, 0], x_a[:, 1], '.', color='k', markersize=pointsize,
            zorder=4)

    if show_ids:
        for p in HC.vertices:
            ax.annotate(str(p.id), p.absolute + 0.025, fontsize=8)

    return fig, ax
