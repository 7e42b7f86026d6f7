"""
One call construction of a Vietoris-Rips complex with its components.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Union

from ripsct._backend import SerialBackend, TaskBackend
from ripsct._complex import VietorisRipsComplex
from ripsct._errors import InvalidConfiguration

logger = logging.getLogger(__name__)


@dataclass
class RipsConfig:
    """Parameters of a Vietoris-Rips construction.

    :param delta: adjacency threshold, pairs with d(x, y) < delta connect
    :param metric: distance callable or metric name
    :param max_dimension: highest simplex dimension to generate, None for all
    :param cluster_extension: lattice search radius, None for ceil(delta)
    :param backend: TaskBackend or backend name
    :param workers: number of threads when no backend is given
    """
    delta: float
    metric: Union[str, Callable] = "euclidean"
    max_dimension: Optional[int] = None
    cluster_extension: Optional[int] = None
    backend: Union[TaskBackend, str, None] = None
    workers: Optional[int] = None

    def __post_init__(self):
        if self.max_dimension is not None and self.max_dimension < 0:
            raise InvalidConfiguration(
                "VietorisRipsComplex generation max_dimension can not be "
                "negative.")


def build_complex(points, config: RipsConfig) -> VietorisRipsComplex:
    """Compute adjacency, simplices and connected components of ``points``.

    A thread pool created here from ``config.workers`` or a backend name is
    terminated before returning, and the complex falls back to the serial
    backend. A ``TaskBackend`` instance passed in ``config.backend`` belongs
    to the caller and is left running.

    :param points: iterable of Point, or a GenerationResult whose accepted
            points are used
    :param config: RipsConfig
    :return: VietorisRipsComplex with ``connectivity`` already calculated
    """
    accepted = getattr(points, 'accepted', None)
    if accepted is not None:
        points = accepted.values()

    HC = VietorisRipsComplex(points, config.metric, config.delta,
                             cluster_extension=config.cluster_extension,
                             backend=config.backend, workers=config.workers)
    try:
        HC.calculate_adjacency()
        HC.generate(config.max_dimension)
        HC.connectivity.calculate_connected_components()
    finally:
        if not isinstance(config.backend, TaskBackend):
            HC.backend.terminate()
            HC.backend = SerialBackend()

    logger.info("Vietoris-Rips complex built: f_vector=%s components=%d",
                HC.f_vector, len(HC.connectivity.connected_components))
    return HC
