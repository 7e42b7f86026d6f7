"""Symmetric adjacency relation over a fixed set of point ids."""


def _id(v):
    """Accept a point (anything with an ``id``) or a plain integer id."""
    return getattr(v, 'id', v)


class AdjacencyMatrix:
    """Adjacency of an undirected graph whose vertex set is ``ids``.

    The ids need not be consecutive. Reading a pair that involves an unknown
    id returns ``False`` and writing it does nothing, so candidate filtering
    code can query freely before checking membership. Every method accepts
    integer ids or points carrying an ``id`` attribute.
    """

    def __init__(self, ids):
        self.ids = frozenset(_id(i) for i in ids)
        self._nn = {i: set() for i in self.ids}

    def __contains__(self, x):
        return _id(x) in self._nn

    def __len__(self):
        return len(self.ids)

    def reset(self):
        """Disconnect every pair."""
        for nn in self._nn.values():
            nn.clear()

    def set(self, x, y, value):
        """Set the connection status of x <-> y (order does not matter)."""
        x, y = _id(x), _id(y)
        if x not in self._nn or y not in self._nn:
            return
        if value:
            self._nn[x].add(y)
            self._nn[y].add(x)
        else:
            self._nn[x].discard(y)
            self._nn[y].discard(x)

    def connect(self, x, y):
        self.set(x, y, True)

    def disconnect(self, x, y):
        self.set(x, y, False)

    def get(self, x, y):
        """True if x and y are connected."""
        nn = self._nn.get(_id(x))
        return nn is not None and _id(y) in nn

    def all(self, x, ys):
        """True if x is connected to every element of ys."""
        nn = self._nn.get(_id(x))
        if nn is None:
            return False
        return all(_id(y) in nn for y in ys)

    def connections(self, x):
        """Sorted ids connected to x (contains x only for a self loop)."""
        return sorted(self._nn.get(_id(x), ()))

    def count(self):
        """Number of undirected edges; self loops are not counted."""
        return sum(1 for x, nn in self._nn.items() for y in nn if x < y)

    def edges(self):
        """Sorted list of the (x, y) pairs with x < y that are connected."""
        return sorted((x, y) for x, nn in self._nn.items() for y in nn
                      if x < y)

    def __eq__(self, other):
        if not isinstance(other, AdjacencyMatrix):
            return NotImplemented
        return self.ids == other.ids and self._nn == other._nn

    def __repr__(self):
        return f"AdjacencyMatrix(vertices={len(self.ids)}, edges={self.count()})"
