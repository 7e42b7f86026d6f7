"""Connected components of the graph given by an adjacency matrix."""
import logging

logger = logging.getLogger(__name__)


class GraphComponent:
    """A connected component; vertices are kept in discovery order."""

    def __init__(self, id):
        self.id = id
        self.vertices = []

    @property
    def size(self):
        return len(self.vertices)

    @property
    def ids(self):
        return [p.id for p in self.vertices]

    def add_point(self, point):
        self.vertices.append(point)

    def __len__(self):
        return len(self.vertices)

    def __repr__(self):
        return f"GraphComponent(id={self.id}, size={self.size})"


class Connectivity:
    def __init__(self, vertices, adjacency):
        """
        Connected component analysis of a graph.

        :param vertices: list of Point, the vertex set of the graph
        :param adjacency: AdjacencyMatrix over the ids of ``vertices``
        """
        self.vertices = list(vertices)
        self.adjacency = adjacency
        self.points_by_id = {p.id: p for p in self.vertices}

        self.connected_components = {}
        # Point id --> component, None until calculated
        self.components_by_point = {p.id: None for p in self.vertices}

    def component(self, id):
        """Return the component with ``id``, creating it if needed."""
        try:
            return self.connected_components[id]
        except KeyError:
            self.connected_components[id] = GraphComponent(id)
            return self.connected_components[id]

    def component_of(self, point):
        return self.components_by_point.get(getattr(point, 'id', point))

    def sizes(self):
        return [c.size for c in self.connected_components.values()]

    def calculate_connected_components(self):
        """
        Walk the graph until every vertex has been visited.

        Roots are taken in vertex order, so component ids only depend on the
        order of ``vertices``. Each visit pulls all unassigned neighbours of
        the current vertex into the component and moves on to the next
        unvisited member, until the component has no unvisited member left.

        :return: dict, component id --> GraphComponent
        """
        self.connected_components.clear()
        for pid in self.components_by_point:
            self.components_by_point[pid] = None

        visited = dict.fromkeys(self.points_by_id, False)
        roots = iter(self.vertices)
        remaining = len(self.vertices)
        component_id = 0

        while remaining > 0:
            root = next(p for p in roots if not visited[p.id])
            current = self.component(component_id)
            component_id += 1
            current.add_point(root)
            self.components_by_point[root.id] = current
            logger.debug("Next component root found: root=%d", root.id)

            position = 0
            while position < len(current.vertices):
                vertex = current.vertices[position]
                position += 1
                if visited[vertex.id]:
                    continue
                visited[vertex.id] = True
                remaining -= 1

                for nid in self.adjacency.connections(vertex.id):
                    if self.components_by_point.get(nid, False) is None:
                        self.components_by_point[nid] = current
                        current.add_point(self.points_by_id[nid])

            logger.debug("Finished component: id=%d size=%d remaining=%d",
                         current.id, current.size, remaining)

        logger.info("Connected components calculated: count=%d",
                    len(self.connected_components))
        return self.connected_components
