import pytest
from spangen import BaseGenerator, Graph, Sink


class GridGenerator(BaseGenerator):
    """Square lattice growing by one row and one column per step.

    ``begin`` emits the single node "0_0"; step k adds row k and column k.
    Generation completes when the lattice is ``size`` x ``size``.
    """

    def __init__(self, size: int, source_id=None):
        super().__init__(source_id)
        self.size = size
        self.side = 0

    def _begin(self):
        self.side = 1
        self.add_node("0_0", x=0, y=0)

    def _next_element(self):
        if self.side >= self.size:
            return False
        k = self.side
        for i in range(k):
            self._add_cell(i, k)
        for j in range(k + 1):
            self._add_cell(k, j)
        self.side += 1
        return True

    def _add_cell(self, i, j):
        node = f"{i}_{j}"
        self.add_node(node, x=i, y=j)
        if i > 0:
            self.add_edge(f"{i - 1}_{j}-{node}", f"{i - 1}_{j}", node, weight=1.0)
        if j > 0:
            self.add_edge(f"{i}_{j - 1}-{node}", f"{i}_{j - 1}", node, weight=1.0)


class ChainGenerator(BaseGenerator):
    """Unbounded path 0 - 1 - 2 - ...; never reports completion."""

    def _begin(self):
        self.last = 0
        self.add_node(0)

    def _next_element(self):
        new = self.last + 1
        self.add_node(new)
        self.add_edge(f"{self.last}-{new}", self.last, new, weight=float(new))
        self.last = new
        return True

    def _end(self):
        self.last = None


class RecordingSink(Sink):
    """Collects every event as a tuple (name, *args without source_id)."""

    def __init__(self):
        self.events = []
        self.sources = set()

    def _record(self, name, source_id, *args):
        self.sources.add(source_id)
        self.events.append((name, *args))

    def node_added(self, source_id, node_id):
        self._record("node_added", source_id, node_id)

    def node_removed(self, source_id, node_id):
        self._record("node_removed", source_id, node_id)

    def edge_added(self, source_id, edge_id, source, target):
        self._record("edge_added", source_id, edge_id, source, target)

    def edge_removed(self, source_id, edge_id):
        self._record("edge_removed", source_id, edge_id)

    def node_attribute_changed(self, source_id, node_id, key, old_value, new_value):
        self._record("node_attribute_changed", source_id, node_id, key, old_value, new_value)

    def edge_attribute_changed(self, source_id, edge_id, key, old_value, new_value):
        self._record("edge_attribute_changed", source_id, edge_id, key, old_value, new_value)

    def node_attribute_removed(self, source_id, node_id, key, old_value):
        self._record("node_attribute_removed", source_id, node_id, key, old_value)

    def edge_attribute_removed(self, source_id, edge_id, key, old_value):
        self._record("edge_attribute_removed", source_id, edge_id, key, old_value)

    def graph_cleared(self, source_id):
        self._record("graph_cleared", source_id)

    def names(self):
        return [e[0] for e in self.events]


@pytest.fixture
def grid_generator():
    return GridGenerator


@pytest.fixture
def chain_generator():
    return ChainGenerator


@pytest.fixture
def recorder():
    return RecordingSink()


@pytest.fixture
def grid9(grid_generator):
    """9 x 9 lattice built by the grid generator."""
    G = Graph("grid")
    gen = grid_generator(9)
    gen.add_sink(G)
    gen.begin()
    while gen.next_element():
        pass
    gen.end()
    return G
