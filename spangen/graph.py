from types import MappingProxyType
from typing import Any, Hashable, Iterator, Mapping, Optional, Union
import networkx as nx
import numpy as np
import pandas as pd
import scipy.sparse as sp
from numpy.typing import NDArray
from scipy.sparse import spmatrix
from .exceptions import ElementNotFoundError, IdAlreadyInUseError
from .stream import Sink, Source
from .types import CSRMatrix, EdgeId, NodeId
from .utils import _make_symmetric_csr, _validate_square_matrix


class Edge:
    """Lightweight view on one edge of a :class:`Graph`.

    Reads go straight to the graph storage; writes are delegated to the graph
    so that every change is notified to its sinks.
    """

    __slots__ = ("graph", "id", "source", "target")

    def __init__(self, graph: "Graph", edge_id: EdgeId, source: NodeId, target: NodeId) -> None:
        self.graph = graph
        self.id = edge_id
        self.source = source
        self.target = target

    def get(self, key: str, default: Any = None) -> Any:
        return self.graph.get_edge_attribute(self.id, key, default)

    def set(self, key: str, value: Any) -> None:
        self.graph.set_edge_attribute(self.id, key, value)

    @property
    def attributes(self) -> Mapping[str, Any]:
        return MappingProxyType(dict(self.graph._edge_data(self.id)))

    def opposite(self, node_id: NodeId) -> NodeId:
        if node_id == self.source:
            return self.target
        if node_id == self.target:
            return self.source
        raise ElementNotFoundError(f"Node {node_id!r} is not an endpoint of edge {self.id!r}.")

    def __getitem__(self, key: str) -> Any:
        return self.graph._edge_data(self.id)[key]

    def __contains__(self, key: str) -> bool:
        return key in self.graph._edge_data(self.id)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Edge):
            return NotImplemented
        return self.graph is other.graph and self.id == other.id

    def __hash__(self) -> int:
        return hash((id(self.graph), self.id))

    def __repr__(self) -> str:
        return f"Edge({self.id!r}, {self.source!r}, {self.target!r})"


class Graph(Source, Sink):
    """Mutable graph with identified edges and change notification.

    Storage is a networkx ``Graph`` (``DiGraph`` if ``directed=True``); at most
    one edge connects a given pair of nodes. Every mutation is applied first
    and then forwarded to the attached sinks. The graph is also a
    :class:`~spangen.stream.Sink`, so it can be attached to a generator and
    built from its events.

    Parameters
    ----------
    graph_id
        Identifier used as ``source_id`` of the events this graph emits.
    directed
        If True, edges are directed (source -> target).
    """

    def __init__(self, graph_id: Optional[Hashable] = None, *, directed: bool = False) -> None:
        super().__init__(graph_id)
        self._directed = bool(directed)
        self._nx = nx.DiGraph() if self._directed else nx.Graph()
        # Insertion ordered, edge id -> (source, target)
        self._edges: dict[EdgeId, tuple[NodeId, NodeId]] = {}

    # ----------------- properties -----------------
    @property
    def id(self) -> Hashable:
        return self.source_id

    @property
    def directed(self) -> bool:
        return self._directed

    @property
    def n_nodes(self) -> int:
        return self._nx.number_of_nodes()

    @property
    def n_edges(self) -> int:
        return len(self._edges)

    # ----------------- nodes -----------------
    def has_node(self, node_id: NodeId) -> bool:
        return self._nx.has_node(node_id)

    def nodes(self) -> Iterator[NodeId]:
        """Iterate node ids in insertion order."""
        yield from list(self._nx.nodes)

    def add_node(self, node_id: NodeId, **attrs: Any) -> NodeId:
        if self._nx.has_node(node_id):
            raise IdAlreadyInUseError(f"Node {node_id!r} already exists.")
        self._nx.add_node(node_id)
        self._send_node_added(node_id)
        for key, value in attrs.items():
            self.set_node_attribute(node_id, key, value)
        return node_id

    def remove_node(self, node_id: NodeId) -> None:
        self._check_node(node_id)
        incident = [eid for eid, (u, v) in self._edges.items() if node_id in (u, v)]
        for edge_id in incident:
            self.remove_edge(edge_id)
        self._nx.remove_node(node_id)
        self._send_node_removed(node_id)

    def get_node_attribute(self, node_id: NodeId, key: str, default: Any = None) -> Any:
        self._check_node(node_id)
        return self._nx.nodes[node_id].get(key, default)

    def set_node_attribute(self, node_id: NodeId, key: str, value: Any) -> None:
        self._check_node(node_id)
        data = self._nx.nodes[node_id]
        old = data.get(key)
        data[key] = value
        self._send_node_attribute_changed(node_id, key, old, value)

    def remove_node_attribute(self, node_id: NodeId, key: str) -> None:
        self._check_node(node_id)
        data = self._nx.nodes[node_id]
        if key in data:
            old = data.pop(key)
            self._send_node_attribute_removed(node_id, key, old)

    # ----------------- edges -----------------
    def has_edge(self, edge_id: EdgeId) -> bool:
        return edge_id in self._edges

    def edge(self, edge_id: EdgeId) -> Edge:
        try:
            source, target = self._edges[edge_id]
        except KeyError:
            raise ElementNotFoundError(f"Edge {edge_id!r} not found.") from None
        return Edge(self, edge_id, source, target)

    def edges(self) -> Iterator[Edge]:
        """Iterate edges in insertion order.

        Each call returns a fresh iterator over a snapshot of the edge ids, so
        attributes may be written while iterating.
        """
        for edge_id in list(self._edges):
            if edge_id in self._edges:
                yield self.edge(edge_id)

    def add_edge(self, edge_id: EdgeId, source: NodeId, target: NodeId, **attrs: Any) -> Edge:
        if edge_id in self._edges:
            raise IdAlreadyInUseError(f"Edge {edge_id!r} already exists.")
        self._check_node(source)
        self._check_node(target)
        if self._nx.has_edge(source, target):
            raise IdAlreadyInUseError(
                f"An edge between {source!r} and {target!r} already exists.")
        self._nx.add_edge(source, target)
        self._edges[edge_id] = (source, target)
        self._send_edge_added(edge_id, source, target)
        for key, value in attrs.items():
            self.set_edge_attribute(edge_id, key, value)
        return Edge(self, edge_id, source, target)

    def remove_edge(self, edge_id: EdgeId) -> None:
        try:
            source, target = self._edges.pop(edge_id)
        except KeyError:
            raise ElementNotFoundError(f"Edge {edge_id!r} not found.") from None
        self._nx.remove_edge(source, target)
        self._send_edge_removed(edge_id)

    def get_edge_attribute(self, edge_id: EdgeId, key: str, default: Any = None) -> Any:
        return self._edge_data(edge_id).get(key, default)

    def set_edge_attribute(self, edge_id: EdgeId, key: str, value: Any) -> None:
        data = self._edge_data(edge_id)
        old = data.get(key)
        data[key] = value
        self._send_edge_attribute_changed(edge_id, key, old, value)

    def remove_edge_attribute(self, edge_id: EdgeId, key: str) -> None:
        data = self._edge_data(edge_id)
        if key in data:
            old = data.pop(key)
            self._send_edge_attribute_removed(edge_id, key, old)

    def clear(self) -> None:
        self._nx.clear()
        self._edges.clear()
        self._send_graph_cleared()

    # ----------------- analysis / export -----------------
    def is_connected(self) -> bool:
        """Weak connectivity for directed graphs; False for an empty graph."""
        if self.n_nodes == 0:
            return False
        if self._directed:
            return nx.is_weakly_connected(self._nx)
        return nx.is_connected(self._nx)

    def adjacency(self, weight: Optional[str] = "weight") -> CSRMatrix:
        """CSR adjacency matrix in node insertion order.

        Edges lacking the ``weight`` attribute count as 1.0. With
        ``weight=None`` every edge counts as 1.0.
        """
        n = self.n_nodes
        if n == 0:
            return sp.csr_matrix((0, 0), dtype=float)
        A = nx.to_scipy_sparse_array(
            self._nx, nodelist=list(self._nx.nodes), weight=weight, dtype=float, format="csr")
        return sp.csr_matrix(A)

    def to_networkx(self) -> Union[nx.Graph, nx.DiGraph]:
        """Deep copy of the underlying networkx graph."""
        return self._nx.copy()

    def edges_frame(self) -> pd.DataFrame:
        """One row per edge: ``id``, ``source``, ``target`` and its attributes."""
        rows = []
        for edge_id, (source, target) in self._edges.items():
            row = {"id": edge_id, "source": source, "target": target}
            row.update(self._nx.edges[source, target])
            rows.append(row)
        if not rows:
            return pd.DataFrame(columns=["id", "source", "target"])
        return pd.DataFrame(rows)

    # ----------------- alternative constructors -----------------
    @classmethod
    def from_dense(cls, arr: NDArray, *, directed: bool = False, weighted: bool = True,
                   sym_op: str = "max", ignore_selfloops: bool = True,
                   weight: str = "weight", graph_id: Optional[Hashable] = None) -> "Graph":
        """Build from a dense square adjacency array (nonzero entries are edges)."""
        M = np.asarray(arr, dtype=float)
        _validate_square_matrix(M)
        return cls.from_csr(sp.csr_matrix(M), directed=directed, weighted=weighted,
                            sym_op=sym_op, ignore_selfloops=ignore_selfloops,
                            weight=weight, graph_id=graph_id)

    @classmethod
    def from_csr(cls, adj: spmatrix, *, directed: bool = False, weighted: bool = True,
                 sym_op: str = "max", ignore_selfloops: bool = True,
                 weight: str = "weight", graph_id: Optional[Hashable] = None) -> "Graph":
        """Build from a sparse square adjacency matrix.

        Nodes are ``0..n-1``; edge ids are ``"i-j"``. For undirected graphs the
        matrix is symmetrized with ``sym_op`` and only the upper triangle is read.
        """
        A = sp.csr_matrix(adj, dtype=float)
        if A.ndim != 2 or A.shape[0] != A.shape[1]:
            raise TypeError("Matrix must be square (n x n).")
        if ignore_selfloops:
            A = A.tolil()
            A.setdiag(0)
            A = A.tocsr()
        if not directed:
            A = sp.triu(_make_symmetric_csr(A, option=sym_op)).tocsr()
        A.eliminate_zeros()

        coo = A.tocoo()
        order = np.lexsort((coo.col, coo.row))
        G = cls(graph_id, directed=directed)
        for i in range(A.shape[0]):
            G.add_node(i)
        for r, c, w in zip(coo.row[order], coo.col[order], coo.data[order]):
            r, c = int(r), int(c)
            attrs = {weight: float(w)} if weighted else {}
            G.add_edge(f"{r}-{c}", r, c, **attrs)
        return G

    @classmethod
    def from_networkx(cls, nxG: Union[nx.Graph, nx.DiGraph], *,
                      graph_id: Optional[Hashable] = None) -> "Graph":
        """Copy a networkx graph.

        An edge's ``id`` attribute is used as edge id if present, otherwise the
        tuple ``(u, v)``.
        """
        if nxG.is_multigraph():
            raise TypeError("Multigraphs are not supported.")
        G = cls(graph_id, directed=nxG.is_directed())
        for node, data in nxG.nodes(data=True):
            G.add_node(node, **data)
        for u, v, data in nxG.edges(data=True):
            attrs = dict(data)
            edge_id = attrs.pop("id", (u, v))
            G.add_edge(edge_id, u, v, **attrs)
        return G

    # ----------------- Sink interface -----------------
    def node_added(self, source_id, node_id):
        self.add_node(node_id)

    def node_removed(self, source_id, node_id):
        self.remove_node(node_id)

    def edge_added(self, source_id, edge_id, source, target):
        self.add_edge(edge_id, source, target)

    def edge_removed(self, source_id, edge_id):
        self.remove_edge(edge_id)

    def node_attribute_changed(self, source_id, node_id, key, old_value, new_value):
        self.set_node_attribute(node_id, key, new_value)

    def node_attribute_removed(self, source_id, node_id, key, old_value):
        self.remove_node_attribute(node_id, key)

    def edge_attribute_changed(self, source_id, edge_id, key, old_value, new_value):
        self.set_edge_attribute(edge_id, key, new_value)

    def edge_attribute_removed(self, source_id, edge_id, key, old_value):
        self.remove_edge_attribute(edge_id, key)

    def graph_cleared(self, source_id):
        self.clear()

    # ----------------- helpers -----------------
    def _check_node(self, node_id: NodeId) -> None:
        if not self._nx.has_node(node_id):
            raise ElementNotFoundError(f"Node {node_id!r} not found.")

    def _edge_data(self, edge_id: EdgeId) -> dict:
        try:
            source, target = self._edges[edge_id]
        except KeyError:
            raise ElementNotFoundError(f"Edge {edge_id!r} not found.") from None
        return self._nx.edges[source, target]

    def __contains__(self, node_id: NodeId) -> bool:
        return self.has_node(node_id)

    def __repr__(self) -> str:
        kind = "directed" if self._directed else "undirected"
        return f"Graph(id={self.id!r}, {kind}, n_nodes={self.n_nodes}, n_edges={self.n_edges})"
