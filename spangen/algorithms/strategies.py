from enum import Enum
from typing import TYPE_CHECKING, Callable, Iterable, Iterator, Union
import networkx as nx
from ..graph import Edge
from ..types import EdgeId
from ..utils import _edge_weight


if TYPE_CHECKING:
    from .base import SpanningTree


TreeBuilder = Callable[["SpanningTree"], Iterable[Union[Edge, EdgeId]]]


class TreeStrategy(str, Enum):
    """Closed set of tree-building strategies understood by :class:`SpanningTree`."""

    KRUSKAL = "kruskal"
    PRIM = "prim"
    CUSTOM = "custom"


def _weighted_multigraph(tree: "SpanningTree") -> nx.MultiGraph:
    """Undirected networkx view of the tree's graph, keyed by edge id.

    Self-loops are left out. Weights are validated and stored under
    ``"weight"``; a multigraph keeps reciprocal edges of a directed graph apart.
    """
    H = nx.MultiGraph()
    H.add_nodes_from(tree.graph.nodes())
    for edge in tree.graph.edges():
        if edge.source == edge.target:
            continue
        H.add_edge(edge.source, edge.target, key=edge.id,
                   weight=_edge_weight(edge, tree.weight_attribute))
    return H


def _spanning_edges(tree: "SpanningTree", algorithm: str) -> Iterator[Edge]:
    H = _weighted_multigraph(tree)
    if tree.mode == "similarity":
        found = nx.maximum_spanning_edges(H, algorithm=algorithm, weight="weight",
                                          keys=True, data=False)
    else:
        found = nx.minimum_spanning_edges(H, algorithm=algorithm, weight="weight",
                                          keys=True, data=False)
    for _, _, edge_id in found:
        yield tree.graph.edge(edge_id)


def kruskal_edges(tree: "SpanningTree") -> Iterator[Edge]:
    """Kruskal's algorithm (networkx).

    Edges are scanned by increasing weight ("distance" mode) or decreasing
    weight ("similarity" mode) and taken unless they close a cycle. On a
    disconnected graph this yields a spanning forest.
    """
    return _spanning_edges(tree, "kruskal")


def prim_edges(tree: "SpanningTree") -> Iterator[Edge]:
    """Prim's algorithm (networkx); restarts on each component, giving a forest."""
    return _spanning_edges(tree, "prim")


def custom_edges(tree: "SpanningTree") -> Iterator[Edge]:
    """Edges returned by the user-supplied builder; edge ids are resolved."""
    for item in tree.builder(tree):
        yield item if isinstance(item, Edge) else tree.graph.edge(item)


def build_tree_edges(tree: "SpanningTree") -> Iterator[Edge]:
    """Dispatch to the build function of ``tree.strategy``."""
    strategy = tree.strategy
    if strategy is TreeStrategy.KRUSKAL:
        return kruskal_edges(tree)
    if strategy is TreeStrategy.PRIM:
        return prim_edges(tree)
    if strategy is TreeStrategy.CUSTOM:
        return custom_edges(tree)
    raise ValueError(f"Unsupported tree strategy '{strategy}'.")
