from .base import Algorithm, SpanningTree, SpanningTreeConfig
from .strategies import TreeBuilder, TreeStrategy, kruskal_edges, prim_edges


__all__ = [
    "Algorithm",
    "SpanningTree",
    "SpanningTreeConfig",
    "TreeBuilder",
    "TreeStrategy",
    "kruskal_edges",
    "prim_edges",
]
