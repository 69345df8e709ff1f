from typing import Hashable, Optional
import networkx as nx
import pandas as pd
from .graph import Graph


def from_dense(arr, *, directed=False, weighted=True, sym_op="max", weight="weight",
               graph_id: Optional[Hashable] = None) -> Graph:
    return Graph.from_dense(arr, directed=directed, weighted=weighted, sym_op=sym_op,
                            weight=weight, graph_id=graph_id)


def from_csr(adj, *, directed=False, weighted=True, sym_op="max", weight="weight",
             graph_id: Optional[Hashable] = None) -> Graph:
    return Graph.from_csr(adj, directed=directed, weighted=weighted, sym_op=sym_op,
                          weight=weight, graph_id=graph_id)


def from_networkx(nxG: nx.Graph, *, graph_id: Optional[Hashable] = None) -> Graph:
    return Graph.from_networkx(nxG, graph_id=graph_id)


def from_edge_frame(df: pd.DataFrame, *, source: str = "source", target: str = "target",
                    edge_id: Optional[str] = "id", directed: bool = False,
                    graph_id: Optional[Hashable] = None) -> Graph:
    """Build a graph from an edge table.

    Nodes are created in order of first appearance. Every column other than
    ``source``, ``target`` and ``edge_id`` becomes an edge attribute; missing
    values (NaN) are skipped. Without an ``edge_id`` column, edge ids are the
    tuples ``(source, target)``.
    """
    for col in (source, target):
        if col not in df.columns:
            raise ValueError(f"Edge frame has no column '{col}'.")
    use_ids = edge_id is not None and edge_id in df.columns
    attr_cols = [c for c in df.columns if c not in {source, target, edge_id}]

    G = Graph(graph_id, directed=directed)
    for record in df.to_dict(orient="records"):
        u, v = record[source], record[target]
        for node in (u, v):
            if not G.has_node(node):
                G.add_node(node)
        eid = record[edge_id] if use_ids else (u, v)
        attrs = {c: record[c] for c in attr_cols if not _is_missing(record[c])}
        G.add_edge(eid, u, v, **attrs)
    return G


# helper functions ---------------------------------------------

def _is_missing(value) -> bool:
    return pd.api.types.is_scalar(value) and pd.isna(value)
