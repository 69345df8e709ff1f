import networkx as nx
import numpy as np
import pandas as pd
import pytest
import scipy.sparse as sp
from spangen import ElementNotFoundError, Graph, IdAlreadyInUseError


@pytest.fixture
def path_graph():
    """a - b - c with weights 1 and 2."""
    G = Graph("path")
    for node in "abc":
        G.add_node(node)
    G.add_edge("ab", "a", "b", weight=1.0)
    G.add_edge("bc", "b", "c", weight=2.0)
    return G


# ----------------- construction -----------------
def test_empty_graph():
    G = Graph()
    assert G.n_nodes == 0 and G.n_edges == 0
    assert not G.directed
    assert list(G.edges()) == []
    assert not G.is_connected()
    assert G.adjacency().shape == (0, 0)


def test_add_nodes_and_edges(path_graph):
    assert path_graph.n_nodes == 3
    assert path_graph.n_edges == 2
    assert list(path_graph.nodes()) == ["a", "b", "c"]
    assert [e.id for e in path_graph.edges()] == ["ab", "bc"]
    assert "a" in path_graph
    assert path_graph.has_edge("ab") and not path_graph.has_edge("ac")


def test_duplicate_ids_are_rejected(path_graph):
    with pytest.raises(IdAlreadyInUseError, match="Node 'a' already exists"):
        path_graph.add_node("a")
    with pytest.raises(IdAlreadyInUseError, match="Edge 'ab' already exists"):
        path_graph.add_edge("ab", "a", "c")
    # same node pair, other direction, in an undirected graph
    with pytest.raises(IdAlreadyInUseError, match="already exists"):
        path_graph.add_edge("ba", "b", "a")


def test_directed_graph_allows_reciprocal_edges():
    G = Graph(directed=True)
    G.add_node(0)
    G.add_node(1)
    G.add_edge("fw", 0, 1)
    G.add_edge("bw", 1, 0)
    assert G.n_edges == 2
    assert G.is_connected()


def test_unknown_elements_raise(path_graph):
    with pytest.raises(ElementNotFoundError):
        path_graph.add_edge("ax", "a", "x")
    with pytest.raises(ElementNotFoundError):
        path_graph.edge("nope")
    with pytest.raises(KeyError):
        path_graph.remove_edge("nope")
    with pytest.raises(KeyError):
        path_graph.get_node_attribute("nope", "x")


# ----------------- edges -----------------
def test_edges_iteration_is_restartable_and_lazy(path_graph):
    it = path_graph.edges()
    first = next(it)
    assert first.id == "ab"
    # a fresh call restarts from the beginning
    assert [e.id for e in path_graph.edges()] == ["ab", "bc"]
    # attribute writes while iterating are fine
    for edge in path_graph.edges():
        edge.set("seen", True)
    assert all(e["seen"] for e in path_graph.edges())


def test_edge_view(path_graph):
    edge = path_graph.edge("ab")
    assert edge == path_graph.edge("ab")
    assert edge != path_graph.edge("bc")
    assert len({edge, path_graph.edge("ab")}) == 1
    assert edge.source == "a" and edge.target == "b"
    assert edge.opposite("a") == "b"
    assert edge.opposite("b") == "a"
    with pytest.raises(ElementNotFoundError):
        edge.opposite("c")
    assert edge["weight"] == 1.0
    assert edge.get("missing", 7) == 7
    assert "weight" in edge
    assert dict(edge.attributes) == {"weight": 1.0}
    with pytest.raises(TypeError):
        edge.attributes["weight"] = 3.0


def test_edge_attributes_set_get_remove(path_graph):
    path_graph.set_edge_attribute("ab", "color", "red")
    assert path_graph.get_edge_attribute("ab", "color") == "red"
    path_graph.remove_edge_attribute("ab", "color")
    assert path_graph.get_edge_attribute("ab", "color") is None
    # removing an absent attribute is a no-op
    path_graph.remove_edge_attribute("ab", "color")


def test_node_attributes(path_graph):
    path_graph.set_node_attribute("a", "label", "start")
    assert path_graph.get_node_attribute("a", "label") == "start"
    path_graph.remove_node_attribute("a", "label")
    assert path_graph.get_node_attribute("a", "label", "none") == "none"


# ----------------- notification -----------------
def test_mutations_are_notified(path_graph, recorder):
    path_graph.add_sink(recorder)

    path_graph.set_edge_attribute("ab", "weight", 3.0)
    path_graph.set_edge_attribute("ab", "weight", 3.0)
    path_graph.remove_edge_attribute("bc", "weight")
    path_graph.add_node("d", label="new")
    path_graph.add_edge("cd", "c", "d")

    assert recorder.events == [
        ("edge_attribute_changed", "ab", "weight", 1.0, 3.0),
        ("edge_attribute_changed", "ab", "weight", 3.0, 3.0),
        ("edge_attribute_removed", "bc", "weight", 2.0),
        ("node_added", "d"),
        ("node_attribute_changed", "d", "label", None, "new"),
        ("edge_added", "cd", "c", "d"),
    ]
    assert recorder.sources == {"path"}


def test_remove_node_removes_incident_edges_first(path_graph, recorder):
    path_graph.add_sink(recorder)
    path_graph.remove_node("b")

    assert recorder.events == [
        ("edge_removed", "ab"),
        ("edge_removed", "bc"),
        ("node_removed", "b"),
    ]
    assert path_graph.n_edges == 0
    assert list(path_graph.nodes()) == ["a", "c"]


def test_removed_sink_gets_no_events(path_graph, recorder):
    path_graph.add_sink(recorder)
    path_graph.add_sink(recorder)  # attached once only
    assert path_graph.sinks == (recorder,)
    path_graph.remove_sink(recorder)
    path_graph.remove_sink(recorder)
    path_graph.add_node("z")
    assert recorder.events == []


def test_graph_mirrors_another_graph():
    mirror = Graph("mirror")
    source = Graph("source")
    source.add_sink(mirror)

    source.add_node(1)
    source.add_node(2, size=3)
    source.add_edge("e", 1, 2, weight=0.5)
    source.set_edge_attribute("e", "weight", 0.25)
    source.remove_edge_attribute("e", "weight")
    source.set_edge_attribute("e", "flag", True)

    assert list(mirror.nodes()) == [1, 2]
    assert mirror.get_node_attribute(2, "size") == 3
    assert dict(mirror.edge("e").attributes) == {"flag": True}

    source.remove_node(2)
    assert mirror.n_nodes == 1 and mirror.n_edges == 0
    source.clear()
    assert mirror.n_nodes == 0


def test_mirror_keeps_none_values_and_applies_removals():
    mirror = Graph("mirror")
    source = Graph("source")
    source.add_sink(mirror)

    source.add_node("a", label=None)
    source.add_node("b")
    source.add_edge("ab", "a", "b", flag=None, weight=2.0)
    source.remove_edge_attribute("ab", "weight")
    source.remove_node_attribute("a", "label")

    assert dict(mirror.edge("ab").attributes) == {"flag": None}
    assert "flag" in mirror.edge("ab")
    assert mirror.get_node_attribute("a", "label", "absent") == "absent"


def test_clear(path_graph, recorder):
    path_graph.add_sink(recorder)
    path_graph.clear()
    assert path_graph.n_nodes == 0 and path_graph.n_edges == 0
    assert recorder.events == [("graph_cleared",)]


# ----------------- export -----------------
def test_adjacency_matches_weights(path_graph):
    A = path_graph.adjacency()
    assert isinstance(A, sp.csr_matrix)
    expected = np.array([
        [0.0, 1.0, 0.0],
        [1.0, 0.0, 2.0],
        [0.0, 2.0, 0.0],
    ])
    np.testing.assert_array_almost_equal(A.toarray(), expected)
    np.testing.assert_array_almost_equal(
        path_graph.adjacency(weight=None).toarray(), (expected > 0).astype(float))


def test_to_networkx_is_a_copy(path_graph):
    nxG = path_graph.to_networkx()
    assert isinstance(nxG, nx.Graph)
    assert nxG["a"]["b"]["weight"] == 1.0
    nxG["a"]["b"]["weight"] = 10.0
    assert path_graph.edge("ab")["weight"] == 1.0


def test_edges_frame(path_graph):
    path_graph.set_edge_attribute("bc", "color", "red")
    df = path_graph.edges_frame()
    expected = pd.DataFrame({
        "id": ["ab", "bc"],
        "source": ["a", "b"],
        "target": ["b", "c"],
        "weight": [1.0, 2.0],
        "color": [np.nan, "red"],
    })
    pd.testing.assert_frame_equal(df, expected)


def test_edges_frame_empty():
    df = Graph().edges_frame()
    assert list(df.columns) == ["id", "source", "target"]
    assert len(df) == 0


# ----------------- alternative constructors -----------------
def test_from_dense_symmetrizes_and_drops_self_loops():
    M = np.array([
        [1.0, 5.0, 0.0],
        [3.0, 0.0, 2.0],
        [0.0, 0.0, 7.0],
    ])
    G = Graph.from_dense(M, sym_op="max")
    assert [e.id for e in G.edges()] == ["0-1", "1-2"]
    assert G.edge("0-1")["weight"] == pytest.approx(5.0)
    assert G.edge("1-2")["weight"] == pytest.approx(2.0)


def test_from_dense_directed_keeps_orientation():
    M = np.array([
        [0.0, 5.0],
        [3.0, 0.0],
    ])
    G = Graph.from_dense(M, directed=True, weighted=False)
    assert G.directed
    assert [(e.id, e.source, e.target) for e in G.edges()] == [("0-1", 0, 1), ("1-0", 1, 0)]
    assert "weight" not in G.edge("0-1")


def test_from_dense_rejects_non_square():
    with pytest.raises(TypeError, match="Matrix must be square"):
        Graph.from_dense(np.zeros((2, 3)))


def test_from_networkx_roundtrip_keeps_ids_and_attributes():
    nxG = nx.Graph()
    nxG.add_node("x", kind="source")
    nxG.add_edge("x", "y", id="edge-1", weight=4.0)
    nxG.add_edge("y", "z", weight=1.0)

    G = Graph.from_networkx(nxG)

    assert G.get_node_attribute("x", "kind") == "source"
    assert G.edge("edge-1")["weight"] == 4.0
    assert G.has_edge(("y", "z"))
    assert "id" not in G.edge("edge-1")


def test_from_networkx_default_ids_do_not_collide():
    nxG = nx.Graph()
    nxG.add_edge("1-2", "3")
    nxG.add_edge("1", "2-3")

    G = Graph.from_networkx(nxG)

    assert G.n_edges == 2
    assert G.has_edge(("1-2", "3")) and G.has_edge(("1", "2-3"))


def test_from_networkx_rejects_multigraph():
    with pytest.raises(TypeError, match="Multigraphs"):
        Graph.from_networkx(nx.MultiGraph())
