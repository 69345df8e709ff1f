import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Iterator, Optional, Union
from ..graph import Edge, Graph
from ..types import EdgeId, MatrixMode
from ..utils import _edge_weight
from .strategies import TreeBuilder, TreeStrategy, build_tree_edges


logger = logging.getLogger(__name__)


class Algorithm(ABC):
    """An algorithm working on a graph it references but does not own."""

    @abstractmethod
    def get_graph(self) -> Optional[Graph]: ...

    @abstractmethod
    def set_graph(self, graph: Optional[Graph]) -> None: ...

    @abstractmethod
    def compute(self) -> None: ...

    def init(self, graph: Optional[Graph]) -> None:
        """Attach ``graph``; the next :meth:`compute` works on it."""
        self.set_graph(graph)


@dataclass(slots=True)
class SpanningTreeConfig:
    """Configuration of a :class:`SpanningTree`.

    Parameters
    ----------
    flag_attribute
        Edge attribute recording tree membership.
    flag_on
        Value written to ``flag_attribute`` on tree edges.
    flag_off
        Value written to ``flag_attribute`` on all other edges. Must differ
        from ``flag_on``.
    strategy
        One of {"kruskal", "prim", "custom"}.
    weight_attribute
        Edge attribute holding the weight. Edges without it weigh 1.0.
    mode
        "distance" builds a minimum spanning tree, "similarity" a maximum one.
    """

    flag_attribute: str = "SpanningTree.flag"
    flag_on: Any = True
    flag_off: Any = False
    strategy: Union[TreeStrategy, str] = TreeStrategy.KRUSKAL
    weight_attribute: str = "weight"
    mode: MatrixMode = "distance"


class SpanningTree(Algorithm):
    """Marks the edges of a spanning tree (or forest) of a graph.

    Tree membership is written to an edge attribute: ``flag_on`` for tree
    edges and ``flag_off`` for the others. Pointing ``flag_attribute`` to e.g.
    a color attribute and ``flag_on`` to a color paints the tree directly.

    :meth:`compute` first resets every edge to ``flag_off`` and then marks the
    edges chosen by the configured :class:`TreeStrategy`, so repeated calls
    never leave stale markings. Without a graph it does nothing.

    Parameters
    ----------
    graph
        Graph to work on. May be None and set later with :meth:`set_graph`.
    flag_attribute, flag_on, flag_off
        See :class:`SpanningTreeConfig`.
    strategy
        Tree-building strategy. With "custom", ``builder`` is required.
    weight_attribute, mode
        See :class:`SpanningTreeConfig`.
    builder
        Callable ``builder(tree) -> iterable of edges or edge ids`` used by the
        "custom" strategy.
    config
        Complete configuration; when given, the keyword values above
        (except ``graph`` and ``builder``) are ignored.

    Notes
    -----
    ``strategy``, ``mode`` and ``builder`` are validated on assignment as well,
    so :meth:`compute` never meets an invalid combination. To switch to the
    "custom" strategy, set ``builder`` first.

    Once constructed, an on/off value equal to the other one is rejected
    silently by the property setters (a warning is logged). Use
    :meth:`set_flag_on` / :meth:`set_flag_off` to learn whether a value was
    accepted.
    """

    supported_modes = ["distance", "similarity"]

    def __init__(
        self,
        graph: Optional[Graph] = None,
        flag_attribute: str = "SpanningTree.flag",
        flag_on: Any = True,
        flag_off: Any = False,
        *,
        strategy: Union[TreeStrategy, str] = TreeStrategy.KRUSKAL,
        weight_attribute: str = "weight",
        mode: MatrixMode = "distance",
        builder: Optional[TreeBuilder] = None,
        config: Optional[SpanningTreeConfig] = None,
    ) -> None:
        config = config or SpanningTreeConfig(
            flag_attribute=flag_attribute,
            flag_on=flag_on,
            flag_off=flag_off,
            strategy=strategy,
            weight_attribute=weight_attribute,
            mode=mode,
        )
        if _equal(config.flag_on, config.flag_off):
            raise ValueError("flag_on and flag_off must be different values.")

        self._graph = graph
        self._flag_attribute = config.flag_attribute
        self._flag_on = config.flag_on
        self._flag_off = config.flag_off
        self.weight_attribute = config.weight_attribute
        self.mode = config.mode
        self._strategy: Optional[TreeStrategy] = None
        self.builder = builder
        self.strategy = config.strategy
        if self._strategy is not TreeStrategy.CUSTOM and builder is not None:
            raise ValueError("A builder can only be used with the 'custom' strategy.")

    # ----------------- graph -----------------
    @property
    def graph(self) -> Optional[Graph]:
        return self._graph

    @graph.setter
    def graph(self, graph: Optional[Graph]) -> None:
        self._graph = graph

    def get_graph(self) -> Optional[Graph]:
        return self._graph

    def set_graph(self, graph: Optional[Graph]) -> None:
        self._graph = graph

    # ----------------- build configuration -----------------
    @property
    def strategy(self) -> TreeStrategy:
        return self._strategy

    @strategy.setter
    def strategy(self, value: Union[TreeStrategy, str]) -> None:
        try:
            resolved = TreeStrategy(value)
        except ValueError:
            raise ValueError(
                f"Unknown strategy '{value}'; expected one of "
                f"{[s.value for s in TreeStrategy]}.") from None
        if resolved is TreeStrategy.CUSTOM and self._builder is None:
            raise ValueError("The 'custom' strategy requires a builder.")
        self._strategy = resolved

    @property
    def mode(self) -> MatrixMode:
        return self._mode

    @mode.setter
    def mode(self, value: MatrixMode) -> None:
        if value not in self.supported_modes:
            raise ValueError("mode must be 'distance' or 'similarity'.")
        self._mode = value

    @property
    def builder(self) -> Optional[TreeBuilder]:
        """Callable used by the "custom" strategy. May be set before switching to it."""
        return self._builder

    @builder.setter
    def builder(self, builder: Optional[TreeBuilder]) -> None:
        if builder is not None and not callable(builder):
            raise TypeError("builder must be callable.")
        if builder is None and self._strategy is TreeStrategy.CUSTOM:
            raise ValueError("The 'custom' strategy requires a builder.")
        self._builder = builder

    # ----------------- flags -----------------
    @property
    def flag_attribute(self) -> str:
        return self._flag_attribute

    @flag_attribute.setter
    def flag_attribute(self, name: str) -> None:
        self._flag_attribute = name

    def get_flag_attribute(self) -> str:
        return self._flag_attribute

    def set_flag_attribute(self, name: str) -> None:
        self._flag_attribute = name

    @property
    def flag_on(self) -> Any:
        return self._flag_on

    @flag_on.setter
    def flag_on(self, value: Any) -> None:
        self.set_flag_on(value)

    @property
    def flag_off(self) -> Any:
        return self._flag_off

    @flag_off.setter
    def flag_off(self, value: Any) -> None:
        self.set_flag_off(value)

    def get_flag_on(self) -> Any:
        return self._flag_on

    def get_flag_off(self) -> Any:
        return self._flag_off

    def set_flag_on(self, value: Any) -> bool:
        """Set the tree-edge value. Returns False (and keeps the old value) if it equals ``flag_off``."""
        if _equal(value, self._flag_off):
            logger.warning("Ignoring flag_on=%r: equal to flag_off.", value)
            return False
        self._flag_on = value
        return True

    def set_flag_off(self, value: Any) -> bool:
        """Set the non-tree-edge value. Returns False (and keeps the old value) if it equals ``flag_on``."""
        if _equal(value, self._flag_on):
            logger.warning("Ignoring flag_off=%r: equal to flag_on.", value)
            return False
        self._flag_off = value
        return True

    # ----------------- primitives -----------------
    def edge_on(self, edge: Union[Edge, EdgeId]) -> None:
        """Put an edge in the tree."""
        self._resolve(edge).set(self._flag_attribute, self._flag_on)

    def edge_off(self, edge: Union[Edge, EdgeId]) -> None:
        """Take an edge out of the tree."""
        self._resolve(edge).set(self._flag_attribute, self._flag_off)

    def reset_flags(self) -> None:
        """Write ``flag_off`` on every edge of the graph."""
        if self._graph is None:
            return
        for edge in self._graph.edges():
            self.edge_off(edge)

    def clear(self) -> None:
        """Remove the flag attribute from every edge."""
        if self._graph is None:
            return
        for edge in self._graph.edges():
            self._graph.remove_edge_attribute(edge.id, self._flag_attribute)

    # ----------------- Algorithm interface -----------------
    def compute(self) -> None:
        if self._graph is None:
            logger.debug("No graph set, nothing to compute.")
            return

        logger.debug("Computing %s spanning tree (%s) on %r.",
                     self.strategy.value, self.mode, self._graph)
        self.reset_flags()
        n_tree = 0
        for edge in build_tree_edges(self):
            self.edge_on(edge)
            n_tree += 1
        logger.debug("Spanning tree done: %d of %d edges flagged on.", n_tree, self._graph.n_edges)

    # ----------------- results -----------------
    def tree_edges(self) -> Iterator[Edge]:
        """Iterate edges currently flagged as tree edges."""
        if self._graph is None:
            return
        for edge in self._graph.edges():
            if self._flag_attribute in edge and _equal(edge[self._flag_attribute], self._flag_on):
                yield edge

    def tree_weight(self) -> float:
        """Total weight of the edges currently flagged as tree edges."""
        return float(sum(_edge_weight(e, self.weight_attribute) for e in self.tree_edges()))

    # ----------------- helpers -----------------
    def _resolve(self, edge: Union[Edge, EdgeId]) -> Edge:
        if isinstance(edge, Edge):
            return edge
        if self._graph is None:
            raise ValueError("Cannot resolve an edge id without a graph.")
        return self._graph.edge(edge)

    def __repr__(self) -> str:
        return (f"SpanningTree(strategy={self.strategy.value!r}, mode={self.mode!r}, "
                f"flag_attribute={self._flag_attribute!r}, "
                f"flag_on={self._flag_on!r}, flag_off={self._flag_off!r})")


def _equal(a: Any, b: Any) -> bool:
    try:
        return bool(a == b)
    except (TypeError, ValueError):
        # e.g. arrays, whose truth value is ambiguous
        return a is b
