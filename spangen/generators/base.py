import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Hashable, Iterator, Optional
from ..exceptions import GeneratorStateError
from ..stream import Sink, Source
from ..types import EdgeId, NodeId


logger = logging.getLogger(__name__)


class GeneratorState(Enum):
    NOT_STARTED = "not_started"
    RUNNING = "running"
    EXHAUSTED = "exhausted"
    ENDED = "ended"


class BaseGenerator(Source, ABC):
    """Incremental graph generator.

    A generator builds or evolves a graph one step at a time, under the
    control of the caller::

        gen.add_sink(graph)
        gen.begin()
        while gen.next_element() and graph.n_nodes < 1000:
            pass
        gen.end()

    The generator never touches the graph directly: it emits node, edge and
    attribute events to its sinks, so a :class:`~spangen.graph.Graph`
    attached as sink is built through its normal notification path and its
    own listeners see every change.

    Subclasses implement :meth:`_begin` and :meth:`_next_element` (and
    :meth:`_end` when they need to finalize), using the ``add_node`` /
    ``add_edge`` / ``set_*_attribute`` helpers.

    Notes
    -----
    Calling :meth:`next_element` before :meth:`begin` or after :meth:`end`,
    calling :meth:`begin` twice without :meth:`end`, or :meth:`end` without
    :meth:`begin` raises :class:`~spangen.exceptions.GeneratorStateError`.
    After :meth:`end` the generator may be begun again for a new run.
    """

    def __init__(self, source_id: Optional[Hashable] = None) -> None:
        super().__init__(source_id)
        self._state = GeneratorState.NOT_STARTED
        self.step_count = 0

    @property
    def state(self) -> GeneratorState:
        return self._state

    # ----------------- subclass hooks -----------------
    @abstractmethod
    def _begin(self) -> None:
        """Initialize the generation state and emit the initial elements."""

    @abstractmethod
    def _next_element(self) -> bool:
        """Emit the next elements; return True while more steps remain."""

    def _end(self) -> None:
        """Emit closing elements and release the generation state."""

    # ----------------- protocol -----------------
    def begin(self) -> None:
        """Start a generation run."""
        if self._state in (GeneratorState.RUNNING, GeneratorState.EXHAUSTED):
            raise GeneratorStateError("begin() called twice; call end() before starting a new run.")
        logger.debug("%s: begin.", self.source_id)
        self.step_count = 0
        self._begin()
        self._state = GeneratorState.RUNNING

    def next_element(self) -> bool:
        """Perform one generation step.

        Returns True while there are more elements to generate. Some
        generators never return False; stop calling when the graph is large
        enough. Once False was returned, further calls return False without
        generating anything.
        """
        if self._state is GeneratorState.NOT_STARTED:
            raise GeneratorStateError("next_element() called before begin().")
        if self._state is GeneratorState.ENDED:
            raise GeneratorStateError("next_element() called after end().")
        if self._state is GeneratorState.EXHAUSTED:
            return False

        more = bool(self._next_element())
        self.step_count += 1
        if not more:
            self._state = GeneratorState.EXHAUSTED
        return more

    def end(self) -> None:
        """Finish the run, whether or not :meth:`next_element` returned False."""
        if self._state is GeneratorState.NOT_STARTED:
            raise GeneratorStateError("end() called before begin().")
        if self._state is GeneratorState.ENDED:
            raise GeneratorStateError("end() called twice.")
        self._end()
        self._state = GeneratorState.ENDED
        logger.debug("%s: end after %d step(s).", self.source_id, self.step_count)

    def steps(self, max_steps: Optional[int] = None) -> Iterator[int]:
        """Run one generation lazily.

        Calls :meth:`begin` on the first pull and yields the 1-based index of
        every step that reported more elements. Stops when a step returns
        False or after ``max_steps`` calls, and always calls :meth:`end`,
        also when the iterator is closed early. A negative ``max_steps``
        raises ``ValueError`` right away.
        """
        _check_max_steps(max_steps)
        return self._run(max_steps)

    def _run(self, max_steps: Optional[int]) -> Iterator[int]:
        self.begin()
        try:
            calls = 0
            while max_steps is None or calls < max_steps:
                calls += 1
                if not self.next_element():
                    break
                yield calls
        finally:
            self.end()

    # ----------------- event helpers -----------------
    def add_node(self, node_id: NodeId, **attrs: Any) -> None:
        self._send_node_added(node_id)
        for key, value in attrs.items():
            self._send_node_attribute_changed(node_id, key, None, value)

    def remove_node(self, node_id: NodeId) -> None:
        self._send_node_removed(node_id)

    def add_edge(self, edge_id: EdgeId, source: NodeId, target: NodeId, **attrs: Any) -> None:
        self._send_edge_added(edge_id, source, target)
        for key, value in attrs.items():
            self._send_edge_attribute_changed(edge_id, key, None, value)

    def remove_edge(self, edge_id: EdgeId) -> None:
        self._send_edge_removed(edge_id)

    def set_node_attribute(self, node_id: NodeId, key: str, value: Any,
                           old_value: Any = None) -> None:
        self._send_node_attribute_changed(node_id, key, old_value, value)

    def remove_node_attribute(self, node_id: NodeId, key: str, old_value: Any = None) -> None:
        self._send_node_attribute_removed(node_id, key, old_value)

    def set_edge_attribute(self, edge_id: EdgeId, key: str, value: Any,
                           old_value: Any = None) -> None:
        self._send_edge_attribute_changed(edge_id, key, old_value, value)

    def remove_edge_attribute(self, edge_id: EdgeId, key: str, old_value: Any = None) -> None:
        self._send_edge_attribute_removed(edge_id, key, old_value)


def generate(generator: BaseGenerator, graph: Optional[Sink] = None, *,
             max_steps: Optional[int] = None) -> int:
    """Drive ``generator`` through one complete run.

    ``graph`` (if given) is attached as sink for the duration of the run; a
    graph that was already attached stays attached afterwards. At most ``max_steps`` calls to :meth:`~BaseGenerator.next_element` are
    made; with ``max_steps=None`` the run lasts until the generator reports
    completion, which never happens for unbounded generators.

    Returns the number of steps that reported more elements.
    """
    _check_max_steps(max_steps)
    attached = graph is not None and graph not in generator.sinks
    if attached:
        generator.add_sink(graph)
    try:
        n_steps = 0
        for _ in generator.steps(max_steps):
            n_steps += 1
    finally:
        if attached:
            generator.remove_sink(graph)
    return n_steps


# Basic helpers ---------------------------------

def _check_max_steps(max_steps: Optional[int]) -> None:
    if max_steps is not None and max_steps < 0:
        raise ValueError("max_steps must be >= 0.")
