from typing import Any, Hashable, Optional
from .types import EdgeId, NodeId


class Sink:
    """Receiver of structural graph events.

    All callbacks are no-ops; override the ones you care about. ``source_id``
    names the object that emitted the event. ``*_attribute_changed`` carries
    the old and the new value (``old_value`` is None for a new attribute);
    ``*_attribute_removed`` reports a deleted attribute, so None is an
    ordinary attribute value.
    """

    def node_added(self, source_id: Hashable, node_id: NodeId) -> None:
        pass

    def node_removed(self, source_id: Hashable, node_id: NodeId) -> None:
        pass

    def edge_added(self, source_id: Hashable, edge_id: EdgeId,
                   source: NodeId, target: NodeId) -> None:
        pass

    def edge_removed(self, source_id: Hashable, edge_id: EdgeId) -> None:
        pass

    def node_attribute_changed(self, source_id: Hashable, node_id: NodeId, key: str,
                               old_value: Any, new_value: Any) -> None:
        pass

    def node_attribute_removed(self, source_id: Hashable, node_id: NodeId, key: str,
                               old_value: Any) -> None:
        pass

    def edge_attribute_changed(self, source_id: Hashable, edge_id: EdgeId, key: str,
                               old_value: Any, new_value: Any) -> None:
        pass

    def edge_attribute_removed(self, source_id: Hashable, edge_id: EdgeId, key: str,
                               old_value: Any) -> None:
        pass

    def graph_cleared(self, source_id: Hashable) -> None:
        pass


class Source:
    """Mixin for objects that emit graph events to attached sinks.

    Events are forwarded synchronously, in sink attachment order.
    """

    def __init__(self, source_id: Optional[Hashable] = None) -> None:
        self.source_id = source_id if source_id is not None else f"{type(self).__name__}@{id(self):x}"
        self._sinks: list[Sink] = []

    @property
    def sinks(self) -> tuple[Sink, ...]:
        return tuple(self._sinks)

    def add_sink(self, sink: Sink) -> None:
        if sink is self:
            raise ValueError("A source cannot be its own sink.")
        if sink not in self._sinks:
            self._sinks.append(sink)

    def remove_sink(self, sink: Sink) -> None:
        if sink in self._sinks:
            self._sinks.remove(sink)

    def clear_sinks(self) -> None:
        self._sinks.clear()

    # Event forwarding ---------------------------------

    def _send_node_added(self, node_id: NodeId) -> None:
        for sink in self.sinks:
            sink.node_added(self.source_id, node_id)

    def _send_node_removed(self, node_id: NodeId) -> None:
        for sink in self.sinks:
            sink.node_removed(self.source_id, node_id)

    def _send_edge_added(self, edge_id: EdgeId, source: NodeId, target: NodeId) -> None:
        for sink in self.sinks:
            sink.edge_added(self.source_id, edge_id, source, target)

    def _send_edge_removed(self, edge_id: EdgeId) -> None:
        for sink in self.sinks:
            sink.edge_removed(self.source_id, edge_id)

    def _send_node_attribute_changed(self, node_id: NodeId, key: str,
                                     old_value: Any, new_value: Any) -> None:
        for sink in self.sinks:
            sink.node_attribute_changed(self.source_id, node_id, key, old_value, new_value)

    def _send_node_attribute_removed(self, node_id: NodeId, key: str, old_value: Any) -> None:
        for sink in self.sinks:
            sink.node_attribute_removed(self.source_id, node_id, key, old_value)

    def _send_edge_attribute_changed(self, edge_id: EdgeId, key: str,
                                     old_value: Any, new_value: Any) -> None:
        for sink in self.sinks:
            sink.edge_attribute_changed(self.source_id, edge_id, key, old_value, new_value)

    def _send_edge_attribute_removed(self, edge_id: EdgeId, key: str, old_value: Any) -> None:
        for sink in self.sinks:
            sink.edge_attribute_removed(self.source_id, edge_id, key, old_value)

    def _send_graph_cleared(self) -> None:
        for sink in self.sinks:
            sink.graph_cleared(self.source_id)
