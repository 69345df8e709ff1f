class SpangenError(Exception):
    """Base class for errors raised by spangen."""


class GeneratorStateError(SpangenError, RuntimeError):
    """A generator method was called out of the begin/next_element/end order."""


class ElementNotFoundError(SpangenError, KeyError):
    """A node or edge id is not part of the graph."""


class IdAlreadyInUseError(SpangenError, ValueError):
    """A node or edge id (or an edge between the same nodes) already exists."""
