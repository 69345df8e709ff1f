from .algorithms import SpanningTree, SpanningTreeConfig, TreeStrategy
from .exceptions import (
    ElementNotFoundError,
    GeneratorStateError,
    IdAlreadyInUseError,
    SpangenError,
)
from .generators import BaseGenerator, GeneratorState, generate
from .graph import Edge, Graph
from .importers import from_csr, from_dense, from_edge_frame, from_networkx
from .stream import Sink, Source
from .types import CSRMatrix, MatrixMode


__all__ = [
    "BaseGenerator",
    "CSRMatrix",
    "Edge",
    "ElementNotFoundError",
    "GeneratorState",
    "GeneratorStateError",
    "Graph",
    "IdAlreadyInUseError",
    "MatrixMode",
    "Sink",
    "Source",
    "SpangenError",
    "SpanningTree",
    "SpanningTreeConfig",
    "TreeStrategy",
    "from_csr",
    "from_dense",
    "from_edge_frame",
    "from_networkx",
    "generate",
]
