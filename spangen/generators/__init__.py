from .base import BaseGenerator, GeneratorState, generate


__all__ = [
    "BaseGenerator",
    "GeneratorState",
    "generate",
]
