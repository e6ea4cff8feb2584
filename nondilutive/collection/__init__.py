"""
Collection core: mint gate, generation registry, reveal tracker, focus state
machine and metadata resolver, composed by `NonDilutiveCollection`.
"""

from .contract import NonDilutiveCollection
from .errors import CollectionError, ErrorCode, ErrorKind
from .generations import GenerationDefinition, GenerationView

__all__ = [
    "CollectionError",
    "ErrorCode",
    "ErrorKind",
    "GenerationDefinition",
    "GenerationView",
    "NonDilutiveCollection",
]
