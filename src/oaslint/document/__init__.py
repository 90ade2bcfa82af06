"""Document loading and indexing for OpenAPI contract documents."""

from .index import BrokenReference, DocumentIndex, Operation, Server
from .loader import DocumentError, load_document

__all__ = [
    "BrokenReference",
    "DocumentError",
    "DocumentIndex",
    "Operation",
    "Server",
    "load_document",
]
