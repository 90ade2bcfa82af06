"""OpenAPI document loader.

Reads a YAML or JSON contract from disk into plain Python data. Byte-order
marks are stripped so documents exported by Windows tooling parse cleanly.
"""

import codecs
import logging
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

_BOMS = (
    (codecs.BOM_UTF8, "utf-8"),
    (codecs.BOM_UTF16_LE, "utf-16-le"),
    (codecs.BOM_UTF16_BE, "utf-16-be"),
)


class DocumentError(ValueError):
    """Raised when a document cannot be parsed into a mapping."""


def decode_document(data: bytes) -> str:
    """Decode raw document bytes to text, honouring and dropping any BOM."""
    for bom, encoding in _BOMS:
        if data.startswith(bom):
            return data[len(bom):].decode(encoding)
    return data.decode("utf-8")


def load_document(document_path: str | Path) -> dict[str, Any]:
    """Load an OpenAPI document.

    Args:
        document_path: Path to a YAML or JSON document

    Returns:
        The parsed root mapping

    Raises:
        FileNotFoundError: If the document does not exist
        DocumentError: If the document is not valid YAML/JSON or its root is not a mapping
    """
    document_path = Path(document_path)
    if not document_path.exists():
        raise FileNotFoundError(f"Document not found: {document_path}")

    try:
        text = decode_document(document_path.read_bytes())
    except UnicodeDecodeError as e:
        raise DocumentError(f"Document {document_path} is not valid UTF-8/UTF-16: {e}") from e

    try:
        root = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise DocumentError(f"Invalid YAML in document {document_path}: {e}") from e

    if not isinstance(root, dict):
        raise DocumentError(f"Document {document_path} must contain a mapping at the root")

    logger.debug(f"Loaded document {document_path} with {len(root)} top-level keys")
    return root
