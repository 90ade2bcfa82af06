"""Enumerable views over a parsed OpenAPI document.

The index answers the questions the rule engine asks of a document: which
servers, paths, operations and component schemas it declares, how many tags
and security schemes it has, and which ``$ref`` values do not resolve. It never
dereferences or rewrites anything.
"""

import logging
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import unquote

logger = logging.getLogger(__name__)

HTTP_METHODS = ("get", "put", "post", "delete", "options", "head", "patch", "trace")


@dataclass(frozen=True)
class Server:
    """A declared server entry."""
    url: str
    description: str | None = None


@dataclass(frozen=True)
class Operation:
    """A single HTTP operation under a path item."""
    path: str
    method: str
    node: dict[str, Any]

    @property
    def label(self) -> str:
        return f"{self.method.upper()} {self.path}"


@dataclass(frozen=True)
class BrokenReference:
    """A ``$ref`` that could not be resolved inside the document."""
    ref: str
    location: str
    message: str

    def __str__(self) -> str:
        return self.message


def _mapping(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _escape_pointer_token(token: str) -> str:
    return token.replace("~", "~0").replace("/", "~1")


def _decode_pointer_token(token: str) -> str:
    return unquote(token).replace("~1", "/").replace("~0", "~")


def resolve_pointer(root: Any, ref: str) -> tuple[bool, Any]:
    """Resolve a local ``#/...`` JSON pointer against root.

    Returns:
        (found, target) tuple; target is None when not found
    """
    fragment = ref[1:] if ref.startswith("#") else ref
    if fragment in ("", "/"):
        return True, root
    if not fragment.startswith("/"):
        return False, None

    current = root
    for raw_token in fragment[1:].split("/"):
        token = _decode_pointer_token(raw_token)
        if isinstance(current, dict) and token in current:
            current = current[token]
        elif isinstance(current, list) and token.isdigit() and int(token) < len(current):
            current = current[int(token)]
        else:
            return False, None
    return True, current


@dataclass
class DocumentIndex:
    """Indexed views over a single OpenAPI 3.x or Swagger 2.0 document."""
    root: dict[str, Any]
    servers: list[Server] = field(default_factory=list)
    paths: dict[str, dict[str, Any]] = field(default_factory=dict)
    operations: list[Operation] = field(default_factory=list)
    component_schemas: dict[str, dict[str, Any]] = field(default_factory=dict)
    security_schemes: dict[str, Any] = field(default_factory=dict)
    tag_count: int = 0
    reference_errors: list[BrokenReference] = field(default_factory=list)

    @classmethod
    def from_document(cls, root: dict[str, Any]) -> "DocumentIndex":
        """Build the index for a parsed document root."""
        index = cls(root=root)
        index.servers = list(_collect_servers(root))
        index.paths = {
            path: item for path, item in _mapping(root.get("paths")).items()
            if isinstance(item, dict)
        }
        index.operations = [
            Operation(path, method, item[method])
            for path, item in index.paths.items()
            for method in HTTP_METHODS
            if isinstance(item.get(method), dict)
        ]
        index.component_schemas = dict(_collect_component_schemas(root))
        index.security_schemes = _collect_security_schemes(root)

        tags = root.get("tags")
        index.tag_count = len(tags) if isinstance(tags, list) else 0

        index.reference_errors = list(_find_broken_references(root))

        logger.debug(
            f"Indexed document: {len(index.paths)} paths, {len(index.operations)} operations, "
            f"{len(index.component_schemas)} schemas, {len(index.reference_errors)} broken references"
        )
        return index

    @property
    def is_swagger(self) -> bool:
        return "swagger" in self.root

    @property
    def info(self) -> dict[str, Any]:
        return _mapping(self.root.get("info"))

    @property
    def has_security_schemes(self) -> bool:
        return bool(self.security_schemes)


def _collect_servers(root: dict[str, Any]) -> Iterator[Server]:
    servers = root.get("servers")
    if isinstance(servers, list):
        for server in servers:
            if isinstance(server, dict) and "url" in server:
                yield Server(str(server["url"]), server.get("description"))
        return

    # Swagger 2.0: servers are implied by host, basePath and schemes
    host = root.get("host")
    if not isinstance(host, str) or not host:
        return
    base_path = root.get("basePath") if isinstance(root.get("basePath"), str) else ""
    schemes = root.get("schemes")
    if not isinstance(schemes, list) or not schemes:
        schemes = ["http"]
    for scheme in schemes:
        yield Server(f"{scheme}://{host}{base_path}")


def _collect_component_schemas(root: dict[str, Any]) -> Iterator[tuple[str, dict[str, Any]]]:
    schemas = _mapping(_mapping(root.get("components")).get("schemas"))
    prefix = "#/components/schemas/"
    if not schemas and "swagger" in root:
        schemas = _mapping(root.get("definitions"))
        prefix = "#/definitions/"

    for name, schema in schemas.items():
        if isinstance(schema, dict):
            yield f"{prefix}{_escape_pointer_token(str(name))}", schema


def _collect_security_schemes(root: dict[str, Any]) -> dict[str, Any]:
    schemes = _mapping(_mapping(root.get("components")).get("securitySchemes"))
    if not schemes:
        schemes = _mapping(root.get("securityDefinitions"))
    return schemes


def _find_broken_references(root: dict[str, Any]) -> Iterator[BrokenReference]:
    """Yield every unresolvable ``$ref`` in document order."""
    stack: list[tuple[Any, str]] = [(root, "#")]
    while stack:
        node, location = stack.pop()
        if isinstance(node, dict):
            ref = node.get("$ref")
            if isinstance(ref, str):
                broken = _check_reference(root, ref, location)
                if broken is not None:
                    yield broken
            children = [
                (value, f"{location}/{_escape_pointer_token(str(key))}")
                for key, value in node.items()
            ]
        elif isinstance(node, list):
            children = [(value, f"{location}/{i}") for i, value in enumerate(node)]
        else:
            continue
        # Reversed so the stack pops children in document order
        stack.extend(reversed(children))


def _check_reference(root: dict[str, Any], ref: str, location: str) -> BrokenReference | None:
    if not ref.startswith("#"):
        return BrokenReference(
            ref, location,
            f"external reference '{ref}' at {location} cannot be resolved: "
            "only references inside the document are indexed",
        )

    found, _ = resolve_pointer(root, ref)
    if found:
        return None
    return BrokenReference(
        ref, location,
        f"component '{ref}' referenced at {location} does not exist in the document",
    )
