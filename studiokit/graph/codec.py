"""
Experiment codec - Parses and serializes the Studio experiment document
"""
import json
import re
from decimal import Decimal
from typing import Any, Dict, Iterator, Union

from studiokit.domain.errors import MalformedDocumentError

from .model import (
    EDGES_INTERNAL,
    GRAPH,
    MODULE_NODES,
    Edge,
    GraphDocument,
    ModuleNode,
)

RawDocument = Union[str, bytes, Dict[str, Any]]

_SURROGATE = re.compile("[\ud800-\udfff]")


def parse_experiment(raw: RawDocument) -> GraphDocument:
    """
    Parse a raw experiment document into a GraphDocument.

    Accepts the JSON text returned by the service or an already decoded dict.
    A dict is used as is (not copied); the caller hands over ownership.

    Raises:
        MalformedDocumentError: when the text is not JSON or the Graph,
            ModuleNodes or EdgesInternal sections are missing or mistyped.
    """
    if isinstance(raw, (str, bytes)):
        try:
            root = decode_json(raw)
        except ValueError as exc:
            raise MalformedDocumentError(f"Experiment document is not valid JSON: {exc}") from exc
    else:
        root = raw

    if not isinstance(root, dict):
        raise MalformedDocumentError("Experiment document must be a JSON object")

    graph = root.get(GRAPH)
    if not isinstance(graph, dict):
        raise MalformedDocumentError(f"Experiment document has no '{GRAPH}' object")

    module_nodes = graph.get(MODULE_NODES)
    if not isinstance(module_nodes, list):
        raise MalformedDocumentError(f"'{GRAPH}' has no '{MODULE_NODES}' list")

    edges_internal = graph.get(EDGES_INTERNAL)
    if not isinstance(edges_internal, list):
        raise MalformedDocumentError(f"'{GRAPH}' has no '{EDGES_INTERNAL}' list")

    for position, node in enumerate(module_nodes):
        if not isinstance(node, dict):
            raise MalformedDocumentError(f"{MODULE_NODES}[{position}] is not an object")
    for position, edge in enumerate(edges_internal):
        if not isinstance(edge, dict):
            raise MalformedDocumentError(f"{EDGES_INTERNAL}[{position}] is not an object")

    return GraphDocument(
        root=root,
        nodes=[ModuleNode(node) for node in module_nodes],
        edges=[Edge(edge) for edge in edges_internal],
    )


def decode_json(raw: Union[str, bytes]) -> Any:
    """Decode JSON text, keeping every non-integer number as an exact Decimal.

    The non-standard NaN / Infinity tokens are rejected with ValueError.
    """
    return json.loads(raw, parse_float=Decimal, parse_constant=_reject_constant)


def encode_json(value: Any) -> str:
    """
    Encode a decoded tree in the compact JSON dialect of the service.

    Decimals are written back with their exact digits, non-ASCII text is kept
    as is, and strings holding lone surrogates are written with escapes so the
    result is always valid UTF-8.

    Raises:
        MalformedDocumentError: when the tree holds a non-finite number or a
            value JSON cannot represent.
    """
    try:
        return "".join(_iter_encode(value))
    except (TypeError, ValueError) as exc:
        raise MalformedDocumentError(f"Experiment document cannot be encoded as JSON: {exc}") from exc


def serialize_experiment(document: GraphDocument) -> str:
    """
    Serialize a GraphDocument back to the compact JSON dialect of the service.

    The whole tree is re-encoded structurally, so string values are escaped
    exactly once and untouched fields come back as they were decoded.
    """
    return encode_json(document.root)


def _reject_constant(token: str) -> Any:
    raise ValueError(f"{token} is not a JSON number")


def _encode_string(text: str) -> str:
    return json.dumps(text, ensure_ascii=_SURROGATE.search(text) is not None)


def _iter_encode(value: Any) -> Iterator[str]:
    if isinstance(value, dict):
        yield "{"
        for position, (key, item) in enumerate(value.items()):
            if not isinstance(key, str):
                raise TypeError(f"object key {key!r} is not a string")
            if position:
                yield ","
            yield _encode_string(key)
            yield ":"
            yield from _iter_encode(item)
        yield "}"
    elif isinstance(value, (list, tuple)):
        yield "["
        for position, item in enumerate(value):
            if position:
                yield ","
            yield from _iter_encode(item)
        yield "]"
    elif isinstance(value, str):
        yield _encode_string(value)
    elif isinstance(value, Decimal):
        if not value.is_finite():
            raise ValueError(f"{value} is not a JSON number")
        yield str(value)
    else:
        # None, bool, int and float; floats must be finite
        yield json.dumps(value, allow_nan=False)
