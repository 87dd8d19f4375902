"""Lookup tables over a GraphDocument, rebuilt for every mutation call."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List

from .model import Edge, GraphDocument, ModuleNode, PortReference

SOURCE_ROLE = "source"
DESTINATION_ROLE = "destination"


@dataclass(frozen=True)
class EdgeEndpoint:
    """An edge seen from one of its two ports."""
    edge_position: int
    role: str


def build_node_index(document: GraphDocument) -> Dict[str, ModuleNode]:
    """Map each comment to its first module node; later duplicates are ignored."""
    index: Dict[str, ModuleNode] = {}
    for node in document.nodes:
        if node.comment is None:
            continue
        index.setdefault(node.comment, node)
    return index


def build_port_index(document: GraphDocument) -> Dict[str, List[EdgeEndpoint]]:
    """Map every compound port id to the edge endpoints that reference it."""
    index: Dict[str, List[EdgeEndpoint]] = {}
    for position, edge in enumerate(document.edges):
        index.setdefault(edge.source_output_port_id, []).append(EdgeEndpoint(position, SOURCE_ROLE))
        index.setdefault(edge.destination_input_port_id, []).append(EdgeEndpoint(position, DESTINATION_ROLE))
    return index


def edges_into(document: GraphDocument, port: PortReference) -> List[Edge]:
    """Edges whose destination is ``port``, in document order."""
    endpoints = build_port_index(document).get(port.compound_id, [])
    return [
        document.edges[endpoint.edge_position]
        for endpoint in endpoints
        if endpoint.role == DESTINATION_ROLE
    ]
