"""
In-memory mutations of an experiment graph.

Nodes are addressed by their ``Comment`` label. Comments are not unique:
``set_parameter`` touches every node carrying the label, while
``rewire_edge`` uses the first one. Each operation reports how much it
matched so callers can spot ambiguous or missing labels.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass

from studiokit.domain.errors import (
    DuplicateNodeIdError,
    NodeNotFoundError,
    NoMatchError,
    PortNotFoundError,
)

from .index import build_node_index, edges_into
from .model import DEFAULT_MODULE_COMMENT, GraphDocument, ModuleNode

logger = logging.getLogger(__name__)

SET_PARAMETER = "set_parameter"
REWIRE_EDGE = "rewire_edge"
ADD_MODULE = "add_module"


@dataclass(frozen=True)
class MutationResult:
    """
    Outcome of one graph mutation.

    ``nodes_matched`` counts the nodes the call looked up by comment:

    - set_parameter: every node carrying the comment.
    - rewire_edge: the distinct source and destination nodes resolved,
      so 2, or 1 when both comments name the same node.
    - add_module: always 0, nothing is looked up.

    ``items_changed`` counts parameters updated, edges rewired, or the one
    node appended.
    """
    operation: str
    nodes_matched: int
    items_changed: int

    @property
    def changed(self) -> bool:
        return self.items_changed > 0


def set_parameter(
    document: GraphDocument,
    comment: str,
    parameter_name: str,
    value: str,
    strict: bool = False,
) -> MutationResult:
    """Overwrite ``parameter_name`` on every node labelled ``comment``.

    Matching nothing is not an error unless ``strict`` is set.
    """
    nodes = document.find_nodes(comment)
    changed = 0
    for node in nodes:
        for parameter in node.parameters:
            if parameter.name == parameter_name:
                parameter.value = value
                changed += 1

    if changed == 0:
        if strict:
            raise NoMatchError(f"No parameter '{parameter_name}' on a node labelled '{comment}'")
        logger.warning(f"set_parameter matched nothing: comment='{comment}', parameter='{parameter_name}'")
    elif len(nodes) > 1:
        logger.info(f"set_parameter updated {len(nodes)} nodes sharing comment '{comment}'")

    return MutationResult(SET_PARAMETER, nodes_matched=len(nodes), items_changed=changed)


def rewire_edge(
    document: GraphDocument,
    source_comment: str,
    destination_comment: str,
    strict: bool = False,
) -> MutationResult:
    """Point every edge entering the destination's first input port at the
    source's first output port.

    Both labels and ports are resolved before anything changes, so a lookup
    failure leaves the document untouched. Non-matching edges keep their
    order; the last matching edge is moved to the end of the edge list.
    """
    nodes = build_node_index(document)
    destination = nodes.get(destination_comment)
    if destination is None:
        raise NodeNotFoundError(f"No module node labelled '{destination_comment}'")
    source = nodes.get(source_comment)
    if source is None:
        raise NodeNotFoundError(f"No module node labelled '{source_comment}'")

    destination_port = destination.first_input_port()
    if destination_port is None:
        raise PortNotFoundError(f"Module node '{destination_comment}' has no input port")
    source_port = source.first_output_port()
    if source_port is None:
        raise PortNotFoundError(f"Module node '{source_comment}' has no output port")

    resolved = 1 if source is destination else 2
    matched = edges_into(document, destination_port)
    if not matched:
        if strict:
            raise NoMatchError(f"No edge enters {destination_port.compound_id}")
        logger.warning(f"rewire_edge matched no edge entering {destination_port.compound_id}")
        return MutationResult(REWIRE_EDGE, nodes_matched=resolved, items_changed=0)

    for edge in matched:
        edge.source_output_port_id = source_port.compound_id

    last = matched[-1]
    reordered = [edge for edge in document.edges if edge is not last]
    reordered.append(last)
    document.replace_edges(reordered)

    return MutationResult(REWIRE_EDGE, nodes_matched=resolved, items_changed=len(matched))


def add_module(
    document: GraphDocument,
    node_id: str,
    comment: str = DEFAULT_MODULE_COMMENT,
    require_unique_id: bool = False,
) -> MutationResult:
    """Append an empty module node with the caller-supplied id."""
    if require_unique_id and document.has_node_id(node_id):
        raise DuplicateNodeIdError(f"Module node id already in use: {node_id}")

    document.append_node(ModuleNode.new(node_id, comment))
    return MutationResult(ADD_MODULE, nodes_matched=0, items_changed=1)
