"""
Experiment graph model.

Every class here is a thin typed view over a dict that lives inside the
decoded experiment document. Reads and writes go straight to that dict, so
fields the SDK does not know about survive a parse/serialize round trip.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

# Wire contract; never rename.
GRAPH = "Graph"
MODULE_NODES = "ModuleNodes"
EDGES_INTERNAL = "EdgesInternal"
NODE_ID = "Id"
COMMENT = "Comment"
MODULE_PARAMETERS = "ModuleParameters"
NAME = "Name"
VALUE = "Value"
INPUT_PORTS = "InputPortsInternal"
OUTPUT_PORTS = "OutputPortsInternal"
SOURCE_OUTPUT_PORT_ID = "SourceOutputPortId"
DESTINATION_INPUT_PORT_ID = "DestinationInputPortId"

PORT_SEPARATOR = ":"
DEFAULT_MODULE_COMMENT = "New module"


@dataclass(frozen=True)
class PortReference:
    """A (node id, port name) pair, written on the wire as ``nodeId:portName``."""
    node_id: str
    port_name: str

    @property
    def compound_id(self) -> str:
        return f"{self.node_id}{PORT_SEPARATOR}{self.port_name}"

    @classmethod
    def parse(cls, compound_id: str) -> "PortReference":
        node_id, _, port_name = compound_id.partition(PORT_SEPARATOR)
        return cls(node_id=node_id, port_name=port_name)

    def __str__(self) -> str:
        return self.compound_id


@dataclass
class ModuleParameter:
    raw: Dict[str, Any]

    @property
    def name(self) -> str:
        return str(self.raw.get(NAME, ""))

    @property
    def value(self) -> Any:
        return self.raw.get(VALUE)

    @value.setter
    def value(self, new_value: str) -> None:
        self.raw[VALUE] = new_value


@dataclass
class Port:
    raw: Dict[str, Any]

    @property
    def name(self) -> str:
        return str(self.raw.get(NAME, ""))


def _dict_items(raw: Dict[str, Any], key: str) -> List[Dict[str, Any]]:
    items = raw.get(key)
    if not isinstance(items, list):
        return []
    return [item for item in items if isinstance(item, dict)]


@dataclass
class ModuleNode:
    """One processing step of the experiment graph."""
    raw: Dict[str, Any]

    @classmethod
    def new(cls, node_id: str, comment: str = DEFAULT_MODULE_COMMENT) -> "ModuleNode":
        return cls(raw={
            NODE_ID: node_id,
            COMMENT: comment,
            MODULE_PARAMETERS: [],
            INPUT_PORTS: [],
            OUTPUT_PORTS: [],
        })

    @property
    def id(self) -> str:
        return str(self.raw.get(NODE_ID, ""))

    @property
    def comment(self) -> Optional[str]:
        comment = self.raw.get(COMMENT)
        return None if comment is None else str(comment)

    @property
    def parameters(self) -> List[ModuleParameter]:
        return [ModuleParameter(item) for item in _dict_items(self.raw, MODULE_PARAMETERS)]

    @property
    def input_ports(self) -> List[Port]:
        return [Port(item) for item in _dict_items(self.raw, INPUT_PORTS)]

    @property
    def output_ports(self) -> List[Port]:
        return [Port(item) for item in _dict_items(self.raw, OUTPUT_PORTS)]

    def parameter_map(self) -> Dict[str, Any]:
        return {param.name: param.value for param in self.parameters}

    def first_input_port(self) -> Optional[PortReference]:
        ports = self.input_ports
        return PortReference(self.id, ports[0].name) if ports else None

    def first_output_port(self) -> Optional[PortReference]:
        ports = self.output_ports
        return PortReference(self.id, ports[0].name) if ports else None


@dataclass
class Edge:
    raw: Dict[str, Any]

    @property
    def source_output_port_id(self) -> str:
        return str(self.raw.get(SOURCE_OUTPUT_PORT_ID, ""))

    @source_output_port_id.setter
    def source_output_port_id(self, compound_id: str) -> None:
        self.raw[SOURCE_OUTPUT_PORT_ID] = compound_id

    @property
    def destination_input_port_id(self) -> str:
        return str(self.raw.get(DESTINATION_INPUT_PORT_ID, ""))

    @property
    def source(self) -> PortReference:
        return PortReference.parse(self.source_output_port_id)

    @property
    def destination(self) -> PortReference:
        return PortReference.parse(self.destination_input_port_id)


@dataclass
class GraphDocument:
    """Decoded experiment document plus typed views of its graph section.

    ``nodes`` and ``edges`` wrap the very dicts held in ``root``; use
    ``append_node`` and ``replace_edges`` to change membership or order so the
    two stay in step.
    """
    root: Dict[str, Any]
    nodes: List[ModuleNode] = field(default_factory=list)
    edges: List[Edge] = field(default_factory=list)

    @property
    def graph(self) -> Dict[str, Any]:
        return self.root[GRAPH]

    def find_nodes(self, comment: str) -> List[ModuleNode]:
        return [node for node in self.nodes if node.comment == comment]

    def has_node_id(self, node_id: str) -> bool:
        return any(node.id == node_id for node in self.nodes)

    def append_node(self, node: ModuleNode) -> None:
        self.graph[MODULE_NODES].append(node.raw)
        self.nodes.append(node)

    def replace_edges(self, edges: List[Edge]) -> None:
        self.graph[EDGES_INTERNAL] = [edge.raw for edge in edges]
        self.edges = list(edges)
