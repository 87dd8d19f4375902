# Experiment graph module
from .codec import parse_experiment, serialize_experiment
from .model import GraphDocument, ModuleNode, Edge, PortReference
from .mutations import MutationResult, set_parameter, rewire_edge, add_module

__all__ = [
    'parse_experiment', 'serialize_experiment',
    'GraphDocument', 'ModuleNode', 'Edge', 'PortReference',
    'MutationResult', 'set_parameter', 'rewire_edge', 'add_module',
]
