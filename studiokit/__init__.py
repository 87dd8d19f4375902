"""
studiokit: client SDK for the Studio visual-workflow service

Directory Structure:
├── graph/             # Experiment document model, codec and mutations
│   ├── model.py       # Typed views over the raw experiment JSON
│   ├── codec.py       # parse_experiment / serialize_experiment
│   ├── index.py       # Comment and port lookup tables
│   └── mutations.py   # set_parameter, rewire_edge, add_module
├── application/       # Services composing the gateway and the graph engine
├── domain/            # Errors, gateway port and domain events
├── infrastructure/    # httpx implementation of the gateway port
├── schemas/           # Pydantic models for the Studio wire objects
├── client.py          # StudioClient façade
└── config.py          # SDK configuration

Experiments are edited by node comment ("label"), not by node id:
fetch, mutate in memory, then one save or save-as per call.
"""
from studiokit.client import StudioClient
from studiokit.schemas.studio_schemas import (
    Activity,
    ExperimentSummary,
    ResourceFileFormat,
    UserAsset,
    WorkspaceSettings,
)
from studiokit.application.polling import CancellationToken, PollPolicy
from studiokit.application.event_handlers import register_event_handlers

__all__ = [
    "StudioClient",
    "WorkspaceSettings",
    "ExperimentSummary",
    "Activity",
    "ResourceFileFormat",
    "UserAsset",
    "CancellationToken",
    "PollPolicy",
    "register_event_handlers",
]
