from __future__ import annotations

from typing import Optional

import httpx

from studiokit.config import settings
from studiokit.application.asset_service import AssetService
from studiokit.application.experiment_copy_service import ExperimentCopyService
from studiokit.application.experiment_service import ExperimentService
from studiokit.application.graph_mutation_service import GraphMutationService
from studiokit.application.polling import PollPolicy
from studiokit.domain.ports import StudioGatewayPort
from studiokit.infrastructure.studio_http_gateway import StudioHttpGateway


def get_gateway(transport: Optional[httpx.BaseTransport] = None) -> StudioHttpGateway:
    client = httpx.Client(timeout=settings.HTTP_TIMEOUT_SECONDS, transport=transport)
    return StudioHttpGateway(client, url_template=settings.STUDIO_API_URL_TEMPLATE)


def get_poll_policy() -> PollPolicy:
    return PollPolicy.from_settings()


def get_graph_mutation_service(gateway: StudioGatewayPort) -> GraphMutationService:
    return GraphMutationService(
        gateway,
        strict=settings.STRICT_LOOKUPS,
        require_unique_node_ids=settings.REQUIRE_UNIQUE_NODE_IDS,
    )


def get_copy_service(gateway: StudioGatewayPort) -> ExperimentCopyService:
    return ExperimentCopyService(gateway, policy=get_poll_policy())


def get_experiment_service(gateway: StudioGatewayPort) -> ExperimentService:
    return ExperimentService(gateway)


def get_asset_service(gateway: StudioGatewayPort) -> AssetService:
    return AssetService(gateway)
