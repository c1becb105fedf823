"""
Where: services/vendor_processor/lifecycle.py
What: Startup wiring of the Docker client, deployment pipeline and event bus.
Why: Keep main.py focused on routes while sharing one pipeline per process.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import docker
from fastapi import FastAPI

from services.common.core.docker_client import create_docker_client
from services.common.eventbus import EventBus, SiteDockerImageBuildDoneIntegrationEvent
from services.common.images import (
    EnvironmentResolver,
    ExternalServiceConfig,
    ImageInspector,
    PortBindingPlanner,
)

from .config import VendorProcessorConfig
from .services import ContainerDeployer, SiteDockerImageBuildDoneEventHandler

logger = logging.getLogger("vendor_processor.main")


def build_event_bus(
    client: docker.DockerClient,
    processor_config: VendorProcessorConfig,
    external_config: Optional[ExternalServiceConfig] = None,
) -> EventBus:
    """Assemble the deployment pipeline and subscribe it to build-done events."""
    deployer = ContainerDeployer(
        client=client,
        inspector=ImageInspector(client, processor_config.IMAGE_SELECTION_POLICY),
        resolver=EnvironmentResolver(use_http_endpoints=processor_config.use_http_endpoints),
        planner=PortBindingPlanner(),
        external_config=external_config or ExternalServiceConfig.from_environ(),
        certificate_dir=processor_config.CERTIFICATE_DIR,
        certificate_mount_path=processor_config.CERTIFICATE_MOUNT_PATH,
        tag_marker=processor_config.tag_marker,
        cleanup_on_start_failure=processor_config.CLEANUP_ON_START_FAILURE,
    )
    bus = EventBus()
    bus.add_subscription(
        SiteDockerImageBuildDoneIntegrationEvent, SiteDockerImageBuildDoneEventHandler(deployer)
    )
    return bus


@asynccontextmanager
async def manage_lifespan(
    app: FastAPI, processor_config: VendorProcessorConfig
) -> AsyncIterator[None]:
    """Manage application lifecycle."""
    client = create_docker_client(processor_config)
    try:
        app.state.docker_client = client
        app.state.event_bus = build_event_bus(client, processor_config)
        logger.info(
            "Vendor processor initialized",
            extra={
                "use_http_endpoints": processor_config.use_http_endpoints,
                "image_selection_policy": processor_config.IMAGE_SELECTION_POLICY.value,
            },
        )
        yield
    finally:
        client.close()
        logger.info("Vendor processor stopped")
