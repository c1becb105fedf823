"""
Handler for SiteDockerImageBuildDoneIntegrationEvent.

Deploys one new, uniquely named container per event. No retries and no
completion event; failures surface as a failed delivery.
"""

import logging
import uuid
from typing import Optional

from services.common.core.exceptions import ImageNotFoundError
from services.common.eventbus.events import SiteDockerImageBuildDoneIntegrationEvent

from .container_deployer import ContainerDeployer

logger = logging.getLogger("vendor_processor.build_done_handler")


def container_name_for(image_tag: str) -> str:
    """``myapp:stores`` -> ``myapp_stores_<uuid4>``"""
    return f"{image_tag.replace(':', '_')}_{uuid.uuid4()}"


class SiteDockerImageBuildDoneEventHandler:
    def __init__(self, deployer: ContainerDeployer):
        self.deployer = deployer

    def handle(self, event: SiteDockerImageBuildDoneIntegrationEvent) -> Optional[str]:
        """
        Deploy the image named by the event.

        Returns:
            Id of the started container, or None when the event was skipped
        """
        image_tag = event.docker_tag
        if not image_tag:
            logger.warning(f"Integration event {event.id} carries no DockerTag; skipping")
            return None

        container_name = container_name_for(image_tag)
        try:
            return self.deployer.deploy(image_tag, container_name)
        except ImageNotFoundError as e:
            # The event can race ahead of the image becoming visible locally.
            logger.warning(
                f"Skipping deployment for event {event.id}: {e}",
                extra={"container_name": container_name, "image_tag": image_tag},
            )
            return None
