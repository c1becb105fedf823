"""
ContainerDeployer - create and start a store container from a built image.

The only component that calls the engine's create/start operations.
"""

import logging
import os
from typing import Optional

import docker

from services.common.core.exceptions import (
    DeploymentError,
    EngineCallError,
    ImageNotFoundError,
    MalformedMetadataError,
    PartialDeploymentError,
)
from services.common.images.environment import EnvironmentResolver, ExternalServiceConfig
from services.common.images.inspector import ENGINE_ERRORS, ImageInspector
from services.common.images.ports import PortBindingPlanner
from services.common.models.images import ContainerSpec

logger = logging.getLogger("vendor_processor.container_deployer")


class ContainerDeployer:
    """
    Turn an image tag into a started container.

    - build_spec(): inspect, resolve, plan and assemble the ContainerSpec
    - deploy(): create then start the container, returning its id
    """

    def __init__(
        self,
        client: docker.DockerClient,
        inspector: ImageInspector,
        resolver: EnvironmentResolver,
        planner: PortBindingPlanner,
        external_config: Optional[ExternalServiceConfig] = None,
        certificate_dir: str = "certs",
        certificate_mount_path: str = "/https/",
        tag_marker: str = ":stores",
        cleanup_on_start_failure: bool = True,
    ):
        self.client = client
        self.inspector = inspector
        self.resolver = resolver
        self.planner = planner
        self.external_config = external_config or ExternalServiceConfig()
        self.certificate_dir = os.path.abspath(certificate_dir)
        self.certificate_mount_path = certificate_mount_path
        self.tag_marker = tag_marker
        self.cleanup_on_start_failure = cleanup_on_start_failure

    def image_reference(self, image_tag: str) -> str:
        """Image used at creation time: the tag without the store marker."""
        if not self.tag_marker:
            return image_tag
        return image_tag.replace(self.tag_marker, "")

    def build_spec(self, image_tag: str, container_name: str) -> ContainerSpec:
        """
        Inspection filters by the full tag; creation uses the marker-stripped reference.

        Raises:
            ImageNotFoundError: no image matches image_tag
            MalformedMetadataError / EngineCallError: inspection failed
        """
        metadata = self.inspector.inspect(image_tag)
        resolved = self.resolver.resolve(metadata.declared_env, self.external_config)
        plan = self.planner.plan(resolved)
        env = self.resolver.container_environment(resolved)

        return ContainerSpec(
            image=self.image_reference(image_tag),
            name=container_name,
            env=tuple(f"{key}={value}" for key, value in env.items()),
            exposed_ports=plan.exposed_ports,
            port_bindings=plan.docker_ports(),
            certificate_bind=(self.certificate_dir, self.certificate_mount_path),
        )

    def deploy(self, image_tag: str, container_name: str) -> str:
        """
        Create and start ``container_name`` from ``image_tag``.

        Returns:
            Id of the started container

        Raises:
            ImageNotFoundError: no image matches image_tag
            DeploymentError: inspection, create or start failed
        """
        image = self.image_reference(image_tag)
        log_context = {"container_name": container_name, "image": image, "image_tag": image_tag}
        logger.info(
            f"Attempting to deploy container {container_name} from image {image}...",
            extra=log_context,
        )

        try:
            spec = self.build_spec(image_tag, container_name)
        except ImageNotFoundError:
            logger.warning(f"No local image matches {image_tag}", extra=log_context)
            raise
        except (MalformedMetadataError, EngineCallError) as e:
            logger.error(f"Failed to inspect image for {container_name}: {e}", extra=log_context)
            raise DeploymentError(container_name, image, e) from e

        try:
            container = self.client.containers.create(
                spec.image,
                name=spec.name,
                environment=list(spec.env),
                ports=spec.port_bindings,
                volumes=spec.docker_volumes(),
            )
        except ENGINE_ERRORS as e:
            logger.error(
                f"Failed to create container {container_name}: {e}",
                exc_info=True,
                extra=log_context,
            )
            raise DeploymentError(container_name, image, e) from e

        try:
            container.start()
        except ENGINE_ERRORS as e:
            logger.error(
                f"Failed to start container {container_name} ({container.id}): {e}",
                exc_info=True,
                extra={**log_context, "container_id": container.id},
            )
            cleaned_up = self._remove_quietly(container, log_context)
            raise PartialDeploymentError(
                container_name, image, container.id, e, cleaned_up=cleaned_up
            ) from e

        logger.info(
            f"Successfully deployed container {container_name} with ID {container.id}",
            extra={**log_context, "container_id": container.id},
        )
        return container.id

    def _remove_quietly(self, container, log_context: dict) -> bool:
        """Best-effort removal of a created-but-not-started container."""
        if not self.cleanup_on_start_failure:
            logger.warning(
                f"Leaving created container {container.id} in place (cleanup disabled)",
                extra=log_context,
            )
            return False
        try:
            container.remove(force=True)
            logger.info(f"Removed unstarted container {container.id}", extra=log_context)
            return True
        except ENGINE_ERRORS as e:
            logger.error(
                f"Failed to remove unstarted container {container.id}: {e}", extra=log_context
            )
            return False
