"""
Custom exception classes.

Represent errors raised while turning a built image into a container
or a topology node.
"""

from typing import Optional


class ImagePipelineError(Exception):
    """Base exception class for image inspection and deployment."""

    pass


class ImageNotFoundError(ImagePipelineError):
    """Raised when no local image matches the requested tag."""

    def __init__(self, tag: str):
        self.tag = tag
        super().__init__(f"No local image matches tag: {tag}")


class MalformedMetadataError(ImagePipelineError):
    """Raised when an image declares an environment entry that is not KEY=VALUE."""

    def __init__(self, image_id: str, entry: str):
        self.image_id = image_id
        self.entry = entry
        super().__init__(f"Malformed environment entry in image {image_id}: {entry!r}")


class EngineCallError(ImagePipelineError):
    """Raised when a Docker engine call (list/inspect/create/start) fails."""

    def __init__(self, operation: str, cause: Exception):
        self.operation = operation
        self.cause = cause
        super().__init__(f"Docker engine call '{operation}' failed: {cause}")


class DeploymentError(ImagePipelineError):
    """Raised when a container could not be deployed."""

    def __init__(self, container_name: str, image: str, cause: Exception):
        self.container_name = container_name
        self.image = image
        self.cause = cause
        super().__init__(f"Failed to deploy container {container_name} from image {image}: {cause}")


class PartialDeploymentError(DeploymentError):
    """Raised when the container was created but could not be started."""

    def __init__(
        self,
        container_name: str,
        image: str,
        container_id: str,
        cause: Exception,
        cleaned_up: bool = False,
    ):
        self.container_id = container_id
        self.cleaned_up = cleaned_up
        super().__init__(container_name, image, cause)


class UnknownEventError(Exception):
    """Raised when an integration event has no subscription."""

    def __init__(self, event_name: str, known: Optional[list] = None):
        self.event_name = event_name
        self.known = known or []
        super().__init__(f"No subscription for integration event: {event_name}")
