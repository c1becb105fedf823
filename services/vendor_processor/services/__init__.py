"""
Services package.

Provides the deployment business logic and its engine integration.
"""

from .build_done_handler import SiteDockerImageBuildDoneEventHandler, container_name_for
from .container_deployer import ContainerDeployer

__all__ = [
    "ContainerDeployer",
    "SiteDockerImageBuildDoneEventHandler",
    "container_name_for",
]
