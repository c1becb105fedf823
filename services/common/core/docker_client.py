"""
Docker client factory.

Every engine call made through the returned client honours DOCKER_TIMEOUT.
"""

import logging

import docker

from .config import BaseAppConfig

logger = logging.getLogger("common.docker_client")


def create_docker_client(config: BaseAppConfig) -> docker.DockerClient:
    """
    Create a Docker client from the environment (DOCKER_HOST or the local socket).

    Raises:
        docker.errors.DockerException: the engine is unreachable
    """
    client = docker.from_env(timeout=config.DOCKER_TIMEOUT)
    logger.info(f"Docker client created (timeout: {config.DOCKER_TIMEOUT}s)")
    return client
