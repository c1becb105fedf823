"""
Shared fixtures for service unit tests.

Docker engine objects are replaced with MagicMocks shaped like the docker SDK.
"""

from unittest.mock import MagicMock

import pytest


def fake_image(image_id, tags=None, env=None, created="2024-01-01T00:00:00.000000000Z"):
    """A docker SDK Image stand-in carrying inspect attrs."""
    image = MagicMock()
    image.id = image_id
    image.tags = list(tags or [])
    image.attrs = {"Id": image_id, "Created": created, "Config": {"Env": env}}
    return image


@pytest.fixture
def make_image():
    return fake_image


@pytest.fixture
def mock_docker_client():
    """Docker client with an empty image store and a startable container."""
    client = MagicMock()
    client.images.list.return_value = []
    container = MagicMock()
    container.id = "c0ffee"
    client.containers.create.return_value = container
    return client
