"""
AppHost configuration definition.

Settings used while composing the application topology.
"""

from pydantic import Field
from services.common.core.config import BaseAppConfig


class AppHostConfig(BaseAppConfig):
    """
    Configuration management for topology composition.
    """

    # Certificates
    CERTIFICATE_FILE: str = Field(
        default="aspnet-dev.pfx", description="Certificate file inside CERTIFICATE_DIR"
    )
    CERTIFICATE_MOUNT_PATH: str = Field(
        default="/https/aspnet-dev.pfx", description="Certificate path inside store containers"
    )

    # Images and credentials of the core services
    PROJECT_IMAGE_PREFIX: str = Field(default="eshop", description="Repository prefix of project images")
    PROJECT_IMAGE_TAG: str = Field(default="latest", description="Tag of project images")
    POSTGRES_PASSWORD: str = Field(default="postgres", description="Postgres superuser password")
    RABBITMQ_PASSWORD: str = Field(default="guest", description="RabbitMQ guest password")
