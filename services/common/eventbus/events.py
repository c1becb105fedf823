"""
Integration event models.

Wire names are PascalCase (as published on the bus); attributes are snake_case.
"""

import uuid
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field


class IntegrationEvent(BaseModel):
    """Envelope shared by every integration event."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: uuid.UUID = Field(default_factory=uuid.uuid4, alias="Id")
    creation_date: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc), alias="CreationDate"
    )


class SiteDockerImageBuildDoneIntegrationEvent(IntegrationEvent):
    """Published once per successful store image build."""

    root_store_project: str = Field(default="", alias="RootStoreProject")
    docker_tag: str = Field(..., alias="DockerTag", description="Tag of the built image")
    project_name: str = Field(default="", alias="ProjectName")
    docker_file_working_directory: str = Field(default="", alias="DockerFileWorkingDirectory")
    no_cache: bool = Field(default=False, alias="NoCache")
    target: str = Field(default="", alias="Target")
    platform: str = Field(default="", alias="Platform")
