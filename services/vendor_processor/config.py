"""
Vendor processor configuration definition.

Loads configuration from environment variables and provides a Pydantic model.
Uses pydantic-settings for type safety and defaults.
"""

import sys
from pydantic import Field
from services.common.core.config import BaseAppConfig
from services.common.images.inspector import ImageSelectionPolicy


class VendorProcessorConfig(BaseAppConfig):
    """
    Configuration management for the Vendor Processor service.
    """

    # Server settings
    UVICORN_BIND_ADDR: str = Field(default="0.0.0.0:8080", description="Listen address")

    # Deployment settings
    CERTIFICATE_MOUNT_PATH: str = Field(
        default="/https/", description="Certificate directory path inside the container"
    )
    CLEANUP_ON_START_FAILURE: bool = Field(
        default=True, description="Remove a created container when it fails to start"
    )
    IMAGE_SELECTION_POLICY: ImageSelectionPolicy = Field(
        default=ImageSelectionPolicy.MOST_RECENT,
        description="Tie-break when several images match a tag",
    )


# Load config as a singleton.
# pydantic-settings reads environment variables during instantiation.
try:
    config = VendorProcessorConfig()
except Exception as e:
    sys.stderr.write(f"Failed to load configuration: {e}\n")
    raise
