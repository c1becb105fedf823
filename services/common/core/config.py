"""
Common Configuration
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class BaseAppConfig(BaseSettings):
    """
    Common application settings.
    """

    LOG_LEVEL: str = Field(default="INFO", description="Log level")

    # ===== Docker Engine =====
    DOCKER_TIMEOUT: int = Field(
        default=60, description="Timeout in seconds applied to every Docker engine call"
    )

    # ===== Store Images =====
    ESHOP_USE_HTTP_ENDPOINTS: str = Field(
        default="", description="Set to 1 to use http instead of https for external endpoints"
    )
    STORE_TAG_SUFFIX: str = Field(
        default="stores", description="Tag marking deployable storefront images"
    )
    CERTIFICATE_DIR: str = Field(
        default="certs", description="Local directory holding the development TLS certificate"
    )

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=True, extra="ignore"
    )

    @property
    def use_http_endpoints(self) -> bool:
        """True only when ESHOP_USE_HTTP_ENDPOINTS parses as the integer 1."""
        try:
            return int(self.ESHOP_USE_HTTP_ENDPOINTS.strip()) == 1
        except ValueError:
            return False

    @property
    def tag_marker(self) -> str:
        return f":{self.STORE_TAG_SUFFIX}"
