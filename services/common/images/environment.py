"""
Environment resolution for store images.

Combines the environment declared by the image (ports, site domain) with
externally supplied service discovery values into the environment of the
new container.
"""

import os
from dataclasses import dataclass
from typing import Dict, Mapping, Optional

from ..models.images import ResolvedEnvironment

# Configuration keys, ":" is the path separator ("__" in environment variable names).
MESSAGE_BUS_KEY = "ConnectionStrings:ExternalRabbitMQ"
BASKET_API_KEY = "Services:basket-api:http:0"
CATALOG_API_KEY = "Services:catalog-api:http:0"
ORDERING_API_KEY = "Services:ordering-api:http:0"
IDENTITY_URL_KEY = "IdentityUrl"
CALLBACK_URL_VAR = "CallBackUrl"

HTTP_PORT_VAR = "HTTP_PORT"
HTTPS_PORT_VAR = "HTTPS_PORT"
SITE_DOMAIN_VAR = "SITE_DOMAIN"


def to_env_var_name(config_key: str) -> str:
    """``Services:basket-api:http:0`` -> ``Services__basket-api__http__0``"""
    return config_key.replace(":", "__")


@dataclass(frozen=True)
class ExternalServiceConfig:
    """Service discovery values handed to every deployed store container."""

    message_bus_connection_string: str = ""
    basket_url: str = ""
    catalog_url: str = ""
    ordering_url: str = ""
    identity_url: str = ""

    @classmethod
    def from_environ(cls, environ: Optional[Mapping[str, str]] = None) -> "ExternalServiceConfig":
        """
        Read the service discovery values from the process environment.

        ``Services__basket-api__http__0`` is looked up as ``Services:basket-api:http:0``;
        lookups are case-insensitive and missing values become "".
        """
        source = os.environ if environ is None else environ
        flat = {key.replace("__", ":").lower(): value for key, value in source.items()}

        def lookup(key: str) -> str:
            return flat.get(key.lower()) or ""

        return cls(
            message_bus_connection_string=lookup(MESSAGE_BUS_KEY),
            basket_url=lookup(BASKET_API_KEY),
            catalog_url=lookup(CATALOG_API_KEY),
            ordering_url=lookup(ORDERING_API_KEY),
            identity_url=lookup(IDENTITY_URL_KEY),
        )


class EnvironmentResolver:
    """
    Resolve ports, callback URL and injected variables for one image.

    The http/https choice is fixed at construction so resolve() only
    depends on its arguments.
    """

    def __init__(self, use_http_endpoints: bool = False):
        self.use_http_endpoints = use_http_endpoints

    def resolve(
        self, declared_env: Mapping[str, str], external: ExternalServiceConfig
    ) -> ResolvedEnvironment:
        http_port = declared_env.get(HTTP_PORT_VAR) or ""
        https_port = declared_env.get(HTTPS_PORT_VAR) or ""
        site_domain = declared_env.get(SITE_DOMAIN_VAR) or ""

        return ResolvedEnvironment(
            http_port=http_port,
            https_port=https_port,
            site_domain=site_domain,
            peer_endpoints={
                "basket": external.basket_url,
                "catalog": external.catalog_url,
                "ordering": external.ordering_url,
            },
            identity_url=external.identity_url,
            message_bus_connection_string=external.message_bus_connection_string,
            callback_url=self.callback_url(http_port, https_port, site_domain),
        )

    def callback_url(self, http_port: str, https_port: str, site_domain: str) -> str:
        if self.use_http_endpoints:
            scheme, port = "http", http_port
        else:
            scheme, port = "https", https_port

        if site_domain:
            return f"{scheme}://{site_domain}"
        return f"{scheme}://localhost:{port}"

    @staticmethod
    def container_environment(resolved: ResolvedEnvironment) -> Dict[str, str]:
        """Variables injected into the container, in submission order."""
        return {
            to_env_var_name(MESSAGE_BUS_KEY): resolved.message_bus_connection_string,
            to_env_var_name(BASKET_API_KEY): resolved.peer_endpoints.get("basket", ""),
            to_env_var_name(CATALOG_API_KEY): resolved.peer_endpoints.get("catalog", ""),
            to_env_var_name(ORDERING_API_KEY): resolved.peer_endpoints.get("ordering", ""),
            to_env_var_name(IDENTITY_URL_KEY): resolved.identity_url,
            CALLBACK_URL_VAR: resolved.callback_url,
        }
