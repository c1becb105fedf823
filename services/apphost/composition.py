"""
Application topology composition.

Registers the core eShop services and their wiring, then runs the one-time
discovery pass that adds every local store image as an extra service.
"""

import logging
import os
from typing import Optional

import docker

from services.common.images import (
    EnvironmentResolver,
    ImageInspector,
    PortBindingPlanner,
)

from .config import AppHostConfig
from .discovery import discover_store_services, register_discovered_services
from .resources import (
    BASKET_API,
    CATALOG_API,
    CATALOG_DB,
    EVENT_BUS,
    IDENTITY_API,
    IDENTITY_DB,
    MOBILE_BFF,
    ORDER_PROCESSOR,
    ORDERING_API,
    ORDERING_DB,
    PAYMENT_PROCESSOR,
    POSTGRES,
    REDIS,
    WEBAPP,
    WEBHOOKS_API,
    WEBHOOKS_CLIENT,
    WEBHOOKS_DB,
)
from .topology import BindMount, Endpoint, NodeKind, ServiceNode, Topology

logger = logging.getLogger("apphost.composition")


def launch_profile(use_http: bool) -> str:
    return "http" if use_http else "https"


def _project(
    config: AppHostConfig,
    name: str,
    http_port: Optional[int] = None,
    https_port: Optional[int] = None,
    external: bool = False,
) -> ServiceNode:
    endpoints = {}
    if http_port is not None:
        endpoints["http"] = Endpoint("http", "http", http_port, http_port, external)
    if https_port is not None:
        endpoints["https"] = Endpoint("https", "https", https_port, https_port, external)
    return ServiceNode(
        name=name,
        kind=NodeKind.PROJECT,
        image=f"{config.PROJECT_IMAGE_PREFIX}/{name}:{config.PROJECT_IMAGE_TAG}",
        endpoints=endpoints,
    )


def compose_core_topology(config: AppHostConfig) -> Topology:
    """Register the core services, their references and the identity cycle."""
    profile = launch_profile(config.use_http_endpoints)
    topology = Topology()

    # Backing resources
    topology.add(
        ServiceNode(
            name=REDIS,
            kind=NodeKind.CONTAINER,
            image="redis:7.4",
            endpoints={"tcp": Endpoint("tcp", "tcp", 6379)},
            connection_string=f"{REDIS}:6379",
        )
    )
    topology.add(
        ServiceNode(
            name=EVENT_BUS,
            kind=NodeKind.CONTAINER,
            image="rabbitmq:3-management",
            endpoints={"tcp": Endpoint("tcp", "tcp", 5672)},
            environment={
                "RABBITMQ_DEFAULT_USER": "guest",
                "RABBITMQ_DEFAULT_PASS": config.RABBITMQ_PASSWORD,
            },
            connection_string=f"amqp://guest:{config.RABBITMQ_PASSWORD}@{EVENT_BUS}:5672",
            persistent=True,
        )
    )
    topology.add(
        ServiceNode(
            name=POSTGRES,
            kind=NodeKind.CONTAINER,
            image="ankane/pgvector:latest",
            endpoints={"tcp": Endpoint("tcp", "tcp", 5432)},
            environment={"POSTGRES_PASSWORD": config.POSTGRES_PASSWORD},
            persistent=True,
        )
    )
    for database in (CATALOG_DB, IDENTITY_DB, ORDERING_DB, WEBHOOKS_DB):
        topology.add(
            ServiceNode(
                name=database,
                kind=NodeKind.DATABASE,
                parent=POSTGRES,
                connection_string=(
                    f"Host={POSTGRES};Port=5432;Username=postgres;"
                    f"Password={config.POSTGRES_PASSWORD};Database={database}"
                ),
            )
        )

    identity_endpoint = topology.endpoint(IDENTITY_API, profile)

    # Services
    topology.add(_project(config, IDENTITY_API, 5223, 5243, external=True))
    topology.reference(IDENTITY_API, IDENTITY_DB)

    topology.add(_project(config, BASKET_API, 5221))
    topology.reference(BASKET_API, REDIS)
    topology.reference(BASKET_API, EVENT_BUS, wait=True)
    topology.with_environment(BASKET_API, "Identity__Url", identity_endpoint)

    topology.add(_project(config, CATALOG_API, 5222))
    topology.reference(CATALOG_API, EVENT_BUS, wait=True)
    topology.reference(CATALOG_API, CATALOG_DB)

    ordering = topology.add(_project(config, ORDERING_API, 5224))
    ordering.health_check_path = "/health"
    topology.reference(ORDERING_API, EVENT_BUS, wait=True)
    topology.reference(ORDERING_API, ORDERING_DB, wait=True)
    topology.with_environment(ORDERING_API, "Identity__Url", identity_endpoint)

    topology.add(_project(config, ORDER_PROCESSOR))
    topology.reference(ORDER_PROCESSOR, EVENT_BUS, wait=True)
    topology.reference(ORDER_PROCESSOR, ORDERING_DB)
    # ordering-api applies the ordering database migrations
    topology.wait(ORDER_PROCESSOR, ORDERING_API)

    topology.add(_project(config, PAYMENT_PROCESSOR))
    topology.reference(PAYMENT_PROCESSOR, EVENT_BUS, wait=True)

    topology.add(_project(config, WEBHOOKS_API, 5227))
    topology.reference(WEBHOOKS_API, EVENT_BUS, wait=True)
    topology.reference(WEBHOOKS_API, WEBHOOKS_DB)
    topology.with_environment(WEBHOOKS_API, "Identity__Url", identity_endpoint)

    # Reverse proxies
    topology.add(_project(config, MOBILE_BFF, 11632))
    for target in (CATALOG_API, ORDERING_API, BASKET_API, IDENTITY_API):
        topology.reference(MOBILE_BFF, target)

    # Apps
    topology.add(_project(config, WEBHOOKS_CLIENT, 5062, 7260))
    topology.reference(WEBHOOKS_CLIENT, WEBHOOKS_API)
    topology.with_environment(WEBHOOKS_CLIENT, "IdentityUrl", identity_endpoint)

    topology.add(_project(config, WEBAPP, 5045, 7298, external=True))
    for target in (BASKET_API, CATALOG_API, ORDERING_API):
        topology.reference(WEBAPP, target)
    topology.reference(WEBAPP, EVENT_BUS, wait=True)
    topology.with_environment(WEBAPP, "IdentityUrl", identity_endpoint)

    # Self-referencing callback urls
    for app in (WEBAPP, WEBHOOKS_CLIENT):
        topology.with_environment(app, "CallBackUrl", topology.endpoint(app, profile, external=True))

    # Identity references every client for its callback urls (cyclic)
    identity_clients = {
        "BasketApiClient": topology.endpoint(BASKET_API, "http", external=True),
        "OrderingApiClient": topology.endpoint(ORDERING_API, "http", external=True),
        "WebhooksApiClient": topology.endpoint(WEBHOOKS_API, "http", external=True),
        "WebhooksWebClient": topology.endpoint(WEBHOOKS_CLIENT, profile, external=True),
        "WebAppClient": topology.endpoint(WEBAPP, profile, external=True),
    }
    for key, ref in identity_clients.items():
        topology.with_environment(IDENTITY_API, key, ref)

    return topology


def build_topology(
    config: AppHostConfig,
    client: Optional[docker.DockerClient] = None,
    suffix: Optional[str] = None,
) -> Topology:
    """
    Compose the core topology and register discovered store images.

    Discovery runs once, sequentially, and is skipped when no client is given.
    """
    topology = compose_core_topology(config)
    if client is None:
        logger.info("No Docker client; skipping store image discovery")
        return topology

    resolver = EnvironmentResolver(use_http_endpoints=config.use_http_endpoints)
    discovered = discover_store_services(
        ImageInspector(client),
        resolver,
        PortBindingPlanner(),
        suffix or config.STORE_TAG_SUFFIX,
    )
    register_discovered_services(
        topology,
        discovered,
        profile=launch_profile(config.use_http_endpoints),
        certificate=BindMount(
            source=os.path.abspath(os.path.join(config.CERTIFICATE_DIR, config.CERTIFICATE_FILE)),
            target=config.CERTIFICATE_MOUNT_PATH,
        ),
    )
    return topology
