"""
Store image discovery.

Scans the local image store once, at topology-composition time, for images
tagged with the store suffix and registers each one as a container node
wired to the core services.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from services.common.core.exceptions import EngineCallError
from services.common.images import (
    EnvironmentResolver,
    ExternalServiceConfig,
    ImageInspector,
    PortBindingPlanner,
)
from services.common.images.ports import HTTP_CONTAINER_PORT, HTTPS_CONTAINER_PORT
from services.common.models.images import ImageMetadata, PortBindingPlan

from .resources import EVENT_BUS, IDENTITY_API, STORE_PEERS
from .topology import (
    BindMount,
    Endpoint,
    NodeKind,
    ServiceNode,
    Topology,
    TopologyError,
)

logger = logging.getLogger("apphost.discovery")

# Anything docker compose rejects in a service name
_INVALID_NAME_CHARS = re.compile(r"[^a-zA-Z0-9_.-]")


@dataclass(frozen=True)
class DiscoveredService:
    name: str
    image_tag: str
    http_port: int
    https_port: int
    callback_url: str
    port_plan: PortBindingPlan
    declared_env: Dict[str, str] = field(default_factory=dict)


def service_name_for(image_tag: str) -> str:
    """
    ``vendor/store-a:stores`` -> ``vendor-store-a``
    ``localhost:5000/shop:stores`` -> ``localhost-5000-shop``
    """
    repository = image_tag.rsplit(":", 1)[0]
    return _INVALID_NAME_CHARS.sub("-", repository)


def _matching_tag(metadata: ImageMetadata, suffix: str) -> Optional[str]:
    marker = f":{suffix}".lower()
    for tag in metadata.repo_tags:
        if tag.lower().endswith(marker):
            return tag
    return None


def discover_store_services(
    inspector: ImageInspector,
    resolver: EnvironmentResolver,
    planner: PortBindingPlanner,
    suffix: str,
) -> List[DiscoveredService]:
    """
    Describe every local store image that declares both HTTP_PORT and HTTPS_PORT.

    One image failing never stops the pass; it is logged and skipped.
    """
    try:
        images = inspector.list_by_suffix(suffix)
    except EngineCallError as e:
        logger.warning(f"Store image discovery skipped: {e}")
        return []

    # Peer wiring happens in the topology; the resolver only supplies ports and callback.
    no_peers = ExternalServiceConfig()
    discovered: List[DiscoveredService] = []

    for metadata in images:
        try:
            tag = _matching_tag(metadata, suffix)
            if tag is None:
                continue

            resolved = resolver.resolve(metadata.declared_env, no_peers)
            if not resolved.http_port or not resolved.https_port:
                logger.warning(
                    f"Skipping {tag}: HTTP_PORT and HTTPS_PORT are both required",
                    extra={"image_tag": tag, "image_id": metadata.image_id},
                )
                continue

            service = DiscoveredService(
                name=service_name_for(tag),
                image_tag=tag,
                http_port=int(resolved.http_port),
                https_port=int(resolved.https_port),
                callback_url=resolved.callback_url,
                port_plan=planner.plan(resolved),
                declared_env=dict(metadata.declared_env),
            )
        except Exception as e:
            # Don't stop the pass on individual failures
            logger.warning(
                f"Skipping image {metadata.image_id}: {e}", extra={"image_id": metadata.image_id}
            )
            continue

        logger.info(
            f"Discovered store image {service.image_tag} as {service.name}",
            extra={"http_port": service.http_port, "https_port": service.https_port},
        )
        discovered.append(service)

    return discovered


def _planned_endpoint(name: str, plan: PortBindingPlan, container_port: str) -> Endpoint:
    """Endpoint publishing ``container_port`` (e.g. ``443/tcp``) on its planned host port."""
    target_port = int(container_port.split("/", 1)[0])
    return Endpoint(name, name, target_port, int(plan.bindings[container_port]), external=True)


def register_discovered_services(
    topology: Topology,
    services: List[DiscoveredService],
    profile: str,
    certificate: BindMount,
) -> List[ServiceNode]:
    """
    Add discovered services to the topology in two passes.

    Pass 1 registers each node with the endpoints of its port plan and the
    one-directional references; pass 2 sets the resolved callback URL on the
    node and as identity's reciprocal entry.
    """
    if IDENTITY_API not in topology:
        raise TopologyError(f"{IDENTITY_API} must be registered before store services")

    identity_endpoint = topology.endpoint(IDENTITY_API, profile)
    registered: List[DiscoveredService] = []
    nodes: List[ServiceNode] = []

    for service in services:
        if service.name in topology:
            logger.warning(
                f"Skipping {service.image_tag}: service name {service.name} already registered"
            )
            continue

        node = topology.add(
            ServiceNode(
                name=service.name,
                kind=NodeKind.CONTAINER,
                image=service.image_tag,
                endpoints={
                    "http": _planned_endpoint("http", service.port_plan, HTTP_CONTAINER_PORT),
                    "https": _planned_endpoint("https", service.port_plan, HTTPS_CONTAINER_PORT),
                },
                bind_mounts=[certificate],
            )
        )
        for peer in STORE_PEERS:
            topology.reference(node.name, peer)
        topology.reference(node.name, EVENT_BUS, wait=True)
        topology.with_environment(node.name, "IdentityUrl", identity_endpoint)
        registered.append(service)
        nodes.append(node)

    for service in registered:
        topology.with_environment(service.name, "CallBackUrl", service.callback_url)
        topology.with_environment(
            IDENTITY_API, f"StoreClients__{service.name}", service.callback_url
        )

    logger.info(f"Registered {len(nodes)} store services")
    return nodes
