"""
Application topology registry.

A mutable registry of service nodes joined by one-directional edges
(references, wait-for, endpoint-valued environment). Edges may name a node
that is registered later, which is how cyclic wiring (identity <-> clients)
is closed: register every node first, then patch the cross references.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Union

logger = logging.getLogger("apphost.topology")

SERVICE_DISCOVERY_SCHEMES = ("http", "https")


class TopologyError(Exception):
    """Raised for inconsistent topology definitions."""

    pass


class NodeKind(str, Enum):
    PROJECT = "project"
    CONTAINER = "container"
    DATABASE = "database"


@dataclass
class Endpoint:
    name: str
    scheme: str
    target_port: int
    port: Optional[int] = None  # Host port, None when not published
    external: bool = False


@dataclass(frozen=True)
class EndpointReference:
    """Late-bound URL of another node's endpoint."""

    service: str
    endpoint: str
    external: bool = False


@dataclass(frozen=True)
class BindMount:
    source: str
    target: str
    read_only: bool = True


EnvValue = Union[str, EndpointReference]


@dataclass
class ServiceNode:
    name: str
    kind: NodeKind
    image: str = ""
    endpoints: Dict[str, Endpoint] = field(default_factory=dict)
    environment: Dict[str, EnvValue] = field(default_factory=dict)
    references: List[str] = field(default_factory=list)
    wait_for: List[str] = field(default_factory=list)
    bind_mounts: List[BindMount] = field(default_factory=list)
    connection_string: Optional[str] = None
    parent: Optional[str] = None
    health_check_path: Optional[str] = None
    persistent: bool = False


class Topology:
    """Registry of service nodes keyed by name, in registration order."""

    def __init__(self, name: str = "eshop"):
        self.name = name
        self._nodes: Dict[str, ServiceNode] = {}

    def __contains__(self, name: str) -> bool:
        return name in self._nodes

    @property
    def nodes(self) -> List[ServiceNode]:
        return list(self._nodes.values())

    def add(self, node: ServiceNode) -> ServiceNode:
        if node.name in self._nodes:
            raise TopologyError(f"Service already registered: {node.name}")
        self._nodes[node.name] = node
        logger.debug(f"Registered {node.kind.value} {node.name}")
        return node

    def get(self, name: str) -> ServiceNode:
        try:
            return self._nodes[name]
        except KeyError:
            raise TopologyError(f"Unknown service: {name}") from None

    # ------------------------------------------------------------------
    # Edges
    # ------------------------------------------------------------------

    def reference(self, source: str, target: str, wait: bool = False) -> None:
        """Inject the target's connection string / service endpoints into source."""
        node = self.get(source)
        if target not in node.references:
            node.references.append(target)
        if wait:
            self.wait(source, target)

    def wait(self, source: str, target: str) -> None:
        node = self.get(source)
        if target not in node.wait_for:
            node.wait_for.append(target)

    def with_environment(self, name: str, key: str, value: EnvValue) -> None:
        self.get(name).environment[key] = value

    def endpoint(self, service: str, endpoint: str, external: bool = False) -> EndpointReference:
        return EndpointReference(service=service, endpoint=endpoint, external=external)

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def endpoint_url(self, ref: EndpointReference) -> str:
        node = self.get(ref.service)
        endpoint = node.endpoints.get(ref.endpoint)
        if endpoint is None:
            raise TopologyError(f"Service {ref.service} has no endpoint named {ref.endpoint}")
        if ref.external:
            return f"{endpoint.scheme}://localhost:{endpoint.port or endpoint.target_port}"
        return f"{endpoint.scheme}://{node.name}:{endpoint.target_port}"

    def resolve_environment(self, name: str) -> Dict[str, str]:
        """
        Render the environment of ``name``.

        References come first (ConnectionStrings__<target>, then
        Services__<target>__<endpoint>__0 per http/https endpoint), followed by
        the node's own entries, which win on conflicts.
        """
        node = self.get(name)
        env: Dict[str, str] = {}

        for target_name in node.references:
            target = self.get(target_name)
            if target.connection_string is not None:
                env[f"ConnectionStrings__{target.name}"] = target.connection_string
            for endpoint in target.endpoints.values():
                if endpoint.scheme in SERVICE_DISCOVERY_SCHEMES:
                    ref = EndpointReference(target.name, endpoint.name)
                    env[f"Services__{target.name}__{endpoint.name}__0"] = self.endpoint_url(ref)

        for key, value in node.environment.items():
            env[key] = self.endpoint_url(value) if isinstance(value, EndpointReference) else value

        return env

    def runtime_dependencies(self, name: str) -> List[str]:
        """Wait-for targets mapped onto runnable nodes (databases -> their server)."""
        deps: List[str] = []
        for target_name in self.get(name).wait_for:
            target = self.get(target_name)
            if target.kind is NodeKind.DATABASE:
                if target.parent is None:
                    raise TopologyError(f"Database {target.name} has no server")
                target = self.get(target.parent)
            if target.name not in deps:
                deps.append(target.name)
        return deps
