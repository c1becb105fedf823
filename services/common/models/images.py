from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Optional, Tuple


# =============================================================================
# Image Metadata
# =============================================================================


@dataclass(frozen=True)
class ImageMetadata:
    """
    Read-only view of a local image, derived at inspection time.

    Never persisted; callers re-inspect for every deployment.
    """

    image_id: str
    declared_env: Dict[str, str] = field(default_factory=dict)
    repo_tags: Tuple[str, ...] = ()
    created: str = ""


# =============================================================================
# Deployment Inputs
# =============================================================================


@dataclass(frozen=True)
class ResolvedEnvironment:
    """Image-declared settings combined with external service discovery values."""

    http_port: str
    https_port: str
    site_domain: str
    peer_endpoints: Dict[str, str]  # basket / catalog / ordering -> URL
    identity_url: str
    message_bus_connection_string: str
    callback_url: str


@dataclass(frozen=True)
class PortBindingPlan:
    """
    Exposed container ports and their host bindings.

    A binding of None leaves the host port to the engine (ephemeral port).
    """

    exposed_ports: FrozenSet[str]
    bindings: Dict[str, Optional[str]]

    def docker_ports(self) -> Dict[str, Optional[str]]:
        """Mapping accepted by the docker SDK ``ports=`` argument."""
        ports: Dict[str, Optional[str]] = {port: None for port in sorted(self.exposed_ports)}
        ports.update(self.bindings)
        return ports


@dataclass(frozen=True)
class ContainerSpec:
    """Everything submitted to the engine for one container creation."""

    image: str
    name: str
    env: Tuple[str, ...]  # "KEY=VALUE"
    exposed_ports: FrozenSet[str]
    port_bindings: Dict[str, Optional[str]]
    certificate_bind: Tuple[str, str]  # host path, container path

    def docker_volumes(self) -> Dict[str, Dict[str, str]]:
        host_path, container_path = self.certificate_bind
        return {host_path: {"bind": container_path, "mode": "ro"}}
