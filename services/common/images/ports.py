"""Port binding plan for store containers."""

from ..models.images import PortBindingPlan, ResolvedEnvironment

HTTP_CONTAINER_PORT = "80/tcp"
HTTPS_CONTAINER_PORT = "443/tcp"


class PortBindingPlanner:
    """Map the resolved HTTP/HTTPS host ports onto container ports 80 and 443."""

    def plan(self, resolved: ResolvedEnvironment) -> PortBindingPlan:
        return PortBindingPlan(
            exposed_ports=frozenset({HTTP_CONTAINER_PORT, HTTPS_CONTAINER_PORT}),
            bindings={
                HTTP_CONTAINER_PORT: resolved.http_port or None,
                HTTPS_CONTAINER_PORT: resolved.https_port or None,
            },
        )
