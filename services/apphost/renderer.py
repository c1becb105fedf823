"""
Topology rendering to a docker compose document.

Databases are folded into their server; every other node becomes a service.
"""

import sys
from typing import Any, Dict, Optional, TextIO

import yaml

from .topology import NodeKind, Topology


def _healthcheck(port: int, path: str) -> Dict[str, Any]:
    return {
        "test": ["CMD", "curl", "-f", f"http://localhost:{port}{path}"],
        "interval": "10s",
        "timeout": "5s",
        "retries": 5,
    }


def render_compose(topology: Topology) -> Dict[str, Any]:
    services: Dict[str, Dict[str, Any]] = {}

    for node in topology.nodes:
        if node.kind is NodeKind.DATABASE:
            continue

        service: Dict[str, Any] = {"image": node.image}

        environment = topology.resolve_environment(node.name)
        if environment:
            service["environment"] = environment

        ports = [
            f"{endpoint.port}:{endpoint.target_port}"
            for endpoint in node.endpoints.values()
            if endpoint.port is not None
        ]
        if ports:
            service["ports"] = ports

        dependencies = topology.runtime_dependencies(node.name)
        if dependencies:
            service["depends_on"] = {
                name: {
                    "condition": "service_healthy"
                    if topology.get(name).health_check_path
                    else "service_started"
                }
                for name in dependencies
            }

        if node.bind_mounts:
            service["volumes"] = [
                f"{mount.source}:{mount.target}{':ro' if mount.read_only else ''}"
                for mount in node.bind_mounts
            ]

        http = node.endpoints.get("http")
        if node.health_check_path and http is not None:
            service["healthcheck"] = _healthcheck(http.target_port, node.health_check_path)

        if node.persistent:
            service["restart"] = "unless-stopped"

        services[node.name] = service

    return {"name": topology.name, "services": services}


def write_compose(
    topology: Topology, path: Optional[str] = None, stream: Optional[TextIO] = None
) -> None:
    """Write the compose YAML to ``path``, or to ``stream`` (stdout) when path is None or '-'."""
    document = render_compose(topology)
    if path and path != "-":
        with open(path, "w", encoding="utf-8") as f:
            yaml.safe_dump(document, f, sort_keys=False)
        return
    yaml.safe_dump(document, stream or sys.stdout, sort_keys=False)
