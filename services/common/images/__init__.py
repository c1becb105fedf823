"""
Store image package.

Inspection, environment resolution and port planning shared by the
event-driven deployer and the topology discovery pass.
"""

from .environment import EnvironmentResolver, ExternalServiceConfig
from .inspector import ImageInspector, ImageSelectionPolicy, parse_declared_env
from .ports import PortBindingPlanner

__all__ = [
    "EnvironmentResolver",
    "ExternalServiceConfig",
    "ImageInspector",
    "ImageSelectionPolicy",
    "PortBindingPlanner",
    "parse_declared_env",
]
