"""
Event bus package.

Integration event models and the in-process subscription registry.
"""

from .bus import EventBus, IntegrationEventHandler
from .events import IntegrationEvent, SiteDockerImageBuildDoneIntegrationEvent

__all__ = [
    "EventBus",
    "IntegrationEvent",
    "IntegrationEventHandler",
    "SiteDockerImageBuildDoneIntegrationEvent",
]
