"""
Integration event subscriptions.

The transport (broker, retries, dead lettering) lives outside this process;
it delivers each event, at least once, to dispatch().
"""

import logging
from typing import Any, Dict, List, Mapping, Protocol, Type

from ..core.event_context import clear_event_id, set_event_id
from ..core.exceptions import UnknownEventError
from .events import IntegrationEvent

logger = logging.getLogger("common.eventbus")


class IntegrationEventHandler(Protocol):
    def handle(self, event: Any) -> Any: ...


class EventBus:
    """Route integration events, by event type name, to subscribed handlers."""

    def __init__(self):
        self._event_types: Dict[str, Type[IntegrationEvent]] = {}
        self._handlers: Dict[str, List[IntegrationEventHandler]] = {}

    def add_subscription(
        self, event_type: Type[IntegrationEvent], handler: IntegrationEventHandler
    ) -> "EventBus":
        name = event_type.__name__
        self._event_types[name] = event_type
        self._handlers.setdefault(name, []).append(handler)
        logger.info(f"Subscribed {type(handler).__name__} to {name}")
        return self

    @property
    def event_names(self) -> List[str]:
        return sorted(self._event_types)

    def dispatch(self, event_name: str, payload: Mapping[str, Any]) -> List[Any]:
        """
        Validate ``payload`` as ``event_name`` and run every subscribed handler.

        Handler exceptions propagate so the delivery is reported as failed.

        Raises:
            UnknownEventError: no subscription for event_name
            pydantic.ValidationError: payload does not match the event shape
        """
        event_type = self._event_types.get(event_name)
        if event_type is None:
            raise UnknownEventError(event_name, self.event_names)

        event = event_type.model_validate(payload)
        set_event_id(str(event.id))
        try:
            logger.info(f"Handling integration event: {event.id} - ({event_name})")
            return [handler.handle(event) for handler in self._handlers[event_name]]
        finally:
            clear_event_id()
