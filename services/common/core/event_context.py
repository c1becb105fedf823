"""
EventContext management.
Use ContextVar to share the integration event id across handler execution.
"""

from contextvars import ContextVar
from typing import Optional


# Context variable for the integration event currently being handled.
_event_id_var: ContextVar[Optional[str]] = ContextVar("event_id", default=None)


def get_event_id() -> Optional[str]:
    """Get the current integration event id."""
    return _event_id_var.get()


def set_event_id(event_id: str) -> str:
    """
    Set the integration event id for the current context.

    Args:
        event_id: Id of the integration event being handled

    Returns:
        The id that was set
    """
    _event_id_var.set(str(event_id))
    return str(event_id)


def clear_event_id() -> None:
    """Clear the event id context."""
    _event_id_var.set(None)
