"""
Tests for EventBus subscription and dispatch.
"""

import uuid
from unittest.mock import MagicMock

import pytest
from pydantic import ValidationError

from services.common.core import event_context
from services.common.core.exceptions import UnknownEventError
from services.common.eventbus import EventBus, SiteDockerImageBuildDoneIntegrationEvent

EVENT_NAME = "SiteDockerImageBuildDoneIntegrationEvent"


@pytest.fixture
def handler():
    handler = MagicMock()
    handler.handle.return_value = "c0ffee"
    return handler


@pytest.fixture
def bus(handler):
    return EventBus().add_subscription(SiteDockerImageBuildDoneIntegrationEvent, handler)


def test_dispatch_validates_wire_payload(bus, handler):
    event_id = uuid.uuid4()

    results = bus.dispatch(
        EVENT_NAME,
        {"Id": str(event_id), "DockerTag": "myapp:stores", "ProjectName": "MyApp", "NoCache": True},
    )

    assert results == ["c0ffee"]
    event = handler.handle.call_args.args[0]
    assert isinstance(event, SiteDockerImageBuildDoneIntegrationEvent)
    assert event.id == event_id
    assert event.docker_tag == "myapp:stores"
    assert event.project_name == "MyApp"
    assert event.no_cache is True


def test_dispatch_runs_every_handler(bus, handler):
    second = MagicMock()
    second.handle.return_value = None
    bus.add_subscription(SiteDockerImageBuildDoneIntegrationEvent, second)

    results = bus.dispatch(EVENT_NAME, {"DockerTag": "myapp:stores"})

    assert results == ["c0ffee", None]
    handler.handle.assert_called_once()
    second.handle.assert_called_once()


def test_dispatch_unknown_event(bus):
    with pytest.raises(UnknownEventError) as exc_info:
        bus.dispatch("OrderStartedIntegrationEvent", {})

    assert exc_info.value.event_name == "OrderStartedIntegrationEvent"
    assert exc_info.value.known == [EVENT_NAME]


def test_dispatch_rejects_missing_tag(bus, handler):
    with pytest.raises(ValidationError):
        bus.dispatch(EVENT_NAME, {"ProjectName": "MyApp"})

    handler.handle.assert_not_called()


def test_event_id_is_set_during_handling(bus, handler):
    """Logs emitted by handlers carry the event id; it is cleared afterwards."""
    seen = []
    handler.handle.side_effect = lambda event: seen.append(event_context.get_event_id())
    event_id = uuid.uuid4()

    bus.dispatch(EVENT_NAME, {"Id": str(event_id), "DockerTag": "myapp:stores"})

    assert seen == [str(event_id)]
    assert event_context.get_event_id() is None


def test_event_id_is_cleared_when_handler_fails(bus, handler):
    handler.handle.side_effect = RuntimeError("boom")

    with pytest.raises(RuntimeError):
        bus.dispatch(EVENT_NAME, {"DockerTag": "myapp:stores"})

    assert event_context.get_event_id() is None


def test_event_names(bus):
    assert bus.event_names == [EVENT_NAME]


def test_event_accepts_field_names():
    event = SiteDockerImageBuildDoneIntegrationEvent(docker_tag="myapp:stores")

    assert event.docker_tag == "myapp:stores"
    assert event.creation_date.tzinfo is not None
