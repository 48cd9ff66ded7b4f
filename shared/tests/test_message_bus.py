"""Tests for command and event routing on the message bus."""

from dataclasses import dataclass

import pytest

from shared.application.message_bus import MessageBus
from shared.domain.base import DomainEvent


@dataclass(frozen=True)
class Ping:
    value: int


@dataclass
class SomethingHappened(DomainEvent):
    what: str = ''


def test_command_result_is_returned_to_caller():
    bus = MessageBus()
    bus.register_command_handler(Ping, lambda command: command.value * 2)

    assert bus.handle_command(Ping(21)) == 42


def test_only_one_handler_per_command():
    bus = MessageBus()
    bus.register_command_handler(Ping, lambda command: None)

    with pytest.raises(ValueError):
        bus.register_command_handler(Ping, lambda command: None)


def test_unknown_command_raises_lookup_error():
    with pytest.raises(LookupError):
        MessageBus().handle_command(Ping(1))


def test_base_class_handlers_receive_subclass_events():
    bus = MessageBus()
    seen = []
    bus.register_event_handler(DomainEvent, lambda event: seen.append(("any", event.what)))
    bus.register_event_handler(SomethingHappened, lambda event: seen.append(("specific", event.what)))

    bus.publish_events([SomethingHappened(what="x")])

    assert sorted(seen) == [("any", "x"), ("specific", "x")]


def test_failing_handler_does_not_stop_the_others(caplog):
    bus = MessageBus()
    seen = []

    def broken(event):
        raise RuntimeError("handler down")

    bus.register_event_handler(SomethingHappened, broken)
    bus.register_event_handler(SomethingHappened, lambda event: seen.append(event.what))

    bus.publish_events([SomethingHappened(what="a"), SomethingHappened(what="b")])

    assert seen == ["a", "b"]
    assert "handler down" in caplog.text


def test_buses_are_independent():
    first, second = MessageBus(), MessageBus()
    first.register_command_handler(Ping, lambda command: "first")

    with pytest.raises(LookupError):
        second.handle_command(Ping(1))
