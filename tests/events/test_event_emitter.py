"""
Tests for the event system.

This module contains tests for the EventEmitter and EventBus classes
to ensure they provide the expected behavior for event handling.
"""

import threading
from unittest.mock import MagicMock

from durak.events import EventEmitter, EventBus, EngineEventType


def test_on_with_string_event_type():
    """Test subscribing to an event with a string event type."""
    emitter = EventEmitter()
    callback = MagicMock()

    unsubscribe = emitter.on("test_event", callback)

    test_data = {"value": "test"}
    emitter.emit("test_event", test_data)
    callback.assert_called_once_with(test_data)

    # Unsubscribe and emit again
    unsubscribe()
    emitter.emit("test_event", {"value": "test2"})
    assert callback.call_count == 1


def test_on_with_enum_event_type():
    """Test subscribing to an event with an enum event type."""
    emitter = EventEmitter()
    callback = MagicMock()

    emitter.on(EngineEventType.ATTACK_PLAYED, callback)

    test_data = {"card": "A♠"}
    emitter.emit(EngineEventType.ATTACK_PLAYED, test_data)
    callback.assert_called_once_with(test_data)

    # Enum and name refer to the same event
    emitter.emit("ATTACK_PLAYED", test_data)
    assert callback.call_count == 2


def test_off():
    emitter = EventEmitter()
    callback = MagicMock()
    emitter.on(EngineEventType.PILE_ON, callback)

    emitter.off("PILE_ON", callback)
    emitter.off(EngineEventType.PILE_ON, callback)
    emitter.emit(EngineEventType.PILE_ON, {})

    callback.assert_not_called()


def test_listeners_called_in_subscription_order():
    emitter = EventEmitter()
    call_order = []
    emitter.on("test_event", lambda data: call_order.append("first"))
    emitter.on("test_event", lambda data: call_order.append("second"))

    emitter.emit("test_event", {})

    assert call_order == ["first", "second"]


def test_on_any_subscription():
    """Test subscribing to all events."""
    emitter = EventEmitter()
    callback = MagicMock()

    unsubscribe = emitter.on_any(callback)

    emitter.emit("event1", {"id": 1})
    emitter.emit(EngineEventType.PILE_ON, {"id": 2})

    assert callback.call_count == 2
    event_type, event_data = callback.call_args_list[0][0][0]
    assert event_type == "event1"
    assert event_data["id"] == 1
    assert callback.call_args_list[1][0][0][0] == "PILE_ON"

    unsubscribe()
    emitter.emit("event3", {"id": 3})
    assert callback.call_count == 2


def test_handler_error_does_not_stop_other_handlers():
    """A failing handler is logged and the remaining handlers still run."""
    emitter = EventEmitter()
    failing = MagicMock(side_effect=RuntimeError("handler failed"))
    working = MagicMock()

    emitter.on("test_event", failing)
    emitter.on("test_event", working)

    emitter.emit("test_event", {"value": 1})

    failing.assert_called_once()
    working.assert_called_once_with({"value": 1})


def test_handler_may_unsubscribe_while_emitting():
    emitter = EventEmitter()
    calls = []

    def handler(data):
        calls.append(data)
        unsubscribe()

    unsubscribe = emitter.on(EngineEventType.ROUND_ENDED, handler)
    emitter.emit(EngineEventType.ROUND_ENDED, {"round": 1})
    emitter.emit(EngineEventType.ROUND_ENDED, {"round": 2})

    assert calls == [{"round": 1}]


def test_event_bus_singleton():
    """Test that EventBus provides a singleton instance."""
    bus1 = EventBus.get_instance()
    bus2 = EventBus.get_instance()
    assert bus1 is bus2
    assert isinstance(bus1, EventEmitter)


def test_event_bus_thread_safety():
    """Every thread gets the same EventBus instance."""
    instances = []

    def get_instance():
        instances.append(EventBus.get_instance())

    threads = [threading.Thread(target=get_instance) for _ in range(10)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert all(instance is instances[0] for instance in instances)
