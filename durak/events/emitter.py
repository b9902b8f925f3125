"""
Event system for the Durak engine.

State transitions and the turn engine report every move, round and result to
an `EventEmitter`. Listeners (loggers, UIs, statistics collectors) subscribe
to single event types or to all of them. A failing listener is logged and
never affects the game.
"""

from collections import defaultdict
from typing import Any, Callable, Dict, List, Union
import threading
import logging
from enum import Enum

logger = logging.getLogger("durak.events")

EventKey = Union[str, Enum]


def _event_name(event_type: EventKey) -> str:
    return event_type.name if isinstance(event_type, Enum) else event_type


class EventEmitter:
    """
    Event emitter for the Durak engine.

    Listeners are called synchronously, in subscription order, from the
    thread that emits. Subscriptions may change from inside a listener.
    """

    def __init__(self):
        self._listeners: Dict[str, List[Callable]] = defaultdict(list)
        self._global_listeners: List[Callable] = []
        self._listener_lock = threading.RLock()

    def on(self, event_type: EventKey, callback: Callable) -> Callable:
        """
        Subscribe to an event type.

        Args:
            event_type: EngineEventType member or its name
            callback: Called with the event data dict

        Returns:
            Function removing this subscription
        """
        name = _event_name(event_type)
        with self._listener_lock:
            self._listeners[name].append(callback)
        return lambda: self.off(name, callback)

    def off(self, event_type: EventKey, callback: Callable) -> None:
        """Remove a subscription made with `on`. Unknown callbacks are ignored."""
        name = _event_name(event_type)
        with self._listener_lock:
            if callback in self._listeners[name]:
                self._listeners[name].remove(callback)

    def on_any(self, callback: Callable) -> Callable:
        """
        Subscribe to every event. The callback receives (event_name, data).

        Returns:
            Function removing this subscription
        """
        with self._listener_lock:
            self._global_listeners.append(callback)

        def unsubscribe():
            with self._listener_lock:
                if callback in self._global_listeners:
                    self._global_listeners.remove(callback)

        return unsubscribe

    def emit(self, event_type: EventKey, data: Dict[str, Any]) -> None:
        """
        Emit an event to all registered listeners.

        Args:
            event_type: The type of event to emit
            data: The data to include with the event
        """
        name = _event_name(event_type)

        with self._listener_lock:
            calls = [(callback, data) for callback in self._listeners.get(name, [])]
            calls.extend((callback, (name, data)) for callback in self._global_listeners)

        # Outside the lock so listeners may subscribe or emit
        for callback, args in calls:
            try:
                callback(args)
            except Exception as e:
                logger.error(f"Error in event handler for {name}: {e}", exc_info=True)


class EventBus:
    """
    Process-wide event emitter, used by engines not given their own.
    """

    _instance = None
    _lock = threading.Lock()

    @classmethod
    def get_instance(cls) -> EventEmitter:
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = EventEmitter()
        return cls._instance


class EngineEventType(Enum):
    """
    Event types emitted by the Durak engine.
    """

    # Game lifecycle
    GAME_STARTED = "game_started"
    GAME_ENDED = "game_ended"
    GAME_ABORTED = "game_aborted"
    ROUND_ENDED = "round_ended"

    # Player events
    PLAYER_JOINED = "player_joined"
    PLAYER_DECISION_NEEDED = "player_decision_needed"
    PLAYER_TIMEOUT = "player_timeout"
    PLAYER_RESULT = "player_result"

    # Moves
    ATTACK_PLAYED = "attack_played"
    ATTACK_PASSED = "attack_passed"
    DEFENSE_PLAYED = "defense_played"
    DEFENSE_ABANDONED = "defense_abandoned"
    PILE_ON = "pile_on"

    # Card movement
    HANDS_REFILLED = "hands_refilled"

    ERROR = "error"
