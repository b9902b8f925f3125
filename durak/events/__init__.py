"""
Event system for the Durak engine.

This package provides the event emitter the engine reports game progress to.
"""

from durak.events.emitter import EventEmitter, EventBus, EngineEventType

__all__ = ["EventEmitter", "EventBus", "EngineEventType"]
