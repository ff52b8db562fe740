"""Events, event matchers, aggregate bookkeeping and handler middleware."""

from __future__ import annotations

import uuid
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

NIL_ID = uuid.UUID(int=0)


@dataclass(frozen=True)
class Event:
    """Something that happened to an aggregate, at a given version."""

    event_type: str
    data: Any
    timestamp: datetime
    aggregate_type: str = ""
    aggregate_id: uuid.UUID = NIL_ID
    version: int = 0

    def __str__(self) -> str:
        return f"{self.event_type}@{self.version}"


class EntityNotFoundError(LookupError):
    """Raised by repositories when an entity does not exist."""


@dataclass
class AggregateBase:
    """Common state of event sourced aggregates: identity, version and new events."""

    aggregate_type: str
    id: uuid.UUID
    version: int = 0
    _uncommitted: list[Event] = field(default_factory=list, init=False, repr=False)

    def append_event(self, event_type: str, data: Any, timestamp: datetime) -> Event:
        """Record a new event for this aggregate and return it."""
        event = Event(
            event_type,
            data,
            timestamp,
            aggregate_type=self.aggregate_type,
            aggregate_id=self.id,
            version=self.version + len(self._uncommitted) + 1,
        )
        self._uncommitted.append(event)
        return event

    def uncommitted_events(self) -> list[Event]:
        """Return the events appended since the last clear."""
        return list(self._uncommitted)

    def clear_uncommitted_events(self) -> None:
        """Forget all appended events."""
        self._uncommitted.clear()


class EventMatcher(ABC):
    """Decides whether an event is of interest."""

    @abstractmethod
    def match(self, event: Event | None) -> bool:
        """Return True if the matcher matches the event."""


class _MatcherTuple(tuple, EventMatcher):
    def __new__(cls, *items):
        return super().__new__(cls, items)

    def __repr__(self) -> str:
        return f"{type(self).__name__}{tuple.__repr__(self)}"


class MatchEvents(_MatcherTuple):
    """Matches any of the given event types; a missing event never matches."""

    def match(self, event: Event | None) -> bool:
        return event is not None and event.event_type in self


class MatchAggregates(_MatcherTuple):
    """Matches any of the given aggregate types; a missing event never matches."""

    def match(self, event: Event | None) -> bool:
        return event is not None and event.aggregate_type in self


class MatchAny(_MatcherTuple):
    """Matches if any of the contained matchers matches."""

    def match(self, event: Event | None) -> bool:
        return any(matcher.match(event) for matcher in self)


class MatchAll(_MatcherTuple):
    """Matches if all of the contained matchers match; empty matches everything."""

    def match(self, event: Event | None) -> bool:
        return all(matcher.match(event) for matcher in self)


def use_command_handler_middleware(handler: Any, *middleware: Callable[[Any], Any]) -> Any:
    """Wrap a command handler so that the first middleware runs first."""
    for wrap in reversed(middleware):
        handler = wrap(handler)
    return handler


def use_event_handler_middleware(handler: Any, *middleware: Callable[[Any], Any]) -> Any:
    """Wrap an event handler so that the first middleware runs first."""
    for wrap in reversed(middleware):
        handler = wrap(handler)
    return handler