"""The event sourced todo list aggregate and its read model projector."""

from __future__ import annotations

import uuid
from collections.abc import Callable, Iterable
from datetime import datetime
from typing import Any

from horizonkit.eventing import AggregateBase, Event
from horizonkit.todo_model import (
    AGGREGATE_TYPE,
    CREATED,
    DELETED,
    ITEM_ADDED,
    ITEM_CHECKED,
    ITEM_DESCRIPTION_SET,
    ITEM_REMOVED,
    AddItem,
    CheckAllItems,
    CheckItem,
    Create,
    Delete,
    ItemAddedData,
    ItemCheckedData,
    ItemDescriptionSetData,
    ItemRemovedData,
    RemoveCompletedItems,
    RemoveItem,
    SetItemDescription,
    TodoItem,
    TodoList,
)

Clock = Callable[[], datetime]


def _local_now() -> datetime:
    return datetime.now().astimezone()


class TodoError(ValueError):
    """Raised when a todo command or event cannot be handled."""


class ProjectionError(TodoError):
    """Raised when an event cannot be projected; ``entity`` is left untouched."""

    def __init__(self, message: str, entity: Any = None) -> None:
        super().__init__(message)
        self.entity = entity


class TodoAggregate(AggregateBase):
    """Aggregate guarding the state of one todo list."""

    def __init__(
        self,
        id: uuid.UUID,
        *,
        created: bool = False,
        next_item_id: int = 0,
        items: Iterable[TodoItem] = (),
        clock: Clock = _local_now,
    ) -> None:
        super().__init__(AGGREGATE_TYPE, id)
        self.created = created
        self.next_item_id = next_item_id
        self.items: list[TodoItem] = list(items)
        self.clock = clock

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TodoAggregate):
            return NotImplemented
        return self._state() == other._state()

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return (
            f"TodoAggregate(id={self.id!r}, version={self.version}, created={self.created}, "
            f"next_item_id={self.next_item_id}, items={self.items!r})"
        )

    def _state(self) -> tuple:
        return (
            self.aggregate_type,
            self.id,
            self.version,
            self.created,
            self.next_item_id,
            self.items,
            self.uncommitted_events(),
        )

    def _find(self, item_id: int) -> TodoItem:
        for item in self.items:
            if item.id == item_id:
                return item
        raise TodoError(f"item does not exist: {item_id}")

    def handle_command(self, command: Any) -> None:
        """Validate a command and append the resulting events."""
        if isinstance(command, Create):
            if self.created:
                raise TodoError("already created")
        elif not self.created:
            raise TodoError("not created")

        match command:
            case Create():
                self.append_event(CREATED, None, self.clock())
            case Delete():
                self.append_event(DELETED, None, self.clock())
            case AddItem():
                self.append_event(
                    ITEM_ADDED,
                    ItemAddedData(item_id=self.next_item_id, description=command.description),
                    self.clock(),
                )
            case RemoveItem():
                self._find(command.item_id)
                self.append_event(ITEM_REMOVED, ItemRemovedData(item_id=command.item_id), self.clock())
            case RemoveCompletedItems():
                for item in self.items:
                    if item.completed:
                        self.append_event(ITEM_REMOVED, ItemRemovedData(item_id=item.id), self.clock())
            case SetItemDescription():
                if self._find(command.item_id).description == command.description:
                    return
                self.append_event(
                    ITEM_DESCRIPTION_SET,
                    ItemDescriptionSetData(item_id=command.item_id, description=command.description),
                    self.clock(),
                )
            case CheckItem():
                if self._find(command.item_id).completed == command.checked:
                    return
                self.append_event(
                    ITEM_CHECKED,
                    ItemCheckedData(item_id=command.item_id, checked=command.checked),
                    self.clock(),
                )
            case CheckAllItems():
                for item in self.items:
                    if item.completed != command.checked:
                        self.append_event(
                            ITEM_CHECKED,
                            ItemCheckedData(item_id=item.id, checked=command.checked),
                            self.clock(),
                        )
            case _:
                command_type = getattr(command, "command_type", type(command).__name__)
                raise TodoError(f"could not handle command: {command_type}")

    def apply_event(self, event: Event) -> None:
        """Update the aggregate state from an event."""
        data = event.data
        if event.event_type == CREATED:
            self.created = True
        elif event.event_type == DELETED:
            self.created = False
        elif event.event_type == ITEM_ADDED:
            if not isinstance(data, ItemAddedData):
                raise TodoError("invalid event data")
            self.items.append(TodoItem(id=data.item_id, description=data.description))
            self.next_item_id += 1
        elif event.event_type == ITEM_REMOVED:
            if not isinstance(data, ItemRemovedData):
                raise TodoError("invalid event data")
            self.items = _without_first(self.items, data.item_id)
        elif event.event_type == ITEM_DESCRIPTION_SET:
            if not isinstance(data, ItemDescriptionSetData):
                raise TodoError("invalid event data")
            for item in self.items:
                if item.id == data.item_id:
                    item.description = data.description
        elif event.event_type == ITEM_CHECKED:
            if not isinstance(data, ItemCheckedData):
                raise TodoError("invalid event data")
            for item in self.items:
                if item.id == data.item_id:
                    item.completed = data.checked
        else:
            raise TodoError(f"could not apply event: {event.event_type}")


def _without_first(items: list[TodoItem], item_id: int) -> list[TodoItem]:
    for index, item in enumerate(items):
        if item.id == item_id:
            return items[:index] + items[index + 1 :]
    return items


class TodoProjector:
    """Projects todo list events onto the TodoList read model."""

    projector_type = AGGREGATE_TYPE

    def __init__(self, clock: Clock = _local_now) -> None:
        self.clock = clock

    def project(self, event: Event, entity: Any) -> TodoList | None:
        """Apply an event to a TodoList; returns None when it should be deleted."""
        if not isinstance(entity, TodoList):
            raise ProjectionError("model is of incorrect type")
        model = entity
        data = event.data

        if event.event_type == CREATED:
            model.id = event.aggregate_id
            model.items = []
            model.created_at = self.clock()
        elif event.event_type == DELETED:
            return None
        elif event.event_type == ITEM_ADDED:
            if not isinstance(data, ItemAddedData):
                raise ProjectionError("invalid event data")
            model.items.append(TodoItem(id=data.item_id, description=data.description))
        elif event.event_type == ITEM_REMOVED:
            if not isinstance(data, ItemRemovedData):
                raise ProjectionError("invalid event data")
            model.items = _without_first(model.items, data.item_id)
        elif event.event_type == ITEM_DESCRIPTION_SET:
            if not isinstance(data, ItemDescriptionSetData):
                raise ProjectionError("invalid event data")
            for item in model.items:
                if item.id == data.item_id:
                    item.description = data.description
        elif event.event_type == ITEM_CHECKED:
            if not isinstance(data, ItemCheckedData):
                raise ProjectionError("invalid event data")
            for item in model.items:
                if item.id == data.item_id:
                    item.completed = data.checked
        else:
            raise ProjectionError(f"could not project event: {event.event_type}", entity=model)

        model.version += 1
        model.updated_at = self.clock()
        return model