"""Commands, event data and the read model of the todo list domain."""

from __future__ import annotations

import json
import uuid
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field, fields
from datetime import datetime, timezone
from typing import Any, ClassVar

from horizonkit.eventing import NIL_ID

AGGREGATE_TYPE = "todolist"

CREATE_COMMAND = "todolist:create"
DELETE_COMMAND = "todolist:delete"
ADD_ITEM_COMMAND = "todolist:add_item"
REMOVE_ITEM_COMMAND = "todolist:remove_item"
REMOVE_COMPLETED_ITEMS_COMMAND = "todolist:remove_completed_items"
SET_ITEM_DESCRIPTION_COMMAND = "todolist:set_item_description"
CHECK_ITEM_COMMAND = "todolist:check_item"
CHECK_ALL_ITEMS_COMMAND = "todolist:check_all_items"

CREATED = "todolist:created"
DELETED = "todolist:deleted"
ITEM_ADDED = "todolist:item_added"
ITEM_REMOVED = "todolist:item_removed"
ITEM_DESCRIPTION_SET = "todolist:item_description_set"
ITEM_CHECKED = "todolist:item_checked"

ZERO_TIME = datetime(1, 1, 1, tzinfo=timezone.utc)


class UnknownCommandError(ValueError):
    """Raised when no command is registered for a command type."""


def _parse_uuid(value: Any) -> uuid.UUID:
    if not isinstance(value, str):
        raise ValueError(f"expected a UUID string, got {type(value).__name__}")
    return uuid.UUID(value)


def _parse_int(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"expected an integer, got {type(value).__name__}")
    return value


def _parse_bool(value: Any) -> bool:
    if not isinstance(value, bool):
        raise ValueError(f"expected a boolean, got {type(value).__name__}")
    return value


def _parse_str(value: Any) -> str:
    if not isinstance(value, str):
        raise ValueError(f"expected a string, got {type(value).__name__}")
    return value


def _json_field(key: str, parse: Callable[[Any], Any], default: Any) -> Any:
    return field(default=default, metadata={"json": key, "parse": parse})


def _id_field() -> Any:
    return _json_field("id", _parse_uuid, NIL_ID)


@dataclass
class _TodoCommand:
    aggregate_type: ClassVar[str] = AGGREGATE_TYPE
    command_type: ClassVar[str] = ""

    @property
    def aggregate_id(self) -> uuid.UUID:
        return self.id  # type: ignore[attr-defined]

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> _TodoCommand:
        """Build the command from decoded JSON; unknown keys are ignored."""
        values = {}
        for f in fields(cls):
            key = f.metadata.get("json", f.name)
            if key in payload:
                try:
                    values[f.name] = f.metadata["parse"](payload[key])
                except ValueError as exc:
                    raise ValueError(f"invalid value for {key!r}: {exc}") from exc
        return cls(**values)


@dataclass
class Create(_TodoCommand):
    """Creates a new todo list."""

    command_type: ClassVar[str] = CREATE_COMMAND
    id: uuid.UUID = _id_field()


@dataclass
class Delete(_TodoCommand):
    """Deletes a todo list."""

    command_type: ClassVar[str] = DELETE_COMMAND
    id: uuid.UUID = _id_field()


@dataclass
class AddItem(_TodoCommand):
    """Adds a todo item."""

    command_type: ClassVar[str] = ADD_ITEM_COMMAND
    id: uuid.UUID = _id_field()
    description: str = _json_field("desc", _parse_str, "")


@dataclass
class RemoveItem(_TodoCommand):
    """Removes a todo item."""

    command_type: ClassVar[str] = REMOVE_ITEM_COMMAND
    id: uuid.UUID = _id_field()
    item_id: int = _json_field("item_id", _parse_int, 0)


@dataclass
class RemoveCompletedItems(_TodoCommand):
    """Removes all completed todo items."""

    command_type: ClassVar[str] = REMOVE_COMPLETED_ITEMS_COMMAND
    id: uuid.UUID = _id_field()


@dataclass
class SetItemDescription(_TodoCommand):
    """Sets the description of a todo item."""

    command_type: ClassVar[str] = SET_ITEM_DESCRIPTION_COMMAND
    id: uuid.UUID = _id_field()
    item_id: int = _json_field("item_id", _parse_int, 0)
    description: str = _json_field("desc", _parse_str, "")


@dataclass
class CheckItem(_TodoCommand):
    """Sets the checked status of a todo item."""

    command_type: ClassVar[str] = CHECK_ITEM_COMMAND
    id: uuid.UUID = _id_field()
    item_id: int = _json_field("item_id", _parse_int, 0)
    checked: bool = _json_field("checked", _parse_bool, False)


@dataclass
class CheckAllItems(_TodoCommand):
    """Sets the checked status of all todo items."""

    command_type: ClassVar[str] = CHECK_ALL_ITEMS_COMMAND
    id: uuid.UUID = _id_field()
    checked: bool = _json_field("checked", _parse_bool, False)


COMMANDS: dict[str, type[_TodoCommand]] = {
    cls.command_type: cls
    for cls in (
        Create,
        Delete,
        AddItem,
        RemoveItem,
        RemoveCompletedItems,
        SetItemDescription,
        CheckItem,
        CheckAllItems,
    )
}


def create_command(command_type: str) -> _TodoCommand:
    """Return a new, empty command of the given type."""
    try:
        return COMMANDS[command_type]()
    except KeyError:
        raise UnknownCommandError(f"command not registered: {command_type}") from None


@dataclass
class ItemAddedData:
    """Data of the item added event."""

    item_id: int = 0
    description: str = ""


@dataclass
class ItemRemovedData:
    """Data of the item removed event."""

    item_id: int = 0


@dataclass
class ItemDescriptionSetData:
    """Data of the item description set event."""

    item_id: int = 0
    description: str = ""


@dataclass
class ItemCheckedData:
    """Data of the item checked event."""

    item_id: int = 0
    checked: bool = False


EVENT_DATA: dict[str, type] = {
    ITEM_ADDED: ItemAddedData,
    ITEM_REMOVED: ItemRemovedData,
    ITEM_DESCRIPTION_SET: ItemDescriptionSetData,
    ITEM_CHECKED: ItemCheckedData,
}


def _format_time(moment: datetime) -> str:
    """Format a time like RFC 3339 with trimmed fractional seconds."""
    if moment.tzinfo is None:
        moment = moment.astimezone()
    text = moment.strftime("%Y-%m-%dT%H:%M:%S")
    if moment.microsecond:
        text += "." + f"{moment.microsecond:06d}".rstrip("0")
    offset = moment.utcoffset()
    total = int(offset.total_seconds()) if offset is not None else 0
    if total == 0:
        return text + "Z"
    sign = "+" if total > 0 else "-"
    minutes = abs(total) // 60
    return f"{text}{sign}{minutes // 60:02d}:{minutes % 60:02d}"


@dataclass
class TodoItem:
    """An item of a todo list that can be completed."""

    id: int = 0
    description: str = ""
    completed: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "desc": self.description, "completed": self.completed}


@dataclass
class TodoList:
    """Read model of a todo list."""

    id: uuid.UUID = NIL_ID
    version: int = 0
    items: list[TodoItem] = field(default_factory=list)
    created_at: datetime = ZERO_TIME
    updated_at: datetime = ZERO_TIME

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON-ready representation of the list."""
        return {
            "id": str(self.id),
            "version": self.version,
            "items": [item.to_dict() for item in self.items],
            "created_at": _format_time(self.created_at),
            "updated_at": _format_time(self.updated_at),
        }

    def to_json(self) -> str:
        """Return the list as compact JSON."""
        return json.dumps(self.to_dict(), separators=(",", ":"))