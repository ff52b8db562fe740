# horizonkit

Building blocks for CQRS and event-sourced applications in plain Python,
using only the standard library.

## Modules

### `horizonkit.eventing`

- `Event` – a frozen dataclass with `event_type`, `data`, `timestamp`,
  `aggregate_type`, `aggregate_id` and `version`. `str(event)` gives
  `"<event_type>@<version>"`.
- `AggregateBase(aggregate_type, id)` – records new events with
  `append_event(event_type, data, timestamp)`, each one numbered after the
  aggregate's current version and the events already pending; read them with
  `uncommitted_events()` and drop them with `clear_uncommitted_events()`.
- Event matchers sharing `EventMatcher.match(event)`:
  - `MatchEvents(*event_types)` and `MatchAggregates(*aggregate_types)` match
    any of the given types; a `None` event never matches.
  - `MatchAny(*matchers)` matches when any contained matcher does.
  - `MatchAll(*matchers)` matches when all contained matchers do; an empty
    `MatchAll()` matches everything.
- `use_command_handler_middleware(handler, *middleware)` and
  `use_event_handler_middleware(handler, *middleware)` wrap a handler so that
  the first middleware given runs first. A middleware is any callable that
  takes a handler and returns a handler.
- `EntityNotFoundError` – raised by read repositories for a missing entity.

```python
from horizonkit.eventing import MatchAggregates, MatchAll, MatchEvents

matcher = MatchAll(MatchEvents("todolist:created"), MatchAggregates("todolist"))
print(matcher.match(None))  # False
```

### `horizonkit.httpapi`

Two WSGI application factories:

- `command_app(handler, command_factory)` accepts `POST` requests with a JSON
  object as body, passes the decoded object to `command_factory` and the
  resulting command to `handler.handle_command(command)`. It answers 200 with
  an empty body on success, 405 for other methods and 400 when the body cannot
  be read or decoded, the command cannot be built, or handling fails.
- `query_app(repo)` answers `GET` requests. A path ending in `/` returns
  `repo.find_all()`; otherwise the last path segment is parsed as a UUID and
  `repo.find(id)` is returned. Objects are encoded with their `to_dict()`
  method, as dataclass fields, or as strings for UUIDs and dates. It answers
  405 for other methods, 400 for an unparsable ID, 404 when the repository
  raises `EntityNotFoundError` and 500 for other failures.

```python
from wsgiref.simple_server import make_server

from horizonkit.httpapi import command_app
from horizonkit.todo_model import AddItem

app = command_app(my_command_handler, AddItem.from_dict)
make_server("localhost", 8080, app).serve_forever()
```

### `horizonkit.todo_model` and `horizonkit.todo_domain`

A todo-list domain.

- Commands: `Create`, `Delete`, `AddItem`, `RemoveItem`,
  `RemoveCompletedItems`, `SetItemDescription`, `CheckItem` and
  `CheckAllItems`. Each has `from_dict(payload)` reading the JSON keys `id`,
  `desc`, `item_id` and `checked`; `create_command(command_type)` returns an
  empty command of a registered type and raises `UnknownCommandError`
  otherwise.
- Event data: `ItemAddedData`, `ItemRemovedData`, `ItemDescriptionSetData`
  and `ItemCheckedData`.
- Read model: `TodoItem` and `TodoList`, with `to_dict()` and compact
  `to_json()` (times in RFC 3339 form).
- `TodoAggregate(id, created=..., next_item_id=..., items=..., clock=...)` –
  `handle_command(command)` validates a command and appends events;
  `apply_event(event)` updates its state. Both raise `TodoError`.
- `TodoProjector(clock=...)` – `project(event, entity)` updates a `TodoList`
  and bumps its version, returns `None` for a deleted list, and raises
  `ProjectionError` for unknown events or wrong data.

```python
import uuid

from horizonkit.todo_domain import TodoAggregate, TodoProjector
from horizonkit.todo_model import AddItem, Create, TodoList

aggregate = TodoAggregate(uuid.uuid4())
aggregate.handle_command(Create(id=aggregate.id))
for event in aggregate.uncommitted_events():
    aggregate.apply_event(event)
aggregate.clear_uncommitted_events()

aggregate.handle_command(AddItem(id=aggregate.id, description="write docs"))
model = TodoList()
projector = TodoProjector()
for event in aggregate.uncommitted_events():
    model = projector.project(event, model)
```

### `horizonkit.guestlist_model`, `horizonkit.guestlist_aggregate` and `horizonkit.guestlist_projectors`

An invitation and guest-list domain.

- Commands `CreateInvite`, `AcceptInvite`, `DeclineInvite`, `ConfirmInvite`
  and `DenyInvite`; event data `InviteCreatedData`.
- `logging_middleware(handler)` logs each command before handing it on;
  `EventLogger.handle_event(event)` logs each event. Both use the standard
  `logging` module.
- `InvitationAggregate(id, clock=...)` lets an invite be accepted or declined
  but not both, and only confirms or denies accepted invites; refused
  commands raise `InvitationError`.
- `Invitation` and `InvitationProjector.project(event, entity)` keep the
  status of one invitation.
- `GuestList` and `GuestListProjector(repo, event_id)` count responses;
  `handle_event(event)` loads the list with `repo.find(event_id)` (starting a
  new one on `EntityNotFoundError`) and stores it with `repo.save(list)`.
- `ResponseSaga(guest_limit).run_saga(event, handler)` answers each newly
  accepted invite with `ConfirmInvite` until the limit is reached and with
  `DenyInvite` after that.

A repository for these classes is any object with `find`, `find_all` and
`save`, for example:

```python
from horizonkit.eventing import EntityNotFoundError


class MemoryRepo:
    def __init__(self):
        self.items = {}

    def find(self, entity_id):
        try:
            return self.items[entity_id]
        except KeyError:
            raise EntityNotFoundError(entity_id) from None

    def find_all(self):
        return list(self.items.values())

    def save(self, entity):
        self.items[entity.id] = entity
```

### `horizonkit.coverage`

Merges Go-style `.coverprofile` files. `merge_profiles(root, out)` walks
`root`, sums the counts of identical blocks, writes the sorted lines to `out`
and returns them; it raises `CoverageError` on unreadable or malformed input.

```
horizonkit-coverage root [out]
```

`out` defaults to `coverage.out`. Without arguments, or with more than two,
the command prints its usage and exits with status 1.

## What it does not do

horizonkit holds the pieces an event-sourced application is built from, not
the infrastructure around them. It has no event store, no event bus, no
command bus, no persistent or in-memory repository and no outbox; callers
supply these (the domains only expect `handle_command`, `handle_event`,
`find`, `find_all` and `save`). The HTTP adapters are WSGI applications and
need a WSGI server to run; there is no streaming of events to browsers.

## Installation and tests

```
pip install .
pip install .[test]
pytest
```