"""Read models, projectors and the response saga of the guest list domain."""

from __future__ import annotations

import threading
import uuid
from dataclasses import dataclass
from typing import Any, ClassVar

from horizonkit.eventing import NIL_ID, EntityNotFoundError, Event
from horizonkit.guestlist_model import (
    INVITATION_AGGREGATE_TYPE,
    INVITE_ACCEPTED_EVENT,
    INVITE_CONFIRMED_EVENT,
    INVITE_CREATED_EVENT,
    INVITE_DECLINED_EVENT,
    INVITE_DENIED_EVENT,
    ConfirmInvite,
    DenyInvite,
    InviteCreatedData,
)

RESPONSE_SAGA_TYPE = "ResponseSaga"


class ProjectorError(ValueError):
    """Raised when an event cannot be projected onto a read model."""


@dataclass
class Invitation:
    """Read model of a single invitation."""

    id: uuid.UUID = NIL_ID
    version: int = 0
    name: str = ""
    age: int = 0
    status: str = ""

    @property
    def entity_id(self) -> uuid.UUID:
        return self.id

    @property
    def aggregate_version(self) -> int:
        return self.version


class InvitationProjector:
    """Projects invitation events onto the Invitation read model."""

    projector_type: ClassVar[str] = INVITATION_AGGREGATE_TYPE

    _STATUSES: ClassVar[dict[str, str]] = {
        INVITE_ACCEPTED_EVENT: "accepted",
        INVITE_DECLINED_EVENT: "declined",
        INVITE_CONFIRMED_EVENT: "confirmed",
        INVITE_DENIED_EVENT: "denied",
    }

    def project(self, event: Event, entity: Any) -> Invitation:
        """Apply an event to an Invitation and bump its version."""
        if not isinstance(entity, Invitation):
            raise ProjectorError("model is of incorrect type")

        if event.event_type == INVITE_CREATED_EVENT:
            data = event.data
            if not isinstance(data, InviteCreatedData):
                raise ProjectorError(f"projector: invalid event data type: {data!r}")
            entity.id = event.aggregate_id
            entity.name = data.name
            entity.age = data.age
        elif event.event_type in self._STATUSES:
            entity.status = self._STATUSES[event.event_type]
        else:
            raise ProjectorError(f"could not handle event: {event}")

        entity.version += 1
        return entity


@dataclass
class GuestList:
    """Read model counting the responses to all invitations of an event."""

    id: uuid.UUID = NIL_ID
    num_guests: int = 0
    num_accepted: int = 0
    num_declined: int = 0
    num_confirmed: int = 0
    num_denied: int = 0

    @property
    def entity_id(self) -> uuid.UUID:
        return self.id


class GuestListProjector:
    """Event handler keeping a GuestList up to date in a repository.

    The repository needs ``find(id)``, raising EntityNotFoundError for a
    missing entity, and ``save(entity)``.
    """

    handler_type: ClassVar[str] = "projector_GuestList"

    def __init__(self, repo: Any, event_id: uuid.UUID) -> None:
        self.repo = repo
        self.event_id = event_id
        self._lock = threading.Lock()

    def handle_event(self, event: Event) -> None:
        """Count the response carried by the event and save the guest list."""
        with self._lock:
            try:
                guest_list = self.repo.find(self.event_id)
            except EntityNotFoundError:
                guest_list = GuestList(id=self.event_id)
            else:
                if not isinstance(guest_list, GuestList):
                    raise ProjectorError("projector: incorrect entity type")

            if event.event_type == INVITE_ACCEPTED_EVENT:
                guest_list.num_accepted += 1
                guest_list.num_guests += 1
            elif event.event_type == INVITE_DECLINED_EVENT:
                guest_list.num_declined += 1
                guest_list.num_guests += 1
            elif event.event_type == INVITE_CONFIRMED_EVENT:
                guest_list.num_confirmed += 1
            elif event.event_type == INVITE_DENIED_EVENT:
                guest_list.num_denied += 1
            else:
                raise ProjectorError(f"projector: unsupported event type: {event}")

            try:
                self.repo.save(guest_list)
            except Exception as exc:
                raise ProjectorError(f"projector: could not save: {exc}") from exc


class ResponseSaga:
    """Confirms accepted invites until the guest limit is reached, then denies."""

    saga_type: ClassVar[str] = RESPONSE_SAGA_TYPE

    def __init__(self, guest_limit: int) -> None:
        self.guest_limit = guest_limit
        self._accepted: set[uuid.UUID] = set()
        self._lock = threading.Lock()

    @property
    def accepted_guests(self) -> frozenset[uuid.UUID]:
        with self._lock:
            return frozenset(self._accepted)

    def run_saga(self, event: Event, handler: Any) -> Any:
        """React to an accepted invite by issuing a confirm or deny command."""
        if event.event_type != INVITE_ACCEPTED_EVENT:
            return None

        guest = event.aggregate_id
        with self._lock:
            if guest in self._accepted:
                return None
            if len(self._accepted) >= self.guest_limit:
                command: Any = DenyInvite(id=guest)
            else:
                self._accepted.add(guest)
                command = ConfirmInvite(id=guest)

        return handler.handle_command(command)