"""The invitation aggregate that guards accepting and declining invites."""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable
from datetime import datetime
from typing import Any

from horizonkit.eventing import AggregateBase, Event
from horizonkit.guestlist_model import (
    INVITATION_AGGREGATE_TYPE,
    INVITE_ACCEPTED_EVENT,
    INVITE_CONFIRMED_EVENT,
    INVITE_CREATED_EVENT,
    INVITE_DECLINED_EVENT,
    INVITE_DENIED_EVENT,
    AcceptInvite,
    ConfirmInvite,
    CreateInvite,
    DeclineInvite,
    DenyInvite,
    InviteCreatedData,
)

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


class InvitationError(ValueError):
    """Raised when an invitation command is not allowed."""


class InvitationAggregate(AggregateBase):
    """Aggregate root ensuring an invite is accepted or declined, never both."""

    def __init__(self, id: uuid.UUID, *, clock: Clock = datetime.now) -> None:
        super().__init__(INVITATION_AGGREGATE_TYPE, id)
        self.clock = clock
        self.name = ""
        self.age = 0
        self.accepted = False
        self.declined = False
        self.confirmed = False
        self.denied = False

    def _require_existing(self) -> None:
        if not self.name:
            raise InvitationError("invitee does not exist")

    def handle_command(self, command: Any) -> None:
        """Validate a command and append the resulting event, if any."""
        match command:
            case CreateInvite():
                self.append_event(
                    INVITE_CREATED_EVENT,
                    InviteCreatedData(command.name, command.age),
                    self.clock(),
                )
            case AcceptInvite():
                self._require_existing()
                if self.declined:
                    raise InvitationError(f"{self.name} already declined")
                if not self.accepted:
                    self.append_event(INVITE_ACCEPTED_EVENT, None, self.clock())
            case DeclineInvite():
                self._require_existing()
                if self.accepted:
                    raise InvitationError(f"{self.name} already accepted")
                if not self.declined:
                    self.append_event(INVITE_DECLINED_EVENT, None, self.clock())
            case ConfirmInvite():
                self._require_existing()
                if not self.accepted or self.declined:
                    raise InvitationError("only accepted invites can be confirmed")
                self.append_event(INVITE_CONFIRMED_EVENT, None, self.clock())
            case DenyInvite():
                self._require_existing()
                if not self.accepted or self.declined:
                    raise InvitationError("only accepted invites can be denied")
                self.append_event(INVITE_DENIED_EVENT, None, self.clock())
            case _:
                raise InvitationError("couldn't handle command")

    def apply_event(self, event: Event) -> None:
        """Update the aggregate state from an event; unknown events are ignored."""
        if event.event_type == INVITE_CREATED_EVENT:
            if isinstance(event.data, InviteCreatedData):
                self.name = event.data.name
                self.age = event.data.age
            else:
                logger.warning("invalid event data type: %r", event.data)
        elif event.event_type == INVITE_ACCEPTED_EVENT:
            self.accepted = True
        elif event.event_type == INVITE_DECLINED_EVENT:
            self.declined = True
        elif event.event_type == INVITE_CONFIRMED_EVENT:
            self.confirmed = True
        elif event.event_type == INVITE_DENIED_EVENT:
            self.denied = True