"""Commands, event data and logging helpers of the guest list domain."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from typing import Any, ClassVar

from horizonkit.eventing import NIL_ID, Event

logger = logging.getLogger(__name__)

INVITATION_AGGREGATE_TYPE = "Invitation"

CREATE_INVITE_COMMAND = "CreateInvite"
ACCEPT_INVITE_COMMAND = "AcceptInvite"
DECLINE_INVITE_COMMAND = "DeclineInvite"
CONFIRM_INVITE_COMMAND = "ConfirmInvite"
DENY_INVITE_COMMAND = "DenyInvite"

INVITE_CREATED_EVENT = "InviteCreated"
INVITE_ACCEPTED_EVENT = "InviteAccepted"
INVITE_DECLINED_EVENT = "InviteDeclined"
INVITE_CONFIRMED_EVENT = "InviteConfirmed"
INVITE_DENIED_EVENT = "InviteDenied"


@dataclass(frozen=True)
class _InviteCommand:
    aggregate_type: ClassVar[str] = INVITATION_AGGREGATE_TYPE
    command_type: ClassVar[str] = ""

    id: uuid.UUID = NIL_ID

    @property
    def aggregate_id(self) -> uuid.UUID:
        return self.id


@dataclass(frozen=True)
class CreateInvite(_InviteCommand):
    """Creates an invite for a named guest."""

    command_type: ClassVar[str] = CREATE_INVITE_COMMAND
    name: str = ""
    age: int = 0


@dataclass(frozen=True)
class AcceptInvite(_InviteCommand):
    """Accepts an invite."""

    command_type: ClassVar[str] = ACCEPT_INVITE_COMMAND


@dataclass(frozen=True)
class DeclineInvite(_InviteCommand):
    """Declines an invite."""

    command_type: ClassVar[str] = DECLINE_INVITE_COMMAND


@dataclass(frozen=True)
class ConfirmInvite(_InviteCommand):
    """Confirms an accepted invite as booked."""

    command_type: ClassVar[str] = CONFIRM_INVITE_COMMAND


@dataclass(frozen=True)
class DenyInvite(_InviteCommand):
    """Denies booking of an accepted invite."""

    command_type: ClassVar[str] = DENY_INVITE_COMMAND


COMMANDS: dict[str, type[_InviteCommand]] = {
    cls.command_type: cls
    for cls in (CreateInvite, AcceptInvite, DeclineInvite, ConfirmInvite, DenyInvite)
}


@dataclass
class InviteCreatedData:
    """Data of the invite created event."""

    name: str = ""
    age: int = 0


EVENT_DATA: dict[str, type] = {INVITE_CREATED_EVENT: InviteCreatedData}


@dataclass
class _LoggingCommandHandler:
    inner: Any

    def handle_command(self, command: Any) -> Any:
        logger.info("command: %r", command)
        return self.inner.handle_command(command)


def logging_middleware(handler: Any) -> _LoggingCommandHandler:
    """Wrap a command handler so that every command is logged before handling."""
    return _LoggingCommandHandler(handler)


class EventLogger:
    """Event handler that logs every event it sees."""

    handler_type = "logger"

    def handle_event(self, event: Event) -> None:
        """Log the event."""
        logger.info("event: %s", event)