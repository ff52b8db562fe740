import uuid
from datetime import datetime

import pytest

from horizonkit.eventing import EntityNotFoundError, Event
from horizonkit.guestlist_aggregate import InvitationAggregate, InvitationError
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
from horizonkit.guestlist_projectors import (
    GuestList,
    GuestListProjector,
    Invitation,
    InvitationProjector,
    ProjectorError,
    ResponseSaga,
)

NOW = datetime(2017, 7, 10, 23, 0, 0)


def make_event(event_type, aggregate_id, data=None, version=1):
    return Event(
        event_type,
        data,
        NOW,
        aggregate_type=INVITATION_AGGREGATE_TYPE,
        aggregate_id=aggregate_id,
        version=version,
    )


class MemoryRepo:
    def __init__(self):
        self.entities = {}

    def find(self, entity_id):
        try:
            return self.entities[entity_id]
        except KeyError:
            raise EntityNotFoundError(str(entity_id)) from None

    def find_all(self):
        return list(self.entities.values())

    def save(self, entity):
        self.entities[entity.id] = entity


class FailingRepo(MemoryRepo):
    def save(self, entity):
        raise OSError("disk full")


class RecordingHandler:
    def __init__(self):
        self.commands = []

    def handle_command(self, command):
        self.commands.append(command)


# --- InvitationProjector ---------------------------------------------------


def test_invitation_created_sets_identity_and_details():
    guest = uuid.uuid4()
    event = make_event(INVITE_CREATED_EVENT, guest, InviteCreatedData("Athena", 42))
    result = InvitationProjector().project(event, Invitation())
    assert result == Invitation(id=guest, version=1, name="Athena", age=42, status="")
    assert result.entity_id == guest
    assert result.aggregate_version == 1


@pytest.mark.parametrize(
    "event_type, status",
    [
        (INVITE_ACCEPTED_EVENT, "accepted"),
        (INVITE_DECLINED_EVENT, "declined"),
        (INVITE_CONFIRMED_EVENT, "confirmed"),
        (INVITE_DENIED_EVENT, "denied"),
    ],
)
def test_invitation_status_events(event_type, status):
    guest = uuid.uuid4()
    entity = Invitation(id=guest, version=1, name="Hades")
    result = InvitationProjector().project(make_event(event_type, guest), entity)
    assert result.status == status
    assert result.version == 2
    assert result.name == "Hades"


def test_invitation_projector_rejects_wrong_entity():
    event = make_event(INVITE_ACCEPTED_EVENT, uuid.uuid4())
    with pytest.raises(ProjectorError, match="model is of incorrect type"):
        InvitationProjector().project(event, GuestList())


def test_invitation_projector_rejects_invalid_created_data():
    event = make_event(INVITE_CREATED_EVENT, uuid.uuid4(), {"name": "Zeus"})
    entity = Invitation()
    with pytest.raises(ProjectorError, match="invalid event data type"):
        InvitationProjector().project(event, entity)
    assert entity.version == 0


def test_invitation_projector_rejects_unknown_event():
    event = make_event("Unknown", uuid.uuid4())
    with pytest.raises(ProjectorError, match="could not handle event"):
        InvitationProjector().project(event, Invitation())


def test_invitation_projector_type_matches_projected_aggregate():
    projector = InvitationProjector()
    guest = uuid.uuid4()
    result = projector.project(make_event(INVITE_ACCEPTED_EVENT, guest), Invitation(id=guest))
    assert result.status == "accepted"
    assert projector.projector_type == "Invitation"
    assert projector.projector_type == INVITATION_AGGREGATE_TYPE


# --- GuestListProjector ----------------------------------------------------


def test_guest_list_created_on_first_event():
    repo = MemoryRepo()
    event_id = uuid.uuid4()
    GuestListProjector(repo, event_id).handle_event(make_event(INVITE_ACCEPTED_EVENT, uuid.uuid4()))
    stored = repo.find(event_id)
    assert stored == GuestList(id=event_id, num_guests=1, num_accepted=1)


def test_guest_list_counts_responses():
    repo = MemoryRepo()
    event_id = uuid.uuid4()
    projector = GuestListProjector(repo, event_id)
    for event_type in (
        INVITE_ACCEPTED_EVENT,
        INVITE_DECLINED_EVENT,
        INVITE_CONFIRMED_EVENT,
        INVITE_DENIED_EVENT,
    ):
        projector.handle_event(make_event(event_type, uuid.uuid4()))
    stored = repo.find(event_id)
    assert stored.num_guests == stored.num_accepted + stored.num_declined
    assert (stored.num_accepted, stored.num_declined) == (1, 1)
    assert (stored.num_confirmed, stored.num_denied) == (1, 1)


def test_guest_list_rejects_unsupported_event():
    repo = MemoryRepo()
    projector = GuestListProjector(repo, uuid.uuid4())
    with pytest.raises(ProjectorError, match="unsupported event type"):
        projector.handle_event(make_event(INVITE_CREATED_EVENT, uuid.uuid4()))
    assert repo.entities == {}


def test_guest_list_rejects_wrong_stored_entity():
    repo = MemoryRepo()
    event_id = uuid.uuid4()
    repo.entities[event_id] = Invitation(id=event_id)
    with pytest.raises(ProjectorError, match="incorrect entity type"):
        GuestListProjector(repo, event_id).handle_event(make_event(INVITE_ACCEPTED_EVENT, uuid.uuid4()))


def test_guest_list_wraps_save_errors():
    projector = GuestListProjector(FailingRepo(), uuid.uuid4())
    with pytest.raises(ProjectorError, match="could not save: disk full"):
        projector.handle_event(make_event(INVITE_ACCEPTED_EVENT, uuid.uuid4()))


def test_guest_list_handler_type_after_handling():
    repo = MemoryRepo()
    event_id = uuid.uuid4()
    projector = GuestListProjector(repo, event_id)
    projector.handle_event(make_event(INVITE_DECLINED_EVENT, uuid.uuid4()))
    assert repo.find(event_id).num_declined == 1
    assert projector.handler_type == "projector_GuestList"


# --- ResponseSaga ----------------------------------------------------------


def test_saga_confirms_until_limit_then_denies():
    saga = ResponseSaga(2)
    handler = RecordingHandler()
    guests = [uuid.uuid4() for _ in range(3)]
    for guest in guests:
        saga.run_saga(make_event(INVITE_ACCEPTED_EVENT, guest), handler)
    assert handler.commands == [
        ConfirmInvite(id=guests[0]),
        ConfirmInvite(id=guests[1]),
        DenyInvite(id=guests[2]),
    ]
    assert saga.accepted_guests == frozenset(guests[:2])


def test_saga_ignores_repeated_acceptance():
    saga = ResponseSaga(2)
    handler = RecordingHandler()
    guest = uuid.uuid4()
    saga.run_saga(make_event(INVITE_ACCEPTED_EVENT, guest), handler)
    saga.run_saga(make_event(INVITE_ACCEPTED_EVENT, guest), handler)
    assert handler.commands == [ConfirmInvite(id=guest)]


def test_saga_ignores_other_events():
    saga = ResponseSaga(2)
    handler = RecordingHandler()
    saga.run_saga(make_event(INVITE_DECLINED_EVENT, uuid.uuid4()), handler)
    assert handler.commands == []
    assert saga.accepted_guests == frozenset()


def test_saga_type_after_running():
    saga = ResponseSaga(1)
    handler = RecordingHandler()
    guest = uuid.uuid4()
    saga.run_saga(make_event(INVITE_ACCEPTED_EVENT, guest), handler)
    assert handler.commands == [ConfirmInvite(id=guest)]
    assert saga.saga_type == "ResponseSaga"


# --- The whole guest list, wired synchronously -----------------------------


class GuestListDomain:
    def __init__(self, event_id):
        self.aggregates = {}
        self.invitations = MemoryRepo()
        self.guest_lists = MemoryRepo()
        self.invitation_projector = InvitationProjector()
        self.guest_list_projector = GuestListProjector(self.guest_lists, event_id)
        self.saga = ResponseSaga(2)

    def handle_command(self, command):
        aggregate = self.aggregates.setdefault(
            command.aggregate_id, InvitationAggregate(command.aggregate_id, clock=lambda: NOW)
        )
        aggregate.handle_command(command)
        events = aggregate.uncommitted_events()
        aggregate.clear_uncommitted_events()
        for event in events:
            aggregate.apply_event(event)
            aggregate.version = event.version
        for event in events:
            self._dispatch(event)

    def _dispatch(self, event):
        try:
            entity = self.invitations.find(event.aggregate_id)
        except EntityNotFoundError:
            entity = Invitation()
        self.invitations.save(self.invitation_projector.project(event, entity))
        if event.event_type != INVITE_CREATED_EVENT:
            self.guest_list_projector.handle_event(event)
        if event.event_type == INVITE_ACCEPTED_EVENT:
            self.saga.run_saga(event, self)


def test_guest_list_example():
    event_id = uuid.uuid4()
    domain = GuestListDomain(event_id)
    athena, hades, zeus, poseidon = (uuid.uuid4() for _ in range(4))

    domain.handle_command(CreateInvite(id=athena, name="Athena", age=42))
    domain.handle_command(CreateInvite(id=hades, name="Hades"))
    domain.handle_command(CreateInvite(id=zeus, name="Zeus"))
    domain.handle_command(CreateInvite(id=poseidon, name="Poseidon"))

    domain.handle_command(AcceptInvite(id=athena))
    with pytest.raises(InvitationError, match="Athena already accepted"):
        domain.handle_command(DeclineInvite(id=athena))
    domain.handle_command(AcceptInvite(id=hades))
    domain.handle_command(DeclineInvite(id=zeus))
    domain.handle_command(AcceptInvite(id=poseidon))

    lines = sorted(f"{i.name} - {i.status}" for i in domain.invitations.find_all())
    assert lines == [
        "Athena - confirmed",
        "Hades - confirmed",
        "Poseidon - denied",
        "Zeus - declined",
    ]

    guest_list = domain.guest_lists.find(event_id)
    summary = (
        f"guest list: {guest_list.num_guests} invited - {guest_list.num_accepted} accepted, "
        f"{guest_list.num_declined} declined - {guest_list.num_confirmed} confirmed, "
        f"{guest_list.num_denied} denied"
    )
    assert summary == "guest list: 4 invited - 3 accepted, 1 declined - 2 confirmed, 1 denied"