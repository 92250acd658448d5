"""Tests for the rent request state machine."""

import pytest

from core.exceptions import InvalidStateError
from models.enums import RentRequestStatus as S
from policy.rent_request_policy import RequestActor
from services.rent_request_machine import ALLOWED_TRANSITIONS, plan_transition


@pytest.mark.unit
def test_accept_occupies_house_and_rejects_siblings():
    """Accepting a pending request occupies the house and rejects competitors."""
    plan = plan_transition(S.PENDING, S.ACCEPTED, RequestActor.LANDLORD)

    assert plan.occupy_house is True
    assert plan.reject_siblings is True
    assert plan.release_if_occupant is False
    assert plan.previous == S.PENDING
    assert plan.target == S.ACCEPTED


@pytest.mark.unit
@pytest.mark.parametrize("target", [S.REJECTED, S.CANCELLED])
def test_leaving_pending_never_releases(target):
    """A pending request never held the house, so closing it releases nothing."""
    plan = plan_transition(S.PENDING, target, RequestActor.ADMIN)

    assert plan.release_if_occupant is False
    assert plan.occupy_house is False


@pytest.mark.unit
def test_cancelling_accepted_request_releases_occupant():
    """Cancelling an accepted request asks for the house to be released."""
    plan = plan_transition(S.ACCEPTED, S.CANCELLED, RequestActor.TENANT)

    assert plan.release_if_occupant is True
    assert plan.occupy_house is False


@pytest.mark.unit
@pytest.mark.parametrize(
    "current,target",
    [
        (S.REJECTED, S.ACCEPTED),
        (S.ACCEPTED, S.ACCEPTED),
        (S.ACCEPTED, S.REJECTED),
        (S.ACCEPTED, S.PENDING),
        (S.CANCELLED, S.ACCEPTED),
        (S.PENDING, S.PENDING),
    ],
)
def test_illegal_moves_raise_invalid_state(current, target):
    """Moves outside the transition table are refused."""
    with pytest.raises(InvalidStateError):
        plan_transition(current, target, RequestActor.ADMIN)


@pytest.mark.unit
@pytest.mark.parametrize(
    "current,target",
    [(S.PENDING, S.REJECTED), (S.REJECTED, S.CANCELLED), (S.PENDING, S.CANCELLED)],
)
def test_only_cancelling_an_accepted_request_touches_the_house(current, target):
    """Rejections and cancellations of unaccepted requests leave occupancy alone."""
    plan = plan_transition(current, target, RequestActor.ADMIN)

    assert plan.release_if_occupant is False
    assert plan.occupy_house is False
    assert plan.reject_siblings is False
    assert plan.check_duplicate_pending is False


@pytest.mark.unit
@pytest.mark.parametrize("actor", [RequestActor.LANDLORD, RequestActor.TENANT])
def test_revert_to_pending_is_admin_only(actor):
    """Only an admin may revert a cancelled request to pending."""
    with pytest.raises(InvalidStateError):
        plan_transition(S.CANCELLED, S.PENDING, actor)


@pytest.mark.unit
def test_admin_revert_checks_for_duplicates():
    """An admin revert must re-run the duplicate pending check."""
    plan = plan_transition(S.CANCELLED, S.PENDING, RequestActor.ADMIN)

    assert plan.check_duplicate_pending is True


@pytest.mark.unit
def test_every_status_has_a_transition_entry():
    """Every status appears as a source in the transition table."""
    assert set(ALLOWED_TRANSITIONS) == set(S)
