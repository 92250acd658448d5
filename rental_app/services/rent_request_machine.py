"""Rent request state machine.

pending   -> accepted | rejected | cancelled
accepted  -> cancelled
rejected  -> cancelled
cancelled -> pending      (admin revert only)

An accepted request is only undone by cancelling it, which frees the house.

Who may ask for which target status lives in ``policy.rent_request_policy``;
this module only answers whether a move is legal and what it does to the house.
"""
from dataclasses import dataclass

from core.exceptions import InvalidStateError
from models.enums import RentRequestStatus
from policy.rent_request_policy import RequestActor

ALLOWED_TRANSITIONS = {
    RentRequestStatus.PENDING: frozenset(
        {
            RentRequestStatus.ACCEPTED,
            RentRequestStatus.REJECTED,
            RentRequestStatus.CANCELLED,
        }
    ),
    RentRequestStatus.ACCEPTED: frozenset({RentRequestStatus.CANCELLED}),
    RentRequestStatus.REJECTED: frozenset({RentRequestStatus.CANCELLED}),
    RentRequestStatus.CANCELLED: frozenset({RentRequestStatus.PENDING}),
}

ADMIN_ONLY = frozenset({(RentRequestStatus.CANCELLED, RentRequestStatus.PENDING)})


@dataclass(frozen=True)
class TransitionPlan:
    previous: RentRequestStatus
    target: RentRequestStatus
    occupy_house: bool = False
    reject_siblings: bool = False
    release_if_occupant: bool = False
    check_duplicate_pending: bool = False


def plan_transition(
    current: RentRequestStatus, target: RentRequestStatus, actor: RequestActor
) -> TransitionPlan:
    if target not in ALLOWED_TRANSITIONS[current]:
        raise InvalidStateError(
            f"Cannot change rent request status from {current.value} to {target.value}."
        )
    if (current, target) in ADMIN_ONLY and actor != RequestActor.ADMIN:
        raise InvalidStateError("Only an admin can revert a rent request to pending.")

    if target == RentRequestStatus.ACCEPTED:
        return TransitionPlan(current, target, occupy_house=True, reject_siblings=True)
    if target == RentRequestStatus.CANCELLED:
        return TransitionPlan(
            current,
            target,
            release_if_occupant=current == RentRequestStatus.ACCEPTED,
        )
    if target == RentRequestStatus.REJECTED:
        return TransitionPlan(current, target)
    return TransitionPlan(current, target, check_duplicate_pending=True)
