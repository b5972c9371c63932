"""Lifecycle states of payment requests, proposals, answers and consultations."""

from __future__ import annotations

from enum import Enum
from typing import TypeVar


class _StateStatus(Enum):
    """An enumeration whose members carry a numeric state and a status name."""

    def __init__(self, state: int, status: str) -> None:
        self.state = state
        self.status = status


class PaymentRequestStatus(_StateStatus):
    """States a community fund payment request can be in."""

    PENDING = (0, "pending")
    ACCEPTED = (1, "accepted")
    REJECTED = (2, "rejected")
    EXPIRED = (3, "expired")
    PAID = (6, "paid")


class ProposalStatus(_StateStatus):
    """States a community fund proposal can be in."""

    PENDING = (0, "pending")
    ACCEPTED = (1, "accepted")
    REJECTED = (2, "rejected")
    EXPIRED = (3, "expired")
    PENDING_FUNDS = (4, "pending_funds")
    PENDING_VOTING_PREQ = (5, "pending_voting_preq")
    ACCEPTED_EXPIRED = (16, "accepted_expired")


class AnswerStatus(_StateStatus):
    """States a consultation answer can be in."""

    PENDING = (0, "waiting for support")
    SUPPORTED = (1, "found support")
    PASSED = (7, "passed")


class ConsultationStatus(_StateStatus):
    """States a DAO consultation can be in."""

    PENDING = (0, "waiting for support")
    VOTING_STARTED = (1, "voting started")
    EXPIRED = (3, "expired")
    PASSED = (7, "passed")
    REFLECTION = (8, "reflection")
    FOUND_SUPPORT = (9, "found support")


_S = TypeVar("_S", bound=_StateStatus)


def _by_state(kind: type[_S], state: int) -> _S:
    for member in kind:
        if member.state == state:
            return member
    raise ValueError(f"{kind.__name__} state does not exist: {state}")


def _by_status(kind: type[_S], status: str) -> _S:
    for member in kind:
        if member.status == status:
            return member
    raise ValueError(f"{kind.__name__} status does not exist: {status}")


def _has_state(kind: type[_StateStatus], state: int) -> bool:
    return any(member.state == state for member in kind)


def _has_status(kind: type[_StateStatus], status: str) -> bool:
    return any(member.status == status for member in kind)


def get_payment_request_status_by_state(state: int) -> PaymentRequestStatus:
    """The payment request status with ``state``; ValueError if unknown."""
    return _by_state(PaymentRequestStatus, state)


def get_payment_request_status_by_status(status: str) -> PaymentRequestStatus:
    """The payment request status named ``status``; ValueError if unknown."""
    return _by_status(PaymentRequestStatus, status)


def is_payment_request_status_valid(status: str) -> bool:
    return _has_status(PaymentRequestStatus, status)


def is_payment_request_state_valid(state: int) -> bool:
    return _has_state(PaymentRequestStatus, state)


def get_proposal_status_by_state(state: int) -> ProposalStatus:
    """The proposal status with ``state``; ValueError if unknown."""
    return _by_state(ProposalStatus, state)


def get_proposal_status_by_status(status: str) -> ProposalStatus:
    """The proposal status named ``status``; ValueError if unknown."""
    return _by_status(ProposalStatus, status)


def is_proposal_status_valid(status: str) -> bool:
    return _has_status(ProposalStatus, status)


def is_proposal_state_valid(state: int) -> bool:
    return _has_state(ProposalStatus, state)


def get_answer_status_by_state(state: int) -> AnswerStatus:
    """The answer status with ``state``; ValueError if unknown."""
    return _by_state(AnswerStatus, state)


def get_answer_status_by_status(status: str) -> AnswerStatus:
    """The answer status named ``status``; ValueError if unknown."""
    return _by_status(AnswerStatus, status)


def is_answer_status_valid(status: str) -> bool:
    return _has_status(AnswerStatus, status)


def get_consultation_status_by_state(state: int) -> ConsultationStatus:
    """The consultation status with ``state``; ValueError if unknown."""
    return _by_state(ConsultationStatus, state)


def get_consultation_status_by_status(status: str) -> ConsultationStatus:
    """The consultation status named ``status``; ValueError if unknown."""
    return _by_status(ConsultationStatus, status)


def is_consultation_status_valid(status: str) -> bool:
    return _has_status(ConsultationStatus, status)


def is_consultation_state_valid(state: int) -> bool:
    return _has_state(ConsultationStatus, state)