"""Community fund proposals and payment requests."""

from __future__ import annotations

from dataclasses import dataclass

from .entity import make_slug


@dataclass
class PaymentRequest:
    """A request for payment against an accepted proposal."""

    version: int = 0
    hash: str = ""
    block_hash: str = ""
    proposal_hash: str = ""
    description: str = ""
    requested_amount: float = 0.0
    status: str = ""
    state: int = 0
    state_changed_on_block: str = ""

    height: int = 0
    updated_on_block: int = 0

    votes_yes: int = 0
    votes_abs: int = 0
    votes_no: int = 0
    votes_excluded: int = 0
    voting_cycle: int = 0

    def slug(self) -> str:
        return make_slug(f"paymentrequest-{self.hash}")


@dataclass
class Proposal:
    """A community fund proposal."""

    version: int = 0
    hash: str = ""
    block_hash: str = ""
    description: str = ""
    requested_amount: float = 0.0
    not_paid_yet: float = 0.0
    not_requested_yet: float = 0.0
    user_paid_fee: float = 0.0
    payment_address: str = ""
    proposal_duration: int = 0
    expires_on: int = 0
    state: int = 0
    status: str = ""
    state_changed_on_block: str = ""
    height: int = 0
    updated_on_block: int = 0

    votes_yes: int = 0
    votes_abs: int = 0
    votes_no: int = 0
    votes_excluded: int = 0
    voting_cycle: int = 0

    def slug(self) -> str:
        return make_slug(f"proposal-{self.hash}")