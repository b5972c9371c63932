"""Votes cast in block headers by stakers."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from .entity import make_slug


class VoteType(str, Enum):
    """What a vote is cast for."""

    PROPOSAL = "Proposal"
    PAYMENT_REQUEST = "PaymentRequest"
    DAO_SUPPORT = "DaoSupport"
    DAO_VOTE = "DaoVote"
    EXCLUDE_VOTE = "ExcludeVote"


@dataclass
class Vote:
    """A single vote on one item."""

    type: VoteType | str = ""
    hash: str = ""
    vote: int = 0


@dataclass
class DaoVotes:
    """All votes cast by one address in one block."""

    cycle: int = 0
    height: int = 0
    address: str = ""
    votes: list[Vote] = field(default_factory=list)

    def slug(self) -> str:
        return make_slug(f"vote-{self.height}-{self.address}")