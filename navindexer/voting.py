"""DAO votes cast by stakers in block headers and coinbase outputs."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable

from .block import Block
from .transaction import BlockTransaction
from .types import VoutType
from .votes import DaoVotes, Vote, VoteType

logger = logging.getLogger(__name__)

VOTE_INDEX = "daovote"

_PERSUASION = {
    VoutType.PROPOSAL_YES_VOTE: 1,
    VoutType.PAYMENT_REQUEST_YES_VOTE: 1,
    VoutType.PROPOSAL_NO_VOTE: -1,
    VoutType.PAYMENT_REQUEST_NO_VOTE: -1,
}


@dataclass
class HeaderVote:
    """A vote on one item as listed in a block header."""

    hash: str = ""
    vote: int = 0


@dataclass
class BlockHeader:
    """The voting parts of a block header."""

    cfund_votes: list[HeaderVote] = field(default_factory=list)
    cfund_request_votes: list[HeaderVote] = field(default_factory=list)
    dao_support: list[str] = field(default_factory=list)
    dao_votes: list[HeaderVote] = field(default_factory=list)


def _persuasion(vout_type: VoutType | str) -> int:
    for kind, value in _PERSUASION.items():
        if vout_type == kind:
            return value
    return 0


def create_votes(
    block: Block, tx: BlockTransaction, header: BlockHeader, voting_address: str
) -> DaoVotes | None:
    """The votes carried by a coinbase transaction, or None if it has none."""
    if not tx.is_coinbase():
        return None

    dao_votes = DaoVotes(cycle=block.block_cycle.cycle, height=tx.height, address=voting_address)

    if block.nonce & 1 == 1:
        logger.debug("%d Excluding vote for %s", block.height, block.staked_by)
        dao_votes.votes.append(Vote(type=VoteType.EXCLUDE_VOTE, hash=block.staked_by, vote=0))

    for v in header.cfund_votes:
        dao_votes.votes.append(Vote(type=VoteType.PROPOSAL, hash=v.hash, vote=v.vote))
    for v in header.cfund_request_votes:
        dao_votes.votes.append(Vote(type=VoteType.PAYMENT_REQUEST, hash=v.hash, vote=v.vote))
    for support in header.dao_support:
        dao_votes.votes.append(Vote(type=VoteType.DAO_SUPPORT, hash=support))
    for v in header.dao_votes:
        dao_votes.votes.append(Vote(type=VoteType.DAO_VOTE, hash=v.hash, vote=v.vote))

    if dao_votes.votes:
        return dao_votes

    legacy = DaoVotes(height=tx.height, address=block.staked_by)
    for vout in tx.vout:
        is_proposal = vout.is_proposal_vote()
        is_request = vout.is_payment_request_vote()
        if not is_proposal and not is_request:
            continue
        vote = Vote(hash=vout.script_pub_key.hash, vote=_persuasion(vout.script_pub_key.type))
        if is_proposal:
            vote.type = VoteType.PROPOSAL
        if is_request:
            vote.type = VoteType.PAYMENT_REQUEST
        legacy.votes.append(vote)

    return legacy if legacy.votes else None


class VoteIndexer:
    """Stores the votes cast in each block."""

    def __init__(self, store: Any) -> None:
        self.store = store

    def index(
        self, txs: Iterable[BlockTransaction], block: Block, header: BlockHeader
    ) -> DaoVotes | None:
        """Index the block's votes; return what was stored, if anything."""
        txs = list(txs)
        voting_address = ""
        for tx in txs:
            try:
                voting_address = tx.vout.get_voting_address()
            except LookupError:
                voting_address = ""
            if voting_address:
                break
        if not voting_address:
            return None

        for tx in txs:
            if not tx.is_coinbase():
                continue
            votes = create_votes(block, tx, header, voting_address)
            if votes is not None:
                self.store.add_index_request(VOTE_INDEX, votes)
                return votes
        return None