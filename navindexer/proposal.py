"""Indexing of community fund proposals."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable

from .block import Block, BlockCycle
from .cfund import Proposal
from .status import ProposalStatus, get_proposal_status_by_state
from .transaction import BlockTransaction

logger = logging.getLogger(__name__)

PROPOSAL_INDEX = "proposal"

_CLOSED_STATUSES = (ProposalStatus.EXPIRED.status, ProposalStatus.REJECTED.status)

_TRACKED_FIELDS = (
    "state_changed_on_block",
    "votes_yes",
    "votes_abs",
    "votes_no",
    "votes_excluded",
    "voting_cycle",
)


@dataclass
class NodeProposal:
    """A proposal as reported by the node."""

    version: int = 0
    hash: str = ""
    block_hash: str = ""
    description: str = ""
    requested_amount: str = ""
    not_paid_yet: str = ""
    not_requested_yet: str = ""
    user_paid_fee: str = ""
    payment_address: str = ""
    proposal_duration: int = 0
    expires_on: int = 0
    state: int = 0
    state_changed_on_block: str = ""
    votes_yes: int = 0
    votes_abs: int = 0
    votes_no: int = 0
    votes_excluded: int = 0
    voting_cycle: int = 0


def _to_float(text: str) -> float:
    try:
        return float(text)
    except (TypeError, ValueError):
        logger.error("Unable to convert %s to float", text)
        return 0.0


def create_proposal(node_proposal: NodeProposal, height: int) -> Proposal:
    """A new proposal first seen at ``height``."""
    requested = _to_float(node_proposal.requested_amount)
    return Proposal(
        version=node_proposal.version,
        hash=node_proposal.hash,
        block_hash=node_proposal.block_hash,
        description=node_proposal.description,
        requested_amount=requested,
        not_paid_yet=requested,
        not_requested_yet=requested,
        user_paid_fee=_to_float(node_proposal.user_paid_fee),
        payment_address=node_proposal.payment_address,
        proposal_duration=node_proposal.proposal_duration,
        expires_on=node_proposal.expires_on,
        state=node_proposal.state,
        status=get_proposal_status_by_state(node_proposal.state).status,
        state_changed_on_block=node_proposal.state_changed_on_block,
        height=height,
        updated_on_block=height,
        votes_yes=node_proposal.votes_yes,
        votes_abs=node_proposal.votes_abs,
        votes_no=node_proposal.votes_no,
        votes_excluded=node_proposal.votes_excluded,
        voting_cycle=node_proposal.voting_cycle,
    )


def update_proposal(node_proposal: NodeProposal, height: int, proposal: Proposal) -> None:
    """Copy changes from the node; mark the proposal updated at ``height`` if any."""
    not_paid_yet = _to_float(node_proposal.not_paid_yet)
    if proposal.not_paid_yet != not_paid_yet:
        proposal.not_paid_yet = not_paid_yet
        proposal.updated_on_block = height

    not_requested_yet = _to_float(node_proposal.not_requested_yet)
    if proposal.not_requested_yet != not_requested_yet:
        proposal.not_requested_yet = not_requested_yet
        proposal.updated_on_block = height

    if proposal.state != node_proposal.state:
        proposal.state = node_proposal.state
        proposal.status = get_proposal_status_by_state(node_proposal.state).status
        proposal.updated_on_block = height

    for name in _TRACKED_FIELDS:
        new = getattr(node_proposal, name)
        if getattr(proposal, name) != new:
            setattr(proposal, name, new)
            proposal.updated_on_block = height


class Proposals(list):
    """The proposals still being followed."""

    def get_by_hash(self, proposal_hash: str) -> Proposal | None:
        return next(
            (p for p in self if p is not None and p.hash == proposal_hash), None
        )

    def delete(self, proposal_hash: str) -> None:
        """Remove the proposal with ``proposal_hash``; the last one takes its place."""
        for i, proposal in enumerate(self):
            if proposal is not None and proposal.hash == proposal_hash:
                self[i] = self[-1]
                self.pop()
                return


class ProposalIndexer:
    """Creates and updates proposals as blocks are indexed."""

    def __init__(self, node: Any, store: Any, proposals: Proposals | None = None) -> None:
        self.node = node
        self.store = store
        self.proposals = proposals if proposals is not None else Proposals()

    def index(self, txs: Iterable[BlockTransaction]) -> None:
        """Store a proposal for each spend or proposal transaction the node knows."""
        for tx in txs:
            if not tx.is_spend() and tx.version != 4:
                continue
            try:
                node_proposal = self.node.get_proposal(tx.hash)
            except Exception:
                logger.debug("No proposal found for %s", tx.hash)
                continue
            proposal = create_proposal(node_proposal, tx.height)
            self.store.save(PROPOSAL_INDEX, proposal)
            self.proposals.append(proposal)

    def update(self, block_cycle: BlockCycle, block: Block) -> None:
        """Refresh followed proposals and stop following long-closed ones."""
        for proposal in list(self.proposals):
            if proposal is None:
                continue

            node_proposal = self.node.get_proposal(proposal.hash)
            update_proposal(node_proposal, block.height, proposal)
            if proposal.updated_on_block == block.height:
                self.store.add_update_request(PROPOSAL_INDEX, proposal)

            if (
                proposal.status in _CLOSED_STATUSES
                and block.height - proposal.updated_on_block >= block_cycle.size
            ):
                self.proposals.delete(proposal.hash)


class ProposalService:
    """Loads the proposals that may still receive votes."""

    def __init__(self, repository: Any, proposals: Proposals) -> None:
        self.repository = repository
        self.proposals = proposals

    def load_voting_proposals(self, block: Block) -> None:
        exclude_older_than = max(0, block.height - block.block_cycle.size * 2)
        try:
            loaded = list(self.repository.get_possible_voting_proposals(exclude_older_than))
        except Exception:
            logger.exception("Failed to load voting proposals")
            loaded = []
        logger.info("Load Voting Proposals (%d)", len(loaded))
        self.proposals[:] = loaded