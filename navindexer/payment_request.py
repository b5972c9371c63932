"""Indexing of community fund payment requests."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable

from .block import Block, BlockCycle
from .cfund import PaymentRequest
from .status import PaymentRequestStatus, get_payment_request_status_by_state
from .transaction import BlockTransaction

logger = logging.getLogger(__name__)

PAYMENT_REQUEST_INDEX = "paymentrequest"

_CLOSED_STATUSES = (
    PaymentRequestStatus.PAID.status,
    PaymentRequestStatus.EXPIRED.status,
    PaymentRequestStatus.REJECTED.status,
)


@dataclass
class NodePaymentRequest:
    """A payment request as reported by the node."""

    version: int = 0
    hash: str = ""
    block_hash: str = ""
    proposal_hash: str = ""
    description: str = ""
    requested_amount: str = ""
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


def create_payment_request(node_request: NodePaymentRequest, height: int) -> PaymentRequest:
    """A new payment request first seen at ``height``."""
    return PaymentRequest(
        version=node_request.version,
        hash=node_request.hash,
        block_hash=node_request.block_hash,
        proposal_hash=node_request.proposal_hash,
        description=node_request.description,
        requested_amount=_to_float(node_request.requested_amount),
        state=node_request.state,
        status=get_payment_request_status_by_state(node_request.state).status,
        state_changed_on_block=node_request.state_changed_on_block,
        height=height,
        updated_on_block=height,
        votes_yes=node_request.votes_yes,
        votes_abs=node_request.votes_abs,
        votes_no=node_request.votes_no,
        votes_excluded=node_request.votes_excluded,
        voting_cycle=node_request.voting_cycle,
    )


_TRACKED_FIELDS = (
    "state_changed_on_block",
    "votes_yes",
    "votes_abs",
    "votes_no",
    "votes_excluded",
    "voting_cycle",
)


def update_payment_request(
    node_request: NodePaymentRequest, height: int, payment_request: PaymentRequest
) -> None:
    """Copy changes from the node; mark the request updated at ``height`` if any."""
    if payment_request.state != node_request.state:
        payment_request.state = node_request.state
        payment_request.status = get_payment_request_status_by_state(node_request.state).status
        payment_request.updated_on_block = height

    for name in _TRACKED_FIELDS:
        new = getattr(node_request, name)
        if getattr(payment_request, name) != new:
            setattr(payment_request, name, new)
            payment_request.updated_on_block = height


class PaymentRequests(list):
    """The payment requests still being followed."""

    def delete(self, request_hash: str) -> None:
        """Remove the request with ``request_hash``; the last one takes its place."""
        for i, request in enumerate(self):
            if request is not None and request.hash == request_hash:
                self[i] = self[-1]
                self.pop()
                return


class PaymentRequestIndexer:
    """Creates and updates payment requests as blocks are indexed."""

    def __init__(self, node: Any, store: Any, requests: PaymentRequests | None = None) -> None:
        self.node = node
        self.store = store
        self.requests = requests if requests is not None else PaymentRequests()

    def index(self, txs: Iterable[BlockTransaction]) -> None:
        """Store a payment request for each payment request transaction."""
        for tx in txs:
            if tx.version != 5:
                continue
            try:
                node_request = self.node.get_payment_request(tx.hash)
            except Exception:
                logger.debug("No payment request found for %s", tx.hash)
                continue
            payment_request = create_payment_request(node_request, tx.height)
            self.store.save(PAYMENT_REQUEST_INDEX, payment_request)
            self.requests.append(payment_request)

    def update(self, block_cycle: BlockCycle, block: Block) -> None:
        """Refresh followed requests and stop following long-closed ones."""
        for request in list(self.requests):
            if request is None:
                continue

            node_request = self.node.get_payment_request(request.hash)
            update_payment_request(node_request, block.height, request)
            if request.updated_on_block == block.height:
                logger.debug("Payment Request %s updated at %d", request.hash, block.height)
                self.store.add_update_request(PAYMENT_REQUEST_INDEX, request)

            if (
                request.status in _CLOSED_STATUSES
                and block.height - request.updated_on_block >= block_cycle.size
            ):
                self.requests.delete(request.hash)


class PaymentRequestService:
    """Loads the payment requests that may still receive votes."""

    def __init__(self, repository: Any, requests: PaymentRequests) -> None:
        self.repository = repository
        self.requests = requests

    def load_voting_payment_requests(self, block: Block) -> None:
        exclude_older_than = max(0, block.height - block.block_cycle.size * 2)
        try:
            loaded = list(self.repository.get_possible_voting_requests(exclude_older_than))
        except Exception:
            logger.exception("Failed to load voting payment requests")
            loaded = []
        logger.info("Load Voting Payment Requests (%d)", len(loaded))
        self.requests[:] = loaded