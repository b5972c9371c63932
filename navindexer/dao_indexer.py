"""Coordination of the DAO indexers and rewinding of the DAO index."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Iterable

from .block import Block
from .consultation import CONSULTATION_INDEX
from .payment_request import PAYMENT_REQUEST_INDEX
from .proposal import PROPOSAL_INDEX
from .transaction import BlockTransaction
from .voting import VOTE_INDEX, BlockHeader

logger = logging.getLogger(__name__)


class DaoIndexer:
    """Runs every DAO indexer over a block."""

    def __init__(
        self,
        proposal_indexer: Any,
        payment_request_indexer: Any,
        consultation_indexer: Any,
        vote_indexer: Any,
        consensus_indexer: Any,
    ) -> None:
        self.proposal_indexer = proposal_indexer
        self.payment_request_indexer = payment_request_indexer
        self.consultation_indexer = consultation_indexer
        self.vote_indexer = vote_indexer
        self.consensus_indexer = consensus_indexer

    def index(
        self, block: Block, txs: Iterable[BlockTransaction], header: BlockHeader
    ) -> None:
        txs = list(txs)
        with ThreadPoolExecutor(max_workers=3) as pool:
            futures = [
                pool.submit(self.proposal_indexer.index, txs),
                pool.submit(self.payment_request_indexer.index, txs),
                pool.submit(self.consultation_indexer.index, txs),
            ]
            for future in futures:
                future.result()

        self.vote_indexer.index(txs, block, header)
        self.proposal_indexer.update(block.block_cycle, block)
        self.payment_request_indexer.update(block.block_cycle, block)
        self.consultation_indexer.update(block.block_cycle, block)

        if block.block_cycle.is_end():
            logger.info(
                "DaoIndexer: BlockCycle complete cycle=%d height=%d",
                block.block_cycle.cycle,
                block.height,
            )
            self.consensus_indexer.update(block)


class DaoRewinder:
    """Rolls the DAO index back to a height."""

    def __init__(self, store: Any, consensus_rewinder: Any, repository: Any) -> None:
        self.store = store
        self.consensus_rewinder = consensus_rewinder
        self.repository = repository

    def rewind(self, height: int) -> None:
        logger.info("DaoRewinder: Rewinding DAO Index to height %d", height)
        passed = self.repository.get_passed_consultations(height)
        self.consensus_rewinder.rewind(passed)
        self.store.delete_height_gt(
            height,
            CONSULTATION_INDEX,
            PROPOSAL_INDEX,
            PAYMENT_REQUEST_INDEX,
            VOTE_INDEX,
        )