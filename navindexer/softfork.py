"""Tracking of soft-fork signalling, lock-in and activation."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Iterable

from .block import Block, BlockCycle, get_quorum
from .signalling import Signal, SoftFork, SoftForkCycle, SoftForks
from .types import SoftForkState

logger = logging.getLogger(__name__)

SOFT_FORK_INDEX = "softfork"
SIGNAL_INDEX = "signal"


def get_soft_fork_block_cycle(size: int, height: int) -> BlockCycle:
    """Position of ``height`` within soft-fork cycles of ``size`` blocks."""
    cycle = height // size + 1
    return BlockCycle(size=size, cycle=cycle, index=height - (cycle * size - size))


def create_signal(block: Block, soft_forks: Iterable[SoftFork]) -> Signal | None:
    """The signal a block's version carries, or None if it signals nothing."""
    sig = Signal(address=block.staked_by, height=block.height)
    for soft_fork in soft_forks:
        eligible = (
            soft_fork.state == SoftForkState.LOCKED_IN
            and block.height <= soft_fork.locked_in_height
        ) or soft_fork.is_open()
        if eligible and (block.version >> soft_fork.signal_bit) & 1 == 1:
            sig.soft_forks.append(soft_fork.name)
    return sig if sig.soft_forks else None


class SoftForkTracker:
    """The soft forks known to the indexer and their signalling progress."""

    def __init__(self, soft_forks: Iterable[SoftFork] = ()) -> None:
        self.soft_forks = SoftForks(soft_forks)

    def add_signal(self, signal: Signal, height: int, blocks_in_cycle: int) -> None:
        """Count ``signal`` towards each open soft fork it names."""
        if not signal.is_signalling():
            return

        block_cycle = get_soft_fork_block_cycle(blocks_in_cycle, height)
        for name in signal.soft_forks:
            soft_fork = self.soft_forks.get_soft_fork(name)
            if soft_fork is None or not soft_fork.is_open():
                continue

            soft_fork.signal_height = height
            if soft_fork.state == SoftForkState.DEFINED:
                soft_fork.state = SoftForkState.STARTED

            cycle = soft_fork.get_cycle(block_cycle.cycle)
            if cycle is None:
                cycle = SoftForkCycle(cycle=block_cycle.cycle, blocks_signalling=0)
                soft_fork.cycles.append(cycle)
                logger.info(
                    "SoftFork: Create Next Cycle softfork=%s cycle=%d height=%d",
                    soft_fork.name,
                    cycle.cycle,
                    height,
                )
            cycle.blocks_signalling += 1

    def update_state(self, height: int, blocks_in_cycle: int, quorum: int) -> None:
        """Lock in forks that reached quorum and activate locked-in forks."""
        for soft_fork in self.soft_forks:
            if not soft_fork.cycles:
                continue

            if (
                soft_fork.state == SoftForkState.STARTED
                and height >= soft_fork.locked_in_height
            ):
                latest = soft_fork.latest_cycle()
                if latest.blocks_signalling >= get_quorum(blocks_in_cycle, quorum):
                    soft_fork.state = SoftForkState.LOCKED_IN
                    cycle = get_soft_fork_block_cycle(blocks_in_cycle, height).cycle
                    soft_fork.locked_in_height = blocks_in_cycle * cycle
                    soft_fork.activation_height = (
                        soft_fork.locked_in_height + blocks_in_cycle
                    )
                    logger.info(
                        "SoftFork: Locked in softFork=%s height=%d lockedInHeight=%d signals=%d",
                        soft_fork.name,
                        height,
                        soft_fork.locked_in_height,
                        latest.blocks_signalling,
                    )

            if (
                soft_fork.state == SoftForkState.LOCKED_IN
                and height >= soft_fork.activation_height - 1
            ):
                soft_fork.state = SoftForkState.ACTIVE
                logger.info(
                    "SoftFork: Activated softfork=%s height=%d activationHeight=%d",
                    soft_fork.name,
                    height,
                    soft_fork.activation_height,
                )

    def reset(self) -> None:
        """Return every soft fork to the defined state with no signals."""
        for idx, soft_fork in enumerate(self.soft_forks):
            logger.info("Resetting soft fork %s", soft_fork.name)
            self.soft_forks[idx] = SoftFork(
                name=soft_fork.name,
                signal_bit=soft_fork.signal_bit,
                state=SoftForkState.DEFINED,
                start_time=soft_fork.start_time,
                timeout=soft_fork.timeout,
            )


def _timestamp(value: Any) -> datetime:
    return datetime.fromtimestamp(int(value), tz=timezone.utc)


class SoftForkService:
    """Loads the soft forks from the store and the node."""

    def __init__(self, node: Any, store: Any, repository: Any, tracker: SoftForkTracker) -> None:
        self.node = node
        self.store = store
        self.repository = repository
        self.tracker = tracker

    def init_soft_forks(self) -> None:
        """Merge the node's BIP9 deployments into the stored soft forks."""
        logger.info("SoftFork: Init")
        info = self.node.get_blockchain_info()

        try:
            stored = self.repository.get_soft_forks()
        except LookupError:
            stored = SoftForks()
        self.tracker.soft_forks = SoftForks(stored)
        soft_forks = self.tracker.soft_forks

        for name, bip9 in info.get("bip9_softforks", {}).items():
            existing = soft_forks.get_soft_fork(name)
            if existing is None:
                soft_fork = SoftFork(
                    name=name,
                    signal_bit=bip9["bit"],
                    state=SoftForkState.DEFINED,
                    start_time=_timestamp(bip9["startTime"]),
                    timeout=_timestamp(bip9["timeout"]),
                    activation_height=0,
                    locked_in_height=0,
                )
                self.store.save(SOFT_FORK_INDEX, soft_fork)
                soft_forks.append(soft_fork)
            elif bip9["bit"] != existing.signal_bit:
                existing.signal_bit = bip9["bit"]
                self.store.save(SOFT_FORK_INDEX, existing)


class SoftForkIndexer:
    """Records the soft-fork signals of each indexed block."""

    def __init__(self, store: Any, tracker: SoftForkTracker, blocks_in_cycle: int, quorum: int) -> None:
        self.store = store
        self.tracker = tracker
        self.blocks_in_cycle = blocks_in_cycle
        self.quorum = quorum

    def index(self, block: Block) -> Signal | None:
        """Index ``block``'s signal; return the signal that was stored, if any."""
        sig = create_signal(block, self.tracker.soft_forks)
        if sig is not None:
            self.tracker.add_signal(sig, block.height, self.blocks_in_cycle)

        if block.block_cycle.is_end():
            logger.debug(
                "SoftFork: Block cycle end height=%d blocksInCycle=%d quorum=%d",
                block.height,
                self.blocks_in_cycle,
                self.quorum,
            )
            self.tracker.update_state(block.height, self.blocks_in_cycle, self.quorum)

        for soft_fork in self.tracker.soft_forks:
            self.store.add_update_request(SOFT_FORK_INDEX, soft_fork)

        if sig is None:
            return None

        for name in list(sig.soft_forks):
            soft_fork = self.tracker.soft_forks.get_soft_fork(name)
            if soft_fork is not None and soft_fork.state == SoftForkState.ACTIVE:
                logger.info("SoftFork: Delete active softForks")
                sig.delete_soft_fork(name)

        if sig.soft_forks:
            self.store.add_index_request(SIGNAL_INDEX, sig)
            return sig
        return None


class SoftForkRewinder:
    """Rebuilds soft-fork state from the stored signals up to a height."""

    def __init__(
        self,
        store: Any,
        signal_repository: Any,
        tracker: SoftForkTracker,
        blocks_in_cycle: int,
        quorum: int,
        cycle_step: int | None = None,
    ) -> None:
        self.store = store
        self.signal_repository = signal_repository
        self.tracker = tracker
        self.blocks_in_cycle = blocks_in_cycle
        self.quorum = quorum
        self.cycle_step = blocks_in_cycle if cycle_step is None else cycle_step

    def rewind(self, height: int) -> None:
        """Drop signals above ``height`` and replay those at or below it."""
        logger.info("Rewinding soft fork index to height %d", height)
        self.store.delete_height_gt(height, SIGNAL_INDEX)
        self.tracker.reset()

        start = 0
        end = self.blocks_in_cycle - 1
        while height != 0 and start < height:
            if end >= height:
                end = height

            for sig in self.signal_repository.get_signals(start, end):
                self.tracker.add_signal(sig, sig.height, self.blocks_in_cycle)

            if end - start == self.blocks_in_cycle - 1:
                logger.info(
                    "SoftFork: Block cycle end height=%d blocksInCycle=%d quorum=%d",
                    end,
                    self.blocks_in_cycle,
                    self.quorum,
                )
                self.tracker.update_state(end - 1, self.blocks_in_cycle, self.quorum)

            start += self.cycle_step
            end = min(end + self.cycle_step, height)

        for soft_fork in self.tracker.soft_forks:
            self.store.save(SOFT_FORK_INDEX, soft_fork)