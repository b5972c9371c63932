"""Blocks, their supply figures and voting-cycle position."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from .entity import make_slug


@dataclass
class SupplyBalance:
    """Coin supply split into public, private and wrapped amounts."""

    public: int = 0
    private: int = 0
    wrapped: int = 0

    def total(self) -> int:
        return self.public + self.private + self.wrapped


@dataclass
class SupplyChange:
    """Signed change of each part of the supply caused by a block."""

    public: int = 0
    private: int = 0
    wrapped: int = 0


@dataclass
class BlockCycle:
    """Position of a block within a voting cycle."""

    size: int = 0
    cycle: int = 0
    index: int = 0
    transitory: bool = False
    transitory_size: int = 0

    def is_end(self) -> bool:
        """True for the last block of the cycle."""
        return self.index == self.size - 1


def get_quorum(size: int, quorum: int) -> int:
    """Number of blocks in a cycle of ``size`` that ``quorum`` percent requires."""
    return int((quorum / 100.0) * size)


@dataclass
class Cfund:
    """Community fund balances."""

    available: float = 0.0
    locked: float = 0.0


@dataclass
class Block:
    """A block as stored by the indexer."""

    hash: str = ""
    confirmations: int = 0
    stripped_size: int = 0
    size: int = 0
    weight: int = 0
    height: int = 0
    version: int = 0
    version_hex: str = ""
    merkleroot: str = ""
    tx: list[str] = field(default_factory=list)
    time: datetime | None = None
    median_time: datetime | None = None
    nonce: int = 0
    bits: str = ""
    difficulty: str = ""
    chainwork: str = ""
    previousblockhash: str = ""
    nextblockhash: str = ""

    tx_count: int = 0
    stake: int = 0
    staked_by: str = ""
    spend: int = 0
    fees: int = 0
    cfund_payout: int = 0

    block_cycle: BlockCycle = field(default_factory=BlockCycle)
    cfund: Cfund = field(default_factory=Cfund)

    supply_balance: SupplyBalance = field(default_factory=SupplyBalance)
    supply_change: SupplyChange = field(default_factory=SupplyChange)

    best: bool = False

    def slug(self) -> str:
        return make_slug(f"block-{self.hash}")