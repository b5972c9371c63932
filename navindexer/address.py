"""Addresses and the history of their balance changes."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from .entity import make_slug
from .vout import MultiSig


@dataclass
class RichList:
    """Rank of an address by each balance kind."""

    spendable: int = 0
    stakable: int = 0
    voting_weight: int = 0


@dataclass
class Address:
    """An address and its current balances."""

    hash: str = ""
    height: int = 0
    spendable: int = 0
    stakable: int = 0
    voting_weight: int = 0
    created_time: datetime | None = None
    created_block: int = 0
    attempt: int = 0
    multi_sig: MultiSig | None = None
    meta: dict[str, str] = field(default_factory=dict)
    rich_list: RichList = field(default_factory=RichList)

    def slug(self) -> str:
        return make_slug(f"address-{self.hash}")


class BalanceType(str, Enum):
    """Kind of balance an address holds."""

    SPENDABLE = "spendable"
    STAKABLE = "stakable"
    VOTING_WEIGHT = "voting_weight"


@dataclass
class AddressChanges:
    """Balance changes caused by one transaction."""

    spendable: int = 0
    stakable: int = 0
    voting_weight: int = 0
    proposal: bool = False
    payment_request: bool = False
    consultation: bool = False


@dataclass
class AddressBalance:
    """Balances after one transaction."""

    spendable: int = 0
    stakable: int = 0
    voting_weight: int = 0


@dataclass
class AddressReward:
    """Staking reward received in one transaction."""

    spendable: float = 0.0
    stakable: float = 0.0
    voting_weight: float = 0.0


@dataclass
class AddressHistory:
    """One entry of an address's transaction history."""

    height: int = 0
    tx_index: int = 0
    time: datetime | None = None
    txid: str = ""
    hash: str = ""
    changes: AddressChanges = field(default_factory=AddressChanges)
    balance: AddressBalance = field(default_factory=AddressBalance)
    reward: AddressReward = field(default_factory=AddressReward)

    stake: bool = False
    cold_stake: bool = False
    cfund_payout: bool = False
    stake_payout: bool = False
    multi_sig: bool = False
    order: int = 0

    def slug(self) -> str:
        return make_slug(f"addresshistory-{self.hash}-{self.txid}")

    def is_spend(self) -> bool:
        return self.changes.spendable < 0

    def is_receive(self) -> bool:
        return self.changes.spendable > 0