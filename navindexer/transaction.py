"""Block transactions and their classification helpers."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from .entity import make_slug
from .types import BlockTransactionType, VoutType
from .vin import Vins
from .vout import MultiSig, Vout, Vouts

_COLD_TYPES = (VoutType.COLD_STAKING, VoutType.COLD_STAKING_V2)


def create_block_tx_slug(tx_hash: str) -> str:
    """Slug under which the transaction with ``tx_hash`` is stored."""
    return make_slug(f"blocktx-{tx_hash}")


def _is_cold(vout: Vout) -> bool:
    return vout.script_pub_key.type in _COLD_TYPES


@dataclass
class BlockTransaction:
    """A transaction as stored by the indexer."""

    hex: str = ""
    txid: str = ""
    hash: str = ""
    size: int = 0
    vsize: int = 0
    version: int = 0
    lock_time: int = 0
    strdzeel: str = ""
    vch_tx_sig: str = ""
    vch_balance_sig: str = ""
    anon_destination: str = ""
    block_hash: str = ""
    height: int = 0
    confirmations: int = 0
    time: datetime | None = None
    block_time: datetime | None = None

    index: int = 0
    tx_height: float = 0.0

    vin: Vins = field(default_factory=Vins)
    vout: Vouts = field(default_factory=Vouts)

    type: BlockTransactionType | str = ""
    stake: int = 0
    spend: int = 0
    fees: int = 0
    private: bool = False
    wrapped: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.vin, Vins):
            self.vin = Vins(self.vin)
        if not isinstance(self.vout, Vouts):
            self.vout = Vouts(self.vout)

    def slug(self) -> str:
        return create_block_tx_slug(self.hash)

    def get_all_addresses(self) -> list[str]:
        """Every address in inputs then outputs, first occurrence order."""
        seen: dict[str, None] = {}
        for vin in self.vin:
            seen.update(dict.fromkeys(vin.addresses))
        for vout in self.vout:
            seen.update(dict.fromkeys(vout.script_pub_key.addresses))
        return list(seen)

    def get_all_multi_sigs(self) -> dict[str, MultiSig]:
        """Multi-signature scripts spent or created, keyed by their key."""
        multi_sigs: dict[str, MultiSig] = {}
        for vin in self.vin:
            previous = vin.previous_output
            if previous is not None and previous.multi_sig is not None:
                multi_sigs[previous.multi_sig.key()] = previous.multi_sig
        for vout in self.vout:
            if vout.multi_sig is not None:
                multi_sigs[vout.multi_sig.key()] = vout.multi_sig
        return multi_sigs

    def is_coinbase(self) -> bool:
        return bool(self.vin) and self.vin[0].is_coinbase()

    def is_spend(self) -> bool:
        return self.type == BlockTransactionType.SPEND

    def is_any_staking(self) -> bool:
        """True when the first output is the empty non-standard stake marker."""
        return (
            self.vout.output_at_index_is_of_type(0, VoutType.NONSTANDARD)
            and self.vout[0].script_pub_key.hex == ""
        )

    def is_staking(self) -> bool:
        return self.is_any_staking() and self.type == BlockTransactionType.STAKING

    def is_cold_staking(self) -> bool:
        return self.is_any_staking() and self.type in (
            BlockTransactionType.COLD_STAKING,
            BlockTransactionType.COLD_STAKING_V2,
        )

    def is_pool_staking(self) -> bool:
        return self.is_any_staking() and self.type == BlockTransactionType.POOL_STAKING

    def has_cold_input(self, address: str) -> bool:
        return any(
            vin.previous_output is not None
            and vin.previous_output.type in _COLD_TYPES
            and vin.addresses[:1] == [address]
            for vin in self.vin
        )

    def has_cold_stake_stake(self, address: str) -> bool:
        if len(self.vout) <= 1:
            return False
        second = self.vout[1]
        return _is_cold(second) and second.script_pub_key.addresses[:1] == [address]

    def has_cold_stake_spend(self, address: str) -> bool:
        return any(
            _is_cold(o)
            and len(o.script_pub_key.addresses) > 1
            and o.script_pub_key.addresses[1] == address
            for o in self.vout
        )

    def has_cold_stake_receive(self, address: str) -> bool:
        if not self.is_spend():
            return False
        return any(
            _is_cold(o) and o.script_pub_key.addresses[:1] == [address]
            for o in self.vout
        )


class BlockTransactions(list):
    """The transactions of a block."""

    def get_coinbase(self) -> BlockTransaction | None:
        """The first coinbase transaction, or None."""
        return next((tx for tx in self if tx.is_coinbase()), None)