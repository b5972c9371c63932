"""Transaction inputs and collections of them."""

from __future__ import annotations

from dataclasses import dataclass, field

from .types import VoutType
from .vout import MultiSig


@dataclass
class ScriptSig:
    """Unlocking script of an input."""

    asm: str = ""
    hex: str = ""


@dataclass
class PreviousOutput:
    """Details of the output an input spends."""

    height: int = 0
    type: VoutType | str = ""
    multi_sig: MultiSig | None = None
    private: bool = False
    wrapped: bool = False


@dataclass
class Vin:
    """A transaction input."""

    coinbase: str = ""
    txid: str | None = None
    token_id: str = ""
    token_nft_id: int | None = None
    vout: int | None = None
    script_sig: ScriptSig | None = None
    sequence: int = 0
    value: float = 0.0
    value_sat: int = 0
    addresses: list[str] = field(default_factory=list)
    previous_output: PreviousOutput | None = None

    def has_address(self, address: str) -> bool:
        return address in self.addresses

    def is_coinbase(self) -> bool:
        return self.coinbase != ""

    def is_cold_staking_address(self, address: str) -> bool:
        return len(self.addresses) == 2 and self.addresses[0] == address

    def is_cold_spending_address(self, address: str) -> bool:
        return len(self.addresses) == 2 and self.addresses[0] == address

    def is_private(self) -> bool:
        """True for a blinded input spending a non-standard output."""
        return (
            self.previous_output is not None
            and self.previous_output.type == VoutType.NONSTANDARD
            and not self.addresses
            and self.token_id == "0"
        )


class Vins(list):
    """An ordered list of inputs with query helpers."""

    def first(self) -> Vin:
        """The first input; IndexError when there are none."""
        if not self:
            raise IndexError("transaction has no inputs")
        return self[0]

    def has_address(self, address: str) -> bool:
        return any(vin.has_address(address) for vin in self)

    def get_amount(self) -> int:
        return sum(vin.value_sat for vin in self)

    def get_amount_by_address(self, address: str, cold: bool) -> tuple[float, int]:
        """Sum of (value, value_sat) of the inputs belonging to ``address``."""
        value = 0.0
        value_sat = 0
        for vin in self:
            addresses = vin.addresses
            if cold:
                owned = len(addresses) > 1 and addresses[0] == address
            else:
                owned = (len(addresses) == 1 and addresses[0] == address) or (
                    len(addresses) > 1 and addresses[1] == address
                )
            if owned:
                value += vin.value
                value_sat += vin.value_sat
        return value, value_sat

    def filter_with_addresses(self) -> Vins:
        return Vins(vin for vin in self if vin.addresses)