"""Transaction outputs and collections of them."""

from __future__ import annotations

from dataclasses import dataclass, field

from .types import VoutType

_COLD_TYPES = (VoutType.COLD_STAKING, VoutType.COLD_STAKING_V2)
_PROPOSAL_VOTE_TYPES = (VoutType.PROPOSAL_YES_VOTE, VoutType.PROPOSAL_NO_VOTE)
_PAYMENT_REQUEST_VOTE_TYPES = (
    VoutType.PAYMENT_REQUEST_YES_VOTE,
    VoutType.PAYMENT_REQUEST_NO_VOTE,
)


@dataclass
class ScriptPubKey:
    """Locking script of an output."""

    asm: str = ""
    hex: str = ""
    req_sigs: int = 0
    type: VoutType | str = ""
    addresses: list[str] = field(default_factory=list)
    hash: str = ""


@dataclass
class RedeemedIn:
    """Where an output was spent."""

    hash: str = ""
    index: int = 0
    height: int = 0


@dataclass
class MultiSig:
    """Multi-signature script details."""

    hash: str = ""
    signatures: list[str] = field(default_factory=list)
    required: int = 0
    total: int = 0

    def key(self) -> str:
        """Identifier combining the script hash and its signatures."""
        return f"{self.hash}-{'-'.join(self.signatures)}"


@dataclass
class Vout:
    """A transaction output."""

    value: float = 0.0
    value_sat: int = 0
    n: int = 0
    script_pub_key: ScriptPubKey = field(default_factory=ScriptPubKey)
    spending_key: str = ""
    output_key: str = ""
    ephemeral_key: str = ""
    token_id: str = ""
    token_nft_id: int | None = None
    range_proof: bool = False
    spent_tx_id: str = ""
    spent_index: int = 0
    spent_height: int = 0
    redeemed: bool = False
    redeemed_in: RedeemedIn | None = None
    multi_sig: MultiSig | None = None
    private: bool = False
    wrapped: bool = False

    def has_address(self, address: str) -> bool:
        return address in self.script_pub_key.addresses

    def is_multi_sig(self) -> bool:
        return self.multi_sig is not None

    def is_private_fee(self) -> bool:
        spk = self.script_pub_key
        return spk.type == VoutType.NULLDATA or spk.asm == "OP_RETURN"

    def is_cold_staking(self) -> bool:
        return self.script_pub_key.type in _COLD_TYPES

    def is_proposal_vote(self) -> bool:
        return self.script_pub_key.type in _PROPOSAL_VOTE_TYPES

    def is_payment_request_vote(self) -> bool:
        return self.script_pub_key.type in _PAYMENT_REQUEST_VOTE_TYPES

    def is_cold_staking_address(self, address: str) -> bool:
        addresses = self.script_pub_key.addresses
        return len(addresses) == 2 and addresses[0] == address

    def is_cold_spending_address(self, address: str) -> bool:
        addresses = self.script_pub_key.addresses
        return len(addresses) == 2 and addresses[1] == address

    def is_cold_voting_address(self, address: str) -> bool:
        addresses = self.script_pub_key.addresses
        return len(addresses) == 3 and addresses[2] == address


def _owns(addresses: list[str], address: str, cold: bool) -> bool:
    if cold:
        return len(addresses) > 1 and addresses[0] == address
    return (len(addresses) == 1 and addresses[0] == address) or (
        len(addresses) > 1 and addresses[1] == address
    )


class Vouts(list):
    """An ordered list of outputs with query helpers."""

    def get_output(self, index: int) -> Vout | None:
        """The output at ``index``, or None when there is none."""
        if 0 <= index < len(self):
            return self[index]
        return None

    def with_address(self, address: str) -> Vouts:
        return Vouts(o for o in self if o.has_address(address))

    def has_output_of_type(self, vout_type: VoutType | str) -> bool:
        return any(o.script_pub_key.type == vout_type for o in self)

    def has_address(self, address: str) -> bool:
        return any(o.has_address(address) for o in self)

    def get_voting_address(self) -> str:
        """The address that votes for this transaction's stake.

        Raises LookupError when no output identifies one.
        """
        for o in self:
            spk = o.script_pub_key
            count = len(spk.addresses)
            if spk.type == VoutType.NONSTANDARD:
                continue
            if spk.type == VoutType.COLD_STAKING and count == 2:
                return spk.addresses[0]
            if spk.type == VoutType.COLD_STAKING_V2 and count == 3:
                return spk.addresses[2]
            if spk.type == VoutType.PUBKEY and count == 1:
                return spk.addresses[0]
        raise LookupError("Unable to retrieve Voting Address")

    def get_spendable_amount(self) -> int:
        """Total satoshis excluding community fund contributions."""
        return sum(
            o.value_sat
            for o in self
            if o.script_pub_key.type != VoutType.CFUND_CONTRIBUTION
        )

    def get_amount(self) -> int:
        return sum(o.value_sat for o in self)

    def get_amount_by_address(self, address: str, cold: bool) -> tuple[float, int]:
        """Sum of (value, value_sat) of the outputs belonging to ``address``."""
        value = 0.0
        value_sat = 0
        for o in self:
            if _owns(o.script_pub_key.addresses, address, cold):
                value += o.value
                value_sat += o.value_sat
        return value, value_sat

    def filter_with_addresses(self) -> Vouts:
        return Vouts(o for o in self if o.script_pub_key.addresses)

    def output_at_index_is_of_type(self, index: int, vout_type: VoutType | str) -> bool:
        output = self.get_output(index)
        return output is not None and output.script_pub_key.type == vout_type

    def private_fees(self) -> int:
        """Value of the first OP_RETURN null-data output, or 0."""
        for o in self:
            spk = o.script_pub_key
            if spk.asm == "OP_RETURN" and spk.type == VoutType.NULLDATA:
                return o.value_sat
        return 0