"""Enumerations of output, transaction, soft-fork and transfer kinds."""

from __future__ import annotations

from enum import Enum


class VoutType(str, Enum):
    """Script type of a transaction output."""

    NONSTANDARD = "nonstandard"
    PUBKEY = "pubkey"
    PUBKEYHASH = "pubkeyhash"
    SCRIPTHASH = "scripthash"
    MULTISIG = "multisig"
    NULLDATA = "nulldata"
    CFUND_CONTRIBUTION = "cfund_contribution"
    PROPOSAL_YES_VOTE = "proposal_yes_vote"
    PAYMENT_REQUEST_YES_VOTE = "payment_request_yes_vote"
    PROPOSAL_NO_VOTE = "proposal_no_vote"
    PAYMENT_REQUEST_NO_VOTE = "payment_request_no_vote"
    PROPOSAL_ABSTAIN_VOTE = "proposal_abstain_vote"
    PROPOSAL_REMOVE_VOTE = "proposal_remove_vote"
    PAYMENT_REQUEST_ABSTAIN_VOTE = "payment_request_abstain_vote"
    PAYMENT_REQUEST_REMOVE_VOTE = "payment_request_remove_vote"
    CONSULTATION_VOTE = "consultation_vote"
    CONSULTATION_VOTE_REMOVE = "consultation_vote_remove"
    CONSULTATION_VOTE_ABSTENTION = "consultation_vote_abstention"
    DAO_SUPPORT = "dao_support"
    DAO_SUPPORT_REMOVE = "dao_support_remove"
    COLD_STAKING = "cold_staking"
    COLD_STAKING_V2 = "cold_staking_v2"
    POOL_STAKING = "pool_staking"


class BlockTransactionType(str, Enum):
    """Classification of a block transaction."""

    COINBASE = "coinbase"
    STAKING = "staking"
    COLD_STAKING = "cold_staking"
    COLD_STAKING_V2 = "cold_staking_v2"
    POOL_STAKING = "pool_staking"
    SPEND = "spend"


class SoftForkState(str, Enum):
    """Deployment state of a soft fork."""

    DEFINED = "defined"
    STARTED = "started"
    LOCKED_IN = "locked_in"
    ACTIVE = "active"
    FAILED = "failed"


class TransferType(str, Enum):
    """Kind of value movement seen by an address."""

    SEND = "send"
    RECEIVE = "receive"
    STAKE = "stake"
    COLD_STAKE = "cold_stake"
    DELEGATE_STAKE = "delegate_stake"
    COLD_DELEGATE_STAKE = "cold_delegate_stake"
    POOL_STAKE = "pool_stake"
    POOL_FEE = "pool_fee"
    COMMUNITY_FUND = "community_fund"
    COMMUNITY_FUND_PAYOUT = "community_fund_payout"


_STAKE_TRANSFERS = frozenset(
    {TransferType.STAKE, TransferType.DELEGATE_STAKE, TransferType.POOL_STAKE}
)
_COLD_STAKE_TRANSFERS = frozenset(
    {TransferType.COLD_STAKE, TransferType.COLD_DELEGATE_STAKE}
)


def is_stake(transfer_type: TransferType | str) -> bool:
    """True for plain, delegated and pool stakes."""
    return transfer_type in _STAKE_TRANSFERS


def is_cold_stake(transfer_type: TransferType | str) -> bool:
    """True for cold and cold delegated stakes."""
    return transfer_type in _COLD_STAKE_TRANSFERS