# navindexer

Data models and indexing services for a NavCoin block explorer.

`navindexer` describes blocks, transactions, inputs and outputs, addresses,
soft forks and the DAO: community fund proposals, payment requests,
consultations and consensus parameters. It also provides the services that
follow these objects from block to block and hand them to a document store.

## Installation

```
pip install navindexer
```

For running the test suite:

```
pip install "navindexer[test]"
pytest
```

## Modules

| Module | Contents |
| --- | --- |
| `navindexer.entity` | `Entity` and `ChainHeight` protocols, `make_slug` |
| `navindexer.types` | `VoutType`, `BlockTransactionType`, `SoftForkState`, `TransferType`, `is_stake`, `is_cold_stake` |
| `navindexer.vout` | `ScriptPubKey`, `RedeemedIn`, `MultiSig`, `Vout`, `Vouts` |
| `navindexer.vin` | `ScriptSig`, `PreviousOutput`, `Vin`, `Vins` |
| `navindexer.block` | `Block`, `BlockCycle`, `SupplyBalance`, `SupplyChange`, `Cfund`, `get_quorum` |
| `navindexer.transaction` | `BlockTransaction`, `BlockTransactions`, `create_block_tx_slug` |
| `navindexer.address` | `Address`, `RichList`, `AddressHistory`, `AddressChanges`, `AddressBalance`, `AddressReward`, `BalanceType` |
| `navindexer.signalling` | `Signal`, `SoftFork`, `SoftForkCycle`, `SoftForks` |
| `navindexer.votes` | `Vote`, `DaoVotes`, `VoteType` |
| `navindexer.status` | `PaymentRequestStatus`, `ProposalStatus`, `AnswerStatus`, `ConsultationStatus` and lookup functions |
| `navindexer.cfund` | `Proposal`, `PaymentRequest` |
| `navindexer.dao` | `Consultation`, `Answer`, `ConsensusParameter`, `ConsensusParameters`, `ConsensusParameterType`, `Parameter` |
| `navindexer.softfork` | `get_soft_fork_block_cycle`, `create_signal`, `SoftForkTracker`, `SoftForkService`, `SoftForkIndexer`, `SoftForkRewinder` |
| `navindexer.voting` | `HeaderVote`, `BlockHeader`, `create_votes`, `VoteIndexer` |
| `navindexer.proposal` | `NodeProposal`, `create_proposal`, `update_proposal`, `Proposals`, `ProposalIndexer`, `ProposalService` |
| `navindexer.payment_request` | `NodePaymentRequest`, `create_payment_request`, `update_payment_request`, `PaymentRequests`, `PaymentRequestIndexer`, `PaymentRequestService` |
| `navindexer.consultation` | `NodeAnswer`, `NodeConsultation`, `create_consultation`, `update_consultation`, `answer_support_required`, `consultation_support_required`, `Consultations`, `ConsultationIndexer`, `ConsultationService` |
| `navindexer.consensus` | `initial_parameters`, `ConsensusService`, `ConsensusIndexer`, `ConsensusRewinder` |
| `navindexer.dao_indexer` | `DaoIndexer`, `DaoRewinder` |

## Example

```python
from navindexer.block import BlockCycle, get_quorum
from navindexer.signalling import Signal
from navindexer.status import get_proposal_status_by_state

cycle = BlockCycle(size=20160, cycle=3, index=20159)
assert cycle.is_end()

# 75% of a 20160-block cycle
assert get_quorum(20160, 75) == 15120

signal = Signal(address="NaddressPlaceholder", height=100, soft_forks=["static"])
signal.delete_soft_fork("static")
assert not signal.is_signalling()

assert get_proposal_status_by_state(4).status == "pending_funds"
```

## Errors

- The status lookups such as `get_proposal_status_by_state` raise
  `ValueError` for an unknown state or status.
- `Vouts.get_voting_address` raises `LookupError` when no output names a
  voting address.
- `SoftFork.is_open` and `SoftFork.is_active` raise `ValueError` when the
  soft fork has no state.
- `Vins.first` raises `IndexError` for a transaction without inputs.

## Connecting the services

The services take their collaborators as constructor arguments and only call
methods on them, so any object offering those methods will do.

A document store is used through:

- `save(index, document)`
- `add_update_request(index, document)`
- `add_index_request(index, document)`
- `delete_height_gt(height, *indexes)`

The index names are `"softfork"`, `"signal"`, `"daovote"`, `"proposal"`,
`"paymentrequest"`, `"daoconsultation"` and `"consensus"`.

A node client is used through `get_blockchain_info()` (a mapping with a
`"bip9_softforks"` entry), `get_proposal(hash)` returning a `NodeProposal`,
`get_payment_request(hash)` returning a `NodePaymentRequest`, and
`get_consultation(hash)` returning a `NodeConsultation`.

Repositories are used through `get_soft_forks()`, `get_signals(start, end)`,
`get_consensus_parameters()`, `get_possible_voting_proposals(height)`,
`get_possible_voting_requests(height)`, `get_open_consultations(height)` and
`get_passed_consultations(height)`.

## What the package does not do

`navindexer` contains no node RPC client, no document store or search
backend, no repository implementations and no command-line program. It
builds and updates the documents and tells the objects you supply what to
store; fetching blocks and persisting documents is up to the caller.