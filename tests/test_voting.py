from navindexer.block import Block, BlockCycle
from navindexer.transaction import BlockTransaction
from navindexer.types import VoutType
from navindexer.vin import Vin
from navindexer.votes import VoteType
from navindexer.vout import ScriptPubKey, Vout
from navindexer.voting import VOTE_INDEX, BlockHeader, HeaderVote, VoteIndexer, create_votes


class FakeStore:
    def __init__(self):
        self.indexed = []

    def add_index_request(self, index, entity):
        self.indexed.append((index, entity))


def coinbase_tx(height=7, vouts=None):
    return BlockTransaction(
        hash="cb",
        height=height,
        vin=[Vin(coinbase="03ab")],
        vout=vouts if vouts is not None else [],
    )


def pubkey_vout(address):
    return Vout(script_pub_key=ScriptPubKey(type=VoutType.PUBKEY, addresses=[address]))


def vote_vout(kind, item_hash):
    return Vout(script_pub_key=ScriptPubKey(type=kind, hash=item_hash))


def test_non_coinbase_has_no_votes():
    tx = BlockTransaction(vin=[Vin(txid="abc")])
    header = BlockHeader(cfund_votes=[HeaderVote("p", 1)])
    assert create_votes(Block(), tx, header, "voter") is None


def test_header_votes_in_order():
    block = Block(height=7, nonce=3, staked_by="staker", block_cycle=BlockCycle(cycle=4))
    header = BlockHeader(
        cfund_votes=[HeaderVote("p1", 1)],
        cfund_request_votes=[HeaderVote("r1", -1)],
        dao_support=["s1"],
        dao_votes=[HeaderVote("d1", 2)],
    )
    tx = coinbase_tx()
    votes = create_votes(block, tx, header, "voter")
    assert votes.address == "voter"
    assert votes.cycle == block.block_cycle.cycle
    assert votes.height == tx.height
    assert [(v.type, v.hash, v.vote) for v in votes.votes] == [
        (VoteType.EXCLUDE_VOTE, "staker", 0),
        (VoteType.PROPOSAL, "p1", 1),
        (VoteType.PAYMENT_REQUEST, "r1", -1),
        (VoteType.DAO_SUPPORT, "s1", 0),
        (VoteType.DAO_VOTE, "d1", 2),
    ]


def test_even_nonce_has_no_exclude_vote():
    header = BlockHeader(dao_support=["s1"])
    votes = create_votes(Block(nonce=2), coinbase_tx(), header, "voter")
    assert [v.type for v in votes.votes] == [VoteType.DAO_SUPPORT]


def test_legacy_votes_from_outputs():
    block = Block(staked_by="staker", block_cycle=BlockCycle(cycle=4))
    tx = coinbase_tx(
        vouts=[
            vote_vout(VoutType.PROPOSAL_YES_VOTE, "p1"),
            vote_vout(VoutType.PAYMENT_REQUEST_NO_VOTE, "r1"),
            pubkey_vout("x"),
        ]
    )
    votes = create_votes(block, tx, BlockHeader(), "voter")
    assert votes.address == "staker"
    assert votes.cycle == 0
    assert [(v.type, v.hash, v.vote) for v in votes.votes] == [
        (VoteType.PROPOSAL, "p1", 1),
        (VoteType.PAYMENT_REQUEST, "r1", -1),
    ]


def test_no_votes_at_all():
    tx = coinbase_tx(vouts=[pubkey_vout("x")])
    assert create_votes(Block(), tx, BlockHeader(), "voter") is None


def test_indexer_stores_votes():
    store = FakeStore()
    tx = coinbase_tx(vouts=[pubkey_vout("voter")])
    header = BlockHeader(dao_support=["s1"])
    result = VoteIndexer(store).index([tx], Block(), header)
    assert result.address == "voter"
    assert store.indexed == [(VOTE_INDEX, result)]


def test_indexer_without_voting_address_stores_nothing():
    store = FakeStore()
    tx = coinbase_tx(vouts=[Vout(script_pub_key=ScriptPubKey(type=VoutType.NONSTANDARD))])
    result = VoteIndexer(store).index([tx], Block(), BlockHeader(dao_support=["s1"]))
    assert result is None
    assert store.indexed == []


def test_indexer_without_votes_stores_nothing():
    store = FakeStore()
    tx = coinbase_tx(vouts=[pubkey_vout("voter")])
    assert VoteIndexer(store).index([tx], Block(), BlockHeader()) is None
    assert store.indexed == []