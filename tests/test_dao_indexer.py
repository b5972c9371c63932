import pytest

from navindexer.block import Block, BlockCycle
from navindexer.consultation import CONSULTATION_INDEX
from navindexer.dao import Consultation
from navindexer.dao_indexer import DaoIndexer, DaoRewinder
from navindexer.payment_request import PAYMENT_REQUEST_INDEX
from navindexer.proposal import PROPOSAL_INDEX
from navindexer.voting import VOTE_INDEX, BlockHeader


class Recorder:
    def __init__(self, name, log):
        self.name = name
        self.log = log

    def index(self, *args):
        self.log.append((self.name, "index", args))

    def update(self, *args):
        self.log.append((self.name, "update", args))


def _indexer(log):
    return DaoIndexer(
        Recorder("proposal", log),
        Recorder("payment", log),
        Recorder("consultation", log),
        Recorder("vote", log),
        Recorder("consensus", log),
    )


def test_index_runs_updates_in_order_without_consensus_mid_cycle():
    log = []
    block = Block(height=3, block_cycle=BlockCycle(size=10, index=3))
    header = BlockHeader()
    _indexer(log).index(block, iter(["tx"]), header)

    first = {entry[0] for entry in log[:3]}
    assert first == {"proposal", "payment", "consultation"}
    assert all(entry[2] == (["tx"],) for entry in log[:3])
    assert [entry[:2] for entry in log[3:]] == [
        ("vote", "index"),
        ("proposal", "update"),
        ("payment", "update"),
        ("consultation", "update"),
    ]
    assert log[3][2] == (["tx"], block, header)
    assert log[4][2] == (block.block_cycle, block)


def test_index_updates_consensus_at_cycle_end():
    log = []
    block = Block(height=9, block_cycle=BlockCycle(size=10, index=9))
    _indexer(log).index(block, [], BlockHeader())
    assert log[-1] == ("consensus", "update", (block,))


def test_index_propagates_sub_indexer_failure():
    class Failing(Recorder):
        def index(self, *args):
            raise RuntimeError("boom")

    log = []
    indexer = _indexer(log)
    indexer.payment_request_indexer = Failing("payment", log)
    with pytest.raises(RuntimeError):
        indexer.index(Block(), [], BlockHeader())
    assert not any(entry[0] == "vote" for entry in log)


class FakeStore:
    def __init__(self):
        self.deleted = []

    def delete_height_gt(self, height, *indices):
        self.deleted.append((height, indices))


class FakeConsensusRewinder:
    def __init__(self):
        self.calls = []

    def rewind(self, consultations):
        self.calls.append(consultations)


class FakeRepository:
    def __init__(self, result=None, error=None):
        self.result = result or []
        self.error = error
        self.heights = []

    def get_passed_consultations(self, height):
        self.heights.append(height)
        if self.error:
            raise self.error
        return self.result


def test_rewind_replays_consensus_and_deletes_newer_documents():
    passed = [Consultation(hash="c1")]
    store = FakeStore()
    consensus = FakeConsensusRewinder()
    repository = FakeRepository(passed)
    DaoRewinder(store, consensus, repository).rewind(42)

    assert repository.heights == [42]
    assert consensus.calls == [passed]
    assert store.deleted == [
        (42, (CONSULTATION_INDEX, PROPOSAL_INDEX, PAYMENT_REQUEST_INDEX, VOTE_INDEX))
    ]


def test_rewind_stops_on_repository_error():
    store = FakeStore()
    consensus = FakeConsensusRewinder()
    rewinder = DaoRewinder(store, consensus, FakeRepository(error=ConnectionError("down")))
    with pytest.raises(ConnectionError):
        rewinder.rewind(5)
    assert consensus.calls == []
    assert store.deleted == []