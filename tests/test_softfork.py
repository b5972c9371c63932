from datetime import datetime

import pytest

from navindexer.block import Block, BlockCycle
from navindexer.signalling import Signal, SoftFork, SoftForkCycle, SoftForks
from navindexer.softfork import (
    SIGNAL_INDEX,
    SOFT_FORK_INDEX,
    SoftForkIndexer,
    SoftForkRewinder,
    SoftForkService,
    SoftForkTracker,
    create_signal,
    get_soft_fork_block_cycle,
)
from navindexer.types import SoftForkState


class FakeStore:
    def __init__(self):
        self.saved = []
        self.updates = []
        self.indexed = []
        self.deleted = []

    def save(self, index, entity):
        self.saved.append((index, entity))

    def add_update_request(self, index, entity):
        self.updates.append((index, entity))

    def add_index_request(self, index, entity):
        self.indexed.append((index, entity))

    def delete_height_gt(self, height, *indices):
        self.deleted.append((height, indices))


class FakeNode:
    def __init__(self, forks):
        self.forks = forks

    def get_blockchain_info(self):
        return {"bip9_softforks": self.forks}


class FakeRepository:
    def __init__(self, forks=None, error=None):
        self.forks = forks or []
        self.error = error

    def get_soft_forks(self):
        if self.error is not None:
            raise self.error
        return SoftForks(self.forks)


class FakeSignalRepository:
    def __init__(self, signals):
        self.signals = signals

    def get_signals(self, start, end):
        return [s for s in self.signals if start <= s.height <= end]


@pytest.mark.parametrize("height", [0, 1, 9, 10, 25, 99, 100])
def test_block_cycle_invariants(height):
    size = 10
    cycle = get_soft_fork_block_cycle(size, height)
    assert cycle.size == size
    assert 0 <= cycle.index < size
    assert (cycle.cycle - 1) * size + cycle.index == height


def test_create_signal_with_bit_set():
    fork = SoftFork(name="csv", signal_bit=1, state=SoftForkState.STARTED)
    block = Block(height=5, version=1 << 1, staked_by="staker")
    sig = create_signal(block, [fork])
    assert sig.soft_forks == ["csv"]
    assert sig.address == "staker"
    assert sig.height == 5


def test_create_signal_without_bit():
    fork = SoftFork(name="csv", signal_bit=2, state=SoftForkState.STARTED)
    assert create_signal(Block(height=5, version=1 << 1), [fork]) is None


def test_create_signal_locked_in_and_active():
    locked = SoftFork(name="locked", signal_bit=0, state=SoftForkState.LOCKED_IN, locked_in_height=10)
    active = SoftFork(name="active", signal_bit=0, state=SoftForkState.ACTIVE)
    assert create_signal(Block(height=10, version=1), [locked, active]).soft_forks == ["locked"]
    assert create_signal(Block(height=11, version=1), [locked, active]) is None


def test_create_signal_requires_state():
    fork = SoftFork(name="csv", signal_bit=0)
    with pytest.raises(ValueError):
        create_signal(Block(height=1, version=1), [fork])


def test_add_signal_starts_fork_and_counts():
    tracker = SoftForkTracker([SoftFork(name="csv", state=SoftForkState.DEFINED)])
    heights = [3, 4, 5]
    for h in heights:
        tracker.add_signal(Signal(address="a", height=h, soft_forks=["csv"]), h, 10)
    fork = tracker.soft_forks.get_soft_fork("csv")
    assert fork.state == SoftForkState.STARTED
    assert fork.signal_height == heights[-1]
    assert len(fork.cycles) == 1
    assert fork.cycles[0].blocks_signalling == len(heights)
    assert fork.cycles[0].cycle == get_soft_fork_block_cycle(10, heights[0]).cycle


def test_add_signal_ignores_unknown_and_closed():
    active = SoftFork(name="done", state=SoftForkState.ACTIVE)
    tracker = SoftForkTracker([active])
    tracker.add_signal(Signal(soft_forks=["done", "missing"]), 1, 10)
    assert active.cycles == []
    assert active.signal_height == 0


def test_update_state_locks_in_and_activates():
    blocks = 10
    tracker = SoftForkTracker([SoftFork(name="csv", state=SoftForkState.DEFINED)])
    for h in range(8):
        tracker.add_signal(Signal(height=h, soft_forks=["csv"]), h, blocks)
    tracker.update_state(blocks - 1, blocks, 75)
    fork = tracker.soft_forks[0]
    assert fork.state == SoftForkState.LOCKED_IN
    assert fork.locked_in_height == blocks
    assert fork.activation_height == fork.locked_in_height + blocks

    tracker.update_state(fork.activation_height - 2, blocks, 75)
    assert fork.state == SoftForkState.LOCKED_IN
    tracker.update_state(fork.activation_height - 1, blocks, 75)
    assert fork.state == SoftForkState.ACTIVE


def test_update_state_without_quorum_stays_started():
    tracker = SoftForkTracker([SoftFork(name="csv", state=SoftForkState.DEFINED)])
    tracker.add_signal(Signal(height=0, soft_forks=["csv"]), 0, 10)
    tracker.update_state(9, 10, 75)
    assert tracker.soft_forks[0].state == SoftForkState.STARTED


def test_reset_returns_to_defined():
    start = datetime(2020, 1, 1)
    fork = SoftFork(
        name="csv",
        signal_bit=3,
        start_time=start,
        state=SoftForkState.ACTIVE,
        locked_in_height=10,
        cycles=[SoftForkCycle(cycle=1, blocks_signalling=8)],
    )
    tracker = SoftForkTracker([fork])
    tracker.reset()
    reset = tracker.soft_forks[0]
    assert reset.state == SoftForkState.DEFINED
    assert reset.cycles == []
    assert reset.locked_in_height == 0
    assert reset.signal_bit == 3
    assert reset.start_time == start


def test_service_creates_new_forks():
    store = FakeStore()
    tracker = SoftForkTracker()
    node = FakeNode({"csv": {"bit": 0, "startTime": 1000, "timeout": 2000}})
    SoftForkService(node, store, FakeRepository(), tracker).init_soft_forks()
    fork = tracker.soft_forks.get_soft_fork("csv")
    assert fork.state == SoftForkState.DEFINED
    assert fork.start_time.timestamp() == 1000
    assert fork.timeout.timestamp() == 2000
    assert store.saved == [(SOFT_FORK_INDEX, fork)]


def test_service_updates_signal_bit_of_existing_fork():
    store = FakeStore()
    tracker = SoftForkTracker()
    existing = SoftFork(name="csv", signal_bit=0, state=SoftForkState.STARTED)
    node = FakeNode({"csv": {"bit": 4, "startTime": 1, "timeout": 2}})
    SoftForkService(node, store, FakeRepository([existing]), tracker).init_soft_forks()
    assert tracker.soft_forks == [existing]
    assert existing.signal_bit == 4
    assert existing.state == SoftForkState.STARTED
    assert store.saved == [(SOFT_FORK_INDEX, existing)]


def test_service_treats_missing_results_as_empty():
    tracker = SoftForkTracker()
    node = FakeNode({"csv": {"bit": 0, "startTime": 1, "timeout": 2}})
    repository = FakeRepository(error=LookupError("not found"))
    SoftForkService(node, FakeStore(), repository, tracker).init_soft_forks()
    assert [f.name for f in tracker.soft_forks] == ["csv"]


def test_service_propagates_other_errors():
    node = FakeNode({})
    repository = FakeRepository(error=RuntimeError("boom"))
    with pytest.raises(RuntimeError):
        SoftForkService(node, FakeStore(), repository, SoftForkTracker()).init_soft_forks()


def test_indexer_stores_signal_and_updates_forks():
    store = FakeStore()
    fork = SoftFork(name="csv", signal_bit=0, state=SoftForkState.DEFINED)
    tracker = SoftForkTracker([fork])
    block = Block(height=3, version=1, staked_by="s", block_cycle=BlockCycle(size=10, cycle=1, index=3))
    sig = SoftForkIndexer(store, tracker, 10, 75).index(block)
    assert sig.soft_forks == ["csv"]
    assert store.indexed == [(SIGNAL_INDEX, sig)]
    assert store.updates == [(SOFT_FORK_INDEX, fork)]
    assert fork.state == SoftForkState.STARTED


def test_indexer_drops_forks_activated_at_cycle_end():
    store = FakeStore()
    fork = SoftFork(
        name="csv",
        signal_bit=0,
        state=SoftForkState.LOCKED_IN,
        locked_in_height=10,
        activation_height=10,
        cycles=[SoftForkCycle(cycle=1, blocks_signalling=8)],
    )
    tracker = SoftForkTracker([fork])
    block = Block(height=9, version=1, block_cycle=BlockCycle(size=10, cycle=1, index=9))
    result = SoftForkIndexer(store, tracker, 10, 75).index(block)
    assert fork.state == SoftForkState.ACTIVE
    assert result is None
    assert store.indexed == []


def test_rewinder_replays_signals():
    store = FakeStore()
    tracker = SoftForkTracker([SoftFork(name="csv", state=SoftForkState.ACTIVE, locked_in_height=99)])
    signals = [Signal(address="a", height=h, soft_forks=["csv"]) for h in range(8)]
    rewinder = SoftForkRewinder(store, FakeSignalRepository(signals), tracker, 10, 75)
    rewinder.rewind(20)
    fork = tracker.soft_forks[0]
    assert store.deleted == [(20, (SIGNAL_INDEX,))]
    assert fork.state == SoftForkState.LOCKED_IN
    assert fork.cycles[0].blocks_signalling == len(signals)
    assert store.saved == [(SOFT_FORK_INDEX, fork)]


def test_rewinder_at_zero_only_resets():
    store = FakeStore()
    tracker = SoftForkTracker([SoftFork(name="csv", state=SoftForkState.ACTIVE)])
    signals = [Signal(height=0, soft_forks=["csv"])]
    SoftForkRewinder(store, FakeSignalRepository(signals), tracker, 10, 75).rewind(0)
    assert tracker.soft_forks[0].state == SoftForkState.DEFINED
    assert tracker.soft_forks[0].cycles == []