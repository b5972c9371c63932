import pytest

from navindexer.signalling import Signal, SoftFork, SoftForkCycle, SoftForks
from navindexer.types import SoftForkState


def test_signal_slug():
    assert Signal(address="NAddr", height=42).slug() == "signal-naddr-42"


def test_signal_is_signalling():
    assert Signal(soft_forks=["segwit"]).is_signalling()
    assert not Signal().is_signalling()


def test_delete_soft_fork_removes_all_occurrences():
    sig = Signal(soft_forks=["a", "b", "a", "c"])
    sig.delete_soft_fork("a")
    assert sig.soft_forks == ["b", "c"]
    sig.delete_soft_fork("missing")
    assert sig.soft_forks == ["b", "c"]


def test_soft_fork_slug():
    assert SoftFork(name="ColdStaking").slug() == "softfork-coldstaking"


@pytest.mark.parametrize(
    "state,expected",
    [
        (SoftForkState.DEFINED, True),
        (SoftForkState.STARTED, True),
        (SoftForkState.FAILED, True),
        (SoftForkState.LOCKED_IN, False),
        (SoftForkState.ACTIVE, False),
    ],
)
def test_is_open(state, expected):
    assert SoftFork(state=state).is_open() is expected


def test_is_active():
    assert SoftFork(state=SoftForkState.ACTIVE).is_active()
    assert not SoftFork(state=SoftForkState.LOCKED_IN).is_active()


def test_missing_state_raises():
    with pytest.raises(ValueError):
        SoftFork().is_open()
    with pytest.raises(ValueError):
        SoftFork().is_active()


def test_get_cycle_returns_stored_object():
    fork = SoftFork(cycles=[SoftForkCycle(cycle=1), SoftForkCycle(cycle=2)])
    found = fork.get_cycle(2)
    assert found is fork.cycles[1]
    found.blocks_signalling += 1
    assert fork.cycles[1].blocks_signalling == 1
    assert fork.get_cycle(3) is None


def test_latest_cycle():
    fork = SoftFork(cycles=[SoftForkCycle(cycle=1), SoftForkCycle(cycle=5)])
    assert fork.latest_cycle() is fork.cycles[-1]
    assert SoftFork().latest_cycle() is None


def test_soft_forks_lookup():
    static = SoftFork(name="static")
    segwit = SoftFork(name="segwit")
    forks = SoftForks([segwit, static])
    assert forks.get_soft_fork("segwit") is segwit
    assert forks.has_soft_fork("static")
    assert not forks.has_soft_fork("unknown")
    assert forks.get_soft_fork("unknown") is None
    assert forks.static_rewards() is static
    assert SoftForks([segwit]).static_rewards() is None