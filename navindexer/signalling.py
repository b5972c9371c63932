"""Soft-fork signals from stakers and the soft forks they signal for."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from .entity import make_slug
from .types import SoftForkState

_OPEN_STATES = (SoftForkState.DEFINED, SoftForkState.STARTED, SoftForkState.FAILED)


@dataclass
class Signal:
    """The soft forks a staker signalled for at one height."""

    address: str = ""
    height: int = 0
    soft_forks: list[str] = field(default_factory=list)

    def slug(self) -> str:
        return make_slug(f"signal-{self.address}-{self.height}")

    def is_signalling(self) -> bool:
        return bool(self.soft_forks)

    def delete_soft_fork(self, name: str) -> None:
        """Drop every occurrence of ``name`` from the signalled soft forks."""
        self.soft_forks = [s for s in self.soft_forks if s != name]


@dataclass
class SoftForkCycle:
    """Number of signalling blocks seen in one cycle."""

    cycle: int = 0
    blocks_signalling: int = 0


@dataclass
class SoftFork:
    """A soft-fork deployment and its signalling progress."""

    name: str = ""
    signal_bit: int = 0
    start_time: datetime | None = None
    timeout: datetime | None = None
    state: SoftForkState | str = ""
    locked_in_height: int = 0
    activation_height: int = 0
    signal_height: int = 0
    cycles: list[SoftForkCycle] = field(default_factory=list)

    def slug(self) -> str:
        return make_slug(f"softfork-{self.name}")

    def _require_state(self) -> None:
        if not self.state:
            raise ValueError("State cannot be null")

    def is_open(self) -> bool:
        """True while the fork can still gather signals."""
        self._require_state()
        return self.state in _OPEN_STATES

    def is_active(self) -> bool:
        self._require_state()
        return self.state == SoftForkState.ACTIVE

    def get_cycle(self, cycle: int) -> SoftForkCycle | None:
        return next((c for c in self.cycles if c.cycle == cycle), None)

    def latest_cycle(self) -> SoftForkCycle | None:
        return self.cycles[-1] if self.cycles else None


class SoftForks(list):
    """The known soft forks."""

    def get_soft_fork(self, name: str) -> SoftFork | None:
        return next((s for s in self if s.name == name), None)

    def has_soft_fork(self, name: str) -> bool:
        return self.get_soft_fork(name) is not None

    def static_rewards(self) -> SoftFork | None:
        """The soft fork named ``static``, if known."""
        return self.get_soft_fork("static")