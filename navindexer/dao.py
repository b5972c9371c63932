"""DAO consultations, their answers and consensus parameters."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Iterable, Iterator

from .entity import make_slug
from .status import AnswerStatus, ConsultationStatus

logger = logging.getLogger(__name__)


@dataclass
class Answer:
    """An answer to a consultation."""

    version: int = 0
    answer: str = ""
    support: int = 0
    votes: int = 0
    state: int = 0
    status: str = ""
    found_support: bool = False
    state_changed_on_block: str = ""
    tx_block_hash: str = ""
    parent: str = ""
    hash: str = ""
    map_state: dict[int, str] = field(default_factory=dict)


@dataclass
class Consultation:
    """A DAO consultation."""

    version: int = 0
    hash: str = ""
    block_hash: str = ""
    question: str = ""
    support: int = 0
    abstain: int = 0
    answers: list[Answer] = field(default_factory=list)
    range_answers: dict[str, int] = field(default_factory=dict)
    min: int = 0
    max: int = 0
    voting_cycles_from_creation: int = 0
    voting_cycle_for_state: int = 0
    state: int = 0
    status: str = ""
    found_support: bool = False
    state_changed_on_block: str = ""
    height: int = 0
    updated_on_block: int = 0
    proposed_by: str = ""
    map_state: dict[int, str] = field(default_factory=dict)

    answer_is_a_range: bool = False
    more_answers: bool = False
    consensus_parameter: bool = False

    def slug(self) -> str:
        return make_slug(self.hash)

    def has_answer_with_support(self) -> bool:
        return any(a.found_support for a in self.answers)

    def has_passed_answer(self) -> bool:
        """True when the consultation passed and one of its answers passed."""
        return self.get_passed_answer() is not None

    def get_passed_answer(self) -> Answer | None:
        """The first passed answer of a passed consultation, else None."""
        if self.state != ConsultationStatus.PASSED.state:
            return None
        return next(
            (a for a in self.answers if a.state == AnswerStatus.PASSED.state), None
        )


class ConsensusParameterType(IntEnum):
    """How a consensus parameter's value is interpreted."""

    NUMBER = 0
    PERCENT = 1
    NAV = 2
    BOOL = 3


class Parameter(IntEnum):
    """Identifiers of the consensus parameters."""

    VOTING_CYCLE_LENGTH = 0
    CONSULTATION_MIN_SUPPORT = 1
    CONSULTATION_ANSWER_MIN_SUPPORT = 2
    CONSULTATION_MIN_CYCLES = 3
    CONSULTATION_MAX_VOTING_CYCLES = 4
    CONSULTATION_MAX_SUPPORT_CYCLES = 5
    CONSULTATION_REFLECTION_LENGTH = 6
    CONSULTATION_MIN_FEE = 7
    CONSULTATION_ANSWER_MIN_FEE = 8
    PROPOSAL_MIN_QUORUM = 9
    PROPOSAL_MIN_ACCEPT = 10
    PROPOSAL_MIN_REJECT = 11
    PROPOSAL_MIN_FEE = 12
    PROPOSAL_MAX_VOTING_CYCLES = 13
    PAYMENT_REQUEST_MIN_QUORUM = 14
    PAYMENT_REQUEST_MIN_ACCEPT = 15
    PAYMENT_REQUEST_MIN_REJECT = 16
    PAYMENT_REQUEST_MIN_FEE = 17
    PAYMENT_REQUEST_MAX_VOTING_CYCLES = 18
    FUND_SPREAD_ACCUMULATION = 19
    FUND_PERCENT_PER_BLOCK = 20
    GENERATION_PER_BLOCK = 21
    NAVNS_FEE = 22
    CONSENSUS_PARAMS_DAO_VOTE_LIGHT_MIN_FEE = 23
    CONFIDENTIAL_TOKENS_ENABLED = 24
    LENGTH_IN_BLOCKS_OF_A_DOTNAV_REGISTRATION = 25
    MAX_DATA_IN_BYTES_ATTACHED_TO_A_DOTNAV_NAME_WITHOUT_FEE = 26
    FEE_FOR_ATTACHING_EXTRA_DATA_TO_A_NAME = 27


@dataclass
class ConsensusParameter:
    """One consensus parameter and the block it last changed on."""

    id: int = 0
    description: str = ""
    type: ConsensusParameterType | int = ConsensusParameterType.NUMBER
    value: int = 0
    updated_on_block: int = 0

    def slug(self) -> str:
        return make_slug(f"consensus-{self.id}")


class ConsensusParameters:
    """An ordered collection of consensus parameters."""

    def __init__(self, parameters: Iterable[ConsensusParameter] = ()) -> None:
        self._data: list[ConsensusParameter] = []
        for parameter in parameters:
            self.add(parameter)

    def add(self, parameter: ConsensusParameter) -> None:
        logger.info("Add Parameter (%s)", parameter.description)
        self._data.append(parameter)

    def all(self) -> list[ConsensusParameter]:
        return self._data

    def get_consensus_parameter(self, parameter: Parameter | int) -> ConsensusParameter | None:
        """The parameter identified by ``parameter``, or None."""
        return self.get_consensus_parameter_by_id(int(parameter))

    def get_consensus_parameter_by_id(self, parameter_id: int) -> ConsensusParameter | None:
        return next((p for p in self._data if p.id == parameter_id), None)

    def __iter__(self) -> Iterator[ConsensusParameter]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)