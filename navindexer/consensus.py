"""Consensus parameters: the cached current set, indexing and rewinding."""

from __future__ import annotations

import logging
import re
from typing import Any, Iterable

from .block import Block
from .dao import (
    ConsensusParameter,
    ConsensusParameters,
    ConsensusParameterType,
    Consultation,
    Parameter,
)

logger = logging.getLogger(__name__)

CONSENSUS_INDEX = "consensus"
MAINNET_BLOCK_CYCLE = 20160

_NUMBER = ConsensusParameterType.NUMBER
_PERCENT = ConsensusParameterType.PERCENT
_NAV = ConsensusParameterType.NAV
_BOOL = ConsensusParameterType.BOOL

# Mainnet defaults, in parameter id order: (description, type, value).
_MAINNET = (
    ("Length in blocks of a voting cycle", _NUMBER, 20160),
    ("Minimum of support needed for starting a range consultation", _PERCENT, 150),
    ("Minimum of support needed for a consultation answer proposal", _PERCENT, 150),
    ("Earliest cycle when a consultation can get in confirmation phase", _NUMBER, 2),
    ("Length in cycles for consultation votings", _NUMBER, 4),
    ("Maximum of voting cycles for a consultation to gain support", _NUMBER, 4),
    ("Length in cycles for the reflection phase of consultations", _NUMBER, 1),
    ("Minimum fee to submit a consultation", _NAV, 10000000000),
    ("Minimum fee to submit a consultation answer proposal", _NAV, 5000000000),
    ("Minimum of quorum for fund proposal votings", _PERCENT, 5000),
    ("Minimum of positive votes for a fund proposal to be accepted", _PERCENT, 7000),
    ("Minimum of negative votes for a fund proposal to be rejected", _PERCENT, 7000),
    ("Minimum fee to submit a fund proposal", _NAV, 5000000000),
    ("Maximum of voting cycles for fund proposal votings", _NUMBER, 6),
    ("Minimum of quorum for payment request votings", _PERCENT, 5000),
    ("Minimum of positive votes for a payment request to be accepted", _PERCENT, 7000),
    ("Minimum of negative votes for a payment request to be rejected", _PERCENT, 7000),
    ("Minimum fee to submit a payment request", _NAV, 0),
    ("Maximum of voting cycles for fund payment request votings", _NUMBER, 8),
    ("Frequency of the fund accumulation transaction", _NUMBER, 500),
    ("Percentage of generated NAV going to the Fund", _PERCENT, 2000),
    ("Amount of NAV generated per block", _NAV, 250000000),
    ("Yearly fee for registering a name in NavNS", _NAV, 10000000000),
    (
        "Minimum fee as a fund contribution to submit a DAO vote using a light wallet",
        _NAV,
        10000000,
    ),
    ("Confidential tokens enabled", _BOOL, 0),
    ("Length in blocks of a dotNAV registration", _NUMBER, 1152000),
    ("Max data in bytes attached to a dotNAV name without cost", _NUMBER, 1024),
    ("Fee for attaching extra data to a name", _NAV, 300000000),
)

# Values in which testnet differs from mainnet.
_TESTNET_OVERRIDES = {
    Parameter.VOTING_CYCLE_LENGTH: 800,
    Parameter.PROPOSAL_MIN_FEE: 10000,
}

_INTEGER = re.compile(r"[+-]?\d+")


def _parse_int(text: str) -> int:
    """Integer value of ``text``, or 0 when it is not an integer."""
    return int(text) if _INTEGER.fullmatch(text or "") else 0


def initial_parameters(block_cycle: int) -> ConsensusParameters:
    """The genesis consensus parameters: mainnet for a 20160-block cycle, else testnet."""
    testnet = block_cycle != MAINNET_BLOCK_CYCLE
    if testnet:
        logger.info("ConsensusService: Initialising Testnet Consensus parameters")
    else:
        logger.info("ConsensusService: Initialising Mainnet Consensus parameters")

    parameters = ConsensusParameters()
    for parameter_id, (description, kind, value) in enumerate(_MAINNET):
        if testnet:
            value = _TESTNET_OVERRIDES.get(Parameter(parameter_id), value)
        parameters.add(
            ConsensusParameter(
                id=parameter_id, description=description, type=kind, value=value
            )
        )
    return parameters


class ConsensusService:
    """Holds the current consensus parameters and writes them to the store."""

    def __init__(
        self, store: Any, repository: Any, block_cycle: int = MAINNET_BLOCK_CYCLE
    ) -> None:
        self.store = store
        self.repository = repository
        self.block_cycle = block_cycle
        self._parameters: ConsensusParameters | None = None

    def get_consensus_parameters(self) -> ConsensusParameters:
        """The current parameters; an empty set before any were loaded."""
        if self._parameters is None:
            return ConsensusParameters()
        return self._parameters

    def get_consensus_parameter(self, parameter: Parameter | int) -> ConsensusParameter | None:
        """The current value of ``parameter``, or None if it is unknown."""
        return self.get_consensus_parameters().get_consensus_parameter(parameter)

    def update(self, parameters: ConsensusParameters, persist: bool) -> None:
        """Make ``parameters`` current; save now if ``persist``, else queue updates."""
        self._parameters = parameters
        for parameter in parameters.all():
            if persist:
                self.store.save(CONSENSUS_INDEX, parameter)
            else:
                self.store.add_update_request(CONSENSUS_INDEX, parameter)

    def init_consensus_parameters(self) -> None:
        """Load the stored parameters, falling back to the initial state."""
        parameters = self.repository.get_consensus_parameters()
        if not parameters.all():
            parameters = self.initial_state()
            for parameter in parameters.all():
                parameter.updated_on_block = 0

        for parameter in parameters.all():
            logger.info(
                "ConsensusService: Parameter initialised name=%s value=%d",
                parameter.description,
                parameter.value,
            )
        self.update(parameters, True)

    def initial_state(self) -> ConsensusParameters:
        return initial_parameters(self.block_cycle)


class ConsensusIndexer:
    """Stores the parameters that changed in an indexed block."""

    def __init__(self, store: Any, service: ConsensusService) -> None:
        self.store = store
        self.service = service

    def update(self, block: Block) -> None:
        for parameter in self.service.get_consensus_parameters().all():
            if parameter.updated_on_block == block.height:
                self.store.save(CONSENSUS_INDEX, parameter)


class ConsensusRewinder:
    """Rebuilds the parameters from the initial state and passed consultations."""

    def __init__(self, service: ConsensusService) -> None:
        self.service = service

    def rewind(self, consultations: Iterable[Consultation]) -> None:
        logger.info("ConsensusRewinder: Rewind on initial state")
        parameters = self.service.initial_state()

        for consultation in consultations:
            answer = consultation.get_passed_answer()
            if answer is None:
                continue
            for parameter in parameters.all():
                if consultation.min != parameter.id:
                    continue
                value = _parse_int(answer.answer)
                logger.info(
                    "ConsensusRewinder: Update Consensus Parameter name=%s old=%d new=%d",
                    parameter.description,
                    parameter.value,
                    value,
                )
                parameter.value = value
                parameter.updated_on_block = consultation.updated_on_block

        self.service.update(parameters, True)