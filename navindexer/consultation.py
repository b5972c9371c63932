"""Indexing of DAO consultations and their answers."""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass, field
from typing import Any, Iterable

from .block import Block, BlockCycle
from .dao import Answer, ConsensusParameter, ConsensusParameters, Consultation, Parameter
from .status import (
    ConsultationStatus,
    get_answer_status_by_state,
    get_consultation_status_by_state,
)
from .transaction import BlockTransaction

logger = logging.getLogger(__name__)

CONSULTATION_INDEX = "daoconsultation"

_INTEGER = re.compile(r"[+-]?\d+")


@dataclass
class NodeAnswer:
    """A consultation answer as reported by the node."""

    version: int = 0
    answer: str | list[str] = ""
    support: int = 0
    votes: int = 0
    state: int = 0
    state_changed_on_block: str = ""
    tx_block_hash: str = ""
    parent: str = ""
    hash: str = ""
    map_state: dict[int, str] = field(default_factory=dict)


@dataclass
class NodeConsultation:
    """A consultation as reported by the node."""

    version: int = 0
    hash: str = ""
    block_hash: str = ""
    question: str = ""
    support: int = 0
    min: int = 0
    max: int = 0
    state: int = 0
    state_changed_on_block: str = ""
    answers: list[NodeAnswer] = field(default_factory=list)
    range_answers: dict[str, int] = field(default_factory=dict)
    voting_cycles_from_creation: int = 0
    voting_cycle_for_state: int = 0
    map_state: dict[int, str] = field(default_factory=dict)


def _parse_int(text: str) -> int:
    return int(text) if _INTEGER.fullmatch(text or "") else 0


def _create_answer(node_answer: NodeAnswer) -> Answer:
    text = node_answer.answer
    if isinstance(text, (list, tuple)):
        text = ",".join(text)
    return Answer(
        version=node_answer.version,
        answer=text if isinstance(text, str) else "",
        support=node_answer.support,
        votes=node_answer.votes,
        state=node_answer.state,
        status=get_answer_status_by_state(node_answer.state).status,
        state_changed_on_block=node_answer.state_changed_on_block,
        found_support=False,
        tx_block_hash=node_answer.tx_block_hash,
        parent=node_answer.parent,
        hash=node_answer.hash,
        map_state=dict(node_answer.map_state),
    )


def create_consultation(
    node_consultation: NodeConsultation, tx: BlockTransaction | None
) -> Consultation:
    """A consultation built from the node's view, proposed in ``tx`` if given."""
    version = node_consultation.version
    consultation = Consultation(
        version=version,
        hash=node_consultation.hash,
        block_hash=node_consultation.block_hash,
        question=node_consultation.question,
        support=node_consultation.support,
        min=node_consultation.min,
        max=node_consultation.max,
        state=node_consultation.state,
        status=get_consultation_status_by_state(node_consultation.state).status,
        found_support=False,
        state_changed_on_block=node_consultation.state_changed_on_block,
        answer_is_a_range=bool(version >> 1 & 1),
        more_answers=bool(version >> 2 & 1),
        consensus_parameter=bool(version >> 3 & 1),
    )
    if tx is not None:
        consultation.height = tx.height
        consultation.updated_on_block = tx.height
        consultation.proposed_by = tx.vin.first().addresses[0]

    if consultation.answer_is_a_range:
        consultation.range_answers = dict(node_consultation.range_answers)
    else:
        consultation.answers = [_create_answer(a) for a in node_consultation.answers]
    return consultation


def consultation_support_required() -> int:
    """Support a consultation needs; not enforced, so always zero."""
    return 0


def answer_support_required(
    min_support: ConsensusParameter | None, voting_cycle_length: ConsensusParameter | None
) -> int:
    """Blocks of support an answer needs within one voting cycle."""
    if min_support is None or voting_cycle_length is None:
        raise LookupError("consensus parameters for answer support are missing")
    return int(math.ceil((min_support.value / 10000) * voting_cycle_length.value))


def _update_range_answers(node_consultation: NodeConsultation, consultation: Consultation) -> bool:
    consultation.range_answers = dict(node_consultation.range_answers)
    consultation.answers = []
    return bool(consultation.range_answers)


def _update_answers(
    node_consultation: NodeConsultation,
    consultation: Consultation,
    parameters: ConsensusParameters,
) -> bool:
    updated = False
    for node_answer in node_consultation.answers:
        answer = next((a for a in consultation.answers if a.hash == node_answer.hash), None)
        if answer is None:
            consultation.answers.append(_create_answer(node_answer))
            updated = True
            continue

        if answer.support != node_answer.support:
            answer.support = node_answer.support
            updated = True
        if answer.state_changed_on_block != node_answer.state_changed_on_block:
            answer.state_changed_on_block = node_answer.state_changed_on_block
            updated = True
        if answer.state != node_answer.state:
            answer.state = node_answer.state
            answer.status = get_answer_status_by_state(answer.state).status
            updated = True

        supported = answer.support >= answer_support_required(
            parameters.get_consensus_parameter(Parameter.CONSULTATION_ANSWER_MIN_SUPPORT),
            parameters.get_consensus_parameter(Parameter.VOTING_CYCLE_LENGTH),
        )
        if answer.found_support != supported:
            logger.debug("UpdateAnswer: consultation=%s supported=%s", node_consultation.hash, supported)
            answer.found_support = supported
            updated = True
        if answer.votes != node_answer.votes:
            answer.votes = node_answer.votes
            updated = True
    return updated


def update_consultation(
    node_consultation: NodeConsultation,
    consultation: Consultation,
    parameters: ConsensusParameters,
) -> bool:
    """Copy the node's changes into ``consultation``; report whether to store it."""
    updated = False
    if node_consultation.support != consultation.support:
        consultation.support = node_consultation.support
        updated = True
    if node_consultation.voting_cycles_from_creation != consultation.voting_cycles_from_creation:
        consultation.voting_cycles_from_creation = node_consultation.voting_cycles_from_creation
        updated = True
    if node_consultation.voting_cycle_for_state != consultation.voting_cycle_for_state:
        consultation.voting_cycle_for_state = node_consultation.voting_cycle_for_state
        updated = True

    # The answers' outcome replaces whatever was decided above.
    if consultation.answer_is_a_range:
        updated = _update_range_answers(node_consultation, consultation)
    else:
        updated = _update_answers(node_consultation, consultation, parameters)

    if node_consultation.state != consultation.state:
        consultation.state = node_consultation.state
        consultation.status = get_consultation_status_by_state(consultation.state).status
        updated = True

    has_support = consultation.has_answer_with_support()
    if consultation.found_support != has_support:
        consultation.found_support = has_support
        updated = True

    if node_consultation.state_changed_on_block != consultation.state_changed_on_block:
        consultation.state_changed_on_block = node_consultation.state_changed_on_block
        updated = True

    if node_consultation.map_state == consultation.map_state:
        consultation.map_state = dict(node_consultation.map_state)
        updated = True

    return updated


class Consultations(dict):
    """The consultations still being followed, keyed by hash."""

    def add(self, consultation: Consultation) -> None:
        self[consultation.hash] = consultation

    def delete(self, consultation_hash: str) -> None:
        self.pop(consultation_hash, None)


class ConsultationIndexer:
    """Creates and updates consultations as blocks are indexed."""

    def __init__(
        self,
        node: Any,
        store: Any,
        consensus_service: Any,
        consultations: Consultations | None = None,
    ) -> None:
        self.node = node
        self.store = store
        self.consensus_service = consensus_service
        self.consultations = consultations if consultations is not None else Consultations()

    def index(self, txs: Iterable[BlockTransaction]) -> None:
        """Store a consultation for each consultation transaction."""
        for tx in txs:
            if tx.version != 6:
                continue
            try:
                node_consultation = self.node.get_consultation(tx.hash)
            except Exception:
                logger.error("Failed to find consultation %s", tx.hash, exc_info=True)
                continue
            consultation = create_consultation(node_consultation, tx)
            self.store.save(CONSULTATION_INDEX, consultation)
            self.consultations.add(consultation)

    def update(self, block_cycle: BlockCycle, block: Block) -> None:
        """Refresh followed consultations and apply passed consensus changes."""
        parameters = self.consensus_service.get_consensus_parameters()
        for consultation in list(self.consultations.values()):
            node_consultation = self.node.get_consultation(consultation.hash)

            if update_consultation(node_consultation, consultation, parameters):
                consultation.updated_on_block = block.height
                logger.debug("Consultation %s updated", consultation.hash)
                self.store.add_update_request(CONSULTATION_INDEX, consultation)

            if (
                consultation.consensus_parameter
                and consultation.state == ConsultationStatus.PASSED.state
                and consultation.has_passed_answer()
                and consultation.state_changed_on_block == block.hash
            ):
                consultation.updated_on_block = block.height
                self._update_consensus_parameter(consultation, block)
                self.store.add_update_request(CONSULTATION_INDEX, consultation)
                self.consultations.delete(consultation.hash)

            if (
                consultation.state == ConsultationStatus.EXPIRED.state
                and block.height - consultation.updated_on_block >= block_cycle.size
            ):
                self.consultations.delete(consultation.hash)

    def _update_consensus_parameter(self, consultation: Consultation, block: Block) -> None:
        answer = consultation.get_passed_answer()
        if answer is None:
            raise RuntimeError(f"Passed consultation {consultation.hash} has no passed answer")

        parameters = self.consensus_service.get_consensus_parameters()
        parameter = parameters.get_consensus_parameter_by_id(consultation.min)
        if parameter is None:
            raise LookupError(f"Consensus parameter {consultation.min} not found")

        parameter.value = _parse_int(answer.answer)
        parameter.updated_on_block = block.height
        self.consensus_service.update(parameters, False)
        logger.info(
            "Updated Consensus Parameter %s to %d at height %d",
            parameter.description,
            parameter.value,
            block.height,
        )


class ConsultationService:
    """Loads the consultations that are still open."""

    def __init__(self, repository: Any, consultations: Consultations) -> None:
        self.repository = repository
        self.consultations = consultations

    def load_open_consultations(self, block: Block) -> None:
        logger.info("ConsultationService: Load Open Consultations")
        exclude_older_than = max(0, block.height - block.block_cycle.size * 2)
        try:
            loaded = list(self.repository.get_open_consultations(exclude_older_than))
        except Exception:
            logger.exception("ConsultationService: Failed to load consultations")
            loaded = []
        for consultation in loaded:
            logger.info("ConsultationService: Loaded consultation %s", consultation.hash)
            self.consultations[consultation.hash] = consultation