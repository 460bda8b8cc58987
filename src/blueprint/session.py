"""Conversation-level control flow for one project.

``WorkflowSession`` is the single gateway between a caller (CLI, chat UI)
and the engine: it asks the orchestrator what an utterance means, carries
the decision out on the machine, and persists the snapshot through the
store after every change.
"""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from blueprint.models.journey import INITIAL_STATE, JourneyState
from blueprint.models.machine import (
    ImportResult,
    InputResult,
    JourneyMachine,
    TransitionResult,
)
from blueprint.models.validation import ValidationPolicy
from blueprint.orchestration import (
    IDEATION_ORDER,
    FlowAction,
    FlowContext,
    FlowDecision,
    FlowOrchestrator,
    IdeationStep,
    Stage,
)
from blueprint.storage import SnapshotStore

logger = logging.getLogger(__name__)

IDEATION_PROMPTS: dict[IdeationStep, str] = {
    IdeationStep.BIG_IDEA: (
        "What's the Big Idea? Name the transferable concept that anchors this project."
    ),
    IdeationStep.ESSENTIAL_QUESTION: (
        "What Essential Question will drive student inquiry?"
    ),
    IdeationStep.CHALLENGE: (
        "What authentic Challenge will students take on, and for whom?"
    ),
}

_IDEATION_FIELDS: dict[IdeationStep, str] = {
    IdeationStep.BIG_IDEA: "big_idea",
    IdeationStep.ESSENTIAL_QUESTION: "essential_question",
    IdeationStep.CHALLENGE: "challenge",
}


@dataclass(frozen=True)
class TurnOutcome:
    """What happened in one conversational turn."""

    action: FlowAction
    message: str
    state: JourneyState
    stage: Stage
    committed: bool = False
    # The machine moved to a new state
    advanced: bool = False
    pending: str | None = None


class WorkflowSession:
    """Binds a machine, the orchestrator and a store for one project."""

    def __init__(
        self,
        project_id: str,
        store: SnapshotStore,
        policy: ValidationPolicy | None = None,
        orchestrator: FlowOrchestrator | None = None,
    ) -> None:
        self.project_id = project_id
        self.store = store
        self.machine = JourneyMachine(policy=policy)
        self.orchestrator = orchestrator or FlowOrchestrator()
        self.pending: str | None = None

    # --- Lifecycle ---

    def open(self) -> ImportResult | None:
        """Resume from the stored snapshot, or start fresh when there is none.

        Returns:
            The import result, or None when no snapshot was stored.
        """
        snapshot = self.store.load(self.project_id)
        if snapshot is None:
            logger.info("No snapshot for %s; starting a new journey", self.project_id)
            return None
        result = self.machine.import_state(snapshot)
        if not result.success:
            logger.warning(
                "Could not resume %s (%s); starting a new journey",
                self.project_id,
                result.message,
            )
            self.machine = JourneyMachine(policy=self.machine.policy)
        return result

    def save(self) -> None:
        self.store.save(self.project_id, self.machine.export_state())

    def export(self) -> dict[str, Any]:
        return self.machine.export_state()

    # --- Where are we ---

    @property
    def flow_stage(self) -> Stage:
        """The ideation step being captured, or the machine state."""
        if self.machine.state is not INITIAL_STATE:
            return self.machine.state
        ideation = self.machine.data.ideation
        for step in IDEATION_ORDER:
            if not getattr(ideation, _IDEATION_FIELDS[step]).strip():
                return step
        return self.machine.state

    def context(self) -> FlowContext:
        return FlowContext(
            stage=self.flow_stage,
            data=self.machine.data,
            awaiting=self.pending,
            policy=self.machine.policy,
            skipped=self.machine.skipped,
        )

    def prompt(self) -> str:
        """The question to show the user next."""
        stage = self.flow_stage
        if isinstance(stage, IdeationStep):
            return IDEATION_PROMPTS[stage]
        return self.machine.get_transition_message()

    # --- Conversation ---

    def handle(self, utterance: str) -> TurnOutcome:
        """Run one turn: classify, extract, validate, commit or transition, save."""
        stage = self.flow_stage
        decision = self.orchestrator.detect(self.context(), utterance)
        if decision.clear_awaiting:
            self.pending = None

        action = decision.action
        if action in (FlowAction.AWAIT_CONFIRMATION, FlowAction.PROPOSE_MINIMAL):
            self.pending = decision.value
            return self._outcome(decision, decision.message or self.prompt(), stage)

        if action is FlowAction.CLARIFY:
            if decision.value and isinstance(stage, JourneyState):
                self.machine.add_reflection(decision.value)
                self.save()
            return self._outcome(decision, decision.message or self.prompt(), stage)

        if isinstance(stage, IdeationStep):
            return self._commit_ideation(decision, stage)
        return self._commit_journey(decision, stage)

    def _outcome(
        self,
        decision: FlowDecision,
        message: str,
        stage: Stage,
        committed: bool = False,
        advanced: bool = False,
    ) -> TurnOutcome:
        return TurnOutcome(
            action=decision.action,
            message=message,
            state=self.machine.state,
            stage=stage,
            committed=committed,
            advanced=advanced,
            pending=self.pending,
        )

    def _commit_ideation(self, decision: FlowDecision, step: IdeationStep) -> TurnOutcome:
        value = decision.value
        committed = value is not None
        if value is not None:
            ideation = self.machine.data.ideation
            self.machine.update_data(
                ideation=dataclasses.replace(ideation, **{_IDEATION_FIELDS[step]: value.strip()})
            )
            logger.info("Captured %s for %s", step.value, self.project_id)

        advanced = False
        # Ideation done: the journey proper starts
        if self.flow_stage is INITIAL_STATE and self.machine.data.ideation.is_complete:
            advanced = self.machine.advance().success
        self.save()
        return self._outcome(
            decision, self.prompt(), self.flow_stage, committed=committed, advanced=advanced
        )

    def _commit_journey(self, decision: FlowDecision, state: JourneyState) -> TurnOutcome:
        committed = False
        if decision.value is not None:
            result = self.machine.process_input(decision.value)
            if not result.success:
                return self._outcome(decision, result.message or self.prompt(), state)
            committed = True
            if not result.ready_for_next:
                self.save()
                return self._outcome(
                    decision, result.message or self.prompt(), state, committed=True
                )

        transition = self.machine.advance()
        self.save()
        if not transition.success:
            return self._outcome(
                decision, transition.message or self.prompt(), state, committed=committed
            )
        return self._outcome(
            decision,
            self.machine.get_transition_message(),
            self.flow_stage,
            committed=committed,
            advanced=True,
        )

    # --- Direct operations (persist after any change) ---

    def advance(self) -> TransitionResult:
        result = self.machine.advance()
        if result.success:
            self.pending = None
            self.save()
        return result

    def skip(self) -> TransitionResult:
        result = self.machine.skip()
        if result.success:
            self.pending = None
            self.save()
        return result

    def edit(self, target: JourneyState | str) -> TransitionResult:
        result = self.machine.edit(target)
        if result.success:
            self.pending = None
            self.save()
        return result

    def reset(self, preserve: bool | str | Iterable[str] = False) -> None:
        self.machine.reset(preserve)
        self.pending = None
        self.save()

    def process_input(self, raw_text: str) -> InputResult:
        result = self.machine.process_input(raw_text)
        if result.success:
            self.save()
        return result

    def update_data(self, partial: Mapping[str, Any] | None = None, **changes: Any) -> None:
        self.machine.update_data(partial, **changes)
        self.save()

    def add_reflection(self, text: str) -> None:
        self.machine.add_reflection(text)
        self.save()

    def import_snapshot(self, snapshot: Any) -> ImportResult:
        """Replace the session's journey with ``snapshot`` and persist it."""
        result = self.machine.import_state(snapshot)
        if result.success:
            self.pending = None
            self.save()
        return result
