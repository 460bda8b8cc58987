"""Classify an utterance against the current stage.

The orchestrator never mutates anything. It looks at the stage, the data
captured so far and any value awaiting confirmation, and returns a
``FlowDecision`` for the session to carry out.
"""

from __future__ import annotations

import dataclasses
import logging

from blueprint.models.entities import JourneyData
from blueprint.models.journey import STAGE_CONTEXTS, TERMINAL_MESSAGE, JourneyState
from blueprint.models.validation import check_gate
from blueprint.orchestration import signals
from blueprint.orchestration.defaults import propose_minimal
from blueprint.orchestration.types import (
    IDEATION_LABELS,
    FlowAction,
    FlowContext,
    FlowDecision,
    IdeationStep,
)

logger = logging.getLogger(__name__)

# States whose free text is collected by an extractor
DATA_STATES: frozenset[JourneyState] = frozenset(
    {
        JourneyState.PHASES,
        JourneyState.ACTIVITIES,
        JourneyState.RESOURCES,
        JourneyState.MILESTONES,
        JourneyState.RUBRIC,
        JourneyState.IMPACT,
    }
)

DELIVERABLE_STATES: frozenset[JourneyState] = frozenset(
    {JourneyState.MILESTONES, JourneyState.RUBRIC, JourneyState.IMPACT}
)

EMPTY_MESSAGE = "Please provide some input."
REFINE_MESSAGE = "No problem. What would you like to change?"


def _ideation_value(data: JourneyData, step: IdeationStep) -> str:
    ideation = data.ideation
    return {
        IdeationStep.BIG_IDEA: ideation.big_idea,
        IdeationStep.ESSENTIAL_QUESTION: ideation.essential_question,
        IdeationStep.CHALLENGE: ideation.challenge,
    }[step]


def _stage_is_empty(state: JourneyState, data: JourneyData) -> bool:
    deliverables = data.deliverables
    if state is JourneyState.PHASES:
        return not data.phases
    if state is JourneyState.ACTIVITIES:
        return any(not data.activities_for(phase.id) for phase in data.phases)
    if state is JourneyState.RESOURCES:
        return not data.resources
    if state is JourneyState.MILESTONES:
        return not deliverables.milestones
    if state is JourneyState.RUBRIC:
        return not deliverables.rubric.criteria
    if state is JourneyState.IMPACT:
        return deliverables.impact.is_empty
    return False


def _help_message(context: FlowContext) -> str:
    if isinstance(context.stage, IdeationStep):
        label = IDEATION_LABELS[context.stage]
        return (
            f"Let's take the {label} one step at a time. "
            "Share a rough draft and we can shape it together, or say 'next' for a suggestion."
        )
    stage_context = STAGE_CONTEXTS[context.stage]
    return f"{stage_context.description} Tip: {stage_context.tips[0]}."


class FlowOrchestrator:
    """Decide what to do with each utterance."""

    def detect(self, context: FlowContext, utterance: str) -> FlowDecision:
        text = utterance.strip()
        if not text:
            return FlowDecision(FlowAction.CLARIFY, message=EMPTY_MESSAGE, reason="empty")

        if signals.is_confusion_signal(text):
            return FlowDecision(
                FlowAction.CLARIFY, message=_help_message(context), reason="confusion"
            )

        if context.awaiting is not None:
            if signals.is_affirmation(text) or signals.is_progress_signal(text):
                return FlowDecision(
                    FlowAction.COMMIT_AND_ADVANCE,
                    value=context.awaiting,
                    clear_awaiting=True,
                    reason="confirmed",
                )
            if signals.is_refinement_signal(text):
                return FlowDecision(
                    FlowAction.CLARIFY,
                    message=REFINE_MESSAGE,
                    clear_awaiting=True,
                    reason="refine",
                )

        if isinstance(context.stage, IdeationStep):
            decision = self._detect_ideation(context, context.stage, text)
        else:
            decision = self._detect_journey(context, context.stage, text)

        # New input replaces whatever was waiting for confirmation
        if context.awaiting is not None and not decision.clear_awaiting:
            if decision.action is not FlowAction.AWAIT_CONFIRMATION:
                decision = dataclasses.replace(decision, clear_awaiting=True)
        logger.debug(
            "Flow decision at %s: %s (%s)",
            getattr(context.stage, "value", context.stage),
            decision.action.value,
            decision.reason,
        )
        return decision

    def _detect_ideation(
        self, context: FlowContext, step: IdeationStep, text: str
    ) -> FlowDecision:
        label = IDEATION_LABELS[step]

        if signals.is_bare_progress(text):
            if _ideation_value(context.data, step).strip():
                return FlowDecision(FlowAction.COMMIT_AND_ADVANCE, reason="already captured")
            proposal = propose_minimal(step, context.data)
            return FlowDecision(
                FlowAction.PROPOSE_MINIMAL,
                value=proposal,
                message=f"Here's a starting point for your {label}: \"{proposal}\". Shall we use it?",
                reason="progress without content",
            )

        if step is IdeationStep.BIG_IDEA:
            if signals.looks_like_big_idea(text):
                return FlowDecision(FlowAction.COMMIT_AND_ADVANCE, value=text, reason="big idea")
            if "?" in text:
                return FlowDecision(
                    FlowAction.AWAIT_CONFIRMATION,
                    value=text,
                    message=(
                        "That sounds like a question. A Big Idea usually reads as a concept. "
                        "Keep it as your Big Idea anyway?"
                    ),
                    reason="question as big idea",
                )
            return FlowDecision(
                FlowAction.CLARIFY,
                message="Could you expand on this concept a bit more? "
                "What deeper understanding do you want students to develop?",
                reason="too short",
            )

        if step is IdeationStep.ESSENTIAL_QUESTION:
            if signals.looks_like_question(text):
                hint = (
                    ""
                    if signals.is_open_ended(text)
                    else ' Starting with "How" or "Why" would make it more open-ended.'
                )
                return FlowDecision(
                    FlowAction.AWAIT_CONFIRMATION,
                    value=text,
                    message=f'Use "{text}" as your Essential Question?{hint}',
                    reason="candidate question",
                )
            return FlowDecision(
                FlowAction.CLARIFY,
                message="Let's phrase this as a question that will drive student inquiry.",
                reason="not a question",
            )

        if signals.looks_like_challenge(text):
            return FlowDecision(FlowAction.COMMIT_AND_ADVANCE, value=text, reason="challenge")
        if signals.count_tokens(text) >= signals.MIN_BIG_IDEA_TOKENS:
            return FlowDecision(
                FlowAction.AWAIT_CONFIRMATION,
                value=text,
                message=(
                    f'Use "{text}" as your Challenge? An action verb such as '
                    "design, build or propose makes it more task-oriented."
                ),
                reason="candidate challenge",
            )
        return FlowDecision(
            FlowAction.CLARIFY,
            message="Let's add more detail about what students will actually do or create.",
            reason="too short",
        )

    def _detect_journey(
        self, context: FlowContext, state: JourneyState, text: str
    ) -> FlowDecision:
        if state is JourneyState.COMPLETE:
            return FlowDecision(FlowAction.CLARIFY, message=TERMINAL_MESSAGE, reason="complete")

        if state not in DATA_STATES:
            if signals.is_bare_progress(text):
                return self._on_progress(context, state)
            return FlowDecision(
                FlowAction.CLARIFY,
                value=text,
                message="Thanks, I've noted that. Say 'next' when you're ready to move on.",
                reason="feedback",
            )

        keywords = (
            signals.DELIVERABLES_KEYWORDS
            if state in DELIVERABLE_STATES
            else signals.JOURNEY_KEYWORDS
        )
        # Only replies with no content of their own take the progress path
        if signals.is_bare_progress(text, keywords):
            return self._on_progress(context, state)
        if signals.has_sufficient_content(text, keywords):
            return FlowDecision(FlowAction.COMMIT_AND_ADVANCE, value=text, reason="content")
        return FlowDecision(
            FlowAction.AWAIT_CONFIRMATION,
            value=text,
            message=f'I\'ll save "{text}". Is that right?',
            reason="short content",
        )

    def _on_progress(self, context: FlowContext, state: JourneyState) -> FlowDecision:
        """Advance when the gate allows it, otherwise offer a default."""
        gate = check_gate(state, context.data, context.policy)
        empty = _stage_is_empty(state, context.data)
        if gate.passed and (not empty or state in context.skipped):
            return FlowDecision(FlowAction.COMMIT_AND_ADVANCE, reason="progress")

        proposal = propose_minimal(state, context.data)
        if proposal:
            return FlowDecision(
                FlowAction.PROPOSE_MINIMAL,
                value=proposal,
                message=f"Here's a simple starting point:\n{proposal}\nShall we use it?",
                reason="progress without content",
            )
        if gate.passed:
            return FlowDecision(FlowAction.COMMIT_AND_ADVANCE, reason="progress")
        return FlowDecision(FlowAction.CLARIFY, message=gate.message, reason="gate")
