"""Tests for FlowOrchestrator decisions."""

from blueprint.models.entities import Activity, JourneyData, Phase
from blueprint.models.journey import TERMINAL_MESSAGE, JourneyState
from blueprint.orchestration import (
    FlowAction,
    FlowContext,
    FlowOrchestrator,
    IdeationStep,
)
from blueprint.orchestration.defaults import IDEATION_DEFAULTS
from blueprint.orchestration.orchestrator import EMPTY_MESSAGE, REFINE_MESSAGE

orchestrator = FlowOrchestrator()


def _two_phases() -> JourneyData:
    return JourneyData(
        phases=[Phase(id="phase-1", name="Research"), Phase(id="phase-2", name="Build")]
    )


def _detect(stage, text: str, data: JourneyData | None = None, **kwargs):  # type: ignore[no-untyped-def]
    context = FlowContext(stage=stage, data=data or JourneyData(), **kwargs)
    return orchestrator.detect(context, text)


class TestCommonSignals:
    """Signals handled the same way at every stage."""

    def test_empty_input(self) -> None:
        decision = _detect(JourneyState.PHASES, "   ")
        assert decision.action is FlowAction.CLARIFY
        assert decision.message == EMPTY_MESSAGE

    def test_confusion_gets_help(self) -> None:
        decision = _detect(JourneyState.PHASES, "I'm confused")
        assert decision.action is FlowAction.CLARIFY
        assert decision.reason == "confusion"
        assert "3-4 phases" in (decision.message or "")

    def test_affirmation_commits_awaiting_value(self) -> None:
        decision = _detect(JourneyState.PHASES, "yes", awaiting="1. Explore\n2. Build")
        assert decision.action is FlowAction.COMMIT_AND_ADVANCE
        assert decision.value == "1. Explore\n2. Build"
        assert decision.clear_awaiting

    def test_refinement_drops_awaiting_value(self) -> None:
        decision = _detect(JourneyState.PHASES, "actually no", awaiting="1. Explore")
        assert decision.action is FlowAction.CLARIFY
        assert decision.message == REFINE_MESSAGE
        assert decision.clear_awaiting

    def test_new_content_replaces_awaiting_value(self) -> None:
        decision = _detect(
            JourneyState.PHASES,
            "1. Research the river\n2. Build a filter",
            awaiting="1. Explore",
        )
        assert decision.action is FlowAction.COMMIT_AND_ADVANCE
        assert decision.value == "1. Research the river\n2. Build a filter"
        assert decision.clear_awaiting


class TestIdeation:
    """Decisions while capturing the Big Idea, Question and Challenge."""

    def test_big_idea_committed(self) -> None:
        decision = _detect(IdeationStep.BIG_IDEA, "Communities shape their environment")
        assert decision.action is FlowAction.COMMIT_AND_ADVANCE
        assert decision.value == "Communities shape their environment"

    def test_big_idea_with_progress_word(self) -> None:
        decision = _detect(IdeationStep.BIG_IDEA, "Students get ready for real change")
        assert decision.action is FlowAction.COMMIT_AND_ADVANCE
        assert decision.value == "Students get ready for real change"

    def test_short_big_idea_needs_more(self) -> None:
        assert _detect(IdeationStep.BIG_IDEA, "Water").action is FlowAction.CLARIFY

    def test_question_as_big_idea_needs_confirmation(self) -> None:
        decision = _detect(IdeationStep.BIG_IDEA, "Why do rivers flood?")
        assert decision.action is FlowAction.AWAIT_CONFIRMATION
        assert decision.value == "Why do rivers flood?"

    def test_progress_without_value_proposes_default(self) -> None:
        decision = _detect(IdeationStep.BIG_IDEA, "next")
        assert decision.action is FlowAction.PROPOSE_MINIMAL
        assert decision.value == IDEATION_DEFAULTS[IdeationStep.BIG_IDEA]

    def test_essential_question_confirmed_before_commit(self) -> None:
        decision = _detect(IdeationStep.ESSENTIAL_QUESTION, "How can we reduce waste?")
        assert decision.action is FlowAction.AWAIT_CONFIRMATION
        assert "open-ended" not in (decision.message or "")

    def test_closed_question_gets_hint(self) -> None:
        decision = _detect(IdeationStep.ESSENTIAL_QUESTION, "Is our water safe?")
        assert decision.action is FlowAction.AWAIT_CONFIRMATION
        assert "open-ended" in (decision.message or "")

    def test_statement_is_not_a_question(self) -> None:
        decision = _detect(IdeationStep.ESSENTIAL_QUESTION, "Water is life")
        assert decision.action is FlowAction.CLARIFY

    def test_challenge_with_action_verb(self) -> None:
        decision = _detect(IdeationStep.CHALLENGE, "Design a water filter for the school garden")
        assert decision.action is FlowAction.COMMIT_AND_ADVANCE

    def test_challenge_without_verb_needs_confirmation(self) -> None:
        decision = _detect(IdeationStep.CHALLENGE, "A water filter for the school garden")
        assert decision.action is FlowAction.AWAIT_CONFIRMATION


class TestJourneyStages:
    """Decisions once the journey proper has started."""

    def test_progress_without_phases_proposes_arc(self) -> None:
        decision = _detect(JourneyState.PHASES, "next")
        assert decision.action is FlowAction.PROPOSE_MINIMAL
        assert "Investigate the Context" in (decision.value or "")

    def test_progress_with_phases_advances(self) -> None:
        decision = _detect(JourneyState.PHASES, "let's move on", _two_phases())
        assert decision.action is FlowAction.COMMIT_AND_ADVANCE
        assert decision.value is None

    def test_progress_proposes_missing_activities(self) -> None:
        data = _two_phases()
        data.activities = [Activity(id="activity-1", phase_id="phase-1", name="Read")]
        decision = _detect(JourneyState.ACTIVITIES, "next", data)
        assert decision.action is FlowAction.PROPOSE_MINIMAL
        assert decision.value == "Build: Explore examples, Draft ideas, Share progress"

    def test_structured_reply_with_progress_word_is_content(self) -> None:
        text = "1. Explore the problem\n2. Get ready to build"
        decision = _detect(JourneyState.PHASES, text)
        assert decision.action is FlowAction.COMMIT_AND_ADVANCE
        assert decision.value == text

    def test_bare_yes_is_never_content(self) -> None:
        decision = _detect(JourneyState.PHASES, "yes")
        assert decision.action is FlowAction.PROPOSE_MINIMAL
        assert "Investigate the Context" in (decision.value or "")

    def test_short_content_needs_confirmation(self) -> None:
        decision = _detect(JourneyState.PHASES, "Explore")
        assert decision.action is FlowAction.AWAIT_CONFIRMATION
        assert decision.value == "Explore"

    def test_deliverables_use_their_keywords(self) -> None:
        decision = _detect(JourneyState.MILESTONES, "Midpoint showcase for our families")
        assert decision.action is FlowAction.COMMIT_AND_ADVANCE

    def test_empty_optional_stage_gets_proposal(self) -> None:
        decision = _detect(JourneyState.RESOURCES, "next")
        assert decision.action is FlowAction.PROPOSE_MINIMAL

    def test_skipped_stage_advances(self) -> None:
        decision = _detect(
            JourneyState.RESOURCES, "next", skipped=frozenset({JourneyState.RESOURCES})
        )
        assert decision.action is FlowAction.COMMIT_AND_ADVANCE

    def test_review_feedback_is_kept(self) -> None:
        decision = _detect(JourneyState.JOURNEY_REVIEW, "The second phase feels long to me")
        assert decision.action is FlowAction.CLARIFY
        assert decision.value == "The second phase feels long to me"

    def test_review_progress_advances(self) -> None:
        decision = _detect(JourneyState.JOURNEY_REVIEW, "looks good, next", _two_phases())
        assert decision.action is FlowAction.COMMIT_AND_ADVANCE

    def test_complete_is_terminal(self) -> None:
        decision = _detect(JourneyState.COMPLETE, "next")
        assert decision.action is FlowAction.CLARIFY
        assert decision.message == TERMINAL_MESSAGE
