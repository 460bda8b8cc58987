"""Tests for WorkflowSession."""

import pytest

from blueprint.models.journey import TRANSITION_MESSAGES, JourneyState
from blueprint.orchestration import FlowAction, IdeationStep
from blueprint.session import IDEATION_PROMPTS, WorkflowSession
from blueprint.storage import MemorySnapshotStore


@pytest.fixture
def store() -> MemorySnapshotStore:
    return MemorySnapshotStore()


@pytest.fixture
def session(store: MemorySnapshotStore) -> WorkflowSession:
    return WorkflowSession("demo", store)


def _finish_ideation(session: WorkflowSession) -> None:
    session.handle("Communities shape their environment")
    session.handle("How can we reduce waste?")
    session.handle("yes")
    session.handle("Design a water filter for the school garden")


class TestIdeationTurns:
    """Capturing the Big Idea, Essential Question and Challenge."""

    def test_starts_with_big_idea(self, session: WorkflowSession) -> None:
        assert session.flow_stage is IdeationStep.BIG_IDEA
        assert session.prompt() == IDEATION_PROMPTS[IdeationStep.BIG_IDEA]

    def test_big_idea_is_saved(self, session: WorkflowSession, store: MemorySnapshotStore) -> None:
        outcome = session.handle("Communities shape their environment")
        assert outcome.committed
        assert not outcome.advanced
        assert outcome.stage is IdeationStep.ESSENTIAL_QUESTION
        assert outcome.message == IDEATION_PROMPTS[IdeationStep.ESSENTIAL_QUESTION]

        snapshot = store.load("demo")
        assert snapshot is not None
        assert snapshot["data"]["ideation"]["bigIdea"] == "Communities shape their environment"

    def test_question_waits_for_confirmation(self, session: WorkflowSession) -> None:
        session.handle("Communities shape their environment")
        outcome = session.handle("How can we reduce waste?")
        assert outcome.action is FlowAction.AWAIT_CONFIRMATION
        assert outcome.pending == "How can we reduce waste?"
        assert not outcome.committed

        confirmed = session.handle("yes")
        assert confirmed.committed
        assert confirmed.pending is None
        assert session.flow_stage is IdeationStep.CHALLENGE

    def test_challenge_reports_journey_start(self, session: WorkflowSession) -> None:
        session.handle("Communities shape their environment")
        session.handle("How can we reduce waste?")
        assert not session.handle("yes").advanced
        outcome = session.handle("Design a water filter for the school garden")
        assert outcome.advanced
        assert outcome.state is JourneyState.PHASES

    def test_complete_ideation_starts_journey(self, session: WorkflowSession) -> None:
        _finish_ideation(session)
        assert session.machine.state is JourneyState.PHASES
        assert session.flow_stage is JourneyState.PHASES
        assert session.machine.data.ideation.is_complete


class TestJourneyTurns:
    """Turns after ideation."""

    def test_accepting_proposal_commits_and_advances(self, session: WorkflowSession) -> None:
        _finish_ideation(session)
        proposal = session.handle("next")
        assert proposal.action is FlowAction.PROPOSE_MINIMAL
        assert proposal.pending

        outcome = session.handle("yes")
        assert outcome.committed
        assert outcome.advanced
        assert outcome.state is JourneyState.ACTIVITIES
        assert outcome.message == TRANSITION_MESSAGES[JourneyState.ACTIVITIES]
        assert len(session.machine.data.phases) == 4

    def test_structured_phases_are_kept(self, session: WorkflowSession) -> None:
        _finish_ideation(session)
        outcome = session.handle("1. Explore the problem\n2. Get ready to build")
        assert outcome.committed
        assert outcome.state is JourneyState.ACTIVITIES
        names = [phase.name for phase in session.machine.data.phases]
        assert names == ["Explore the problem", "Get ready to build"]

    def test_repeated_yes_accepts_default_not_itself(self, session: WorkflowSession) -> None:
        _finish_ideation(session)
        first = session.handle("yes")
        assert first.action is FlowAction.PROPOSE_MINIMAL
        session.handle("yes")
        names = [phase.name for phase in session.machine.data.phases]
        assert "yes" not in names
        assert names[0] == "Investigate the Context"

    def test_partial_input_holds_stage(self, session: WorkflowSession) -> None:
        _finish_ideation(session)
        session.handle("next")
        session.handle("yes")
        outcome = session.handle("Investigate the Context: Research topic, Interview neighbors")
        assert outcome.committed
        assert not outcome.advanced
        assert outcome.state is JourneyState.ACTIVITIES
        assert "Still missing" in outcome.message

    def test_review_feedback_becomes_reflection(self, session: WorkflowSession) -> None:
        session.machine.import_state({"version": "1", "state": "JOURNEY_REVIEW"})
        outcome = session.handle("The second phase feels long to me")
        assert outcome.action is FlowAction.CLARIFY
        assert session.machine.data.reflections == ["The second phase feels long to me"]

    def test_rejected_extraction_keeps_stage(self, session: WorkflowSession) -> None:
        session.machine.import_state({"version": "1", "state": "JOURNEY_ACTIVITIES"})
        outcome = session.handle("Research: Read articles about rivers")
        assert not outcome.committed
        assert outcome.message == "Add your phases before listing activities."


class TestPersistence:
    """Resuming and direct operations."""

    def test_open_without_snapshot(self, session: WorkflowSession) -> None:
        assert session.open() is None
        assert session.machine.state is JourneyState.OVERVIEW

    def test_open_resumes(self, session: WorkflowSession, store: MemorySnapshotStore) -> None:
        _finish_ideation(session)
        resumed = WorkflowSession("demo", store)
        result = resumed.open()
        assert result is not None and result.success
        assert resumed.machine.state is JourneyState.PHASES
        assert resumed.export() == session.export()

    def test_open_unreadable_snapshot_starts_fresh(self, store: MemorySnapshotStore) -> None:
        store.save("demo", {"version": "0.5", "state": "COMPLETE"})
        session = WorkflowSession("demo", store)
        result = session.open()
        assert result is not None
        assert not result.success
        assert session.machine.state is JourneyState.OVERVIEW

    def test_direct_operations_persist(self, session: WorkflowSession, store: MemorySnapshotStore) -> None:
        assert session.skip().success
        assert store.load("demo")["state"] == "JOURNEY_PHASES"  # type: ignore[index]

        assert session.process_input("1. Explore\n2. Build").ready_for_next
        assert session.advance().success
        assert session.edit("phases").success
        session.reset(True)

        snapshot = store.load("demo")
        assert snapshot is not None
        assert snapshot["state"] == "JOURNEY_OVERVIEW"
        assert [p["name"] for p in snapshot["data"]["phases"]] == ["Explore", "Build"]

    def test_failed_operation_not_saved(self, session: WorkflowSession, store: MemorySnapshotStore) -> None:
        session.skip()
        assert not session.advance().success
        assert not session.process_input("").success
        assert store.load("demo")["history"][-1]["reason"] == "skip"  # type: ignore[index]

    def test_import_snapshot(self, session: WorkflowSession, store: MemorySnapshotStore) -> None:
        result = session.import_snapshot({"currentIndex": 3, "data": {}})
        assert result.success
        assert store.load("demo")["state"] == "JOURNEY_RESOURCES"  # type: ignore[index]
