"""Type definitions for the orchestration layer.

The orchestrator classifies a single utterance against the current stage
and returns a ``FlowDecision``; the session acts on it.
"""

from collections.abc import Collection
from dataclasses import dataclass, field
from enum import Enum

from blueprint.models.entities import JourneyData
from blueprint.models.journey import JourneyState
from blueprint.models.validation import ValidationPolicy


class IdeationStep(Enum):
    """Fields captured before the journey proper begins."""

    BIG_IDEA = "bigIdea"
    ESSENTIAL_QUESTION = "essentialQuestion"
    CHALLENGE = "challenge"


IDEATION_ORDER: tuple[IdeationStep, ...] = (
    IdeationStep.BIG_IDEA,
    IdeationStep.ESSENTIAL_QUESTION,
    IdeationStep.CHALLENGE,
)

IDEATION_LABELS: dict[IdeationStep, str] = {
    IdeationStep.BIG_IDEA: "Big Idea",
    IdeationStep.ESSENTIAL_QUESTION: "Essential Question",
    IdeationStep.CHALLENGE: "Challenge",
}

Stage = IdeationStep | JourneyState


class FlowAction(Enum):
    """What the session should do with an utterance."""

    COMMIT_AND_ADVANCE = "commitAndAdvance"
    AWAIT_CONFIRMATION = "awaitConfirmation"
    PROPOSE_MINIMAL = "proposeMinimal"
    CLARIFY = "clarify"  # Hold the stage and ask again


@dataclass(frozen=True)
class FlowContext:
    """Everything the orchestrator may look at for one turn."""

    stage: Stage
    data: JourneyData
    awaiting: str | None = None
    """Candidate value waiting for a yes/no from the user."""

    policy: ValidationPolicy = field(default_factory=ValidationPolicy)
    skipped: Collection[JourneyState] = ()


@dataclass(frozen=True)
class FlowDecision:
    """Classification of one utterance."""

    action: FlowAction
    value: str | None = None
    """Text to commit or confirm; None when the stage has nothing new to store."""

    message: str | None = None
    clear_awaiting: bool = False
    reason: str = ""
