"""Journey states and the tables that describe them.

The journey is linear: every state has exactly one successor, and the
optional states can be skipped. Backward jumps are handled by
``JourneyMachine.edit``.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Literal

Segment = Literal["journey", "deliver", "complete"]


class JourneyState(Enum):
    """All possible states in the design journey."""

    # JOURNEY segment
    OVERVIEW = "JOURNEY_OVERVIEW"
    PHASES = "JOURNEY_PHASES"
    ACTIVITIES = "JOURNEY_ACTIVITIES"
    RESOURCES = "JOURNEY_RESOURCES"
    JOURNEY_REVIEW = "JOURNEY_REVIEW"

    # DELIVER segment
    MILESTONES = "DELIVER_MILESTONES"
    RUBRIC = "DELIVER_RUBRIC"
    IMPACT = "DELIVER_IMPACT"
    PUBLISH_REVIEW = "PUBLISH_REVIEW"

    # Terminal
    COMPLETE = "COMPLETE"


STATE_ORDER: tuple[JourneyState, ...] = (
    JourneyState.OVERVIEW,
    JourneyState.PHASES,
    JourneyState.ACTIVITIES,
    JourneyState.RESOURCES,
    JourneyState.JOURNEY_REVIEW,
    JourneyState.MILESTONES,
    JourneyState.RUBRIC,
    JourneyState.IMPACT,
    JourneyState.PUBLISH_REVIEW,
    JourneyState.COMPLETE,
)

INITIAL_STATE = JourneyState.OVERVIEW
TERMINAL_STATE = JourneyState.COMPLETE

# States the educator may pass without satisfying a gate
SKIPPABLE_STATES: frozenset[JourneyState] = frozenset(
    {
        JourneyState.OVERVIEW,
        JourneyState.RESOURCES,
        JourneyState.MILESTONES,
        JourneyState.RUBRIC,
        JourneyState.IMPACT,
    }
)

STATE_TO_SEGMENT: dict[JourneyState, Segment] = {
    JourneyState.OVERVIEW: "journey",
    JourneyState.PHASES: "journey",
    JourneyState.ACTIVITIES: "journey",
    JourneyState.RESOURCES: "journey",
    JourneyState.JOURNEY_REVIEW: "journey",
    JourneyState.MILESTONES: "deliver",
    JourneyState.RUBRIC: "deliver",
    JourneyState.IMPACT: "deliver",
    JourneyState.PUBLISH_REVIEW: "deliver",
    JourneyState.COMPLETE: "complete",
}

# Prompt shown once the journey has arrived in a state
TRANSITION_MESSAGES: dict[JourneyState, str] = {
    JourneyState.OVERVIEW: "Welcome! Let's map out a transformative learning journey for your students.",
    JourneyState.PHASES: "Let's design the learning arc. List the phases students will move through.",
    JourneyState.ACTIVITIES: "Excellent phases! Now let's create activities to bring each phase to life.",
    JourneyState.RESOURCES: "Your activities look engaging! Let's gather some inspiring resources.",
    JourneyState.JOURNEY_REVIEW: "Wonderful resources! Let's review your complete journey.",
    JourneyState.MILESTONES: "Your journey design is taking shape! Now let's define milestone checkpoints.",
    JourneyState.RUBRIC: "Clear milestones will guide the journey! Let's create your assessment rubric.",
    JourneyState.IMPACT: "Your rubric rewards growth and reflection! Now let's connect to authentic audiences.",
    JourneyState.PUBLISH_REVIEW: "Powerful connections to real impact! Let's review your complete blueprint.",
    JourneyState.COMPLETE: "Congratulations! Your learning blueprint is ready to launch.",
}

TERMINAL_MESSAGE = "Journey design is complete! Time to bring it to life."


@dataclass(frozen=True)
class StageContext:
    """Contextual help for a state."""

    title: str
    description: str
    tips: tuple[str, ...]


STAGE_CONTEXTS: dict[JourneyState, StageContext] = {
    JourneyState.OVERVIEW: StageContext(
        title="Welcome to Journey Design",
        description="Let's map out a transformative learning experience for your students.",
        tips=(
            "Think about the emotional arc of discovery",
            "Consider how students will build confidence",
            "Imagine the 'aha!' moments you want to create",
        ),
    ),
    JourneyState.PHASES: StageContext(
        title="Design Your Learning Arc",
        description="Create 3-4 phases that guide students from curiosity to mastery.",
        tips=(
            "Start with exploration and wonder",
            "Build toward creation and application",
            "End with reflection and celebration",
        ),
    ),
    JourneyState.ACTIVITIES: StageContext(
        title="Craft Engaging Activities",
        description="Design hands-on experiences that bring each phase to life.",
        tips=(
            "Mix individual and collaborative work",
            "Include choice and student voice",
            "Connect to real-world applications",
        ),
    ),
    JourneyState.RESOURCES: StageContext(
        title="Gather Inspiring Resources",
        description="Collect materials, tools, and connections to enrich the journey.",
        tips=(
            "Think beyond traditional materials",
            "Consider community experts and locations",
            "Include diverse perspectives and voices",
        ),
    ),
    JourneyState.JOURNEY_REVIEW: StageContext(
        title="Review Your Journey",
        description="Step back and see the complete learning experience you've designed.",
        tips=(
            "Check the flow from phase to phase",
            "Ensure activities build on each other",
            "Verify resources support your goals",
        ),
    ),
    JourneyState.MILESTONES: StageContext(
        title="Define Milestone Checkpoints",
        description="Outline key moments that keep learners and stakeholders aligned.",
        tips=(
            "Think of milestones as celebration points",
            "Consider both process and product milestones",
            "Make them visible to students and families",
        ),
    ),
    JourneyState.RUBRIC: StageContext(
        title="Create Assessment Criteria",
        description="Draft clear criteria that reward inquiry, collaboration, craft, and reflection.",
        tips=(
            "Focus on growth, not just final products",
            "Include self and peer assessment opportunities",
            "Make criteria student-friendly and transparent",
        ),
    ),
    JourneyState.IMPACT: StageContext(
        title="Connect to Authentic Audiences",
        description="Specify how student work connects to authentic audiences or community needs.",
        tips=(
            "Think beyond the classroom walls",
            "Consider both local and global connections",
            "Plan for meaningful feedback loops",
        ),
    ),
    JourneyState.PUBLISH_REVIEW: StageContext(
        title="Final Review",
        description="Review your complete blueprint before publishing.",
        tips=(
            "Check alignment across all components",
            "Ensure feasibility within your constraints",
            "Celebrate what you've created!",
        ),
    ),
    JourneyState.COMPLETE: StageContext(
        title="Blueprint Complete!",
        description="Your transformative learning experience is ready to launch.",
        tips=(
            "Share with colleagues for feedback",
            "Prepare your launch materials",
            "Get ready for an amazing experience!",
        ),
    ),
}


def state_index(state: JourneyState) -> int:
    """Position of ``state`` in the linear order."""
    return STATE_ORDER.index(state)


def next_state(state: JourneyState) -> JourneyState | None:
    """Return the successor of ``state``, or None at the end."""
    index = state_index(state)
    if index + 1 >= len(STATE_ORDER):
        return None
    return STATE_ORDER[index + 1]


def parse_state(value: "JourneyState | str") -> JourneyState:
    """Resolve a state from an enum, wire value or member name.

    Examples:
        parse_state("JOURNEY_PHASES") -> JourneyState.PHASES
        parse_state("phases") -> JourneyState.PHASES

    Raises:
        ValueError: If the value names no state.
    """
    if isinstance(value, JourneyState):
        return value
    text = str(value).strip()
    try:
        return JourneyState(text)
    except ValueError:
        pass
    member = JourneyState.__members__.get(text.upper().replace("-", "_"))
    if member is None:
        raise ValueError(f"Unknown journey state: {value}")
    return member
