"""Minimal default plans offered when the user wants to move on.

Proposals are plain text in the shape the extractors read, so a confirmed
proposal goes through ``process_input`` exactly like typed input.
"""

from dataclasses import dataclass

from blueprint.models.entities import JourneyData
from blueprint.models.journey import JourneyState
from blueprint.orchestration.types import IdeationStep, Stage


@dataclass(frozen=True)
class PhaseTemplate:
    name: str
    summary: str
    activities: tuple[str, ...]


# General-purpose four-phase arc that works for most subjects
DEFAULT_PHASES: tuple[PhaseTemplate, ...] = (
    PhaseTemplate(
        name="Investigate the Context",
        summary="Audit current realities around the topic and interview the people affected.",
        activities=("Research topic", "Conduct interviews", "Identify key issues"),
    ),
    PhaseTemplate(
        name="Co-Design Possibilities",
        summary="Run brainstorming sprints, analyze models and pick a direction.",
        activities=("Brainstorm solutions", "Analyze examples", "Choose direction"),
    ),
    PhaseTemplate(
        name="Prototype & Test",
        summary="Build a draft, run a critique and capture feedback from peers.",
        activities=("Create prototype", "Peer review", "Gather feedback"),
    ),
    PhaseTemplate(
        name="Launch & Reflect",
        summary="Finalize the work, rehearse the presentation and reflect on impact.",
        activities=("Final revisions", "Rehearse presentation", "Deliver to audience"),
    ),
)

GENERIC_ACTIVITIES: tuple[str, ...] = ("Explore examples", "Draft ideas", "Share progress")

DEFAULT_RESOURCES: tuple[str, ...] = (
    "Documentary video introducing the topic",
    "Local expert guest speaker",
    "Article summarizing current research",
)

DEFAULT_MILESTONES: tuple[str, ...] = ("Project kickoff", "Midpoint review", "Final showcase")

DEFAULT_RUBRIC: tuple[tuple[str, str], ...] = (
    ("Clarity of communication", "Ideas are organized and easy for the audience to follow"),
    ("Evidence and reasoning", "Claims are supported by research and sound reasoning"),
    ("Impact on audience", "The work informs, moves or helps its intended audience"),
)

DEFAULT_IMPACT = (
    "Audience: community members and local stakeholders\n"
    "Method: public showcase of student work"
)

IDEATION_DEFAULTS: dict[IdeationStep, str] = {
    IdeationStep.BIG_IDEA: "How communities change when people work together",
    IdeationStep.ESSENTIAL_QUESTION: "How might we make a lasting difference in our community?",
    IdeationStep.CHALLENGE: "Design and present a proposal that improves something students care about",
}


def _phases_text(data: JourneyData) -> str:
    return "\n".join(
        f"{index}. {template.name} - {template.summary}"
        for index, template in enumerate(DEFAULT_PHASES, start=1)
    )


def _activities_text(data: JourneyData) -> str | None:
    """One ``Phase: a, b, c`` line per phase that has no activities yet."""
    templates = {template.name.casefold(): template for template in DEFAULT_PHASES}
    lines = []
    for phase in data.phases:
        if data.activities_for(phase.id):
            continue
        template = templates.get(phase.name.casefold())
        activities = template.activities if template else GENERIC_ACTIVITIES
        lines.append(f"{phase.name}: {', '.join(activities)}")
    return "\n".join(lines) or None


def _milestones_text(data: JourneyData) -> str:
    """A checkpoint per phase, or a three-step default without phases."""
    if not data.phases:
        names = DEFAULT_MILESTONES
    else:
        names = tuple(f"{phase.name} checkpoint complete" for phase in data.phases)
    return "\n".join(
        f"Week {week}: {name}" for week, name in enumerate(names, start=1)
    )


def _rubric_text(data: JourneyData) -> str:
    return "\n".join(f"{name}: {description}" for name, description in DEFAULT_RUBRIC)


def _resources_text(data: JourneyData) -> str:
    return "\n".join(f"- {resource}" for resource in DEFAULT_RESOURCES)


def _impact_text(data: JourneyData) -> str:
    return DEFAULT_IMPACT


PROPOSERS = {
    JourneyState.PHASES: _phases_text,
    JourneyState.ACTIVITIES: _activities_text,
    JourneyState.RESOURCES: _resources_text,
    JourneyState.MILESTONES: _milestones_text,
    JourneyState.RUBRIC: _rubric_text,
    JourneyState.IMPACT: _impact_text,
}


def propose_minimal(stage: Stage, data: JourneyData) -> str | None:
    """Return default text for ``stage``, or None when there is nothing to offer."""
    if isinstance(stage, IdeationStep):
        return IDEATION_DEFAULTS[stage]
    proposer = PROPOSERS.get(stage)
    if proposer is None:
        return None
    return proposer(data)
