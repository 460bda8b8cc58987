"""Tagged results returned by the free-text extractors.

Every extractor returns exactly one of these types; the machine dispatches
on the type when merging into ``JourneyData``.
"""

from __future__ import annotations

from dataclasses import dataclass

from blueprint.models.entities import (
    Activity,
    Milestone,
    Phase,
    Resource,
    RubricCriterion,
)


@dataclass(frozen=True)
class PhasesExtracted:
    phases: tuple[Phase, ...]


@dataclass(frozen=True)
class ActivitiesExtracted:
    activities: tuple[Activity, ...]
    # Group names that matched no phase and were reassigned
    unmatched_groups: tuple[str, ...] = ()


@dataclass(frozen=True)
class ResourcesExtracted:
    resources: tuple[Resource, ...]


@dataclass(frozen=True)
class MilestonesExtracted:
    milestones: tuple[Milestone, ...]


@dataclass(frozen=True)
class RubricExtracted:
    criteria: tuple[RubricCriterion, ...]


@dataclass(frozen=True)
class ImpactExtracted:
    """Impact fields found in the text; None means "not mentioned"."""

    audience: str | None = None
    method: str | None = None
    timeline: str | None = None


@dataclass(frozen=True)
class ReflectionExtracted:
    text: str


@dataclass(frozen=True)
class ExtractionFailed:
    """The text could not be attributed without the user's help."""

    message: str


Extraction = (
    PhasesExtracted
    | ActivitiesExtracted
    | ResourcesExtracted
    | MilestonesExtracted
    | RubricExtracted
    | ImpactExtracted
    | ReflectionExtracted
    | ExtractionFailed
)
