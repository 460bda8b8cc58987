"""Entity records exchanged by the journey engine.

Entities are immutable value records. The aggregate ``JourneyData`` is the
only mutable container and is owned by ``JourneyMachine``.

Serialization uses the snapshot wire keys (``phaseId``, ``dueLabel``, ...)
so exported snapshots stay readable by earlier releases.
"""

from __future__ import annotations

import copy
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Self

DEFAULT_RUBRIC_LEVELS: tuple[str, ...] = (
    "Emerging",
    "Developing",
    "Proficient",
    "Exemplary",
)

_ID_PATTERN = re.compile(r"^(?P<prefix>[a-z]+)-(?P<number>\d+)$")


class ResourceType(Enum):
    """Kinds of resource an educator can list."""

    ARTICLE = "article"
    VIDEO = "video"
    BOOK = "book"
    TOOL = "tool"
    EXPERT = "expert"
    LOCATION = "location"
    OTHER = "other"

    @classmethod
    def parse(cls, value: Any) -> "ResourceType":
        """Coerce a stored value, falling back to OTHER."""
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.OTHER


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def _optional_text(value: Any) -> str | None:
    if value is None or value == "":
        return None
    return str(value)


def next_id(prefix: str, existing: Iterable[str]) -> str:
    """Return the next ``prefix-N`` id not already used.

    Examples:
        next_id("phase", []) -> "phase-1"
        next_id("phase", ["phase-1", "phase-4"]) -> "phase-5"
    """
    highest = 0
    for value in existing:
        match = _ID_PATTERN.match(value)
        if match and match.group("prefix") == prefix:
            highest = max(highest, int(match.group("number")))
    return f"{prefix}-{highest + 1}"


@dataclass(frozen=True, slots=True)
class Phase:
    """A stage of the student's learning journey."""

    id: str
    name: str
    description: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {"id": self.id, "name": self.name, "description": self.description}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Self:
        """Create from dictionary."""
        return cls(
            id=_text(data.get("id")),
            name=_text(data.get("name")),
            description=_text(data.get("description")),
        )


@dataclass(frozen=True, slots=True)
class Activity:
    """A learning activity attached to a phase."""

    id: str
    phase_id: str
    name: str
    description: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "phaseId": self.phase_id,
            "name": self.name,
            "description": self.description,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Self:
        """Create from dictionary."""
        return cls(
            id=_text(data.get("id")),
            phase_id=_text(data.get("phaseId", data.get("phase_id"))),
            name=_text(data.get("name")),
            description=_text(data.get("description")),
        )


@dataclass(frozen=True, slots=True)
class Resource:
    """Supporting material for the journey."""

    id: str
    name: str
    type: ResourceType = ResourceType.OTHER

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {"id": self.id, "name": self.name, "type": self.type.value}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Self:
        """Create from dictionary."""
        return cls(
            id=_text(data.get("id")),
            name=_text(data.get("name")),
            type=ResourceType.parse(data.get("type", "other")),
        )


@dataclass(frozen=True, slots=True)
class Milestone:
    """A checkpoint, optionally tied to a phase."""

    id: str
    name: str
    phase_id: str | None = None
    due_label: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "name": self.name,
            "phaseId": self.phase_id,
            "dueLabel": self.due_label,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Self:
        """Create from dictionary."""
        return cls(
            id=_text(data.get("id")),
            name=_text(data.get("name")),
            phase_id=_optional_text(data.get("phaseId", data.get("phase_id"))),
            due_label=_optional_text(data.get("dueLabel", data.get("due_label"))),
        )


@dataclass(frozen=True, slots=True)
class RubricCriterion:
    """One assessment criterion."""

    id: str
    name: str
    description: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {"id": self.id, "name": self.name, "description": self.description}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Self:
        """Create from dictionary."""
        return cls(
            id=_text(data.get("id")),
            name=_text(data.get("name")),
            description=_text(data.get("description")),
        )


@dataclass(frozen=True, slots=True)
class Impact:
    """How student work reaches an authentic audience."""

    audience: str = ""
    method: str = ""
    timeline: str = ""

    @property
    def is_empty(self) -> bool:
        """True when neither audience nor method is populated."""
        return not (self.audience.strip() or self.method.strip())

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {"audience": self.audience, "method": self.method, "timeline": self.timeline}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Self:
        """Create from dictionary."""
        return cls(
            audience=_text(data.get("audience")),
            method=_text(data.get("method")),
            timeline=_text(data.get("timeline")),
        )


@dataclass(frozen=True, slots=True)
class Ideation:
    """Big Idea, Essential Question and Challenge that frame the project."""

    big_idea: str = ""
    essential_question: str = ""
    challenge: str = ""

    @property
    def is_complete(self) -> bool:
        return bool(
            self.big_idea.strip()
            and self.essential_question.strip()
            and self.challenge.strip()
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "bigIdea": self.big_idea,
            "essentialQuestion": self.essential_question,
            "challenge": self.challenge,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Self:
        """Create from dictionary."""
        return cls(
            big_idea=_text(data.get("bigIdea", data.get("big_idea"))),
            essential_question=_text(
                data.get("essentialQuestion", data.get("essential_question"))
            ),
            challenge=_text(data.get("challenge")),
        )


@dataclass(frozen=True, slots=True)
class Rubric:
    """Assessment rubric: criteria plus performance levels."""

    criteria: tuple[RubricCriterion, ...] = ()
    levels: tuple[str, ...] = DEFAULT_RUBRIC_LEVELS

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "criteria": [criterion.to_dict() for criterion in self.criteria],
            "levels": list(self.levels),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Self:
        """Create from dictionary."""
        levels = data.get("levels")
        return cls(
            criteria=tuple(
                _records(data.get("criteria"), RubricCriterion.from_dict)
            ),
            levels=(
                tuple(str(level) for level in levels)
                if isinstance(levels, list) and levels
                else DEFAULT_RUBRIC_LEVELS
            ),
        )


@dataclass(frozen=True, slots=True)
class Deliverables:
    """Milestones, rubric and impact plan."""

    milestones: tuple[Milestone, ...] = ()
    rubric: Rubric = field(default_factory=Rubric)
    impact: Impact = field(default_factory=Impact)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "milestones": [milestone.to_dict() for milestone in self.milestones],
            "rubric": self.rubric.to_dict(),
            "impact": self.impact.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Self:
        """Create from dictionary."""
        rubric = data.get("rubric")
        impact = data.get("impact")
        return cls(
            milestones=tuple(_records(data.get("milestones"), Milestone.from_dict)),
            rubric=Rubric.from_dict(rubric) if isinstance(rubric, Mapping) else Rubric(),
            impact=Impact.from_dict(impact) if isinstance(impact, Mapping) else Impact(),
        )


def _records(raw: Any, factory: Any) -> list[Any]:
    """Decode a list of records, skipping entries that are not mappings."""
    if not isinstance(raw, list):
        return []
    return [factory(item) for item in raw if isinstance(item, Mapping)]


@dataclass
class JourneyData:
    """Aggregate of everything captured while designing a project.

    Lists hold immutable entities; the lists themselves are replaced, never
    edited in place, by the machine.
    """

    ideation: Ideation = field(default_factory=Ideation)
    phases: list[Phase] = field(default_factory=list)
    activities: list[Activity] = field(default_factory=list)
    resources: list[Resource] = field(default_factory=list)
    deliverables: Deliverables = field(default_factory=Deliverables)
    reflections: list[str] = field(default_factory=list)

    FIELDS = ("ideation", "phases", "activities", "resources", "deliverables", "reflections")

    def copy(self) -> "JourneyData":
        """Return an independent copy safe to hand to callers."""
        return copy.deepcopy(self)

    def phase_by_id(self, phase_id: str) -> Phase | None:
        for phase in self.phases:
            if phase.id == phase_id:
                return phase
        return None

    def activities_for(self, phase_id: str) -> list[Activity]:
        """Return the activities attached to a phase."""
        return [activity for activity in self.activities if activity.phase_id == phase_id]

    def all_ids(self) -> list[str]:
        """Every entity id currently in the aggregate."""
        ids = [phase.id for phase in self.phases]
        ids.extend(activity.id for activity in self.activities)
        ids.extend(resource.id for resource in self.resources)
        ids.extend(milestone.id for milestone in self.deliverables.milestones)
        ids.extend(criterion.id for criterion in self.deliverables.rubric.criteria)
        return ids

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "ideation": self.ideation.to_dict(),
            "phases": [phase.to_dict() for phase in self.phases],
            "activities": [activity.to_dict() for activity in self.activities],
            "resources": [resource.to_dict() for resource in self.resources],
            "deliverables": self.deliverables.to_dict(),
            "reflections": list(self.reflections),
        }

    @classmethod
    def from_dict(cls, data: Any) -> "JourneyData":
        """Create from dictionary.

        Missing or malformed sections default to their empty value so a
        partially corrupt snapshot still loads.
        """
        if not isinstance(data, Mapping):
            return cls()
        ideation = data.get("ideation")
        deliverables = data.get("deliverables")
        reflections = data.get("reflections")
        return cls(
            ideation=Ideation.from_dict(ideation) if isinstance(ideation, Mapping) else Ideation(),
            phases=_records(data.get("phases"), Phase.from_dict),
            activities=_records(data.get("activities"), Activity.from_dict),
            resources=_records(data.get("resources"), Resource.from_dict),
            deliverables=(
                Deliverables.from_dict(deliverables)
                if isinstance(deliverables, Mapping)
                else Deliverables()
            ),
            reflections=(
                [str(item) for item in reflections if item is not None]
                if isinstance(reflections, list)
                else []
            ),
        )
