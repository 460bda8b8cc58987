"""Per-state strategies that turn free text into journey entities.

The strategies degrade gracefully: text without structural markers still
yields a single entity instead of being dropped. The only refusals are
activities that cannot be attributed to a phase.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable

from blueprint.extract.results import (
    ActivitiesExtracted,
    Extraction,
    ExtractionFailed,
    ImpactExtracted,
    MilestonesExtracted,
    PhasesExtracted,
    ReflectionExtracted,
    ResourcesExtracted,
    RubricExtracted,
)
from blueprint.extract.text import (
    IdAllocator,
    join_text,
    normalize_name,
    split_items,
    split_lines,
    split_name_description,
    strip_marker,
)
from blueprint.models.entities import (
    Activity,
    JourneyData,
    Milestone,
    Phase,
    Resource,
    ResourceType,
    RubricCriterion,
)
from blueprint.models.journey import JourneyState
from blueprint.models.validation import UnmatchedActivityPolicy, ValidationPolicy

logger = logging.getLogger(__name__)

# --- Patterns ---

# "Week 3: Prototype critique", "week 3 - Prototype"
WEEK_PATTERN = re.compile(r"^week\s*(\d{1,3})\s*(?::|[-–—])\s*(.+)$", re.IGNORECASE)

# "Audience: families", "Method - public exhibition"
IMPACT_PREFIX_PATTERN = re.compile(
    r"^(audience|method|timeline)\s*(?::|[-–—])\s*(.*)$", re.IGNORECASE
)

# "Phase 2" used as a group name
PHASE_ORDINAL_PATTERN = re.compile(r"^phase\s*(\d{1,3})$", re.IGNORECASE)

# Keyword groups checked in order; first hit wins
RESOURCE_KEYWORDS: tuple[tuple[ResourceType, re.Pattern[str]], ...] = (
    (ResourceType.VIDEO, re.compile(r"\b(video|youtube|film|documentary|ted talk|clip)s?\b", re.I)),
    (ResourceType.BOOK, re.compile(r"\b(book|novel|textbook|ebook|picture book)s?\b", re.I)),
    (ResourceType.ARTICLE, re.compile(r"\b(article|paper|journal|blog|report|website)s?\b", re.I)),
    (ResourceType.TOOL, re.compile(r"\b(tool|software|app|kit|spreadsheet|template|platform)s?\b", re.I)),
    (ResourceType.EXPERT, re.compile(r"\b(expert|guest|speaker|scientist|engineer|mentor|professional)s?\b", re.I)),
    (ResourceType.LOCATION, re.compile(r"\b(museum|park|site|field trip|library|zoo|garden|location)s?\b", re.I)),
)

_TYPE_PREFIXES = {resource_type.value: resource_type for resource_type in ResourceType}


# --- Phases ---


def extract_phases(
    text: str, data: JourneyData, policy: ValidationPolicy
) -> Extraction:
    """Parse a numbered (or bulleted) list of phases.

    ``"1. Discovery Phase - explore the problem"`` becomes a phase named
    ``Discovery Phase`` described as ``explore the problem``. Unmarked lines
    after a marked line continue its description; unmarked lines before any
    marked line are phases in their own right, except a lead-in ending
    with a colon.
    """
    lines = split_lines(text)
    has_markers = any(strip_marker(line)[0] for line in lines)
    drafts: list[list[str]] = []
    current: list[str] | None = None

    for line in lines:
        marked, body = strip_marker(line)
        if marked:
            name, description = split_name_description(body)
            current = [name, description]
            drafts.append(current)
        elif current is not None:
            current[1] = join_text(current[1], body)
        elif has_markers and body.endswith(":"):
            logger.debug("Skipping phase list lead-in: %s", body)
        else:
            drafts.append([body, ""])

    ids = IdAllocator(data.all_ids())
    phases = []
    for index, (name, description) in enumerate(drafts, start=1):
        if not name:
            name, description = (description, "") if description else (f"Phase {index}", "")
        phases.append(Phase(id=ids.allocate("phase"), name=name, description=description))
    return PhasesExtracted(phases=tuple(phases))


# --- Activities ---


def _match_phase(group: str, phases: list[Phase]) -> Phase | None:
    """Resolve a group name to a phase by name, then loosely."""
    key = normalize_name(group)
    if not key:
        return None
    for phase in phases:
        if normalize_name(phase.name) == key:
            return phase

    ordinal = PHASE_ORDINAL_PATTERN.match(key)
    if ordinal:
        position = int(ordinal.group(1)) - 1
        if 0 <= position < len(phases):
            return phases[position]

    candidates = [
        phase
        for phase in phases
        if normalize_name(phase.name)
        and (key in normalize_name(phase.name) or normalize_name(phase.name) in key)
    ]
    if len(candidates) == 1:
        return candidates[0]
    return None


def extract_activities(
    text: str, data: JourneyData, policy: ValidationPolicy
) -> Extraction:
    """Parse ``PhaseName: item1, item2`` groupings into activities.

    A ``PhaseName:`` line on its own starts a group that the following
    lines add to. Items outside any group belong to no phase and follow
    the unmatched-activity policy.
    """
    if not data.phases:
        return ExtractionFailed("Add your phases before listing activities.")

    groups: list[tuple[str | None, list[str]]] = []
    current: tuple[str | None, list[str]] | None = None

    for line in split_lines(text):
        marked, body = strip_marker(line)
        head, sep, rest = body.partition(":")
        # A bulleted "Name: ..." line only starts a group when it names a phase
        if sep and head.strip() and (not marked or _match_phase(head, data.phases)):
            current = (head.strip(), split_items(rest))
            groups.append(current)
            continue
        if current is None:
            current = (None, [])
            groups.append(current)
        if marked:
            current[1].append(body)
        else:
            current[1].extend(split_items(body))

    assignments: list[tuple[Phase, list[str]]] = []
    unmatched: list[str] = []
    for group, items in groups:
        if not items:
            continue
        phase = _match_phase(group, data.phases) if group else None
        if phase is None:
            label = group or ", ".join(items)
            if policy.unmatched_activities is UnmatchedActivityPolicy.REJECT:
                names = ", ".join(p.name for p in data.phases)
                return ExtractionFailed(
                    f"I couldn't tell which phase '{label}' belongs to. "
                    f"Start the line with one of: {names}."
                )
            logger.warning(
                "Activities for %r matched no phase; assigning to %r",
                label,
                data.phases[0].name,
            )
            unmatched.append(label)
            phase = data.phases[0]
        assignments.append((phase, items))

    ids = IdAllocator(data.all_ids())
    activities = [
        Activity(id=ids.allocate("activity"), phase_id=phase.id, name=item)
        for phase, items in assignments
        for item in items
    ]
    return ActivitiesExtracted(activities=tuple(activities), unmatched_groups=tuple(unmatched))


# --- Resources ---


def classify_resource(text: str) -> ResourceType:
    """Pick a resource type from keywords, defaulting to OTHER."""
    for resource_type, pattern in RESOURCE_KEYWORDS:
        if pattern.search(text):
            return resource_type
    return ResourceType.OTHER


def extract_resources(
    text: str, data: JourneyData, policy: ValidationPolicy
) -> Extraction:
    """One resource per line; ``Video: ...`` style prefixes set the type."""
    ids = IdAllocator(data.all_ids())
    resources = []
    for line in split_lines(text):
        _, body = strip_marker(line)
        head, sep, rest = body.partition(":")
        prefixed = _TYPE_PREFIXES.get(head.strip().lower()) if sep else None
        if prefixed is not None and rest.strip():
            resources.append(Resource(id=ids.allocate("resource"), name=rest.strip(), type=prefixed))
            continue
        resources.append(
            Resource(id=ids.allocate("resource"), name=body, type=classify_resource(body))
        )
    return ResourcesExtracted(resources=tuple(resources))


# --- Milestones ---


def _linked_phase(text: str, phases: list[Phase]) -> str | None:
    """Return the id of the longest phase name mentioned in ``text``."""
    lowered = text.casefold()
    best: Phase | None = None
    for phase in phases:
        name = normalize_name(phase.name)
        if len(name) >= 3 and name in lowered:
            if best is None or len(name) > len(normalize_name(best.name)):
                best = phase
    return best.id if best else None


def extract_milestones(
    text: str, data: JourneyData, policy: ValidationPolicy
) -> Extraction:
    """``Week N: name`` lines become dated milestones; other lines undated."""
    ids = IdAllocator(data.all_ids())
    milestones = []
    for line in split_lines(text):
        _, body = strip_marker(line)
        match = WEEK_PATTERN.match(body)
        if match:
            name = match.group(2).strip()
            due_label: str | None = f"Week {int(match.group(1))}"
        else:
            name = body
            due_label = None
        milestones.append(
            Milestone(
                id=ids.allocate("milestone"),
                name=name,
                phase_id=_linked_phase(name, data.phases),
                due_label=due_label,
            )
        )
    return MilestonesExtracted(milestones=tuple(milestones))


# --- Rubric ---


def extract_rubric(
    text: str, data: JourneyData, policy: ValidationPolicy
) -> Extraction:
    """``Name: description`` lines become criteria; bare names have no description."""
    ids = IdAllocator(data.all_ids())
    criteria = []
    for line in split_lines(text):
        _, body = strip_marker(line)
        name, description = split_name_description(body)
        if not name:
            name, description = description, ""
        if not name:
            continue
        criteria.append(
            RubricCriterion(id=ids.allocate("criterion"), name=name, description=description)
        )
    return RubricExtracted(criteria=tuple(criteria))


# --- Impact ---


def extract_impact(
    text: str, data: JourneyData, policy: ValidationPolicy
) -> Extraction:
    """Fill audience, method and timeline from prefixed or plain lines.

    Unprefixed text is the method once an audience is known (stored or
    given earlier in the same text), otherwise it is the audience.
    """
    found: dict[str, str] = {}
    audience_known = bool(data.deliverables.impact.audience.strip())

    for line in split_lines(text):
        _, body = strip_marker(line)
        match = IMPACT_PREFIX_PATTERN.match(body)
        if match:
            key = match.group(1).lower()
            value = match.group(2).strip()
        else:
            key = "method" if audience_known or "audience" in found else "audience"
            value = body
        if not value:
            continue
        found[key] = join_text(found.get(key, ""), value)
        if key == "audience":
            audience_known = True

    return ImpactExtracted(
        audience=found.get("audience"),
        method=found.get("method"),
        timeline=found.get("timeline"),
    )


Extractor = Callable[[str, JourneyData, ValidationPolicy], Extraction]

EXTRACTORS: dict[JourneyState, Extractor] = {
    JourneyState.PHASES: extract_phases,
    JourneyState.ACTIVITIES: extract_activities,
    JourneyState.RESOURCES: extract_resources,
    JourneyState.MILESTONES: extract_milestones,
    JourneyState.RUBRIC: extract_rubric,
    JourneyState.IMPACT: extract_impact,
}


def extract_for_state(
    state: JourneyState,
    text: str,
    data: JourneyData,
    policy: ValidationPolicy | None = None,
) -> Extraction:
    """Route text to the extractor for ``state``.

    States that collect no entities keep the text as a reflection.
    """
    extractor = EXTRACTORS.get(state)
    if extractor is None:
        return ReflectionExtracted(text=text.strip())
    return extractor(text, data, policy or ValidationPolicy())
