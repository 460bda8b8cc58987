"""Journey state machine.

``JourneyMachine`` owns the current state and the ``JourneyData`` aggregate
for one project. It gates advancement on the stage validator, routes free
text through the extractor for the current state, and converts itself to
and from snapshots.

Expected failures (a gate that does not pass, editing into the future, a
corrupt snapshot) are returned as result values. Only programming errors,
such as unknown field names, raise.
"""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from blueprint.extract import (
    ActivitiesExtracted,
    Extraction,
    ExtractionFailed,
    ImpactExtracted,
    MilestonesExtracted,
    PhasesExtracted,
    ReflectionExtracted,
    ResourcesExtracted,
    RubricExtracted,
    extract_for_state,
)
from blueprint.extract.text import IdAllocator, normalize_name
from blueprint.models.entities import (
    Activity,
    Deliverables,
    Ideation,
    JourneyData,
    Phase,
    Resource,
)
from blueprint.models.journey import (
    INITIAL_STATE,
    SKIPPABLE_STATES,
    STAGE_CONTEXTS,
    STATE_ORDER,
    STATE_TO_SEGMENT,
    TERMINAL_MESSAGE,
    TERMINAL_STATE,
    TRANSITION_MESSAGES,
    JourneyState,
    Segment,
    StageContext,
    next_state,
    parse_state,
    state_index,
)
from blueprint.models.schema import CURRENT_VERSION, SnapshotError, migrate_snapshot
from blueprint.models.validation import ValidationPolicy, check_gate, plural

logger = logging.getLogger(__name__)

EMPTY_INPUT_MESSAGE = "Please provide some input."

# Fields kept by reset(preserve=True)
DEFAULT_PRESERVED_FIELDS: tuple[str, ...] = ("ideation", "phases", "reflections")


@dataclass(frozen=True)
class TransitionResult:
    """Outcome of advance, skip or edit."""

    success: bool
    new_state: JourneyState | None = None
    message: str | None = None


@dataclass(frozen=True)
class InputResult:
    """Outcome of process_input."""

    success: bool
    ready_for_next: bool = False
    message: str | None = None
    # Activity groups that matched no phase and went to the first phase
    unmatched_groups: tuple[str, ...] = ()


@dataclass(frozen=True)
class ImportResult:
    success: bool
    message: str | None = None
    warnings: tuple[str, ...] = ()


@dataclass(frozen=True)
class Progress:
    """Coarse progress for a progress bar."""

    current: int
    total: int
    percentage: int
    segment: Segment


@dataclass(frozen=True)
class StageRecap:
    """Summary of what a segment has captured so far."""

    segment: Segment
    summary: str
    counts: dict[str, int]


def _now() -> str:
    return datetime.now(UTC).isoformat()


def _entity_list(name: str, value: Any, factory: Any, record_type: type) -> list[Any]:
    if not isinstance(value, (list, tuple)):
        raise ValueError(f"{name} must be a list, got {type(value).__name__}")
    items = []
    for item in value:
        if isinstance(item, record_type):
            items.append(item)
        elif isinstance(item, Mapping):
            items.append(factory(item))
        else:
            raise ValueError(f"Invalid {name} entry: {item!r}")
    return items


def _coerce_field(name: str, value: Any) -> Any:
    """Convert an update_data value into the type stored on JourneyData."""
    if name == "ideation":
        if isinstance(value, Ideation):
            return value
        if isinstance(value, Mapping):
            return Ideation.from_dict(value)
        raise ValueError(f"ideation must be an Ideation or a mapping, got {value!r}")
    if name == "deliverables":
        if isinstance(value, Deliverables):
            return value
        if isinstance(value, Mapping):
            return Deliverables.from_dict(value)
        raise ValueError(f"deliverables must be Deliverables or a mapping, got {value!r}")
    if name == "reflections":
        if not isinstance(value, (list, tuple)):
            raise ValueError("reflections must be a list of strings")
        return [str(item) for item in value]
    factories = {
        "phases": (Phase.from_dict, Phase),
        "activities": (Activity.from_dict, Activity),
        "resources": (Resource.from_dict, Resource),
    }
    factory, record_type = factories[name]
    return _entity_list(name, value, factory, record_type)


def _upsert_by_name(existing: Iterable[Any], incoming: Iterable[Any]) -> list[Any]:
    """Merge records by case-insensitive name, keeping the stored id."""
    merged = list(existing)
    positions = {normalize_name(item.name): index for index, item in enumerate(merged)}
    for item in incoming:
        key = normalize_name(item.name)
        if key in positions:
            index = positions[key]
            merged[index] = dataclasses.replace(item, id=merged[index].id)
        else:
            positions[key] = len(merged)
            merged.append(item)
    return merged


class JourneyMachine:
    """Stage-gated state machine for one project's design journey."""

    def __init__(
        self,
        policy: ValidationPolicy | None = None,
        data: JourneyData | None = None,
    ) -> None:
        self._policy = policy or ValidationPolicy()
        self._state = INITIAL_STATE
        self._furthest = INITIAL_STATE
        self._data = data.copy() if data is not None else JourneyData()
        self._skipped: set[JourneyState] = set()
        self._edit_mode = False
        self._history: list[dict[str, str]] = []

    # --- Read access ---

    @property
    def state(self) -> JourneyState:
        return self._state

    @property
    def data(self) -> JourneyData:
        """A copy of the captured data; mutate through update_data."""
        return self._data.copy()

    @property
    def policy(self) -> ValidationPolicy:
        return self._policy

    @policy.setter
    def policy(self, policy: ValidationPolicy) -> None:
        self._policy = policy

    @property
    def furthest_state(self) -> JourneyState:
        return self._furthest

    @property
    def skipped(self) -> frozenset[JourneyState]:
        return frozenset(self._skipped)

    @property
    def edit_mode(self) -> bool:
        return self._edit_mode

    @property
    def history(self) -> list[dict[str, str]]:
        """Transition records: ``{from, to, at, reason}``."""
        return [dict(entry) for entry in self._history]

    @property
    def is_complete(self) -> bool:
        return self._state is TERMINAL_STATE

    # --- Transitions ---

    def _move(self, target: JourneyState, reason: str) -> None:
        self._history.append(
            {
                "from": self._state.value,
                "to": target.value,
                "at": _now(),
                "reason": reason,
            }
        )
        logger.info("Journey %s -> %s (%s)", self._state.value, target.value, reason)
        self._state = target
        if state_index(target) > state_index(self._furthest):
            self._furthest = target
        if self._edit_mode and target is self._furthest:
            self._edit_mode = False

    def advance(self) -> TransitionResult:
        """Move to the next state if the current state's gate passes."""
        target = next_state(self._state)
        if target is None:
            return TransitionResult(success=False, message=TERMINAL_MESSAGE)

        gate = check_gate(self._state, self._data, self._policy)
        if not gate.passed:
            logger.debug("Gate for %s rejected: %s", self._state.value, gate.message)
            return TransitionResult(success=False, message=gate.message)

        self._skipped.discard(self._state)
        self._move(target, "advance")
        return TransitionResult(success=True, new_state=target)

    def can_skip(self) -> bool:
        """True when the current state is optional."""
        return self._state in SKIPPABLE_STATES

    def skip(self) -> TransitionResult:
        """Move past an optional state without checking its gate."""
        if not self.can_skip():
            title = STAGE_CONTEXTS[self._state].title
            return TransitionResult(
                success=False, message=f"'{title}' is required and can't be skipped."
            )
        target = next_state(self._state)
        if target is None:
            return TransitionResult(success=False, message=TERMINAL_MESSAGE)
        self._skipped.add(self._state)
        self._move(target, "skip")
        return TransitionResult(success=True, new_state=target)

    def edit(self, target: JourneyState | str) -> TransitionResult:
        """Jump back to a state that has already been reached.

        Data is kept; edit mode stays on until the journey is back at the
        furthest state reached.
        """
        try:
            resolved = parse_state(target)
        except ValueError as e:
            return TransitionResult(success=False, message=str(e))

        if state_index(resolved) > state_index(self._furthest):
            return TransitionResult(
                success=False,
                message="You can only return to stages you've already visited.",
            )
        if resolved is self._state:
            return TransitionResult(success=True, new_state=resolved)

        self._edit_mode = resolved is not self._furthest
        self._move(resolved, "edit")
        return TransitionResult(success=True, new_state=resolved)

    def reset(self, preserve: bool | str | Iterable[str] = False) -> None:
        """Return to the initial state, optionally keeping part of the data.

        Args:
            preserve: False keeps nothing; True keeps ideation, phases and
                reflections; field names keep exactly those fields.

        Raises:
            ValueError: If a field name is not a JourneyData field.
        """
        if preserve is True:
            keep: tuple[str, ...] = DEFAULT_PRESERVED_FIELDS
        elif preserve is False:
            keep = ()
        elif isinstance(preserve, str):
            keep = (preserve,)
        else:
            keep = tuple(preserve)

        unknown = [name for name in keep if name not in JourneyData.FIELDS]
        if unknown:
            raise ValueError(f"Unknown journey data fields: {', '.join(unknown)}")

        current = self._data.copy()
        fresh = JourneyData()
        for name in keep:
            setattr(fresh, name, getattr(current, name))

        self._data = fresh
        self._state = INITIAL_STATE
        self._furthest = INITIAL_STATE
        self._skipped = set()
        self._edit_mode = False
        self._history = []
        logger.info("Journey reset (kept: %s)", ", ".join(keep) or "nothing")

    # --- Data ---

    def update_data(self, partial: Mapping[str, Any] | None = None, **changes: Any) -> None:
        """Shallow-merge top-level fields; lists are replaced wholesale.

        Entities given without an id get a fresh one, as on import.

        Raises:
            ValueError: On unknown field names or values of the wrong shape.
        """
        merged = {**(partial or {}), **changes}
        unknown = [name for name in merged if name not in JourneyData.FIELDS]
        if unknown:
            raise ValueError(f"Unknown journey data fields: {', '.join(unknown)}")

        coerced = {name: _coerce_field(name, value) for name, value in merged.items()}
        updated = self._data.copy()
        for name, value in coerced.items():
            setattr(updated, name, value)
        self._data = _with_ids(updated)

    def add_reflection(self, text: str) -> None:
        self._data.reflections = [*self._data.reflections, text]

    def process_input(self, raw_text: str) -> InputResult:
        """Extract entities for the current state and merge them.

        Returns:
            InputResult whose ``ready_for_next`` tells whether the current
            gate now passes.
        """
        if not raw_text or not raw_text.strip():
            return InputResult(success=False, message=EMPTY_INPUT_MESSAGE)

        extraction = extract_for_state(self._state, raw_text, self._data, self._policy)
        if isinstance(extraction, ExtractionFailed):
            return InputResult(success=False, message=extraction.message)

        self._data = self._merge(extraction)
        gate = check_gate(self._state, self._data, self._policy)
        unmatched = (
            extraction.unmatched_groups
            if isinstance(extraction, ActivitiesExtracted)
            else ()
        )
        return InputResult(
            success=True,
            ready_for_next=gate.passed,
            message=gate.message,
            unmatched_groups=unmatched,
        )

    def _merge(self, extraction: Extraction) -> JourneyData:
        """Build the aggregate that results from applying ``extraction``."""
        data = self._data.copy()
        deliverables = data.deliverables

        if isinstance(extraction, PhasesExtracted):
            data.phases = _upsert_by_name(data.phases, extraction.phases)
        elif isinstance(extraction, ActivitiesExtracted):
            known = {(a.phase_id, normalize_name(a.name)) for a in data.activities}
            activities = list(data.activities)
            for activity in extraction.activities:
                key = (activity.phase_id, normalize_name(activity.name))
                if key not in known:
                    known.add(key)
                    activities.append(activity)
            data.activities = activities
        elif isinstance(extraction, ResourcesExtracted):
            data.resources = _upsert_by_name(data.resources, extraction.resources)
        elif isinstance(extraction, MilestonesExtracted):
            data.deliverables = dataclasses.replace(
                deliverables,
                milestones=tuple(
                    _upsert_by_name(deliverables.milestones, extraction.milestones)
                ),
            )
        elif isinstance(extraction, RubricExtracted):
            data.deliverables = dataclasses.replace(
                deliverables,
                rubric=dataclasses.replace(
                    deliverables.rubric,
                    criteria=tuple(
                        _upsert_by_name(deliverables.rubric.criteria, extraction.criteria)
                    ),
                ),
            )
        elif isinstance(extraction, ImpactExtracted):
            provided = {
                name: value
                for name in ("audience", "method", "timeline")
                if (value := getattr(extraction, name)) is not None
            }
            data.deliverables = dataclasses.replace(
                deliverables, impact=dataclasses.replace(deliverables.impact, **provided)
            )
        elif isinstance(extraction, ReflectionExtracted):
            data.reflections = [*data.reflections, extraction.text]
        return data

    # --- Presentation ---

    def progress(self) -> Progress:
        """Position in the journey; COMPLETE counts as 100%."""
        total = len(STATE_ORDER) - 1
        index = state_index(self._state)
        if self._state is TERMINAL_STATE:
            return Progress(current=total, total=total, percentage=100, segment="complete")
        return Progress(
            current=min(index + 1, total),
            total=total,
            percentage=round(index / total * 100),
            segment=STATE_TO_SEGMENT[self._state],
        )

    def get_transition_message(self) -> str:
        return TRANSITION_MESSAGES[self._state]

    def get_stage_context(self) -> StageContext:
        return STAGE_CONTEXTS[self._state]

    def recap(self, segment: Segment | None = None) -> StageRecap:
        """Summarize the journey or deliverables captured so far.

        Defaults to the current segment; "complete" covers both.
        """
        segment = segment or STATE_TO_SEGMENT[self._state]
        data = self._data
        counts: dict[str, int] = {}
        parts: list[str] = []

        if segment in ("journey", "complete"):
            counts.update(
                phases=len(data.phases),
                activities=len(data.activities),
                resources=len(data.resources),
            )
            parts.extend(
                [
                    plural(counts["phases"], "phase"),
                    plural(counts["activities"], "activity", "activities"),
                    plural(counts["resources"], "resource"),
                ]
            )
        if segment in ("deliver", "complete"):
            impact = data.deliverables.impact
            counts.update(
                milestones=len(data.deliverables.milestones),
                criteria=len(data.deliverables.rubric.criteria),
                impact=0 if impact.is_empty else 1,
            )
            parts.extend(
                [
                    plural(counts["milestones"], "milestone"),
                    plural(counts["criteria"], "rubric criterion", "rubric criteria"),
                    "impact plan set" if counts["impact"] else "no impact plan",
                ]
            )
        return StageRecap(segment=segment, summary=", ".join(parts), counts=counts)

    # --- Snapshots ---

    def export_state(self) -> dict[str, Any]:
        """Return the snapshot form of this machine."""
        return {
            "version": CURRENT_VERSION,
            "state": self._state.value,
            "data": self._data.to_dict(),
            "furthestState": self._furthest.value,
            "skipped": [state.value for state in STATE_ORDER if state in self._skipped],
            "editMode": self._edit_mode,
            "history": self.history,
        }

    def import_state(self, snapshot: Any) -> ImportResult:
        """Replace state and data from a snapshot.

        Never raises. Malformed fields fall back to defaults and are listed
        in ``warnings``; input that is not a snapshot at all leaves the
        machine untouched.
        """
        try:
            migrated = migrate_snapshot(snapshot)
        except SnapshotError as e:
            logger.warning("Snapshot import failed: %s", e)
            return ImportResult(success=False, message=str(e))

        warnings: list[str] = []

        def state_field(key: str, default: JourneyState) -> JourneyState:
            raw = migrated.get(key)
            if raw is None:
                return default
            try:
                return parse_state(raw)
            except ValueError:
                warnings.append(f"Unknown {key} {raw!r}; using {default.value}")
                return default

        state = state_field("state", INITIAL_STATE)
        furthest = state_field("furthestState", state)
        if state_index(furthest) < state_index(state):
            furthest = state

        raw_data = migrated.get("data")
        if raw_data is not None and not isinstance(raw_data, Mapping):
            warnings.append("Snapshot data is not an object; starting empty")
        data = _with_ids(JourneyData.from_dict(raw_data))

        skipped: set[JourneyState] = set()
        raw_skipped = migrated.get("skipped")
        for value in raw_skipped if isinstance(raw_skipped, list) else []:
            try:
                skipped.add(parse_state(value))
            except (ValueError, TypeError):
                warnings.append(f"Ignoring unknown skipped state {value!r}")

        raw_history = migrated.get("history")
        history = [
            {str(key): str(value) for key, value in entry.items()}
            for entry in (raw_history if isinstance(raw_history, list) else [])
            if isinstance(entry, Mapping)
        ]

        self._state = state
        self._furthest = furthest
        self._data = data
        self._skipped = skipped & SKIPPABLE_STATES
        self._edit_mode = bool(migrated.get("editMode", False))
        self._history = history

        for warning in warnings:
            logger.warning("Snapshot import: %s", warning)
        logger.info("Imported snapshot at %s", state.value)
        return ImportResult(success=True, warnings=tuple(warnings))

    @classmethod
    def from_snapshot(
        cls, snapshot: Any, policy: ValidationPolicy | None = None
    ) -> "JourneyMachine":
        """Create a machine and import ``snapshot`` into it."""
        machine = cls(policy=policy)
        machine.import_state(snapshot)
        return machine


def _with_ids(data: JourneyData) -> JourneyData:
    """Give entities loaded without an id a fresh one."""
    ids = IdAllocator(data.all_ids())

    def fill(items: Iterable[Any], prefix: str) -> list[Any]:
        return [
            item if item.id else dataclasses.replace(item, id=ids.allocate(prefix))
            for item in items
        ]

    data.phases = fill(data.phases, "phase")
    data.activities = fill(data.activities, "activity")
    data.resources = fill(data.resources, "resource")
    deliverables = data.deliverables
    data.deliverables = dataclasses.replace(
        deliverables,
        milestones=tuple(fill(deliverables.milestones, "milestone")),
        rubric=dataclasses.replace(
            deliverables.rubric,
            criteria=tuple(fill(deliverables.rubric.criteria, "criterion")),
        ),
    )
    return data
