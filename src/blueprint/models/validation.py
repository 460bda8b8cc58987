"""Stage gates for the journey state machine.

Each state has a completion predicate evaluated against the live
``JourneyData``. Rejections carry a user-facing message that the calling UI
can show verbatim.
"""

from __future__ import annotations

from collections.abc import Callable, Collection
from dataclasses import dataclass
from enum import Enum

from blueprint.models.entities import JourneyData
from blueprint.models.journey import JourneyState


class UnmatchedActivityPolicy(Enum):
    """What to do with an activity group naming an unknown phase."""

    FIRST_PHASE = "first_phase"
    REJECT = "reject"


@dataclass(frozen=True)
class ValidationPolicy:
    """Thresholds for the stage gates.

    Deliverable states only enforce their thresholds in strict mode.
    """

    strict: bool = False
    min_phases: int = 2
    min_milestones: int = 1
    min_rubric_criteria: int = 2
    require_impact: bool = True
    unmatched_activities: UnmatchedActivityPolicy = UnmatchedActivityPolicy.FIRST_PHASE


@dataclass(frozen=True)
class GateResult:
    """Outcome of evaluating a stage gate."""

    passed: bool
    message: str | None = None

    @classmethod
    def ok(cls) -> "GateResult":
        return cls(passed=True)

    @classmethod
    def reject(cls, message: str) -> "GateResult":
        return cls(passed=False, message=message)


def plural(count: int, singular: str, plural_form: str | None = None) -> str:
    word = singular if count == 1 else (plural_form or f"{singular}s")
    return f"{count} {word}"


def _check_phases(data: JourneyData, policy: ValidationPolicy) -> GateResult:
    if len(data.phases) < policy.min_phases:
        return GateResult.reject(
            f"Add at least {plural(policy.min_phases, 'phase')} "
            "to create a meaningful journey."
        )
    return GateResult.ok()


def _check_activities(data: JourneyData, policy: ValidationPolicy) -> GateResult:
    covered = {activity.phase_id for activity in data.activities}
    missing = [phase.name or phase.id for phase in data.phases if phase.id not in covered]
    if missing:
        return GateResult.reject(
            "Each phase needs at least one activity. Still missing: "
            + ", ".join(missing)
            + "."
        )
    return GateResult.ok()


def _check_milestones(data: JourneyData, policy: ValidationPolicy) -> GateResult:
    if not policy.strict:
        return GateResult.ok()
    if len(data.deliverables.milestones) < policy.min_milestones:
        return GateResult.reject(
            f"Add at least {plural(policy.min_milestones, 'milestone')} to track progress."
        )
    return GateResult.ok()


def _check_rubric(data: JourneyData, policy: ValidationPolicy) -> GateResult:
    if not policy.strict:
        return GateResult.ok()
    if len(data.deliverables.rubric.criteria) < policy.min_rubric_criteria:
        return GateResult.reject(
            f"Add at least {plural(policy.min_rubric_criteria, 'rubric criterion', 'rubric criteria')}."
        )
    return GateResult.ok()


def _check_impact(data: JourneyData, policy: ValidationPolicy) -> GateResult:
    if not policy.strict or not policy.require_impact:
        return GateResult.ok()
    if data.deliverables.impact.is_empty:
        return GateResult.reject(
            "Describe who will see the work or how it will be shared."
        )
    return GateResult.ok()


Gate = Callable[[JourneyData, ValidationPolicy], GateResult]

# States without an entry always pass
STAGE_GATES: dict[JourneyState, Gate] = {
    JourneyState.PHASES: _check_phases,
    JourneyState.ACTIVITIES: _check_activities,
    JourneyState.MILESTONES: _check_milestones,
    JourneyState.RUBRIC: _check_rubric,
    JourneyState.IMPACT: _check_impact,
}


def check_gate(
    state: JourneyState,
    data: JourneyData,
    policy: ValidationPolicy | None = None,
) -> GateResult:
    """Evaluate the completion predicate for ``state``."""
    gate = STAGE_GATES.get(state)
    if gate is None:
        return GateResult.ok()
    return gate(data, policy or ValidationPolicy())


def deliverables_gaps(
    data: JourneyData,
    policy: ValidationPolicy | None = None,
    skipped: Collection[JourneyState] = (),
) -> list[str]:
    """List what the deliverables still lack under ``policy``.

    Explicitly skipped deliverable states are not reported. Outside strict
    mode the deliverables are optional and nothing is reported.
    """
    policy = policy or ValidationPolicy()
    gaps: list[str] = []
    for state in (JourneyState.MILESTONES, JourneyState.RUBRIC, JourneyState.IMPACT):
        if state in skipped:
            continue
        result = check_gate(state, data, policy)
        if not result.passed and result.message:
            gaps.append(result.message)
    return gaps
