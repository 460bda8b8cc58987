"""Data models for Blueprint.

``JourneyMachine`` lives in ``blueprint.models.machine``; it depends on the
extractors, which in turn depend on the records exported here.
"""

from .entities import (
    DEFAULT_RUBRIC_LEVELS,
    Activity,
    Deliverables,
    Ideation,
    Impact,
    JourneyData,
    Milestone,
    Phase,
    Resource,
    ResourceType,
    Rubric,
    RubricCriterion,
)
from .journey import (
    SKIPPABLE_STATES,
    STAGE_CONTEXTS,
    STATE_ORDER,
    STATE_TO_SEGMENT,
    TRANSITION_MESSAGES,
    JourneyState,
    StageContext,
    parse_state,
)
from .schema import (
    CURRENT_VERSION,
    InvalidSnapshotError,
    MigrationNotFoundError,
    SnapshotError,
)
from .validation import GateResult, UnmatchedActivityPolicy, ValidationPolicy, check_gate

__all__ = [
    "Activity",
    "CURRENT_VERSION",
    "DEFAULT_RUBRIC_LEVELS",
    "Deliverables",
    "GateResult",
    "Ideation",
    "Impact",
    "InvalidSnapshotError",
    "JourneyData",
    "JourneyState",
    "MigrationNotFoundError",
    "Milestone",
    "Phase",
    "Resource",
    "ResourceType",
    "Rubric",
    "RubricCriterion",
    "SKIPPABLE_STATES",
    "STAGE_CONTEXTS",
    "STATE_ORDER",
    "STATE_TO_SEGMENT",
    "SnapshotError",
    "StageContext",
    "TRANSITION_MESSAGES",
    "UnmatchedActivityPolicy",
    "ValidationPolicy",
    "check_gate",
    "parse_state",
]
