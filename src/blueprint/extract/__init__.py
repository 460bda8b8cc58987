"""Free-text extraction of journey entities."""

from blueprint.extract.parsers import (
    EXTRACTORS,
    classify_resource,
    extract_activities,
    extract_for_state,
    extract_impact,
    extract_milestones,
    extract_phases,
    extract_resources,
    extract_rubric,
)
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

__all__ = [
    "EXTRACTORS",
    "ActivitiesExtracted",
    "Extraction",
    "ExtractionFailed",
    "ImpactExtracted",
    "MilestonesExtracted",
    "PhasesExtracted",
    "ReflectionExtracted",
    "ResourcesExtracted",
    "RubricExtracted",
    "classify_resource",
    "extract_activities",
    "extract_for_state",
    "extract_impact",
    "extract_milestones",
    "extract_phases",
    "extract_resources",
    "extract_rubric",
]
