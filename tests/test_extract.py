"""Tests for the free-text extractors."""

import pytest

from blueprint.extract import (
    ActivitiesExtracted,
    ExtractionFailed,
    ImpactExtracted,
    MilestonesExtracted,
    PhasesExtracted,
    ReflectionExtracted,
    ResourcesExtracted,
    RubricExtracted,
    classify_resource,
    extract_activities,
    extract_for_state,
    extract_impact,
    extract_milestones,
    extract_phases,
    extract_resources,
    extract_rubric,
)
from blueprint.extract.text import (
    IdAllocator,
    split_items,
    split_lines,
    split_name_description,
    strip_marker,
)
from blueprint.models.entities import (
    Deliverables,
    Impact,
    JourneyData,
    Phase,
    ResourceType,
)
from blueprint.models.journey import JourneyState
from blueprint.models.validation import UnmatchedActivityPolicy, ValidationPolicy

POLICY = ValidationPolicy()


def _data(*names: str) -> JourneyData:
    return JourneyData(
        phases=[Phase(id=f"phase-{i}", name=name) for i, name in enumerate(names, start=1)]
    )


class TestTextHelpers:
    """Tests for the line helpers."""

    def test_split_lines_drops_blanks(self) -> None:
        assert split_lines("a\r\n\n  b  \r c") == ["a", "b", "c"]

    def test_strip_marker(self) -> None:
        assert strip_marker("2) Build") == (True, "Build")
        assert strip_marker("• Share") == (True, "Share")
        assert strip_marker("2020 plans") == (False, "2020 plans")

    def test_split_name_description(self) -> None:
        assert split_name_description("Launch - share with families") == (
            "Launch",
            "share with families",
        )
        assert split_name_description("Craft: attention to detail") == (
            "Craft",
            "attention to detail",
        )
        assert split_name_description("Co-Design") == ("Co-Design", "")

    def test_split_items(self) -> None:
        assert split_items("a, b; c,,") == ["a", "b", "c"]

    def test_id_allocator_continues_existing(self) -> None:
        ids = IdAllocator(["phase-3", "activity-1"])
        assert ids.allocate("phase") == "phase-4"
        assert ids.allocate("phase") == "phase-5"
        assert ids.allocate("activity") == "activity-2"
        assert ids.allocate("resource") == "resource-1"


class TestExtractPhases:
    """Tests for phase extraction."""

    def test_numbered_list_with_descriptions(self) -> None:
        result = extract_phases(
            "1. Discovery Phase - explore the problem\n2. Design Phase - build solutions",
            JourneyData(),
            POLICY,
        )
        assert isinstance(result, PhasesExtracted)
        assert [p.name for p in result.phases] == ["Discovery Phase", "Design Phase"]
        assert "explore" in result.phases[0].description
        assert "build" in result.phases[1].description

    def test_unmarked_lines_are_phases(self) -> None:
        result = extract_phases("Explore\nCreate\nShare", JourneyData(), POLICY)
        assert isinstance(result, PhasesExtracted)
        assert [p.name for p in result.phases] == ["Explore", "Create", "Share"]

    def test_continuation_lines_extend_description(self) -> None:
        result = extract_phases(
            "1. Launch: present the work\n   to families and partners", JourneyData(), POLICY
        )
        assert isinstance(result, PhasesExtracted)
        assert len(result.phases) == 1
        assert result.phases[0].description == "present the work to families and partners"

    def test_lead_in_line_is_skipped(self) -> None:
        result = extract_phases("Our phases:\n1. Research\n2. Build", JourneyData(), POLICY)
        assert isinstance(result, PhasesExtracted)
        assert [p.name for p in result.phases] == ["Research", "Build"]

    def test_single_line_yields_one_phase(self) -> None:
        result = extract_phases("Investigate local water quality", JourneyData(), POLICY)
        assert isinstance(result, PhasesExtracted)
        assert [p.name for p in result.phases] == ["Investigate local water quality"]

    def test_ids_unique_against_existing(self) -> None:
        result = extract_phases("1. Build\n2. Test", _data("Research"), POLICY)
        assert isinstance(result, PhasesExtracted)
        assert [p.id for p in result.phases] == ["phase-2", "phase-3"]


class TestExtractActivities:
    """Tests for activity extraction."""

    def test_group_assigns_to_named_phase(self) -> None:
        result = extract_activities(
            "Research: Interview experts, Survey community", _data("Research"), POLICY
        )
        assert isinstance(result, ActivitiesExtracted)
        assert [a.name for a in result.activities] == ["Interview experts", "Survey community"]
        assert {a.phase_id for a in result.activities} == {"phase-1"}
        assert result.unmatched_groups == ()

    def test_header_line_then_bullets(self) -> None:
        result = extract_activities(
            "Build:\n- Sketch prototypes\n- Test with peers", _data("Research", "Build"), POLICY
        )
        assert isinstance(result, ActivitiesExtracted)
        assert [a.phase_id for a in result.activities] == ["phase-2", "phase-2"]

    def test_phase_ordinal_and_loose_match(self) -> None:
        data = _data("Investigate the Context", "Prototype & Test")
        result = extract_activities("Phase 2: Build model\nInvestigate: Read reports", data, POLICY)
        assert isinstance(result, ActivitiesExtracted)
        assert [(a.name, a.phase_id) for a in result.activities] == [
            ("Build model", "phase-2"),
            ("Read reports", "phase-1"),
        ]

    def test_case_insensitive_match(self) -> None:
        result = extract_activities("research: Read", _data("Research"), POLICY)
        assert isinstance(result, ActivitiesExtracted)
        assert result.activities[0].phase_id == "phase-1"

    def test_unmatched_goes_to_first_phase(self) -> None:
        result = extract_activities("Cooking: Bake bread", _data("Research", "Build"), POLICY)
        assert isinstance(result, ActivitiesExtracted)
        assert result.activities[0].phase_id == "phase-1"
        assert result.unmatched_groups == ("Cooking",)

    def test_unmatched_rejected_by_policy(self) -> None:
        policy = ValidationPolicy(unmatched_activities=UnmatchedActivityPolicy.REJECT)
        result = extract_activities("Cooking: Bake bread", _data("Research", "Build"), policy)
        assert isinstance(result, ExtractionFailed)
        assert "Research, Build" in result.message

    def test_no_phases(self) -> None:
        result = extract_activities("Research: Read", JourneyData(), POLICY)
        assert isinstance(result, ExtractionFailed)


class TestExtractResources:
    """Tests for resource classification."""

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("TED talk on clean water", ResourceType.VIDEO),
            ("Silent Spring (book)", ResourceType.BOOK),
            ("Journal article on river health", ResourceType.ARTICLE),
            ("Water testing kit", ResourceType.TOOL),
            ("Interview with a scientist", ResourceType.EXPERT),
            ("Local museum visit", ResourceType.LOCATION),
            ("Grandparents' stories", ResourceType.OTHER),
        ],
    )
    def test_classify(self, text: str, expected: ResourceType) -> None:
        assert classify_resource(text) is expected

    def test_type_prefix_wins(self) -> None:
        result = extract_resources("- Book: Silent Spring\n- City water report", JourneyData(), POLICY)
        assert isinstance(result, ResourcesExtracted)
        assert [(r.name, r.type) for r in result.resources] == [
            ("Silent Spring", ResourceType.BOOK),
            ("City water report", ResourceType.ARTICLE),
        ]


class TestExtractDeliverables:
    """Tests for milestones, rubric and impact extraction."""

    def test_milestones_with_week_labels(self) -> None:
        result = extract_milestones(
            "Week 2: Research complete\nFinal showcase", _data("Research"), POLICY
        )
        assert isinstance(result, MilestonesExtracted)
        first, second = result.milestones
        assert (first.name, first.due_label, first.phase_id) == (
            "Research complete",
            "Week 2",
            "phase-1",
        )
        assert (second.name, second.due_label, second.phase_id) == ("Final showcase", None, None)

    def test_rubric_criteria(self) -> None:
        result = extract_rubric(
            "- Collaboration: works well with others\n- Creativity", JourneyData(), POLICY
        )
        assert isinstance(result, RubricExtracted)
        assert [(c.name, c.description) for c in result.criteria] == [
            ("Collaboration", "works well with others"),
            ("Creativity", ""),
        ]

    def test_impact_prefixes(self) -> None:
        result = extract_impact(
            "Audience: local families\nMethod: evening exhibition", JourneyData(), POLICY
        )
        assert result == ImpactExtracted(audience="local families", method="evening exhibition")

    def test_impact_plain_text_fills_audience_then_method(self) -> None:
        assert extract_impact("City council", JourneyData(), POLICY) == ImpactExtracted(
            audience="City council"
        )
        data = JourneyData(deliverables=Deliverables(impact=Impact(audience="City council")))
        assert extract_impact("Formal presentation", data, POLICY) == ImpactExtracted(
            method="Formal presentation"
        )


class TestExtractForState:
    """Tests for routing by state."""

    def test_review_text_is_a_reflection(self) -> None:
        result = extract_for_state(JourneyState.JOURNEY_REVIEW, "  Strong arc overall ", JourneyData())
        assert result == ReflectionExtracted(text="Strong arc overall")

    def test_routes_to_phase_extractor(self) -> None:
        result = extract_for_state(JourneyState.PHASES, "1. A\n2. B", JourneyData())
        assert isinstance(result, PhasesExtracted)
