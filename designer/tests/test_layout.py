"""Tests for auto-layout, type inference and canvas geometry."""

from designer.editor.layout import (
    CanvasBounds,
    apply_layout,
    auto_position,
    canvas_bounds,
    infer_stage_type,
    stage_at,
    transition_marker_at,
    transition_midpoint,
)
from designer.models import Position, Stage, StageType, WorkflowTemplate


def _stage(name, position=None, stage_type=None):
    return Stage(
        technical_name=name,
        display_name=name.title(),
        stage_type=stage_type,
        position=position,
    )


class TestTypeInference:
    """Test guessing stage types from technical names."""

    def test_keywords(self):
        assert infer_stage_type("course_planning") == StageType.planning
        assert infer_stage_type("content_draft") == StageType.content_development
        assert infer_stage_type("module_development") == StageType.content_development
        assert infer_stage_type("peer_review") == StageType.review
        assert infer_stage_type("final_approval") == StageType.approval
        assert infer_stage_type("legal") == StageType.legal_review
        assert infer_stage_type("published") == StageType.published
        assert infer_stage_type("archived") == StageType.archived

    def test_case_insensitive(self):
        assert infer_stage_type("Final_APPROVAL") == StageType.approval

    def test_defaults_to_planning(self):
        assert infer_stage_type("intake") == StageType.planning
        assert infer_stage_type("") == StageType.planning
        assert infer_stage_type(None) == StageType.planning


class TestAutoPosition:
    """Test the default left-to-right layout."""

    def test_positions_by_load_order(self):
        stages = [_stage("a"), _stage("b"), _stage("c")]
        assert auto_position(stages) == 3
        assert [s.position for s in stages] == [
            Position(x=100, y=200),
            Position(x=350, y=200),
            Position(x=600, y=200),
        ]

    def test_keeps_existing_positions(self):
        """Only unpositioned stages move; their slot is their index."""
        stages = [_stage("a", Position(x=5, y=5)), _stage("b")]
        assert auto_position(stages) == 1
        assert stages[0].position == Position(x=5, y=5)
        assert stages[1].position == Position(x=350, y=200)

    def test_idempotent(self):
        template = WorkflowTemplate(stages=[_stage("peer_review"), _stage("archived")])
        apply_layout(template)
        first = template.model_dump()
        apply_layout(template)
        assert template.model_dump() == first

    def test_apply_layout_fills_types(self):
        template = WorkflowTemplate(
            stages=[_stage("peer_review"), _stage("x", stage_type=StageType.published)]
        )
        apply_layout(template)
        assert template.stages[0].stage_type == StageType.review
        assert template.stages[1].stage_type == StageType.published


class TestCanvasBounds:
    """Test canvas growth."""

    def test_minimum_size(self):
        assert canvas_bounds([]) == CanvasBounds(width=2000, height=1400)
        assert canvas_bounds([_stage("a", Position(x=100, y=100))]) == CanvasBounds(
            width=2000, height=1400
        )

    def test_grows_past_far_stage(self):
        bounds = canvas_bounds([_stage("a", Position(x=2500, y=1500))])
        assert bounds.width == 2500 + 300
        assert bounds.height == 1500 + 400

    def test_unpositioned_stage_counts_as_origin(self):
        assert canvas_bounds([_stage("a")]) == CanvasBounds(width=2000, height=1400)


class TestHitTesting:
    """Test finding stages and transition markers under a point."""

    def test_stage_at(self):
        a = _stage("a", Position(x=100, y=100))
        assert stage_at([a], Position(x=150, y=130)) is a
        assert stage_at([a], Position(x=301, y=130)) is None

    def test_topmost_stage_wins(self):
        below = _stage("below", Position(x=100, y=100))
        above = _stage("above", Position(x=150, y=120))
        assert stage_at([below, above], Position(x=200, y=140)) is above

    def test_transition_marker(self, course_template):
        first = course_template.transitions[0]
        midpoint = transition_midpoint(course_template, first)
        # draft (100, 200) and review (350, 200) centers are (200, 230) and (450, 230)
        assert midpoint == Position(x=325, y=230)
        assert transition_marker_at(course_template, Position(x=330, y=233)) is first
        assert transition_marker_at(course_template, Position(x=340, y=230)) is None
