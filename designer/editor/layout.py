"""Canvas geometry for the design view.

Templates stored by the backend do not have to carry editor-only data:
``apply_layout`` fills in missing positions and stage types so any loaded
template can be drawn.
"""

import math
from dataclasses import dataclass

from designer.models.stage import Position, Stage, StageType
from designer.models.transition import Transition
from designer.models.workflow_template import WorkflowTemplate

# stage card footprint
STAGE_WIDTH = 200
STAGE_HEIGHT = 60

# default left-to-right layout
LAYOUT_ORIGIN_X = 100
LAYOUT_ORIGIN_Y = 200
LAYOUT_SPACING = 250

MIN_CANVAS_WIDTH = 2000
MIN_CANVAS_HEIGHT = 1400
# room left past the farthest stage for placing new ones
CANVAS_HEADROOM_X = 100
CANVAS_HEADROOM_Y = 340

# the "x" marker drawn at a transition's midpoint
MARKER_RADIUS = 8

# first match wins
_TYPE_KEYWORDS: list[tuple[tuple[str, ...], StageType]] = [
    (("planning",), StageType.planning),
    (("content", "development"), StageType.content_development),
    (("review",), StageType.review),
    (("approval",), StageType.approval),
    (("legal",), StageType.legal_review),
    (("published",), StageType.published),
    (("archived",), StageType.archived),
]


@dataclass(frozen=True)
class CanvasBounds:
    width: float
    height: float


def infer_stage_type(technical_name: str | None) -> StageType:
    """Guess a stage type from its technical name, defaulting to planning."""
    name = (technical_name or "").lower()
    for keywords, stage_type in _TYPE_KEYWORDS:
        if any(keyword in name for keyword in keywords):
            return stage_type
    return StageType.planning


def default_position(index: int) -> Position:
    """Slot ``index`` of the default horizontal layout."""
    return Position(x=LAYOUT_ORIGIN_X + index * LAYOUT_SPACING, y=LAYOUT_ORIGIN_Y)


def auto_position(stages: list[Stage]) -> int:
    """Give every unpositioned stage its load-order slot.

    Stages that already have a position are left alone, so running this
    twice changes nothing. Returns the number of stages positioned.
    """
    positioned = 0
    for index, stage in enumerate(stages):
        if stage.position is None:
            stage.position = default_position(index)
            positioned += 1
    return positioned


def infer_missing_types(stages: list[Stage]) -> int:
    """Fill in ``stage_type`` where absent. Returns the number inferred."""
    inferred = 0
    for stage in stages:
        if stage.stage_type is None:
            stage.stage_type = infer_stage_type(stage.technical_name)
            inferred += 1
    return inferred


def apply_layout(template: WorkflowTemplate) -> WorkflowTemplate:
    """Run the positioning and type-inference passes in place."""
    auto_position(template.stages)
    infer_missing_types(template.stages)
    return template


def canvas_bounds(stages: list[Stage]) -> CanvasBounds:
    """Size of the drawable surface: every stage plus headroom, never below the minimum.

    The canvas grows to follow content; stages are never clamped into it.
    """
    width: float = MIN_CANVAS_WIDTH
    height: float = MIN_CANVAS_HEIGHT
    for stage in stages:
        x = stage.position.x if stage.position else 0
        y = stage.position.y if stage.position else 0
        width = max(width, x + STAGE_WIDTH + CANVAS_HEADROOM_X)
        height = max(height, y + STAGE_HEIGHT + CANVAS_HEADROOM_Y)
    return CanvasBounds(width=width, height=height)


def stage_center(stage: Stage) -> Position:
    origin = stage.position or Position(x=0, y=0)
    return Position(x=origin.x + STAGE_WIDTH / 2, y=origin.y + STAGE_HEIGHT / 2)


def transition_endpoints(
    template: WorkflowTemplate, transition: Transition
) -> tuple[Position, Position] | None:
    """Centers of both endpoint stages, or None if either is missing."""
    source = template.get_stage(transition.from_stage_id)
    target = template.get_stage(transition.to_stage_id)
    if source is None or target is None:
        return None
    return stage_center(source), stage_center(target)


def transition_midpoint(
    template: WorkflowTemplate, transition: Transition
) -> Position | None:
    endpoints = transition_endpoints(template, transition)
    if endpoints is None:
        return None
    start, end = endpoints
    return Position(x=(start.x + end.x) / 2, y=(start.y + end.y) / 2)


def stage_at(stages: list[Stage], point: Position) -> Stage | None:
    """Topmost stage under ``point``. Later stages are drawn on top."""
    for stage in reversed(stages):
        if stage.position is None:
            continue
        x, y = stage.position.x, stage.position.y
        if x <= point.x <= x + STAGE_WIDTH and y <= point.y <= y + STAGE_HEIGHT:
            return stage
    return None


def transition_marker_at(
    template: WorkflowTemplate, point: Position
) -> Transition | None:
    """Transition whose midpoint marker contains ``point``."""
    for transition in reversed(template.transitions):
        midpoint = transition_midpoint(template, transition)
        if midpoint is None:
            continue
        if math.hypot(point.x - midpoint.x, point.y - midpoint.y) <= MARKER_RADIUS:
            return transition
    return None
