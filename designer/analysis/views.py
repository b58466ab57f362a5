"""Read-only projections of a template for the three editor tabs.

- Design: nodes and edges with geometry and selection state
- Preview: stages in flow order with per-stage and aggregate stats
- Settings: template fields plus an advisory validation checklist

Projections are rebuilt from the template on every call and never write
to it, so switching tabs cannot change the graph.
"""

from collections import Counter
from dataclasses import dataclass, field

from designer.editor.layout import (
    CanvasBounds,
    canvas_bounds,
    stage_center,
    transition_midpoint,
)
from designer.editor.session import EditorSession, ViewMode
from designer.models.identifiers import EntityId
from designer.models.stage import Position, StageType
from designer.models.transition import CONDITION_TYPE_INFO, ConditionType
from designer.models.workflow_template import WorkflowTemplate


# --- design ---


@dataclass
class DesignNode:
    stage_id: EntityId
    display_name: str
    stage_type: StageType
    label: str
    color: str
    icon: str
    position: Position
    is_initial: bool
    is_final: bool
    selected: bool = False
    connection_source: bool = False


@dataclass
class DesignEdge:
    transition_id: EntityId
    from_stage_id: EntityId
    to_stage_id: EntityId
    start: Position
    end: Position
    midpoint: Position  # where the delete marker sits
    condition_type: ConditionType
    condition_label: str
    selected: bool = False


@dataclass
class DesignProjection:
    nodes: list[DesignNode]
    edges: list[DesignEdge]
    bounds: CanvasBounds
    connecting: bool = False
    banner: str | None = None  # connect-mode hint
    is_empty: bool = False


def project_design(template: WorkflowTemplate, session: EditorSession) -> DesignProjection:
    """The editable canvas: every stage as a node, every resolvable edge."""
    nodes = []
    for stage in template.stages:
        stage_type = stage.stage_type or StageType.planning
        info = stage.type_info
        nodes.append(DesignNode(
            stage_id=stage.id,
            display_name=stage.display_name,
            stage_type=stage_type,
            label=info.label,
            color=stage.config.color or info.color,
            icon=stage.config.icon or info.icon,
            position=stage.position or Position(x=0, y=0),
            is_initial=stage.is_initial,
            is_final=stage.is_final,
            selected=session.selected_stage_id == stage.id,
            connection_source=session.connection_source_id == stage.id,
        ))

    edges = []
    for transition in template.transitions:
        source = template.get_stage(transition.from_stage_id)
        target = template.get_stage(transition.to_stage_id)
        if source is None or target is None:
            continue
        edges.append(DesignEdge(
            transition_id=transition.id,
            from_stage_id=transition.from_stage_id,
            to_stage_id=transition.to_stage_id,
            start=stage_center(source),
            end=stage_center(target),
            midpoint=transition_midpoint(template, transition),
            condition_type=transition.condition_type,
            condition_label=CONDITION_TYPE_INFO[transition.condition_type].label,
            selected=session.selected_transition_id == transition.id,
        ))

    banner = None
    if session.connecting:
        if session.connection_source_id is None:
            banner = "Connection Mode: Click source stage"
        else:
            banner = "Connection Mode: Click target stage"

    return DesignProjection(
        nodes=nodes,
        edges=edges,
        bounds=canvas_bounds(template.stages),
        connecting=session.connecting,
        banner=banner,
        is_empty=not template.stages,
    )


# --- preview ---


@dataclass
class PreviewStage:
    stage_id: EntityId
    display_name: str
    stage_type: StageType
    label: str
    is_initial: bool
    is_final: bool
    outgoing_transitions: int
    estimated_duration: float | None


@dataclass
class PreviewProjection:
    """Stage flow with the initial stage first, plus totals."""

    template_name: str
    stages: list[PreviewStage] = field(default_factory=list)
    stage_count: int = 0
    transition_count: int = 0
    total_estimated_days: float = 0


def project_preview(template: WorkflowTemplate) -> PreviewProjection:
    # sorted() is stable: non-initial stages keep load order
    ordered = sorted(template.stages, key=lambda s: 0 if s.is_initial else 1)
    stages = [
        PreviewStage(
            stage_id=stage.id,
            display_name=stage.display_name,
            stage_type=stage.stage_type or StageType.planning,
            label=stage.type_info.label,
            is_initial=stage.is_initial,
            is_final=stage.is_final,
            outgoing_transitions=len(template.outgoing(stage.id)),
            estimated_duration=stage.config.estimated_duration,
        )
        for stage in ordered
    ]
    return PreviewProjection(
        template_name=template.name or "Untitled Workflow",
        stages=stages,
        stage_count=len(template.stages),
        transition_count=len(template.transitions),
        total_estimated_days=sum(
            s.config.estimated_duration or 0 for s in template.stages
        ),
    )


# --- settings ---


@dataclass
class ValidationCheck:
    key: str
    message: str
    passed: bool


@dataclass
class SettingsProjection:
    name: str
    description: str
    is_active: bool
    checks: list[ValidationCheck] = field(default_factory=list)

    @property
    def all_passed(self) -> bool:
        """Advisory only; saving is never blocked on this."""
        return all(check.passed for check in self.checks)

    def check(self, key: str) -> ValidationCheck:
        for check in self.checks:
            if check.key == key:
                return check
        raise KeyError(key)


def validation_checks(template: WorkflowTemplate) -> list[ValidationCheck]:
    """Evaluate the settings checklist. Each check stands on its own."""
    names = Counter(s.technical_name for s in template.stages)
    return [
        ValidationCheck(
            "has_stages",
            "Workflow has at least one stage",
            len(template.stages) > 0,
        ),
        ValidationCheck(
            "single_initial",
            "Workflow has exactly one initial stage",
            len(template.initial_stages()) == 1,
        ),
        ValidationCheck(
            "has_final",
            "Workflow has a final stage",
            len(template.final_stages()) > 0,
        ),
        ValidationCheck(
            "has_name",
            "Template has a name",
            bool(template.name.strip()),
        ),
        ValidationCheck(
            "unique_technical_names",
            "Stage technical names are unique",
            all(count == 1 for count in names.values()),
        ),
    ]


def project_settings(template: WorkflowTemplate) -> SettingsProjection:
    return SettingsProjection(
        name=template.name,
        description=template.description,
        is_active=template.is_active,
        checks=validation_checks(template),
    )


def project(
    template: WorkflowTemplate, session: EditorSession
) -> DesignProjection | PreviewProjection | SettingsProjection:
    """Projection for the session's active tab."""
    if session.view == ViewMode.preview:
        return project_preview(template)
    if session.view == ViewMode.settings:
        return project_settings(template)
    return project_design(template, session)
