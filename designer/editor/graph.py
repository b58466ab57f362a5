"""Graph model: the mutations the editor applies to one template.

Every operation runs synchronously and in call order; there is no
batching. Deleting a stage removes its transitions in the same call so no
edge is ever left dangling.
"""

from __future__ import annotations

from logging import getLogger
from typing import Any

from designer.editor.session import EditorSession
from designer.models.identifiers import EntityId, PendingId
from designer.models.stage import (
    STAGE_TYPE_INFO,
    Position,
    Stage,
    StageConfig,
    StageType,
)
from designer.models.transition import (
    ConditionType,
    ManualCondition,
    Transition,
    build_condition,
)
from designer.models.workflow_template import WorkflowTemplate
from designer.utils.identifiers import generate_name_suffix

logger = getLogger(__name__)

DEFAULT_STAGE_POSITION = Position(x=100, y=100)

# fields editable from the settings view
TEMPLATE_SETTINGS_FIELDS = {"name", "description", "is_active"}


class WorkflowGraph:
    """Stages and transitions of the template under edit.

    Selection lives in the ``EditorSession`` handed in alongside the
    template. Callers should only pass ids they got from the graph;
    unknown ids are ignored rather than raising.
    """

    def __init__(
        self,
        template: WorkflowTemplate | None = None,
        session: EditorSession | None = None,
    ) -> None:
        self.template = template if template is not None else WorkflowTemplate()
        self.session = session if session is not None else EditorSession()

    def load(self, template: WorkflowTemplate) -> None:
        """Replace the template and start over with a clean session state."""
        self.template = template
        self.session.clear_selection()
        self.session.reset_gestures()
        self.session.dirty = False
        self.session.load_error = None

    # ── Stages ──

    def add_stage(
        self,
        stage_type: StageType | str,
        position: Position | dict | None = None,
    ) -> Stage:
        """Create a stage from a palette entry and select it.

        The first stage of a template becomes its initial stage.
        """
        stage_type = StageType(stage_type)
        info = STAGE_TYPE_INFO[stage_type]
        if position is None:
            position = DEFAULT_STAGE_POSITION
        stage = Stage(
            technical_name=f"{stage_type.value}_{generate_name_suffix()}",
            display_name=info.label,
            stage_type=stage_type,
            is_initial=len(self.template.stages) == 0,
            is_final=False,
            position=Position.model_validate(position).model_copy(),
            config=StageConfig.for_type(stage_type),
        )
        self.template.stages.append(stage)
        self.session.select_stage(stage.id)
        self._touch()
        logger.debug(f"Stage added: {stage.technical_name} ({stage.id})")
        return stage

    def update_stage(self, stage_id: EntityId, **fields: Any) -> None:
        """Shallow-merge ``fields`` into a stage.

        Raises:
            ValueError: attempt to change the stage id.
            pydantic.ValidationError: merged stage is invalid.
        """
        if "id" in fields:
            raise ValueError("stage id cannot be changed")
        index = self.template.stage_index(stage_id)
        if index is None:
            logger.debug(f"update_stage ignored, unknown stage {stage_id}")
            return
        current = self.template.stages[index]
        self.template.stages[index] = Stage.model_validate(
            {**current.model_dump(), **fields}
        )
        self._touch()

    def update_stage_config(self, stage_id: EntityId, **fields: Any) -> None:
        """Shallow-merge ``fields`` into a stage's config.

        Nested values such as ``notifications`` are replaced whole.
        """
        stage = self.template.get_stage(stage_id)
        if stage is None:
            logger.debug(f"update_stage_config ignored, unknown stage {stage_id}")
            return
        stage.config = StageConfig.model_validate(
            {**stage.config.model_dump(), **fields}
        )
        self._touch()

    def delete_stage(self, stage_id: EntityId) -> None:
        """Remove a stage together with every transition touching it."""
        index = self.template.stage_index(stage_id)
        if index is None:
            logger.debug(f"delete_stage ignored, unknown stage {stage_id}")
            return
        del self.template.stages[index]

        removed = {t.id for t in self.template.transitions if t.touches(stage_id)}
        self.template.transitions = [
            t for t in self.template.transitions if t.id not in removed
        ]

        session = self.session
        if session.selected_stage_id == stage_id:
            session.selected_stage_id = None
        if session.selected_transition_id in removed:
            session.selected_transition_id = None
        if session.connection_source_id == stage_id:
            session.connection_source_id = None
        if session.dragged_stage_id == stage_id:
            session.dragged_stage_id = None
            session.grab_offset = None
        self._touch()
        logger.debug(
            f"Stage deleted: {stage_id} (cascaded {len(removed)} transitions)"
        )

    # ── Transitions ──

    def add_transition(
        self, from_stage_id: EntityId, to_stage_id: EntityId
    ) -> Transition | None:
        """Connect two stages with a manual transition.

        Self-loops and unknown endpoints are rejected: nothing is added and
        None is returned.
        """
        if from_stage_id == to_stage_id:
            logger.debug(f"add_transition rejected, self-loop on {from_stage_id}")
            return None
        if (
            self.template.get_stage(from_stage_id) is None
            or self.template.get_stage(to_stage_id) is None
        ):
            logger.debug(
                f"add_transition rejected, unknown endpoint "
                f"{from_stage_id} -> {to_stage_id}"
            )
            return None
        transition = Transition(
            from_stage_id=from_stage_id,
            to_stage_id=to_stage_id,
            condition=ManualCondition(),
        )
        self.template.transitions.append(transition)
        self._touch()
        return transition

    def update_transition(
        self,
        transition_id: EntityId,
        condition_type: ConditionType | str | None = None,
        condition_config: dict[str, Any] | None = None,
    ) -> None:
        """Switch a transition's condition type and/or merge config fields.

        When the type changes, fields declared by the old variant are
        dropped; unknown keys are carried over.
        """
        for index, transition in enumerate(self.template.transitions):
            if transition.id == transition_id:
                break
        else:
            logger.debug(f"update_transition ignored, unknown transition {transition_id}")
            return
        new_type = ConditionType(
            condition_type if condition_type is not None else transition.condition_type
        )
        current = transition.condition.as_config()
        if new_type != transition.condition_type:
            declared = type(transition.condition).model_fields
            current = {k: v for k, v in current.items() if k not in declared}
        condition = build_condition(new_type, {**current, **(condition_config or {})})
        self.template.transitions[index] = transition.model_copy(
            update={"condition": condition}
        )
        self._touch()

    def delete_transition(self, transition_id: EntityId) -> None:
        """Remove a transition by id."""
        before = len(self.template.transitions)
        self.template.transitions = [
            t for t in self.template.transitions if t.id != transition_id
        ]
        if len(self.template.transitions) == before:
            logger.debug(f"delete_transition ignored, unknown transition {transition_id}")
            return
        if self.session.selected_transition_id == transition_id:
            self.session.selected_transition_id = None
        self._touch()

    # ── Template settings ──

    def update_template(self, **fields: Any) -> None:
        """Edit name, description or the active flag."""
        unknown = set(fields) - TEMPLATE_SETTINGS_FIELDS
        if unknown:
            raise ValueError(f"not a template setting: {', '.join(sorted(unknown))}")
        for key, value in fields.items():
            setattr(self.template, key, value)
        self._touch()

    # ── Selection ──

    def select_stage(self, stage_id: EntityId) -> bool:
        if self.template.get_stage(stage_id) is None:
            return False
        self.session.select_stage(stage_id)
        return True

    def select_transition(self, transition_id: EntityId) -> bool:
        if self.template.get_transition(transition_id) is None:
            return False
        self.session.select_transition(transition_id)
        return True

    @property
    def selected_stage(self) -> Stage | None:
        if self.session.selected_stage_id is None:
            return None
        return self.template.get_stage(self.session.selected_stage_id)

    @property
    def selected_transition(self) -> Transition | None:
        if self.session.selected_transition_id is None:
            return None
        return self.template.get_transition(self.session.selected_transition_id)

    def _touch(self) -> None:
        self.session.dirty = True


def duplicate_template(template: WorkflowTemplate) -> WorkflowTemplate:
    """Copy a template as a new, unsaved one.

    Every stage and transition gets a fresh pending id; transition
    endpoints follow their stages.
    """
    copy = template.model_copy(deep=True)
    stage_ids: dict[EntityId, PendingId] = {}
    for stage in copy.stages:
        stage_ids[stage.id] = PendingId()
        stage.id = stage_ids[stage.id]
    for transition in copy.transitions:
        transition.id = PendingId()
        transition.from_stage_id = stage_ids.get(
            transition.from_stage_id, transition.from_stage_id
        )
        transition.to_stage_id = stage_ids.get(
            transition.to_stage_id, transition.to_stage_id
        )
    copy.id = None
    copy.name = f"Copy of {template.name}" if template.name else ""
    copy.created_at = None
    copy.updated_at = None
    return copy
