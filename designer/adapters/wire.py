"""Wire format shared with the template backend.

Stage configs travel as JSON-encoded strings (``state_config``) and
transition configs as objects; either form is accepted on input.

Ids: a persisted entity is sent with its server ``id``. A pending one is
sent with ``id: null`` and its local id as ``client_id``; transition
endpoints use the matching ``*_stage_id`` / ``*_stage_client_id`` pair.
The backend echoes ``client_id`` next to the id it assigned, which is how
pending ids get resolved after a save.
"""

import json
from typing import Any

from pydantic import AliasChoices, BaseModel, Field, field_validator

from designer.models.identifiers import EntityId, PendingId, PersistedId
from designer.models.stage import Position, Stage, StageConfig, StageType
from designer.models.transition import ConditionType, Transition, build_condition
from designer.models.workflow_template import WorkflowTemplate

_STAGE_TYPES = {t.value for t in StageType}


class WireFormatError(ValueError):
    """Payload does not describe a valid template."""


def _decode_object(value: Any, field_name: str) -> dict:
    if value is None or value == "":
        return {}
    if isinstance(value, str):
        value = json.loads(value)
    if not isinstance(value, dict):
        raise ValueError(f"{field_name} must be an object")
    return value


class StageRecord(BaseModel):
    """a stage as the backend stores it."""

    id: int | str | None = None
    client_id: str | None = None
    state_name: str
    display_name: str
    stage_type: StageType | None = None
    is_initial: bool = False
    is_final: bool = False
    position_x: float | None = None
    position_y: float | None = None
    state_config: str = "{}"  # JSON-encoded StageConfig

    @field_validator("stage_type", mode="before")
    @classmethod
    def _unknown_type_is_missing(cls, value: Any) -> Any:
        # legacy types are re-inferred from the name on load
        if value is not None and value not in _STAGE_TYPES:
            return None
        return value

    @field_validator("state_config", mode="before")
    @classmethod
    def _encode_config(cls, value: Any) -> str:
        if value is None:
            return "{}"
        if isinstance(value, str):
            return value
        return json.dumps(value)

    def decoded_config(self) -> dict:
        return _decode_object(self.state_config, "state_config")


class TransitionRecord(BaseModel):
    """a transition as the backend stores it."""

    id: int | str | None = None
    client_id: str | None = None
    from_stage_id: int | str | None = None
    from_stage_client_id: str | None = None
    to_stage_id: int | str | None = None
    to_stage_client_id: str | None = None
    condition_type: ConditionType = ConditionType.manual
    condition_config: dict[str, Any] = Field(default_factory=dict)

    @field_validator("condition_config", mode="before")
    @classmethod
    def _decode_config(cls, value: Any) -> dict:
        return _decode_object(value, "condition_config")


class TemplateRecord(BaseModel):
    """the full template payload; ``states`` is accepted for ``stages``."""

    id: int | str | None = None
    name: str = ""
    description: str | None = None
    is_active: bool = True
    stages: list[StageRecord] = Field(
        default_factory=list,
        validation_alias=AliasChoices("stages", "states"),
    )
    transitions: list[TransitionRecord] = Field(default_factory=list)
    created_at: str | None = None
    updated_at: str | None = None


# --- ids ---


def _split_id(entity_id: EntityId) -> tuple[int | str | None, str | None]:
    if isinstance(entity_id, PersistedId):
        return entity_id.server_id, None
    return None, entity_id.local_id


def _join_id(server_id: int | str | None, client_id: str | None) -> EntityId | None:
    if server_id is not None:
        return PersistedId(server_id=server_id)
    if client_id is not None:
        return PendingId(local_id=client_id)
    return None


# --- encode ---


def stage_to_record(stage: Stage) -> StageRecord:
    server_id, client_id = _split_id(stage.id)
    return StageRecord(
        id=server_id,
        client_id=client_id,
        state_name=stage.technical_name,
        display_name=stage.display_name,
        stage_type=stage.stage_type,
        is_initial=stage.is_initial,
        is_final=stage.is_final,
        position_x=stage.position.x if stage.position else None,
        position_y=stage.position.y if stage.position else None,
        state_config=json.dumps(stage.config.model_dump(mode="json")),
    )


def transition_to_record(transition: Transition) -> TransitionRecord:
    server_id, client_id = _split_id(transition.id)
    from_id, from_client_id = _split_id(transition.from_stage_id)
    to_id, to_client_id = _split_id(transition.to_stage_id)
    return TransitionRecord(
        id=server_id,
        client_id=client_id,
        from_stage_id=from_id,
        from_stage_client_id=from_client_id,
        to_stage_id=to_id,
        to_stage_client_id=to_client_id,
        condition_type=transition.condition_type,
        condition_config=transition.condition.as_config(),
    )


def to_record(template: WorkflowTemplate) -> TemplateRecord:
    return TemplateRecord(
        id=template.id,
        name=template.name,
        description=template.description,
        is_active=template.is_active,
        stages=[stage_to_record(s) for s in template.stages],
        transitions=[transition_to_record(t) for t in template.transitions],
        created_at=template.created_at,
        updated_at=template.updated_at,
    )


def to_wire(template: WorkflowTemplate) -> dict:
    """Serialize a template to the JSON body the backend expects."""
    return to_record(template).model_dump(mode="json")


# --- decode ---


def stage_from_record(record: StageRecord) -> Stage:
    position = None
    if record.position_x is not None and record.position_y is not None:
        position = Position(x=record.position_x, y=record.position_y)
    return Stage(
        id=_join_id(record.id, record.client_id) or PendingId(),
        technical_name=record.state_name,
        display_name=record.display_name,
        stage_type=record.stage_type,
        is_initial=record.is_initial,
        is_final=record.is_final,
        position=position,
        config=StageConfig.model_validate(record.decoded_config()),
    )


def transition_from_record(record: TransitionRecord) -> Transition:
    from_id = _join_id(record.from_stage_id, record.from_stage_client_id)
    to_id = _join_id(record.to_stage_id, record.to_stage_client_id)
    if from_id is None or to_id is None:
        raise WireFormatError(
            f"transition {record.id or record.client_id} is missing an endpoint"
        )
    return Transition(
        id=_join_id(record.id, record.client_id) or PendingId(),
        from_stage_id=from_id,
        to_stage_id=to_id,
        condition=build_condition(record.condition_type, record.condition_config),
    )


def from_record(record: TemplateRecord) -> WorkflowTemplate:
    return WorkflowTemplate(
        id=record.id,
        name=record.name,
        description=record.description or "",
        is_active=record.is_active,
        stages=[stage_from_record(s) for s in record.stages],
        transitions=[transition_from_record(t) for t in record.transitions],
        created_at=record.created_at,
        updated_at=record.updated_at,
    )


def from_wire(payload: dict | TemplateRecord) -> WorkflowTemplate:
    """Decode a backend payload into a template.

    Positions and stage types are left as sent; run
    ``designer.editor.layout.apply_layout`` before editing.

    Raises:
        WireFormatError: payload is malformed.
    """
    try:
        record = (
            payload
            if isinstance(payload, TemplateRecord)
            else TemplateRecord.model_validate(payload)
        )
        return from_record(record)
    except WireFormatError:
        raise
    except ValueError as e:
        # pydantic's ValidationError is a ValueError
        raise WireFormatError(f"invalid template payload: {e}") from e


def resolved_ids(payload: dict | TemplateRecord) -> dict[PendingId, PersistedId]:
    """Map pending ids to the server ids a save response assigned them."""
    record = (
        payload
        if isinstance(payload, TemplateRecord)
        else TemplateRecord.model_validate(payload)
    )
    resolved: dict[PendingId, PersistedId] = {}
    for item in [*record.stages, *record.transitions]:
        if item.id is not None and item.client_id is not None:
            resolved[PendingId(local_id=item.client_id)] = PersistedId(server_id=item.id)
    return resolved
