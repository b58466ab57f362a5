"""Transition models: guarded directed edges between stages.

The condition config is a tagged union keyed by ``condition_type``; each
variant declares only the fields that type needs.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter, field_validator

from designer.models.identifiers import EntityId, PendingId
from designer.models.stage import Role, unique_roles


class ConditionType(str, Enum):
    """What triggers a transition."""

    manual = "manual"
    automatic = "automatic"
    timer = "timer"
    approval = "approval"
    conditional = "conditional"


@dataclass(frozen=True)
class ConditionTypeInfo:
    """Display metadata for a condition type."""

    label: str
    description: str


CONDITION_TYPE_INFO: dict[ConditionType, ConditionTypeInfo] = {
    ConditionType.manual: ConditionTypeInfo(
        "Manual Trigger", "Requires manual action to proceed"
    ),
    ConditionType.automatic: ConditionTypeInfo(
        "Automatic", "Automatically proceeds when conditions are met"
    ),
    ConditionType.timer: ConditionTypeInfo(
        "Timer Based", "Proceeds after specified time delay"
    ),
    ConditionType.approval: ConditionTypeInfo(
        "Approval Required", "Requires approval from specified roles"
    ),
    ConditionType.conditional: ConditionTypeInfo(
        "Conditional", "Proceeds based on custom conditions"
    ),
}


class _ConditionBase(BaseModel):
    model_config = {"extra": "allow"}

    def as_config(self) -> dict[str, Any]:
        """The condition's settings without the discriminant."""
        return self.model_dump(mode="json", exclude={"condition_type"})


class ManualCondition(_ConditionBase):
    condition_type: Literal["manual"] = "manual"


class AutomaticCondition(_ConditionBase):
    condition_type: Literal["automatic"] = "automatic"


class TimerCondition(_ConditionBase):
    condition_type: Literal["timer"] = "timer"
    delay_hours: int = Field(default=1, gt=0)


class ApprovalCondition(_ConditionBase):
    condition_type: Literal["approval"] = "approval"
    required_roles: list[Role] = Field(default_factory=list)

    @field_validator("required_roles")
    @classmethod
    def _dedupe_roles(cls, roles: list[Role]) -> list[Role]:
        return unique_roles(roles)


class ConditionalCondition(_ConditionBase):
    condition_type: Literal["conditional"] = "conditional"
    expression: str | None = None


Condition = Annotated[
    Union[
        ManualCondition,
        AutomaticCondition,
        TimerCondition,
        ApprovalCondition,
        ConditionalCondition,
    ],
    Field(discriminator="condition_type"),
]

_condition_adapter: TypeAdapter = TypeAdapter(Condition)


def build_condition(
    condition_type: ConditionType | str,
    config: dict[str, Any] | None = None,
) -> Condition:
    """Build the condition variant for ``condition_type`` from a config mapping.

    Raises:
        ValueError: unknown condition type.
        pydantic.ValidationError: config invalid for that type.
    """
    data = dict(config or {})
    data["condition_type"] = ConditionType(condition_type).value
    return _condition_adapter.validate_python(data)


class Transition(BaseModel):
    """A directed edge between two stages of the same template."""

    model_config = {"extra": "forbid"}

    id: EntityId = Field(default_factory=PendingId)
    from_stage_id: EntityId
    to_stage_id: EntityId
    condition: Condition = Field(default_factory=ManualCondition)

    @property
    def condition_type(self) -> ConditionType:
        return ConditionType(self.condition.condition_type)

    def touches(self, stage_id: EntityId) -> bool:
        """True when the stage is either endpoint."""
        return self.from_stage_id == stage_id or self.to_stage_id == stage_id
