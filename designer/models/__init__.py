"""Core data models for the workflow designer."""

from designer.models.identifiers import (
    EntityId,
    PendingId,
    PersistedId,
)
from designer.models.stage import (
    ROLE_LABELS,
    STAGE_TYPE_INFO,
    Notifications,
    Position,
    Role,
    Stage,
    StageConfig,
    StageType,
    StageTypeInfo,
)
from designer.models.transition import (
    CONDITION_TYPE_INFO,
    ApprovalCondition,
    AutomaticCondition,
    Condition,
    ConditionalCondition,
    ConditionType,
    ConditionTypeInfo,
    ManualCondition,
    TimerCondition,
    Transition,
    build_condition,
)
from designer.models.workflow_template import WorkflowTemplate

__all__ = [
    # Identifiers
    "EntityId",
    "PendingId",
    "PersistedId",
    # Stages
    "ROLE_LABELS",
    "STAGE_TYPE_INFO",
    "Notifications",
    "Position",
    "Role",
    "Stage",
    "StageConfig",
    "StageType",
    "StageTypeInfo",
    # Transitions
    "CONDITION_TYPE_INFO",
    "ApprovalCondition",
    "AutomaticCondition",
    "Condition",
    "ConditionalCondition",
    "ConditionType",
    "ConditionTypeInfo",
    "ManualCondition",
    "TimerCondition",
    "Transition",
    "build_condition",
    # Templates
    "WorkflowTemplate",
]
