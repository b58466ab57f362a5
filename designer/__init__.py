"""Workflow Template Designer - visual editor model for approval workflows."""

from designer.models import (
    ConditionType,
    PendingId,
    PersistedId,
    Position,
    Stage,
    StageConfig,
    StageType,
    Transition,
    WorkflowTemplate,
)
from designer.editor import (
    EditorSession,
    InteractionController,
    ViewMode,
    WorkflowGraph,
)
from designer.analysis import project
from designer.adapters import export_template, from_wire, import_template, to_wire
from designer.sdk import PersistenceAdapter, TemplateClient
from designer.editor.designer import Notice, WorkflowDesigner

__all__ = [
    # Models
    "ConditionType",
    "PendingId",
    "PersistedId",
    "Position",
    "Stage",
    "StageConfig",
    "StageType",
    "Transition",
    "WorkflowTemplate",
    # Editing
    "EditorSession",
    "InteractionController",
    "ViewMode",
    "WorkflowGraph",
    "project",
    # Persistence
    "export_template",
    "from_wire",
    "import_template",
    "to_wire",
    "PersistenceAdapter",
    "TemplateClient",
    # High-level API
    "Notice",
    "WorkflowDesigner",
]
