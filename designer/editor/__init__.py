"""Editing layer: graph mutations, session state, layout and pointer protocol.

``WorkflowDesigner`` lives in ``designer.editor.designer`` and is imported
from there (it pulls in the persistence SDK).
"""

from designer.editor.graph import (
    DEFAULT_STAGE_POSITION,
    WorkflowGraph,
    duplicate_template,
)
from designer.editor.interaction import InteractionController
from designer.editor.layout import (
    CanvasBounds,
    apply_layout,
    auto_position,
    canvas_bounds,
    infer_missing_types,
    infer_stage_type,
)
from designer.editor.session import EditorSession, InteractionMode, ViewMode

__all__ = [
    "DEFAULT_STAGE_POSITION",
    "WorkflowGraph",
    "duplicate_template",
    "InteractionController",
    "CanvasBounds",
    "apply_layout",
    "auto_position",
    "canvas_bounds",
    "infer_missing_types",
    "infer_stage_type",
    "EditorSession",
    "InteractionMode",
    "ViewMode",
]
