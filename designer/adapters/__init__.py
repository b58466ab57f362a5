"""Adapters for moving templates across process boundaries."""

from designer.adapters.template_io import export_template, import_template
from designer.adapters.wire import (
    StageRecord,
    TemplateRecord,
    TransitionRecord,
    WireFormatError,
    from_wire,
    resolved_ids,
    to_wire,
)

__all__ = [
    "StageRecord",
    "TemplateRecord",
    "TransitionRecord",
    "WireFormatError",
    "from_wire",
    "resolved_ids",
    "to_wire",
    "export_template",
    "import_template",
]
