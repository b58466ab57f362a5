"""Export templates to JSON files and import them back."""

import json
from pathlib import Path

from designer.adapters.wire import WireFormatError, from_wire, to_wire
from designer.editor.graph import duplicate_template
from designer.editor.layout import apply_layout
from designer.models.workflow_template import WorkflowTemplate


def export_template(template: WorkflowTemplate, path: Path | str) -> Path:
    """Write a template's wire JSON to ``path``."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(to_wire(template), indent=2), encoding="utf-8")
    return path


def import_template(path: Path | str, as_new: bool = True) -> WorkflowTemplate:
    """Read a template exported by ``export_template``.

    Args:
        path: JSON file to read
        as_new: detach the template from the backend record it was
            exported from (fresh pending ids, no template id), so saving
            it creates a new template

    Raises:
        WireFormatError: file content is not a template.
    """
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise WireFormatError(f"{path} is not valid JSON: {e}") from e
    template = apply_layout(from_wire(data))
    if as_new:
        name = template.name
        template = duplicate_template(template)
        template.name = name
    return template
