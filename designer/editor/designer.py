"""Top-level editor object wiring graph, pointer protocol and persistence.

    designer = WorkflowDesigner()
    designer.open(42)
    designer.graph.add_stage("review")
    designer.save()
"""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import Callable

from designer.analysis.views import project
from designer.editor.graph import WorkflowGraph
from designer.editor.interaction import InteractionController
from designer.editor.session import EditorSession, ViewMode
from designer.models.workflow_template import WorkflowTemplate
from designer.sdk.persistence import (
    PersistenceAdapter,
    SaveInProgressError,
    TemplateLoadError,
    TemplateSaveError,
)

logger = getLogger(__name__)


@dataclass
class Notice:
    """A non-fatal message for the user."""

    level: str  # "info" | "error"
    message: str


def _log_notice(notice: Notice) -> None:
    if notice.level == "error":
        logger.warning(notice.message)
    else:
        logger.info(notice.message)


class WorkflowDesigner:
    def __init__(
        self,
        adapter: PersistenceAdapter | None = None,
        graph: WorkflowGraph | None = None,
        on_notify: Callable[[Notice], None] | None = None,
    ) -> None:
        self.adapter = adapter or PersistenceAdapter()
        self.graph = graph or WorkflowGraph()
        self.controller = InteractionController(self.graph)
        self.on_notify = on_notify or _log_notice

    @property
    def session(self) -> EditorSession:
        return self.graph.session

    @property
    def template(self) -> WorkflowTemplate:
        return self.graph.template

    def open(self, template_id: int | str) -> bool:
        """Load a stored template into the editor.

        On failure the editor is left blocked on an empty template with
        ``session.load_error`` set; nothing from the failed load is kept.
        """
        try:
            template = self.adapter.load_template(template_id)
        except TemplateLoadError as e:
            self.graph.load(WorkflowTemplate())
            self.session.load_error = e.reason
            self.on_notify(Notice("error", str(e)))
            return False
        self.graph.load(template)
        return True

    def new(self) -> None:
        """Start an empty, unsaved template."""
        self.graph.load(WorkflowTemplate())

    def save(self) -> bool:
        """Persist the current template.

        Failures are reported through ``on_notify`` and leave the graph
        untouched. On success the graph holds the stored echo and the
        selection follows its stage or transition to the new id.
        """
        session = self.session
        if session.is_blocked:
            self.on_notify(Notice("error", "Nothing to save: the template failed to load"))
            return False
        if session.is_saving:
            self.on_notify(Notice("info", "A save is already in progress"))
            return False

        session.is_saving = True
        try:
            saved = self.adapter.save_template(self.graph.template)
        except SaveInProgressError as e:
            self.on_notify(Notice("info", str(e)))
            return False
        except TemplateSaveError as e:
            self.on_notify(Notice("error", str(e)))
            return False
        finally:
            session.is_saving = False

        resolved = self.adapter.resolved
        selected_stage = session.selected_stage_id
        selected_transition = session.selected_transition_id
        self.graph.template = saved
        session.reset_gestures()
        if selected_stage is not None:
            session.selected_stage_id = resolved.get(selected_stage, selected_stage)
        if selected_transition is not None:
            session.selected_transition_id = resolved.get(
                selected_transition, selected_transition
            )
        # the selection may point at something the backend dropped
        if self.graph.selected_stage is None:
            session.selected_stage_id = None
        if self.graph.selected_transition is None:
            session.selected_transition_id = None
        session.dirty = False
        self.on_notify(Notice("info", f"Template saved: {saved.name}"))
        return True

    def switch_view(self, view: ViewMode | str) -> None:
        """Change tab. Gestures in progress are dropped; the graph is not touched."""
        view = ViewMode(view)
        if view != ViewMode.design:
            self.controller.cancel()
        self.session.view = view

    def view(self):
        """Projection of the active tab."""
        return project(self.graph.template, self.session)
