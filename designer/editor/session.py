"""Transient editor state kept apart from the persisted template."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from designer.models.identifiers import EntityId
from designer.models.stage import Position


class InteractionMode(str, Enum):
    """Pointer mode of the design canvas."""

    idle = "idle"
    dragging = "dragging"


class ViewMode(str, Enum):
    """Which projection of the graph is on screen."""

    design = "design"
    preview = "preview"
    settings = "settings"


@dataclass
class EditorSession:
    """Selection, modes and flags of one editing session.

    Connect mode is tracked independently of idle/dragging. Nothing here
    is ever serialized with the template.
    """

    selected_stage_id: EntityId | None = None
    selected_transition_id: EntityId | None = None
    view: ViewMode = ViewMode.design

    connecting: bool = False
    connection_source_id: EntityId | None = None

    dragged_stage_id: EntityId | None = None
    grab_offset: Position | None = None

    is_saving: bool = False
    dirty: bool = False
    load_error: str | None = None

    @property
    def mode(self) -> InteractionMode:
        if self.dragged_stage_id is not None:
            return InteractionMode.dragging
        return InteractionMode.idle

    @property
    def is_blocked(self) -> bool:
        """True after a failed load; the editor shows no graph."""
        return self.load_error is not None

    def select_stage(self, stage_id: EntityId) -> None:
        self.selected_stage_id = stage_id
        self.selected_transition_id = None

    def select_transition(self, transition_id: EntityId) -> None:
        self.selected_transition_id = transition_id
        self.selected_stage_id = None

    def clear_selection(self) -> None:
        self.selected_stage_id = None
        self.selected_transition_id = None

    def reset_gestures(self) -> None:
        """Drop any in-progress drag or connection."""
        self.dragged_stage_id = None
        self.grab_offset = None
        self.connecting = False
        self.connection_source_id = None
