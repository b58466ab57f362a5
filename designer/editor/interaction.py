"""Interaction controller: turns pointer events into graph mutations.

Modes:
    idle        clicks select stages/transitions or clear the selection
    dragging    one stage follows the pointer until it is dropped
    connecting  toggled separately; a source click then a target click
                creates one transition and leaves the mode

Drags and connections touch the graph only on their completing event, so
abandoning one halfway needs no rollback.
"""

from __future__ import annotations

from logging import getLogger

from designer.editor.graph import WorkflowGraph
from designer.editor.layout import (
    CanvasBounds,
    canvas_bounds,
    stage_at,
    transition_marker_at,
)
from designer.editor.session import EditorSession
from designer.models.identifiers import EntityId
from designer.models.stage import Position
from designer.models.transition import Transition

logger = getLogger(__name__)

CANVAS_ORIGIN = Position(x=0, y=0)


class InteractionController:
    """Pointer protocol of the design canvas."""

    def __init__(self, graph: WorkflowGraph) -> None:
        self.graph = graph

    @property
    def session(self) -> EditorSession:
        return self.graph.session

    @property
    def canvas_bounds(self) -> CanvasBounds:
        return canvas_bounds(self.graph.template.stages)

    # ── Clicks ──

    def click(self, point: Position) -> None:
        """Dispatch a click at canvas-local ``point`` to whatever is under it.

        Stages are drawn above transition markers, so they win.
        """
        template = self.graph.template
        stage = stage_at(template.stages, point)
        if stage is not None:
            self.click_stage(stage.id)
            return
        transition = transition_marker_at(template, point)
        if transition is not None:
            self.click_transition_marker(transition.id)
            return
        self.click_canvas()

    def click_canvas(self) -> None:
        """Empty canvas: drop the selection."""
        self.session.clear_selection()

    def click_stage(self, stage_id: EntityId) -> Transition | None:
        """Select a stage, or feed it to the pending connection.

        Returns the transition created when the click completes a connection.
        """
        if self.graph.template.get_stage(stage_id) is None:
            return None
        if not self.session.connecting:
            self.graph.select_stage(stage_id)
            return None

        source = self.session.connection_source_id
        if source is None or source == stage_id:
            self.session.connection_source_id = stage_id
            return None

        transition = self.graph.add_transition(source, stage_id)
        # one edge per toggle
        self.session.connecting = False
        self.session.connection_source_id = None
        return transition

    def click_transition(self, transition_id: EntityId) -> None:
        """Select a transition for the properties panel."""
        self.graph.select_transition(transition_id)

    def click_transition_marker(self, transition_id: EntityId) -> None:
        """The midpoint "x": delete without confirmation."""
        self.graph.delete_transition(transition_id)

    # ── Connect mode ──

    def toggle_connect_mode(self) -> bool:
        """Flip connect mode. Turning it off forgets the pending source."""
        self.session.connecting = not self.session.connecting
        if not self.session.connecting:
            self.session.connection_source_id = None
        return self.session.connecting

    def cancel_connection(self) -> None:
        self.session.connecting = False
        self.session.connection_source_id = None

    # ── Dragging ──

    def start_drag(
        self, stage_id: EntityId, grab_offset: Position | None = None
    ) -> bool:
        """Begin dragging a stage. Refused while another drag is active."""
        if self.session.dragged_stage_id is not None:
            logger.debug(f"start_drag ignored, already dragging {self.session.dragged_stage_id}")
            return False
        if self.graph.template.get_stage(stage_id) is None:
            return False
        self.session.dragged_stage_id = stage_id
        self.session.grab_offset = grab_offset
        return True

    def drop(
        self, client_point: Position, canvas_origin: Position = CANVAS_ORIGIN
    ) -> CanvasBounds | None:
        """Finish the drag at ``client_point``.

        The point is converted to canvas-local coordinates; positions past
        the current bounds are kept and the canvas grows instead. Returns
        the recomputed bounds, or None when no drag was active.
        """
        stage_id = self.session.dragged_stage_id
        if stage_id is None:
            return None
        offset = self.session.grab_offset or CANVAS_ORIGIN
        position = Position(
            x=client_point.x - canvas_origin.x - offset.x,
            y=client_point.y - canvas_origin.y - offset.y,
        )
        self.graph.update_stage(stage_id, position=position)
        self.end_drag()
        return self.canvas_bounds

    def end_drag(self) -> None:
        """End the drag gesture; without a drop the stage stays put."""
        self.session.dragged_stage_id = None
        self.session.grab_offset = None

    def cancel(self) -> None:
        """Abandon any drag or connection in progress."""
        self.session.reset_gestures()
