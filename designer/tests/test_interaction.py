"""Tests for the canvas pointer protocol."""

from designer.editor.interaction import InteractionController
from designer.editor.layout import CanvasBounds
from designer.editor.session import InteractionMode
from designer.models import PendingId, Position, StageType


class TestConnectMode:
    """Test creating transitions by clicking source then target."""

    def test_source_then_target(self, graph):
        controller = InteractionController(graph)
        a = graph.add_stage(StageType.planning)
        b = graph.add_stage(StageType.review)

        assert controller.toggle_connect_mode() is True
        assert controller.click_stage(a.id) is None
        # clicking the source again keeps it as the source
        assert controller.click_stage(a.id) is None
        assert graph.session.connection_source_id == a.id
        transition = controller.click_stage(b.id)

        assert transition is not None
        assert graph.template.transitions == [transition]
        assert transition.from_stage_id == a.id
        assert transition.to_stage_id == b.id
        assert graph.session.connecting is False
        assert graph.session.connection_source_id is None

    def test_toggle_off_forgets_source(self, graph):
        controller = InteractionController(graph)
        a = graph.add_stage(StageType.planning)
        controller.toggle_connect_mode()
        controller.click_stage(a.id)

        assert controller.toggle_connect_mode() is False
        assert graph.session.connection_source_id is None
        assert graph.template.transitions == []

    def test_click_selects_when_not_connecting(self, graph):
        controller = InteractionController(graph)
        a = graph.add_stage(StageType.planning)
        graph.add_stage(StageType.review)

        controller.click_stage(a.id)

        assert graph.session.selected_stage_id == a.id
        assert graph.template.transitions == []


class TestClicks:
    """Test point clicks on the canvas."""

    def test_canvas_click_clears_selection(self, graph):
        controller = InteractionController(graph)
        graph.add_stage(StageType.planning, position=Position(x=100, y=100))

        controller.click(Position(x=1000, y=1000))

        assert graph.session.selected_stage_id is None

    def test_point_click_on_stage(self, graph):
        controller = InteractionController(graph)
        a = graph.add_stage(StageType.planning, position=Position(x=100, y=100))
        graph.add_stage(StageType.review, position=Position(x=400, y=100))

        controller.click(Position(x=150, y=120))

        assert graph.session.selected_stage_id == a.id

    def test_marker_click_deletes_transition(self, graph):
        controller = InteractionController(graph)
        a = graph.add_stage(StageType.planning, position=Position(x=100, y=100))
        b = graph.add_stage(StageType.review, position=Position(x=500, y=100))
        graph.add_transition(a.id, b.id)

        # centers (200, 130) and (600, 130)
        controller.click(Position(x=400, y=130))

        assert graph.template.transitions == []

    def test_transition_click_selects(self, graph):
        controller = InteractionController(graph)
        a = graph.add_stage(StageType.planning)
        b = graph.add_stage(StageType.review)
        transition = graph.add_transition(a.id, b.id)

        controller.click_transition(transition.id)

        assert graph.session.selected_transition_id == transition.id
        assert graph.session.selected_stage_id is None


class TestDragging:
    """Test dragging and dropping stages."""

    def test_drop_converts_to_canvas_coordinates(self, graph):
        controller = InteractionController(graph)
        a = graph.add_stage(StageType.planning)

        assert controller.start_drag(a.id, grab_offset=Position(x=20, y=10)) is True
        assert graph.session.mode == InteractionMode.dragging
        controller.drop(Position(x=520, y=310), canvas_origin=Position(x=100, y=50))

        assert graph.template.get_stage(a.id).position == Position(x=400, y=250)
        assert graph.session.mode == InteractionMode.idle

    def test_drop_past_bounds_grows_canvas(self, graph):
        controller = InteractionController(graph)
        a = graph.add_stage(StageType.planning)

        controller.start_drag(a.id)
        bounds = controller.drop(Position(x=2500, y=1500))

        assert graph.template.get_stage(a.id).position == Position(x=2500, y=1500)
        assert bounds == CanvasBounds(width=2800, height=1900)

    def test_one_drag_at_a_time(self, graph):
        controller = InteractionController(graph)
        a = graph.add_stage(StageType.planning)
        b = graph.add_stage(StageType.review)

        assert controller.start_drag(a.id) is True
        assert controller.start_drag(b.id) is False
        assert graph.session.dragged_stage_id == a.id

    def test_abandoned_drag_leaves_stage(self, graph):
        controller = InteractionController(graph)
        a = graph.add_stage(StageType.planning)

        controller.start_drag(a.id)
        controller.cancel()

        assert graph.template.get_stage(a.id).position == Position(x=100, y=100)
        assert controller.drop(Position(x=0, y=0)) is None

    def test_unknown_stage_cannot_be_dragged(self, graph):
        controller = InteractionController(graph)
        assert controller.start_drag(PendingId()) is False
