"""Integration tests: editor, persistence adapter and backend together."""

import httpx
import pytest

from designer.adapters.template_io import export_template, import_template
from designer.adapters.wire import WireFormatError, stage_to_record, to_wire
from designer.editor.designer import WorkflowDesigner
from designer.editor.session import ViewMode
from designer.analysis.views import PreviewProjection
from designer.models import PendingId, PersistedId, Position, Stage, StageType
from designer.sdk.persistence import (
    PersistenceAdapter,
    SaveInProgressError,
    TemplateLoadError,
    TemplateSaveError,
)
from designer.sdk.template_client import (
    TemplateClient,
    TemplateClientError,
    TemplateNotFoundError,
)


class TestTemplateRoutes:
    """Test the backend's validation and sub-resource routes."""

    def test_create_echoes_client_ids(self, api, course_template):
        response = api.post("/api/workflows/templates", json=to_wire(course_template))
        assert response.status_code == 200
        body = response.json()
        assert isinstance(body["id"], int)
        assert [s["client_id"] for s in body["stages"]] == [
            s.id.local_id for s in course_template.stages
        ]
        assert all(isinstance(s["id"], int) for s in body["stages"])
        assert body["transitions"][0]["from_stage_id"] == body["stages"][0]["id"]

    def test_name_length_validated(self, api, course_template):
        course_template.name = "ab"
        response = api.post("/api/workflows/templates", json=to_wire(course_template))
        assert response.status_code == 422

    def test_duplicate_state_names_rejected(self, api, course_template):
        course_template.stages[1].technical_name = "content_draft"
        response = api.post("/api/workflows/templates", json=to_wire(course_template))
        assert response.status_code == 422
        assert "content_draft" in response.json()["detail"]

    def test_unresolved_endpoint_rejected(self, api, course_template):
        payload = to_wire(course_template)
        payload["transitions"][0]["to_stage_client_id"] = "nowhere"
        response = api.post("/api/workflows/templates", json=payload)
        assert response.status_code == 422

    def test_foreign_stage_id_rejected(self, api, course_template):
        created = api.post("/api/workflows/templates", json=to_wire(course_template)).json()
        payload = dict(created)
        payload["stages"] = [dict(created["stages"][0], id=9999)]
        payload["transitions"] = []
        response = api.put(f"/api/workflows/templates/{created['id']}", json=payload)
        assert response.status_code == 422

    def test_unknown_template_is_404(self, api):
        assert api.get("/api/workflows/templates/999").status_code == 404
        assert api.delete("/api/workflows/templates/999").status_code == 404

    def test_list_and_delete(self, api, course_template):
        created = api.post("/api/workflows/templates", json=to_wire(course_template)).json()
        listed = api.get("/api/workflows/templates").json()
        assert [t["id"] for t in listed] == [created["id"]]

        assert api.delete(f"/api/workflows/templates/{created['id']}").json() == {"deleted": created["id"]}
        assert api.get("/api/workflows/templates").json() == []

    def test_states_alias_accepted(self, api, course_template):
        payload = to_wire(course_template)
        payload["states"] = payload.pop("stages")
        response = api.post("/api/workflows/templates", json=payload)
        assert response.status_code == 200
        assert len(response.json()["stages"]) == 3


class TestTemplateClient:
    """Test the HTTP client against the backend."""

    def test_add_stage_and_delete_transition(self, api, course_template):
        client = TemplateClient(http_client=api)
        created = client.create_template(to_wire(course_template))

        extra = Stage(technical_name="archived", display_name="Archived", stage_type=StageType.archived)
        stage = client.add_stage(created["id"], stage_to_record(extra).model_dump(mode="json"))
        assert stage["client_id"] == extra.id.local_id
        assert len(client.fetch_template(created["id"])["stages"]) == 4

        transition_id = created["transitions"][0]["id"]
        client.delete_transition(created["id"], transition_id)
        assert len(client.fetch_template(created["id"])["transitions"]) == 1
        with pytest.raises(TemplateNotFoundError):
            client.delete_transition(created["id"], transition_id)

    def test_validation_error_carries_status(self, api):
        client = TemplateClient(http_client=api)
        with pytest.raises(TemplateClientError) as exc_info:
            client.create_template({"name": "x"})
        assert exc_info.value.status_code == 422

    def test_connection_error(self):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        http_client = httpx.Client(
            base_url="http://templates.test", transport=httpx.MockTransport(refuse)
        )
        client = TemplateClient(http_client=http_client)
        with pytest.raises(TemplateClientError) as exc_info:
            client.fetch_template(1)
        assert exc_info.value.status_code is None


class TestPersistenceAdapter:
    """Test loading and saving through the adapter."""

    def test_save_then_load(self, adapter, course_template):
        saved = adapter.save_template(course_template)

        assert saved.id is not None
        assert all(isinstance(s.id, PersistedId) for s in saved.stages)
        assert saved.dangling_transitions() == []
        # the template handed in is not touched
        assert course_template.id is None
        assert isinstance(course_template.stages[0].id, PendingId)

        loaded = adapter.load_template(saved.id)
        assert loaded == saved
        assert loaded.stages[1].config.estimated_duration == 2

    def test_resolved_ids_recorded(self, adapter, course_template):
        saved = adapter.save_template(course_template)
        for before, after in zip(course_template.stages, saved.stages):
            assert adapter.resolved[before.id] == after.id
        for before, after in zip(course_template.transitions, saved.transitions):
            assert adapter.resolved[before.id] == after.id

    def test_resolved_ids_cover_latest_save_only(self, adapter, course_template):
        """Each save replaces the id map with the ids that save assigned."""
        saved = adapter.save_template(course_template)
        extra = Stage(technical_name="archived", display_name="Archived")
        saved.stages.append(extra)

        updated = adapter.save_template(saved)

        assert adapter.resolved == {extra.id: updated.stages[-1].id}

    def test_update_adds_and_removes(self, adapter, course_template):
        saved = adapter.save_template(course_template)
        draft, review, published = saved.stages
        saved.stages.remove(review)
        saved.transitions = []
        archived = Stage(technical_name="archived", display_name="Archived")
        saved.stages.append(archived)

        updated = adapter.save_template(saved)

        assert [s.technical_name for s in updated.stages] == [
            "content_draft",
            "published",
            "archived",
        ]
        assert updated.stages[0].id == draft.id
        assert updated.transitions == []
        # stored without a type, inferred on the way back
        assert updated.stages[2].stage_type == StageType.archived

    def test_load_missing_template(self, adapter):
        with pytest.raises(TemplateLoadError) as exc_info:
            adapter.load_template(404)
        assert exc_info.value.template_id == 404

    def test_save_rejected(self, adapter, course_template):
        course_template.name = ""
        with pytest.raises(TemplateSaveError) as exc_info:
            adapter.save_template(course_template)
        assert exc_info.value.status_code == 422
        assert adapter.is_saving(course_template) is False

    def test_concurrent_save_refused(self, course_template):
        """A second save of the same template while one is in flight fails fast."""

        class ReentrantClient:
            def create_template(self, payload):
                return adapter.save_template(course_template)

        adapter = PersistenceAdapter(ReentrantClient())
        with pytest.raises(SaveInProgressError):
            adapter.save_template(course_template)
        assert adapter.is_saving(course_template) is False


class TestWorkflowDesigner:
    """Test the editor facade end to end."""

    def test_build_and_save(self, adapter):
        notices = []
        designer = WorkflowDesigner(adapter, on_notify=notices.append)
        designer.graph.update_template(name="Onboarding")
        a = designer.graph.add_stage(StageType.planning)
        b = designer.graph.add_stage(StageType.published, position=Position(x=400, y=100))
        designer.graph.update_stage(b.id, is_final=True)
        designer.controller.toggle_connect_mode()
        designer.controller.click_stage(a.id)
        designer.controller.click_stage(b.id)
        designer.graph.select_stage(a.id)

        assert designer.save() is True

        session = designer.session
        assert designer.template.id is not None
        assert session.dirty is False
        assert session.is_saving is False
        assert isinstance(session.selected_stage_id, PersistedId)
        assert designer.graph.selected_stage.technical_name == a.technical_name
        assert notices[-1].level == "info"

    def test_save_failure_leaves_graph(self, adapter):
        notices = []
        designer = WorkflowDesigner(adapter, on_notify=notices.append)
        stage = designer.graph.add_stage(StageType.planning)
        template = designer.template

        assert designer.save() is False

        assert notices[-1].level == "error"
        assert designer.template is template
        assert designer.template.stages[0].id == stage.id
        assert designer.session.selected_stage_id == stage.id
        assert designer.session.dirty is True
        assert designer.session.is_saving is False

    def test_save_while_saving(self, adapter):
        notices = []
        designer = WorkflowDesigner(adapter, on_notify=notices.append)
        designer.session.is_saving = True
        assert designer.save() is False
        assert notices[-1].message == "A save is already in progress"

    def test_open_and_failed_open(self, adapter, course_template):
        saved = adapter.save_template(course_template)
        notices = []
        designer = WorkflowDesigner(adapter, on_notify=notices.append)

        assert designer.open(saved.id) is True
        assert designer.template == saved
        assert designer.session.is_blocked is False

        assert designer.open(999) is False
        assert designer.session.is_blocked is True
        assert designer.template.stages == []
        assert designer.save() is False

        designer.new()
        assert designer.session.is_blocked is False

    def test_switch_view(self, adapter, course_template):
        designer = WorkflowDesigner(adapter)
        designer.graph.load(course_template)
        designer.controller.start_drag(course_template.stages[0].id)

        designer.switch_view("preview")

        assert designer.session.view == ViewMode.preview
        assert designer.session.dragged_stage_id is None
        preview = designer.view()
        assert isinstance(preview, PreviewProjection)
        assert preview.total_estimated_days == 7


class TestTemplateFiles:
    """Test exporting and importing templates as JSON files."""

    def test_export_then_import_as_new(self, tmp_path, course_template):
        course_template.id = 5
        path = export_template(course_template, tmp_path / "exports" / "course.json")

        imported = import_template(path)

        assert imported.id is None
        assert imported.name == "Course Review"
        assert [s.technical_name for s in imported.stages] == [
            s.technical_name for s in course_template.stages
        ]
        assert not {s.id for s in imported.stages} & {s.id for s in course_template.stages}
        assert imported.dangling_transitions() == []

    def test_import_keeping_identity(self, tmp_path, course_template):
        path = export_template(course_template, tmp_path / "course.json")
        assert import_template(path, as_new=False) == course_template

    def test_import_rejects_garbage(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("not json", encoding="utf-8")
        with pytest.raises(WireFormatError):
            import_template(path)

    def test_imported_template_saves_as_new(self, tmp_path, adapter, course_template):
        first = adapter.save_template(course_template)
        path = export_template(first, tmp_path / "course.json")
        imported = import_template(path)
        imported.name = "Course Review v2"

        second = adapter.save_template(imported)

        assert second.id != first.id
        assert second.stages[0].technical_name == "content_draft"
        assert len(adapter.client.list_templates()) == 2


class TestSeedWorkflow:
    """Test the sample workflow used to seed the backend."""

    def test_sample_workflow_is_valid(self, adapter):
        from designer.analysis.views import project_settings
        from designer.scripts.seed_templates import build_course_workflow

        template = build_course_workflow()
        assert project_settings(template).all_passed is True
        assert len(template.transitions) == 5

        saved = adapter.save_template(template)
        assert saved.get_stage(saved.stages[2].id).technical_name == "peer_review"
        assert [t.condition_type.value for t in saved.transitions] == [
            "manual",
            "manual",
            "approval",
            "conditional",
            "timer",
        ]
