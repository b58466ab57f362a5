"""Shared fixtures: sample templates and a backend running in-process."""

import pytest
from fastapi.testclient import TestClient

from designer.editor.graph import WorkflowGraph
from designer.editor.session import EditorSession
from designer.models import Position, Stage, StageConfig, StageType, Transition, WorkflowTemplate
from designer.sdk.persistence import PersistenceAdapter
from designer.sdk.template_client import TemplateClient


@pytest.fixture
def graph():
    return WorkflowGraph(WorkflowTemplate(name="Course Review"), EditorSession())


@pytest.fixture
def course_template():
    """Three-stage course workflow: draft -> review -> published."""
    draft = Stage(
        technical_name="content_draft",
        display_name="Draft",
        stage_type=StageType.content_development,
        is_initial=True,
        position=Position(x=100, y=200),
        config=StageConfig(estimated_duration=5),
    )
    review = Stage(
        technical_name="peer_review",
        display_name="Peer Review",
        stage_type=StageType.review,
        position=Position(x=350, y=200),
        config=StageConfig(estimated_duration=2, required_roles=["reviewer"]),
    )
    published = Stage(
        technical_name="published",
        display_name="Published",
        stage_type=StageType.published,
        is_final=True,
        position=Position(x=600, y=200),
    )
    return WorkflowTemplate(
        name="Course Review",
        description="Standard course lifecycle",
        stages=[draft, review, published],
        transitions=[
            Transition(from_stage_id=draft.id, to_stage_id=review.id),
            Transition(from_stage_id=review.id, to_stage_id=published.id),
        ],
    )


@pytest.fixture
def api(tmp_path, monkeypatch):
    """The template backend on a throwaway database."""
    from server import template_db
    from server.app import app

    monkeypatch.setattr(template_db, "TEMPLATE_DB_PATH", tmp_path / "templates.db")
    template_db.init_db()
    with TestClient(app) as client:
        yield client


@pytest.fixture
def adapter(api):
    return PersistenceAdapter(TemplateClient(http_client=api))
