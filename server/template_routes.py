"""API routes for workflow template management."""

from collections import Counter

from fastapi import APIRouter, HTTPException

from designer.adapters.wire import StageRecord, TemplateRecord
from server.template_db import (
    add_stage as db_add_stage,
    create_template as db_create_template,
    delete_template as db_delete_template,
    delete_transition as db_delete_transition,
    get_template as db_get_template,
    list_templates as db_list_templates,
    update_template as db_update_template,
)

router = APIRouter()

NAME_MIN_LENGTH = 3
NAME_MAX_LENGTH = 100


def _unprocessable(detail: str) -> HTTPException:
    return HTTPException(status_code=422, detail=detail)


def _validate(record: TemplateRecord, existing: TemplateRecord | None = None) -> None:
    """check a full template payload before it is stored.

    ``existing`` is the stored template for updates, None for creates.
    """
    name = record.name.strip()
    if not NAME_MIN_LENGTH <= len(name) <= NAME_MAX_LENGTH:
        raise _unprocessable(
            f"Template name must be {NAME_MIN_LENGTH}-{NAME_MAX_LENGTH} characters"
        )

    duplicates = sorted(
        state_name
        for state_name, count in Counter(s.state_name for s in record.stages).items()
        if count > 1
    )
    if duplicates:
        raise _unprocessable(f"Duplicate stage names: {', '.join(duplicates)}")

    stored_stages = {str(s.id) for s in existing.stages} if existing else set()
    stored_transitions = {str(t.id) for t in existing.transitions} if existing else set()
    for stage in record.stages:
        if stage.id is not None and str(stage.id) not in stored_stages:
            raise _unprocessable(f"Stage {stage.id} does not belong to this template")
    for transition in record.transitions:
        if transition.id is not None and str(transition.id) not in stored_transitions:
            raise _unprocessable(
                f"Transition {transition.id} does not belong to this template"
            )

    stage_ids = {str(s.id) for s in record.stages if s.id is not None}
    client_ids = {s.client_id for s in record.stages if s.id is None and s.client_id}
    for transition in record.transitions:
        endpoints = [
            (transition.from_stage_id, transition.from_stage_client_id),
            (transition.to_stage_id, transition.to_stage_client_id),
        ]
        for stage_id, client_id in endpoints:
            if stage_id is not None:
                resolved = str(stage_id) in stage_ids
            else:
                resolved = client_id in client_ids
            if not resolved:
                raise _unprocessable(
                    f"Transition {transition.id or transition.client_id} "
                    f"points at an unknown stage"
                )


@router.get("/workflows/templates")
def list_templates() -> list[TemplateRecord]:
    """list all stored templates, most recently updated first."""
    return db_list_templates()


@router.post("/workflows/templates")
def create_template(record: TemplateRecord) -> TemplateRecord:
    """create a template. New stages and transitions echo their client_id."""
    _validate(record)
    return db_create_template(record)


@router.get("/workflows/templates/{template_id}")
def get_template(template_id: int) -> TemplateRecord:
    template = db_get_template(template_id)
    if not template:
        raise HTTPException(status_code=404, detail=f"Template not found: {template_id}")
    return template


@router.put("/workflows/templates/{template_id}")
def update_template(template_id: int, record: TemplateRecord) -> TemplateRecord:
    """replace a template with the full payload.

    Stored stages and transitions missing from the payload are deleted.
    """
    existing = db_get_template(template_id)
    if not existing:
        raise HTTPException(status_code=404, detail=f"Template not found: {template_id}")
    _validate(record, existing)
    return db_update_template(template_id, record)


@router.delete("/workflows/templates/{template_id}")
def delete_template(template_id: int) -> dict:
    if not db_delete_template(template_id):
        raise HTTPException(status_code=404, detail=f"Template not found: {template_id}")
    return {"deleted": template_id}


@router.post("/workflows/templates/{template_id}/stages")
def add_stage(template_id: int, stage: StageRecord) -> StageRecord:
    """append a single stage to a stored template."""
    existing = db_get_template(template_id)
    if not existing:
        raise HTTPException(status_code=404, detail=f"Template not found: {template_id}")
    if stage.id is not None:
        raise _unprocessable("New stages must not carry an id")
    if any(s.state_name == stage.state_name for s in existing.stages):
        raise _unprocessable(f"Duplicate stage names: {stage.state_name}")
    return db_add_stage(template_id, stage)


@router.delete("/workflows/templates/{template_id}/transitions/{transition_id}")
def delete_transition(template_id: int, transition_id: int) -> dict:
    if not db_get_template(template_id):
        raise HTTPException(status_code=404, detail=f"Template not found: {template_id}")
    if not db_delete_transition(template_id, transition_id):
        raise HTTPException(
            status_code=404, detail=f"Transition not found: {transition_id}"
        )
    return {"deleted": transition_id}
