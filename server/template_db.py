"""SQLite storage for workflow templates, their stages and transitions."""

import json
import os
import sqlite3
from logging import getLogger
from pathlib import Path

from designer.adapters.wire import StageRecord, TemplateRecord, TransitionRecord
from designer.utils.identifiers import utc_timestamp

logger = getLogger(__name__)

DEFAULT_DB_PATH = Path(__file__).parent / "data" / "templates.db"
TEMPLATE_DB_PATH = Path(os.getenv("TEMPLATE_DB_PATH", str(DEFAULT_DB_PATH)))


def _connect() -> sqlite3.Connection:
    TEMPLATE_DB_PATH.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(TEMPLATE_DB_PATH)
    conn.row_factory = sqlite3.Row
    return conn


def init_db() -> None:
    with _connect() as conn:
        conn.execute(
            """
            create table if not exists workflow_templates (
                id integer primary key autoincrement,
                name text not null,
                description text,
                is_active integer not null default 1,
                created_at text not null,
                updated_at text not null
            )
            """
        )
        conn.execute(
            """
            create table if not exists workflow_stages (
                id integer primary key autoincrement,
                template_id integer not null,
                sort_order integer not null,
                state_name text not null,
                display_name text not null,
                stage_type text,
                is_initial integer not null default 0,
                is_final integer not null default 0,
                position_x real,
                position_y real,
                state_config text not null default '{}'
            )
            """
        )
        conn.execute(
            """
            create table if not exists workflow_transitions (
                id integer primary key autoincrement,
                template_id integer not null,
                from_stage_id integer not null,
                to_stage_id integer not null,
                condition_type text not null,
                condition_config text not null default '{}'
            )
            """
        )
        conn.execute(
            "create index if not exists idx_workflow_stages_template_id on workflow_stages(template_id)"
        )
        conn.execute(
            "create index if not exists idx_workflow_transitions_template_id on workflow_transitions(template_id)"
        )
        conn.commit()


# --- rows ---


def _stage_from_row(row: sqlite3.Row) -> StageRecord:
    return StageRecord(
        id=row["id"],
        state_name=row["state_name"],
        display_name=row["display_name"],
        stage_type=row["stage_type"],
        is_initial=bool(row["is_initial"]),
        is_final=bool(row["is_final"]),
        position_x=row["position_x"],
        position_y=row["position_y"],
        state_config=row["state_config"],
    )


def _transition_from_row(row: sqlite3.Row) -> TransitionRecord:
    return TransitionRecord(
        id=row["id"],
        from_stage_id=row["from_stage_id"],
        to_stage_id=row["to_stage_id"],
        condition_type=row["condition_type"],
        condition_config=row["condition_config"],
    )


def _stage_values(stage: StageRecord) -> tuple:
    return (
        stage.state_name,
        stage.display_name,
        stage.stage_type.value if stage.stage_type else None,
        int(stage.is_initial),
        int(stage.is_final),
        stage.position_x,
        stage.position_y,
        stage.state_config,
    )


def _read_template(conn: sqlite3.Connection, template_id: int | str) -> TemplateRecord | None:
    row = conn.execute(
        "select * from workflow_templates where id = ?", (template_id,)
    ).fetchone()
    if not row:
        return None
    stages = conn.execute(
        "select * from workflow_stages where template_id = ? order by sort_order, id",
        (template_id,),
    ).fetchall()
    transitions = conn.execute(
        "select * from workflow_transitions where template_id = ? order by id",
        (template_id,),
    ).fetchall()
    return TemplateRecord(
        id=row["id"],
        name=row["name"],
        description=row["description"],
        is_active=bool(row["is_active"]),
        stages=[_stage_from_row(r) for r in stages],
        transitions=[_transition_from_row(r) for r in transitions],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def _delete_missing(
    conn: sqlite3.Connection, table: str, template_id: int | str, keep: list
) -> None:
    if not keep:
        conn.execute(f"delete from {table} where template_id = ?", (template_id,))
        return
    placeholders = ", ".join("?" for _ in keep)
    conn.execute(
        f"delete from {table} where template_id = ? and id not in ({placeholders})",
        (template_id, *keep),
    )


def _sync_stages(
    conn: sqlite3.Connection, template_id: int | str, stages: list[StageRecord]
) -> dict[str, int]:
    """Write ``stages`` as the template's full stage list.

    Returns the ids assigned to new stages, keyed by their client id.
    """
    _delete_missing(
        conn, "workflow_stages", template_id, [s.id for s in stages if s.id is not None]
    )
    assigned: dict[str, int] = {}
    for order, stage in enumerate(stages):
        if stage.id is None:
            cur = conn.execute(
                """
                insert into workflow_stages (
                    state_name, display_name, stage_type, is_initial, is_final,
                    position_x, position_y, state_config, template_id, sort_order
                )
                values (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (*_stage_values(stage), template_id, order),
            )
            if stage.client_id is not None:
                assigned[stage.client_id] = cur.lastrowid
        else:
            conn.execute(
                """
                update workflow_stages
                set state_name = ?, display_name = ?, stage_type = ?,
                    is_initial = ?, is_final = ?, position_x = ?, position_y = ?,
                    state_config = ?, sort_order = ?
                where id = ? and template_id = ?
                """,
                (*_stage_values(stage), order, stage.id, template_id),
            )
    return assigned


def _sync_transitions(
    conn: sqlite3.Connection,
    template_id: int | str,
    transitions: list[TransitionRecord],
    stage_ids: dict[str, int],
) -> dict[str, int]:
    _delete_missing(
        conn,
        "workflow_transitions",
        template_id,
        [t.id for t in transitions if t.id is not None],
    )
    assigned: dict[str, int] = {}
    for transition in transitions:
        from_id = transition.from_stage_id
        if from_id is None:
            from_id = stage_ids[transition.from_stage_client_id]
        to_id = transition.to_stage_id
        if to_id is None:
            to_id = stage_ids[transition.to_stage_client_id]
        values = (
            from_id,
            to_id,
            transition.condition_type.value,
            json.dumps(transition.condition_config),
        )
        if transition.id is None:
            cur = conn.execute(
                """
                insert into workflow_transitions (
                    from_stage_id, to_stage_id, condition_type, condition_config, template_id
                )
                values (?, ?, ?, ?, ?)
                """,
                (*values, template_id),
            )
            if transition.client_id is not None:
                assigned[transition.client_id] = cur.lastrowid
        else:
            conn.execute(
                """
                update workflow_transitions
                set from_stage_id = ?, to_stage_id = ?, condition_type = ?, condition_config = ?
                where id = ? and template_id = ?
                """,
                (*values, transition.id, template_id),
            )
    return assigned


def _attach_client_ids(
    record: TemplateRecord, stage_ids: dict[str, int], transition_ids: dict[str, int]
) -> TemplateRecord:
    """Echo client ids next to the ids they were assigned."""
    stage_clients = {v: k for k, v in stage_ids.items()}
    transition_clients = {v: k for k, v in transition_ids.items()}
    for stage in record.stages:
        stage.client_id = stage_clients.get(stage.id)
    for transition in record.transitions:
        transition.client_id = transition_clients.get(transition.id)
    return record


# --- templates ---


def create_template(record: TemplateRecord) -> TemplateRecord:
    """Insert a new template with all of its stages and transitions."""
    now = utc_timestamp()
    with _connect() as conn:
        cur = conn.execute(
            """
            insert into workflow_templates (name, description, is_active, created_at, updated_at)
            values (?, ?, ?, ?, ?)
            """,
            (record.name, record.description, int(record.is_active), now, now),
        )
        template_id = cur.lastrowid
        stage_ids = _sync_stages(conn, template_id, record.stages)
        transition_ids = _sync_transitions(conn, template_id, record.transitions, stage_ids)
        conn.commit()
        stored = _read_template(conn, template_id)
    logger.info(
        f"Template created: {stored.name} ({template_id}), "
        f"{len(stored.stages)} stages, {len(stored.transitions)} transitions"
    )
    return _attach_client_ids(stored, stage_ids, transition_ids)


def update_template(template_id: int | str, record: TemplateRecord) -> TemplateRecord | None:
    """Replace a template's fields, stages and transitions.

    Stages and transitions that carry an id are updated in place, those
    without one are inserted, and stored ones missing from ``record`` are
    deleted.
    """
    with _connect() as conn:
        cur = conn.execute(
            """
            update workflow_templates
            set name = ?, description = ?, is_active = ?, updated_at = ?
            where id = ?
            """,
            (
                record.name,
                record.description,
                int(record.is_active),
                utc_timestamp(),
                template_id,
            ),
        )
        if cur.rowcount == 0:
            return None
        stage_ids = _sync_stages(conn, template_id, record.stages)
        transition_ids = _sync_transitions(conn, template_id, record.transitions, stage_ids)
        conn.commit()
        stored = _read_template(conn, template_id)
    logger.info(f"Template updated: {stored.name} ({template_id})")
    return _attach_client_ids(stored, stage_ids, transition_ids)


def get_template(template_id: int | str) -> TemplateRecord | None:
    with _connect() as conn:
        return _read_template(conn, template_id)


def list_templates() -> list[TemplateRecord]:
    with _connect() as conn:
        rows = conn.execute(
            "select id from workflow_templates order by updated_at desc, id desc"
        ).fetchall()
        return [_read_template(conn, row["id"]) for row in rows]


def delete_template(template_id: int | str) -> bool:
    with _connect() as conn:
        cur = conn.execute("delete from workflow_templates where id = ?", (template_id,))
        conn.execute("delete from workflow_stages where template_id = ?", (template_id,))
        conn.execute("delete from workflow_transitions where template_id = ?", (template_id,))
        conn.commit()
    if cur.rowcount:
        logger.info(f"Template deleted: {template_id}")
    return cur.rowcount > 0


# --- single items ---


def add_stage(template_id: int | str, stage: StageRecord) -> StageRecord:
    """Append one stage after the template's existing ones."""
    with _connect() as conn:
        row = conn.execute(
            "select coalesce(max(sort_order) + 1, 0) as next_order from workflow_stages where template_id = ?",
            (template_id,),
        ).fetchone()
        cur = conn.execute(
            """
            insert into workflow_stages (
                state_name, display_name, stage_type, is_initial, is_final,
                position_x, position_y, state_config, template_id, sort_order
            )
            values (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (*_stage_values(stage), template_id, row["next_order"]),
        )
        conn.execute(
            "update workflow_templates set updated_at = ? where id = ?",
            (utc_timestamp(), template_id),
        )
        conn.commit()
        stored = conn.execute(
            "select * from workflow_stages where id = ?", (cur.lastrowid,)
        ).fetchone()
    created = _stage_from_row(stored)
    created.client_id = stage.client_id
    logger.info(f"Stage added to template {template_id}: {created.state_name} ({created.id})")
    return created


def delete_transition(template_id: int | str, transition_id: int | str) -> bool:
    with _connect() as conn:
        cur = conn.execute(
            "delete from workflow_transitions where id = ? and template_id = ?",
            (transition_id, template_id),
        )
        if cur.rowcount:
            conn.execute(
                "update workflow_templates set updated_at = ? where id = ?",
                (utc_timestamp(), template_id),
            )
        conn.commit()
    return cur.rowcount > 0
