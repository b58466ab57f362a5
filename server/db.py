"""database initialization helpers."""

from server.template_db import init_db as init_template_db


def init_all() -> None:
    """initialize all sqlite tables."""
    init_template_db()
