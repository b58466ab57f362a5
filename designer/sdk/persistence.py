"""Persistence adapter: loads templates into the editor and saves them back.

The adapter never mutates the template it is asked to save. A failed
save leaves the caller's graph exactly as it was, ready for a retry.
"""

from __future__ import annotations

from logging import getLogger

from designer.adapters.wire import WireFormatError, from_wire, resolved_ids, to_wire
from designer.editor.layout import apply_layout
from designer.models.identifiers import PendingId, PersistedId
from designer.models.workflow_template import WorkflowTemplate
from designer.sdk.template_client import TemplateClient, TemplateClientError

logger = getLogger(__name__)


class PersistenceError(Exception):
    """Base class for load/save failures."""


class TemplateLoadError(PersistenceError):
    """The template could not be fetched or decoded."""

    def __init__(self, template_id: int | str, reason: str) -> None:
        super().__init__(f"Failed to load template {template_id}: {reason}")
        self.template_id = template_id
        self.reason = reason


class TemplateSaveError(PersistenceError):
    """The backend rejected the save or could not be reached."""

    def __init__(self, reason: str, status_code: int | None = None) -> None:
        super().__init__(f"Failed to save template: {reason}")
        self.reason = reason
        self.status_code = status_code


class SaveInProgressError(PersistenceError):
    """A save for the same template has not finished yet."""


def _save_key(template: WorkflowTemplate) -> int | str:
    # unsaved templates have no backend id yet; tell them apart by object
    if template.id is None:
        return f"unsaved-{id(template)}"
    return template.id


class PersistenceAdapter:
    """Bridges the graph model and the template backend."""

    def __init__(self, client: TemplateClient | None = None) -> None:
        self.client = client or TemplateClient()
        self._saving: set[int | str] = set()  # templates with a save in flight
        # pending ids the last successful save assigned server ids to
        self.resolved: dict[PendingId, PersistedId] = {}

    def load_template(self, template_id: int | str) -> WorkflowTemplate:
        """Fetch a template and make it drawable.

        The layout pass runs before the template is returned, so every stage
        has a position and a type.

        Raises:
            TemplateLoadError: fetch or decode failed; no template is built.
        """
        try:
            payload = self.client.fetch_template(template_id)
            template = from_wire(payload)
        except (TemplateClientError, WireFormatError) as e:
            logger.warning(f"Template {template_id} failed to load: {e}")
            raise TemplateLoadError(template_id, str(e)) from e
        apply_layout(template)
        logger.info(
            f"Template loaded: {template.name} ({template.id}), "
            f"{len(template.stages)} stages, {len(template.transitions)} transitions"
        )
        return template

    def is_saving(self, template: WorkflowTemplate) -> bool:
        return _save_key(template) in self._saving

    def save_template(self, template: WorkflowTemplate) -> WorkflowTemplate:
        """Create or update ``template`` on the backend.

        Returns the stored state as echoed by the backend, with the layout
        pass applied. Pending ids in the echo are already persisted ids.

        Raises:
            SaveInProgressError: a save for this template is still running.
            TemplateSaveError: the backend rejected the save.
        """
        key = _save_key(template)
        if key in self._saving:
            raise SaveInProgressError(f"Template {key} is already being saved")
        self._saving.add(key)
        try:
            payload = to_wire(template)
            try:
                if template.id is None:
                    response = self.client.create_template(payload)
                else:
                    response = self.client.update_template(template.id, payload)
                saved = from_wire(response)
                resolved = resolved_ids(response)
            except TemplateClientError as e:
                logger.warning(f"Template save failed: {e}")
                raise TemplateSaveError(str(e), status_code=e.status_code) from e
            except WireFormatError as e:
                logger.warning(f"Template save returned an unreadable payload: {e}")
                raise TemplateSaveError(str(e)) from e
        finally:
            self._saving.discard(key)

        apply_layout(saved)
        self.resolved = resolved
        action = "created" if template.id is None else "updated"
        logger.info(f"Template {action}: {saved.name} ({saved.id})")
        return saved
