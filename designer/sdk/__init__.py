"""SDK for talking to the template backend."""

from designer.sdk.persistence import (
    PersistenceAdapter,
    PersistenceError,
    SaveInProgressError,
    TemplateLoadError,
    TemplateSaveError,
)
from designer.sdk.template_client import (
    TemplateClient,
    TemplateClientError,
    TemplateNotFoundError,
)

__all__ = [
    "PersistenceAdapter",
    "PersistenceError",
    "SaveInProgressError",
    "TemplateLoadError",
    "TemplateSaveError",
    "TemplateClient",
    "TemplateClientError",
    "TemplateNotFoundError",
]
