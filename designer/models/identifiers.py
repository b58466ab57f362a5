"""Identifiers for stages and transitions.

An entity is either pending (created in the editor and never saved) or
persisted (carries the id the backend assigned to it). A pending id is
replaced by a persisted one only from a successful save response.
"""

from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field

from designer.utils.identifiers import generate_local_id


class PendingId(BaseModel):
    """id of an entity that only exists in the editor session."""

    model_config = {"frozen": True}

    kind: Literal["pending"] = "pending"
    local_id: str = Field(default_factory=generate_local_id)

    def __str__(self) -> str:
        return f"pending:{self.local_id}"


class PersistedId(BaseModel):
    """id assigned by the backend on first save."""

    model_config = {"frozen": True}

    kind: Literal["persisted"] = "persisted"
    server_id: int | str

    def __str__(self) -> str:
        return str(self.server_id)


EntityId = Annotated[Union[PendingId, PersistedId], Field(discriminator="kind")]
