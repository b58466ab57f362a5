"""The workflow template: a named graph of stages and transitions."""

from pydantic import BaseModel, Field

from designer.models.identifiers import EntityId
from designer.models.stage import Stage
from designer.models.transition import Transition


class WorkflowTemplate(BaseModel):
    """A saved (or about to be saved) workflow graph.

    ``id`` is the backend id and stays None until the first successful
    save. Transient editor state (selection, modes) lives in
    ``EditorSession``, never here.
    """

    id: int | str | None = None
    name: str = ""
    description: str = ""
    is_active: bool = True
    stages: list[Stage] = Field(default_factory=list)
    transitions: list[Transition] = Field(default_factory=list)
    created_at: str | None = None
    updated_at: str | None = None

    @property
    def is_persisted(self) -> bool:
        return self.id is not None

    def get_stage(self, stage_id: EntityId) -> Stage | None:
        """Find a stage by id."""
        for stage in self.stages:
            if stage.id == stage_id:
                return stage
        return None

    def stage_index(self, stage_id: EntityId) -> int | None:
        for index, stage in enumerate(self.stages):
            if stage.id == stage_id:
                return index
        return None

    def get_transition(self, transition_id: EntityId) -> Transition | None:
        """Find a transition by id."""
        for transition in self.transitions:
            if transition.id == transition_id:
                return transition
        return None

    def outgoing(self, stage_id: EntityId) -> list[Transition]:
        """Transitions leaving a stage."""
        return [t for t in self.transitions if t.from_stage_id == stage_id]

    def incoming(self, stage_id: EntityId) -> list[Transition]:
        """Transitions entering a stage."""
        return [t for t in self.transitions if t.to_stage_id == stage_id]

    def initial_stages(self) -> list[Stage]:
        return [s for s in self.stages if s.is_initial]

    def final_stages(self) -> list[Stage]:
        return [s for s in self.stages if s.is_final]

    def dangling_transitions(self) -> list[Transition]:
        """Transitions with an endpoint that does not resolve to a stage."""
        stage_ids = {s.id for s in self.stages}
        return [
            t
            for t in self.transitions
            if t.from_stage_id not in stage_ids or t.to_stage_id not in stage_ids
        ]
