"""Stage models: the states of a workflow template."""

from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel, Field, field_validator

from designer.models.identifiers import EntityId, PendingId


class StageType(str, Enum):
    """Fixed categories of stages. Drive icon, color and default label."""

    planning = "planning"
    content_development = "content_development"
    review = "review"
    approval = "approval"
    legal_review = "legal_review"
    published = "published"
    archived = "archived"


class Role(str, Enum):
    """Roles that can be required to approve or act on a stage."""

    admin = "admin"
    manager = "manager"
    designer = "designer"
    reviewer = "reviewer"
    approver = "approver"
    sme = "sme"


@dataclass(frozen=True)
class StageTypeInfo:
    """Display metadata for a stage type."""

    label: str
    color: str
    icon: str
    description: str


STAGE_TYPE_INFO: dict[StageType, StageTypeInfo] = {
    StageType.planning: StageTypeInfo(
        "Planning", "#3B82F6", "Clock", "Initial planning and setup stage"
    ),
    StageType.content_development: StageTypeInfo(
        "Content Development", "#A855F7", "Edit", "Content creation and development"
    ),
    StageType.review: StageTypeInfo(
        "Review", "#EAB308", "AlertTriangle", "Content review and feedback"
    ),
    StageType.approval: StageTypeInfo(
        "Approval", "#22C55E", "CheckCircle", "Final approval stage"
    ),
    StageType.legal_review: StageTypeInfo(
        "Legal Review", "#EF4444", "Users", "Legal compliance review"
    ),
    StageType.published: StageTypeInfo(
        "Published", "#10B981", "Play", "Content is live and published"
    ),
    StageType.archived: StageTypeInfo(
        "Archived", "#6B7280", "Pause", "Archived or retired content"
    ),
}

ROLE_LABELS: dict[Role, str] = {
    Role.admin: "Administrator",
    Role.manager: "Manager",
    Role.designer: "Designer",
    Role.reviewer: "Reviewer",
    Role.approver: "Approver",
    Role.sme: "Subject Matter Expert",
}


def unique_roles(roles: list[Role]) -> list[Role]:
    """Drop repeated roles, keeping first-seen order."""
    return list(dict.fromkeys(roles))


class Position(BaseModel):
    """A point in canvas coordinates."""

    x: float
    y: float


class Notifications(BaseModel):
    """Notification toggles for entering and leaving a stage."""

    model_config = {"extra": "allow"}

    on_enter: bool = False
    on_exit: bool = False
    assignees: list[str] = Field(default_factory=list)


class StageConfig(BaseModel):
    """Per-stage settings edited in the properties panel.

    Unknown keys are kept so configs written by other clients survive a
    load/save cycle untouched.
    """

    model_config = {"extra": "allow"}

    color: str | None = None
    icon: str | None = None
    required_roles: list[Role] = Field(default_factory=list)
    notifications: Notifications = Field(default_factory=Notifications)
    auto_advance: bool = False
    estimated_duration: float | None = Field(default=None, ge=0)  # days

    @field_validator("required_roles")
    @classmethod
    def _dedupe_roles(cls, roles: list[Role]) -> list[Role]:
        return unique_roles(roles)

    @classmethod
    def for_type(cls, stage_type: StageType) -> "StageConfig":
        """Seed a config with the type's color and icon."""
        info = STAGE_TYPE_INFO[stage_type]
        return cls(color=info.color, icon=info.icon)


class Stage(BaseModel):
    """A node of the workflow graph: one lifecycle state of a course."""

    model_config = {"extra": "forbid"}

    id: EntityId = Field(default_factory=PendingId)
    technical_name: str  # slug-like, unique per template at save time
    display_name: str
    stage_type: StageType | None = None  # None only until the layout pass
    is_initial: bool = False
    is_final: bool = False
    position: Position | None = None
    config: StageConfig = Field(default_factory=StageConfig)

    @property
    def type_info(self) -> StageTypeInfo:
        return STAGE_TYPE_INFO[self.stage_type or StageType.planning]
