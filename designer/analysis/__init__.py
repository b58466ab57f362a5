"""Read-only projections of a workflow template."""

from designer.analysis.views import (
    DesignEdge,
    DesignNode,
    DesignProjection,
    PreviewProjection,
    PreviewStage,
    SettingsProjection,
    ValidationCheck,
    project,
    project_design,
    project_preview,
    project_settings,
    validation_checks,
)

__all__ = [
    "DesignEdge",
    "DesignNode",
    "DesignProjection",
    "PreviewProjection",
    "PreviewStage",
    "SettingsProjection",
    "ValidationCheck",
    "project",
    "project_design",
    "project_preview",
    "project_settings",
    "validation_checks",
]
