"""Seed the template backend with a sample course workflow.

Builds the workflow through the editor's graph model, the same way the
canvas would, then saves it and writes a JSON export next to the repo:

    planning -> content development -> review -> approval -> published
                        ^                  |
                        +---- changes -----+
"""

from pathlib import Path

from designer.adapters.template_io import export_template
from designer.editor.graph import WorkflowGraph
from designer.models import Position, StageType, WorkflowTemplate
from designer.sdk.persistence import PersistenceAdapter
from designer.sdk.template_client import TemplateClient


def build_course_workflow() -> WorkflowTemplate:
    """Create the sample course development workflow."""
    graph = WorkflowGraph()
    graph.update_template(
        name="Course Development",
        description="Standard lifecycle for new course content",
    )

    planning = graph.add_stage(StageType.planning, Position(x=100, y=200))
    development = graph.add_stage(StageType.content_development, Position(x=350, y=200))
    review = graph.add_stage(StageType.review, Position(x=600, y=200))
    approval = graph.add_stage(StageType.approval, Position(x=850, y=200))
    published = graph.add_stage(StageType.published, Position(x=1100, y=200))

    graph.update_stage(planning.id, technical_name="course_planning")
    graph.update_stage(development.id, technical_name="content_development")
    graph.update_stage(review.id, technical_name="peer_review", display_name="Peer Review")
    graph.update_stage(approval.id, technical_name="final_approval")
    graph.update_stage(published.id, technical_name="published", is_final=True)

    graph.update_stage_config(planning.id, estimated_duration=3)
    graph.update_stage_config(development.id, estimated_duration=10, required_roles=["designer", "sme"])
    graph.update_stage_config(
        review.id,
        estimated_duration=4,
        required_roles=["reviewer"],
        notifications={"on_enter": True, "on_exit": False, "assignees": []},
    )
    graph.update_stage_config(approval.id, estimated_duration=2, required_roles=["approver"])

    graph.add_transition(planning.id, development.id)
    graph.add_transition(development.id, review.id)
    to_approval = graph.add_transition(review.id, approval.id)
    changes = graph.add_transition(review.id, development.id)
    to_published = graph.add_transition(approval.id, published.id)

    graph.update_transition(
        to_approval.id, condition_type="approval", condition_config={"required_roles": ["reviewer"]}
    )
    graph.update_transition(
        changes.id, condition_type="conditional", condition_config={"expression": "review.changes_requested"}
    )
    graph.update_transition(
        to_published.id, condition_type="timer", condition_config={"delay_hours": 24}
    )
    return graph.template


def main():
    """Save the sample workflow and export it."""
    adapter = PersistenceAdapter(TemplateClient())
    template = build_course_workflow()

    print("Seeding sample workflow...")
    saved = adapter.save_template(template)
    print(f"  Template ID: {saved.id}")
    print(f"  Stages: {len(saved.stages)}")
    print(f"  Transitions: {len(saved.transitions)}")

    output_dir = Path(__file__).parent.parent.parent / "outputs"
    path = export_template(saved, output_dir / f"template_{saved.id}.json")
    print(f"  Exported: {path}")
    print()
    print("Done!")


if __name__ == "__main__":
    main()
