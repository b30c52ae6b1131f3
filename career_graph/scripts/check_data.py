"""
Report what the pipeline has produced so far.

Prints collection counts, a few sample entities, integrity problems and
the stage markers, then an overall status (not started, in progress,
complete). Reads the store only; no provider credential is needed.

Usage:
    python -m career_graph.scripts.check_data
    python -m career_graph.scripts.check_data --json
"""

import argparse
import json

from career_graph.db.database import get_database
from career_graph.db.models import Industry, Role, Skill, StageStatus
from career_graph.graph.validator import (
    STATUS_COMPLETE,
    STATUS_IN_PROGRESS,
    GraphValidator,
)
from career_graph.scripts.common import load_settings, run_entry_point

SUMMARY = {
    STATUS_COMPLETE: "Data generation COMPLETE. All core data and relationships available.",
    STATUS_IN_PROGRESS: "Data generation IN PROGRESS. Some data exists but generation is incomplete.",
}
NOT_STARTED_SUMMARY = "Data generation not started or failed. No significant data found."


def _samples(db, model_class, label_attr):
    rows = db.query(model_class).order_by(model_class.id).limit(3).all()
    return [
        f"{getattr(r, label_attr)} ({r.category}): {(r.description or '')[:50]}..."
        for r in rows
    ]


def check(as_json: bool) -> None:
    settings = load_settings(provider=False)
    database = get_database(settings.database_url, echo=settings.database_echo)
    try:
        with database.session() as db:
            report = GraphValidator(db).validate()
            markers = {
                m.stage: {"status": m.status, "items": m.item_count, "completed_on": m.completed_on}
                for m in db.query(StageStatus).all()
            }
            samples = {
                "skills": _samples(db, Skill, "name"),
                "roles": _samples(db, Role, "title"),
                "industries": _samples(db, Industry, "name"),
            }
    finally:
        database.dispose()

    if as_json:
        print(json.dumps({"report": report, "stages": markers}, indent=2, default=str))
        return

    counts = report["counts"]
    print("\n=== DATA GENERATION STATUS ===")
    for name in ("skills", "roles", "industries"):
        print(f"\n{name.capitalize()}: {counts[name]} total")
        for line in samples[name]:
            print(f"- {line}")

    print("\nRelationships:")
    print(f"- Role-Skill: {counts['role_skills']}")
    print(f"- Role-Industry: {counts['role_industries']}")
    print(f"- Skill-Industry: {counts['skill_industries']}")
    print(f"- Skill-Prerequisite: {counts['skill_prerequisites']}")
    print(f"\nLearning Resources: {counts['learning_resources']} total")
    print(f"Career Pathways: {counts['career_pathways']} total")

    if markers:
        print("\nStages:")
        for stage, marker in markers.items():
            print(f"- {stage}: {marker['status']} ({marker['items']} items)")

    print("\nIntegrity:")
    print(f"- Dangling edges: {len(report['dangling_edges'])}")
    print(f"- Self-prerequisites: {len(report['self_prerequisites'])}")
    print(f"- Pathway problems: {len(report['pathway_problems'])}")

    print("\n=== GENERATION SUMMARY ===")
    print(SUMMARY.get(report["status"], NOT_STARTED_SUMMARY))


def main():
    parser = argparse.ArgumentParser(description="Check generated career graph data")
    parser.add_argument("--json", action="store_true", help="Print the report as JSON")
    args = parser.parse_args()
    run_entry_point(lambda: check(args.json), "Data check")


if __name__ == "__main__":
    main()
