"""
Master orchestration script for career graph generation.

Runs all stages in dependency order, skipping stages already marked
completed in the store:
1. skills, roles, industries (provider, cached per entity type)
2. role_skills, role_industries, skill_industries, skill_prerequisites
3. learning_resources, career_pathways

Usage:
    python -m career_graph.scripts.run_pipeline
    python -m career_graph.scripts.run_pipeline --step roles
    python -m career_graph.scripts.run_pipeline --resume-from role_skills
    python -m career_graph.scripts.run_pipeline --step skills --clean --force
    python -m career_graph.scripts.run_pipeline --seed 42
"""

import argparse
import json
import logging

from career_graph.pipeline import STAGES
from career_graph.scripts.common import build_orchestrator, load_settings, run_entry_point

logger = logging.getLogger(__name__)


def run(args) -> None:
    settings = load_settings()
    orchestrator = build_orchestrator(settings, seed=args.seed)
    try:
        if args.clean:
            if args.step:
                targets = [args.step]
            elif args.resume_from:
                targets = STAGES[STAGES.index(args.resume_from):]
            else:
                targets = STAGES
            orchestrator.clean(targets)

        results = orchestrator.run(
            step=args.step,
            resume_from=args.resume_from,
            force=args.force,
        )
        logger.info(f"Results: {json.dumps(results, indent=2, default=str)}")
    finally:
        orchestrator.database.dispose()


def main():
    parser = argparse.ArgumentParser(description="Run the career graph generation pipeline")
    parser.add_argument(
        "--step",
        choices=STAGES,
        default=None,
        help="Run a single stage",
    )
    parser.add_argument(
        "--resume-from",
        choices=STAGES,
        default=None,
        help="Run from this stage onwards",
    )
    parser.add_argument(
        "--force",
        action="store_true",
        help="Re-run stages even if they are marked completed",
    )
    parser.add_argument(
        "--clean",
        action="store_true",
        help="Clear cached generator output for the selected entity stages (forces fresh generation)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed for relationship and artifact sampling",
    )
    args = parser.parse_args()
    run_entry_point(lambda: run(args), "Pipeline")


if __name__ == "__main__":
    main()
