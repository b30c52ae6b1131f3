"""
Synthesize role-skill, role-industry, skill-industry and prerequisite edges
from the persisted entities.

Usage:
    python -m career_graph.scripts.synthesize_relationships
    python -m career_graph.scripts.synthesize_relationships --seed 42
"""

import argparse

from career_graph.pipeline import RELATIONSHIP_STAGES
from career_graph.scripts.common import run_entry_point, run_stages


def main():
    parser = argparse.ArgumentParser(description="Synthesize relationship edges between entities")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for edge sampling")
    args = parser.parse_args()
    run_entry_point(
        lambda: run_stages(RELATIONSHIP_STAGES, "synthesize_relationships", seed=args.seed),
        "synthesize_relationships",
    )


if __name__ == "__main__":
    main()
