"""
Generate career pathways and back-fill role career paths.

Usage:
    python -m career_graph.scripts.generate_pathways
    python -m career_graph.scripts.generate_pathways --seed 42
"""

import argparse

from career_graph.scripts.common import run_entry_point, run_stages


def main():
    parser = argparse.ArgumentParser(description="Generate career pathways and back-fill role career paths")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for sampling")
    args = parser.parse_args()
    run_entry_point(
        lambda: run_stages(["career_pathways"], "generate_pathways", seed=args.seed),
        "generate_pathways",
    )


if __name__ == "__main__":
    main()
