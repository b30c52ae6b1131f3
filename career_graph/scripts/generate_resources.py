"""
Generate learning resources for every persisted skill.

Usage:
    python -m career_graph.scripts.generate_resources
    python -m career_graph.scripts.generate_resources --seed 42
"""

import argparse

from career_graph.scripts.common import run_entry_point, run_stages


def main():
    parser = argparse.ArgumentParser(description="Generate learning resources for every persisted skill")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for sampling")
    args = parser.parse_args()
    run_entry_point(
        lambda: run_stages(["learning_resources"], "generate_resources", seed=args.seed),
        "generate_resources",
    )


if __name__ == "__main__":
    main()
