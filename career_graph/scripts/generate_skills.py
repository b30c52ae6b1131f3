"""
Generate skills, cache them and persist them.

Categories already in the cache are not requested from the provider again.

Usage:
    python -m career_graph.scripts.generate_skills
"""

import argparse

from career_graph.scripts.common import run_entry_point, run_stages


def main():
    parser = argparse.ArgumentParser(description="Generate skills, cache them and persist them")
    parser.parse_args()
    run_entry_point(lambda: run_stages(["skills"], "generate_skills"), "generate_skills")


if __name__ == "__main__":
    main()
