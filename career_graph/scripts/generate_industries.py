"""
Generate industries, cache them and persist them.

Categories already in the cache are not requested from the provider again.

Usage:
    python -m career_graph.scripts.generate_industries
"""

import argparse

from career_graph.scripts.common import run_entry_point, run_stages


def main():
    parser = argparse.ArgumentParser(description="Generate industries, cache them and persist them")
    parser.parse_args()
    run_entry_point(lambda: run_stages(["industries"], "generate_industries"), "generate_industries")


if __name__ == "__main__":
    main()
