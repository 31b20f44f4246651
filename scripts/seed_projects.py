"""
CLI helper to load the starter projects into the configured store.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from portfolio_backend.dependencies import get_kv_store
from portfolio_backend.projects import ProjectService
from portfolio_backend.seed import INITIAL_PROJECTS, seed_projects


def main() -> int:
    parser = argparse.ArgumentParser(description="Seed portfolio projects")
    parser.add_argument(
        "-f",
        "--file",
        type=Path,
        default=None,
        help="JSON file holding a list of projects (defaults to the built-in set)",
    )
    args = parser.parse_args()
    logging.basicConfig(level=logging.INFO)

    projects = INITIAL_PROJECTS
    if args.file:
        projects = json.loads(args.file.read_text(encoding="utf-8"))

    created = seed_projects(ProjectService(get_kv_store()), projects)
    print(f"Created {created} project(s)")
    return 0


if __name__ == "__main__":
    sys.exit(main())
