#!/usr/bin/env python3
"""
Statewatch CLI — API server, projects store and dataset tools.

USAGE:
  python -m statewatch.cli serve                         # Start API server
  python -m statewatch.cli serve --port 8000 --reload

  python -m statewatch.cli init-db                       # Create the projects table

  python -m statewatch.cli export                        # Projects workbook to the exports folder
  python -m statewatch.cli export --output ./projects.xlsx

  python -m statewatch.cli snapshot                      # Latest values for the default state
  python -m statewatch.cli snapshot "Pulau Pinang"
"""
from __future__ import annotations

import argparse
import asyncio
import logging
import math
import os
from pathlib import Path

from statewatch.config import CATEGORY_LABELS, DATABASE_URL, DEFAULT_STATE, EXPORTS_FOLDER, LOG_LEVEL


def _repository():
    from statewatch.projects import ProjectRepository, StaticRoleChecker, init_db, make_engine, make_session_factory
    engine = make_engine(DATABASE_URL)
    init_db(engine)
    return ProjectRepository(make_session_factory(engine), StaticRoleChecker.from_config())


def cmd_serve(args):
    """Start the API server."""
    import uvicorn
    print(f"\nStarting Statewatch API on port {args.port}...")
    uvicorn.run("statewatch.main:app", host="0.0.0.0", port=args.port, reload=args.reload,
                timeout_keep_alive=65)


def cmd_init_db(args):
    from statewatch.projects import init_db, make_engine
    init_db(make_engine(DATABASE_URL))
    print(f"\n  Projects table ready at {DATABASE_URL}\n")


def cmd_export(args):
    """Write every project to an .xlsx workbook."""
    from statewatch.excel import build_projects_workbook, export_filename

    print("\n" + "=" * 70)
    print("  STATEWATCH — PROJECTS EXPORT")
    print("=" * 70)

    projects = _repository().list()
    out = Path(args.output) if args.output else EXPORTS_FOLDER / export_filename()
    build_projects_workbook(projects).save(out)

    print(f"\n  {len(projects)} project(s) written to: {out}\n")


async def _snapshot(state: str) -> dict:
    from statewatch.data import Category, DataContext, DatasetFetcher

    fetcher = DatasetFetcher()
    try:
        async with DataContext(selected_state=state) as ctx:
            await ctx.load(fetcher)
            return {
                category: ctx.point_lookup(state, category)
                for category in Category
            }
    finally:
        await fetcher.close()


def cmd_snapshot(args):
    """Fetch the five datasets and print the latest value per category for one state."""
    from statewatch.data import normalize_state

    state = normalize_state(args.state)
    print("\n" + "=" * 70)
    print(f"  STATEWATCH — SNAPSHOT: {state}")
    print("=" * 70 + "\n")

    latest = asyncio.run(_snapshot(state))
    for category, obs in latest.items():
        label = CATEGORY_LABELS[category.value]["en"]
        if obs is None:
            print(f"   {label:<32} (no data)")
        elif math.isnan(obs.value):
            print(f"   {label:<32} {'n/a':>16}   {obs.date}")
        else:
            print(f"   {label:<32} {obs.value:>16,.2f}   {obs.date}")
    print()


def main():
    logging.basicConfig(level=LOG_LEVEL, format="%(levelname)s %(name)s: %(message)s")

    parser = argparse.ArgumentParser(
        description="Statewatch — Malaysian state statistics and projects registry",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    subparsers = parser.add_subparsers(dest="command", help="Command")

    # serve subcommand
    serve_parser = subparsers.add_parser("serve", help="Start API server")
    serve_parser.add_argument("--port", type=int, default=int(os.environ.get("PORT", "8000")), help="Port (default 8000)")
    serve_parser.add_argument("--reload", action="store_true", help="Enable auto-reload")
    serve_parser.set_defaults(func=cmd_serve)

    # init-db subcommand
    init_parser = subparsers.add_parser("init-db", help="Create the projects table")
    init_parser.set_defaults(func=cmd_init_db)

    # export subcommand
    export_parser = subparsers.add_parser("export", help="Export projects to Excel")
    export_parser.add_argument("--output", default=None, help="Output file (default: exports folder)")
    export_parser.set_defaults(func=cmd_export)

    # snapshot subcommand
    snapshot_parser = subparsers.add_parser("snapshot", help="Latest dataset values for a state")
    snapshot_parser.add_argument("state", nargs="?", default=DEFAULT_STATE, help=f"State name (default {DEFAULT_STATE})")
    snapshot_parser.set_defaults(func=cmd_snapshot)

    args = parser.parse_args()
    if not args.command:
        parser.print_help()
        return

    args.func(args)


if __name__ == "__main__":
    main()
