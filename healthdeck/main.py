"""Entry point for healthdeck.

``healthdeck check`` exits with the code of the worst status across the
checked resources (ok 0, warning 1, critical 2, unknown 3 by default).
"""

from __future__ import annotations

import argparse
import json
import logging
import sys

import uvicorn
from rich.console import Console
from rich.table import Table

from healthdeck.config import settings
from healthdeck.errors import ConfigurationError
from healthdeck.resources.loader import ResourceLoader
from healthdeck.status import Status, exit_code_for, fleet_status

console = Console()

_STYLE = {
    Status.OK: "green",
    Status.WARNING: "yellow",
    Status.CRITICAL: "bold red",
    Status.UNKNOWN: "magenta",
}


def setup_logging() -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    )


def run_server() -> None:
    """Start the FastAPI server."""
    console.print(f"[bold green]Starting healthdeck API on {settings.api_host}:{settings.api_port}")
    uvicorn.run(
        "healthdeck.api.server:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=False,
    )


def run_check(path: str | None, slug: str | None, fmt: str, action: str) -> int:
    """Check resources and print them; return the process exit code."""
    loader = ResourceLoader(path)
    try:
        return _check(loader, slug, fmt, action)
    finally:
        loader.close()


def _check(loader: ResourceLoader, slug: str | None, fmt: str, action: str) -> int:
    try:
        resources = loader.load()
    except ConfigurationError as e:
        console.print(f"[bold red]{e}")
        return exit_code_for(Status.UNKNOWN, loader.config.exit_codes)

    if slug:
        resource = loader.get(slug)
        if resource is None:
            console.print(f"[bold red]Resource not found: {slug}")
            return exit_code_for(Status.UNKNOWN, loader.config.exit_codes)
        if resource.is_global:
            resource.check_global(resources, action)
        else:
            resource.check(action)
        checked = [resource]
    else:
        checked = loader.check_all(action)

    if fmt == "json":
        print(json.dumps([r.to_dict() for r in checked], indent=2))
    elif fmt == "summary":
        for r in checked:
            print(r.get_summary())
    else:
        table = Table(title="Resource health")
        table.add_column("Resource")
        table.add_column("Status")
        table.add_column("Details")
        for r in checked:
            status = r.get_status()
            details = r.get_summary_of_issues() if not r.is_healthy() else ""
            table.add_row(r.name, f"[{_STYLE[status]}]{status.value.upper()}", details)
        console.print(table)

    worst = fleet_status(checked, loader.config.severity)
    return exit_code_for(worst, loader.config.exit_codes)


def main() -> None:
    parser = argparse.ArgumentParser(description="healthdeck resource health checks")
    sub = parser.add_subparsers(dest="command")

    # Server mode
    sub.add_parser("serve", help="Start the API server")

    # CLI mode
    check_parser = sub.add_parser("check", help="Check resources once and exit")
    check_parser.add_argument("--config", dest="path", default=None, help="Resources YAML file")
    check_parser.add_argument("--resource", dest="slug", default=None, help="Only check this slug")
    check_parser.add_argument(
        "--format", dest="fmt", choices=("table", "summary", "json"), default="table",
    )
    check_parser.add_argument("--action", default="cli", help="Action name used for notify_on")

    args = parser.parse_args()
    setup_logging()

    if args.command == "serve":
        run_server()
    elif args.command == "check":
        sys.exit(run_check(args.path, args.slug, args.fmt, args.action))
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
