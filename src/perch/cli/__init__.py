"""Perch CLI: inspect a deployment, resolve paths, serve a project.

Entry point registered as ``perch`` in ``pyproject.toml``::

    [project.scripts]
    perch = "perch.cli:main"
"""

import argparse
import logging
import sys


def _add_project_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("project", help="Project directory")
    parser.add_argument(
        "--config",
        default=None,
        help="Config file (default: perch.json or vercel.json in the project)",
    )
    parser.add_argument(
        "--output-directory",
        default=None,
        help="Override outputDirectory from the config file",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Fail on an empty outputDirectory or malformed rewrite",
    )


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``perch`` command."""
    parser = argparse.ArgumentParser(
        prog="perch",
        description="Perch: resolve request paths against a static deployment.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command")

    # -- perch root -------------------------------------------------------
    root_parser = subparsers.add_parser("root", help="Show the selected serving root")
    _add_project_arguments(root_parser)

    # -- perch resolve ----------------------------------------------------
    resolve_parser = subparsers.add_parser("resolve", help="Resolve request paths")
    _add_project_arguments(resolve_parser)
    resolve_parser.add_argument("paths", nargs="+", metavar="PATH", help="Request paths (e.g. /about)")

    # -- perch rules ------------------------------------------------------
    rules_parser = subparsers.add_parser("rules", help="List rewrite rules in evaluation order")
    _add_project_arguments(rules_parser)

    # -- perch serve ------------------------------------------------------
    serve_parser = subparsers.add_parser("serve", help="Serve the project over HTTP")
    _add_project_arguments(serve_parser)
    serve_parser.add_argument("--host", default="127.0.0.1", help="Bind host address")
    serve_parser.add_argument("--port", type=int, default=8000, help="Bind port number")

    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "root":
        from perch.cli._inspect import run_root

        run_root(args)
    elif args.command == "resolve":
        from perch.cli._inspect import run_resolve

        run_resolve(args)
    elif args.command == "rules":
        from perch.cli._inspect import run_rules

        run_rules(args)
    elif args.command == "serve":
        from perch.cli._serve import run_server

        run_server(args)
