"""Deployment loading shared by every ``perch`` subcommand."""

import argparse
import dataclasses
import sys
from pathlib import Path

from perch.deployment import Deployment
from perch.errors import PerchError
from perch.loader import load_config


def load_deployment(args: argparse.Namespace) -> Deployment:
    """Build a deployment from ``args.project`` and the override flags.

    Prints the error and exits with status 1 on a configuration error.
    """
    project = Path(args.project)
    if not project.is_dir():
        print(f"Error: {project} is not a directory", file=sys.stderr)
        raise SystemExit(1)

    try:
        config = load_config(args.config or project)
        overrides: dict[str, object] = {}
        if args.output_directory is not None:
            overrides["output_directory"] = args.output_directory
        if args.strict:
            overrides["strict"] = True
        if overrides:
            config = dataclasses.replace(config, **overrides)
        return Deployment.from_directory(project, config)
    except PerchError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc
