"""``perch root``, ``perch resolve`` and ``perch rules``."""

import argparse

from perch.cli._load import load_deployment
from perch.resolution import Served


def run_root(args: argparse.Namespace) -> None:
    """Print the serving root and the branch that chose it."""
    deployment = load_deployment(args)
    root = deployment.root
    count = sum(1 for _ in deployment.view.files())
    print(f"{root} ({root.source.value}, {count} files)")


def run_resolve(args: argparse.Namespace) -> None:
    """Print one line per path: ``200 <tree path>`` or ``404 <path>``.

    Exits with status 1 if any path is not found.
    """
    deployment = load_deployment(args)
    missing = 0
    for path in args.paths:
        result = deployment.resolve(path)
        via = f"  (via {result.rule})" if result.rule is not None else ""
        if isinstance(result, Served):
            print(f"200 {path} -> {result.tree_path}{via}")
        else:
            missing += 1
            print(f"404 {path}{via}")
    if missing:
        raise SystemExit(1)


def run_rules(args: argparse.Namespace) -> None:
    """List rewrite rules in evaluation order."""
    deployment = load_deployment(args)
    rules = deployment.router.rules
    if not len(rules):
        print("No rewrites configured.")
        return

    invalid = set(rules.invalid)
    width = max(len(rule.source) for rule in rules)
    width = max(width, 6)  # "SOURCE" header

    fmt = f"{{:>3}}  {{:<{width}}}  {{}}"
    print(fmt.format("#", "SOURCE", "DESTINATION"))
    print("-" * min(width + 20, 80))
    for position, rule in enumerate(rules, start=1):
        destination = rule.destination
        if rule in invalid:
            destination += "  [invalid, never matches]"
        print(fmt.format(position, rule.source, destination))
