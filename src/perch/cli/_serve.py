"""``perch serve``: serve a project with uvicorn.

uvicorn is an optional dependency (``pip install perch[serve]``).
"""

import argparse
import sys

from perch.cli._load import load_deployment
from perch.server.site import StaticSite


def run_server(args: argparse.Namespace) -> None:
    """Build the deployment once, then serve it until interrupted."""
    try:
        import uvicorn
    except ImportError as exc:
        print(
            "Error: 'perch serve' requires uvicorn. Install it with: pip install perch[serve]",
            file=sys.stderr,
        )
        raise SystemExit(1) from exc

    deployment = load_deployment(args)
    uvicorn.run(StaticSite(deployment), host=args.host, port=args.port)
