#!/usr/bin/env python3
"""
Compute Network Probe

Checks the compute network from the command line:
1. Availability (GET /health)
2. Network-wide statistics
3. Optional end-to-end embedding (reports which path served it)

Usage:
    python scripts/probe_network.py
    python scripts/probe_network.py --backend stub --embed "hello world"
    python scripts/probe_network.py --json
"""

import argparse
import asyncio
import json
import os
import sys
from pathlib import Path
from typing import List, Optional

# Allow running as a plain script from the repository root
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from compute import ComputeFacade, InvalidInput  # noqa: E402
from compute.submitter import validate_text  # noqa: E402
from infra import ComputeConfig  # noqa: E402


async def run_probe(facade: ComputeFacade, embed_text: Optional[str] = None) -> dict:
    """Run every probe against ``facade`` and collect a report."""
    report = {
        "available": await facade.check_network_availability(),
        "network": (await facade.get_network_stats()).model_dump(),
    }

    if embed_text:
        response = await facade.embed_text(embed_text)
        report["embedding"] = {
            "source": response.source,
            "dimension": response.dimension,
            "model": response.model,
            "task_id": response.task_id,
            "error_type": response.error_type,
        }

    report["stats"] = facade.get_stats().model_dump(mode="json")
    return report


def format_report(report: dict) -> str:
    lines = [f"{'✓' if report['available'] else '✗'} Network available: {report['available']}"]

    network = report["network"]
    if network["connected"]:
        lines.append(
            f"  nodes: {network['active_nodes']}/{network['total_nodes']} active, "
            f"queued tasks: {network['queued_tasks']}"
        )
    else:
        lines.append(f"  network stats unavailable: {network['error']}")

    embedding = report.get("embedding")
    if embedding:
        lines.append(
            f"  embedding served by {embedding['source']} "
            f"({embedding['dimension']} dims, model={embedding['model']})"
        )
        if embedding["error_type"]:
            lines.append(f"  fallback reason: {embedding['error_type']}")

    return "\n".join(lines)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point. Exit code 0 when the network is available."""
    parser = argparse.ArgumentParser(description="Probe the compute network")
    parser.add_argument(
        "--backend",
        choices=["stub", "network"],
        help="Override COMPUTE_BACKEND",
    )
    parser.add_argument("--embed", metavar="TEXT", help="Also embed TEXT end to end")
    parser.add_argument("--json", action="store_true", help="Print the raw JSON report")
    args = parser.parse_args(argv)

    if args.embed is not None:
        try:
            validate_text(args.embed)
        except InvalidInput as e:
            parser.error(f"--embed: {e.message}")

    if args.backend:
        os.environ["COMPUTE_BACKEND"] = args.backend

    facade = ComputeConfig.from_env().create_facade()
    report = asyncio.run(run_probe(facade, args.embed))

    if args.json:
        print(json.dumps(report, indent=2, default=str))
    else:
        print(format_report(report))

    return 0 if report["available"] else 1


if __name__ == "__main__":
    sys.exit(main())
