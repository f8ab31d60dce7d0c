#!/usr/bin/env python3
"""
Command-line runner for the content pipeline.

Runs one requirements document through the pipeline and prints the result.

Usage:
    content-pipeline generate <prd-file> [--json]
    content-pipeline generate - < prd.md

Options:
    --json    Print the full run result as JSON instead of the final post
"""

import argparse
import asyncio
import json
import logging
import sys
from typing import List, Optional

from content_pipeline.config import settings
from content_pipeline.services.pipeline import PipelineOrchestrator, PipelineError


def read_document(path: str) -> str:
    """Read the requirements document from a file path, or stdin for '-'."""
    if path == "-":
        return sys.stdin.read()
    with open(path, "r", encoding="utf-8") as f:
        return f.read()


async def generate(document: str, as_json: bool = False) -> int:
    """
    Run the pipeline and print its output.

    Returns:
        Process exit code (0 on success, 1 on pipeline failure)
    """
    orchestrator = PipelineOrchestrator()
    try:
        run = await orchestrator.run_pipeline(document)
    except PipelineError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if as_json:
        print(json.dumps(run.to_result().model_dump(mode="json", by_alias=True), indent=2))
    else:
        print(run.final_post)
        status = "passed" if run.fact_check_passed else "not passed"
        print(f"\nRun {run.run_id} (fact-check {status})", file=sys.stderr)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for the content-pipeline command."""
    parser = argparse.ArgumentParser(
        description="Turn a product requirements document into a fact-checked blog post"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    generate_parser = subparsers.add_parser("generate", help="Run the pipeline on a document")
    generate_parser.add_argument(
        "document",
        help="Path to the requirements document ('-' reads stdin)"
    )
    generate_parser.add_argument(
        "--json",
        action="store_true",
        help="Print the full run result as JSON"
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        document = read_document(args.document)
    except OSError as e:
        print(f"Error: cannot read {args.document}: {e}", file=sys.stderr)
        return 1

    if not document.strip():
        print("Error: requirements document is empty", file=sys.stderr)
        return 1

    return asyncio.run(generate(document.strip(), as_json=args.json))


if __name__ == "__main__":
    sys.exit(main())
