"""
Command line entry point.

Runs a pipeline definition over an input and prints every step's result.

Usage:
    stepline pipeline.yaml input.txt
    cat input.txt | stepline pipeline.json --pretty
    stepline pipeline.json input.txt --json   # Machine-readable run report
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from stepline.config import config
from stepline.errors import EmptyPipeline
from stepline.errors import PipelineDefinitionError
from stepline.formatting import describe_pipeline
from stepline.formatting import describe_step
from stepline.formatting import prettify_content
from stepline.loader import load_definition
from stepline.pipeline import Pipeline
from stepline.pipeline import PipelineRun

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_BAD_DEFINITION = 2


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="[%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="stepline",
        description="Apply a pipeline of encode/decode, compress, extract and AES steps to text.",
    )
    parser.add_argument("pipeline", type=Path, help="Pipeline definition (.json, .yaml or .yml)")
    parser.add_argument(
        "input",
        type=Path,
        nargs="?",
        help="Input file (default: read from stdin)",
    )
    parser.add_argument(
        "--pretty",
        action="store_true",
        default=config.PRETTY_OUTPUT,
        help="Pretty-print JSON and XML results",
    )
    parser.add_argument(
        "--json",
        dest="as_json",
        action="store_true",
        help="Print the whole run as a JSON document",
    )
    parser.add_argument(
        "--lenient",
        action="store_true",
        help="Log schema errors instead of rejecting the definition",
    )
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    verbosity.add_argument("-q", "--quiet", action="store_true", help="Only log errors")
    return parser


def _read_input(path: Path | None) -> str:
    """Read the pipeline input, dropping the one line ending files and echo add."""
    text = sys.stdin.read() if path is None else path.read_text(encoding="utf-8")
    if text.endswith("\r\n"):
        return text[:-2]
    if text.endswith("\n"):
        return text[:-1]
    return text


def render_run(run: PipelineRun, pretty: bool = False) -> str:
    """Render a run as text, one block per executed step."""
    blocks: list[str] = []
    for index, result in enumerate(run.results):
        header = f"Step {index + 1} Result: {describe_step(result.step)}"
        content = prettify_content(result.content) if pretty else result.content
        block = [header, "-" * len(header)]
        if result.warning:
            block.append(f"Warning: {result.warning}")
        block.append(content)
        blocks.append("\n".join(block))

    if run.has_error() and run.failed_index is not None:
        blocks.append(f"Error in step {run.failed_index + 1} ({run.failed_step.type}): {run.error}")
    return "\n\n".join(blocks)


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    level = config.LOG_LEVEL
    if args.verbose:
        level = "DEBUG"
    elif args.quiet:
        level = "ERROR"
    configure_logging(level)

    try:
        steps = load_definition(args.pipeline, strict=not args.lenient)
    except PipelineDefinitionError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_BAD_DEFINITION

    try:
        content = _read_input(args.input)
    except (OSError, UnicodeDecodeError) as e:
        print(f"Error: cannot read input: {e}", file=sys.stderr)
        return EXIT_FAILED

    logger.info(f"Running pipeline: {describe_pipeline(steps)}")

    try:
        run = Pipeline(steps).execute(content)
    except EmptyPipeline as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_BAD_DEFINITION

    if args.as_json:
        print(json.dumps(run.to_dict(), indent=2, ensure_ascii=False))
    else:
        print(render_run(run, pretty=args.pretty))

    return EXIT_OK if run.ok else EXIT_FAILED


if __name__ == "__main__":
    sys.exit(main())
