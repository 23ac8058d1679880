from __future__ import annotations

import argparse
import asyncio
import json
import logging
import os
import sys
from datetime import datetime
from pathlib import Path
from typing import Sequence

from .ansi_colors import detect_color_mode
from .builtin_handlers import BUILTIN_HANDLERS
from .errors import FrameLoadError, FrameRuntimeError, InvalidFrameError
from .frame_source import FileFrameSource, FrameSource, load_frame
from .http_frame_source import HttpFrameSource
from .presenters import render_execution_result, render_frame_explanation, render_validation_outcome
from .runtime import create_runtime
from .timestamps import SystemClock, parse_timestamp
from .validator import validate_frame

EXIT_OK = 0
EXIT_INVALID = 1
EXIT_LOAD_FAILURE = 2


def _build_source(location: str) -> FrameSource:
    if not location.startswith(("http://", "https://")):
        return FileFrameSource(Path(location))

    token = os.getenv("IBCF_HTTP_TOKEN", "").strip() or None
    raw_timeout = os.getenv("IBCF_HTTP_TIMEOUT_SECS", "15.0").strip()
    try:
        timeout = float(raw_timeout)
    except ValueError:
        timeout = 15.0
    return HttpFrameSource(url=location, token=token, timeout_secs=timeout)


def _configure_logging(level_name: str | None) -> None:
    level_name = (level_name or os.getenv("IBCF_LOG_LEVEL", "") or "WARNING").upper()
    level = getattr(logging, level_name, None)
    if not isinstance(level, int):
        level = logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def validate_command(args: argparse.Namespace) -> int:
    source = _build_source(args.frame)
    try:
        document = source.fetch()
    except FrameLoadError as exc:
        print(f"Parsing or validation failed: {exc}", file=sys.stderr)
        return EXIT_LOAD_FAILURE

    result = validate_frame(document, now=args.now)
    print(render_validation_outcome(result, detect_color_mode(args.color)))
    return EXIT_OK if result.valid else EXIT_INVALID


def explain_command(args: argparse.Namespace) -> int:
    now = args.now or SystemClock().now()
    try:
        frame = load_frame(_build_source(args.frame), now=now)
    except (FrameLoadError, FrameRuntimeError) as exc:
        print(f"Failed to explain frame: {exc}", file=sys.stderr)
        return EXIT_LOAD_FAILURE

    print(render_frame_explanation(frame, now))
    return EXIT_OK


def run_command(args: argparse.Namespace) -> int:
    try:
        payload = json.loads(args.payload) if args.payload is not None else {}
    except json.JSONDecodeError as exc:
        print(f"Invalid --payload JSON: {exc}", file=sys.stderr)
        return EXIT_LOAD_FAILURE

    try:
        document = _build_source(args.frame).fetch()
        runtime = create_runtime(document, BUILTIN_HANDLERS)
    except InvalidFrameError as exc:
        print("Invalid frame:", file=sys.stderr)
        for err in exc.errors:
            print(f"- {err}", file=sys.stderr)
        return EXIT_LOAD_FAILURE
    except (FrameLoadError, FrameRuntimeError) as exc:
        print(f"Failed to start runtime: {exc}", file=sys.stderr)
        return EXIT_LOAD_FAILURE

    result = asyncio.run(runtime.run(args.action, payload))
    print(render_execution_result(result))
    return EXIT_OK if result.success else EXIT_INVALID


def _timestamp_arg(value: str) -> datetime:
    instant = parse_timestamp(value)
    if instant is None:
        raise argparse.ArgumentTypeError(f"not an ISO 8601 timestamp: {value!r}")
    return instant


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ibcf",
        description="Validate, explain and exercise IBCF capability frames (JSON or YAML, path or URL).",
    )
    parser.add_argument("--log-level", default=None, help="Logging level (default: $IBCF_LOG_LEVEL or WARNING)")
    sub = parser.add_subparsers(dest="command", required=True)

    validate = sub.add_parser("validate", help="Validate an IBCF frame file")
    validate.add_argument("frame", help="Path or URL of a frame JSON or YAML document")
    validate.add_argument("--now", type=_timestamp_arg, default=None, help="Evaluate temporal state at this instant")
    validate.add_argument("--color", choices=["auto", "always", "never"], default="auto", help="Color mode (default: auto)")
    validate.set_defaults(func=validate_command)

    explain = sub.add_parser("explain", help="Explain an IBCF frame in human-readable form")
    explain.add_argument("frame", help="Path or URL of a frame JSON or YAML document")
    explain.add_argument("--now", type=_timestamp_arg, default=None, help="Report status at this instant (default: now)")
    explain.set_defaults(func=explain_command)

    run = sub.add_parser("run", help="Run an action under a frame with the built-in demo handlers")
    run.add_argument("frame", help="Path or URL of a frame JSON or YAML document")
    run.add_argument("action", help=f"Action name ({', '.join(sorted(BUILTIN_HANDLERS))})")
    run.add_argument("--payload", default=None, help="JSON payload passed to the handler")
    run.set_defaults(func=run_command)
    return parser


def main(argv: Sequence[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    _configure_logging(args.log_level)
    sys.exit(args.func(args))


if __name__ == "__main__":
    main()
