"""CLI entrypoint for the surf client error and timestamp utilities."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any

from surfcore.common.config_loader import load_client_config
from surfcore.common.constants import EXIT_HANDLED_FAILURE, EXIT_HARD_FAIL, EXIT_SUCCESS
from surfcore.common.errors import ApiRequestError, SurfCoreError
from surfcore.common.http import ApiClient
from surfcore.common.logging import build_logger
from surfcore.errors.classify import HttpFailure, TransportFailure, TransportSignal
from surfcore.errors.handler import ErrorHandler
from surfcore.timestamps.parser import format_report_time, parse_reported_timestamp


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--config-dir", default="./config")
    parser.add_argument("--overlay-config-dir", default=None)
    parser.add_argument("--log-level", default=None, choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    parser.add_argument("--log-file", default=None)
    sub = parser.add_subparsers(dest="command", required=True)

    classify_cmd = sub.add_parser("classify", help="classify an HTTP failure")
    classify_cmd.add_argument("--status", type=int, required=True)
    classify_cmd.add_argument("--body", default=None)
    classify_cmd.add_argument("--content-type", default=None)

    transport_cmd = sub.add_parser("transport", help="classify a transport failure signal")
    transport_cmd.add_argument("signal", choices=[signal.value for signal in TransportSignal])

    ts_cmd = sub.add_parser("parse-timestamp", help="parse backend report timestamps")
    ts_cmd.add_argument("raw", nargs="+")

    fetch_cmd = sub.add_parser("fetch", help="GET an API path and report any failure")
    fetch_cmd.add_argument("path")
    return parser.parse_args(argv)


def _emit(payload: dict[str, Any]) -> None:
    sys.stdout.write(json.dumps(payload, ensure_ascii=False, sort_keys=True) + "\n")


def _report(handler: ErrorHandler, raw: Any, context: str) -> int:
    error = handler.handle(raw, context=context)
    _emit({"error": error.to_dict(), "presentation": handler.presenter.present(error).to_dict()})
    return EXIT_HANDLED_FAILURE


def run_command(args: argparse.Namespace) -> int:
    config = load_client_config(
        Path(args.config_dir),
        overlay_config_dir=Path(args.overlay_config_dir) if args.overlay_config_dir else None,
    )
    logger = build_logger(
        "surfcore",
        level=args.log_level or config.log_level,
        log_path=Path(args.log_file) if args.log_file else None,
    )
    handler = ErrorHandler(logger)

    if args.command == "classify":
        body = args.body.encode("utf-8") if args.body is not None else None
        failure = HttpFailure(status_code=args.status, body=body, content_type=args.content_type)
        return _report(handler, failure, context="cli.classify")

    if args.command == "transport":
        return _report(handler, TransportFailure(TransportSignal(args.signal)), context="cli.transport")

    if args.command == "parse-timestamp":
        exit_code = EXIT_SUCCESS
        for raw in args.raw:
            parsed = parse_reported_timestamp(raw)
            if not parsed.ok:
                exit_code = EXIT_HANDLED_FAILURE
            _emit(
                {
                    "raw": raw,
                    "instant": parsed.instant.isoformat() if parsed.ok else None,
                    "display": (
                        format_report_time(parsed.instant, config.display_format)
                        if parsed.ok
                        else config.timestamp_fallback
                    ),
                }
            )
        return exit_code

    if args.command == "fetch":
        with ApiClient(
            config.base_url,
            error_handler=handler,
            timeout=config.timeout,
            retry=config.retry,
        ) as client:
            try:
                payload = client.get_json(args.path)
            except ApiRequestError as exc:
                _emit({"error": exc.error.to_dict(), "presentation": handler.presenter.present(exc.error).to_dict()})
                return EXIT_HANDLED_FAILURE
        _emit({"data": payload})
        return EXIT_SUCCESS

    raise ValueError(f"Unknown command: {args.command}")


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv if argv is not None else sys.argv[1:])
    try:
        return run_command(args)
    except SurfCoreError as exc:
        sys.stderr.write(f"{exc.error_code}: {exc}\n")
        return EXIT_HARD_FAIL


if __name__ == "__main__":
    raise SystemExit(main())
