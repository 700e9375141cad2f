"""Command line entrypoint."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import TextIO

from comptrack.add import AddRequest, add_components
from comptrack.config import CliOverrides, TrackerConfig, load_effective_config
from comptrack.errors import AddError
from comptrack.ids import InvalidIdError
from comptrack.index import IndexSchemaUnsupportedError
from comptrack.logging import (
    AuditEvent,
    JsonlAuditLogger,
    sanitize_arguments,
    setup_base_logger,
    utc_timestamp,
)
from comptrack.workspace import PathOutsideWorkspaceError

AUDIT_LOG_FILENAME = "audit.jsonl"


def build_arg_parser() -> argparse.ArgumentParser:
    """Build argument parser for all subcommands."""
    parser = argparse.ArgumentParser(prog="comptrack")
    parser.add_argument("--root", required=False, default=".")
    parser.add_argument("--data-dir", required=False, default=None)
    parser.add_argument("--max-workers", type=int, required=False, default=None)
    parser.add_argument("--ci", choices=("true", "false"), required=False, default=None)
    parser.add_argument("--verbose", action="store_true")
    subparsers = parser.add_subparsers(dest="command", required=True)

    add_parser = subparsers.add_parser("add", help="track files as components")
    add_parser.add_argument("paths", nargs="+")
    add_parser.add_argument("--id", "-i", default=None)
    add_parser.add_argument("--main", "-m", default=None)
    add_parser.add_argument("--namespace", "-n", default=None)
    add_parser.add_argument("--tests", "-t", nargs="*", default=[])
    add_parser.add_argument("--exclude", "-e", nargs="*", default=[])
    add_parser.add_argument("--override", "-o", action="store_true")

    log_parser = subparsers.add_parser("log", help="show recent audit events")
    log_parser.add_argument("--since", default=None)
    log_parser.add_argument("--limit", type=int, default=20)
    return parser


def error_response(code: str, message: str) -> dict[str, object]:
    return {"ok": False, "error": {"code": code, "message": message}}


def blocked_response(reason: str, hint: str) -> dict[str, object]:
    return {
        "ok": False,
        "blocked": True,
        "error": {"code": "PATH_BLOCKED", "message": reason},
        "hint": hint,
    }


def run_add(config: TrackerConfig, request: AddRequest) -> dict[str, object]:
    """Run one add and return a response envelope; errors become `ok: false`."""
    try:
        results = add_components(config, request)
    except AddError as error:
        response = error_response(error.code, error.message)
    except InvalidIdError as error:
        response = error_response(error.code, str(error))
    except PathOutsideWorkspaceError as error:
        response = blocked_response(error.reason, error.hint)
    except IndexSchemaUnsupportedError as error:
        response = error_response(
            "INDEX_SCHEMA_UNSUPPORTED",
            f"Index schema version {error.found} is not supported (expected {error.expected}).",
        )
    else:
        response = {"ok": True, "result": results.to_dict()}
    _audit(config, request, response)
    return response


def _audit(config: TrackerConfig, request: AddRequest, response: dict[str, object]) -> None:
    error = response.get("error")
    error_code = error.get("code") if isinstance(error, dict) else None
    metadata = sanitize_arguments(
        {
            "paths": list(request.component_paths),
            "id": request.id,
            "main": request.main,
            "namespace": request.namespace,
            "tests": list(request.tests),
            "exclude": list(request.exclude),
            "override": request.override,
        }
    )
    result = response.get("result")
    if isinstance(result, dict):
        added = result.get("added_components", [])
        metadata["added_count"] = len(added) if isinstance(added, list) else 0
        warnings = result.get("warnings", {})
        metadata["warning_ids"] = sorted(warnings) if isinstance(warnings, dict) else []
    JsonlAuditLogger(config.data_dir / AUDIT_LOG_FILENAME).append(
        AuditEvent(
            timestamp=utc_timestamp(),
            command="add",
            ok=response.get("ok") is True,
            error_code=error_code if isinstance(error_code, str) else None,
            metadata=metadata,
        )
    )


def main(argv: list[str] | None = None, out_stream: TextIO | None = None) -> int:
    """Entrypoint for the comptrack command."""
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    out = out_stream or sys.stdout
    setup_base_logger(level=logging.DEBUG if args.verbose else logging.WARNING)

    ci_enabled: bool | None = None
    if args.ci == "true":
        ci_enabled = True
    if args.ci == "false":
        ci_enabled = False
    overrides = CliOverrides(
        data_dir=Path(args.data_dir).resolve() if args.data_dir is not None else None,
        max_workers=args.max_workers,
        ci_enabled=ci_enabled,
    )
    try:
        config = load_effective_config(repo_root=Path(args.root), overrides=overrides)
    except ValueError as error:
        failure = error_response("INVALID_CONFIG", str(error))
        out.write(f"{json.dumps(failure, sort_keys=True, indent=2)}\n")
        return 1

    response: dict[str, object]
    if args.command == "log":
        entries = JsonlAuditLogger(config.data_dir / AUDIT_LOG_FILENAME).read(
            since=args.since, limit=args.limit
        )
        response = {"ok": True, "result": {"entries": entries}}
    else:
        request = AddRequest(
            component_paths=tuple(args.paths),
            id=args.id,
            main=args.main,
            namespace=args.namespace,
            tests=tuple(args.tests),
            exclude=tuple(args.exclude),
            override=args.override,
        )
        response = run_add(config, request)
    out.write(f"{json.dumps(response, sort_keys=True, indent=2)}\n")
    return 0 if response.get("ok") is True else 1


if __name__ == "__main__":
    raise SystemExit(main())
