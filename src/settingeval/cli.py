"""Command-line interface for settingeval.

This module provides the CLI for evaluating setting configurations from the
command line.

Usage:
    python -m settingeval evaluate --settings <path-or-json> --setting <name> [options]
    python -m settingeval resolve --settings <path-or-json> [options]

Commands:
    evaluate    Print the effective value of one setting.
    resolve     Print the effective values of all settings.

Exit codes:
    0: Success
    1: The configuration could not be loaded or evaluated
    2: Unknown command or unknown setting
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Any

from .errors import SettingEvalError, UnknownSettingError
from .loader import load_entries
from .resolver import SettingsResolver


def _parse_override(text: str) -> tuple[str, Any]:
    """Split a ``NAME=VALUE`` override. VALUE is JSON, or a plain string."""
    name, sep, raw = text.partition("=")
    if not sep or not name:
        raise argparse.ArgumentTypeError(f"override must look like NAME=VALUE, got '{text}'")
    try:
        return name, json.loads(raw)
    except json.JSONDecodeError:
        return name, raw


def _common_arguments(p: argparse.ArgumentParser) -> None:
    p.add_argument("--settings", required=True, help="Settings JSON/YAML file path or inline JSON")
    p.add_argument("--context", default="{}", help="Inline JSON object of request attributes")
    p.add_argument(
        "--override",
        action="append",
        default=[],
        type=_parse_override,
        metavar="NAME=VALUE",
        help="Force a setting to a value (repeatable)",
    )
    p.add_argument("--log-level", default="WARNING", help="Logging level (DEBUG, INFO, WARNING, ...)")


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _prepare(args: argparse.Namespace) -> tuple[SettingsResolver, dict[str, Any], dict[str, Any]]:
    _configure_logging(args.log_level)
    resolver = SettingsResolver(load_entries(args.settings))
    context = json.loads(args.context)
    if not isinstance(context, dict):
        raise SettingEvalError("--context must be a JSON object")
    return resolver, context, dict(args.override)


def _cmd_evaluate(argv: list[str]) -> int:
    """Execute the 'evaluate' command.

    Args:
        argv: Command-line arguments after 'evaluate'.

    Returns:
        int: Exit code.
    """
    p = argparse.ArgumentParser(prog="settingeval evaluate")
    _common_arguments(p)
    p.add_argument("--setting", required=True, help="Name of the setting to evaluate")
    p.add_argument("--explain", action="store_true")
    args = p.parse_args(argv)

    try:
        resolver, context, overrides = _prepare(args)
        answers = resolver.resolve(context, overrides, only=args.setting, explain=args.explain)
    except UnknownSettingError as exc:
        print(str(exc), file=sys.stderr)
        return 2
    except (SettingEvalError, json.JSONDecodeError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    answer = answers[args.setting]
    if args.explain:
        print(json.dumps(answer.explanation, indent=2, sort_keys=True, default=str))
    else:
        print(json.dumps(answer.value))
    return 0


def _cmd_resolve(argv: list[str]) -> int:
    """Execute the 'resolve' command.

    Args:
        argv: Command-line arguments after 'resolve'.

    Returns:
        int: Exit code.
    """
    p = argparse.ArgumentParser(prog="settingeval resolve")
    _common_arguments(p)
    args = p.parse_args(argv)

    try:
        resolver, context, overrides = _prepare(args)
        answers = resolver.resolve(context, overrides)
    except (SettingEvalError, json.JSONDecodeError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    print(json.dumps({name: answer.value for name, answer in answers.items()}, indent=2))
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the settingeval CLI.

    Args:
        argv: Command-line arguments. If None, uses sys.argv[1:].

    Returns:
        int: Exit code.
            - 0: Success (or help shown)
            - 1: Load or evaluation error
            - 2: Unknown command or unknown setting
    """
    argv = list(sys.argv[1:] if argv is None else argv)
    if not argv or argv[0] in {"-h", "--help"}:
        print("Usage: settingeval <command> [args]\n\nCommands:\n  evaluate\n  resolve")
        return 0

    cmd, rest = argv[0], argv[1:]
    if cmd == "evaluate":
        return _cmd_evaluate(rest)
    if cmd == "resolve":
        return _cmd_resolve(rest)

    print(f"Unknown command: {cmd}", file=sys.stderr)
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
