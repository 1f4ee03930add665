#!/usr/bin/env python3
"""Render a MECCA template to the terminal."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Dict, List, Sequence

REPO_ROOT = Path(__file__).resolve().parents[1]

if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from mecca import Interpreter, MeccaError, load_settings
from mecca.settings import InterpreterSettings


def parse_variables(pairs: Sequence[str]) -> Dict[str, str]:
    variables: Dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise ValueError(f"expected key=value, got {pair!r}")
        variables[key] = value
    return variables


def parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Render a MECCA template to stdout.")
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("template", nargs="?", help="Template file, relative to the template root.")
    source.add_argument("-e", "--expr", help="Render this template text instead of a file.")
    parser.add_argument("--root", help="Template root directory (overrides the settings file).")
    parser.add_argument("--settings", help="JSON settings file.")
    parser.add_argument(
        "--var",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Variable available to the template; may be repeated.",
    )
    parser.add_argument(
        "--color",
        choices=("auto", "always", "never"),
        help="Override the color mode from the settings file.",
    )
    parser.add_argument("--verbose", action="store_true", help="Log interpreter decisions to stderr.")
    return parser.parse_args(argv)


def summary_lines(interpreter: Interpreter) -> List[str]:
    lines: List[str] = []
    selection = interpreter.last_menu_selection()
    if selection:
        lines.append(f"Menu selection: {selection}")
    answers = interpreter.questionnaire_log()
    if answers:
        lines.append("Questionnaire:")
        lines.extend(f" - {answer}" for answer in answers)
    return lines


def main(argv: Sequence[str]) -> None:
    args = parse_args(argv[1:])
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    settings = load_settings(args.settings) if args.settings else InterpreterSettings()
    if args.color:
        settings.color = args.color

    try:
        variables = parse_variables(args.var)
    except ValueError as exc:
        print(f"Invalid --var: {exc}", file=sys.stderr)
        sys.exit(2)

    interpreter = Interpreter(
        settings=settings,
        template_root=args.root,
        reader=sys.stdin,
        writer=sys.stdout,
    )
    try:
        if args.expr is not None:
            interpreter.render_string(args.expr, variables)
        else:
            interpreter.render_template(args.template, variables)
    except MeccaError as exc:
        print(f"Failed to render {args.template}: {exc}", file=sys.stderr)
        sys.exit(1)

    lines = summary_lines(interpreter)
    if lines:
        print()
        for line in lines:
            print(line)


if __name__ == "__main__":
    main(sys.argv)
