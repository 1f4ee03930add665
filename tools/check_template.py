#!/usr/bin/env python3
"""Report labels, dangling jumps and missing files referenced by a template."""

from __future__ import annotations

import argparse
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Sequence, Set

REPO_ROOT = Path(__file__).resolve().parents[1]

if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from mecca.errors import MeccaError
from mecca.fields import split_fields
from mecca.resources import FileLoader, decode_text
from mecca.scanner import iter_spans, parse_labels

FILE_TOKENS = {"include", "ansi", "copy", "ansiconvert", "display", "link", "onexit"}
JUMP_TOKENS = {"goto", "jump"}


@dataclass
class TemplateReport:
    labels: List[str] = field(default_factory=list)
    jump_targets: Set[str] = field(default_factory=set)
    file_refs: Set[str] = field(default_factory=set)
    missing_labels: List[str] = field(default_factory=list)
    missing_files: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.missing_labels and not self.missing_files


def collect_references(text: str) -> TemplateReport:
    report = TemplateReport(labels=sorted(parse_labels(text)))
    for span in iter_spans(text):
        if span.token is None:
            continue
        fields = split_fields(span.token)
        for index, name in enumerate(fields):
            keyword = name.lower()
            following = fields[index + 1] if index + 1 < len(fields) else None
            if following is None:
                continue
            if keyword in JUMP_TOKENS:
                report.jump_targets.add(following.lower())
            elif keyword in FILE_TOKENS:
                report.file_refs.add(following)
            elif keyword == "on" and following.lower() == "exit" and index + 2 < len(fields):
                report.file_refs.add(fields[index + 2])
    return report


def check_template(root: Path, name: str) -> TemplateReport:
    loader = FileLoader(root)
    report = collect_references(decode_text(loader.read(name)))
    known = set(report.labels)
    report.missing_labels = sorted(report.jump_targets - known)
    for ref in sorted(report.file_refs):
        try:
            loader.resolve(ref).stat()
        except (MeccaError, OSError):
            report.missing_files.append(ref)
    return report


def parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Check a MECCA template for broken references.")
    parser.add_argument("template", help="Template file, relative to the template root.")
    parser.add_argument("--root", default=".", help="Template root directory.")
    return parser.parse_args(argv)


def main(argv: Sequence[str]) -> None:
    args = parse_args(argv[1:])
    root = Path(args.root)
    try:
        report = check_template(root, args.template)
    except MeccaError as exc:
        print(f"Cannot read {args.template}: {exc}")
        sys.exit(1)

    print(f"Template: {root / args.template}")
    print(f"Labels: {', '.join(report.labels) if report.labels else '(none)'}")
    if report.missing_labels:
        print("Jumps to undefined labels:")
        for label in report.missing_labels:
            print(f"  - {label}")
    if report.missing_files:
        print("Missing files:")
        for ref in report.missing_files:
            print(f"  - {ref}")
    if not report.ok:
        sys.exit(1)
    print("No problems found.")


if __name__ == "__main__":
    main(sys.argv)
