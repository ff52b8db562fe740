"""Merge Go-style coverage profiles found under a directory into one file."""

from __future__ import annotations

import os
import re
import sys
from collections.abc import Sequence
from pathlib import Path

USAGE = (
    "Usage: coverage [root] [out]\n\n"
    "Collects all .coverprofile files rooted in [root] and concatenates them "
    "into a single file at [out].\n"
    "[root] defaults to the current directory, [out] to 'coverage.out'."
)

_INT = re.compile(r"[+-]?\d+")


class CoverageError(Exception):
    """Raised when profiles cannot be read, parsed or written."""


def _parse_int(text: str, what: str, line: str) -> int:
    if not _INT.fullmatch(text):
        raise CoverageError(f"incorrect {what} in coverprofile line: {line}")
    return int(text)


def _read_profile(path: str, coverage: dict[str, list[int]]) -> None:
    try:
        with open(path, encoding="utf-8", newline="") as handle:
            for raw in handle:
                line = raw.rstrip("\n").removesuffix("\r")
                if line.startswith("mode:"):
                    continue
                parts = line.split(" ")
                if len(parts) != 3:
                    raise CoverageError(f"incorrect coverprofile line: {line}")
                block, stmt_text, count_text = parts
                num_stmt = _parse_int(stmt_text, "num stmt", line)
                count = _parse_int(count_text, "count", line)
                if block in coverage:
                    coverage[block][1] += count
                else:
                    coverage[block] = [num_stmt, count]
    except OSError as exc:
        raise CoverageError(f"could not read {path}: {exc}") from exc


def merge_profiles(root: str | os.PathLike, out: str | os.PathLike) -> list[str]:
    """Sum counts of all .coverprofile files under root and write them to out.

    Returns the merged lines, sorted, as written.
    """
    root = os.fspath(root)
    out = os.fspath(out)
    out_abs = os.path.abspath(out)
    coverage: dict[str, list[int]] = {}

    def on_error(err: OSError) -> None:
        raise CoverageError(f"could not walk directory structure: {err}") from err

    for dirpath, dirnames, filenames in os.walk(root, onerror=on_error):
        dirnames.sort()
        for name in sorted(filenames):
            path = os.path.join(dirpath, name)
            if os.path.splitext(path)[1] != ".coverprofile":
                continue
            if os.path.abspath(path) == out_abs:
                continue
            _read_profile(path, coverage)

    lines = sorted(f"{block} {num_stmt} {count}" for block, (num_stmt, count) in coverage.items())
    try:
        Path(out).write_text("\n".join(lines), encoding="utf-8")
    except OSError as exc:
        raise CoverageError(f"could not write to out: {exc}") from exc
    return lines


def main(argv: Sequence[str] | None = None) -> int:
    """Command line entry point: coverage root [out]."""
    args = list(sys.argv[1:] if argv is None else argv)
    if len(args) == 1:
        root, out = args[0], "coverage.out"
    elif len(args) == 2:
        root, out = args
    else:
        print(USAGE)
        return 1

    try:
        merge_profiles(root, out)
    except CoverageError as exc:
        print(f"coverage: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())