"""Rule set serialization.

The emitted text is a makefile:

    # Generated by xcmake from build.log
    # Invocation: xcodebuild -scheme App build
    # Captured: 2026-01-02T03:04:05+00:00
    .DEFAULT_GOAL := main
    .PHONY: main

    # CompileC /b/main.o /src/main.m normal arm64 ...
    /b/main.o: /src/main.m
        cd /src && clang ... && touch /b/main.o

    main: /b/App.app/App
        /usr/bin/codesign --force --sign - /b/App.app
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

from xcmake.models.rules import Rule, RuleTable

GENERATED_MARKER = "# Generated by xcmake"
INVOCATION_PREFIX = "# Invocation: "
CAPTURED_PREFIX = "# Captured: "
TERMINAL_TARGET = "main"


def format_timestamp(mtime: float) -> str:
    return datetime.fromtimestamp(mtime, tz=timezone.utc).isoformat(timespec="seconds")


def format_header(log_name: str, invocation: str, captured: str) -> str:
    # one physical line: the freshness check reads it back verbatim
    invocation = " ".join(invocation.splitlines())
    return (
        f"{GENERATED_MARKER} from {log_name}\n"
        f"{INVOCATION_PREFIX}{invocation}\n"
        f"{CAPTURED_PREFIX}{captured}\n"
        f".DEFAULT_GOAL := {TERMINAL_TARGET}\n"
        f".PHONY: {TERMINAL_TARGET}\n"
    )


def format_comment(record: str) -> str:
    if not record:
        return "\n"
    # a trailing backslash would continue the comment onto the next line
    return "# " + record.rstrip("\\") + "\n"


def format_rule(rule: Rule) -> str:
    head = f"{rule.target}:"
    if rule.prerequisites:
        head += " " + " ".join(rule.prerequisites)
    return f"{head}\n\t{rule.recipe}\n\n"


def format_main(table: RuleTable) -> str:
    head = f"{TERMINAL_TARGET}:"
    if table.linked_products:
        head += " " + " ".join(table.linked_products)
    lines = [head]
    lines.extend(f"\t{command}" for command in table.post_link_recipe)
    return "\n".join(lines) + "\n"


class RuleSetWriter:
    """Accumulates commentary and rule blocks in log order."""

    def __init__(self, log_name: str, invocation: str, captured: str) -> None:
        self._chunks: list[str] = [format_header(log_name, invocation, captured), "\n"]

    def comment(self, record: str) -> None:
        self._chunks.append(format_comment(record))

    def rules(self, rules: list[Rule]) -> None:
        self._chunks.extend(format_rule(rule) for rule in rules)

    def render(self, table: RuleTable) -> str:
        return "".join(self._chunks) + "\n" + format_main(table)


def read_invocation(rule_set_path: str | Path) -> str | None:
    """Invocation recorded in the header of a generated rule set.

    Returns None when the file is missing or was not written by xcmake.
    """
    try:
        with open(rule_set_path, encoding="utf-8", errors="replace") as f:
            first = f.readline()
            if not first.startswith(GENERATED_MARKER):
                return None
            second = f.readline().rstrip("\n")
    except OSError:
        return None
    if not second.startswith(INVOCATION_PREFIX):
        return None
    return second[len(INVOCATION_PREFIX):]
