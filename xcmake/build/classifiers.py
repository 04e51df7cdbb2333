"""Step classifiers: recognize build-step records in an Xcode build log.

An Xcode log describes each step as a marker record followed by an indented
window of detail records:

    CompileC /b/Objects-normal/arm64/main.o /src/main.m normal arm64 objective-c ...
        cd /src
        /Applications/Xcode.app/.../clang -x objective-c ... -c /src/main.m -o /b/.../main.o

Classifiers are tried in order; the first whose pattern matches the current
record consumes its window from the cursor and registers rules in the table.
A window that is incomplete raises StepSkipped; records it did not consume
stay in the cursor for the next dispatch.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Callable

from xcmake.build.cursor import DirectoryChange, LineCursor
from xcmake.build.escaping import (
    LOG_TOKEN,
    canonical_path,
    dollar_escape,
    recipe_path,
    shell_unescape,
)
from xcmake.build.link import OBJECT_SUFFIX, build_link_rule
from xcmake.build.output_file_map import resolve_driver_rules
from xcmake.exceptions import StepSkipped
from xcmake.models.rules import BuildStep, Rule, RuleTable, StepKind

logger = logging.getLogger(__name__)

COMPILE_C_RE = re.compile(rf"^CompileC\s+({LOG_TOKEN})\s+({LOG_TOKEN})(?:\s|$)")
SWIFT_DRIVER_RE = re.compile(r"^(?:SwiftDriver|CompileSwiftSources)(?:\s|$)")
SWIFT_COMPILE_RE = re.compile(r"^(?:CompileSwift|SwiftCompile)(?:\s|$)")
LINK_RE = re.compile(rf"^Ld\s+({LOG_TOKEN})(?:\s|$)")
POST_LINK_RE = re.compile(r"^/usr/bin/(?:codesign|touch)\s")

_RESPONSE_FILE_RE = re.compile(r"^Using response file:")
_EXPORT_RE = re.compile(r"^export\s")
_TASK_EXECUTION_PREFIX_RE = re.compile(r"^builtin-swiftTaskExecution\s+--\s+")
_FRONTEND_RE = re.compile(r"(?:^|\s)-frontend(?:\s|$)")
_COMPILE_FLAG_RE = re.compile(r"(?:^|\s)-c(?:\s|$)")
_PRIMARY_FILE_RE = re.compile(rf"(?:^|\s)-primary-file\s+({LOG_TOKEN})")
_OUTPUT_RE = re.compile(rf"(?:^|\s)-o\s+({LOG_TOKEN})")


@dataclass(frozen=True)
class Classifier:
    kind: StepKind
    pattern: re.Pattern
    parse: Callable[[re.Match, LineCursor, RuleTable], BuildStep]


@dataclass
class _Command:
    line: str
    exports: list[str]
    records: list[str]

    def recipe(self, directory: DirectoryChange) -> str:
        return f"{directory.recipe_prefix(self.exports)} && {dollar_escape(self.line)}"


def _require_directory(cursor: LineCursor) -> DirectoryChange:
    directory = cursor.next_directory_change()
    if directory is None:
        found = cursor.peek()
        raise StepSkipped(
            "expected a 'cd' record, found "
            + ("end of log" if found is None else repr(found))
        )
    return directory


def _is_step_marker(line: str) -> bool:
    return match_step(line) is not None


def _take_command(cursor: LineCursor) -> _Command:
    """Consume the invocation record of a step window.

    ``Using response file:`` records are skipped and ``export`` records are
    kept so the recipe runs with the same environment. The end of the log or
    the next step's marker means the command is missing.
    """
    exports: list[str] = []
    records: list[str] = []
    while True:
        line = cursor.next_nonblank_line(stop=_is_step_marker)
        if line is None:
            raise StepSkipped("missing command record")
        records.append(line)
        if _RESPONSE_FILE_RE.match(line):
            continue
        if _EXPORT_RE.match(line):
            exports.append(line)
            continue
        return _Command(line=line, exports=exports, records=records)


def _register(table: RuleTable, rule: Rule) -> None:
    if not table.add(rule):
        logger.debug("Target already registered, keeping first rule: %s", rule.target)


def parse_compile_c(match: re.Match, cursor: LineCursor, table: RuleTable) -> BuildStep:
    raw_obj, raw_source = match.group(1), match.group(2)
    obj = shell_unescape(raw_obj)
    source = shell_unescape(raw_source)
    directory = _require_directory(cursor)
    command = _take_command(cursor)

    _register(
        table,
        Rule(
            target=canonical_path(raw_obj),
            prerequisites=[canonical_path(raw_source)],
            working_dir=directory.path,
            recipe=f"{command.recipe(directory)} && touch {recipe_path(obj)}",
        )
    )
    return BuildStep(
        kind=StepKind.COMPILE_C,
        records=(match.string, directory.record, *command.records),
        working_dir=directory.path,
        objects=(obj,),
        sources=(source,),
        command=command.line,
    )


def parse_swift_driver(match: re.Match, cursor: LineCursor, table: RuleTable) -> BuildStep:
    directory = _require_directory(cursor)
    command = _take_command(cursor)
    pairs = resolve_driver_rules(command.line, directory, table, command.exports)
    return BuildStep(
        kind=StepKind.SWIFT_DRIVER,
        records=(match.string, directory.record, *command.records),
        working_dir=directory.path,
        objects=tuple(obj for _, obj in pairs),
        sources=tuple(src for src, _ in pairs),
        command=command.line,
    )


def parse_swift_compile(match: re.Match, cursor: LineCursor, table: RuleTable) -> BuildStep:
    directory = _require_directory(cursor)
    command = _take_command(cursor)
    command.line = _TASK_EXECUTION_PREFIX_RE.sub("", command.line)
    line = command.line
    if not (_FRONTEND_RE.search(line) and _COMPILE_FLAG_RE.search(line)):
        raise StepSkipped("expected a 'swift -frontend -c' invocation")

    raw_sources = _PRIMARY_FILE_RE.findall(line)
    raw_objects = _OUTPUT_RE.findall(line)
    sources = [shell_unescape(p) for p in raw_sources]
    objects = [shell_unescape(p) for p in raw_objects]
    if not sources or len(sources) != len(objects):
        raise StepSkipped(
            f"{len(sources)} -primary-file arguments but {len(objects)} -o arguments"
        )

    base_recipe = command.recipe(directory)
    for raw_source, raw_obj, obj in zip(raw_sources, raw_objects, objects):
        _register(
            table,
            Rule(
                target=canonical_path(raw_obj),
                prerequisites=[canonical_path(raw_source)],
                working_dir=directory.path,
                recipe=f"{base_recipe} && touch {recipe_path(obj)}",
            )
        )
    return BuildStep(
        kind=StepKind.SWIFT_COMPILE,
        records=(match.string, directory.record, *command.records),
        working_dir=directory.path,
        objects=tuple(objects),
        sources=tuple(sources),
        command=line,
    )


def parse_link(match: re.Match, cursor: LineCursor, table: RuleTable) -> BuildStep:
    output = shell_unescape(match.group(1))
    directory = _require_directory(cursor)
    command = _take_command(cursor)

    rule, note = build_link_rule(output, command.line, directory, table, command.exports)
    _register(table, rule)
    if not output.endswith(OBJECT_SUFFIX):
        table.add_linked_product(rule.target)
    return BuildStep(
        kind=StepKind.LINK,
        records=(match.string, directory.record, *command.records),
        working_dir=directory.path,
        objects=(output,),
        command=command.line,
        notes=(note,) if note else (),
    )


def parse_post_link(match: re.Match, cursor: LineCursor, table: RuleTable) -> BuildStep:
    table.post_link_recipe.append(dollar_escape(match.string))
    return BuildStep(kind=StepKind.CODESIGN, records=(match.string,), command=match.string)


CLASSIFIERS: list[Classifier] = [
    Classifier(StepKind.COMPILE_C, COMPILE_C_RE, parse_compile_c),
    Classifier(StepKind.SWIFT_DRIVER, SWIFT_DRIVER_RE, parse_swift_driver),
    Classifier(StepKind.SWIFT_COMPILE, SWIFT_COMPILE_RE, parse_swift_compile),
    Classifier(StepKind.LINK, LINK_RE, parse_link),
    Classifier(StepKind.CODESIGN, POST_LINK_RE, parse_post_link),
]


def match_step(line: str) -> tuple[Classifier, re.Match] | None:
    """First classifier whose marker matches line, with its match."""
    for classifier in CLASSIFIERS:
        m = classifier.pattern.match(line)
        if m:
            return classifier, m
    return None
