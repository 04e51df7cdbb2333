"""Swift output-file-map resolution for SwiftDriver steps.

The driver's compiler invocation names a JSON side file mapping each Swift
source to its per-file outputs:

    {
      "": {"swift-dependencies": "/.../master.swiftdeps"},
      "/src/App/a.swift": {"object": "/.../a.o", "swiftmodule": "/.../a~partial.swiftmodule"}
    }

Each source with an ``object`` entry becomes one rule sharing the driver's
invocation as its recipe.
"""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Sequence

from xcmake.build.cursor import DirectoryChange
from xcmake.build.escaping import (
    LOG_TOKEN,
    dollar_escape,
    make_target_escape,
    recipe_path,
    shell_unescape,
)
from xcmake.exceptions import StepSkipped
from xcmake.models.rules import Rule, RuleTable

logger = logging.getLogger(__name__)

SWIFT_SUFFIX = ".swift"

_DRIVER_PREFIX_RE = re.compile(r"^builtin-SwiftDriver\s+--\s+")
_PARSEABLE_OUTPUT_RE = re.compile(r"\s+-parseable-output(?=\s|$)")
_OUTPUT_FILE_MAP_RE = re.compile(rf"(?:^|\s)-output-file-map\s+({LOG_TOKEN})")


def strip_driver_invocation(line: str) -> str:
    """Return the real swiftc invocation from a captured driver record."""
    command = _DRIVER_PREFIX_RE.sub("", line)
    return _PARSEABLE_OUTPUT_RE.sub("", command)


def find_map_path(*candidates: str) -> str | None:
    """Plain path of the first ``-output-file-map`` argument among candidates."""
    for text in candidates:
        m = _OUTPUT_FILE_MAP_RE.search(text)
        if m:
            return shell_unescape(m.group(1))
    return None


def load_output_file_map(path: Path) -> dict:
    try:
        with open(path, encoding="utf-8") as f:
            mapping = json.load(f)
    except OSError as e:
        raise StepSkipped(f"cannot open output file map {path}: {e.strerror or e}") from e
    except (ValueError, RecursionError) as e:
        raise StepSkipped(f"output file map {path} is not valid JSON: {e}") from e
    if not isinstance(mapping, dict):
        raise StepSkipped(f"output file map {path} is not a JSON object")
    return mapping


def object_pairs(mapping: dict) -> list[tuple[str, str]]:
    """(source, object) pairs for Swift sources, sorted by source path."""
    pairs = []
    for source in sorted(mapping):
        entry = mapping[source]
        if not source.endswith(SWIFT_SUFFIX) or not isinstance(entry, dict):
            continue
        obj = entry.get("object")
        if isinstance(obj, str) and obj:
            pairs.append((source, obj))
    return pairs


def resolve_driver_rules(
    record: str,
    directory: DirectoryChange,
    table: RuleTable,
    exports: Sequence[str] = (),
) -> list[tuple[str, str]]:
    """
    Register one rule per mapped Swift source of a driver invocation.

    Args:
        record: The captured driver invocation record.
        directory: The step's working directory.
        table: Rule table receiving the rules (first registration wins).
        exports: Captured ``export`` records run before the invocation.

    Returns:
        Every mapped (source, object) pair, in source order; pairs whose
        object already had a rule are not registered again.

    Raises:
        StepSkipped: no map argument, or the map cannot be loaded.
    """
    invocation = strip_driver_invocation(record)
    map_arg = find_map_path(record, invocation)
    if map_arg is None:
        raise StepSkipped("no -output-file-map argument in driver invocation")

    map_path = Path(map_arg)
    if not map_path.is_absolute():
        map_path = Path(directory.path) / map_path
    mapping = load_output_file_map(map_path)

    command = f"{directory.recipe_prefix(exports)} && {dollar_escape(invocation)}"
    pairs = object_pairs(mapping)
    added = 0
    for source, obj in pairs:
        rule = Rule(
            target=make_target_escape(obj),
            prerequisites=[make_target_escape(source)],
            working_dir=directory.path,
            recipe=f"{command} && touch {recipe_path(obj)}",
        )
        if table.add(rule):
            added += 1
        else:
            logger.debug("Target already registered, keeping first rule: %s", rule.target)

    logger.debug("Output file map %s: %d of %d sources registered", map_path, added, len(pairs))
    return pairs
