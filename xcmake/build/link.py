"""Link rule construction from ``Ld`` steps and their ``-filelist`` files."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Sequence

from xcmake.build.cursor import DirectoryChange
from xcmake.build.escaping import LOG_TOKEN, dollar_escape, make_target_escape, shell_unescape
from xcmake.exceptions import StepSkipped
from xcmake.models.rules import Rule, RuleTable

logger = logging.getLogger(__name__)

OBJECT_SUFFIX = ".o"

_TOKEN_RE = re.compile(LOG_TOKEN)


def find_filelist(invocation: str) -> str | None:
    """Raw (log-escaped) ``-filelist`` argument of a linker invocation.

    A ``-filelist`` passed through with ``-Xlinker`` belongs to ld, not to
    the driver, and is ignored.
    """
    tokens = _TOKEN_RE.findall(invocation)
    for i, token in enumerate(tokens[:-1]):
        if token == "-filelist" and (i == 0 or tokens[i - 1] != "-Xlinker"):
            return tokens[i + 1]
    return None


def read_filelist(path: Path) -> list[str]:
    """Object paths listed one per line; blank lines ignored."""
    try:
        with open(path, encoding="utf-8", errors="replace") as f:
            return [line.rstrip("\r\n") for line in f if line.strip()]
    except (OSError, ValueError) as e:
        reason = e.strerror if isinstance(e, OSError) and e.strerror else e
        raise StepSkipped(f"cannot open link file list {path}: {reason}") from e


def link_prerequisites(objects: list[str], table: RuleTable) -> list[str]:
    """
    Canonical prerequisites for a link step.

    An object is kept when the table already has a rule for it, or when it
    is a ``.o`` file built outside this log (prebuilt objects still take part
    in staleness checks). Anything else is dropped.
    """
    prerequisites: list[str] = []
    for obj in objects:
        target = make_target_escape(obj)
        if target in table or obj.endswith(OBJECT_SUFFIX):
            if target not in prerequisites:
                prerequisites.append(target)
        else:
            logger.debug("Dropping untracked link input: %s", obj)
    return prerequisites


def build_link_rule(
    output: str,
    invocation: str,
    directory: DirectoryChange,
    table: RuleTable,
    exports: Sequence[str] = (),
) -> tuple[Rule, str | None]:
    """
    Build the rule for one link step.

    Args:
        output: Plain path of the link output.
        invocation: The captured linker invocation record.
        directory: The step's working directory.
        table: Rule table consulted for known objects.
        exports: Captured ``export`` records run before the invocation.

    Returns:
        (rule, note) where note describes a missing ``-filelist`` option,
        in which case the rule has no prerequisites.

    Raises:
        StepSkipped: the file list is named but cannot be read.
    """
    note = None
    prerequisites: list[str] = []

    filelist_arg = find_filelist(invocation)
    if filelist_arg is None:
        note = f"no -filelist in link invocation for {output}; linking without tracked inputs"
    else:
        filelist = Path(shell_unescape(filelist_arg))
        if not filelist.is_absolute():
            filelist = Path(directory.path) / filelist
        prerequisites = link_prerequisites(read_filelist(filelist), table)

    rule = Rule(
        target=make_target_escape(output),
        prerequisites=prerequisites,
        working_dir=directory.path,
        recipe=f"{directory.recipe_prefix(exports)} && {dollar_escape(invocation)}",
    )
    return rule, note
