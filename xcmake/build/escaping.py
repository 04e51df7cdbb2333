"""Path quoting dialects for the generated rule set.

Three independent transforms:
  - make target tokens (targets and prerequisites)
  - shell tokens inside a recipe
  - dollar doubling, so recipe text survives make's variable expansion

Use sites apply them in a fixed order and never twice:
  log path   -> shell_unescape -> make_target_escape   (canonical target)
  plain path -> shell_escape   -> dollar_escape        (recipe token)
  log command ----------------> dollar_escape          (recipe body)
"""

from __future__ import annotations

import re

_SHELL_ESCAPE_RE = re.compile(r"([()#&$ ])")
_SHELL_UNESCAPE_RE = re.compile(r"\\([()#&$ ])")

_MAKE_UNESCAPE_RE = re.compile(r"\$\$|\\&|\\ ")

# One argument as Xcode writes it in a log: backslash escapes, no bare whitespace
LOG_TOKEN = r"(?:\\.|[^\s\\])+"


def make_target_escape(path: str) -> str:
    """Escape ``$``, ``&`` and spaces for use as a make target or prerequisite."""
    return path.replace("$", "$$").replace("&", "\\&").replace(" ", "\\ ")


def make_target_unescape(token: str) -> str:
    return _MAKE_UNESCAPE_RE.sub(lambda m: m.group(0)[-1], token)


def shell_escape(path: str) -> str:
    """Backslash-escape ``( ) # & $`` and spaces for a shell recipe."""
    return _SHELL_ESCAPE_RE.sub(r"\\\1", path)


def shell_unescape(token: str) -> str:
    """Invert shell_escape.

    Xcode writes paths in its log with these characters already
    backslash-escaped; only backslashes in front of them are removed.
    """
    return _SHELL_UNESCAPE_RE.sub(r"\1", token)


def dollar_escape(text: str) -> str:
    return text.replace("$", "$$")


def dollar_unescape(text: str) -> str:
    return text.replace("$$", "$")


def canonical_path(log_path: str) -> str:
    """Canonical target form of a path as written in the build log."""
    return make_target_escape(shell_unescape(log_path))


def recipe_path(path: str) -> str:
    """Form of a plain path that is placed inside a recipe line."""
    return dollar_escape(shell_escape(path))
