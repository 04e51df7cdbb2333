"""Forward-only reader over a captured build log."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Iterable, Iterator, Sequence

from xcmake.build.escaping import dollar_escape, shell_escape, shell_unescape

# "cd <path>", optionally wrapped in /usr/bin/time
_CD_RE = re.compile(r"^(?:/usr/bin/time\s+)?cd\s+(\S.*)$")


@dataclass(frozen=True)
class DirectoryChange:
    path: str  # plain path, log escaping removed
    record: str

    @property
    def prefix(self) -> str:
        """Recipe prefix that changes into this directory."""
        return f"cd {dollar_escape(shell_escape(self.path))}"

    def recipe_prefix(self, exports: Sequence[str] = ()) -> str:
        """``cd`` prefix followed by the step's captured ``export`` records."""
        return " && ".join([self.prefix, *(dollar_escape(e) for e in exports)])


class LineCursor:
    """
    Single pass over log records with one record of lookahead.

    Records are stripped of surrounding whitespace. A record handed out by
    next_line() is never returned again; peek() does not consume.
    """

    def __init__(self, lines: Iterable[str]) -> None:
        self._lines: Iterator[str] = iter(lines)
        self._pending: str | None = None
        self._has_pending = False
        self.line_number = 0

    def peek(self) -> str | None:
        if not self._has_pending:
            raw = next(self._lines, None)
            self._pending = None if raw is None else raw.rstrip("\r\n").strip()
            self._has_pending = True
        return self._pending

    def next_line(self) -> str | None:
        line = self.peek()
        self._has_pending = False
        self._pending = None
        if line is not None:
            self.line_number += 1
        return line

    def skip_blank(self) -> None:
        while self.peek() == "":
            self.next_line()

    def next_nonblank_line(self, stop: Callable[[str], bool] | None = None) -> str | None:
        """Consume and return the next non-blank record.

        Returns None at the end of the log, or without consuming anything
        when ``stop`` accepts the record.
        """
        self.skip_blank()
        line = self.peek()
        if line is None or (stop is not None and stop(line)):
            return None
        return self.next_line()

    def next_directory_change(self) -> DirectoryChange | None:
        """Consume the next record if it is a ``cd`` record.

        Returns None, leaving the record in place, when it is anything else.
        """
        self.skip_blank()
        line = self.peek()
        if line is None:
            return None
        m = _CD_RE.match(line)
        if not m:
            return None
        self.next_line()
        return DirectoryChange(path=shell_unescape(m.group(1).strip()), record=line)

    def __iter__(self) -> Iterator[str]:
        while True:
            line = self.next_line()
            if line is None:
                return
            yield line
