"""Tests for the path quoting dialects."""

from __future__ import annotations

import re
import shlex

from xcmake.build.escaping import (
    LOG_TOKEN,
    canonical_path,
    dollar_escape,
    dollar_unescape,
    make_target_escape,
    make_target_unescape,
    recipe_path,
    shell_escape,
    shell_unescape,
)


class TestMakeTargetEscape:
    def test_space(self):
        assert make_target_escape("/a/My App/main.o") == "/a/My\\ App/main.o"

    def test_dollar_and_ampersand(self):
        assert make_target_escape("/a/$x&y.o") == "/a/$$x\\&y.o"

    def test_plain_path_unchanged(self):
        assert make_target_escape("/a/b/main.o") == "/a/b/main.o"

    def test_round_trip(self):
        for path in ["/a/My App/$(x)&y.o", "/plain/path.o", "$$"]:
            assert make_target_unescape(make_target_escape(path)) == path


class TestShellEscape:
    def test_specials(self):
        assert shell_escape("a (b)#&$ c") == "a\\ \\(b\\)\\#\\&\\$\\ c"

    def test_single_space_survives_shell_lexing(self):
        path = "/Users/dev/My Project/main.o"
        assert shlex.split(f"touch {shell_escape(path)}") == ["touch", path]

    def test_unescape_inverts(self):
        for path in ["/a/My App (1)/#x&$y", "/no/specials", "a\\ b"]:
            assert shell_unescape(shell_escape(path)) == path

    def test_unescape_leaves_other_backslashes(self):
        assert shell_unescape("a\\nb\\ c") == "a\\nb c"


class TestDollarEscape:
    def test_doubles_every_dollar(self):
        assert dollar_escape("$A ${B} $$") == "$$A $${B} $$$$"

    def test_no_dollar_unchanged(self):
        assert dollar_escape("clang -c main.m") == "clang -c main.m"

    def test_round_trip(self):
        assert dollar_unescape(dollar_escape("x$y$$z")) == "x$y$$z"


class TestComposedForms:
    def test_canonical_path_from_log_escaped(self):
        # Xcode writes spaces backslash-escaped; the canonical form is make-escaped once
        assert canonical_path("/a/My\\ App/main.o") == "/a/My\\ App/main.o"
        assert canonical_path("/a/$x.o") == "/a/$$x.o"

    def test_recipe_path(self):
        assert recipe_path("/a/My $App/x.o") == "/a/My\\ \\$$App/x.o"


class TestLogToken:
    def test_escaped_space_stays_in_token(self):
        line = "clang -filelist /b/My\\ App/x.list -o /b/App"
        assert re.findall(LOG_TOKEN, line) == ["clang", "-filelist", "/b/My\\ App/x.list", "-o", "/b/App"]
