"""CLI entry point: xcmake.

Subcommands:
    xcmake translate build.log -o Makefile --invocation "xcodebuild -scheme App build"
    xcmake check Makefile build.log --invocation "xcodebuild -scheme App build"
"""

from __future__ import annotations

import os
import sys

import click

from xcmake.core.logging import setup_logging
from xcmake.exceptions import TranslatorError

# Default invocation recorded in the header (overridable via env var)
_DEFAULT_INVOCATION = os.environ.get("XCMAKE_INVOCATION", "")


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Verbose logging")
def main(verbose: bool) -> None:
    """xcmake: turn a captured xcodebuild log into an incremental makefile."""
    setup_logging("DEBUG" if verbose else None)


@main.command("translate")
@click.argument("log_file", type=click.Path(dir_okay=False))
@click.option("-o", "--output", default=None, help="Output makefile (default: stdout)")
@click.option(
    "--invocation",
    default=_DEFAULT_INVOCATION,
    help="Build invocation that produced the log, recorded for freshness checks",
)
def translate_cmd(log_file: str, output: str | None, invocation: str) -> None:
    """Translate LOG_FILE into make rules."""
    from xcmake.translator import Translator, write_rule_set

    try:
        if output:
            result = write_rule_set(log_file, output, invocation)
        else:
            result = Translator(log_file, invocation).run()
            click.echo(result.text, nl=False)
    except TranslatorError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if output:
        click.echo(
            f"{len(result.table)} rules, {len(result.table.linked_products)} link products "
            f"written to {output}",
            err=True,
        )
    for d in result.diagnostics:
        click.echo(f"  [!] line {d.line_number}: {d.message}", err=True)


@main.command("check")
@click.argument("rule_set", type=click.Path(dir_okay=False))
@click.argument("log_file", type=click.Path(dir_okay=False))
@click.option("--invocation", default=_DEFAULT_INVOCATION, help="Current build invocation")
def check_cmd(rule_set: str, log_file: str, invocation: str) -> None:
    """Exit 0 if RULE_SET is up to date for LOG_FILE and the invocation, else 1."""
    from xcmake.translator import is_fresh

    if is_fresh(rule_set, log_file, invocation):
        click.echo(f"{rule_set} is up to date")
        return
    click.echo(f"{rule_set} is stale", err=True)
    sys.exit(1)


if __name__ == "__main__":
    main()
