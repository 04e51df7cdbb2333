"""Log-to-rule translation: one forward pass over a captured Xcode log."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from xcmake.build.classifiers import match_step
from xcmake.build.cursor import LineCursor
from xcmake.emitter import RuleSetWriter, format_timestamp, read_invocation
from xcmake.exceptions import LogReadError, OutputWriteError, StepSkipped
from xcmake.models.rules import BuildStep, Diagnostic, RuleTable

logger = logging.getLogger(__name__)


@dataclass
class TranslationResult:
    """Translator return value."""

    text: str
    table: RuleTable
    steps: list[BuildStep] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)


class Translator:
    """
    Translate a captured build log into a makefile.

    Each record is offered to the step classifiers in order. Recognized steps
    register rules in a RuleTable owned by this call; everything else is
    echoed as a comment. A step whose window is incomplete is skipped with a
    diagnostic and never aborts the translation.
    """

    def __init__(self, log_path: str | Path, invocation: str = "") -> None:
        self.log_path = Path(log_path)
        self.invocation = invocation

    def run(self) -> TranslationResult:
        """
        Translate the log.

        Returns:
            TranslationResult with the makefile text, the final rule table,
            the parsed steps and the diagnostics of skipped steps.

        Raises:
            LogReadError: the log cannot be opened or read.
        """
        table = RuleTable()
        steps: list[BuildStep] = []
        diagnostics: list[Diagnostic] = []
        skipped = 0

        try:
            captured = format_timestamp(self.log_path.stat().st_mtime)
            with open(self.log_path, encoding="utf-8", errors="replace") as f:
                writer = RuleSetWriter(self.log_path.name, self.invocation, captured)
                cursor = LineCursor(f)
                for line in cursor:
                    hit = match_step(line)
                    writer.comment(line)
                    if hit is None:
                        continue

                    classifier, match = hit
                    line_number = cursor.line_number
                    mark = len(table)
                    try:
                        step = classifier.parse(match, cursor, table)
                    except StepSkipped as e:
                        skipped += 1
                        self._report(diagnostics, line_number, line, str(e))
                        continue

                    for note in step.notes:
                        self._report(diagnostics, line_number, line, note)
                    steps.append(step)
                    writer.rules(table.rules_since(mark))
        except OSError as e:
            raise LogReadError(str(self.log_path), e.strerror or str(e)) from e

        logger.info(
            "Translated %s: %d steps, %d rules, %d link products, %d skipped",
            self.log_path,
            len(steps),
            len(table),
            len(table.linked_products),
            skipped,
        )
        return TranslationResult(
            text=writer.render(table),
            table=table,
            steps=steps,
            diagnostics=diagnostics,
        )

    @staticmethod
    def _report(
        diagnostics: list[Diagnostic], line_number: int, record: str, message: str
    ) -> None:
        diagnostics.append(Diagnostic(line_number=line_number, record=record, message=message))
        logger.warning("Line %d: %s (%s)", line_number, message, record[:120])


def translate(log_path: str | Path, invocation: str = "") -> str:
    """Translate a captured build log into makefile text."""
    return Translator(log_path, invocation).run().text


def write_rule_set(
    log_path: str | Path,
    output_path: str | Path,
    invocation: str = "",
) -> TranslationResult:
    """Translate log_path and write the rule set to output_path.

    Raises:
        LogReadError: the log cannot be read.
        OutputWriteError: output_path cannot be written.
    """
    result = Translator(log_path, invocation).run()
    output = Path(output_path)
    try:
        output.write_text(result.text, encoding="utf-8")
    except OSError as e:
        raise OutputWriteError(str(output), e.strerror or str(e)) from e
    logger.info("Wrote %s (%d bytes)", output, len(result.text))
    return result


def is_fresh(rule_set_path: str | Path, log_path: str | Path, invocation: str) -> bool:
    """True when rule_set_path was generated from log_path for this invocation.

    The rule set must exist, be at least as new as the log, and record the
    same invocation in its header.
    """
    rule_set = Path(rule_set_path)
    try:
        if os.path.getmtime(rule_set) < os.path.getmtime(log_path):
            return False
    except OSError:
        return False
    return read_invocation(rule_set) == " ".join(invocation.splitlines())
