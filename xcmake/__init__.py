"""xcmake: translate captured Xcode build logs into incremental makefiles."""

__version__ = "0.1.0"

from xcmake.exceptions import LogReadError, OutputWriteError, TranslatorError
from xcmake.models.rules import BuildStep, Diagnostic, Rule, RuleTable, StepKind
from xcmake.translator import (
    TranslationResult,
    Translator,
    is_fresh,
    translate,
    write_rule_set,
)

__all__ = [
    "BuildStep",
    "Diagnostic",
    "LogReadError",
    "OutputWriteError",
    "Rule",
    "RuleTable",
    "StepKind",
    "TranslationResult",
    "Translator",
    "TranslatorError",
    "is_fresh",
    "translate",
    "write_rule_set",
]
