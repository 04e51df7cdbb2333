"""Data models for classified build steps and the generated rule set."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class StepKind(str, Enum):
    COMPILE_C = "compileC"
    SWIFT_DRIVER = "swiftDriver"
    SWIFT_COMPILE = "swiftCompile"
    LINK = "link"
    CODESIGN = "codesign"


@dataclass(frozen=True)
class BuildStep:
    """One classified window of log records."""

    kind: StepKind
    records: tuple[str, ...]  # raw records consumed, in log order
    working_dir: str = ""  # plain (unescaped) directory from the cd record
    objects: tuple[str, ...] = ()
    sources: tuple[str, ...] = ()
    command: str = ""
    notes: tuple[str, ...] = ()  # non-fatal diagnostics raised while parsing


@dataclass
class Rule:
    """A make rule. target and prerequisites are canonical (make-escaped) paths."""

    target: str
    prerequisites: list[str] = field(default_factory=list)
    working_dir: str = ""
    recipe: str = ""


@dataclass
class Diagnostic:
    """A skipped step, reported to the operator."""

    line_number: int
    record: str
    message: str


class RuleTable:
    """
    Rules keyed by canonical target, in registration order.

    Registration is idempotent: the first rule for a target wins and later
    ones are dropped, matching make's own one-recipe-per-target semantics.
    Also accumulates the link products and post-link commands that make up
    the terminal ``main`` rule.
    """

    def __init__(self) -> None:
        self._rules: dict[str, Rule] = {}
        self.linked_products: list[str] = []
        self.post_link_recipe: list[str] = []

    def add(self, rule: Rule) -> bool:
        """Register rule; returns False if its target is already present."""
        if rule.target in self._rules:
            return False
        self._rules[rule.target] = rule
        return True

    def add_linked_product(self, target: str) -> None:
        if target not in self.linked_products:
            self.linked_products.append(target)

    def rules_since(self, mark: int) -> list[Rule]:
        """Rules registered after the table held ``mark`` rules."""
        return list(self._rules.values())[mark:]

    def get(self, target: str) -> Rule | None:
        return self._rules.get(target)

    def __contains__(self, target: object) -> bool:
        return target in self._rules

    def __len__(self) -> int:
        return len(self._rules)

    def __iter__(self):
        return iter(self._rules.values())
