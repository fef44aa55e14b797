"""Structured representation of scenario-language content."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class StepKeyword(str, Enum):
    """Step keywords, normalised to their capitalised form."""

    GIVEN = "Given"
    WHEN = "When"
    THEN = "Then"
    AND = "And"
    BUT = "But"

    @classmethod
    def from_text(cls, text: str) -> "StepKeyword":
        """Look up a keyword case-insensitively."""
        return cls(text.capitalize())


@dataclass(frozen=True)
class ScenarioStep:
    """A single Given/When/Then/And/But line."""

    keyword: StepKeyword
    text: str


@dataclass
class Scenario:
    """A titled, ordered list of steps. The title is the diff identity."""

    title: str
    steps: list[ScenarioStep] = field(default_factory=list)


@dataclass
class Rule:
    """A named grouping of scenarios."""

    title: str
    scenarios: list[Scenario] = field(default_factory=list)


@dataclass
class ParsedDocument:
    """
    Full parse result for one document body.

    `feature` is kept only so the serializer can reproduce the title line;
    the differ never looks at it.
    """

    background: list[ScenarioStep] = field(default_factory=list)
    rules: list[Rule] = field(default_factory=list)
    scenarios: list[Scenario] = field(default_factory=list)
    feature: str | None = None

    @property
    def is_empty(self) -> bool:
        return not (self.background or self.rules or self.scenarios)

    def all_scenarios(self) -> list[Scenario]:
        """Top-level scenarios followed by the scenarios nested in rules."""
        flattened = list(self.scenarios)
        for rule in self.rules:
            flattened.extend(rule.scenarios)
        return flattened


__all__ = ["StepKeyword", "ScenarioStep", "Scenario", "Rule", "ParsedDocument"]
