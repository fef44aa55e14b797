"""
Parse scenario-language (Gherkin) content embedded in markdown bodies.

Only ```gherkin fenced blocks are read. Parsing is lenient: lines that do not
fit the grammar are skipped, never raised. `lint` reports what would be
skipped for tooling that wants to surface it.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from .models import ParsedDocument, Rule, Scenario, ScenarioStep, StepKeyword


@dataclass(frozen=True)
class ParseIssue:
    """A scenario-language line that lenient parsing drops."""

    line_number: int  # 1-based, within the concatenated block text
    line: str
    reason: str


class ScenarioParser:
    """Line-oriented parser for the Given/When/Then dialect."""

    GHERKIN_BLOCK = re.compile(r"```gherkin\s*\n(.*?)```", re.DOTALL)
    STEP = re.compile(r"^(Given|When|Then|And|But)\s+(.*)$", re.IGNORECASE)
    BARE_KEYWORD = re.compile(r"^(Given|When|Then|And|But)$", re.IGNORECASE)

    FEATURE = "Feature:"
    BACKGROUND = "Background:"
    RULE = "Rule:"
    SCENARIO = "Scenario:"
    EXAMPLE = "Example:"

    def extract_blocks(self, body: str) -> list[str]:
        """Return the inner text of every ```gherkin block, in order."""
        return self.GHERKIN_BLOCK.findall(body)

    def extract_text(self, body: str) -> str:
        """Concatenate all scenario-language blocks of a body."""
        return "\n\n".join(self.extract_blocks(body))

    def parse(self, body: str) -> ParsedDocument:
        """
        Parse a document body (frontmatter already stripped).

        Args:
            body: Markdown body that may contain ```gherkin blocks

        Returns:
            ParsedDocument; empty when the body has no scenario blocks
        """
        blocks = self.extract_blocks(body)
        if not blocks:
            return ParsedDocument()
        return self.parse_text("\n\n".join(blocks))

    def parse_text(self, text: str) -> ParsedDocument:
        """Parse raw scenario-language text (no fences)."""
        result = ParsedDocument()
        scenario: Scenario | None = None
        rule: Rule | None = None
        in_background = False

        def flush_scenario() -> None:
            nonlocal scenario
            if scenario is None:
                return
            if rule is not None:
                rule.scenarios.append(scenario)
            else:
                result.scenarios.append(scenario)
            scenario = None

        for raw in text.splitlines():
            line = raw.strip()
            if not line:
                continue

            if line.startswith(self.FEATURE):
                result.feature = line[len(self.FEATURE):].strip()
                continue

            if line.startswith(self.BACKGROUND):
                in_background = True
                result.background = []
                continue

            if line.startswith(self.RULE):
                flush_scenario()
                if rule is not None:
                    result.rules.append(rule)
                rule = Rule(title=line[len(self.RULE):].strip())
                in_background = False
                continue

            if line.startswith(self.SCENARIO) or line.startswith(self.EXAMPLE):
                flush_scenario()
                prefix = self.SCENARIO if line.startswith(self.SCENARIO) else self.EXAMPLE
                scenario = Scenario(title=line[len(prefix):].strip())
                in_background = False
                continue

            match = self.STEP.match(line)
            if match:
                step = ScenarioStep(
                    keyword=StepKeyword.from_text(match.group(1)),
                    text=match.group(2),
                )
                if in_background:
                    result.background.append(step)
                elif scenario is not None:
                    scenario.steps.append(step)

        flush_scenario()
        if rule is not None:
            result.rules.append(rule)

        return result

    def lint(self, body: str) -> list[ParseIssue]:
        """
        List the lines `parse` would silently drop.

        Reports step keywords without text and steps that appear outside any
        Scenario/Example/Background. Other unrecognised lines (tags, tables,
        comments) are not reported.
        """
        issues: list[ParseIssue] = []
        in_background = False
        in_scenario = False

        for number, raw in enumerate(self.extract_text(body).splitlines(), start=1):
            line = raw.strip()
            if not line:
                continue
            if line.startswith(self.BACKGROUND):
                in_background, in_scenario = True, False
            elif line.startswith(self.RULE):
                in_background, in_scenario = False, False
            elif line.startswith(self.SCENARIO) or line.startswith(self.EXAMPLE):
                in_background, in_scenario = False, True
            elif self.BARE_KEYWORD.match(line):
                issues.append(ParseIssue(number, line, "step keyword without text"))
            elif self.STEP.match(line) and not (in_background or in_scenario):
                issues.append(ParseIssue(number, line, "step outside of a scenario"))

        return issues

    def serialize(self, document: ParsedDocument) -> str:
        """
        Render a ParsedDocument as a single ```gherkin block.

        Parsing the output yields a document equal to the input.
        """
        lines: list[str] = []

        if document.feature is not None:
            lines.append(f"{self.FEATURE} {document.feature}".rstrip())
            lines.append("")

        if document.background:
            lines.append(self.BACKGROUND)
            for step in document.background:
                lines.append(f"  {step.keyword.value} {step.text}")
            lines.append("")

        for scenario in document.scenarios:
            lines.append(f"{self.SCENARIO} {scenario.title}".rstrip())
            for step in scenario.steps:
                lines.append(f"  {step.keyword.value} {step.text}")
            lines.append("")

        for rule in document.rules:
            lines.append(f"{self.RULE} {rule.title}".rstrip())
            for scenario in rule.scenarios:
                lines.append(f"  {self.EXAMPLE} {scenario.title}".rstrip())
                for step in scenario.steps:
                    lines.append(f"    {step.keyword.value} {step.text}")
                lines.append("")

        return "```gherkin\n" + "\n".join(lines).strip() + "\n```"


_parser = ScenarioParser()


def parse(body: str) -> ParsedDocument:
    """Convenience function to parse a markdown body."""
    return _parser.parse(body)


def parse_scenario_text(text: str) -> ParsedDocument:
    """Convenience function to parse unfenced scenario-language text."""
    return _parser.parse_text(text)


def extract_blocks(body: str) -> list[str]:
    """Convenience function to extract ```gherkin block contents."""
    return _parser.extract_blocks(body)


def serialize(document: ParsedDocument) -> str:
    """Convenience function to render a document as a ```gherkin block."""
    return _parser.serialize(document)


def lint(body: str) -> list[ParseIssue]:
    """Convenience function to list lines dropped by lenient parsing."""
    return _parser.lint(body)


__all__ = [
    "ParseIssue",
    "ScenarioParser",
    "extract_blocks",
    "lint",
    "parse",
    "parse_scenario_text",
    "serialize",
]
