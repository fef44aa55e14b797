"""Scenario-level diff between two parsed documents.

Scenarios are matched by title, not by position. Background steps and rule
titles are not diffed.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .models import ParsedDocument, Scenario
from .parser import parse


@dataclass
class ScenarioDiff:
    """Classification of scenario titles between two document versions."""

    added: list[str] = field(default_factory=list)
    modified: list[str] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.added or self.modified or self.removed)


def index_by_title(document: ParsedDocument) -> dict[str, Scenario]:
    """
    Map scenario title to scenario, rules flattened.

    Duplicate titles: the last occurrence wins.
    """
    return {scenario.title: scenario for scenario in document.all_scenarios()}


def diff(before: ParsedDocument, after: ParsedDocument) -> ScenarioDiff:
    """
    Classify every scenario title as added, modified or removed.

    Args:
        before: Document as last seen
        after: Document as it is now

    Returns:
        ScenarioDiff; unchanged titles appear in none of the lists
    """
    before_by_title = index_by_title(before)
    after_by_title = index_by_title(after)

    result = ScenarioDiff()
    for title, scenario in after_by_title.items():
        previous = before_by_title.get(title)
        if previous is None:
            result.added.append(title)
        elif previous.steps != scenario.steps:
            result.modified.append(title)

    for title in before_by_title:
        if title not in after_by_title:
            result.removed.append(title)

    return result


def diff_bodies(old_body: str, new_body: str) -> ScenarioDiff:
    """Parse two markdown bodies and diff them."""
    return diff(parse(old_body), parse(new_body))


__all__ = ["ScenarioDiff", "diff", "diff_bodies", "index_by_title"]
