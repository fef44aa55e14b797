"""Scenario language: parsing, serialization and title-level diffing."""

from .differ import ScenarioDiff, diff, diff_bodies, index_by_title
from .models import ParsedDocument, Rule, Scenario, ScenarioStep, StepKeyword
from .parser import (
    ParseIssue,
    ScenarioParser,
    extract_blocks,
    lint,
    parse,
    parse_scenario_text,
    serialize,
)

__all__ = [
    "ParsedDocument",
    "Rule",
    "Scenario",
    "ScenarioStep",
    "StepKeyword",
    "ParseIssue",
    "ScenarioParser",
    "extract_blocks",
    "lint",
    "parse",
    "parse_scenario_text",
    "serialize",
    "ScenarioDiff",
    "diff",
    "diff_bodies",
    "index_by_title",
]
