"""Static analysis of changed files.

- models: ChangedFile, Finding, Severity, AnalysisResult, AnalysisOutcome
- rules: the line-level rule engine
- pipeline: concurrent fetch-and-evaluate over a commit's files
"""

from src.reviewbot.analysis.models import (
    AnalysisOutcome,
    AnalysisResult,
    ChangedFile,
    Finding,
    Severity,
    Verdict,
)
from src.reviewbot.analysis.rules import DEFAULT_RULES, Rule, RuleEngine, evaluate

__all__ = [
    "AnalysisOutcome",
    "AnalysisResult",
    "ChangedFile",
    "DEFAULT_RULES",
    "Finding",
    "Rule",
    "RuleEngine",
    "Severity",
    "Verdict",
    "evaluate",
]
