"""Line-level rule engine.

The engine is a token scanner, not a parser: each rule looks at one line
of text at a time. Matches inside string literals or comments are
reported like any other match.

Rules are evaluated per line in registration order, so findings come out
ordered by line number and then by rule.
"""

from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

from src.reviewbot.analysis.models import Finding, Severity

MAX_LINE_LENGTH = 120


@dataclass(frozen=True)
class Rule:
    """A single line check.

    Attributes:
        name: Short identifier used in logs.
        severity: Severity of findings produced by this rule.
        message: Message attached to each finding.
        matches: Predicate over one line of text (without line terminator).
    """

    name: str
    severity: Severity
    message: str
    matches: Callable[[str], bool]


def _contains(token: str) -> Callable[[str], bool]:
    return lambda line: token in line


DEFAULT_RULES: Sequence[Rule] = (
    Rule(
        name="console-log",
        severity=Severity.WARNING,
        message="Consider removing console.log statement",
        matches=_contains("console.log"),
    ),
    Rule(
        name="eval",
        severity=Severity.ERROR,
        message="Use of eval() is dangerous and should be avoided",
        matches=_contains("eval("),
    ),
    Rule(
        name="line-length",
        severity=Severity.INFO,
        message=f"Line too long (over {MAX_LINE_LENGTH} characters)",
        matches=lambda line: len(line) > MAX_LINE_LENGTH,
    ),
)


def split_lines(text: str) -> List[str]:
    """Split text on newlines, dropping a trailing carriage return per line."""
    return [line[:-1] if line.endswith("\r") else line for line in text.split("\n")]


class RuleEngine:
    """Evaluates file contents against an ordered set of rules.

    The engine holds no state between calls; evaluating the same text
    twice yields equal findings in the same order.
    """

    def __init__(self, rules: Optional[Sequence[Rule]] = None):
        self.rules = tuple(DEFAULT_RULES if rules is None else rules)

    def evaluate(self, text: str, path: str) -> List[Finding]:
        """Run every rule over every line of a file.

        Args:
            text: Decoded file content.
            path: Repository-relative path recorded on each finding.

        Returns:
            Findings ordered by line, then by rule registration order.
        """
        findings: List[Finding] = []
        for number, line in enumerate(split_lines(text), start=1):
            findings.extend(
                Finding(
                    file=path,
                    line=number,
                    message=rule.message,
                    severity=rule.severity,
                )
                for rule in self.rules
                if rule.matches(line)
            )
        return findings


def evaluate(text: str, path: str) -> List[Finding]:
    """Evaluate text with the default rule set."""
    return RuleEngine().evaluate(text, path)
