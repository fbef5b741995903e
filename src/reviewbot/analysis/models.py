"""Analysis models for the review bot.

This module defines the values that flow through an analysis run:
- ChangedFile: one file touched by the triggering commit
- Finding: one rule violation on one line of one file
- AnalysisResult: findings plus the derived pass/fail verdict
- AnalysisOutcome: what the pipeline returns, including skip counts
"""

from enum import Enum
from typing import List

from pydantic import BaseModel, ConfigDict, Field


class Severity(str, Enum):
    """Severity attached to a finding.

    Attributes:
        INFO: Style note; never fails the check.
        WARNING: Something worth a second look; never fails the check.
        ERROR: A defect; any error finding fails the check.
    """

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class Verdict(str, Enum):
    """Overall classification of one analysis run."""

    SUCCESS = "success"
    FAILURE = "failure"


class ChangedFile(BaseModel):
    """A file touched by the commit under analysis.

    Attributes:
        path: Repository-relative file path.
        status: GitHub file status (added, modified, removed, renamed, ...).
        blob_sha: Blob SHA of the file at the commit, if reported. Kept for
            logging only; content is fetched by path at the commit SHA.
    """

    model_config = ConfigDict(frozen=True)

    path: str = Field(..., min_length=1)
    status: str = "modified"
    blob_sha: str = ""

    @classmethod
    def from_github_response(cls, data: dict) -> "ChangedFile":
        """Build from one entry of a commit's ``files`` array."""
        return cls(
            path=data["filename"],
            status=data.get("status") or "modified",
            blob_sha=data.get("sha") or "",
        )


class Finding(BaseModel):
    """One rule violation detected on one line of one file."""

    model_config = ConfigDict(frozen=True)

    file: str = Field(..., description="Repository-relative file path")
    line: int = Field(..., ge=1, description="1-based line number")
    message: str = Field(..., min_length=1)
    severity: Severity


class AnalysisResult(BaseModel):
    """Findings of one run and the verdict derived from them.

    The verdict is computed on access and never stored, so it always
    reflects the findings it is derived from.
    """

    model_config = ConfigDict(frozen=True)

    findings: List[Finding] = Field(default_factory=list)

    @property
    def verdict(self) -> Verdict:
        """FAILURE iff any finding has ERROR severity."""
        if any(f.severity is Severity.ERROR for f in self.findings):
            return Verdict.FAILURE
        return Verdict.SUCCESS


class AnalysisOutcome(BaseModel):
    """Result of running the analysis pipeline over one commit.

    Attributes:
        findings: Findings in file listing order, then line/rule order.
        analyzed_files: Number of files whose content was evaluated.
        skipped_files: Number of qualifying files whose content could
            not be retrieved. They contribute no findings.
    """

    model_config = ConfigDict(frozen=True)

    findings: List[Finding] = Field(default_factory=list)
    analyzed_files: int = Field(default=0, ge=0)
    skipped_files: int = Field(default=0, ge=0)

    def to_result(self) -> AnalysisResult:
        return AnalysisResult(findings=self.findings)
