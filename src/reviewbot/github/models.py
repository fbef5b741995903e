"""Data models for GitHub check runs.

This module defines the request and result models used when the
reporter publishes a check run:
- CheckAnnotation: one inline annotation on a file line
- CheckRunRequest: everything needed to create a completed check run
- PublishedCheck: the check run as created by GitHub
"""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class AnnotationLevel(str, Enum):
    """GitHub annotation levels used by the reporter."""

    WARNING = "warning"
    FAILURE = "failure"


class CheckAnnotation(BaseModel):
    """Inline annotation attached to a check run."""

    path: str = Field(..., min_length=1)
    start_line: int = Field(..., ge=1)
    end_line: int = Field(..., ge=1)
    annotation_level: AnnotationLevel
    message: str = Field(..., min_length=1)

    def to_github_payload(self) -> Dict[str, Any]:
        return {
            "path": self.path,
            "start_line": self.start_line,
            "end_line": self.end_line,
            "annotation_level": self.annotation_level.value,
            "message": self.message,
        }


class CheckRunRequest(BaseModel):
    """Request to create a completed check run on a commit.

    Attributes:
        name: Check run name shown in the GitHub UI.
        head_sha: Commit the check run is attached to.
        conclusion: "success" or "failure".
        title: Output title.
        summary: Output summary (markdown).
        text: Optional output details (markdown).
        annotations: Inline annotations; GitHub accepts at most 50 per request.
    """

    name: str = Field(..., min_length=1)
    head_sha: str = Field(..., min_length=1)
    conclusion: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    summary: str = Field(..., min_length=1)
    text: Optional[str] = None
    annotations: List[CheckAnnotation] = Field(default_factory=list)

    def to_github_payload(self) -> Dict[str, Any]:
        """Build the JSON body for POST /repos/{owner}/{repo}/check-runs."""
        output: Dict[str, Any] = {
            "title": self.title,
            "summary": self.summary,
            "annotations": [a.to_github_payload() for a in self.annotations],
        }
        if self.text:
            output["text"] = self.text

        return {
            "name": self.name,
            "head_sha": self.head_sha,
            "status": "completed",
            "conclusion": self.conclusion,
            "output": output,
        }


class PublishedCheck(BaseModel):
    """A check run created on GitHub.

    Attributes:
        check_run_id: GitHub's id for the check run.
        html_url: Link to the check run in the GitHub UI.
        conclusion: Conclusion the check run was created with.
        annotation_count: Number of annotations sent with the check run.
    """

    check_run_id: int
    html_url: str = ""
    conclusion: str
    annotation_count: int = Field(default=0, ge=0)

    @classmethod
    def from_github_response(
        cls,
        data: Dict[str, Any],
        annotation_count: int = 0,
    ) -> "PublishedCheck":
        """Create from a GitHub API check run response.

        Args:
            data: Raw JSON response from GitHub's create check run endpoint.
            annotation_count: Number of annotations included in the request.

        Returns:
            PublishedCheck populated from the response.
        """
        return cls(
            check_run_id=data["id"],
            html_url=data.get("html_url") or "",
            conclusion=data.get("conclusion") or "",
            annotation_count=annotation_count,
        )
