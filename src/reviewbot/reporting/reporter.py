"""Check run reporting for analysis results.

Turns the findings of one analysis run into a single completed check
run on the analyzed commit. Each finding becomes one annotation; error
findings are failure-level, everything else is warning-level.
"""

import logging
from typing import List, Optional, Sequence

from src.reviewbot.analysis.models import AnalysisResult, Finding, Severity
from src.reviewbot.github.client import GitHubClient
from src.reviewbot.github.models import (
    AnnotationLevel,
    CheckAnnotation,
    CheckRunRequest,
    PublishedCheck,
)
from src.reviewbot.webhook.models import CommitRef, RepositoryRef

logger = logging.getLogger(__name__)

DEFAULT_CHECK_NAME = "Code Analysis"
CHECK_TITLE = "Code Analysis Results"

# GitHub rejects more than 50 annotations in a single check run request
MAX_ANNOTATIONS = 50


def map_severity_to_level(severity: Severity) -> AnnotationLevel:
    """Map a finding severity to a GitHub annotation level."""
    if severity is Severity.ERROR:
        return AnnotationLevel.FAILURE
    return AnnotationLevel.WARNING


def build_annotation(finding: Finding) -> CheckAnnotation:
    return CheckAnnotation(
        path=finding.file,
        start_line=finding.line,
        end_line=finding.line,
        annotation_level=map_severity_to_level(finding.severity),
        message=finding.message,
    )


def build_summary(findings: Sequence[Finding]) -> str:
    return f"Found {len(findings)} issues"


def build_details(findings: Sequence[Finding], skipped_files: int = 0) -> Optional[str]:
    """Build the optional output text for notes that do not fit the summary.

    Returns:
        Markdown text, or None when there is nothing to add.
    """
    notes: List[str] = []
    if len(findings) > MAX_ANNOTATIONS:
        notes.append(
            f"Showing the first {MAX_ANNOTATIONS} of {len(findings)} annotations."
        )
    if skipped_files:
        notes.append(
            f"{skipped_files} file(s) could not be fetched and were not analyzed."
        )
    if not notes:
        return None
    return "\n\n".join(notes)


def build_check_run_request(
    commit: CommitRef,
    findings: Sequence[Finding],
    check_name: str = DEFAULT_CHECK_NAME,
    skipped_files: int = 0,
) -> CheckRunRequest:
    """Build the check run request for one analysis run.

    The conclusion and summary always reflect every finding, even when
    the annotation list is truncated.
    """
    result = AnalysisResult(findings=list(findings))
    return CheckRunRequest(
        name=check_name,
        head_sha=commit.sha,
        conclusion=result.verdict.value,
        title=CHECK_TITLE,
        summary=build_summary(findings),
        text=build_details(findings, skipped_files),
        annotations=[build_annotation(f) for f in findings[:MAX_ANNOTATIONS]],
    )


class ResultReporter:
    """Publishes analysis findings as a check run.

    Attributes:
        github_client: Client used to create the check run.
        check_name: Name of the published check run.
    """

    def __init__(
        self,
        github_client: GitHubClient,
        check_name: str = DEFAULT_CHECK_NAME,
    ):
        self.github_client = github_client
        self.check_name = check_name

    async def report(
        self,
        repository: RepositoryRef,
        commit: CommitRef,
        findings: Sequence[Finding],
        skipped_files: int = 0,
    ) -> PublishedCheck:
        """Publish one completed check run for an analysis run.

        Args:
            repository: Repository the commit belongs to.
            commit: Commit the check run is attached to.
            findings: All findings of the run, in aggregation order.
            skipped_files: Number of files that could not be fetched.

        Returns:
            The published check run.

        Raises:
            GitHubAPIError: If the check run cannot be created.
        """
        request = build_check_run_request(
            commit,
            findings,
            check_name=self.check_name,
            skipped_files=skipped_files,
        )

        published = await self.github_client.create_check_run(
            repository.owner, repository.name, request
        )

        logger.info(
            "Published %s check for %s@%s with %d findings",
            request.conclusion,
            repository.full_name,
            commit.short_sha,
            len(findings),
        )

        return published
