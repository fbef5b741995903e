"""Unit tests for check run building and publication."""

import asyncio
from unittest.mock import AsyncMock

from src.reviewbot.analysis.models import Finding, Severity
from src.reviewbot.github.models import AnnotationLevel, PublishedCheck
from src.reviewbot.reporting.reporter import (
    CHECK_TITLE,
    MAX_ANNOTATIONS,
    ResultReporter,
    build_check_run_request,
    map_severity_to_level,
)
from src.reviewbot.webhook.models import CommitRef, RepositoryRef


def run_async(coro):
    return asyncio.run(coro)


REPO = RepositoryRef(owner="acme", name="widgets")
COMMIT = CommitRef(sha="abc1234def")


def _finding(line: int = 1, severity: Severity = Severity.WARNING, file: str = "a.js"):
    return Finding(file=file, line=line, message=f"{severity.value} message", severity=severity)


class TestSeverityMapping:

    def test_error_maps_to_failure(self):
        assert map_severity_to_level(Severity.ERROR) is AnnotationLevel.FAILURE

    def test_warning_maps_to_warning(self):
        assert map_severity_to_level(Severity.WARNING) is AnnotationLevel.WARNING

    def test_info_maps_to_warning(self):
        assert map_severity_to_level(Severity.INFO) is AnnotationLevel.WARNING


class TestBuildCheckRunRequest:

    def test_no_findings_is_success_with_no_annotations(self):
        request = build_check_run_request(COMMIT, [])

        assert request.conclusion == "success"
        assert request.summary == "Found 0 issues"
        assert request.annotations == []
        assert request.text is None
        assert request.head_sha == COMMIT.sha
        assert request.title == CHECK_TITLE

    def test_error_finding_fails_the_check(self):
        request = build_check_run_request(
            COMMIT, [_finding(1, Severity.WARNING), _finding(4, Severity.ERROR)]
        )

        assert request.conclusion == "failure"
        assert request.summary == "Found 2 issues"

    def test_one_annotation_per_finding(self):
        findings = [
            _finding(3, Severity.ERROR, "src/x.js"),
            _finding(9, Severity.INFO, "src/y.ts"),
        ]
        request = build_check_run_request(COMMIT, findings)

        payload = [a.to_github_payload() for a in request.annotations]
        assert payload == [
            {
                "path": "src/x.js",
                "start_line": 3,
                "end_line": 3,
                "annotation_level": "failure",
                "message": "error message",
            },
            {
                "path": "src/y.ts",
                "start_line": 9,
                "end_line": 9,
                "annotation_level": "warning",
                "message": "info message",
            },
        ]

    def test_annotations_are_capped_but_summary_counts_all(self):
        findings = [_finding(i + 1) for i in range(MAX_ANNOTATIONS + 5)]
        findings.append(_finding(999, Severity.ERROR))

        request = build_check_run_request(COMMIT, findings)

        assert len(request.annotations) == MAX_ANNOTATIONS
        assert request.summary == f"Found {len(findings)} issues"
        assert request.conclusion == "failure"
        assert f"first {MAX_ANNOTATIONS}" in request.text

    def test_skipped_files_are_mentioned(self):
        request = build_check_run_request(COMMIT, [], skipped_files=2)
        assert "2 file(s) could not be fetched" in request.text

    def test_github_payload_is_completed(self):
        payload = build_check_run_request(
            COMMIT, [_finding()], check_name="Lint"
        ).to_github_payload()

        assert payload["name"] == "Lint"
        assert payload["status"] == "completed"
        assert payload["conclusion"] == "success"
        assert payload["output"]["summary"] == "Found 1 issues"
        assert len(payload["output"]["annotations"]) == 1
        assert "text" not in payload["output"]


class TestResultReporter:

    def test_report_publishes_exactly_one_check(self):
        client = AsyncMock()
        client.create_check_run.return_value = PublishedCheck(
            check_run_id=1, conclusion="failure", annotation_count=1
        )
        reporter = ResultReporter(client, check_name="Code Analysis")

        published = run_async(
            reporter.report(REPO, COMMIT, [_finding(2, Severity.ERROR)])
        )

        client.create_check_run.assert_called_once()
        owner, repo, request = client.create_check_run.call_args.args
        assert (owner, repo) == ("acme", "widgets")
        assert request.name == "Code Analysis"
        assert request.conclusion == "failure"
        assert len(request.annotations) == 1
        assert published.check_run_id == 1
