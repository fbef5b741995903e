"""Unit tests for the AnalysisPipeline.

The GitHub client is mocked so the tests control which files a commit
touches and which content fetches succeed.
"""

import asyncio
from typing import Dict, List, Optional
from unittest.mock import AsyncMock

import httpx
import pytest

from src.reviewbot.analysis.models import ChangedFile, Severity
from src.reviewbot.analysis.pipeline import AnalysisPipeline
from src.reviewbot.github.client import GitHubAPIError, GitHubClient
from src.reviewbot.webhook.models import CommitRef, RepositoryRef

from payloads import commit_response, contents_response, oversized_contents_response


def run_async(coro):
    return asyncio.run(coro)


REPO = RepositoryRef(owner="acme", name="widgets")
COMMIT = CommitRef(sha="abc1234def")


def _files(*paths: str, status: str = "modified") -> List[ChangedFile]:
    return [ChangedFile(path=p, status=status) for p in paths]


def _client(
    files: List[ChangedFile],
    contents: Dict[str, str],
    failing: Optional[List[str]] = None,
) -> AsyncMock:
    failing = failing or []
    client = AsyncMock()
    client.list_commit_files.return_value = files

    async def get_file_content(owner, repo, path, ref):
        if path in failing:
            raise GitHubAPIError(f"GitHub API error: 404 for {path}", status_code=404)
        return contents[path]

    client.get_file_content.side_effect = get_file_content
    return client


class TestFiltering:

    def test_only_registered_extensions_are_fetched(self):
        client = _client(
            _files("a.js", "b.py", "c.ts", "README.md"),
            {"a.js": "", "c.ts": ""},
        )
        pipeline = AnalysisPipeline(client)

        run_async(pipeline.analyze(REPO, COMMIT))

        fetched = [c.args[2] for c in client.get_file_content.call_args_list]
        assert sorted(fetched) == ["a.js", "c.ts"]

    def test_removed_files_are_not_fetched(self):
        client = _client(_files("gone.js", status="removed"), {})
        pipeline = AnalysisPipeline(client)

        outcome = run_async(pipeline.analyze(REPO, COMMIT))

        client.get_file_content.assert_not_called()
        assert outcome.findings == []
        assert outcome.skipped_files == 0

    def test_extension_match_is_case_insensitive(self):
        pipeline = AnalysisPipeline(AsyncMock(), extensions=[".js"])
        assert pipeline.is_analyzable(ChangedFile(path="LEGACY.JS"))

    def test_custom_extensions(self):
        pipeline = AnalysisPipeline(AsyncMock(), extensions=[".py"])
        assert pipeline.is_analyzable(ChangedFile(path="tool.py"))
        assert not pipeline.is_analyzable(ChangedFile(path="tool.js"))

    def test_no_qualifying_files_yields_empty_outcome(self):
        client = _client(_files("docs/index.md"), {})
        outcome = run_async(AnalysisPipeline(client).analyze(REPO, COMMIT))

        assert outcome.findings == []
        assert outcome.analyzed_files == 0
        assert outcome.skipped_files == 0

    def test_fetches_at_the_analyzed_commit(self):
        client = _client(_files("a.js"), {"a.js": ""})
        run_async(AnalysisPipeline(client).analyze(REPO, COMMIT))

        client.list_commit_files.assert_called_once_with("acme", "widgets", COMMIT.sha)
        client.get_file_content.assert_called_once_with(
            "acme", "widgets", "a.js", COMMIT.sha
        )


class TestAggregation:

    def test_findings_follow_listing_order(self):
        client = _client(
            _files("z.js", "a.js"),
            {"z.js": "eval(x)", "a.js": "console.log(1)\neval(y)"},
        )
        outcome = run_async(AnalysisPipeline(client).analyze(REPO, COMMIT))

        assert [(f.file, f.line, f.severity) for f in outcome.findings] == [
            ("z.js", 1, Severity.ERROR),
            ("a.js", 1, Severity.WARNING),
            ("a.js", 2, Severity.ERROR),
        ]
        assert outcome.analyzed_files == 2

    def test_order_is_independent_of_completion_order(self):
        delays = {"slow.js": 0.05, "fast.js": 0.0}
        client = AsyncMock()
        client.list_commit_files.return_value = _files("slow.js", "fast.js")

        async def get_file_content(owner, repo, path, ref):
            await asyncio.sleep(delays[path])
            return f"eval({path})"

        client.get_file_content.side_effect = get_file_content

        outcome = run_async(AnalysisPipeline(client).analyze(REPO, COMMIT))

        assert [f.file for f in outcome.findings] == ["slow.js", "fast.js"]


class TestConcurrency:

    def test_all_fetches_start_before_any_completes(self):
        """Every fetch is in flight at once; none can finish until all started."""
        paths = [f"f{i}.js" for i in range(5)]
        started: List[str] = []
        client = AsyncMock()
        client.list_commit_files.return_value = _files(*paths)

        async def get_file_content(owner, repo, path, ref):
            started.append(path)
            while len(started) < len(paths):
                await asyncio.sleep(0)
            return "console.log(1)"

        client.get_file_content.side_effect = get_file_content

        async def run():
            return await asyncio.wait_for(
                AnalysisPipeline(client).analyze(REPO, COMMIT), timeout=2
            )

        outcome = run_async(run())

        assert sorted(started) == sorted(paths)
        assert len(outcome.findings) == len(paths)


class TestFailurePolicy:

    def test_listing_failure_propagates(self):
        client = AsyncMock()
        client.list_commit_files.side_effect = GitHubAPIError(
            "GitHub API error: 502", status_code=502
        )

        with pytest.raises(GitHubAPIError):
            run_async(AnalysisPipeline(client).analyze(REPO, COMMIT))

        client.get_file_content.assert_not_called()

    def test_failed_fetch_is_skipped_and_counted(self):
        client = _client(
            _files("ok.js", "missing.js", "also-ok.ts"),
            {"ok.js": "eval(a)", "also-ok.ts": "console.log(b)"},
            failing=["missing.js"],
        )
        outcome = run_async(AnalysisPipeline(client).analyze(REPO, COMMIT))

        assert outcome.skipped_files == 1
        assert outcome.analyzed_files == 2
        assert [f.file for f in outcome.findings] == ["ok.js", "also-ok.ts"]
        assert all(f.file != "missing.js" for f in outcome.findings)

    def test_skipped_file_warning_carries_blob_sha(self, caplog):
        client = _client(
            [ChangedFile(path="gone.js", blob_sha="f" * 40), ChangedFile(path="ok.js")],
            {"ok.js": ""},
            failing=["gone.js"],
        )

        with caplog.at_level("WARNING", logger="src.reviewbot.analysis.pipeline"):
            run_async(AnalysisPipeline(client).analyze(REPO, COMMIT))

        skipped = [r for r in caplog.records if "gone.js" in r.getMessage()]
        assert len(skipped) == 1
        assert skipped[0].blob_sha == "f" * 40

    def test_all_fetches_failing_escalates(self):
        client = _client(_files("a.js", "b.js"), {}, failing=["a.js", "b.js"])

        with pytest.raises(GitHubAPIError):
            run_async(AnalysisPipeline(client).analyze(REPO, COMMIT))

    def test_unexpected_errors_are_not_swallowed(self):
        client = AsyncMock()
        client.list_commit_files.return_value = _files("a.js")
        client.get_file_content.side_effect = RuntimeError("boom")

        with pytest.raises(RuntimeError):
            run_async(AnalysisPipeline(client).analyze(REPO, COMMIT))


class TestOversizedFiles:
    """Files GitHub serves without inline content count as skipped."""

    @staticmethod
    def _transport(contents: Dict[str, Dict]) -> httpx.MockTransport:
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path.endswith(f"/commits/{COMMIT.sha}"):
                return httpx.Response(200, json=commit_response(list(contents)))
            path = request.url.path.split("/contents/", 1)[1]
            return httpx.Response(200, json=contents[path])

        return httpx.MockTransport(handler)

    async def _analyze(self, contents: Dict[str, Dict]):
        async with GitHubClient(
            token="ghp_test",
            base_url="https://api.github.test",
            transport=self._transport(contents),
        ) as client:
            return await AnalysisPipeline(client).analyze(REPO, COMMIT)

    def test_oversized_file_is_skipped_and_counted(self):
        outcome = run_async(
            self._analyze(
                {
                    "small.js": contents_response("small.js", "eval(x)"),
                    "big.js": oversized_contents_response("big.js"),
                }
            )
        )

        assert outcome.analyzed_files == 1
        assert outcome.skipped_files == 1
        assert [(f.file, f.severity) for f in outcome.findings] == [
            ("small.js", Severity.ERROR)
        ]

    def test_only_oversized_files_escalates(self):
        with pytest.raises(GitHubAPIError):
            run_async(self._analyze({"big.js": oversized_contents_response("big.js")}))
