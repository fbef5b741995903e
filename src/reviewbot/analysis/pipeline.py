"""Concurrent analysis of the files changed by a commit.

The pipeline lists a commit's changed files, keeps those with a
registered extension, then fetches and evaluates every qualifying file
concurrently. All per-file tasks are joined before findings are
aggregated, so callers only ever see a complete result.

A file whose content cannot be fetched is skipped and counted. If no
qualifying file could be fetched at all, the run fails as a whole.
"""

import asyncio
import logging
from typing import List, Optional, Sequence

from src.reviewbot.analysis.models import AnalysisOutcome, ChangedFile, Finding
from src.reviewbot.analysis.rules import RuleEngine
from src.reviewbot.github.client import GitHubAPIError, GitHubClient
from src.reviewbot.webhook.models import CommitRef, RepositoryRef

logger = logging.getLogger(__name__)

DEFAULT_EXTENSIONS = (".js", ".ts")


class AnalysisPipeline:
    """Fetches changed files for a commit and runs them through the rule engine.

    Attributes:
        github_client: Client used to list files and fetch content.
        rule_engine: Engine that turns file text into findings.
        extensions: Lowercase file extensions eligible for analysis.
    """

    def __init__(
        self,
        github_client: GitHubClient,
        rule_engine: Optional[RuleEngine] = None,
        extensions: Sequence[str] = DEFAULT_EXTENSIONS,
    ):
        self.github_client = github_client
        self.rule_engine = rule_engine or RuleEngine()
        self.extensions = tuple(ext.lower() for ext in extensions)

    def is_analyzable(self, changed_file: ChangedFile) -> bool:
        """Check whether a changed file qualifies for analysis.

        Removed files have no content at the commit and never qualify.
        """
        if changed_file.status == "removed":
            return False
        return changed_file.path.lower().endswith(self.extensions)

    async def analyze(
        self,
        repository: RepositoryRef,
        commit: CommitRef,
    ) -> AnalysisOutcome:
        """Analyze every qualifying file changed at a commit.

        Args:
            repository: Repository containing the commit.
            commit: Commit whose changed files are analyzed.

        Returns:
            AnalysisOutcome with findings in listing order and the
            number of files skipped because their content was unavailable.

        Raises:
            GitHubAPIError: If the file list cannot be retrieved, or if
                every qualifying file failed to fetch.
        """
        changed = await self.github_client.list_commit_files(
            repository.owner, repository.name, commit.sha
        )
        targets = [f for f in changed if self.is_analyzable(f)]

        logger.info(
            "Analyzing %d of %d changed files for %s@%s",
            len(targets),
            len(changed),
            repository.full_name,
            commit.short_sha,
        )

        if not targets:
            return AnalysisOutcome()

        # gather preserves argument order, so results line up with targets
        results = await asyncio.gather(
            *(self._analyze_file(repository, commit, f) for f in targets)
        )

        findings: List[Finding] = []
        skipped = 0
        for file_findings in results:
            if file_findings is None:
                skipped += 1
                continue
            findings.extend(file_findings)

        if skipped == len(targets):
            raise GitHubAPIError(
                message=(
                    f"Could not fetch any of {len(targets)} files for "
                    f"{repository.full_name}@{commit.sha}"
                ),
            )

        if skipped:
            logger.warning(
                "Skipped files whose content could not be fetched",
                extra={
                    "repository": repository.full_name,
                    "sha": commit.sha,
                    "skipped_files": skipped,
                },
            )

        return AnalysisOutcome(
            findings=findings,
            analyzed_files=len(targets) - skipped,
            skipped_files=skipped,
        )

    async def _analyze_file(
        self,
        repository: RepositoryRef,
        commit: CommitRef,
        changed_file: ChangedFile,
    ) -> Optional[List[Finding]]:
        """Fetch and evaluate one file.

        Returns:
            The file's findings, or None if its content could not be fetched.
        """
        try:
            text = await self.github_client.get_file_content(
                repository.owner,
                repository.name,
                changed_file.path,
                commit.sha,
            )
        except GitHubAPIError as e:
            logger.warning(
                "Could not fetch content for %s: %s",
                changed_file.path,
                e.message,
                extra={
                    "blob_sha": changed_file.blob_sha,
                    "status_code": e.status_code,
                    "request_url": e.request_url,
                },
            )
            return None

        return self.rule_engine.evaluate(text, changed_file.path)
