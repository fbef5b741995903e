"""GitHub API client for commit inspection and check runs.

This module provides an async wrapper around the GitHub REST API for:
- Listing the files changed by a commit
- Fetching file content at a commit
- Creating completed check runs with annotations

Requests are made once; failed calls raise GitHubAPIError and are never
retried here. Callers decide whether a failure is fatal.
"""

import base64
import binascii
import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx

from src.reviewbot.analysis.models import ChangedFile
from src.reviewbot.github.models import CheckRunRequest, PublishedCheck


logger = logging.getLogger(__name__)

# GitHub returns at most 100 files per page of a commit's file list
COMMIT_FILES_PAGE_SIZE = 100


class GitHubAPIError(Exception):
    """Raised when a GitHub API request fails.

    Covers network errors, non-success status codes and responses that
    cannot be decoded.

    Attributes:
        message: Human-readable error description.
        status_code: HTTP status code from the response, if any.
        response_body: Response body from GitHub API, if any.
        request_url: The URL that was requested.
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        response_body: Optional[str] = None,
        request_url: Optional[str] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.response_body = response_body
        self.request_url = request_url
        super().__init__(message)


class GitHubClient:
    """Async GitHub API client.

    Attributes:
        token: GitHub API token (PAT or GitHub App installation token).
        base_url: Base URL for GitHub API (default: https://api.github.com).
        timeout: Request timeout in seconds.

    Example:
        >>> client = GitHubClient(token="ghp_xxx")
        >>> async with client:
        ...     files = await client.list_commit_files("owner", "repo", "abc123")
    """

    def __init__(
        self,
        token: str,
        base_url: str = "https://api.github.com",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the GitHub client.

        Args:
            token: GitHub API token for authentication.
            base_url: Base URL for GitHub API. Use this to support
                      GitHub Enterprise Server endpoints.
            timeout: Request timeout in seconds.
            transport: Optional httpx transport, used by tests.
        """
        self.token = token
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def client(self) -> httpx.AsyncClient:
        """Get the HTTP client, creating it if necessary."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers=self._default_headers(),
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    def _default_headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
            "User-Agent": "ReviewBot/1.0",
        }

    async def close(self) -> None:
        """Close the HTTP client and release resources."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "GitHubClient":
        return self

    async def __aexit__(
        self,
        exc_type: Any,
        exc_val: Any,
        exc_tb: Any,
    ) -> None:
        await self.close()

    async def _request(
        self,
        method: str,
        path: str,
        json_data: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """Make a single HTTP request and decode the JSON response.

        Args:
            method: HTTP method (GET, POST).
            path: API path (e.g., /repos/owner/repo/commits/sha).
            json_data: Optional JSON body for the request.
            params: Optional query parameters.

        Returns:
            The decoded JSON response body.

        Raises:
            GitHubAPIError: On network error, non-2xx status or invalid JSON.
        """
        request_url = f"{self.base_url}{path}"
        try:
            response = await self.client.request(
                method=method,
                url=path,
                json=json_data,
                params=params,
            )
        except httpx.RequestError as e:
            logger.error(
                "GitHub API request failed",
                extra={"path": path, "method": method, "error": str(e)},
            )
            raise GitHubAPIError(
                message=f"Request to GitHub failed: {e.__class__.__name__}",
                request_url=request_url,
            ) from e

        if response.status_code >= 400:
            error_body = response.text
            logger.error(
                "GitHub API error",
                extra={
                    "status_code": response.status_code,
                    "path": path,
                    "method": method,
                    "response_body": error_body[:500],
                },
            )
            raise GitHubAPIError(
                message=f"GitHub API error: {response.status_code}",
                status_code=response.status_code,
                response_body=error_body,
                request_url=str(response.url),
            )

        try:
            return response.json()
        except ValueError as e:
            raise GitHubAPIError(
                message="GitHub API returned a non-JSON response",
                status_code=response.status_code,
                response_body=response.text[:500],
                request_url=str(response.url),
            ) from e

    async def list_commit_files(
        self,
        owner: str,
        repo: str,
        sha: str,
    ) -> List[ChangedFile]:
        """List the files changed by a commit.

        Follows pagination until GitHub returns a short page.

        Args:
            owner: Repository owner (user or organization).
            repo: Repository name.
            sha: Commit SHA.

        Returns:
            Changed files in the order GitHub lists them.

        Raises:
            GitHubAPIError: If any page fails or is malformed.
        """
        path = f"/repos/{owner}/{repo}/commits/{sha}"
        files: List[ChangedFile] = []
        page = 1

        while True:
            data = await self._request(
                method="GET",
                path=path,
                params={"per_page": COMMIT_FILES_PAGE_SIZE, "page": page},
            )
            entries = data.get("files") if isinstance(data, dict) else None
            if not isinstance(entries, list):
                raise GitHubAPIError(
                    message="Commit response has no file list",
                    request_url=f"{self.base_url}{path}",
                )

            try:
                files.extend(ChangedFile.from_github_response(e) for e in entries)
            except (KeyError, TypeError, ValueError) as e:
                raise GitHubAPIError(
                    message=f"Malformed file entry in commit response: {e}",
                    request_url=f"{self.base_url}{path}",
                ) from e

            if len(entries) < COMMIT_FILES_PAGE_SIZE:
                break
            page += 1

        logger.info(
            "Listed commit files",
            extra={
                "owner": owner,
                "repo": repo,
                "sha": sha,
                "file_count": len(files),
            },
        )

        return files

    async def get_file_content(
        self,
        owner: str,
        repo: str,
        path: str,
        ref: str,
    ) -> str:
        """Fetch a file's content at a commit and decode it as UTF-8.

        Args:
            owner: Repository owner (user or organization).
            repo: Repository name.
            path: Repository-relative file path.
            ref: Commit SHA (or other git ref).

        Returns:
            The decoded file text.

        Raises:
            GitHubAPIError: If the request fails, the path is not a file,
                or the content cannot be decoded.
        """
        api_path = f"/repos/{owner}/{repo}/contents/{quote(path, safe='/')}"

        logger.debug(
            "Fetching file content",
            extra={"owner": owner, "repo": repo, "path": path, "ref": ref},
        )

        data = await self._request(method="GET", path=api_path, params={"ref": ref})

        if not isinstance(data, dict) or data.get("type", "file") != "file":
            raise GitHubAPIError(
                message=f"Path is not a file: {path}",
                request_url=f"{self.base_url}{api_path}",
            )

        content = data.get("content")
        if not isinstance(content, str):
            raise GitHubAPIError(
                message=f"No inline content returned for {path}",
                request_url=f"{self.base_url}{api_path}",
            )

        # Files over 1 MB come back with encoding "none" and empty content
        encoding = data.get("encoding", "base64")
        if encoding != "base64":
            raise GitHubAPIError(
                message=f"Unsupported content encoding {encoding!r} for {path}",
                request_url=f"{self.base_url}{api_path}",
            )

        try:
            return base64.b64decode(content).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError) as e:
            raise GitHubAPIError(
                message=f"Could not decode content of {path}",
                request_url=f"{self.base_url}{api_path}",
            ) from e

    async def create_check_run(
        self,
        owner: str,
        repo: str,
        request: CheckRunRequest,
    ) -> PublishedCheck:
        """Create a completed check run on a commit.

        Args:
            owner: Repository owner (user or organization).
            repo: Repository name.
            request: Check run name, commit, conclusion, output and annotations.

        Returns:
            PublishedCheck with the created check run id and URL.

        Raises:
            GitHubAPIError: If the request fails.
        """
        path = f"/repos/{owner}/{repo}/check-runs"

        logger.info(
            "Creating check run",
            extra={
                "owner": owner,
                "repo": repo,
                "head_sha": request.head_sha,
                "conclusion": request.conclusion,
                "annotations": len(request.annotations),
            },
        )

        data = await self._request(
            method="POST",
            path=path,
            json_data=request.to_github_payload(),
        )

        try:
            result = PublishedCheck.from_github_response(
                data, annotation_count=len(request.annotations)
            )
        except (KeyError, TypeError, ValueError) as e:
            raise GitHubAPIError(
                message="Malformed check run response",
                request_url=f"{self.base_url}{path}",
            ) from e

        logger.info(
            "Check run created successfully",
            extra={
                "owner": owner,
                "repo": repo,
                "check_run_id": result.check_run_id,
                "conclusion": result.conclusion,
            },
        )

        return result
