"""GitHub API access for the review bot.

This module wraps the GitHub REST endpoints the bot consumes:
- Listing files changed by a commit
- Fetching file content at a commit
- Creating completed check runs with annotations

Calls are made once and never retried.
"""

from src.reviewbot.github.client import GitHubAPIError, GitHubClient
from src.reviewbot.github.models import (
    AnnotationLevel,
    CheckAnnotation,
    CheckRunRequest,
    PublishedCheck,
)

__all__ = [
    "AnnotationLevel",
    "CheckAnnotation",
    "CheckRunRequest",
    "GitHubAPIError",
    "GitHubClient",
    "PublishedCheck",
]
