"""
GitHub implementation of the SourceControlVerifier protocol.

Talks to the GitHub REST v3 API through a single long-lived httpx.Client.
One connector is built at process start (see deploy_tracker.main) and handed
to the tracker through FastAPI dependencies.

Every call is bounded by SCM_TIMEOUT_SECONDS. Whatever goes wrong on the way
(connection errors, timeouts, 4xx/5xx, unparsable payloads, missing keys) is
logged as a warning and turned into the method's "cannot confirm" value;
nothing raises past this module.

Usage:
    connector = GithubConnector.from_settings(settings)
    repo = connector.repo_name_from_url("https://github.com/acme/checkout-api")
    connector.is_commit_status_ok(repo, "abc123")
"""

import logging
import re
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

import httpx

from deploy_tracker.core.protocols import CommitDetails

logger = logging.getLogger(__name__)

_REPO_URL_PREFIX = re.compile(r"^https?://github\.com/")

# Branch listings start this far before the commit date; commit authoring
# time and branch history indexing can disagree by hours.
BRANCH_HISTORY_LOOKBACK = timedelta(days=1)

_MAX_PAGE_SIZE = 100


def _parse_github_date(value: str) -> datetime:
    """Parse GitHub's ISO-8601 timestamps ("2024-01-10T12:00:00Z")."""
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _format_github_date(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


class GithubConnector:
    """
    Source-control verifier backed by the GitHub REST API.

    Args:
        client: Configured httpx.Client whose base_url points at the API root.
    """

    def __init__(self, client: httpx.Client):
        self._client = client

    @classmethod
    def from_settings(cls, settings) -> "GithubConnector":
        """Build a connector, authenticated if both login and token are set."""
        logger.info("Initializing Github Connector")
        headers = {"Accept": "application/vnd.github+json"}
        auth = None

        # If no user or oauth was provided, go anonymous
        if settings.GITHUB_LOGIN and settings.GITHUB_OAUTH_TOKEN:
            logger.info("Connecting to GitHub as %s", settings.GITHUB_LOGIN)
            auth = (settings.GITHUB_LOGIN, settings.GITHUB_OAUTH_TOKEN)
        else:
            logger.info("Connecting anonymously to GitHub")

        client = httpx.Client(
            base_url=settings.GITHUB_API_URL,
            headers=headers,
            auth=auth,
            timeout=settings.SCM_TIMEOUT_SECONDS,
        )
        return cls(client)

    def close(self):
        self._client.close()

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def _get(self, url: str, params: Optional[Dict[str, Any]] = None) -> httpx.Response:
        response = self._client.get(url, params=params)
        response.raise_for_status()
        return response

    def _get_json(self, url: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return self._get(url, params).json()

    # ------------------------------------------------------------------
    # SourceControlVerifier
    # ------------------------------------------------------------------

    @staticmethod
    def repo_name_from_url(repository_url: str) -> str:
        """
        Derive "owner/repo" from a full repository URL.

        >>> GithubConnector.repo_name_from_url("https://github.com/acme/checkout-api")
        'acme/checkout-api'
        """
        name = _REPO_URL_PREFIX.sub("", repository_url.strip(), count=1)
        name = name.rstrip("/")
        if name.endswith(".git"):
            name = name[:-len(".git")]
        return name

    def get_commit_details(self, repo: str, sha: str) -> Optional[CommitDetails]:
        try:
            logger.info("Getting commit details for sha %s on repo %s", sha, repo)
            payload = self._get_json(f"/repos/{repo}/commits/{sha}")
            status = self._get_json(f"/repos/{repo}/commits/{sha}/status")

            commit = payload["commit"]
            author = payload.get("author") or {}
            git_author = commit.get("author") or {}

            committer_name = git_author.get("name")
            if not committer_name:
                committer_name = author.get("login")

            # A combined status with no contexts is "pending" on GitHub; there
            # is no status to report in that case.
            state = status.get("state") if status.get("total_count", 0) else None

            details = CommitDetails(
                sha=payload["sha"],
                html_url=payload["html_url"],
                message=commit["message"],
                commit_date=_parse_github_date(commit["committer"]["date"]),
                verification_state=state,
                author_avatar_url=author.get("avatar_url"),
                committer_name=committer_name,
            )
            logger.debug("CommitDetails: %s", details)
            return details
        except Exception as e:
            logger.warning("Could not get commit details for sha %s on repo %s: %s", sha, repo, e)
            return None

    def get_latest_commits_sha(self, repo: str, amount: int) -> List[str]:
        if amount <= 0:
            return []
        try:
            shas: List[str] = []
            url: Optional[str] = f"/repos/{repo}/commits"
            params: Optional[Dict[str, Any]] = {"per_page": min(amount, _MAX_PAGE_SIZE)}
            while url and len(shas) < amount:
                response = self._get(url, params)
                shas.extend(item["sha"] for item in response.json())
                url = response.links.get("next", {}).get("url")
                params = None  # the "next" link already carries the query
            return shas[:amount]
        except Exception as e:
            logger.warning("Could not get latest commits from Github for repo %s: %s", repo, e)
            return []

    def get_latest_commit_sha_on_branch(self, repo: str, branch: str) -> str:
        try:
            return self._get_json(f"/repos/{repo}/branches/{branch}")["commit"]["sha"]
        except Exception as e:
            logger.warning("Could not get latest commit on branch %s of repo %s: %s", branch, repo, e)
            return ""

    def is_commit_status_ok(self, repo: str, sha: str) -> bool:
        """
        True only if the commit resolves and its combined status is "success".

        A failed status and an unresolvable commit both give False.
        """
        details = self.get_commit_details(repo, sha)
        if details is None:
            return False
        return details.verification_state == "success"

    def is_commit_in_branch_history(self, repo: str, branch: str, sha: str) -> bool:
        # Resolve the commit first so the branch listing can start near it
        details = self.get_commit_details(repo, sha)
        if details is None:
            return False

        since = details.commit_date - BRANCH_HISTORY_LOOKBACK
        branch_shas = self._list_commits_on_branch(repo, branch, since)
        if branch_shas is None:
            return False
        return sha in branch_shas

    def _list_commits_on_branch(self, repo: str, branch: str, since: datetime) -> Optional[List[str]]:
        """All commit shas on branch since the given time, None on failure."""
        try:
            shas: List[str] = []
            url: Optional[str] = f"/repos/{repo}/commits"
            params: Optional[Dict[str, Any]] = {
                "sha": branch,
                "since": _format_github_date(since),
                "per_page": _MAX_PAGE_SIZE,
            }
            while url:
                response = self._get(url, params)
                shas.extend(item["sha"] for item in response.json())
                url = response.links.get("next", {}).get("url")
                params = None
            return shas
        except Exception as e:
            logger.warning("Could not get all commits on branch %s for repo %s: %s", branch, repo, e)
            return None
