"""
Protocol definitions for the deployment tracker.

SourceControlVerifier is the narrow interface the tracker consumes to look
up commit metadata, commit status and branch ancestry. The GitHub adapter
(deploy_tracker.scm.github_connector.GithubConnector) implements it; tests
plug in fakes without inheriting from anything.

Failure policy:
    No method raises. Anything that goes wrong talking to source control
    degrades to the "cannot confirm" value of the method (None, False, ""
    or []). Deciding whether "cannot confirm" blocks a deployment is the
    caller's job.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Protocol, runtime_checkable


@dataclass(frozen=True)
class CommitDetails:
    """Commit metadata as returned by source control. Never persisted."""
    sha: str
    html_url: str
    message: str
    commit_date: datetime
    verification_state: Optional[str]
    author_avatar_url: Optional[str]
    committer_name: Optional[str]


@runtime_checkable
class SourceControlVerifier(Protocol):
    """
    Interface for commit verification against a source-control host.

    Repository identifiers are in "owner/repo" form; use
    repo_name_from_url() to derive one from a full repository URL.
    """

    def get_commit_details(self, repo: str, sha: str) -> Optional[CommitDetails]:
        """Commit metadata, or None if the commit cannot be resolved."""
        ...

    def is_commit_status_ok(self, repo: str, sha: str) -> bool:
        """
        True only when the commit's combined status is successful.

        False is returned both for a failed status and for a commit that
        could not be resolved at all. The two cases are not distinguishable
        through this method; use get_commit_details() when it matters.
        """
        ...

    def is_commit_in_branch_history(self, repo: str, branch: str, sha: str) -> bool:
        """True if sha is reachable on branch. False also when unresolved."""
        ...

    def get_latest_commit_sha_on_branch(self, repo: str, branch: str) -> str:
        """Head sha of branch, or "" when it cannot be retrieved."""
        ...

    def get_latest_commits_sha(self, repo: str, amount: int) -> List[str]:
        """Most recent shas on the default branch, or [] on failure."""
        ...

    def repo_name_from_url(self, repository_url: str) -> str:
        """Strip scheme and github.com host, leaving owner/repo."""
        ...
