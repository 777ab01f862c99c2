from deploy_tracker.scm.github_connector import GithubConnector, BRANCH_HISTORY_LOOKBACK

__all__ = ["GithubConnector", "BRANCH_HISTORY_LOOKBACK"]
