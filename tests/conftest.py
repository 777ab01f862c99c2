"""
Pytest fixtures and configuration for deploy_tracker tests.

Provides:
- Database setup/teardown on a separate SQLite file
- Test client with get_db and get_verifier overridden
- FakeVerifier, an in-memory SourceControlVerifier
- Seeded service / version / environment for deployment tests
"""

from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from deploy_tracker.main import app
from deploy_tracker.models.database import Base, get_db
from deploy_tracker.api.dependencies import get_verifier
from deploy_tracker.core.protocols import CommitDetails
from deploy_tracker.scm.github_connector import GithubConnector
from deploy_tracker.utils.credentials import clear_key_cache


# Test database (separate from production)
TEST_DATABASE_URL = "sqlite:///./test.db"
test_engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)

CHECKOUT_REPO_URL = "https://github.com/acme/checkout-api"


def override_get_db():
    """Provide test database session."""
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


class FakeVerifier:
    """
    In-memory SourceControlVerifier.

    Commits are registered with add_commit(); anything not registered is
    "unresolvable", mirroring how the GitHub connector degrades.
    """

    def __init__(self):
        self.commits = {}
        self.branches = {}
        self.calls = []

    def add_commit(self, repo, sha, state="success", date=None, branches=()):
        self.commits[(repo, sha)] = CommitDetails(
            sha=sha,
            html_url=f"https://github.com/{repo}/commit/{sha}",
            message=f"Commit {sha}",
            commit_date=date or datetime(2024, 1, 10, 12, 0, tzinfo=timezone.utc),
            verification_state=state,
            author_avatar_url="https://avatars.example.com/u/1",
            committer_name="Jane Doe",
        )
        for branch in branches:
            self.branches.setdefault((repo, branch), []).insert(0, sha)

    def repo_name_from_url(self, repository_url):
        return GithubConnector.repo_name_from_url(repository_url)

    def get_commit_details(self, repo, sha):
        self.calls.append(("get_commit_details", repo, sha))
        return self.commits.get((repo, sha))

    def is_commit_status_ok(self, repo, sha):
        self.calls.append(("is_commit_status_ok", repo, sha))
        details = self.commits.get((repo, sha))
        return details is not None and details.verification_state == "success"

    def is_commit_in_branch_history(self, repo, branch, sha):
        self.calls.append(("is_commit_in_branch_history", repo, branch, sha))
        if (repo, sha) not in self.commits:
            return False
        return sha in self.branches.get((repo, branch), [])

    def get_latest_commit_sha_on_branch(self, repo, branch):
        self.calls.append(("get_latest_commit_sha_on_branch", repo, branch))
        shas = self.branches.get((repo, branch), [])
        return shas[0] if shas else ""

    def get_latest_commits_sha(self, repo, amount):
        self.calls.append(("get_latest_commits_sha", repo, amount))
        return self.branches.get((repo, "master"), [])[:amount]


@pytest.fixture(autouse=True)
def reset_key_cache():
    """Derived encryption keys must not leak between tests."""
    clear_key_cache()


@pytest.fixture(scope="function")
def db_session():
    """Create fresh database for each test."""
    Base.metadata.create_all(bind=test_engine)
    session = TestingSessionLocal()
    yield session
    session.close()
    Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
def session_factory(db_session):
    """Open extra sessions on the test database (e.g. to simulate a concurrent writer)."""
    return TestingSessionLocal


@pytest.fixture
def fake_verifier():
    return FakeVerifier()


@pytest.fixture(scope="function")
def client(db_session, fake_verifier):
    """Test client with fresh database and isolated dependency overrides."""
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_verifier] = lambda: fake_verifier

    yield TestClient(app)

    # Clean up overrides after test so other tests see the real wiring
    app.dependency_overrides.clear()


# ============================================================
# Test Data Fixtures
# ============================================================

@pytest.fixture
def sample_environment_data():
    """Sample environment registration payload."""
    return {
        "name": "prod-us",
        "geo_region": "us-east-1",
        "availability": "PROD",
        "kubernetes_master": "https://k8s.prod-us.acme.internal",
        "kubernetes_token": "super-secret-cluster-token"
    }


@pytest.fixture
def seeded(client, sample_environment_data):
    """
    Register checkout-api, its abc123 version and prod-us over the API.

    Returns (client, ids) where ids has service_id, version_id, environment_id.
    """
    service = client.post("/services/", json={"name": "checkout-api"})
    assert service.status_code == 201
    service_id = service.json()["id"]

    version = client.post("/deployable-versions/", json={
        "service_id": service_id,
        "git_commit_sha": "abc123",
        "github_repository_url": CHECKOUT_REPO_URL
    })
    assert version.status_code == 201

    environment = client.post("/environments/", json=sample_environment_data)
    assert environment.status_code == 201

    return client, {
        "service_id": service_id,
        "version_id": version.json()["id"],
        "environment_id": environment.json()["id"],
    }


@pytest.fixture
def deployment_payload(seeded):
    _, ids = seeded
    return {
        "environment_name": "prod-us",
        "service_id": ids["service_id"],
        "git_commit_sha": "abc123",
        "requested_by": "ops@acme.com",
        "source_version": "v1.4.2"
    }
