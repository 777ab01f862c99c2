"""
Unit tests for DeploymentTracker.

Covers creation against the (environment, service, version) triple, the
status state machine, timestamp invariants and the advisory source-control
checks.
"""

import threading
from datetime import timedelta

import pytest
from sqlalchemy.orm.exc import StaleDataError

from deploy_tracker.core.exceptions import (
    DeploymentNotFound, InvalidTransitionError, UnknownEnvironment,
    UnknownVersion, VerificationUnavailableError,
)
from deploy_tracker.core.transitions import DeploymentStatus, can_transition
from deploy_tracker.models import Deployment
from deploy_tracker.services import (
    ServiceRegistry, VersionRegistry, EnvironmentRegistry, DeploymentTracker
)

REPO = "acme/checkout-api"
REPO_URL = f"https://github.com/{REPO}"


@pytest.fixture
def tracker(db_session, fake_verifier):
    return DeploymentTracker(db_session, fake_verifier)


@pytest.fixture
def service(db_session):
    service = ServiceRegistry(db_session).register("checkout-api")
    VersionRegistry(db_session).register(service.id, "abc123", REPO_URL)
    EnvironmentRegistry(db_session).register(
        "prod-us", "us-east-1", "PROD", "https://k8s.prod-us", "token"
    )
    return service


@pytest.fixture
def deployment(tracker, service):
    return tracker.create("prod-us", service.id, "abc123", "ops@acme.com", "v1.4.2")


class TestCreate:

    def test_create_is_pending(self, deployment, service):
        """A new deployment starts PENDING with the requested metadata."""
        assert deployment.status == DeploymentStatus.PENDING
        assert deployment.user_email == "ops@acme.com"
        assert deployment.source_version == "v1.4.2"
        assert deployment.service_id == service.id

    def test_service_matches_version(self, deployment):
        """The deployment's service is the version's service."""
        assert deployment.service_id == deployment.deployable_version.service_id

    def test_timestamps_equal_at_creation(self, deployment):
        """started_at and last_update are equal on creation."""
        assert deployment.started_at == deployment.last_update

    def test_unknown_environment(self, tracker, service):
        """Creating into an unknown environment raises UnknownEnvironment."""
        with pytest.raises(UnknownEnvironment):
            tracker.create("nowhere", service.id, "abc123", "ops@acme.com")

    def test_unknown_version(self, tracker, service):
        """Creating an unregistered sha raises UnknownVersion."""
        with pytest.raises(UnknownVersion):
            tracker.create("prod-us", service.id, "fff000", "ops@acme.com")

    def test_version_of_other_service(self, tracker, service, db_session):
        """A sha registered for another service is not a version of this one."""
        other = ServiceRegistry(db_session).register("billing-api")
        
        with pytest.raises(UnknownVersion):
            tracker.create("prod-us", other.id, "abc123", "ops@acme.com")

    def test_nothing_persisted_on_failure(self, tracker, service, db_session):
        """A failed create leaves no deployment row behind."""
        with pytest.raises(UnknownEnvironment):
            tracker.create("nowhere", service.id, "abc123", "ops@acme.com")
        
        assert db_session.query(Deployment).count() == 0


class TestAdvance:

    def test_happy_path_then_terminal(self, tracker, deployment):
        """PENDING -> IN_PROGRESS -> DONE, after which nothing moves."""
        tracker.advance(deployment.id, DeploymentStatus.IN_PROGRESS)
        done = tracker.advance(deployment.id, DeploymentStatus.DONE)
        
        assert done.status == DeploymentStatus.DONE
        with pytest.raises(InvalidTransitionError):
            tracker.advance(deployment.id, DeploymentStatus.IN_PROGRESS)

    def test_accepts_plain_strings(self, tracker, deployment):
        """Status names are accepted as plain strings."""
        assert tracker.advance(deployment.id, "IN_PROGRESS").status == DeploymentStatus.IN_PROGRESS

    @pytest.mark.parametrize("terminal", [
        DeploymentStatus.DONE, DeploymentStatus.FAILED, DeploymentStatus.CANCELED
    ])
    def test_terminal_rejects_every_target(self, tracker, deployment, terminal):
        """Every move out of a terminal status is rejected."""
        tracker.advance(deployment.id, DeploymentStatus.IN_PROGRESS)
        tracker.advance(deployment.id, terminal)
        
        for target in DeploymentStatus:
            with pytest.raises(InvalidTransitionError):
                tracker.advance(deployment.id, target)
        assert tracker.get(deployment.id).status == terminal

    def test_pending_cannot_jump_to_done(self, tracker, deployment):
        """PENDING -> DONE is rejected and the status is unchanged."""
        with pytest.raises(InvalidTransitionError):
            tracker.advance(deployment.id, DeploymentStatus.DONE)
        assert tracker.get(deployment.id).status == DeploymentStatus.PENDING

    def test_pending_can_be_canceled(self, tracker, deployment):
        """A deployment that never started can be canceled."""
        assert tracker.advance(deployment.id, DeploymentStatus.CANCELED).status == DeploymentStatus.CANCELED

    def test_same_status_rejected(self, tracker, deployment):
        """Advancing to the current status is rejected."""
        with pytest.raises(InvalidTransitionError):
            tracker.advance(deployment.id, DeploymentStatus.PENDING)

    def test_unknown_deployment(self, tracker, service):
        """Advancing an unknown id raises DeploymentNotFound."""
        with pytest.raises(DeploymentNotFound):
            tracker.advance(12345, DeploymentStatus.IN_PROGRESS)

    def test_started_at_never_changes(self, tracker, deployment):
        """started_at is fixed; last_update moves with each advance."""
        started_at = deployment.started_at
        
        tracker.advance(deployment.id, DeploymentStatus.IN_PROGRESS)
        finished = tracker.advance(deployment.id, DeploymentStatus.FAILED)
        
        assert finished.started_at == started_at
        assert finished.last_update >= finished.started_at

    def test_last_update_never_before_start(self, tracker, deployment, monkeypatch):
        """A clock that jumps backwards still cannot break last_update >= started_at."""
        past = deployment.started_at - timedelta(hours=1)
        monkeypatch.setattr("deploy_tracker.services.deployment_tracker.utcnow", lambda: past)
        
        advanced = tracker.advance(deployment.id, DeploymentStatus.IN_PROGRESS)
        
        assert advanced.last_update == advanced.started_at

    def test_concurrent_writer_loses(self, tracker, deployment, session_factory):
        """A write based on a stale row is rejected instead of overwriting."""
        other = session_factory()
        try:
            stale = other.get(Deployment, deployment.id)
            tracker.advance(deployment.id, DeploymentStatus.IN_PROGRESS)
            
            stale.status = DeploymentStatus.CANCELED
            with pytest.raises(StaleDataError):
                other.commit()
            other.rollback()
        finally:
            other.close()
        
        assert tracker.get(deployment.id).status == DeploymentStatus.IN_PROGRESS

    def test_concurrent_advances_have_one_winner(self, tracker, deployment, session_factory, fake_verifier, monkeypatch):
        """Two trackers advancing one deployment at once: one commits, the other is rejected."""
        deployment_id = deployment.id
        barrier = threading.Barrier(2, timeout=5)
        
        def checked_together(current, target):
            allowed = can_transition(current, target)
            barrier.wait()
            return allowed
        
        monkeypatch.setattr("deploy_tracker.services.deployment_tracker.can_transition", checked_together)
        outcomes = {}
        
        def advance(target):
            session = session_factory()
            try:
                outcomes[target] = DeploymentTracker(session, fake_verifier).advance(deployment_id, target).status
            except InvalidTransitionError as exc:
                outcomes[target] = exc
            finally:
                session.close()
        
        threads = [
            threading.Thread(target=advance, args=(target,))
            for target in (DeploymentStatus.IN_PROGRESS, DeploymentStatus.CANCELED)
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=10)
        
        rejected = [o for o in outcomes.values() if isinstance(o, InvalidTransitionError)]
        winners = [o for o in outcomes.values() if not isinstance(o, InvalidTransitionError)]
        assert len(rejected) == 1 and len(winners) == 1
        assert "modified concurrently" in str(rejected[0])
        
        tracker.db.expire_all()
        assert tracker.get(deployment_id).status == winners[0]


class TestQueries:

    def test_list_filters_and_order(self, tracker, deployment, service):
        """list() applies all filters and returns newest first."""
        second = tracker.create("prod-us", service.id, "abc123", "dev@acme.com")
        tracker.advance(second.id, DeploymentStatus.IN_PROGRESS)
        
        assert [d.id for d in tracker.list()] == [second.id, deployment.id]
        assert [d.id for d in tracker.list(status=DeploymentStatus.PENDING)] == [deployment.id]
        assert tracker.list(service_id=service.id + 100) == []

    def test_get_unknown(self, tracker, service):
        """get() of an unknown id raises DeploymentNotFound."""
        with pytest.raises(DeploymentNotFound):
            tracker.get(999)


class TestVerification:

    def test_ready_when_status_successful(self, tracker, deployment, fake_verifier):
        """A successful combined status means ready."""
        fake_verifier.add_commit(REPO, "abc123", state="success")
        
        assert tracker.verify_readiness(deployment.id) is True
        assert ("is_commit_status_ok", REPO, "abc123") in fake_verifier.calls

    def test_not_ready_when_status_failed(self, tracker, deployment, fake_verifier):
        """A failed combined status means not ready."""
        fake_verifier.add_commit(REPO, "abc123", state="failure")
        
        assert tracker.verify_readiness(deployment.id) is False

    def test_not_ready_when_unresolvable(self, tracker, deployment):
        """An unresolvable commit reads as not ready."""
        assert tracker.verify_readiness(deployment.id) is False

    def test_readiness_does_not_gate_advance(self, tracker, deployment):
        """Readiness is advisory; advance ignores it."""
        assert tracker.verify_readiness(deployment.id) is False
        assert tracker.advance(deployment.id, DeploymentStatus.IN_PROGRESS).status == DeploymentStatus.IN_PROGRESS

    def test_commit_details(self, tracker, deployment, fake_verifier):
        """commit_details returns the deployed commit's metadata."""
        fake_verifier.add_commit(REPO, "abc123")
        
        details = tracker.commit_details(deployment.id)
        
        assert details.sha == "abc123"
        assert details.committer_name == "Jane Doe"

    def test_commit_details_unavailable(self, tracker, deployment):
        """Unresolvable commit details raise VerificationUnavailableError."""
        with pytest.raises(VerificationUnavailableError):
            tracker.commit_details(deployment.id)

    def test_in_branch(self, tracker, deployment, fake_verifier):
        """Branch membership is checked per branch."""
        fake_verifier.add_commit(REPO, "abc123", branches=["master"])
        
        assert tracker.is_in_branch(deployment.id, "master") is True
        assert tracker.is_in_branch(deployment.id, "release") is False
