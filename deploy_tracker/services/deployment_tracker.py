"""
Deployment tracker.

Creates deployment records for a (environment, service, version) triple and
moves them through the status state machine in deploy_tracker.core.transitions:

    PENDING -> IN_PROGRESS -> {DONE, FAILED, CANCELED}

Status writes are atomic per deployment: the row is read with
SELECT ... FOR UPDATE and written with an optimistic version check
(Deployment.version_counter), so two concurrent advances on one deployment
produce exactly one winner and the loser gets InvalidTransitionError.

Source-control checks (verify_readiness, is_in_branch, commit_details) are
advisory. advance() never consults them; gating on readiness is up to the
caller.
"""

import logging
from typing import List, Optional

from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from deploy_tracker.core.exceptions import (
    DeploymentNotFound,
    InvalidTransitionError,
    UnknownEnvironment,
    UnknownVersion,
    VerificationUnavailableError,
)
from deploy_tracker.core.protocols import CommitDetails, SourceControlVerifier
from deploy_tracker.core.transitions import DeploymentStatus, can_transition, is_terminal
from deploy_tracker.models.deployment import Deployment, utcnow
from deploy_tracker.services.environment_registry import EnvironmentRegistry
from deploy_tracker.services.version_registry import VersionRegistry

logger = logging.getLogger(__name__)


class DeploymentTracker:
    """
    Args:
        db: Session used for every read and write of this tracker
        verifier: Long-lived source-control verifier, built once per process
    """

    def __init__(self, db: Session, verifier: SourceControlVerifier):
        self.db = db
        self.verifier = verifier
        self.environments = EnvironmentRegistry(db)
        self.versions = VersionRegistry(db)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def create(
        self,
        environment_name: str,
        service_id: int,
        commit_sha: str,
        requested_by: str,
        source_version: str = ""
    ) -> Deployment:
        """
        Record a new PENDING deployment.

        Raises:
            UnknownEnvironment: no environment with that name
            UnknownVersion: (service_id, commit_sha) is not a registered version
        """
        environment = self.environments.lookup(environment_name)
        if environment is None:
            raise UnknownEnvironment(environment_name)

        version = self.versions.lookup(service_id, commit_sha)
        if version is None:
            raise UnknownVersion(f"{service_id}@{commit_sha}")

        now = utcnow()
        deployment = Deployment(
            environment_id=environment.id,
            service_id=version.service_id,
            deployable_version_id=version.id,
            user_email=requested_by,
            status=DeploymentStatus.PENDING,
            source_version=source_version,
            started_at=now,
            last_update=now,
        )
        self.db.add(deployment)
        self.db.commit()
        self.db.refresh(deployment)
        logger.info(
            "Deployment %s created: service %s sha %s -> %s, requested by %s",
            deployment.id, service_id, commit_sha, environment.name, requested_by
        )
        return deployment

    def advance(self, deployment_id: int, new_status: DeploymentStatus) -> Deployment:
        """
        Move a deployment forward to new_status.

        Raises:
            DeploymentNotFound: unknown deployment id
            InvalidTransitionError: the deployment is terminal, new_status is
                not a forward step, or a concurrent advance won the race
        """
        new_status = DeploymentStatus(new_status)
        deployment = (
            self.db.query(Deployment)
            .filter(Deployment.id == deployment_id)
            .with_for_update()
            .populate_existing()
            .first()
        )
        if deployment is None:
            self.db.rollback()
            raise DeploymentNotFound(deployment_id)

        current = DeploymentStatus(deployment.status)
        if is_terminal(current):
            self.db.rollback()
            raise InvalidTransitionError(
                deployment_id, current.value, new_status.value,
                reason="deployment already finished"
            )
        if not can_transition(current, new_status):
            self.db.rollback()
            raise InvalidTransitionError(deployment_id, current.value, new_status.value)

        deployment.status = new_status
        deployment.last_update = max(utcnow(), deployment.started_at)
        try:
            self.db.commit()
        except StaleDataError:
            self.db.rollback()
            raise InvalidTransitionError(
                deployment_id, current.value, new_status.value,
                reason="deployment was modified concurrently"
            )
        self.db.refresh(deployment)
        logger.info("Deployment %s: %s -> %s", deployment_id, current.value, new_status.value)
        return deployment

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get(self, deployment_id: int) -> Deployment:
        deployment = self.db.get(Deployment, deployment_id)
        if deployment is None:
            raise DeploymentNotFound(deployment_id)
        return deployment

    def list(
        self,
        environment_id: Optional[int] = None,
        service_id: Optional[int] = None,
        status: Optional[DeploymentStatus] = None
    ) -> List[Deployment]:
        """Deployments matching all given filters, newest first."""
        query = self.db.query(Deployment)
        if environment_id is not None:
            query = query.filter(Deployment.environment_id == environment_id)
        if service_id is not None:
            query = query.filter(Deployment.service_id == service_id)
        if status is not None:
            query = query.filter(Deployment.status == DeploymentStatus(status))
        return query.order_by(Deployment.id.desc()).all()

    # ------------------------------------------------------------------
    # Source-control checks
    # ------------------------------------------------------------------

    def _repo_and_sha(self, deployment: Deployment):
        version = deployment.deployable_version
        repo = self.verifier.repo_name_from_url(version.github_repository_url)
        return repo, version.git_commit_sha

    def verify_readiness(self, deployment_id: int) -> bool:
        """
        Whether the deployed commit has a successful combined status.

        Returned as-is from the verifier: False covers both "status failed"
        and "commit could not be resolved". Advisory only.
        """
        repo, sha = self._repo_and_sha(self.get(deployment_id))
        ready = self.verifier.is_commit_status_ok(repo, sha)
        logger.info("Deployment %s readiness (%s@%s): %s", deployment_id, repo, sha, ready)
        return ready

    def commit_details(self, deployment_id: int) -> CommitDetails:
        """
        Commit metadata of the deployed version.

        Raises:
            VerificationUnavailableError: source control could not resolve it
        """
        repo, sha = self._repo_and_sha(self.get(deployment_id))
        details = self.verifier.get_commit_details(repo, sha)
        if details is None:
            raise VerificationUnavailableError(repo, sha)
        return details

    def is_in_branch(self, deployment_id: int, branch: str) -> bool:
        """Whether the deployed commit is in branch history (False if unresolved)."""
        repo, sha = self._repo_and_sha(self.get(deployment_id))
        return self.verifier.is_commit_in_branch_history(repo, branch, sha)
