"""
Registry of deployable versions.

A deployable version pins one service to one source-control commit. Versions
are immutable: there is no update or delete, and (service, sha) is unique.
"""

import logging
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from deploy_tracker.core.exceptions import (
    DuplicateVersion,
    UnknownService,
    UnknownVersion,
    VerificationUnavailableError,
)
from deploy_tracker.core.protocols import SourceControlVerifier
from deploy_tracker.models.deployable_version import DeployableVersion
from deploy_tracker.models.service import Service

logger = logging.getLogger(__name__)


class VersionRegistry:
    def __init__(self, db: Session):
        self.db = db

    def register(self, service_id: int, commit_sha: str, repository_url: str) -> DeployableVersion:
        """
        Record a new deployable version.

        Raises:
            UnknownService: service_id does not reference an existing service
            DuplicateVersion: (service_id, commit_sha) is already registered
        """
        if self.db.get(Service, service_id) is None:
            raise UnknownService(service_id)
        if self.lookup(service_id, commit_sha) is not None:
            raise DuplicateVersion(f"{service_id}@{commit_sha}")

        version = DeployableVersion(
            service_id=service_id,
            git_commit_sha=commit_sha,
            github_repository_url=repository_url,
        )
        self.db.add(version)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise DuplicateVersion(f"{service_id}@{commit_sha}")
        self.db.refresh(version)
        logger.info(
            "Registered deployable version %s for service %s (sha %s)",
            version.id, service_id, commit_sha
        )
        return version

    def lookup(self, service_id: int, commit_sha: str) -> Optional[DeployableVersion]:
        return self.db.query(DeployableVersion).filter(
            DeployableVersion.service_id == service_id,
            DeployableVersion.git_commit_sha == commit_sha
        ).first()

    def get(self, version_id: int) -> DeployableVersion:
        version = self.db.get(DeployableVersion, version_id)
        if version is None:
            raise UnknownVersion(version_id)
        return version

    def list_for_service(self, service_id: int) -> List[DeployableVersion]:
        if self.db.get(Service, service_id) is None:
            raise UnknownService(service_id)
        return self.db.query(DeployableVersion).filter(
            DeployableVersion.service_id == service_id
        ).order_by(DeployableVersion.id.desc()).all()

    def latest_on_branch(
        self,
        service_id: int,
        branch: str,
        verifier: SourceControlVerifier
    ) -> DeployableVersion:
        """
        The registered version matching the head commit of a branch.

        The repository is taken from the service's most recently registered
        version.

        Raises:
            UnknownService: the service does not exist
            UnknownVersion: the service has no versions, or the head commit
                of the branch was never registered
            VerificationUnavailableError: the branch head could not be resolved
        """
        versions = self.list_for_service(service_id)
        if not versions:
            raise UnknownVersion(service_id, message=f"Service {service_id} has no deployable versions")

        repo = verifier.repo_name_from_url(versions[0].github_repository_url)
        sha = verifier.get_latest_commit_sha_on_branch(repo, branch)
        if not sha:
            raise VerificationUnavailableError(repo, branch)

        version = self.lookup(service_id, sha)
        if version is None:
            raise UnknownVersion(
                sha,
                message=f"Head of {branch} ({sha}) is not a registered version of service {service_id}"
            )
        return version
