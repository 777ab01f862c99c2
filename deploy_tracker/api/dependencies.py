from fastapi import Depends, Request
from sqlalchemy.orm import Session
from deploy_tracker.models.database import get_db
from deploy_tracker.core.protocols import SourceControlVerifier
from deploy_tracker.services import (
    ServiceRegistry, VersionRegistry, EnvironmentRegistry, DeploymentTracker
)


def get_verifier(request: Request) -> SourceControlVerifier:
    """The process-wide verifier built in deploy_tracker.main."""
    return request.app.state.verifier


def get_service_registry(db: Session = Depends(get_db)) -> ServiceRegistry:
    return ServiceRegistry(db)


def get_version_registry(db: Session = Depends(get_db)) -> VersionRegistry:
    return VersionRegistry(db)


def get_environment_registry(db: Session = Depends(get_db)) -> EnvironmentRegistry:
    return EnvironmentRegistry(db)


def get_tracker(
    db: Session = Depends(get_db),
    verifier: SourceControlVerifier = Depends(get_verifier)
) -> DeploymentTracker:
    return DeploymentTracker(db, verifier)
