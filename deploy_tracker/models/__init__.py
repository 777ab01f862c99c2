from deploy_tracker.models.database import Base, get_db, engine, SessionLocal
from deploy_tracker.models.service import Service
from deploy_tracker.models.deployable_version import DeployableVersion
from deploy_tracker.models.environment import Environment
from deploy_tracker.models.deployment import Deployment, utcnow
from deploy_tracker.core.transitions import DeploymentStatus

__all__ = [
    "Base", "get_db", "engine", "SessionLocal",
    "Service", "DeployableVersion", "Environment",
    "Deployment", "DeploymentStatus", "utcnow"
]
