from deploy_tracker.schemas.service import ServiceCreate, ServiceResponse
from deploy_tracker.schemas.deployable_version import (
    DeployableVersionCreate, DeployableVersionResponse, LatestCommitsResponse
)
from deploy_tracker.schemas.environment import EnvironmentCreate, EnvironmentResponse
from deploy_tracker.schemas.deployment import (
    DeploymentCreate, DeploymentStatusUpdate, DeploymentResponse,
    ReadinessResponse, BranchCheckResponse, CommitDetailsResponse
)

__all__ = [
    "ServiceCreate", "ServiceResponse",
    "DeployableVersionCreate", "DeployableVersionResponse", "LatestCommitsResponse",
    "EnvironmentCreate", "EnvironmentResponse",
    "DeploymentCreate", "DeploymentStatusUpdate", "DeploymentResponse",
    "ReadinessResponse", "BranchCheckResponse", "CommitDetailsResponse"
]
