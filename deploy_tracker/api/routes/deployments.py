from fastapi import APIRouter, Depends
from typing import List, Optional

from deploy_tracker.api.dependencies import get_tracker
from deploy_tracker.core.transitions import DeploymentStatus
from deploy_tracker.services import DeploymentTracker
from deploy_tracker.schemas.deployment import (
    DeploymentCreate, DeploymentStatusUpdate, DeploymentResponse,
    ReadinessResponse, BranchCheckResponse, CommitDetailsResponse
)

router = APIRouter(prefix="/deployments", tags=["deployments"])

@router.get("/", response_model=List[DeploymentResponse])
async def list_deployments(
    environment_id: Optional[int] = None,
    service_id: Optional[int] = None,
    status: Optional[DeploymentStatus] = None,
    tracker: DeploymentTracker = Depends(get_tracker)
):
    """List deployments, newest first, optionally filtered."""
    return tracker.list(environment_id=environment_id, service_id=service_id, status=status)

@router.post("/", response_model=DeploymentResponse, status_code=201)
async def create_deployment(
    request: DeploymentCreate,
    tracker: DeploymentTracker = Depends(get_tracker)
):
    """Record a new deployment in PENDING status."""
    return tracker.create(
        environment_name=request.environment_name,
        service_id=request.service_id,
        commit_sha=request.git_commit_sha,
        requested_by=request.requested_by,
        source_version=request.source_version,
    )

@router.get("/{deployment_id}", response_model=DeploymentResponse)
async def get_deployment(
    deployment_id: int,
    tracker: DeploymentTracker = Depends(get_tracker)
):
    return tracker.get(deployment_id)

@router.post("/{deployment_id}/status", response_model=DeploymentResponse)
async def advance_deployment(
    deployment_id: int,
    update: DeploymentStatusUpdate,
    tracker: DeploymentTracker = Depends(get_tracker)
):
    """Move a deployment forward. Terminal deployments cannot change (409)."""
    return tracker.advance(deployment_id, update.status)

@router.get("/{deployment_id}/readiness", response_model=ReadinessResponse)
def deployment_readiness(
    deployment_id: int,
    tracker: DeploymentTracker = Depends(get_tracker)
):
    """
    Advisory commit-status check.

    ready=false also when source control could not resolve the commit.
    """
    return ReadinessResponse(
        deployment_id=deployment_id,
        ready=tracker.verify_readiness(deployment_id)
    )

@router.get("/{deployment_id}/commit", response_model=CommitDetailsResponse)
def deployment_commit(
    deployment_id: int,
    tracker: DeploymentTracker = Depends(get_tracker)
):
    return CommitDetailsResponse.model_validate(tracker.commit_details(deployment_id))

@router.get("/{deployment_id}/in-branch", response_model=BranchCheckResponse)
def deployment_in_branch(
    deployment_id: int,
    branch: str = "master",
    tracker: DeploymentTracker = Depends(get_tracker)
):
    return BranchCheckResponse(
        deployment_id=deployment_id,
        branch=branch,
        in_branch=tracker.is_in_branch(deployment_id, branch)
    )
