"""
Deployable version routes.

Besides plain registry access, these expose the source-control view of a
version: commit metadata, the latest commits of its repository and the
registered version that matches a branch head. Routes that reach GitHub are
plain (sync) functions so the blocking HTTP call runs in the threadpool.
"""
from fastapi import APIRouter, Depends, HTTPException, Query
from typing import List

from deploy_tracker.api.dependencies import get_version_registry, get_verifier
from deploy_tracker.core.exceptions import VerificationUnavailableError
from deploy_tracker.core.protocols import SourceControlVerifier
from deploy_tracker.services import VersionRegistry
from deploy_tracker.schemas.deployable_version import (
    DeployableVersionCreate, DeployableVersionResponse, LatestCommitsResponse
)
from deploy_tracker.schemas.deployment import CommitDetailsResponse

router = APIRouter(prefix="/deployable-versions", tags=["deployable-versions"])

@router.get("/", response_model=List[DeployableVersionResponse])
async def list_versions(
    service_id: int,
    registry: VersionRegistry = Depends(get_version_registry)
):
    """List versions of a service, newest first."""
    return registry.list_for_service(service_id)

@router.post("/", response_model=DeployableVersionResponse, status_code=201)
async def create_version(
    version: DeployableVersionCreate,
    registry: VersionRegistry = Depends(get_version_registry)
):
    """Register an immutable (service, commit) pair."""
    return registry.register(
        version.service_id,
        version.git_commit_sha,
        version.github_repository_url
    )

@router.get("/lookup", response_model=DeployableVersionResponse)
async def lookup_version(
    service_id: int,
    commit_sha: str,
    registry: VersionRegistry = Depends(get_version_registry)
):
    version = registry.lookup(service_id, commit_sha)
    if not version:
        raise HTTPException(status_code=404, detail="Deployable version not found")
    return version

@router.get("/latest", response_model=DeployableVersionResponse)
def latest_version_on_branch(
    service_id: int,
    branch: str = "master",
    registry: VersionRegistry = Depends(get_version_registry),
    verifier: SourceControlVerifier = Depends(get_verifier)
):
    """Registered version matching the current head of a branch."""
    return registry.latest_on_branch(service_id, branch, verifier)

@router.get("/{version_id}", response_model=DeployableVersionResponse)
async def get_version(
    version_id: int,
    registry: VersionRegistry = Depends(get_version_registry)
):
    return registry.get(version_id)

@router.get("/{version_id}/commit", response_model=CommitDetailsResponse)
def get_version_commit(
    version_id: int,
    registry: VersionRegistry = Depends(get_version_registry),
    verifier: SourceControlVerifier = Depends(get_verifier)
):
    """Commit metadata from source control (503 if it cannot be resolved)."""
    version = registry.get(version_id)
    repo = verifier.repo_name_from_url(version.github_repository_url)
    details = verifier.get_commit_details(repo, version.git_commit_sha)
    if details is None:
        raise VerificationUnavailableError(repo, version.git_commit_sha)
    return CommitDetailsResponse.model_validate(details)

@router.get("/{version_id}/latest-commits", response_model=LatestCommitsResponse)
def get_latest_commits(
    version_id: int,
    amount: int = Query(10, ge=1, le=100),
    registry: VersionRegistry = Depends(get_version_registry),
    verifier: SourceControlVerifier = Depends(get_verifier)
):
    """Most recent shas on the default branch of the version's repository."""
    version = registry.get(version_id)
    repo = verifier.repo_name_from_url(version.github_repository_url)
    return LatestCommitsResponse(
        repository=repo,
        shas=verifier.get_latest_commits_sha(repo, amount)
    )
