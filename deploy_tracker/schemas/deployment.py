from pydantic import BaseModel, ConfigDict, Field, field_validator
from datetime import datetime, timezone
from typing import Optional
from deploy_tracker.core.transitions import DeploymentStatus

class DeploymentCreate(BaseModel):
    environment_name: str
    service_id: int
    git_commit_sha: str
    requested_by: str = Field(..., min_length=1, max_length=1000)
    source_version: str = ""

class DeploymentStatusUpdate(BaseModel):
    status: DeploymentStatus

class DeploymentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    
    id: int
    environment_id: int
    service_id: int
    deployable_version_id: int
    user_email: str
    status: DeploymentStatus
    source_version: str
    started_at: datetime
    last_update: datetime

    @field_validator("started_at", "last_update")
    @classmethod
    def mark_utc(cls, value: datetime) -> datetime:
        # Stored naive; the database clock is UTC
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


class ReadinessResponse(BaseModel):
    """
    Advisory readiness of a deployment's commit.

    ready=False means either the commit status is not successful or source
    control could not resolve the commit; the two are not told apart here.
    """
    deployment_id: int
    ready: bool


class BranchCheckResponse(BaseModel):
    deployment_id: int
    branch: str
    in_branch: bool


class CommitDetailsResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    
    sha: str
    html_url: str
    message: str
    commit_date: datetime
    verification_state: Optional[str] = None
    author_avatar_url: Optional[str] = None
    committer_name: Optional[str] = None
