from pydantic import BaseModel, ConfigDict, Field

class DeployableVersionCreate(BaseModel):
    service_id: int
    git_commit_sha: str = Field(..., min_length=1, max_length=1000)
    github_repository_url: str = Field(..., min_length=1, max_length=1000)

class DeployableVersionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    
    id: int
    service_id: int
    git_commit_sha: str
    github_repository_url: str


class LatestCommitsResponse(BaseModel):
    """Latest shas of a repository. Empty means "unknown", not "no commits"."""
    repository: str
    shas: list[str]
