from fastapi import APIRouter, Depends
from typing import List

from deploy_tracker.api.dependencies import get_environment_registry
from deploy_tracker.services import EnvironmentRegistry
from deploy_tracker.schemas.environment import EnvironmentCreate, EnvironmentResponse

router = APIRouter(prefix="/environments", tags=["environments"])

@router.get("/", response_model=List[EnvironmentResponse])
async def list_environments(registry: EnvironmentRegistry = Depends(get_environment_registry)):
    """List all environments (without cluster credentials)."""
    return registry.list()

@router.post("/", response_model=EnvironmentResponse, status_code=201)
async def create_environment(
    environment: EnvironmentCreate,
    registry: EnvironmentRegistry = Depends(get_environment_registry)
):
    """Register a new environment. The cluster token is encrypted before storage."""
    return registry.register(
        name=environment.name,
        geo_region=environment.geo_region,
        availability=environment.availability,
        endpoint=environment.kubernetes_master,
        credential=environment.kubernetes_token.get_secret_value(),
    )

@router.get("/{environment_id}", response_model=EnvironmentResponse)
async def get_environment(
    environment_id: int,
    registry: EnvironmentRegistry = Depends(get_environment_registry)
):
    return registry.get(environment_id)
