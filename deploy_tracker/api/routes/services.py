from fastapi import APIRouter, Depends
from typing import List

from deploy_tracker.api.dependencies import get_service_registry
from deploy_tracker.services import ServiceRegistry
from deploy_tracker.schemas.service import ServiceCreate, ServiceResponse

router = APIRouter(prefix="/services", tags=["services"])

@router.get("/", response_model=List[ServiceResponse])
async def list_services(registry: ServiceRegistry = Depends(get_service_registry)):
    """List all services."""
    return registry.list()

@router.post("/", response_model=ServiceResponse, status_code=201)
async def create_service(
    service: ServiceCreate,
    registry: ServiceRegistry = Depends(get_service_registry)
):
    """Register a new service. Names are unique."""
    return registry.register(service.name)

@router.get("/{service_id}", response_model=ServiceResponse)
async def get_service(
    service_id: int,
    registry: ServiceRegistry = Depends(get_service_registry)
):
    return registry.get(service_id)
