from fastapi import APIRouter

router = APIRouter(tags=["health"])

@router.get("/health")
async def health():
    """Liveness probe. No auth, no database access."""
    return {"status": "healthy"}
