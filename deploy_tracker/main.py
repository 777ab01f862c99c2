from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from deploy_tracker.config import settings
from deploy_tracker.logger import setup_logger
from deploy_tracker.models.database import engine, Base
from deploy_tracker.core.exceptions import (
    TrackerError,
    NotFoundError,
    DuplicateEntityError,
    InvalidTransitionError,
    VerificationUnavailableError,
)
from deploy_tracker.scm.github_connector import GithubConnector
from deploy_tracker.api.routes import health, services, environments, deployable_versions, deployments

logger = setup_logger(debug_mode=settings.DEBUG, level=settings.LOG_LEVEL)

# Create tables
Base.metadata.create_all(bind=engine)

# One verifier for the whole process, handed to routes via get_verifier
verifier = GithubConnector.from_settings(settings)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    verifier.close()


app = FastAPI(
    title="Deploy Tracker API",
    version="1.0.0",
    description="Tracks services, environments, deployable versions and deployments",
    lifespan=lifespan
)
app.state.verifier = verifier

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Error mapping
_STATUS_CODES = (
    (NotFoundError, 404),
    (DuplicateEntityError, 409),
    (InvalidTransitionError, 409),
    (VerificationUnavailableError, 503),
)


@app.exception_handler(TrackerError)
async def tracker_error_handler(request: Request, exc: TrackerError):
    status_code = next((code for kind, code in _STATUS_CODES if isinstance(exc, kind)), 400)
    if status_code >= 500:
        logger.warning("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=status_code, content={"detail": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """422 without echoing the submitted body, which may carry cluster tokens."""
    errors = [
        {key: value for key, value in error.items() if key not in ("input", "ctx")}
        for error in exc.errors()
    ]
    return JSONResponse(status_code=422, content={"detail": errors})


# Routes
app.include_router(health.router)
app.include_router(services.router)
app.include_router(environments.router)
app.include_router(deployable_versions.router)
app.include_router(deployments.router)

@app.get("/")
async def root():
    return {"message": "Deploy Tracker API", "version": "1.0.0"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.HOST, port=settings.PORT)
