from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
import uvicorn

from tuplemr.api.routes import get_tuple_space, router
from tuplemr.services.tuple_space import TupleSpace
from tuplemr.utils.config import get_settings
from tuplemr.utils.logger import setup_logger

# -------------------------------------------------------------------
# Load application settings and initialize logger
# -------------------------------------------------------------------
settings = get_settings()
logger = setup_logger("TupleMR Master")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager for startup and shutdown events.

    Args:
        app (FastAPI): The FastAPI application instance.
    """
    # Startup phase
    logger.info("TupleMR tuple-space service starting up...")
    yield
    # Shutdown phase
    logger.info("TupleMR tuple-space service shutting down...")


# -------------------------------------------------------------------
# FastAPI application initialization
# -------------------------------------------------------------------
app = FastAPI(
    title="TupleMR Master Node",
    version="1.0.0",
    lifespan=lifespan
)

# Register API routes under versioned prefix
app.include_router(router, prefix="/api/v1")


@app.get("/health")
async def health_check(space: TupleSpace = Depends(get_tuple_space)):
    """Global health check reporting the number of stored tuples."""
    return {
        "status": "healthy",
        "service": "TupleMR Master",
        "tuples": space.count(),
    }


def main():
    """Run the tuple-space service with uvicorn."""
    uvicorn.run(
        "tuplemr.master.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        reload=settings.debug  # reload enabled if debug mode is active
    )


# -------------------------------------------------------------------
# Application entry point
# -------------------------------------------------------------------
if __name__ == "__main__":
    main()
