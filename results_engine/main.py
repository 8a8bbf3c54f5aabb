from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI

load_dotenv()

from results_engine.config import settings
from results_engine.core.dependencies import get_data_source
from results_engine.core.logging import setup_logging
from results_engine.routers.health import router as health_router
from results_engine.routers.results import router as results_router

setup_logging()


@asynccontextmanager
async def lifespan(_: FastAPI):
    yield
    # Only close a client that was actually created
    if get_data_source.cache_info().currsize:
        get_data_source().close()


# FASTAPI APPLICATION CONFIGURATION
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    openapi_tags=[{"name": "Root"}, {"name": "Health"}, {"name": "Results"}],
    lifespan=lifespan,
)

# REGISTER ROUTERS
app.include_router(health_router)   # Health
app.include_router(results_router)  # Results


# ROOT ENDPOINT
@app.get("/", tags=["Root"], summary="Root endpoint")
async def root():
    return {
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "docs": {
            "swagger": "/docs",
            "redoc": "/redoc"
        },
        "status": "running"
    }


# RUN WITH UVICORN
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "results_engine.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
    )
