"""
Main Application Entry Point.

FastAPI application with middleware, startup events, and routing.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.config import get_settings
from app.api import router
from app.monitoring import (
    PrometheusMiddleware,
    metrics_endpoint,
    set_app_info,
    set_model_info,
)

# Configure logging
logging.basicConfig(
    level=get_settings().log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Handles startup and shutdown events.
    """
    # Startup
    settings = get_settings()
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")

    set_app_info(settings.app_name, settings.app_version)
    set_model_info(
        vote_estimators=settings.vote_estimators,
        vote_seeded=settings.vote_random_state is not None,
    )

    if settings.vote_random_state is None:
        logger.info(f"Vote model uses {settings.vote_estimators} freshly seeded scorers per request")
    else:
        logger.info(
            f"Vote model uses {settings.vote_estimators} scorers "
            f"seeded from random state {settings.vote_random_state}"
        )

    yield

    # Shutdown
    logger.info("Shutting down application")


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        Configured FastAPI app
    """
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="""
        ## Loan Approval Demo API

        Demonstration scoring service built on fixed-parameter toy models.

        ### Features
        - **Loan Decisions**: Ensemble of a logistic model and a vote model
        - **Batch Decisions**: Score multiple applications at once
        - **Evaluation**: Accuracy, precision, recall, F1 and AUC on synthetic data
        - **Stock Forecasts**: Formula-driven price series and predictions
        - **Monitoring**: Prometheus metrics for observability

        ### Models
        Neither model is trained. The logistic model uses fixed weights and the
        vote model aggregates seeded heuristic scorers.
        """,
        version=settings.app_version,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Add Prometheus middleware
    app.add_middleware(PrometheusMiddleware)

    # Include API routes
    app.include_router(router, prefix="/api/v1")

    # Add metrics endpoint
    app.add_route("/metrics", metrics_endpoint)

    # Root endpoint
    @app.get("/", tags=["Root"])
    async def root():
        """Root endpoint with API information."""
        return {
            "name": settings.app_name,
            "version": settings.app_version,
            "docs": "/docs",
            "health": "/api/v1/health",
            "metrics": "/metrics",
        }

    return app


# Create application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
