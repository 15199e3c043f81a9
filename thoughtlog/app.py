"""
FastAPI application
Exposes the log pipeline over HTTP
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from thoughtlog import __version__
from thoughtlog.core.logger import get_logger
from thoughtlog.handlers import register_fastapi_routes

logger = get_logger(__name__)


def create_app() -> FastAPI:
    """Build the FastAPI application with all registered handlers"""
    app = FastAPI(
        title="ThoughtLog API",
        description="Journal entry classification and storage API",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Add CORS middleware for the local frontend
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/")
    async def root():
        """Service information"""
        return {"status": "ok", "message": "ThoughtLog API Server", "version": __version__}

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {"status": "healthy"}

    register_fastapi_routes(app, prefix="/api")
    logger.info("FastAPI routes registered successfully")
    return app


app = create_app()
