"""
Portfolio Server - Main Application Entry Point
Blog, projects showcase and hours dashboard backed by Supabase
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware
from loguru import logger
import sys
import time

from portfolio import __version__
from portfolio.config import get_settings
from portfolio.routes import auth, blog, projects, hours, stats, admin
from portfolio.database import init_supabase


logger.remove()
logger.add(
    sys.stdout,
    colorize=True,
    format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
    level="DEBUG"
)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware to log all incoming requests"""

    async def dispatch(self, request: Request, call_next):
        start_time = time.time()

        origin = request.headers.get("origin", "no-origin")
        logger.info(f"[REQUEST] {request.method} {request.url.path} - Origin: {origin}")

        response = await call_next(request)

        process_time = (time.time() - start_time) * 1000
        logger.info(f"[RESPONSE] {request.method} {request.url.path} - Status: {response.status_code} - Time: {process_time:.2f}ms")

        return response


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    logger.info("Starting Portfolio Server...")

    if get_settings().is_supabase_configured:
        init_supabase()
        logger.info("Supabase client initialized")
    else:
        logger.warning("Supabase is not configured; set SUPABASE_URL and SUPABASE_ANON_KEY")

    yield

    logger.info("Shutting down Portfolio Server...")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application"""
    settings = get_settings()

    logger.info("=== PORTFOLIO API STARTING ===")
    logger.info(f"Environment: {settings.app_env}")
    logger.info(f"Debug Mode: {settings.debug}")

    app = FastAPI(
        title="Portfolio API",
        description="Blog, projects showcase and hours-tracking dashboard with role-based access.",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    app.add_middleware(RequestLoggingMiddleware)

    logger.info(f"[CORS] Allowed origins: {settings.cors_origins_list}")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Required-Role"],
    )

    app.include_router(auth.router, prefix="/api/auth", tags=["Authentication"])
    app.include_router(blog.router, prefix="/api/blog", tags=["Blog"])
    app.include_router(projects.router, prefix="/api/projects", tags=["Projects"])
    app.include_router(hours.router, prefix="/api/hours", tags=["Hours"])
    app.include_router(stats.router, prefix="/api/stats", tags=["Statistics"])
    app.include_router(admin.router, prefix="/api/admin", tags=["Admin"])
    logger.info("[ROUTES] All routes registered")

    @app.get("/", tags=["Health"])
    async def root():
        """Health check endpoint"""
        return {
            "service": "Portfolio API",
            "status": "operational"
        }

    @app.get("/health", tags=["Health"])
    async def health_check():
        """Detailed health check"""
        return {
            "status": "healthy",
            "environment": settings.app_env,
            "version": __version__,
            "supabase_configured": settings.is_supabase_configured
        }

    logger.info("=== PORTFOLIO API READY ===")
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    settings = get_settings()
    uvicorn.run(
        "portfolio.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug
    )
