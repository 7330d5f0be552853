from datetime import datetime, timezone
from typing import Optional
import logging

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text

from socialfeed.core.config import Settings, settings as default_settings
from socialfeed.core.errors import ErrorKind, error_response, register_exception_handlers
from socialfeed.core.rate_limit import RateLimitStore, general_rate_limit
from socialfeed.db.init_db import create_all_tables
from socialfeed.db.session import Database
from socialfeed.middleware.auth_logging import AuthLoggingMiddleware
from socialfeed.middleware.request_logging import RequestLoggingMiddleware
from socialfeed.middleware.request_size import RequestSizeLimitMiddleware
from socialfeed.modules.auth.api.router import router as auth_router
from socialfeed.modules.user_management.api.router import router as user_router
from socialfeed.modules.follows.api.router import router as follows_router
from socialfeed.modules.posts.api.router import router as posts_router
from socialfeed.modules.posts.likes.api.router import router as likes_router
from socialfeed.modules.home_feed.api.router import router as home_feed_router

logger = logging.getLogger("socialfeed")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or default_settings

    # Configure logging
    logging.basicConfig(
        level=logging.DEBUG if settings.DEBUG else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    app = FastAPI(
        title=settings.PROJECT_NAME,
        openapi_url=f"{settings.API_PREFIX}/openapi.json",
        debug=settings.DEBUG,
        description="Social media API: users, posts, follows, likes and timelines",
        version=settings.VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.settings = settings
    app.state.db = Database(settings.DATABASE_URL)
    app.state.rate_limits = RateLimitStore()

    @app.on_event("startup")
    def startup_event():
        logger.info(f"Starting server in {settings.ENVIRONMENT} mode")
        engine = app.state.db.init()
        if not create_all_tables(engine):
            logger.warning("Database tables could not be created; requests will fail until the database is reachable")

    @app.on_event("shutdown")
    def shutdown_event():
        app.state.db.dispose()
        logger.info("Server stopped")

    register_exception_handlers(app)

    # Add middleware (the last one added runs first)
    app.add_middleware(RequestSizeLimitMiddleware, max_size=settings.MAX_REQUEST_SIZE)
    app.add_middleware(AuthLoggingMiddleware)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.BACKEND_CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-Requested-With"],
    )

    # Register API routers
    api = settings.API_PREFIX
    limited = [Depends(general_rate_limit)]
    app.include_router(auth_router, prefix=f"{api}/auth", tags=["authentication"], dependencies=limited)
    app.include_router(user_router, prefix=f"{api}/users", tags=["users"], dependencies=limited)
    app.include_router(follows_router, prefix=f"{api}/users", tags=["follows"], dependencies=limited)
    app.include_router(posts_router, prefix=f"{api}/posts", tags=["posts"], dependencies=limited)
    app.include_router(likes_router, prefix=f"{api}/posts/{{post_id}}", tags=["likes"], dependencies=limited)
    app.include_router(home_feed_router, prefix=f"{api}/feed", tags=["home feed"], dependencies=limited)

    @app.get(f"{api}/health")
    def health_check(request: Request):
        try:
            with request.app.state.db.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except Exception as e:
            logger.error(f"Database health check failed: {e}")
            return error_response(ErrorKind.UNAVAILABLE.status_code, "Database connection failed")

        return {
            "success": True,
            "message": "API is healthy",
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    @app.get("/")
    async def root():
        return {
            "message": f"Welcome to {settings.PROJECT_NAME}",
            "version": settings.VERSION,
            "environment": settings.ENVIRONMENT,
            "documentation": "/docs" if settings.DEBUG else None,
        }

    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("socialfeed.main:app", host="0.0.0.0", port=8000, reload=True)
