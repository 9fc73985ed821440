"""
Main FastAPI application for the social networking API.
"""

import time

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from sociate import __version__
from sociate.config import AUTH_ENFORCE_ACTOR, CORS_ALLOW_ORIGIN
from sociate.errors import SociateError
from sociate.logging_config import get_logger, setup_logging
from sociate.routes.conversations import router as conversations_router
from sociate.routes.health import router as health_router
from sociate.routes.notifications import router as notifications_router
from sociate.routes.posts import router as posts_router
from sociate.routes.users import router as users_router

logger = get_logger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": CORS_ALLOW_ORIGIN,
    "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
}


def error_response(message: str, status_code: int) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def _describe_validation_error(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "invalid value")
    return f"Invalid request: {location} {message}".replace("  ", " ").strip()


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        Configured FastAPI app instance
    """
    setup_logging()
    if not AUTH_ENFORCE_ACTOR:
        logger.warning("Bearer credentials are advisory: caller-asserted user ids are trusted as-is")

    app = FastAPI(
        title="Sociate API",
        description="Users, posts, follows, direct messages and notifications",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    @app.middleware("http")
    async def envelope(request: Request, call_next):
        """CORS on every response, 204 preflight, no-store by default, top-level catch."""
        if request.method == "OPTIONS":
            return Response(status_code=204, headers={**CORS_HEADERS, "Cache-Control": "no-store"})

        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception as exc:
            logger.exception("Unhandled error on %s %s", request.method, request.url.path)
            response = error_response(str(exc) or "Internal server error", 500)

        for name, value in CORS_HEADERS.items():
            response.headers[name] = value
        response.headers.setdefault("Cache-Control", "no-store")

        logger.info(
            "%s %s -> %s (%.1f ms)",
            request.method,
            request.url.path,
            response.status_code,
            (time.perf_counter() - started) * 1000,
        )
        return response

    @app.exception_handler(SociateError)
    async def sociate_exception_handler(request: Request, exc: SociateError):
        """Map the service error taxonomy onto status codes."""
        return error_response(exc.message, exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return error_response(_describe_validation_error(exc), 400)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        # Unknown paths and known paths with the wrong method are both "not found".
        if exc.status_code in (404, 405):
            return error_response("Not found", 404)
        return error_response(str(exc.detail), exc.status_code)

    @app.exception_handler(SQLAlchemyError)
    async def sqlalchemy_exception_handler(request: Request, exc: SQLAlchemyError):
        """Handle SQLAlchemy database errors."""
        logger.error("Database error on %s %s: %s", request.method, request.url.path, exc, exc_info=exc)
        return error_response(str(exc), 500)

    # Include routers
    app.include_router(users_router)
    app.include_router(posts_router)
    app.include_router(conversations_router)
    app.include_router(notifications_router)
    app.include_router(health_router)

    return app


# Create the application instance
app = create_app()


@app.get("/")
async def root():
    """Health check endpoint."""
    return {"message": "Sociate API", "status": "healthy", "version": __version__}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("sociate.main:app", host="0.0.0.0", port=8000, reload=True, log_level="info")
