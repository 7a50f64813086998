"""
FastAPI Application Entry Point

This is the main application module that configures and runs the
Pizza Hunt API server.

Every error the API returns is a JSON object with a `message` field.
Offline clients resubmitting queued pizzas use that field to tell a
rejected batch from an accepted one.

Run with: uvicorn pizza_hunt.main:app --host 0.0.0.0 --port 3001
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .core.config import settings
from .core.exceptions import DocumentStoreError
from .core.utils import get_timestamp
from .api.routes import pizza_router, comment_router, router
from .storage.documents import DocumentStore

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


# ============================================================
# Application Lifespan Handler
# ============================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Startup verifies the document store is reachable and logs the
    configuration. Nothing needs cleaning up on shutdown.
    """
    logger.info("=" * 60)
    logger.info("PIZZA HUNT API STARTING")
    logger.info("=" * 60)
    logger.info(f"Server Port: {settings.server_port}")
    logger.info(f"API Version: {settings.api_version}")
    logger.info(f"Pizza Index Key: {settings.store.pizza_index_key}")

    if await app.state.store.health_check():
        logger.info("Document store connection verified")
    else:
        logger.warning("Could not verify document store connection")

    logger.info(f"API ready to accept requests on port {settings.server_port}")

    yield

    logger.info("API shutting down...")


# ============================================================
# Exception Handlers
# ============================================================

async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Render HTTP errors as `{"message": ...}`."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": str(exc.detail)},
        headers=getattr(exc, "headers", None)
    )


async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError
):
    """
    Handle validation errors with a clean response.

    Returns 422 with details about what failed validation.
    """
    logger.warning(f"Validation error: {exc.errors()}")
    return JSONResponse(
        status_code=422,
        content={
            "message": "Validation failed",
            "detail": jsonable_errors(exc),
            "timestamp": get_timestamp()
        }
    )


async def document_store_exception_handler(request: Request, exc: DocumentStoreError):
    """The document store is down: 503 so clients keep their data and retry."""
    logger.error(f"Document store error: {str(exc)}")
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "message": "Storage unavailable. Please retry.",
            "timestamp": get_timestamp()
        }
    )


async def global_exception_handler(request: Request, exc: Exception):
    """
    Global exception handler for anything the routes did not expect.

    The error is logged with its traceback; the client only sees a
    generic message.
    """
    logger.error(f"Unhandled exception: {str(exc)}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "message": "An unexpected error occurred. Please try again.",
            "timestamp": get_timestamp()
        }
    )


def jsonable_errors(exc: RequestValidationError) -> list[dict]:
    # ctx may carry exception instances that JSONResponse cannot encode
    return [
        {k: v for k, v in error.items() if k != "ctx"}
        for error in exc.errors()
    ]


# ============================================================
# Application Factory
# ============================================================

def create_app(store: DocumentStore | None = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        store: Document store to serve from, defaults to one built
            from the global settings

    Returns:
        The configured application
    """
    app = FastAPI(
        title=settings.api_title,
        description=settings.api_description,
        version=settings.api_version,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json"
    )
    app.state.store = store or DocumentStore()

    # CORS middleware - configure for your deployment
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Restrict in production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(DocumentStoreError, document_store_exception_handler)
    app.add_exception_handler(Exception, global_exception_handler)

    app.include_router(pizza_router, tags=["Pizzas"])
    app.include_router(comment_router, tags=["Comments"])
    app.include_router(router, tags=["Health"])

    @app.get("/", tags=["Root"])
    async def root():
        """Basic service info and the list of endpoints."""
        return {
            "service": settings.api_title,
            "version": settings.api_version,
            "description": settings.api_description,
            "endpoints": {
                "pizzas": "GET|POST /api/pizzas",
                "pizza": "GET|PUT|DELETE /api/pizzas/{pizza_id}",
                "comment": "POST /api/comments/{pizza_id}",
                "reply": "PUT /api/comments/{pizza_id}/{comment_id}",
                "health": "GET /health",
                "docs": "GET /docs"
            },
            "timestamp": get_timestamp()
        }

    return app


app = create_app()


# ============================================================
# Run Configuration (for direct execution)
# ============================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "pizza_hunt.main:app",
        host="0.0.0.0",
        port=settings.server_port,
        reload=False,
        workers=1,
        log_level="info"
    )
