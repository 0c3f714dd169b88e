"""FastAPI application for the Cobalt chat hub."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from cobalt_hub.infra.config import config
from cobalt_hub.infra.error_handler import CobaltError, ErrorCategory


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown."""
    from cobalt_hub.infra.logging import app_logger
    app_logger.info(
        "Application starting up",
        extra={"env": config.APP_ENV, "connector": config.COBALT_API_BASE_URL},
    )

    yield

    app_logger.info("Application shutting down")


app = FastAPI(
    title="Cobalt Hub API",
    description="""
    Cobalt Hub turns loosely typed chat content into the canonical messages the
    Cobalt chat front-end renders, and delivers them to the Cobalt connector.

    ## Features

    - **Webhooks**: Trigger endpoints that receive chat events unmodified
    - **Messages**: Rich content replies, HTML replies, surveys and escalations
    - **Control**: Bot/agent mode, end chat, email and datastore state changes
    - **Tools**: Chat tools for LLM agents with JSON-schema parameters
    """,
    version="1.0.0",
    lifespan=lifespan,
    tags_metadata=[
        {
            "name": "Webhooks",
            "description": "Inbound trigger endpoints (session start, timeout, end chat, ...)",
        },
        {
            "name": "Messages",
            "description": "Normalize content, compile surveys and deliver messages",
        },
        {
            "name": "Control",
            "description": "Change the state of a chat session",
        },
        {
            "name": "Tools",
            "description": "Chat tools for LLM agents",
        },
        {
            "name": "Health",
            "description": "Health check and monitoring endpoints",
        },
    ],
)

# Setup middleware
from cobalt_hub.infra.middleware import RequestIDMiddleware, RequestLoggingMiddleware, setup_cors
from cobalt_hub.infra.timeout import TimeoutMiddleware

app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(RequestIDMiddleware)
app.add_middleware(TimeoutMiddleware)
setup_cors(app)

# Import and register routers
from cobalt_hub.api.routers import (
    control,
    health,
    messages,
    tools,
    webhooks,
)

app.include_router(webhooks.router)
app.include_router(messages.router)
app.include_router(control.router)
app.include_router(tools.router)
app.include_router(health.router)

@app.middleware("http")
async def request_size_limit_middleware(request: Request, call_next):
    """Reject bodies over MAX_REQUEST_BYTES before they are parsed."""
    content_length = request.headers.get("content-length")
    if content_length and content_length.isdigit() and int(content_length) > config.MAX_REQUEST_BYTES:
        return JSONResponse(
            status_code=413,
            content={"detail": f"Request too large. Maximum size: {config.MAX_REQUEST_BYTES} bytes"},
        )
    return await call_next(request)


# Error handlers
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle request validation errors."""
    return JSONResponse(
        status_code=422,
        content={"detail": jsonable_encoder(exc.errors())},
    )


_CATEGORY_STATUS = {
    ErrorCategory.VALIDATION: 400,
    ErrorCategory.CONTENT: 422,
    ErrorCategory.NETWORK: 502,
    ErrorCategory.API_ERROR: 502,
}


@app.exception_handler(CobaltError)
async def cobalt_error_handler(request: Request, exc: CobaltError):
    """Map hub errors to a status code by category."""
    return JSONResponse(
        status_code=_CATEGORY_STATUS.get(exc.category, 500),
        content={"detail": exc.message, "category": exc.category.value},
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Handle HTTP exceptions."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail},
    )
