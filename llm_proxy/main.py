import logging
import traceback
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from llm_proxy.api.router import api_router
from llm_proxy.core.config import settings
from llm_proxy.core.exceptions import AppError, UpstreamError
from llm_proxy.core.logging import setup_logging
from llm_proxy.core.middleware import RequestLoggingMiddleware
from llm_proxy.core.quota import get_quota_gate

# Configure logging before anything else
setup_logging()

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Proxy running on http://%s:%d", settings.app_host, settings.app_port)

    yield

    # Only close the counter store if a request ever built it
    if get_quota_gate.cache_info().currsize:
        store = get_quota_gate().store
        if store is not None:
            await store.aclose()
    logger.info("Proxy shut down")


app = FastAPI(
    title="LLM Proxy",
    description="Chat, model listing and transcription proxy for OpenAI, Anthropic and Gemini",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs" if settings.app_debug else None,
    redoc_url="/redoc" if settings.app_debug else None,
)


@app.exception_handler(AppError)
async def _app_error_handler(request: Request, exc: AppError):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(UpstreamError)
async def _upstream_error_handler(request: Request, exc: UpstreamError):
    # Passthrough: provider status and body, unmodified
    return Response(content=exc.body, status_code=exc.status_code, media_type=exc.content_type)


@app.exception_handler(RequestValidationError)
async def _request_validation_handler(request: Request, exc: RequestValidationError):
    details = "; ".join(
        f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg', '')}" for err in exc.errors()
    )
    return JSONResponse(status_code=400, content={"error": details or "Invalid request"})


# Log unhandled exceptions with their traceback
@app.exception_handler(Exception)
async def _unhandled_exception_handler(request: Request, exc: Exception):
    tb = traceback.format_exception(type(exc), exc, exc.__traceback__)
    logger.error("Unhandled %s on %s %s:\n%s", type(exc).__name__, request.method, request.url.path, "".join(tb))
    return JSONResponse(status_code=500, content={"error": str(exc) or type(exc).__name__})


# Request logging middleware
app.add_middleware(RequestLoggingMiddleware)

# CORS: parse allowed_origins from settings (comma-separated)
_origins = [o.strip() for o in settings.allowed_origins.split(",") if o.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=_origins,
    allow_credentials="*" not in _origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router)


@app.get("/health")
async def health():
    return {"ok": True}
