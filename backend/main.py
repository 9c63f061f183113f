# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""
FastAPI application factory.

Responsibilities
----------------
* Instantiate the FastAPI app.
* Register CORS and request-logging middleware.
* Install the exception handlers that render every error as
  ``{"error": "<message>"}``.
* Mount the feature routers (auth, projects, canvas, variations, ai).
* Expose /api/health for container liveness checks.

Run directly (``python main.py``) or with ``uvicorn main:app``.
"""

import time

import uvicorn
from fastapi import FastAPI, Request
from starlette.middleware.base import BaseHTTPMiddleware
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response

from auth.router import router as auth_router
from projects.router import router as projects_router
from canvas.router import router as canvas_router
from variations.router import router as variations_router
from ai.router import router as ai_router
from ai.provider import provider_client
from core.config import settings
from core.errors import register_exception_handlers
from core.logger import logger
from core.security import get_client_ip

APP_VERSION = "0.1.0"

app = FastAPI(
    title="Canvas IDE API",
    description="AI-powered visual development workflow backend",
    version=APP_VERSION,
)

# ---------------------------------------------------------------------------
# CORS
# ---------------------------------------------------------------------------
# CORS_ORIGINS defaults to "*".  Tighten to the frontend origin in production.
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
    allow_headers=["Authorization", "Content-Type"],
)


# ---------------------------------------------------------------------------
# Request-logging middleware
# ---------------------------------------------------------------------------
# Logs every inbound request: method, path, client IP, status, latency.
# Bodies are NOT echoed – they carry passwords, tokens and API keys.


class _RequestLogMiddleware(BaseHTTPMiddleware):
    """Log method, path, client IP, response status and latency (ms)."""

    async def dispatch(self, request: Request, call_next) -> Response:
        start = time.perf_counter()
        status_code = 500  # reported when the handler raises past the app
        try:
            response: Response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            logger.info(
                "%s %s | client=%s status=%d latency=%.1fms",
                request.method,
                request.url.path,
                get_client_ip(request),
                status_code,
                (time.perf_counter() - start) * 1000,
            )


app.add_middleware(_RequestLogMiddleware)

register_exception_handlers(app)

# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
app.include_router(auth_router)
app.include_router(projects_router)
app.include_router(canvas_router)
app.include_router(variations_router)
app.include_router(ai_router)

# ---------------------------------------------------------------------------
# Lifecycle & health check
# ---------------------------------------------------------------------------


@app.on_event("startup")
async def _on_startup():
    logger.info("Canvas IDE backend starting up")


@app.on_event("shutdown")
async def _on_shutdown():
    provider_client.close()
    logger.info("Canvas IDE backend shutting down")


@app.get("/api/health")
def health():
    return {"status": "ok", "version": APP_VERSION}


if __name__ == "__main__":
    uvicorn.run(app, host=settings.host, port=settings.port)
