from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.cors import CORSMiddleware
from starlette.types import ASGIApp, Receive, Scope, Send
from typing import Iterable
import logging
import time

logger = logging.getLogger(__name__)

# Policy for routes called from any origin (browser extensions, pasted-email tools)
OPEN_CORS_OPTIONS = {
    "allow_origins": ["*"],
    "allow_methods": ["POST", "OPTIONS"],
    "allow_headers": ["authorization", "x-client-info", "apikey", "content-type"],
}


class RouteCORSMiddleware:
    """
    App-wide CORS with an allow-all policy for selected paths.

    Requests under ``open_paths`` are handled by a CORSMiddleware built from
    OPEN_CORS_OPTIONS; everything else uses ``options`` (the CORS_ORIGINS policy).
    """

    def __init__(self, app: ASGIApp, open_paths: Iterable[str] = (), **options):
        self.app = app
        self.open_paths = tuple(open_paths)
        self.default_cors = CORSMiddleware(app, **options)
        self.open_cors = CORSMiddleware(app, **OPEN_CORS_OPTIONS)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "http" and self.open_paths and scope["path"].startswith(self.open_paths):
            await self.open_cors(scope, receive, send)
        else:
            await self.default_cors(scope, receive, send)


async def exception_handler(request: Request, call_next):
    """Log every request with its duration and turn unhandled errors into a JSON 500"""
    started = time.perf_counter()
    try:
        response = await call_next(request)
    except Exception as e:
        logger.error(f"Unhandled exception on {request.method} {request.url.path}: {str(e)}", exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": "Internal server error",
                "detail": str(e) if request.app.state.ENVIRONMENT == "development" else "An error occurred"
            }
        )

    duration_ms = (time.perf_counter() - started) * 1000
    logger.info(f"{request.method} {request.url.path} -> {response.status_code} ({duration_ms:.1f} ms)")
    return response
