import logging
import time
from datetime import datetime
from typing import Any, Mapping, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from .controllers import build_registry
from .core.config import AppConfig
from .core.dispatch import ControllerRegistry, Dispatcher
from .core.errors import BadRequestError
from .core.http import request_params, to_response, wants_json
from .core.middleware import global_exception_handler, log_requests
from .services.catalog import default_catalog
from .services.database import check_connection

logger = logging.getLogger(__name__)

HTTP_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE"]


def create_app(
    config: AppConfig,
    registry: Optional[ControllerRegistry] = None,
    services: Optional[Mapping[str, Any]] = None,
) -> FastAPI:
    """Build the web application around an already resolved configuration."""
    if config.is_console:
        raise ValueError("create_app() needs a web configuration")

    dispatcher = Dispatcher(
        config,
        registry or build_registry(),
        services=services if services is not None else {"catalog": default_catalog()},
    )

    app = FastAPI(title=config.name, docs_url=None, redoc_url=None, openapi_url=None)
    app.state.config = config
    app.state.dispatcher = dispatcher

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(config.cors_origins),
        allow_credentials=True,
        allow_methods=HTTP_METHODS + ["OPTIONS"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def _log_requests(request, call_next):
        return await log_requests(request, call_next)

    @app.exception_handler(Exception)
    async def _global_exception_handler(request, exc):
        return await global_exception_handler(request, exc)

    @app.get("/health")
    def health_check():
        """Basic health and database checks for the application."""
        health_start_time = time.time()
        connected, error = check_connection(config.database)
        health_duration = time.time() - health_start_time

        body = {
            "status": "healthy" if connected else "unhealthy",
            "service": config.id,
            "timestamp": datetime.now().isoformat(),
            "response_time_ms": round(health_duration * 1000, 2),
        }
        if error:
            body["error"] = error
        return JSONResponse(status_code=200 if connected else 503, content=body)

    @app.api_route("/{path:path}", methods=HTTP_METHODS)
    async def dispatch(path: str, request: Request):
        as_data = wants_json(request)
        try:
            params = await request_params(request)
        except BadRequestError as exc:
            return to_response(dispatcher.handle_error(exc, as_data=as_data))
        # Actions are blocking, keep them off the event loop.
        result = await run_in_threadpool(dispatcher.handle, path, request.method, params, as_data)
        return to_response(result)

    logger.debug(f"Created web app {config.id} with {len(config.url_rules)} URL rules")
    return app
