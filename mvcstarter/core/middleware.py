import logging
import time
from typing import Callable

from fastapi import Request
from fastapi.responses import JSONResponse

from .errors import error_payload


logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


def _request_id(request: Request) -> str:
    request_id = getattr(request.state, "request_id", None)
    if request_id is None:
        request_id = request.headers.get(REQUEST_ID_HEADER) or f"{int(time.time() * 1000)}-{id(request)}"
        request.state.request_id = request_id
    return request_id


async def log_requests(request: Request, call_next: Callable):
    start_time = time.time()
    request_id = _request_id(request)

    try:
        response = await call_next(request)
    except Exception as e:
        process_time = time.time() - start_time
        logger.error(f"[{request_id}] {request.method} {request.url.path} - ERROR: {str(e)} - {process_time:.2f}s")
        raise

    process_time = time.time() - start_time
    response.headers[REQUEST_ID_HEADER] = request_id
    # Only log slow requests (>1s) or errors
    if process_time > 1.0 or response.status_code >= 400:
        logger.info(f"[{request_id}] {request.method} {request.url.path} - {response.status_code} - {process_time:.2f}s")
    return response


async def global_exception_handler(request: Request, exc: Exception):
    """Last resort for errors raised outside the dispatcher."""
    request_id = _request_id(request)
    logger.error(f"[{request_id}] Unhandled exception in {request.method} {request.url.path}: {str(exc)}", exc_info=True)

    payload = error_payload(exc)
    return JSONResponse(
        status_code=payload.status_code,
        content=payload.to_dict(),
        headers={REQUEST_ID_HEADER: request_id},
    )
