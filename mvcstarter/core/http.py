import json
import logging
from typing import Dict
from urllib.parse import parse_qsl

from fastapi import Request
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse, Response

from .dispatch import ActionResult, Data, ExitCode, Redirect, Rendered
from .errors import BadRequestError


logger = logging.getLogger(__name__)


def wants_json(request: Request) -> bool:
    return "application/json" in request.headers.get("accept", "")


def to_response(result: ActionResult) -> Response:
    if isinstance(result, Rendered):
        if result.media_type == "text/html":
            return HTMLResponse(content=result.body, status_code=result.status_code, headers=dict(result.headers))
        return Response(
            content=result.body,
            status_code=result.status_code,
            media_type=result.media_type,
            headers=dict(result.headers),
        )
    if isinstance(result, Redirect):
        return RedirectResponse(url=result.location, status_code=result.status_code, headers=dict(result.headers))
    if isinstance(result, Data):
        return JSONResponse(content=result.payload, status_code=result.status_code, headers=dict(result.headers))
    if isinstance(result, ExitCode):
        logger.error(f"Console result returned to a web request (exit code {result.code})")
        return JSONResponse(status_code=500, content={"name": "Error 500", "message": "Internal server error", "statusCode": 500})
    raise TypeError(f"Unsupported action result: {result!r}")


async def request_params(request: Request) -> Dict[str, str]:
    """Query parameters merged with a urlencoded or JSON request body."""
    params: Dict[str, str] = dict(request.query_params)
    if request.method == "GET":
        return params

    content_type = request.headers.get("content-type", "")
    if content_type.startswith("application/x-www-form-urlencoded"):
        try:
            body = (await request.body()).decode("utf-8")
        except UnicodeDecodeError:
            raise BadRequestError("Request body is not valid UTF-8.")
        params.update(parse_qsl(body, keep_blank_values=True))
    elif content_type.startswith("application/json"):
        try:
            data = json.loads(await request.body() or b"{}")
        except ValueError:
            raise BadRequestError("Request body is not valid JSON.")
        if not isinstance(data, dict):
            raise BadRequestError("Request body must be a JSON object.")
        params.update({key: value for key, value in data.items() if value is not None and not isinstance(value, (dict, list))})
    return params
