import enum
from http import HTTPStatus
from typing import Iterable, Optional

from pydantic import BaseModel, ConfigDict, Field


class AppError(Exception):
    """Base class for errors raised by the application core."""


class ConfigErrorReason(str, enum.Enum):
    MISSING_FILE = "missing_file"
    MISSING_KEY = "missing_key"
    INVALID_VALUE = "invalid_value"


class ConfigError(AppError):
    """Fatal configuration problem detected at startup."""

    def __init__(self, reason: ConfigErrorReason, message: str, key: Optional[str] = None):
        super().__init__(message)
        self.reason = reason
        self.key = key


class HttpError(AppError):
    """Domain error carrying an explicit HTTP status and display name."""

    def __init__(self, status_code: int, message: str = "", name: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.name = name or _status_phrase(status_code)


class BadRequestError(HttpError):
    def __init__(self, message: str = ""):
        super().__init__(400, message)


class NotFoundError(HttpError):
    def __init__(self, message: str = ""):
        super().__init__(404, message)


class RouteError(NotFoundError):
    """No rule or registered action matches the requested route."""

    def __init__(self, path: str, message: Optional[str] = None):
        super().__init__(message or f"Page not found: /{path.strip('/')}")
        self.path = path


class BindingError(BadRequestError):
    """A required action parameter is missing or fails its type constraint."""

    def __init__(self, param: str, message: str):
        super().__init__(message)
        self.param = param


class MethodNotAllowedError(HttpError):
    def __init__(self, method: str, allowed: Iterable[str]):
        self.allowed = tuple(allowed)
        super().__init__(
            405,
            f"Method Not Allowed. This URL can only handle the following request methods: {', '.join(self.allowed)}.",
        )
        self.method = method


def _status_phrase(status_code: int) -> str:
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return f"Error {status_code}"


class ErrorPayload(BaseModel):
    """Shape handed to the error view: {name, message, statusCode}."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    name: str
    message: str
    status_code: int = Field(alias="statusCode")

    def to_dict(self) -> dict:
        return self.model_dump(by_alias=True)


def error_payload(exc: BaseException) -> ErrorPayload:
    if isinstance(exc, HttpError):
        return ErrorPayload(name=exc.name, message=str(exc), status_code=exc.status_code)

    # Only codes that are valid HTTP error statuses are honoured.
    status_code = 500
    code = getattr(exc, "code", None)
    if isinstance(code, int) and not isinstance(code, bool) and 400 <= code <= 599:
        status_code = code
    return ErrorPayload(name=f"Error {status_code}", message=str(exc), status_code=status_code)
