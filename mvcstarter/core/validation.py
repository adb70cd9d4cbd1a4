import logging
import re
from typing import Any

from .errors import BindingError


logger = logging.getLogger(__name__)

INTEGER_PATTERN = re.compile(r'-?\d+', re.ASCII)
IDENTIFIER_PATTERN = re.compile(r'[a-z0-9][a-z0-9-]*')
TRUE_VALUES = {'1', 'true', 'yes', 'on'}
FALSE_VALUES = {'0', 'false', 'no', 'off', ''}


def _invalid(name: str, raw: Any, expected: str) -> BindingError:
    logger.debug(f"Rejected value {raw!r} for parameter {name}: expected {expected}")
    return BindingError(name, f"Invalid data received for parameter \"{name}\": expected {expected}")


def coerce_param(name: str, raw: Any, annotation: Any) -> Any:
    """Convert a raw string parameter to the type the action declares."""
    if annotation is bool:
        value = str(raw).strip().lower()
        if value in TRUE_VALUES:
            return True
        if value in FALSE_VALUES:
            return False
        raise _invalid(name, raw, "a boolean")

    if annotation is int:
        value = str(raw).strip()
        if not INTEGER_PATTERN.fullmatch(value):
            raise _invalid(name, raw, "an integer")
        return int(value)

    if annotation is float:
        try:
            return float(str(raw).strip())
        except ValueError:
            raise _invalid(name, raw, "a number")

    if annotation is str:
        return str(raw)

    return raw


def validate_identifier(value: str) -> bool:
    return bool(value) and IDENTIFIER_PATTERN.fullmatch(value) is not None
