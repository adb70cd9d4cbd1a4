"""Environment file loading.

The env file is a flat ``KEY=VALUE`` text file. Blank lines and lines
starting with ``#`` are ignored, values may contain ``=`` and may be wrapped
in one layer of single or double quotes. The parsed result is an immutable
mapping that is passed explicitly to the configuration builders.
"""

import logging
import os
from pathlib import Path
from typing import Dict, Iterator, Mapping, Optional, Union

from dotenv import find_dotenv

from .errors import ConfigError, ConfigErrorReason


logger = logging.getLogger(__name__)

ENV_FILE_VARIABLE = "APP_ENV_FILE"
TRUTHY = {"1", "true", "yes", "on"}


class EnvironmentMap(Mapping[str, str]):
    """Read-only, insertion-ordered mapping of environment keys to values."""

    def __init__(self, values: Optional[Mapping[str, str]] = None, source: Optional[Path] = None):
        self._values: Dict[str, str] = dict(values or {})
        self.source = source

    def __getitem__(self, key: str) -> str:
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"EnvironmentMap(keys={list(self._values)!r}, source={self.source!r})"

    def require(self, key: str) -> str:
        if key not in self._values:
            raise ConfigError(
                ConfigErrorReason.MISSING_KEY,
                f"Required environment key is missing: {key}",
                key=key,
            )
        return self._values[key]

    def get_bool(self, key: str, default: bool = False) -> bool:
        raw = self._values.get(key)
        if raw is None:
            return default
        value = raw.strip().lower()
        if value in TRUTHY:
            return True
        try:
            return int(value) != 0
        except ValueError:
            return False


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
        return value[1:-1]
    return value


def parse_env_lines(lines) -> Dict[str, str]:
    data: Dict[str, str] = {}
    for line in lines:
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        if not key:
            continue
        data[key] = _unquote(value.strip())
    return data


def load_env(path: Union[str, Path]) -> EnvironmentMap:
    """Parse the env file at ``path``.

    Raises:
        ConfigError: MISSING_FILE when ``path`` does not exist.
    """
    env_path = Path(path)
    if not env_path.is_file():
        raise ConfigError(
            ConfigErrorReason.MISSING_FILE,
            f".env file not found at: {env_path}",
        )

    text = env_path.read_text(encoding="utf-8")
    data = parse_env_lines(text.splitlines())
    logger.debug(f"Loaded {len(data)} environment keys from {env_path}")
    return EnvironmentMap(data, source=env_path)


def locate_env_file(explicit: Optional[Union[str, Path]] = None, base_path: Optional[Path] = None) -> Path:
    if explicit:
        return Path(explicit)
    from_process = os.environ.get(ENV_FILE_VARIABLE)
    if from_process:
        return Path(from_process)
    found = find_dotenv(usecwd=True)
    if found:
        return Path(found)
    return (base_path or Path.cwd()) / ".env"
