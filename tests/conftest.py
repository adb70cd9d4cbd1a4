import logging
from pathlib import Path
from typing import Callable, Dict

import pytest

from mvcstarter.core.config import build_console_config, build_web_config
from mvcstarter.core.env import EnvironmentMap


BASE_ENV = {
    "APP_ID": "starter",
    "APP_NAME": "Starter App",
    "DB_DRIVER": "mysql",
    "DB_HOST": "127.0.0.1",
    "DB_PORT": "3306",
    "DB_NAME": "starter",
    "DB_USER": "starter",
    "DB_PASSWORD": "s3cret",
    "COOKIE_VALIDATION_KEY": "test-cookie-key",
}


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop handlers installed by configure_logging() between tests."""
    root = logging.getLogger()
    level = root.level
    yield
    for handler in list(root.handlers):
        if getattr(handler, "_mvcstarter", False):
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)


@pytest.fixture
def env_values() -> Dict[str, str]:
    return dict(BASE_ENV)


@pytest.fixture
def env(env_values) -> EnvironmentMap:
    return EnvironmentMap(env_values)


@pytest.fixture
def web_config(env, tmp_path):
    return build_web_config(env, base_path=tmp_path)


@pytest.fixture
def console_config(env, tmp_path):
    return build_console_config(env, base_path=tmp_path)


@pytest.fixture
def write_env(tmp_path) -> Callable[[str], Path]:
    def _write(text: str, name: str = ".env") -> Path:
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return path
    return _write
