import logging
import sys

import uvicorn

from .app import create_app
from .core.config import PROJECT_ROOT, build_web_config
from .core.env import load_env, locate_env_file
from .core.errors import ConfigError
from .core.log_setup import configure_logging

logger = logging.getLogger(__name__)


def main() -> int:
    try:
        env = load_env(locate_env_file(base_path=PROJECT_ROOT))
        config = build_web_config(env)
    except ConfigError as e:
        logger.error(f"Configuration error: {e}")
        return 1

    configure_logging(config)
    app = create_app(config)

    host = env.get("APP_HOST", "0.0.0.0")
    try:
        port = int(env.get("APP_PORT", "8080"))
    except ValueError:
        logger.error(f"Configuration error: APP_PORT must be an integer, got {env.get('APP_PORT')!r}")
        return 1

    uvicorn.run(app, host=host, port=port, log_config=None)
    return 0


if __name__ == "__main__":
    sys.exit(main())
