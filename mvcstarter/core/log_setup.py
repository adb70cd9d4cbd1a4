import logging
from pathlib import Path
from typing import Iterable, List

from .config import AppConfig, LogTarget


LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

LEVELS = {
    'trace': logging.DEBUG,
    'info': logging.INFO,
    'warning': logging.WARNING,
    'error': logging.ERROR,
}

# The error target also receives records above ERROR.
ESCALATED = {logging.ERROR: (logging.CRITICAL,)}

# Log categories map onto logger name prefixes.
CATEGORIES = {
    'application': 'mvcstarter',
}


class TargetFilter(logging.Filter):
    """Lets through records whose level and category belong to a target."""

    def __init__(self, levels: Iterable[str], categories: Iterable[str] = ()):
        super().__init__()
        self.levels = {LEVELS[level] for level in levels}
        for level in list(self.levels):
            self.levels.update(ESCALATED.get(level, ()))
        self.prefixes = [CATEGORIES.get(category, category) for category in categories]

    def filter(self, record: logging.LogRecord) -> bool:
        if record.levelno not in self.levels:
            return False
        if not self.prefixes:
            return True
        return any(record.name == prefix or record.name.startswith(prefix + '.') for prefix in self.prefixes)


def _file_handler(config: AppConfig, target: LogTarget) -> logging.Handler:
    log_file = Path(config.resolve_alias(target.log_file))
    log_file.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(log_file, encoding='utf-8')
    handler.addFilter(TargetFilter(target.levels, target.categories))
    return handler


def configure_logging(config: AppConfig, verbose: bool = False) -> List[logging.Handler]:
    """Install the stream handler and one file handler per log target.

    Handlers installed by an earlier call are removed first, so calling this
    again with another config does not duplicate output.
    """
    root = logging.getLogger()
    for handler in list(root.handlers):
        if getattr(handler, '_mvcstarter', False):
            root.removeHandler(handler)
            handler.close()

    formatter = logging.Formatter(LOG_FORMAT)
    stream = logging.StreamHandler()
    stream.setLevel(logging.DEBUG if config.log.trace_level > 0 or verbose else logging.WARNING)

    handlers: List[logging.Handler] = [stream]
    handlers.extend(_file_handler(config, target) for target in config.log.targets)

    for handler in handlers:
        handler.setFormatter(formatter)
        handler._mvcstarter = True
        root.addHandler(handler)

    root.setLevel(logging.DEBUG if config.log.trace_level > 0 or verbose else logging.INFO)
    return handlers
