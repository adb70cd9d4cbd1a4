"""Console commands, dispatched with the same controller/action convention
as the web controllers."""

from ..core.dispatch import ControllerRegistry
from .config import ConfigCommand
from .help import HelpCommand
from .route import RouteCommand


def build_registry() -> ControllerRegistry:
    registry = ControllerRegistry()
    registry.add("help", HelpCommand)
    registry.add("config", ConfigCommand)
    registry.add("route", RouteCommand)
    return registry
