"""Web controllers.

Controllers are registered explicitly; the registry is the complete set of
routable web actions.
"""

from ..core.dispatch import ControllerRegistry
from .product import ProductController
from .site import SiteController


def build_registry() -> ControllerRegistry:
    registry = ControllerRegistry()
    registry.add("site", SiteController)
    registry.add("product", ProductController)
    return registry
