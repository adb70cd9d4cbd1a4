from ..core.config import WEB_URL_RULES
from ..core.dispatch import Controller, action
from ..core.routing import Router


class RouteCommand(Controller):
    """Inspects the web URL rule table."""

    def _router(self) -> Router:
        return Router(WEB_URL_RULES)

    @action
    def list(self):
        for position, rule in enumerate(self._router().rules, start=1):
            print(f"{position:>3}. /{rule.pattern.strip('/'):<40} -> {rule.route}")
        return 0

    @action
    def match(self, path: str, method: str = "GET"):
        result = self._router().match(path, method)
        if result is None:
            print(f"No rule matches /{path.strip('/')}")
            return 1
        print(f"route:  {result.route}")
        for name, value in sorted(result.params.items()):
            print(f"param:  {name} = {value}")
        return 0
