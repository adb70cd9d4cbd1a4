from ..core.dispatch import Controller, action


class HelpCommand(Controller):
    """Lists the available console commands."""

    @action
    def index(self):
        registry = self.context.services["registry"]
        print(f"{self.config.name}\n")
        print("Available commands:")
        for route in registry.routes():
            print(f"  {route}")
        return 0
