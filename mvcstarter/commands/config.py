import json

from ..core.dispatch import Controller, action


class ConfigCommand(Controller):
    @action
    def show(self):
        """Print the resolved configuration as JSON, without secrets."""
        config = self.config
        database = config.database
        resolved = {
            "id": config.id,
            "name": config.name,
            "debug": config.debug,
            "basePath": str(config.base_path),
            "runtimePath": str(config.runtime_path),
            "vendorPath": str(config.vendor_path),
            "aliases": dict(config.aliases),
            "db": {
                "dsn": database.dsn,
                "url": database.url(redact=True),
                "username": database.user,
                "charset": database.charset,
            },
            "log": {
                "traceLevel": config.log.trace_level,
                "targets": [
                    {
                        "levels": list(target.levels),
                        "categories": list(target.categories),
                        "logFile": config.resolve_alias(target.log_file),
                    }
                    for target in config.log.targets
                ],
            },
            "params": dict(config.params),
        }
        print(json.dumps(resolved, indent=2))
        return 0
