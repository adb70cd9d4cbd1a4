from ..core.dispatch import Controller, Rendered, action
from ..services.database import check_connection
from .. import views


class SiteController(Controller):
    """Home page and the application error page."""

    @action
    def index(self):
        connected, error = check_connection(self.config.database)
        return views.index_page(self.config.name, connected, error)

    @action
    def error(self):
        payload = self.context.error
        if payload is None:
            return ""
        return Rendered(
            body=views.error_page(payload.name, payload.message),
            status_code=payload.status_code,
        )
