"""HTML views for the example site controller."""

from html import escape
from typing import Optional


LAYOUT = """<!DOCTYPE html>
<html lang="en">

<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>{title}</title>
</head>

<body>
  {content}
</body>

</html>"""


def layout(title: str, content: str) -> str:
    return LAYOUT.format(title=escape(title), content=content)


def index_page(app_name: str, db_connected: bool, db_error: Optional[str] = None) -> str:
    if db_connected:
        status = '<strong style="color: green;">Connected</strong>'
    else:
        status = '<strong style="color: red;">Not Connected</strong>'
        if db_error:
            status += f"\n    <br><small>Error: {escape(db_error)}</small>"
    content = (
        f"<h1>Welcome to {escape(app_name)}</h1>\n"
        f"  <p>Database Status:\n    {status}\n  </p>\n"
        "  <p>This is a minimal MVC starter ready for your application.</p>"
    )
    return layout("Home", content)


def error_page(name: str, message: str) -> str:
    message_html = escape(message).replace("\n", "<br>\n")
    content = (
        '<div class="site-error">\n'
        f"    <h1>{escape(name)}</h1>\n"
        f'    <div class="alert alert-danger">\n      {message_html}\n    </div>\n'
        "    <p>\n      The above error occurred while the Web server was processing your request.\n    </p>\n"
        "    <p>\n      Please contact us if you think this is a server error. Thank you.\n    </p>\n"
        "  </div>"
    )
    return layout(name, content)
