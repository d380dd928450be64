from flask import current_app, jsonify, render_template_string, request, url_for

from . import blueprint
from .spec import build_spec

SWAGGER_PAGE = """
<!DOCTYPE html>
<html lang="id">
<head>
  <meta charset="utf-8">
  <title>{{ title }}</title>
  <link rel="stylesheet" href="https://cdn.jsdelivr.net/npm/swagger-ui-dist@5/swagger-ui.css">
</head>
<body style="margin: 0">
  <div id="swagger-ui"></div>
  <script src="https://cdn.jsdelivr.net/npm/swagger-ui-dist@5/swagger-ui-bundle.js"></script>
  <script>
    window.onload = () => SwaggerUIBundle({ url: "{{ spec_url }}", dom_id: "#swagger-ui" });
  </script>
</body>
</html>
"""


def _request_scheme() -> str:
    """Scheme seen by the client, honouring X-Forwarded-Proto behind a proxy."""
    return request.headers.get("X-Forwarded-Proto", request.scheme)


@blueprint.route("/openapi.json")
def openapi_json():
    """Serve the OpenAPI document for the mClaim endpoints."""
    server_url = f"{_request_scheme()}://{request.host.rstrip('/')}"
    return jsonify(build_spec(current_app.config, server_url))


@blueprint.route("/swagger")
def swagger_ui():
    """Render Swagger UI from CDN assets."""
    spec_url = url_for("docs.openapi_json", _external=True, _scheme=_request_scheme())
    title = f"{current_app.config.get('API_TITLE', 'mClaim INA-CBG API')} - Docs"
    return render_template_string(SWAGGER_PAGE, spec_url=spec_url, title=title)


@blueprint.route("/")
def docs_index():
    return ("", 302, {"Location": url_for("docs.swagger_ui")})
