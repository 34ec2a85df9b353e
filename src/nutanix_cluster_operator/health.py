"""Health check endpoints for the operator."""

from __future__ import annotations

import threading
from typing import Any

from prometheus_client import make_wsgi_app
from werkzeug.serving import BaseWSGIServer, make_server
from werkzeug.wrappers import Response


def create_combined_wsgi_app() -> Any:
    """Create a WSGI app that combines metrics and health check endpoints.

    Returns:
        Combined WSGI application
    """
    metrics_app = make_wsgi_app()

    def combined_app(environ: dict[str, Any], start_response: Any) -> Any:
        """WSGI app that routes /healthz and /readyz, delegates /metrics to prometheus."""
        path = environ.get("PATH_INFO", "")

        if path == "/healthz":
            response = Response('{"status":"ok"}', mimetype="application/json", status=200)
            return response(environ, start_response)
        elif path == "/readyz":
            response = Response('{"status":"ready"}', mimetype="application/json", status=200)
            return response(environ, start_response)
        elif path in ("/metrics", "/"):
            return metrics_app(environ, start_response)
        response = Response('{"error":"not found"}', mimetype="application/json", status=404)
        return response(environ, start_response)

    return combined_app


def start_http_server(port: int) -> BaseWSGIServer:
    """Serve metrics and health endpoints from a background thread.

    Args:
        port: Port to listen on

    Returns:
        The running server, so callers can shut it down
    """
    server = make_server("", port, create_combined_wsgi_app(), threaded=True)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    return server
