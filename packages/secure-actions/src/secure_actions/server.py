"""HTTP glue: turn a link click into an ``execute_action`` call.

Only routing lives here. The token arrives base64-wrapped in a query
parameter and the outcome is reported as JSON.
"""

from __future__ import annotations

import json
import logging
from http.server import BaseHTTPRequestHandler, HTTPServer
from typing import Any
from urllib.parse import parse_qs, urlencode, urlparse

from .core import SecureActions
from .exceptions import (
    ActionNotFoundError,
    ActionUnavailableError,
    HandlerNotFoundError,
    InvalidKeyError,
    MalformedTokenError,
    SecureActionError,
)
from .tokens import wrap_token

logger = logging.getLogger(__name__)

ACTION_PATH = "/secure-action"

_STATUS_BY_ERROR: list[tuple[type[SecureActionError], int]] = [
    (MalformedTokenError, 400),
    (InvalidKeyError, 403),
    (ActionNotFoundError, 404),
    (HandlerNotFoundError, 404),
    (ActionUnavailableError, 410),
]


def build_action_url(base_url: str, token: str, param: str = "secure_action") -> str:
    """Return a link that executes ``token`` when opened."""
    return f"{base_url.rstrip('/')}{ACTION_PATH}?{urlencode({param: wrap_token(token)})}"


def status_for(error: SecureActionError) -> int:
    for error_type, status in _STATUS_BY_ERROR:
        if isinstance(error, error_type):
            return status
    return 500


def handle_token(system: SecureActions, token: str | None) -> tuple[int, dict[str, Any]]:
    """Execute ``token`` and return ``(http_status, json_body)``."""
    if not token:
        return 400, {"status": "error", "code": MalformedTokenError.code, "error": "missing token"}
    try:
        result = system.execute_action(token)
    except SecureActionError as exc:
        return status_for(exc), {"status": "error", "code": exc.code, "error": str(exc)}
    return 200, {"status": "ok", "result": result}


class _Handler(BaseHTTPRequestHandler):
    server: "ActionServer"

    def log_message(self, format: str, *args: Any) -> None:
        logger.debug("%s - %s", self.address_string(), format % args)

    def do_GET(self) -> None:
        parsed = urlparse(self.path)
        if parsed.path != ACTION_PATH:
            self.send_error(404)
            return
        qs = parse_qs(parsed.query)
        values = qs.get(self.server.system.settings.token_query_param, [])
        status, body = handle_token(self.server.system, values[0] if values else None)
        self._json_response(body, status)

    def _json_response(self, data: Any, status: int = 200) -> None:
        body = json.dumps(data, default=str).encode()
        self.send_response(status)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)


class ActionServer(HTTPServer):
    """HTTPServer bound to one ``SecureActions`` instance."""

    def __init__(self, system: SecureActions, address: tuple[str, int]) -> None:
        super().__init__(address, _Handler)
        self.system = system


def make_server(system: SecureActions, host: str = "127.0.0.1", port: int = 8991) -> ActionServer:
    return ActionServer(system, (host, port))


def serve(system: SecureActions, host: str = "0.0.0.0", port: int = 8991) -> None:
    """Serve action links until interrupted."""
    server = make_server(system, host, port)
    logger.info("Secure actions listening on http://%s:%d%s", host, port, ACTION_PATH)
    try:
        server.serve_forever()
    finally:
        server.server_close()
