"""Loopback HTTP listener that receives the OAuth redirect.

The provider redirects the browser to ``http://localhost:<port>/callback``
with either ``?code=...`` or ``?error=...``. The listener serves exactly one
such request and hands the code to the caller.
"""

import html
import logging
import threading
from http.server import BaseHTTPRequestHandler, HTTPServer
from urllib.parse import parse_qs, urlparse

from supa_session.api.exceptions import OAuthFailed

logger = logging.getLogger(__name__)

CALLBACK_PATH = "/callback"

_PAGE = """
<!DOCTYPE html>
<html>
<head><title>{title}</title></head>
<body style="font-family: system-ui; text-align: center; padding: 50px;">
    <h1>{title}</h1>
    <p>{message}</p>
</body>
</html>
"""


def callback_url(port: int) -> str:
    """Redirect URI matching a listener on `port`."""
    return f"http://localhost:{port}{CALLBACK_PATH}"


class OAuthCallbackHandler(BaseHTTPRequestHandler):
    """Handle the OAuth redirect request."""

    server: "OAuthCallbackServer"

    def do_GET(self):
        """Handle GET request with OAuth callback."""
        parsed = urlparse(self.path)
        if parsed.path != CALLBACK_PATH:
            self.send_error(404)
            return

        params = parse_qs(parsed.query)

        if "code" in params:
            self.server.code = params["code"][0]
            self._send_page(200, "Login Successful", "You can close this window and return to the terminal.")
        elif "error" in params:
            error = params.get("error_description", params["error"])[0]
            self.server.error = error
            # Escape error message to prevent XSS
            self._send_page(400, "Login Failed", f"Error: {html.escape(error)}")
        else:
            self.server.error = "No authorization code in callback"
            self._send_page(400, "Login Failed", self.server.error)

        self.server.received.set()

    def _send_page(self, status: int, title: str, message: str) -> None:
        self.send_response(status)
        self.send_header("Content-type", "text/html")
        self.send_header("X-Content-Type-Options", "nosniff")
        self.send_header("X-Frame-Options", "DENY")
        self.end_headers()
        self.wfile.write(_PAGE.format(title=title, message=message).encode())

    def log_message(self, format, *args):
        """Suppress HTTP server logging."""
        pass


class OAuthCallbackServer(HTTPServer):
    """Single-use server holding the result of one redirect."""

    def __init__(self, port: int):
        super().__init__(("localhost", port), OAuthCallbackHandler)
        self.code: str | None = None
        self.error: str | None = None
        self.received = threading.Event()

    @property
    def redirect_uri(self) -> str:
        return callback_url(self.server_address[1])

    def wait_for_code(self, timeout: float) -> str:
        """Serve until the redirect arrives, then shut down.

        Raises:
            OAuthFailed: On timeout or when the provider reported an error
        """
        thread = threading.Thread(target=self.serve_forever, daemon=True)
        thread.start()
        try:
            if not self.received.wait(timeout):
                raise OAuthFailed(f"no callback received within {int(timeout)} seconds")
        finally:
            self.shutdown()
            self.server_close()

        if self.error or not self.code:
            logger.warning("OAuth provider redirected without a code")
            raise OAuthFailed(self.error or "No authorization code in callback")
        return self.code
