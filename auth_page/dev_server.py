"""
dev_server.py — Local development server for the auth page (FastAPI on :3333).

Simulates both auth.auden.app and connect.auden.app: every path returns the
same index.html, so the page's client-side routing can be exercised with real
URLs.  The file is re-read on every request; edits show up on reload.

Endpoints:
    *  /favicon.ico  204, empty body.
    *  /{anything}   200, index.html with caching disabled.

Usage:
    auth-page-dev-server
    PORT=4000 HOST=0.0.0.0 auth-page-dev-server
"""

from __future__ import annotations

import errno
import logging
import signal
import socket
import sys
import threading
import time
from dataclasses import replace
from pathlib import Path
from types import FrameType

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse, Response

from auth_page.config import ServerConfig
from auth_page.exceptions import ConfigError

logger = logging.getLogger("auth_page.dev_server")

FAVICON_PATH = "/favicon.ico"

PAGE_HEADERS: dict[str, str] = {
    "Content-Type": "text/html",
    "Cache-Control": "no-cache, no-store, must-revalidate",
    "X-Frame-Options": "DENY",
    "X-Content-Type-Options": "nosniff",
}

_ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]

# (label, path + query) pairs shown in the startup banner
TEST_URLS: tuple[tuple[str, str], ...] = (
    ("Magic Link", "/magic?token=test123456789012345678901234567890"),
    ("Login OAuth (Google)", "/oauth/google?code=testcode&state=teststate123456"),
    ("Login OAuth (Microsoft)", "/oauth/microsoft?code=testcode&state=teststate123456"),
    ("Calendar OAuth (Google)", "/calendar/google?code=testcode&state=teststate123456"),
    ("Calendar OAuth (Microsoft)", "/calendar/microsoft?code=testcode&state=teststate123456"),
    ("OAuth Error", "/oauth/google?error=access_denied"),
    ("Invalid Token", "/magic?token=short"),
    ("Missing Token", "/magic"),
    ("404 Page", "/unknown-route"),
    ("Landing Page", "/"),
)


def create_app(html_path: Path) -> FastAPI:
    """Build the catch-all app serving ``html_path``."""
    app = FastAPI(
        title="auth-page-dev-server",
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )

    @app.api_route("/{path:path}", methods=_ALL_METHODS)
    def serve_page(request: Request, path: str) -> Response:
        url = request.url
        query = f"?{url.query}" if url.query else ""
        logger.info("%s %s%s", request.method, url.path, query)

        if url.path == FAVICON_PATH:
            return Response(status_code=204)

        try:
            html = html_path.read_bytes()
        except OSError as exc:
            logger.error("Error reading HTML file: %s", exc)
            return PlainTextResponse("Internal Server Error", status_code=500)

        return Response(content=html, status_code=200, headers=PAGE_HEADERS)

    return app


class _MaxLevelFilter(logging.Filter):
    def __init__(self, max_level: int) -> None:
        super().__init__()
        self.max_level = max_level

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno < self.max_level


def _configure_logging() -> None:
    """INFO and below to stdout, WARNING and above to stderr."""
    formatter = logging.Formatter(
        "%(asctime)s %(levelname)s %(name)s %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%SZ",
    )
    formatter.converter = time.gmtime
    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setLevel(logging.INFO)
    stdout_handler.addFilter(_MaxLevelFilter(logging.WARNING))
    stdout_handler.setFormatter(formatter)

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setLevel(logging.WARNING)
    stderr_handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers = [stdout_handler, stderr_handler]
    root.setLevel(logging.INFO)


def bind_socket(host: str, port: int) -> socket.socket:
    """Create the listening socket up front so bind errors surface before startup."""
    family = socket.AF_INET6 if ":" in host else socket.AF_INET
    return socket.create_server((host, port), family=family)


def print_banner(base_url: str) -> None:
    lines = [
        "╔═══════════════════════════════════════════════════════════════╗",
        "║           Auden Auth Page - Development Server                ║",
        "╚═══════════════════════════════════════════════════════════════╝",
        "",
        f"  Server running at: {base_url}",
        "",
        "  Test URLs:",
    ]
    for label, path in TEST_URLS:
        lines.append("")
        lines.append(f"  {label}:")
        lines.append(f"    {base_url}{path}")
    lines.append("")
    print("\n".join(lines), flush=True)


def serve(config: ServerConfig, sock: socket.socket) -> int:
    """Run uvicorn on ``sock`` until SIGINT or SIGTERM; return the exit status."""
    uv_config = uvicorn.Config(
        create_app(config.html_path),
        log_config=None,
        access_log=False,
    )
    server = uvicorn.Server(uv_config)

    def _handle_signal(signum: int, frame: FrameType | None) -> None:
        logger.info("Shutting down server...")
        server.should_exit = True

    signal.signal(signal.SIGINT, _handle_signal)
    signal.signal(signal.SIGTERM, _handle_signal)

    # uvicorn only installs its own signal handlers on the main thread
    thread = threading.Thread(target=server.run, kwargs={"sockets": [sock]}, daemon=True)
    thread.start()
    while thread.is_alive():
        thread.join(timeout=0.5)

    if not server.started:
        logger.error("Server failed to start")
        return 1
    logger.info("Server stopped.")
    return 0


def main() -> int:
    _configure_logging()
    try:
        config = ServerConfig.from_env()
    except ConfigError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1

    try:
        sock = bind_socket(config.host, config.port)
    except OSError as exc:
        if exc.errno == errno.EADDRINUSE:
            print(
                f"Port {config.port} is already in use. "
                "Try a different port with PORT=XXXX auth-page-dev-server",
                file=sys.stderr,
            )
        else:
            print(f"Server error: {exc}", file=sys.stderr)
        return 1

    config = replace(config, port=sock.getsockname()[1])
    with sock:
        print_banner(config.base_url)
        return serve(config, sock)


if __name__ == "__main__":
    raise SystemExit(main())
