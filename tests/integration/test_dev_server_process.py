"""Runs the preview server as a real process and stops it with SIGTERM."""

from __future__ import annotations

import os
import signal
import socket
import subprocess
import sys
import time
import urllib.request
from pathlib import Path

import pytest

REPO_ROOT = Path(__file__).resolve().parents[2]

pytestmark = [
    pytest.mark.integration,
    pytest.mark.skipif(sys.platform == "win32", reason="POSIX signals required"),
]


def _free_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return int(sock.getsockname()[1])


def _wait_for_ok(url: str, timeout: float = 15.0) -> bytes:
    deadline = time.monotonic() + timeout
    last_exc: Exception | None = None
    while time.monotonic() < deadline:
        try:
            with urllib.request.urlopen(url, timeout=1.0) as response:
                if response.status == 200:
                    return response.read()
        except OSError as exc:
            last_exc = exc
        time.sleep(0.1)
    raise TimeoutError(f"Timed out waiting for {url}: {last_exc}")


def test_sigterm_stops_server_cleanly(tmp_path: Path) -> None:
    html = b"<!DOCTYPE html><title>integration</title>"
    html_path = tmp_path / "index.html"
    html_path.write_bytes(html)
    port = _free_port()

    env = dict(os.environ)
    env.update(
        {
            "HOST": "127.0.0.1",
            "PORT": str(port),
            "AUTH_PAGE_HTML": str(html_path),
            "PYTHONPATH": os.pathsep.join(
                p for p in (str(REPO_ROOT), env.get("PYTHONPATH", "")) if p
            ),
        }
    )
    proc = subprocess.Popen(
        [sys.executable, "-m", "auth_page.dev_server"],
        cwd=str(REPO_ROOT),
        env=env,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        text=True,
    )
    try:
        body = _wait_for_ok(f"http://127.0.0.1:{port}/magic?token=integration-token")
        assert body == html

        proc.send_signal(signal.SIGTERM)
        stdout, _stderr = proc.communicate(timeout=15)
    finally:
        if proc.poll() is None:
            proc.kill()
            proc.communicate()

    assert proc.returncode == 0
    assert "GET /magic?token=integration-token" in stdout
    assert "Server stopped." in stdout

    with pytest.raises(OSError):
        socket.create_connection(("127.0.0.1", port), timeout=1.0).close()
