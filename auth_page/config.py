"""
auth_page.config — Environment-driven configuration for deploy and dev server.

Read once at process start.  Every variable is optional; blank values fall back
to the documented default.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from auth_page.exceptions import ConfigError

REPO_ROOT = Path(__file__).resolve().parents[1]
DEFAULT_HTML_PATH = REPO_ROOT / "index.html"

DEFAULT_AUTH_BUCKET = "auden-auth-page"
DEFAULT_CONNECT_BUCKET = "auden-connect-page"
DEFAULT_AWS_REGION = "us-east-1"

DEFAULT_HOST = "localhost"
DEFAULT_PORT = 3333

TARGET_DOMAINS: dict[str, str] = {
    "auth": "auth.auden.app",
    "connect": "connect.auden.app",
}


def _env_value(environ: Mapping[str, str], name: str, default: str = "") -> str:
    value = environ.get(name, "").strip()
    return value or default


def _html_path(environ: Mapping[str, str]) -> Path:
    override = _env_value(environ, "AUTH_PAGE_HTML")
    if override:
        return Path(override).expanduser()
    return DEFAULT_HTML_PATH


@dataclass(frozen=True)
class DeployTarget:
    name: str
    domain: str
    bucket: str
    distribution_id: str

    @property
    def distribution_env_var(self) -> str:
        """Environment variable that enables invalidation for this target."""
        return f"{self.name.upper()}_DISTRIBUTION"

    @property
    def object_uri(self) -> str:
        return f"s3://{self.bucket}/index.html"


@dataclass(frozen=True)
class DeployConfig:
    auth_bucket: str
    connect_bucket: str
    auth_distribution: str
    connect_distribution: str
    aws_region: str
    aws_profile: str | None
    html_path: Path

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> DeployConfig:
        env = os.environ if environ is None else environ
        return cls(
            auth_bucket=_env_value(env, "AUTH_BUCKET", DEFAULT_AUTH_BUCKET),
            connect_bucket=_env_value(env, "CONNECT_BUCKET", DEFAULT_CONNECT_BUCKET),
            auth_distribution=_env_value(env, "AUTH_DISTRIBUTION"),
            connect_distribution=_env_value(env, "CONNECT_DISTRIBUTION"),
            aws_region=_env_value(env, "AWS_REGION", DEFAULT_AWS_REGION),
            aws_profile=_env_value(env, "AWS_PROFILE") or None,
            html_path=_html_path(env),
        )

    def target(self, name: str) -> DeployTarget:
        if name == "auth":
            bucket, distribution_id = self.auth_bucket, self.auth_distribution
        elif name == "connect":
            bucket, distribution_id = self.connect_bucket, self.connect_distribution
        else:
            raise ConfigError(f"Unknown deploy target: {name}")
        return DeployTarget(
            name=name,
            domain=TARGET_DOMAINS[name],
            bucket=bucket,
            distribution_id=distribution_id,
        )


@dataclass(frozen=True)
class ServerConfig:
    host: str
    port: int
    html_path: Path

    @property
    def base_url(self) -> str:
        return f"http://{self.host}:{self.port}"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> ServerConfig:
        env = os.environ if environ is None else environ
        raw_port = _env_value(env, "PORT", str(DEFAULT_PORT))
        try:
            port = int(raw_port)
        except ValueError as exc:
            raise ConfigError(f"PORT must be an integer, got {raw_port!r}") from exc
        if not 0 <= port <= 65535:
            raise ConfigError(f"PORT must be between 0 and 65535, got {port}")
        return cls(
            host=_env_value(env, "HOST", DEFAULT_HOST),
            port=port,
            html_path=_html_path(env),
        )
