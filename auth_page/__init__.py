"""
auth_page — Deployment and local preview tooling for the Auden auth landing page.

The page itself is a single static ``index.html`` that parses its own query
parameters client-side.  This package only ships it:

    auth_page.deploy      Upload to S3 and invalidate CloudFront.
    auth_page.dev_server  Serve the page on every path for manual testing.
"""

from auth_page.config import DeployConfig, DeployTarget, ServerConfig
from auth_page.exceptions import (
    AuthPageError,
    CommandFailedError,
    ConfigError,
    PrerequisiteError,
)

__all__ = [
    "AuthPageError",
    "CommandFailedError",
    "ConfigError",
    "DeployConfig",
    "DeployTarget",
    "PrerequisiteError",
    "ServerConfig",
]
