"""
deploy.py — Deploy the auth page to S3 and invalidate CloudFront.

Uploads index.html to the bucket behind each selected domain, then creates a
CloudFront invalidation for /* when a distribution ID is configured.  Upload and
invalidation are delegated to the AWS CLI; the first failing command aborts the
run.

Usage:
    auth-page-deploy auth      # auth.auden.app
    auth-page-deploy connect   # connect.auden.app
    auth-page-deploy all       # both, auth first
"""

from __future__ import annotations

import argparse
import logging
import shutil
import subprocess
import sys
from pathlib import Path
from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from auth_page.config import (
    DEFAULT_AUTH_BUCKET,
    DEFAULT_AWS_REGION,
    DEFAULT_CONNECT_BUCKET,
    DeployConfig,
    DeployTarget,
)
from auth_page.exceptions import CommandFailedError, ConfigError, PrerequisiteError

logger = logging.getLogger("auth_page.deploy")

TARGET_EXPANSION: dict[str, tuple[str, ...]] = {
    "auth": ("auth",),
    "connect": ("connect",),
    "all": ("auth", "connect"),
}

HTML_CONTENT_TYPE = "text/html"
HTML_CACHE_CONTROL = "max-age=300, s-maxage=86400"
INVALIDATION_PATHS = "/*"

AWS_CLI_INSTALL_URL = "https://docs.aws.amazon.com/cli/latest/userguide/getting-started-install.html"

_RULE = "═" * 63

_EPILOG = f"""\
Targets:
  auth     Deploy to auth.auden.app only
  connect  Deploy to connect.auden.app only
  all      Deploy to both domains

Environment Variables:
  AWS_PROFILE          AWS CLI profile to use
  AUTH_BUCKET          S3 bucket for auth.auden.app (default: {DEFAULT_AUTH_BUCKET})
  CONNECT_BUCKET       S3 bucket for connect.auden.app (default: {DEFAULT_CONNECT_BUCKET})
  AUTH_DISTRIBUTION    CloudFront distribution ID for auth
  CONNECT_DISTRIBUTION CloudFront distribution ID for connect
  AWS_REGION           AWS region (default: {DEFAULT_AWS_REGION})
  AUTH_PAGE_HTML       Path of the HTML file to upload (default: index.html at repo root)
"""


# ---------------------------------------------------------------------------
# Console output
# ---------------------------------------------------------------------------


def _print_header() -> None:
    print("╔" + _RULE + "╗")
    print("║           Auden Auth Page - Deployment Script                 ║")
    print("╚" + _RULE + "╝")
    print()


def _print_section(title: str) -> None:
    print()
    print(_RULE)
    print(f"  {title}")
    print(_RULE)
    print()


# ---------------------------------------------------------------------------
# Command execution
# ---------------------------------------------------------------------------


def run_command(command: list[str]) -> str:
    """Run a command synchronously and return its stdout.

    Raises CommandFailedError on a non-zero exit; callers never retry.
    """
    logger.info("Running: %s", " ".join(command))
    result = subprocess.run(
        command,
        check=False,
        capture_output=True,
        text=True,
    )
    if result.stdout.strip():
        logger.debug("%s", result.stdout.strip())
    if result.returncode != 0:
        raise CommandFailedError(
            command=command,
            returncode=result.returncode,
            stderr=result.stderr.strip()[-8000:],
        )
    return result.stdout


# ---------------------------------------------------------------------------
# Prerequisites
# ---------------------------------------------------------------------------


def _caller_identity(config: DeployConfig) -> dict[str, Any]:
    session = boto3.Session(profile_name=config.aws_profile, region_name=config.aws_region)
    return session.client("sts").get_caller_identity()


def check_prerequisites(config: DeployConfig) -> None:
    """Verify AWS CLI, AWS credentials and the HTML file, in that order."""
    logger.info("Checking prerequisites...")

    if shutil.which("aws") is None:
        raise PrerequisiteError(
            "AWS CLI is not installed. Please install it first.",
            hint=AWS_CLI_INSTALL_URL,
        )
    logger.info("AWS CLI found")

    try:
        identity = _caller_identity(config)
    except (BotoCoreError, ClientError) as exc:
        raise PrerequisiteError(
            "AWS credentials not configured or invalid.",
            hint="Run: aws configure",
        ) from exc
    logger.info("AWS credentials valid (%s)", identity.get("Arn", "unknown"))

    if not config.html_path.is_file():
        raise PrerequisiteError(f"HTML file not found: {config.html_path}")
    logger.info("HTML file found")


# ---------------------------------------------------------------------------
# Deployment steps
# ---------------------------------------------------------------------------


def upload_html(html_path: Path, target: DeployTarget, region: str) -> None:
    logger.info("Deploying to S3 bucket: %s", target.bucket)
    run_command(
        [
            "aws",
            "s3",
            "cp",
            str(html_path),
            target.object_uri,
            "--content-type",
            HTML_CONTENT_TYPE,
            "--cache-control",
            HTML_CACHE_CONTROL,
            "--region",
            region,
        ]
    )
    logger.info("Uploaded index.html to s3://%s/", target.bucket)


def invalidate_distribution(target: DeployTarget, region: str) -> bool:
    """Invalidate every cached path for the target.

    Returns False, after a warning, when no distribution ID is configured.
    """
    if not target.distribution_id:
        logger.warning(
            "No CloudFront distribution ID provided for %s. Skipping invalidation.",
            target.name,
        )
        logger.warning("Set %s environment variable to enable.", target.distribution_env_var)
        return False

    logger.info("Invalidating CloudFront distribution: %s", target.distribution_id)
    run_command(
        [
            "aws",
            "cloudfront",
            "create-invalidation",
            "--distribution-id",
            target.distribution_id,
            "--paths",
            INVALIDATION_PATHS,
            "--region",
            region,
            "--output",
            "text",
        ]
    )
    logger.info("CloudFront invalidation created for %s", target.name)
    return True


def deploy_target(config: DeployConfig, target: DeployTarget) -> None:
    _print_section(f"Deploying to {target.domain}")
    upload_html(config.html_path, target, config.aws_region)
    invalidate_distribution(target, config.aws_region)
    logger.info("%s deployment complete!", target.domain)


def resolve_targets(name: str, config: DeployConfig) -> list[DeployTarget]:
    try:
        names = TARGET_EXPANSION[name]
    except KeyError as exc:
        raise ConfigError(f"Unknown target: {name}") from exc
    return [config.target(target_name) for target_name in names]


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="auth-page-deploy",
        usage="%(prog)s <target>",
        description="Deploy the auth page to S3 + CloudFront.",
        epilog=_EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("target", nargs="?", default=None, help="auth, connect or all")
    return parser


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse the target; trailing extra arguments are ignored."""
    args, _extra = build_parser().parse_known_args(argv)
    return args


def _configure_logging() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        stream=sys.stdout,
    )


def main(argv: list[str] | None = None) -> int:
    _configure_logging()
    parser = build_parser()
    args = parse_args(argv)

    _print_header()

    if args.target is None:
        logger.error("No deployment target specified.")
        print()
        parser.print_help()
        return 1

    config = DeployConfig.from_env()
    try:
        targets = resolve_targets(args.target, config)
    except ConfigError as exc:
        logger.error("%s", exc)
        print()
        parser.print_help()
        return 1

    try:
        check_prerequisites(config)
    except PrerequisiteError as exc:
        logger.error("%s", exc)
        if exc.hint:
            print(f"  {exc.hint}")
        return 1
    print()

    try:
        for target in targets:
            deploy_target(config, target)
    except CommandFailedError as exc:
        logger.error("%s", exc)
        if exc.stderr:
            print(exc.stderr, file=sys.stderr)
        return exc.returncode if exc.returncode > 0 else 1

    print()
    print(_RULE)
    print("  Deployment completed successfully!")
    print(_RULE)
    print()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
