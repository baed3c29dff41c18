"""Unit tests for auth_page.config."""

from __future__ import annotations

from pathlib import Path

import pytest

from auth_page.config import DEFAULT_HTML_PATH, DeployConfig, ServerConfig
from auth_page.exceptions import ConfigError


def test_deploy_config_defaults() -> None:
    config = DeployConfig.from_env({})
    assert config.auth_bucket == "auden-auth-page"
    assert config.connect_bucket == "auden-connect-page"
    assert config.auth_distribution == ""
    assert config.connect_distribution == ""
    assert config.aws_region == "us-east-1"
    assert config.aws_profile is None
    assert config.html_path == DEFAULT_HTML_PATH


def test_deploy_config_env_overrides(tmp_path: Path) -> None:
    html = tmp_path / "page.html"
    config = DeployConfig.from_env(
        {
            "AUTH_BUCKET": "auth-staging",
            "CONNECT_BUCKET": "connect-staging",
            "AUTH_DISTRIBUTION": "E1AUTH",
            "CONNECT_DISTRIBUTION": "E2CONNECT",
            "AWS_REGION": "eu-west-2",
            "AWS_PROFILE": "deployer",
            "AUTH_PAGE_HTML": str(html),
        }
    )
    assert config.auth_bucket == "auth-staging"
    assert config.connect_bucket == "connect-staging"
    assert config.aws_region == "eu-west-2"
    assert config.aws_profile == "deployer"
    assert config.html_path == html

    auth = config.target("auth")
    assert auth.domain == "auth.auden.app"
    assert auth.bucket == "auth-staging"
    assert auth.distribution_id == "E1AUTH"
    assert auth.object_uri == "s3://auth-staging/index.html"

    connect = config.target("connect")
    assert connect.domain == "connect.auden.app"
    assert connect.distribution_id == "E2CONNECT"
    assert connect.distribution_env_var == "CONNECT_DISTRIBUTION"


def test_blank_values_fall_back_to_defaults() -> None:
    config = DeployConfig.from_env({"AUTH_BUCKET": "  ", "AWS_REGION": "", "AWS_PROFILE": ""})
    assert config.auth_bucket == "auden-auth-page"
    assert config.aws_region == "us-east-1"
    assert config.aws_profile is None


def test_unknown_target_raises() -> None:
    with pytest.raises(ConfigError):
        DeployConfig.from_env({}).target("all")


def test_server_config_defaults() -> None:
    config = ServerConfig.from_env({})
    assert config.host == "localhost"
    assert config.port == 3333
    assert config.base_url == "http://localhost:3333"


def test_server_config_overrides() -> None:
    config = ServerConfig.from_env({"HOST": "0.0.0.0", "PORT": "4000"})
    assert config.host == "0.0.0.0"
    assert config.port == 4000


@pytest.mark.parametrize("raw", ["abc", "70000", "-1"])
def test_server_config_rejects_bad_port(raw: str) -> None:
    with pytest.raises(ConfigError):
        ServerConfig.from_env({"PORT": raw})
