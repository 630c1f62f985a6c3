"""
Tests for the chatline command line interface
"""

import os

from click.testing import CliRunner

from chatline.cli import cli


def test_issue_token_no_auth_mode():
    os.environ["CHATLINE_AUTH_PROVIDER"] = "none"
    os.environ.pop("CHATLINE_AUTH_CONFIG", None)

    result = CliRunner().invoke(cli, ["issue-token", "--subject", "alice"])

    assert result.exit_code == 0
    assert result.output.strip().splitlines()[-1].startswith("dev-token|alice|no-auth-mode")


def test_issue_token_jwt():
    import jwt

    os.environ["CHATLINE_AUTH_PROVIDER"] = "jwt"
    os.environ["CHATLINE_JWT_SECRET"] = "cli-secret-key-for-testing-only"
    os.environ.pop("CHATLINE_AUTH_CONFIG", None)

    result = CliRunner().invoke(
        cli, ["issue-token", "--subject", "bob", "--email", "bob@example.com"]
    )

    assert result.exit_code == 0
    payload = jwt.decode(
        result.output.strip().splitlines()[-1],
        "cli-secret-key-for-testing-only",
        algorithms=["HS256"],
        audience="chatline-api",
    )
    assert payload["sub"] == "bob"
    assert payload["email"] == "bob@example.com"


def test_issue_token_unsupported_provider():
    os.environ["CHATLINE_AUTH_PROVIDER"] = "saml"

    result = CliRunner().invoke(cli, ["issue-token", "--subject", "x"])

    assert result.exit_code == 1
