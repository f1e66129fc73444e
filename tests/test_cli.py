"""Unit tests for CLI commands.

Tests for:
- Headless login (email / mobile, code prompts, failures)
- config command
"""

import json
from unittest import mock
from unittest.mock import AsyncMock, MagicMock

import pytest
from click.testing import CliRunner

from twostep.cli import cli, type_code
from twostep.config import Config
from twostep.forms.code_entry import CODE_EXPIRED_MESSAGE, CodeEntryController
from twostep.gateway import GatewayResult, SubmissionGateway


@pytest.fixture
def runner():
    """Create a CLI runner for testing."""
    return CliRunner()


@pytest.fixture
def gateway():
    """Gateway returned by the patched SubmissionGateway constructor."""
    gw = MagicMock(spec=SubmissionGateway)
    gw.submit = AsyncMock(return_value=GatewayResult.success({}))
    with mock.patch("twostep.cli.SubmissionGateway", return_value=gw):
        with mock.patch("twostep.cli.get_config", return_value=Config()):
            yield gw


def _endpoints(gateway):
    return [c.args[0] for c in gateway.submit.await_args_list]


class TestLoginCommand:
    """Tests for 'twostep login'."""

    def test_requires_exactly_one_identifier(self, runner, gateway):
        result = runner.invoke(cli, ["login", "--password", "x"])
        assert result.exit_code == 2
        assert "exactly one of --email or --mobile" in result.output

        result = runner.invoke(
            cli, ["login", "-e", "a@b.com", "-m", "1234567890", "-p", "x"]
        )
        assert result.exit_code == 2

    def test_email_login_and_code(self, runner, gateway):
        result = runner.invoke(
            cli, ["login", "--email", "a@b.com", "--password", "x", "--code", "123456"]
        )

        assert result.exit_code == 0, result.output
        assert "Verified. Continue to: dashboard" in result.output
        assert _endpoints(gateway) == ["loginWithEmail", "otp"]
        gateway.submit.assert_any_await("otp", {"code": "123456"})

    def test_mobile_login_strips_formatting(self, runner, gateway):
        result = runner.invoke(
            cli,
            ["login", "--mobile", "+1 234-567-8901", "--password", "x", "--code", "123456"],
        )

        assert result.exit_code == 0, result.output
        gateway.submit.assert_any_await(
            "loginWithMobile", {"mobile": "12345678901", "password": "x"}
        )

    def test_prompts_for_password_and_code(self, runner, gateway):
        result = runner.invoke(
            cli, ["login", "--email", "a@b.com"], input="secret\n654321\n"
        )

        assert result.exit_code == 0, result.output
        gateway.submit.assert_any_await(
            "loginWithEmail", {"email": "a@b.com", "password": "secret"}
        )
        gateway.submit.assert_any_await("otp", {"code": "654321"})

    def test_invalid_credentials_exit_without_request(self, runner, gateway):
        result = runner.invoke(cli, ["login", "--email", "bad", "--password", ""])

        assert result.exit_code == 1
        assert "Invalid email format" in result.output
        assert "Password is required" in result.output
        gateway.submit.assert_not_called()

    def test_login_failure_exits(self, runner, gateway):
        gateway.submit.return_value = GatewayResult.failure("HTTP 401: no")

        result = runner.invoke(cli, ["login", "-e", "a@b.com", "-p", "x", "-c", "123456"])

        assert result.exit_code == 1
        assert "Login failed" in result.output
        assert _endpoints(gateway) == ["loginWithEmail"]

    def test_expired_code_reprompts(self, runner, gateway):
        gateway.submit.side_effect = [
            GatewayResult.success({}),
            GatewayResult.failure("expired"),
            GatewayResult.success({}),
        ]

        result = runner.invoke(
            cli,
            ["login", "-e", "a@b.com", "-p", "x", "-c", "111111"],
            input="222222\n",
        )

        assert result.exit_code == 0, result.output
        assert CODE_EXPIRED_MESSAGE in result.output
        assert _endpoints(gateway) == ["loginWithEmail", "otp", "otp"]

    def test_non_numeric_code_never_sent(self, runner, gateway):
        result = runner.invoke(
            cli,
            ["login", "-e", "a@b.com", "-p", "x", "-c", "12a456", "--attempts", "1"],
        )

        assert result.exit_code == 1
        assert "Too many attempts" in result.output
        assert _endpoints(gateway) == ["loginWithEmail"]


class TestTypeCode:
    """Tests for feeding a code into the controller."""

    def test_full_code_is_pasted(self):
        entry = CodeEntryController(MagicMock())
        type_code(entry, "123456")
        assert entry.composite == "123456"

    def test_partial_code_is_typed(self):
        entry = CodeEntryController(MagicMock())
        type_code(entry, "12")
        assert entry.composite == "12"
        assert entry.focus_index == 2

    def test_replaces_previous_entry(self):
        entry = CodeEntryController(MagicMock())
        type_code(entry, "123456")
        type_code(entry, "98")
        assert entry.composite == "98"


class TestConfigCommand:
    def test_prints_effective_config(self, runner, gateway):
        result = runner.invoke(cli, ["config"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["code_entry"]["post_verify_target"] == "dashboard"
