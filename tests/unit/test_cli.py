"""Unit tests for the operator CLI."""

import pytest
from typer.testing import CliRunner

from catalog_grader.cli import app
from catalog_grader.cli import user_commands
from catalog_grader.core.services import JwtVerificationService
from catalog_grader.entities import UserRepository, UserRole

runner = CliRunner()


@pytest.fixture(autouse=True)
def cli_database(monkeypatch, database_service):
    monkeypatch.setattr(user_commands, "get_database_service", lambda: database_service)
    return database_service


class TestUserCommands:
    def test_add_user(self, session):
        result = runner.invoke(
            app, ["users", "add", "gil@example.com", "--name", "Gil", "--role", "GRADER"]
        )

        assert result.exit_code == 0, result.output
        user = UserRepository(session).get_by_email("gil@example.com")
        assert user is not None
        assert user.role == UserRole.GRADER

    def test_add_duplicate_user_fails(self, plain_user):
        result = runner.invoke(app, ["users", "add", plain_user.email, "--name", "Again"])

        assert result.exit_code == 1

    def test_list_users(self, plain_user):
        result = runner.invoke(app, ["users", "list"])

        assert result.exit_code == 0
        assert plain_user.email in result.output

    def test_token_verifies(self):
        runner.invoke(
            app,
            ["users", "add", "ada@example.com", "--name", "Ada", "--password", "hunter22"],
        )

        result = runner.invoke(
            app, ["users", "token", "ada@example.com", "--password", "hunter22"]
        )

        assert result.exit_code == 0, result.output
        token = result.stdout.strip().splitlines()[-1]
        claims = JwtVerificationService().verify_jwt(token)
        assert claims.roles == ["USER"]

    def test_token_wrong_password(self):
        runner.invoke(
            app,
            ["users", "add", "ada@example.com", "--name", "Ada", "--password", "hunter22"],
        )

        result = runner.invoke(app, ["users", "token", "ada@example.com", "--password", "nope"])

        assert result.exit_code == 1

    def test_token_unknown_user(self):
        result = runner.invoke(app, ["users", "token", "ghost@example.com"])

        assert result.exit_code == 1
