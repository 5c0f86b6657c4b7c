"""Tests for the secretkit command line."""
import io

import pytest

from gh_secretkit.cli import main as cli


@pytest.fixture
def cli_env(temp_home, monkeypatch, fake_github):
    """Token in the environment, HTTP routed to the fake GitHub."""
    monkeypatch.setenv("GH_TOKEN", "env-token")
    monkeypatch.setattr(cli, "_client", lambda config: fake_github.client())
    return fake_github


def run(argv):
    with pytest.raises(SystemExit) as exc_info:
        cli.main(argv)
    return exc_info.value.code


class TestSecretsSet:
    """Test suite for `secretkit secrets set`."""

    def test_selected_org_secret(self, cli_env, capsys):
        cli_env.graphql_body = {
            "data": {"entity_000": {"databaseId": 5}, "entity_001": {"databaseId": 9}},
        }

        cli.main([
            "secrets", "set", "TOKEN", "--org", "acme", "--repos", "repo-a,acme/repo-b",
            "--body", "cipher", "--key-id", "k1",
        ])

        [put] = cli_env.rest_requests
        assert str(put.url) == "https://api.github.com/orgs/acme/actions/secrets/TOKEN"
        assert cli_env.body(put) == {
            "encrypted_value": "cipher",
            "visibility": "selected",
            "selected_repository_ids": [5, 9],
            "key_id": "k1",
        }
        assert cli_env.body(cli_env.graphql_requests[0])["variables"]["name_001"] == "repo-b"
        assert "Set secret TOKEN for acme" in capsys.readouterr().out

    def test_repository_secret_from_stdin(self, cli_env, monkeypatch):
        monkeypatch.setattr("sys.stdin", io.StringIO("cipher\n"))

        cli.main(["secrets", "set", "TOKEN", "--repo", "octo/app", "--key-id", "k1", "--app", "dependabot"])

        [put] = cli_env.requests
        assert str(put.url) == "https://api.github.com/repos/octo/app/dependabot/secrets/TOKEN"
        assert cli_env.body(put) == {"encrypted_value": "cipher", "key_id": "k1"}

    def test_org_defaults_to_private(self, cli_env):
        cli.main(["secrets", "set", "TOKEN", "--org", "acme", "--body", "cipher", "--key-id", "k1"])

        assert cli_env.body(cli_env.requests[0])["visibility"] == "private"
        assert cli_env.graphql_requests == []

    def test_value_from_gcp_source(self, cli_env, monkeypatch):
        monkeypatch.setenv("SEALED_DEPLOY_KEY", "sealed")

        cli.main([
            "secrets", "set", "DEPLOY_KEY", "--org", "acme", "--visibility", "all",
            "--from-gcp", "SEALED_DEPLOY_KEY", "--key-id", "k1",
        ])

        assert cli_env.body(cli_env.requests[0])["encrypted_value"] == "sealed"

    def test_not_found_exits_1(self, cli_env, capsys):
        cli_env.graphql_body = {
            "data": {"entity_000": None},
            "errors": [{"type": "NOT_FOUND", "path": ["entity_000"], "message": "missing"}],
        }

        code = run([
            "secrets", "set", "TOKEN", "--org", "acme", "--repos", "ghost",
            "--body", "cipher", "--key-id", "k1",
        ])

        assert code == 1
        assert "Error: could not find acme/ghost" in capsys.readouterr().err
        assert cli_env.rest_requests == []

    def test_repo_with_visibility_is_usage_error(self, cli_env):
        code = run([
            "secrets", "set", "TOKEN", "--repo", "octo/app", "--visibility", "all",
            "--body", "cipher", "--key-id", "k1",
        ])

        assert code == 2
        assert cli_env.requests == []

    def test_repos_without_selected_is_usage_error(self, cli_env):
        code = run([
            "secrets", "set", "TOKEN", "--org", "acme", "--visibility", "all", "--repos", "a",
            "--body", "cipher", "--key-id", "k1",
        ])

        assert code == 2

    def test_selected_without_repos_is_usage_error(self, cli_env):
        code = run([
            "secrets", "set", "TOKEN", "--org", "acme", "--visibility", "selected",
            "--body", "cipher", "--key-id", "k1",
        ])

        assert code == 2

    def test_invalid_secret_name_is_usage_error(self, cli_env, capsys):
        code = run(["secrets", "set", "GITHUB_TOKEN", "--org", "acme", "--body", "c", "--key-id", "k1"])

        assert code == 2
        assert "GITHUB_" in capsys.readouterr().err

    def test_empty_value_is_usage_error(self, cli_env):
        code = run(["secrets", "set", "TOKEN", "--org", "acme", "--body", "  ", "--key-id", "k1"])

        assert code == 2

    def test_write_failure_exits_1(self, cli_env, capsys):
        cli_env.rest_status = 403
        cli_env.rest_body = {"message": "Resource not accessible by integration"}

        code = run(["secrets", "set", "TOKEN", "--org", "acme", "--body", "cipher", "--key-id", "k1"])

        assert code == 1
        assert "Resource not accessible" in capsys.readouterr().err


class TestReposIds:

    def test_prints_ids_in_argument_order(self, cli_env, capsys):
        cli_env.graphql_body = {
            "data": {"entity_001": {"databaseId": 2}, "entity_000": {"databaseId": 1}},
        }

        cli.main(["repos", "ids", "--owner", "acme", "zeta", "alpha"])

        assert capsys.readouterr().out.splitlines() == ["acme/zeta\t1", "acme/alpha\t2"]


class TestMain:

    def test_no_command_is_usage_error(self):
        assert run([]) == 2

    def test_group_without_subcommand_is_usage_error(self):
        assert run(["secrets"]) == 2

    def test_version(self, capsys):
        cli.main(["version"])

        assert capsys.readouterr().out.startswith("gh-secretkit ")
