"""Shared fixtures for the gh-secretkit test suite."""
import json
from pathlib import Path

import httpx
import pytest

from gh_secretkit.secrets.domains import preferences
from gh_secretkit.secrets.domains.github_client import GitHubClient

TOKEN_VARS = ("GH_TOKEN", "GITHUB_TOKEN", "GH_ENTERPRISE_TOKEN", "GITHUB_ENTERPRISE_TOKEN", "GH_HOST", "GCP_PROJECT")


@pytest.fixture
def temp_home(tmp_path, monkeypatch):
    """Fixture to create a temporary home directory with a clean environment."""
    fake_home = tmp_path / "home"
    fake_home.mkdir()
    monkeypatch.setenv("HOME", str(fake_home))
    monkeypatch.setattr(Path, "home", lambda: fake_home)

    fake_config_dir = fake_home / ".config" / "gh-secretkit"
    monkeypatch.setattr(preferences, "PREFERENCES_DIR", fake_config_dir)
    monkeypatch.setattr(preferences, "PREFERENCES_FILE", fake_config_dir / "preferences.json")

    for name in TOKEN_VARS:
        monkeypatch.delenv(name, raising=False)

    return fake_home


class FakeGitHub:
    """Routes requests to canned GraphQL data and REST statuses, recording each one."""

    def __init__(self, graphql_body=None, rest_status=204, rest_body=None):
        self.graphql_body = graphql_body if graphql_body is not None else {"data": {}}
        self.rest_status = rest_status
        self.rest_body = rest_body
        self.requests = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.path.endswith("/graphql"):
            return httpx.Response(200, json=self.graphql_body)
        if self.rest_body is not None:
            return httpx.Response(self.rest_status, json=self.rest_body)
        return httpx.Response(self.rest_status)

    def client(self, token="test-token") -> GitHubClient:
        return GitHubClient(
            token_source=lambda host: token,
            transport=httpx.MockTransport(self.handler),
        )

    @property
    def graphql_requests(self):
        return [r for r in self.requests if r.url.path.endswith("/graphql")]

    @property
    def rest_requests(self):
        return [r for r in self.requests if not r.url.path.endswith("/graphql")]

    @staticmethod
    def body(request):
        return json.loads(request.content)


@pytest.fixture
def fake_github():
    return FakeGitHub()


class StubClient:
    """In-memory stand-in for GitHubClient."""

    def __init__(self, data=None, error=None):
        self.data = data or {}
        self.error = error
        self.graphql_calls = []
        self.rest_calls = []

    def graphql(self, host, query, variables=None):
        self.graphql_calls.append((host, query, variables))
        if self.error is not None:
            raise self.error
        return self.data

    def rest(self, host, method, path, body=None):
        self.rest_calls.append((host, method, path, body))
        return None


@pytest.fixture
def stub_client():
    return StubClient()
