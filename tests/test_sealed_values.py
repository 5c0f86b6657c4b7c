"""Tests for sealed value sources, GCP Secret Manager included."""
import io
from unittest import mock

from gh_secretkit.secrets.domains.gcp_client import GCPSecretClient
from gh_secretkit.secrets.workflows import sealed_values


class TestGetSealedValue:
    """Test suite for get_sealed_value."""

    def test_environment_wins(self, temp_home, monkeypatch):
        monkeypatch.setenv("SEALED_TOKEN", "from-env")

        with mock.patch.object(sealed_values, "GCPSecretClient") as client_cls:
            assert sealed_values.get_sealed_value("SEALED_TOKEN") == "from-env"

        client_cls.assert_not_called()

    def test_fetches_from_gcp(self, temp_home, monkeypatch):
        monkeypatch.delenv("SEALED_TOKEN", raising=False)

        with mock.patch.object(sealed_values, "GCPSecretClient") as client_cls:
            client_cls.return_value.fetch_secret.return_value = "sealed"
            value = sealed_values.get_sealed_value("SEALED_TOKEN", project_id="proj")

        assert value == "sealed"
        client_cls.return_value.fetch_secret.assert_called_once_with("SEALED_TOKEN", "proj")

    def test_missing_project_returns_none(self, temp_home, monkeypatch):
        monkeypatch.delenv("SEALED_TOKEN", raising=False)

        with mock.patch.object(sealed_values, "GCPSecretClient") as client_cls:
            client_cls.return_value.get_project_id.return_value = None
            assert sealed_values.get_sealed_value("SEALED_TOKEN") is None

        client_cls.return_value.fetch_secret.assert_not_called()

    def test_read_stdin_value_strips_newline(self):
        assert sealed_values.read_stdin_value(io.StringIO("c2VhbGVk\r\n")) == "c2VhbGVk"


class TestGCPSecretClient:
    """Test suite for the GCP Secret Manager wrapper."""

    def test_project_id_from_env_then_config(self, temp_home, monkeypatch):
        client = GCPSecretClient({"gcp": {"project_id": "from-config"}})
        assert client.get_project_id() == "from-config"

        monkeypatch.setenv("GCP_PROJECT", "from-env")
        assert client.get_project_id() == "from-env"

    def test_fetch_secret_reads_latest_version(self):
        client = GCPSecretClient()
        client._client = mock.Mock()
        client._client.access_secret_version.return_value.payload.data = b"sealed"

        assert client.fetch_secret("SEALED", "proj") == "sealed"
        client._client.access_secret_version.assert_called_once_with(
            request={"name": "projects/proj/secrets/SEALED/versions/latest"}
        )

    def test_fetch_failure_returns_none(self):
        client = GCPSecretClient()
        client._client = mock.Mock()
        client._client.access_secret_version.side_effect = RuntimeError("denied")

        assert client.fetch_secret("SEALED", "proj") is None
