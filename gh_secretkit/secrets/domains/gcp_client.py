"""GCP Secret Manager client wrapper, used as a source of sealed values."""
import os
import logging
from typing import Any, Dict, Optional
from google.cloud import secretmanager

logger = logging.getLogger(__name__)


class GCPSecretClient:
    """Wrapper around GCP Secret Manager client."""

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        self._config = config or {}
        self._client = None

    @property
    def client(self) -> secretmanager.SecretManagerServiceClient:
        """Lazy-initialize client."""
        if self._client is None:
            auth = self._config.get('authentication') or {}
            service_account_path = auth.get('service_account_path')
            if service_account_path:
                self._client = secretmanager.SecretManagerServiceClient.from_service_account_file(
                    service_account_path
                )
                logger.debug(f"Using GCP service account: {service_account_path}")
            else:
                self._client = secretmanager.SecretManagerServiceClient()
        return self._client

    def get_project_id(self) -> Optional[str]:
        """
        Get GCP project ID.

        Priority order:
        1. GCP_PROJECT environment variable
        2. `gcp.project_id` in the config file
        """
        gcp_project_env = os.getenv("GCP_PROJECT")
        if gcp_project_env:
            logger.debug(f"Using GCP_PROJECT from environment: {gcp_project_env}")
            return gcp_project_env

        project_id = (self._config.get('gcp') or {}).get('project_id')
        if project_id:
            logger.debug(f"Using project_id from config: {project_id}")
        return project_id

    def fetch_secret(self, secret_name: str, project_id: str) -> Optional[str]:
        """
        Fetch the latest version of a secret.

        Returns:
            Secret value, or None if the fetch fails
        """
        try:
            name = f"projects/{project_id}/secrets/{secret_name}/versions/latest"
            response = self.client.access_secret_version(request={"name": name})
            return response.payload.data.decode("UTF-8")
        except Exception as e:
            logger.warning(f"GCP fetch failed for {secret_name}: {e}")
            return None
