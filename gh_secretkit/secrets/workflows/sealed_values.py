"""Workflow for reading an already-encrypted secret value from its source."""
import os
import logging
from typing import Any, Dict, Optional, TextIO
from ..domains.gcp_client import GCPSecretClient

logger = logging.getLogger(__name__)


def read_stdin_value(stream: TextIO) -> str:
    """Read a sealed value piped on stdin, dropping the trailing newline."""
    return stream.read().rstrip("\r\n")


def get_sealed_value(secret_name: str, project_id: Optional[str] = None,
                     config: Optional[Dict[str, Any]] = None) -> Optional[str]:
    """
    Fetch a sealed value stored in GCP Secret Manager.

    Args:
        secret_name: Name of the GCP secret holding the sealed value
        project_id: GCP project ID (from GCP_PROJECT or config if not provided)
        config: Loaded gh-secretkit config, for GCP credentials and project

    Returns:
        The sealed value, or None if it could not be found

    Behavior:
        - An environment variable named `secret_name` wins (CI pipelines
          commonly hand sealed values over that way)
        - Otherwise the latest version is read from Secret Manager
    """
    env_value = os.getenv(secret_name)
    if env_value:
        logger.debug(f"Using sealed value for {secret_name} from environment")
        return env_value

    client = GCPSecretClient(config)
    if not project_id:
        project_id = client.get_project_id()
    if not project_id:
        logger.error("GCP project ID not found. Set GCP_PROJECT or gcp.project_id in the config file")
        return None

    return client.fetch_secret(secret_name, project_id)
