"""Workflow for publishing an encrypted secret to a repository or organization."""
import json
import logging
from typing import List, Optional, Union

from ..domains.errors import InvariantViolation, TransportError
from ..domains.models import (
    VISIBILITY_ALL,
    VISIBILITY_PRIVATE,
    VISIBILITY_SELECTED,
    OrganizationAllTarget,
    OrganizationPrivateTarget,
    OrganizationSelectedTarget,
    RepositoryTarget,
    SecretPayload,
    SecretTarget,
)
from ..domains.resolver import BatchResolver

logger = logging.getLogger(__name__)

_ORG_VISIBILITY = {
    OrganizationAllTarget: VISIBILITY_ALL,
    OrganizationPrivateTarget: VISIBILITY_PRIVATE,
    OrganizationSelectedTarget: VISIBILITY_SELECTED,
}


def secret_path(target: SecretTarget, secret_name: str, app: Optional[str] = None) -> str:
    """REST path of `secret_name` for `target`, optionally under an app namespace."""
    secrets = f"{app}/secrets" if app else "secrets"
    if isinstance(target, RepositoryTarget):
        return f"repos/{target.owner}/{target.name}/{secrets}/{secret_name}"
    if type(target) in _ORG_VISIBILITY:
        return f"orgs/{target.org}/{secrets}/{secret_name}"
    raise InvariantViolation(f"unsupported secret target {target!r}")


def build_payload(
    target: SecretTarget,
    encrypted_value: Union[str, bytes],
    key_id: str,
    repository_ids: Optional[List[int]] = None,
) -> SecretPayload:
    """
    Build and validate the payload for `target`.

    Repository targets carry no visibility; organization targets carry the
    visibility of their variant, and only selected visibility carries ids.
    """
    if isinstance(target, RepositoryTarget):
        visibility = ""
    else:
        try:
            visibility = _ORG_VISIBILITY[type(target)]
        except KeyError:
            raise InvariantViolation(f"unsupported secret target {target!r}") from None

    payload = SecretPayload(
        encrypted_value=encrypted_value,
        key_id=key_id,
        visibility=visibility,
        repository_ids=list(repository_ids or []),
    )
    payload.validate()
    return payload


class SecretPublisher:
    """Publishes sealed secret values, resolving repository ids when needed."""

    def __init__(self, client, resolver: Optional[BatchResolver] = None, app: Optional[str] = None):
        self._client = client
        self._resolver = resolver or BatchResolver(client)
        self._app = app

    def publish(self, target: SecretTarget, secret_name: str, encrypted_value: Union[str, bytes], key_id: str) -> None:
        """
        Create or overwrite `secret_name` on `target`.

        Args:
            target: Where the secret lives and who may read it
            secret_name: Name of the secret
            encrypted_value: Value already sealed for the target's public key
            key_id: Id of that public key

        Raises:
            NotFoundError: A selected repository does not exist
            TransportError: The lookup or the write failed
            InvariantViolation: The payload could not be built or encoded
        """
        repository_ids = None
        if isinstance(target, OrganizationSelectedTarget):
            repository_ids = self._resolver.resolve(target.host, target.org, target.repo_names)
            logger.debug(f"Resolved {len(repository_ids)} repositories in {target.org}")

        payload = build_payload(target, encrypted_value, key_id, repository_ids)
        path = secret_path(target, secret_name, self._app)

        try:
            body = json.dumps(payload.to_dict()).encode("utf-8")
        except (TypeError, ValueError) as e:
            raise InvariantViolation(f"failed to serialize payload for {secret_name}") from e

        try:
            self._client.rest(target.host, "PUT", path, body)
        except TransportError as e:
            raise TransportError(f"failed to set secret {secret_name}", target.host, path) from e

        logger.info(f"Set secret {secret_name} at {target.host}/{path}")
