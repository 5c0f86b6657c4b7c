"""GitHub REST and GraphQL client wrapper."""
import os
import json
import logging
import threading
from typing import Any, Callable, Dict, Optional

import httpx

from . import config_loader
from .errors import GraphQLErrorItem, GraphQLErrorResponse, HTTPError, TransportError

logger = logging.getLogger(__name__)

TokenSource = Callable[[str], Optional[str]]


def rest_prefix(host: str) -> str:
    """Base URL of the REST API for `host`, with trailing slash."""
    if config_loader.is_enterprise(host):
        return f"https://{host}/api/v3/"
    return "https://api.github.com/"


def graphql_url(host: str) -> str:
    if config_loader.is_enterprise(host):
        return f"https://{host}/api/graphql"
    return "https://api.github.com/graphql"


class GitHubClient:
    """
    Authenticated JSON-over-HTTP access to one or more GitHub hosts.

    A single httpx.Client is created on first use and shared by every request,
    so one GitHubClient may serve concurrent callers. Tokens are looked up per
    host on each request.
    """

    def __init__(
        self,
        token_source: Optional[TokenSource] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self._token_source = token_source or config_loader.auth_token
        if timeout is None:
            timeout = float(os.getenv("SECRETKIT_HTTP_TIMEOUT", "30"))
        self._timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.Client] = None
        self._lock = threading.Lock()

    @property
    def client(self) -> httpx.Client:
        """Lazy-initialize client."""
        if self._client is not None:
            return self._client
        with self._lock:
            if self._client is None:
                self._client = httpx.Client(
                    timeout=self._timeout,
                    transport=self._transport,
                    headers={
                        "Accept": "application/vnd.github+json",
                        "User-Agent": "gh-secretkit",
                    },
                )
            return self._client

    def close(self) -> None:
        with self._lock:
            if self._client is not None:
                self._client.close()
                self._client = None

    def __enter__(self) -> "GitHubClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _auth_headers(self, host: str) -> Dict[str, str]:
        token = self._token_source(host)
        if not token:
            logger.debug(f"No token available for {host}, sending unauthenticated request")
            return {}
        return {"Authorization": f"token {token}"}

    def _send(self, host: str, method: str, url: str, path: str, content: Optional[bytes] = None) -> httpx.Response:
        headers = self._auth_headers(host)
        if content is not None:
            headers["Content-Type"] = "application/json; charset=utf-8"

        logger.debug(f"{method} {url}")
        try:
            response = self.client.request(method, url, content=content, headers=headers)
        except httpx.HTTPError as e:
            raise TransportError(f"{method} request failed", host, path) from e

        if response.status_code >= 400:
            raise HTTPError(
                f"HTTP {response.status_code}: {_error_message(response)}",
                host, path, response.status_code,
            )
        return response

    def rest(self, host: str, method: str, path: str, body: Optional[bytes] = None) -> Any:
        """
        Issue a REST request.

        Args:
            host: GitHub hostname
            method: HTTP method
            path: API path relative to the REST root, e.g. "orgs/acme/actions/secrets/TOKEN"
            body: Serialized JSON request body

        Returns:
            Decoded JSON response, or None when the response has no body

        Raises:
            TransportError: Network failure, non-2xx status or undecodable body
        """
        response = self._send(host, method, rest_prefix(host) + path, path, content=body)
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise TransportError("malformed JSON response", host, path) from e

    def graphql(self, host: str, query: str, variables: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Run a GraphQL query and return its `data` mapping.

        Raises:
            GraphQLErrorResponse: The response carried an `errors` array
            TransportError: Any request-level failure
        """
        content = json.dumps({"query": query, "variables": variables or {}}).encode("utf-8")
        response = self._send(host, "POST", graphql_url(host), "graphql", content=content)

        try:
            body = response.json()
        except ValueError as e:
            raise TransportError("malformed GraphQL response", host, "graphql") from e
        if not isinstance(body, dict):
            raise TransportError("malformed GraphQL response", host, "graphql")

        data = body.get("data")
        raw_errors = body.get("errors")
        if raw_errors:
            if not isinstance(raw_errors, list) or not all(isinstance(e, dict) for e in raw_errors):
                raise TransportError("malformed GraphQL response", host, "graphql")
            errors = [GraphQLErrorItem.from_dict(e) for e in raw_errors]
            raise GraphQLErrorResponse(host, errors, data if isinstance(data, dict) else None)

        if not isinstance(data, dict):
            raise TransportError("GraphQL response has no data", host, "graphql")
        return data


def _error_message(response: httpx.Response) -> str:
    try:
        message = response.json().get("message")
    except (ValueError, AttributeError):
        message = None
    return message or response.reason_phrase or "request failed"
