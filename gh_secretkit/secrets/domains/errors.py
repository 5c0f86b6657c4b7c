"""Error taxonomy for repository resolution and secret publishing."""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence


class SecretKitError(Exception):
    """Base class for all gh-secretkit errors."""
    pass


class NotFoundError(SecretKitError):
    """One or more named repositories do not exist under the owner."""

    def __init__(self, owner: str, names: Sequence[str], other_errors: Sequence[str] = ()):
        self.owner = owner
        self.names = list(names)
        # Errors reported in the same response that were not about missing repositories
        self.other_errors = list(other_errors)
        message = "could not find " + ", ".join(f"{owner}/{name}" for name in self.names)
        if self.other_errors:
            message += " (also: " + "; ".join(self.other_errors) + ")"
        super().__init__(message)


class TransportError(SecretKitError):
    """Request-level failure: network, authentication or malformed response."""

    def __init__(self, message: str, host: str, path: Optional[str] = None):
        self.host = host
        self.path = path
        super().__init__(message)

    def __str__(self) -> str:
        where = f"{self.host}/{self.path}" if self.path else self.host
        text = f"{self.args[0]} ({where})"
        if self.__cause__ is not None:
            text += f": {self.__cause__}"
        return text


class HTTPError(TransportError):
    """The remote answered with a non-success status."""

    def __init__(self, message: str, host: str, path: str, status_code: int):
        self.status_code = status_code
        super().__init__(message, host, path)


@dataclass
class GraphQLErrorItem:
    """A single entry of a GraphQL `errors` array."""
    type: str = ""
    path: List[Any] = field(default_factory=list)
    message: str = ""

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "GraphQLErrorItem":
        path = raw.get("path")
        return cls(
            type=raw.get("type") or "",
            path=list(path) if isinstance(path, list) else [],
            message=raw.get("message") or "",
        )


class GraphQLErrorResponse(TransportError):
    """The GraphQL endpoint answered with an `errors` array.

    `data` holds whatever partial result came back alongside the errors.
    """

    def __init__(self, host: str, errors: List[GraphQLErrorItem], data: Optional[Dict[str, Any]] = None):
        self.errors = errors
        self.data = data
        messages = "; ".join(e.message for e in errors if e.message) or "unknown error"
        super().__init__(f"GraphQL error: {messages}", host, "graphql")


class InvariantViolation(SecretKitError):
    """A payload was built in an inconsistent state. Indicates a defect."""
    pass
