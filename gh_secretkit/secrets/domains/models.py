"""Domain models for secret publishing."""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple, Union

from .errors import InvariantViolation

VISIBILITY_ALL = "all"
VISIBILITY_PRIVATE = "private"
VISIBILITY_SELECTED = "selected"

ORG_VISIBILITIES = (VISIBILITY_ALL, VISIBILITY_PRIVATE, VISIBILITY_SELECTED)


@dataclass(frozen=True)
class RepositoryTarget:
    """A secret stored on a single repository."""
    host: str
    owner: str
    name: str


@dataclass(frozen=True)
class OrganizationAllTarget:
    """An organization secret visible to every repository in the org."""
    host: str
    org: str


@dataclass(frozen=True)
class OrganizationPrivateTarget:
    """An organization secret visible to the org's private repositories."""
    host: str
    org: str


@dataclass(frozen=True)
class OrganizationSelectedTarget:
    """An organization secret visible only to the named repositories."""
    host: str
    org: str
    repo_names: Tuple[str, ...]

    def __post_init__(self):
        # Accept any sequence but store an immutable copy
        object.__setattr__(self, "repo_names", tuple(self.repo_names))
        if not self.repo_names:
            raise ValueError("selected visibility requires at least one repository name")


SecretTarget = Union[
    RepositoryTarget,
    OrganizationAllTarget,
    OrganizationPrivateTarget,
    OrganizationSelectedTarget,
]


@dataclass
class SecretPayload:
    """Request body for a secret upsert."""
    encrypted_value: Union[str, bytes]
    key_id: str
    visibility: str = ""
    repository_ids: List[int] = field(default_factory=list)

    def validate(self) -> None:
        """
        Check the visibility/repository-list invariant.

        Raises:
            InvariantViolation: If repository ids are set without selected
                visibility, selected visibility has no ids, or the visibility
                tag is unknown.
        """
        if self.visibility and self.visibility not in ORG_VISIBILITIES:
            raise InvariantViolation(f"unknown visibility {self.visibility!r}")
        if self.visibility == VISIBILITY_SELECTED and not self.repository_ids:
            raise InvariantViolation("selected visibility requires repository ids")
        if self.visibility != VISIBILITY_SELECTED and self.repository_ids:
            raise InvariantViolation(
                f"repository ids given for visibility {self.visibility or '<none>'!r}"
            )

    def to_dict(self) -> Dict[str, Any]:
        """Wire representation. Empty visibility and repository list are omitted."""
        self.validate()

        value = self.encrypted_value
        if isinstance(value, bytes):
            try:
                value = value.decode("ascii")
            except UnicodeDecodeError as e:
                raise InvariantViolation("encrypted value is not base-armored text") from e

        body: Dict[str, Any] = {"encrypted_value": value}
        if self.visibility:
            body["visibility"] = self.visibility
        if self.repository_ids:
            body["selected_repository_ids"] = list(self.repository_ids)
        body["key_id"] = self.key_id
        return body
