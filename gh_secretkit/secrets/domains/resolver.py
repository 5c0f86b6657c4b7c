"""Batch lookup of repository database ids by name.

All names are resolved in a single GraphQL request. Each name gets its own
aliased `repository` field, `entity_000`, `entity_001`, ... The response is a
JSON object whose key order is not guaranteed, so the aliases are zero-padded
to a fixed width: sorting them as strings restores input order.
"""
import logging
from typing import Any, Dict, List, Sequence, Tuple

from .errors import GraphQLErrorResponse, NotFoundError, TransportError

logger = logging.getLogger(__name__)

ALIAS_PREFIX = "entity_"
NOT_FOUND = "NOT_FOUND"


def _alias_width(count: int) -> int:
    return max(3, len(str(count - 1)))


def alias_for(index: int, width: int = 3) -> str:
    return f"{ALIAS_PREFIX}{index:0{width}d}"


def build_query(owner: str, names: Sequence[str]) -> Tuple[str, Dict[str, Any], List[str]]:
    """
    Build the batched query for `names` under `owner`.

    Returns:
        (query text, variables, aliases) where aliases[i] labels names[i]
    """
    width = _alias_width(len(names))
    aliases = [alias_for(i, width) for i in range(len(names))]

    params = ["$owner: String!"]
    fields = []
    variables: Dict[str, Any] = {"owner": owner}
    for alias, name in zip(aliases, names):
        var = "name_" + alias[len(ALIAS_PREFIX):]
        params.append(f"${var}: String!")
        fields.append(f"{alias}: repository(owner: $owner, name: ${var}) {{ databaseId }}")
        variables[var] = name

    query = "query MapRepositoryNames({}) {{\n  {}\n}}".format(", ".join(params), "\n  ".join(fields))
    return query, variables, aliases


class BatchResolver:
    """Resolves repository names to database ids with one round trip."""

    def __init__(self, client):
        self._client = client

    def resolve(self, host: str, owner: str, names: Sequence[str]) -> List[int]:
        """
        Resolve repository names to their numeric ids, preserving order.

        Args:
            host: GitHub hostname
            owner: User or organization owning every repository
            names: Bare repository names (no owner prefix); duplicates are
                resolved independently

        Returns:
            One id per name, in input order

        Raises:
            ValueError: If `names` is empty
            NotFoundError: If any repository does not exist; lists all of them
            TransportError: On any other failure of the request
        """
        names = list(names)
        if not names:
            raise ValueError("at least one repository name is required")

        query, variables, aliases = build_query(owner, names)
        index_of = {alias: i for i, alias in enumerate(aliases)}
        logger.debug(f"Resolving {len(names)} repositories under {owner} on {host}")

        try:
            data = self._client.graphql(host, query, variables)
        except GraphQLErrorResponse as e:
            missing = []
            other = []
            for err in e.errors:
                alias = err.path[0] if err.path else None
                if err.type == NOT_FOUND and isinstance(alias, str) and alias in index_of:
                    missing.append(index_of[alias])
                else:
                    kind = err.type or "ERROR"
                    other.append(f"{kind}: {err.message}" if err.message else kind)
            if missing:
                raise NotFoundError(owner, [names[i] for i in sorted(missing)], other) from e
            raise TransportError(f"failed to look up repositories for {owner}", host, "graphql") from e
        except TransportError as e:
            raise TransportError(f"failed to look up repositories for {owner}", host, "graphql") from e

        return self._collect(host, owner, names, aliases, data)

    def _collect(self, host: str, owner: str, names: List[str], aliases: List[str], data: Dict[str, Any]) -> List[int]:
        keys = sorted(data)
        if keys != aliases:
            raise TransportError(
                f"unexpected repository lookup response for {owner}: got {len(keys)} entries for {len(names)} names",
                host, "graphql",
            )

        missing = [i for i, key in enumerate(keys) if data[key] is None]
        if missing:
            raise NotFoundError(owner, [names[i] for i in missing])

        ids = []
        for key in keys:
            entry = data[key]
            if not isinstance(entry, dict):
                raise TransportError(f"malformed repository lookup entry for {key}", host, "graphql")
            database_id = entry.get("databaseId")
            # bool is an int subclass; a JSON true is not an id
            if isinstance(database_id, bool) or not isinstance(database_id, int):
                raise TransportError(f"repository lookup returned no id for {key}", host, "graphql")
            ids.append(database_id)
        return ids
