"""Input validation for CLI arguments."""
import re
import sys
from typing import List, Tuple

SECRET_NAME_PATTERN = re.compile(r'^[A-Za-z_][A-Za-z0-9_]*$')
REPO_PART_PATTERN = re.compile(r'^[A-Za-z0-9_.-]+$')


def _usage_error(*lines: str) -> None:
    for line in lines:
        print(line, file=sys.stderr)
    sys.exit(2)


def validate_secret_name(name: str) -> None:
    """
    Validate secret name matches GitHub requirements.

    GitHub allows [A-Za-z0-9_], not starting with a digit or GITHUB_.

    Raises:
        SystemExit with code 2 if validation fails
    """
    if not name:
        _usage_error("Error: Secret name cannot be empty")

    if not SECRET_NAME_PATTERN.match(name):
        _usage_error(
            f"Error: Invalid secret name '{name}'",
            "",
            "Allowed characters: letters, numbers, underscores (_); must not start with a number",
            "",
            "Examples of valid names:",
            "  ✓ MY_SECRET",
            "  ✓ DEPLOY_KEY_2",
            "",
            "Examples of invalid names:",
            "  ✗ api-key (contains hyphen)",
            "  ✗ 2FA_SEED (starts with a number)",
        )

    if name.upper().startswith("GITHUB_"):
        _usage_error(f"Error: Invalid secret name '{name}'", "Secret names must not start with GITHUB_")


def validate_secret_value(value: str) -> None:
    """
    Validate the sealed value is not empty.

    Raises:
        SystemExit with code 2 if validation fails
    """
    if not value or value.strip() == "":
        _usage_error(
            "Error: Secret value cannot be empty",
            "Pass the encrypted value with --body, --from-gcp, or on stdin.",
        )


def parse_repo_spec(spec: str) -> Tuple[str, str]:
    """
    Split an OWNER/NAME repository argument.

    Raises:
        SystemExit with code 2 if the argument is malformed
    """
    parts = spec.split("/")
    if len(parts) != 2 or not all(REPO_PART_PATTERN.match(p) for p in parts):
        _usage_error(f"Error: Invalid repository '{spec}'", "Expected format: OWNER/NAME")
    return parts[0], parts[1]


def parse_selected_repos(org: str, spec: str) -> List[str]:
    """
    Split a comma-separated --repos argument into bare repository names.

    An `ORG/` prefix matching `org` is stripped; any other owner is rejected
    because organization secrets can only be shared within the organization.

    Raises:
        SystemExit with code 2 if the list is empty or an entry is malformed
    """
    names = []
    for entry in spec.split(","):
        entry = entry.strip()
        if not entry:
            continue
        if "/" in entry:
            owner, entry = parse_repo_spec(entry)
            if owner.lower() != org.lower():
                _usage_error(f"Error: Repository '{owner}/{entry}' is not in organization '{org}'")
        elif not REPO_PART_PATTERN.match(entry):
            _usage_error(f"Error: Invalid repository name '{entry}'")
        names.append(entry)

    if not names:
        _usage_error("Error: --repos requires at least one repository name")
    return names
