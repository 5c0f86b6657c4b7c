"""CLI entrypoint for gh-secretkit."""
import sys
import argparse
import logging
from pathlib import Path

from gh_secretkit import __version__
from .validators import (
    parse_repo_spec,
    parse_selected_repos,
    validate_secret_name,
    validate_secret_value,
)

# Configure logging to stderr
logging.basicConfig(
    level=logging.WARNING,
    format="%(message)s",
    stream=sys.stderr
)
logger = logging.getLogger(__name__)


def cmd_version(args):
    """Show version information."""
    print(f"gh-secretkit {__version__}")


def cmd_config_set_path(args):
    """Set config file path preference."""
    from gh_secretkit.secrets.domains.preferences import set_preference

    config_path = Path(args.path).resolve()

    if not config_path.exists():
        print(f"Error: Config file does not exist: {config_path}", file=sys.stderr)
        sys.exit(1)

    if not config_path.is_file():
        print(f"Error: Path is not a file: {config_path}", file=sys.stderr)
        sys.exit(1)

    set_preference("config_path", str(config_path))
    print(f"Config path set to: {config_path}")


def cmd_config_show(args):
    """Show current config file path."""
    from gh_secretkit.secrets.domains.config_loader import default_config_path
    from gh_secretkit.secrets.domains.preferences import get_preference

    config_path_pref = get_preference("config_path")

    if config_path_pref:
        config_path = Path(config_path_pref)
        suffix = "" if config_path.exists() else " (file not found)"
        print(f"Config path: {config_path}{suffix}")
        print("Source: preference")
    else:
        default_config = default_config_path()
        suffix = "" if default_config.exists() else " (file not found)"
        print(f"Config path: {default_config}")
        print(f"Source: default{suffix}")


def cmd_config_clear(args):
    """Clear config path preference."""
    from gh_secretkit.secrets.domains.config_loader import default_config_path
    from gh_secretkit.secrets.domains.preferences import clear_preference

    clear_preference("config_path")
    print(f"Config path preference cleared. Will use default: {default_config_path()}")


def _usage(message):
    print(f"Error: {message}", file=sys.stderr)
    sys.exit(2)


def _build_target(args, host):
    """Turn --repo/--org/--visibility/--repos into a secret target."""
    from gh_secretkit.secrets.domains.models import (
        VISIBILITY_ALL,
        VISIBILITY_PRIVATE,
        VISIBILITY_SELECTED,
        OrganizationAllTarget,
        OrganizationPrivateTarget,
        OrganizationSelectedTarget,
        RepositoryTarget,
    )

    if bool(args.repo) == bool(args.org):
        _usage("specify exactly one of --repo or --org")

    if args.repo:
        if args.visibility or args.repos:
            _usage("--visibility and --repos only apply to organization secrets")
        owner, name = parse_repo_spec(args.repo)
        return RepositoryTarget(host=host, owner=owner, name=name)

    visibility = args.visibility or (VISIBILITY_SELECTED if args.repos else VISIBILITY_PRIVATE)
    if visibility == VISIBILITY_SELECTED:
        if not args.repos:
            _usage("--visibility selected requires --repos")
        names = parse_selected_repos(args.org, args.repos)
        return OrganizationSelectedTarget(host=host, org=args.org, repo_names=names)

    if args.repos:
        _usage("--repos can only be used with --visibility selected")
    if visibility == VISIBILITY_ALL:
        return OrganizationAllTarget(host=host, org=args.org)
    return OrganizationPrivateTarget(host=host, org=args.org)


def _read_value(args, config):
    """Get the sealed value from --body, --from-gcp or stdin."""
    from gh_secretkit.secrets.workflows.sealed_values import get_sealed_value, read_stdin_value

    if args.body is not None and args.from_gcp:
        _usage("--body and --from-gcp are mutually exclusive")

    if args.body is not None:
        return args.body

    if args.from_gcp:
        value = get_sealed_value(args.from_gcp, args.project_id, config)
        if value is None:
            print(f"Error: Sealed value '{args.from_gcp}' not found in GCP or env", file=sys.stderr)
            sys.exit(1)
        return value

    if sys.stdin.isatty():
        _usage("no value given; use --body, --from-gcp, or pipe the encrypted value on stdin")
    return read_stdin_value(sys.stdin)


def _client(config):
    from gh_secretkit.secrets.domains.config_loader import auth_token
    from gh_secretkit.secrets.domains.github_client import GitHubClient

    return GitHubClient(token_source=lambda host: auth_token(host, config))


def cmd_secrets_set(args):
    """Publish an already-encrypted secret value."""
    from gh_secretkit.secrets.domains.config_loader import (
        DEFAULT_SECRETS_APP,
        load_optional_config,
        resolve_host,
    )
    from gh_secretkit.secrets.domains.models import RepositoryTarget
    from gh_secretkit.secrets.workflows.publish import SecretPublisher

    validate_secret_name(args.secret_name)

    config = load_optional_config()
    host = resolve_host(args.hostname, config)
    target = _build_target(args, host)

    value = _read_value(args, config)
    validate_secret_value(value)

    app = args.app or config.get("secrets_app") or DEFAULT_SECRETS_APP

    with _client(config) as client:
        SecretPublisher(client, app=app).publish(target, args.secret_name, value, args.key_id)

    if isinstance(target, RepositoryTarget):
        where = f"{target.owner}/{target.name}"
    else:
        where = target.org
    print(f"Set secret {args.secret_name} for {where}")


def cmd_repos_ids(args):
    """Print the database ids of repositories, in argument order."""
    from gh_secretkit.secrets.domains.config_loader import load_optional_config, resolve_host
    from gh_secretkit.secrets.domains.resolver import BatchResolver

    config = load_optional_config()
    host = resolve_host(args.hostname, config)

    with _client(config) as client:
        ids = BatchResolver(client).resolve(host, args.owner, args.names)

    for name, repo_id in zip(args.names, ids):
        print(f"{args.owner}/{name}\t{repo_id}")


def build_parser():
    parser = argparse.ArgumentParser(
        prog="secretkit",
        description="gh-secretkit CLI - publish encrypted secrets to GitHub repositories and organizations",
        epilog="""
Exit codes:
  0 - Success
  1 - Runtime error (authentication, network, repository not found, etc.)
  2 - Usage error (invalid arguments, invalid secret name format, etc.)

Environment variables:
  GH_TOKEN, GITHUB_TOKEN - token for github.com (overrides config file)
  GH_ENTERPRISE_TOKEN, GITHUB_ENTERPRISE_TOKEN - token for enterprise hosts
  GH_HOST - default host (overrides config file)
  GCP_PROJECT - GCP project ID for --from-gcp

Configuration:
  Default location: ~/.config/gh-secretkit/config.yml
  Custom path: Set with 'secretkit config set-path <path>'
        """
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log debug information to stderr"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser(
        "version",
        help="Show version information",
        description="Display the current version of gh-secretkit"
    )

    # config command
    config_parser = subparsers.add_parser(
        "config",
        help="Configuration management",
        description="Manage gh-secretkit configuration"
    )
    config_subparsers = config_parser.add_subparsers(dest="config_command")

    config_set_path_parser = config_subparsers.add_parser(
        "set-path",
        help="Set config file path",
        description="Store the absolute path to your config file in ~/.config/gh-secretkit/preferences.json"
    )
    config_set_path_parser.add_argument("path", help="Path to config file")

    config_subparsers.add_parser(
        "show",
        help="Show current config path",
        description="Display the current configuration file path and whether it comes from a preference or the default"
    )
    config_subparsers.add_parser(
        "clear",
        help="Clear config path preference",
        description="Remove the config path preference and fall back to ~/.config/gh-secretkit/config.yml"
    )

    # secrets command
    secrets_parser = subparsers.add_parser(
        "secrets",
        help="Secret management operations",
        description="Manage GitHub repository and organization secrets"
    )
    secrets_subparsers = secrets_parser.add_subparsers(dest="secrets_command")

    set_parser = secrets_subparsers.add_parser(
        "set",
        help="Create or update a secret",
        description="""
Publish a secret value that has already been encrypted with the target's
public key. The value is read from --body, from GCP Secret Manager with
--from-gcp, or from stdin.

Organization visibility:
  all      - every repository in the organization
  private  - private repositories only (default without --repos)
  selected - only the repositories named with --repos (default with --repos)
        """
    )
    set_parser.add_argument(
        "secret_name",
        help="Name of the secret (letters, numbers, underscores; not starting with a number or GITHUB_)"
    )
    set_parser.add_argument("--key-id", required=True, help="Id of the public key the value was encrypted with")
    set_parser.add_argument("--repo", help="Repository secret target, as OWNER/NAME")
    set_parser.add_argument("--org", help="Organization secret target")
    set_parser.add_argument(
        "--visibility",
        choices=["all", "private", "selected"],
        help="Which organization repositories may read the secret"
    )
    set_parser.add_argument("--repos", help="Comma-separated repository names for selected visibility")
    set_parser.add_argument("-b", "--body", help="The encrypted, base64-encoded value")
    set_parser.add_argument("--from-gcp", metavar="NAME", help="Read the encrypted value from this GCP secret")
    set_parser.add_argument("--project-id", help="GCP project ID for --from-gcp")
    set_parser.add_argument("--hostname", help="GitHub host (default: GH_HOST, config, or github.com)")
    set_parser.add_argument("--app", help="Secret namespace: actions, dependabot or codespaces (default: actions)")

    # repos command
    repos_parser = subparsers.add_parser(
        "repos",
        help="Repository lookups",
        description="Look up repository metadata"
    )
    repos_subparsers = repos_parser.add_subparsers(dest="repos_command")

    ids_parser = repos_subparsers.add_parser(
        "ids",
        help="Print repository database ids",
        description="Resolve repository names to database ids with a single request"
    )
    ids_parser.add_argument("--owner", required=True, help="User or organization owning the repositories")
    ids_parser.add_argument("names", nargs="+", help="Bare repository names")
    ids_parser.add_argument("--hostname", help="GitHub host (default: GH_HOST, config, or github.com)")

    return parser, {"config": config_parser, "secrets": secrets_parser, "repos": repos_parser}


def main(argv=None):
    """Main CLI entrypoint.

    Exit codes:
        0 - Success
        1 - Runtime errors (authentication, network, repository not found, etc.)
        2 - Usage errors (invalid arguments, invalid secret name format, etc.)
    """
    parser, group_parsers = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    if not args.command:
        parser.print_help()
        sys.exit(2)

    handlers = {
        ("version", None): cmd_version,
        ("config", "set-path"): cmd_config_set_path,
        ("config", "show"): cmd_config_show,
        ("config", "clear"): cmd_config_clear,
        ("secrets", "set"): cmd_secrets_set,
        ("repos", "ids"): cmd_repos_ids,
    }
    subcommand = getattr(args, f"{args.command}_command", None)
    handler = handlers.get((args.command, subcommand))
    if handler is None:
        group_parsers.get(args.command, parser).print_help()
        sys.exit(2)

    try:
        handler(args)
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        logger.debug("Command failed", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
