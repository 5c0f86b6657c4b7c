"""Configuration loader for gh-secretkit.

Resolves the config file location, parses and validates it, and answers the
two questions the rest of the toolkit asks of configuration: which host to
talk to, and which token to authenticate with on that host.
"""
import os
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Tuple
import yaml

from .preferences import get_preference

logger = logging.getLogger(__name__)

DEFAULT_HOST = "github.com"
DEFAULT_SECRETS_APP = "actions"

GH_HOST = "GH_HOST"
GH_TOKEN = "GH_TOKEN"
GITHUB_TOKEN = "GITHUB_TOKEN"
GH_ENTERPRISE_TOKEN = "GH_ENTERPRISE_TOKEN"
GITHUB_ENTERPRISE_TOKEN = "GITHUB_ENTERPRISE_TOKEN"


class ConfigError(Exception):
    """Configuration error exception."""
    pass


def default_config_path() -> Path:
    return Path.home() / ".config" / "gh-secretkit" / "config.yml"


def _get_config_path() -> str:
    """
    Get config file path using XDG Base Directory standard.

    Priority order:
    1. User preference `config_path` (~/.config/gh-secretkit/preferences.json)
    2. Default location: ~/.config/gh-secretkit/config.yml

    Returns:
        Absolute path to config file

    Raises:
        FileNotFoundError: If config file doesn't exist in any location
    """
    config_path_pref = get_preference("config_path")
    if config_path_pref:
        config_path = Path(config_path_pref)
        if config_path.exists():
            logger.debug(f"Using config from preference: {config_path}")
            return str(config_path)
        logger.warning(f"Config path from preference doesn't exist: {config_path}")

    default_config = default_config_path()
    if default_config.exists():
        logger.debug(f"Using default config location: {default_config}")
        return str(default_config)

    raise FileNotFoundError(
        "Configuration file not found. Either export GH_TOKEN (or GITHUB_TOKEN) or create a config file:\n\n"
        "1. Use the default location:\n"
        f"   mkdir -p {default_config.parent}\n"
        f"   cp /path/to/your/config.yml {default_config}\n\n"
        "2. Point to an existing config file:\n"
        "   secretkit config set-path /path/to/your/config.yml\n"
    )


def _validate(config: Dict[str, Any], config_path: str) -> None:
    hosts = config.get('hosts', {})
    if not isinstance(hosts, dict):
        raise ConfigError(
            f"'hosts' must be a mapping in config at {config_path}\n"
            f"Required format:\n"
            f"hosts:\n"
            f"  github.com:\n"
            f"    oauth_token: <token>"
        )
    for host, entry in hosts.items():
        if not isinstance(entry, dict):
            raise ConfigError(f"'hosts.{host}' must be a mapping in config at {config_path}")

    for key in ('default_host', 'secrets_app'):
        if key in config and not isinstance(config[key], str):
            raise ConfigError(f"'{key}' must be a string in config at {config_path}")

    if 'gcp' in config and not isinstance(config['gcp'], dict):
        raise ConfigError(f"'gcp' must be a mapping in config at {config_path}")

    # GCP service account credentials are only needed for --from-gcp
    auth = config.get('authentication')
    if auth is None:
        return
    if not isinstance(auth, dict):
        raise ConfigError(f"'authentication' must be a mapping in config at {config_path}")
    if auth.get('type') != 'service_account':
        raise ConfigError(
            f"Unsupported authentication type: {auth.get('type')}\n"
            f"Only 'service_account' is supported."
        )
    service_account_path = auth.get('service_account_path')
    if not service_account_path:
        raise ConfigError(
            "Missing 'authentication.service_account_path' in config\n"
            "Please specify the absolute path to your service account JSON file."
        )
    if not os.path.isfile(service_account_path):
        raise ConfigError(
            f"Service account file not found at: {service_account_path}\n"
            f"Please ensure the file exists or update the path in {config_path}"
        )


def load_config() -> Dict[str, Any]:
    """
    Load and validate configuration from YAML file.

    Returns:
        Dict containing configuration with optional keys:
        - hosts: mapping of hostname -> {oauth_token: ...}
        - default_host: hostname used when none is given
        - secrets_app: secret namespace (actions, dependabot, codespaces)
        - gcp: dict with project_id
        - authentication: dict with type and service_account_path

    Raises:
        FileNotFoundError: If no config file exists
        ConfigError: If the config file is unreadable, empty or invalid
    """
    # Resolved on every call so preference changes apply without a restart
    config_path = _get_config_path()

    try:
        with open(config_path, 'r') as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse YAML config at {config_path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read config file at {config_path}: {e}") from e

    if not config:
        raise ConfigError(f"Config file at {config_path} is empty")
    if not isinstance(config, dict):
        raise ConfigError(f"Config file at {config_path} must contain a mapping")

    _validate(config, config_path)

    logger.debug(f"Configuration loaded from {config_path}")
    return config


def load_optional_config() -> Dict[str, Any]:
    """Like load_config, but a missing file yields an empty config."""
    try:
        return load_config()
    except FileNotFoundError:
        logger.debug("No config file found, relying on environment")
        return {}


def is_enterprise(host: str) -> bool:
    host = host.lower()
    return host != DEFAULT_HOST and not host.endswith("." + DEFAULT_HOST)


def auth_token_from_env(host: str) -> Tuple[str, str]:
    """
    Look up a token for `host` in the environment.

    Returns:
        (token, variable name). The token is "" when unset.
    """
    if is_enterprise(host):
        names = (GH_ENTERPRISE_TOKEN, GITHUB_ENTERPRISE_TOKEN)
    else:
        names = (GH_TOKEN, GITHUB_TOKEN)

    for name in names:
        token = os.getenv(name)
        if token:
            return token, name
    return "", names[-1]


def auth_token(host: str, config: Optional[Dict[str, Any]] = None) -> Optional[str]:
    """
    Resolve the token for `host`: environment first, then the config file.

    Args:
        host: Hostname the request targets
        config: Already-loaded config; loaded lazily when omitted and needed
    """
    token, env_name = auth_token_from_env(host)
    if token:
        logger.debug(f"Using token for {host} from {env_name}")
        return token

    if config is None:
        config = load_optional_config()
    entry = config.get('hosts', {}).get(host) or {}
    token = entry.get('oauth_token')
    if token:
        logger.debug(f"Using token for {host} from config file")
    return token or None


def resolve_host(explicit: Optional[str] = None, config: Optional[Dict[str, Any]] = None) -> str:
    """Pick the target host: explicit value, GH_HOST, config default_host, github.com."""
    if explicit:
        return explicit
    env_host = os.getenv(GH_HOST)
    if env_host:
        return env_host
    if config and config.get('default_host'):
        return config['default_host']
    return DEFAULT_HOST
