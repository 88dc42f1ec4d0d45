"""Confluence connection configuration.

Reads connection settings from CLI args, environment variables, .env files,
and YAML config file fallbacks.

Precedence (highest to lowest):
    CLI args > Environment variables > .env file > YAML config > Built-in defaults

Environment variables:
    ATLASSIAN_SITE: Confluence site host, e.g. example.atlassian.net (required)
    ATLASSIAN_EMAIL: Account email used for basic auth (required)
    ATLASSIAN_API_TOKEN: API token for the account (required)
    ATLASSIAN_INSECURE: Skip SSL verification (optional, default: false)
    ADR_SYNC_DEBUG: Enable debug logging (optional, default: false)
"""

import logging
import os
from dataclasses import dataclass
from urllib.parse import urlparse

logger = logging.getLogger(__name__)


@dataclass
class Config:
    site: str
    email: str
    api_token: str
    insecure: bool = False
    debug: bool = False

    @property
    def base_url(self) -> str:
        return f"https://{self.site}"


def normalize_site(site: str) -> str:
    """Reduce a site value to its bare host.

    Accepts ``example.atlassian.net``, ``https://example.atlassian.net/``
    or ``https://example.atlassian.net/wiki``.
    """
    site = site.strip()
    if "://" in site:
        parsed = urlparse(site)
        return parsed.netloc
    return site.split("/", 1)[0]


def validate_config(config: Config) -> None:
    """Validate configuration values and raise ValueError if invalid.

    Args:
        config: Config instance to validate.

    Raises:
        ValueError: If the site is malformed or credentials are empty.
    """
    raw_site = config.site.strip()
    if raw_site.startswith(("ftp://", "file://")):
        raise ValueError(
            f"Invalid Confluence site '{raw_site}': must be a host name or an http(s) URL"
        )

    config.site = normalize_site(raw_site)
    if not config.site or " " in config.site:
        raise ValueError(
            f"Invalid Confluence site '{raw_site}': must include a hostname"
        )

    if not config.email.strip() or "@" not in config.email:
        raise ValueError(
            "Atlassian email must be a valid address. Set ATLASSIAN_EMAIL environment variable."
        )

    if not config.api_token.strip():
        raise ValueError(
            "Atlassian API token cannot be empty. Set ATLASSIAN_API_TOKEN environment variable."
        )

    if config.insecure:
        logger.warning(
            "WARNING: SSL verification disabled (insecure=True). Use only for development."
        )


def get_bool_env(key: str) -> bool | None:
    """Return True/False from env var, or None if unset."""
    val = os.getenv(key)
    if val is None:
        return None
    return val.lower() in ("true", "1", "yes", "on")


def load_config(
    site: str | None = None,
    email: str | None = None,
    api_token: str | None = None,
    insecure: bool = False,
    debug: bool = False,
    yaml_fallbacks: dict | None = None,
) -> Config:
    """Load configuration with unified precedence.

    Resolution order for each field (highest to lowest):
        CLI arg > env var / .env > yaml_fallbacks > built-in default

    The caller is responsible for calling ``load_dotenv()`` before this
    function so that .env values are available via ``os.getenv()``.

    Args:
        site: Override Confluence site.
        email: Override account email.
        api_token: Override API token.
        insecure: Skip SSL verification (CLI flag).
        debug: Enable debug logging (CLI flag).
        yaml_fallbacks: Dict of values from the YAML ``confluence`` section.

    Returns:
        Validated Config instance.

    Raises:
        ValueError: If site, email or API token is missing after checking
            all sources.
    """
    fb = yaml_fallbacks or {}

    final_site = _first(site, "ATLASSIAN_SITE", fb.get("site"))
    if not final_site:
        raise ValueError(
            "Confluence site not found. Set ATLASSIAN_SITE environment variable, "
            "pass --site CLI argument, or add 'site' to config.yml."
        )

    final_email = _first(email, "ATLASSIAN_EMAIL", fb.get("email"))
    if not final_email:
        raise ValueError(
            "Atlassian email not found. Set ATLASSIAN_EMAIL environment variable, "
            "pass --email CLI argument, or add 'email' to config.yml."
        )

    final_token = _first(api_token, "ATLASSIAN_API_TOKEN", fb.get("api_token"))
    if not final_token:
        raise ValueError(
            "Atlassian API token not found. Set ATLASSIAN_API_TOKEN environment "
            "variable or add 'api_token' to config.yml."
        )

    config = Config(
        site=final_site.strip(),
        email=final_email.strip(),
        api_token=final_token.strip(),
        insecure=_flag(insecure, "ATLASSIAN_INSECURE", fb.get("insecure")),
        debug=_flag(debug, "ADR_SYNC_DEBUG", fb.get("debug")),
    )
    validate_config(config)
    return config


def _first(cli_value: str | None, env_key: str, fallback) -> str | None:
    return cli_value or os.getenv(env_key) or fallback


def _flag(cli_value: bool, env_key: str, fallback) -> bool:
    # A CLI flag can only switch on; an explicit env value beats the YAML one.
    if cli_value:
        return True
    env_value = get_bool_env(env_key)
    if env_value is not None:
        return env_value
    return bool(fallback)
