import pytest

from adr_sync.config import Config, get_bool_env, load_config, normalize_site, validate_config

_ENV = (
    "ATLASSIAN_SITE",
    "ATLASSIAN_EMAIL",
    "ATLASSIAN_API_TOKEN",
    "ATLASSIAN_INSECURE",
    "ADR_SYNC_DEBUG",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in _ENV:
        monkeypatch.delenv(name, raising=False)


def _set_required(monkeypatch):
    monkeypatch.setenv("ATLASSIAN_SITE", "example.atlassian.net")
    monkeypatch.setenv("ATLASSIAN_EMAIL", "dev@example.com")
    monkeypatch.setenv("ATLASSIAN_API_TOKEN", "secret-token")


def test_load_config_from_env(monkeypatch):
    _set_required(monkeypatch)
    config = load_config()
    assert config.site == "example.atlassian.net"
    assert config.email == "dev@example.com"
    assert config.api_token == "secret-token"
    assert config.insecure is False
    assert config.debug is False
    assert config.base_url == "https://example.atlassian.net"


def test_cli_args_override_env(monkeypatch):
    _set_required(monkeypatch)
    config = load_config(site="other.atlassian.net", email="me@example.com")
    assert config.site == "other.atlassian.net"
    assert config.email == "me@example.com"


def test_yaml_fallbacks_used_last(monkeypatch):
    monkeypatch.setenv("ATLASSIAN_API_TOKEN", "env-token")
    config = load_config(
        yaml_fallbacks={
            "site": "yaml.atlassian.net",
            "email": "yaml@example.com",
            "api_token": "yaml-token",
            "insecure": True,
        }
    )
    assert config.site == "yaml.atlassian.net"
    assert config.api_token == "env-token"
    assert config.insecure is True


@pytest.mark.parametrize(
    "missing,message",
    [
        ("ATLASSIAN_SITE", "Confluence site not found"),
        ("ATLASSIAN_EMAIL", "Atlassian email not found"),
        ("ATLASSIAN_API_TOKEN", "Atlassian API token not found"),
    ],
)
def test_missing_required_value(monkeypatch, missing, message):
    _set_required(monkeypatch)
    monkeypatch.delenv(missing)
    with pytest.raises(ValueError, match=message):
        load_config()


def test_env_booleans(monkeypatch):
    _set_required(monkeypatch)
    monkeypatch.setenv("ATLASSIAN_INSECURE", "yes")
    monkeypatch.setenv("ADR_SYNC_DEBUG", "1")
    config = load_config()
    assert config.insecure is True
    assert config.debug is True


def test_env_false_beats_yaml_true(monkeypatch):
    _set_required(monkeypatch)
    monkeypatch.setenv("ATLASSIAN_INSECURE", "false")
    assert load_config(yaml_fallbacks={"insecure": True}).insecure is False


def test_cli_flag_beats_env_false(monkeypatch):
    _set_required(monkeypatch)
    monkeypatch.setenv("ATLASSIAN_INSECURE", "false")
    assert load_config(insecure=True).insecure is True


@pytest.mark.parametrize(
    "value,expected",
    [("true", True), ("ON", True), ("0", False), ("no", False)],
)
def test_get_bool_env(monkeypatch, value, expected):
    monkeypatch.setenv("SOME_FLAG", value)
    assert get_bool_env("SOME_FLAG") is expected


def test_get_bool_env_unset(monkeypatch):
    monkeypatch.delenv("SOME_FLAG", raising=False)
    assert get_bool_env("SOME_FLAG") is None


# validate_config / normalize_site


@pytest.mark.parametrize(
    "site",
    [
        "example.atlassian.net",
        "https://example.atlassian.net",
        "https://example.atlassian.net/",
        "https://example.atlassian.net/wiki",
        "example.atlassian.net/wiki/spaces/CE",
    ],
)
def test_normalize_site(site):
    assert normalize_site(site) == "example.atlassian.net"


def test_validate_normalizes_site():
    config = Config(
        site="https://example.atlassian.net/wiki/",
        email="dev@example.com",
        api_token="t",
    )
    validate_config(config)
    assert config.site == "example.atlassian.net"


@pytest.mark.parametrize(
    "site,message",
    [
        ("ftp://example.com", "must be a host name or an http"),
        ("file:///etc/passwd", "must be a host name or an http"),
        ("https://", "must include a hostname"),
        ("bad host", "must include a hostname"),
    ],
)
def test_invalid_site(site, message):
    config = Config(site=site, email="dev@example.com", api_token="t")
    with pytest.raises(ValueError, match=message):
        validate_config(config)


def test_invalid_email():
    config = Config(site="example.atlassian.net", email="dev", api_token="t")
    with pytest.raises(ValueError, match="valid address"):
        validate_config(config)


def test_blank_token():
    config = Config(
        site="example.atlassian.net", email="dev@example.com", api_token="  "
    )
    with pytest.raises(ValueError, match="API token cannot be empty"):
        validate_config(config)


def test_insecure_logs_warning(caplog):
    config = Config(
        site="example.atlassian.net",
        email="dev@example.com",
        api_token="t",
        insecure=True,
    )
    validate_config(config)
    assert "SSL verification disabled" in caplog.text
