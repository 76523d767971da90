import pytest

from auth0_manager.config import settings
from auth0_manager.core.errors import InvalidConfig

ENV_VARS = [
    "AUTH0_DOMAIN", "AUTH0_CLIENT_ID", "AUTH0_CLIENT_SECRET", "AUTH0_AUDIENCE",
    "PAGINATE_DEFAULT", "PAGINATE_MAX", "PAGINATE_DISABLED", "USERS_MULTI",
    "PASSWORD_MIN_LENGTH", "PASSWORD_MAX_LENGTH", "PASSWORD_MIN_PHRASE_LENGTH",
    "PASSWORD_MIN_OPTIONAL_TESTS", "PASSWORD_ALLOW_PASSPHRASES", "BULK_MAX_WORKERS",
    "REQUEST_TIMEOUT",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for var in ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setattr(settings, "SECRETS_DIR", tmp_path)
    return tmp_path


def test_defaults():
    cfg = settings.load_settings()
    assert cfg.paginate == {"default": 10, "max": 50}
    assert cfg.users_multi is False
    assert cfg.bulk_max_workers == 10
    assert cfg.request_timeout == 10
    assert cfg.password_policy_options == {
        "min_length": 10,
        "max_length": 128,
        "min_phrase_length": 20,
        "min_optional_tests": 4,
        "allow_passphrases": True,
    }


def test_auth0_options_from_env(monkeypatch):
    monkeypatch.setenv("AUTH0_DOMAIN", "example.auth0.com")
    monkeypatch.setenv("AUTH0_CLIENT_ID", "client-id")
    monkeypatch.setenv("AUTH0_CLIENT_SECRET", "from-env")
    cfg = settings.load_settings()
    assert cfg.auth0_options == {
        "domain": "example.auth0.com",
        "client_id": "client-id",
        "client_secret": "from-env",
        "audience": None,
    }


def test_client_secret_prefers_secret_file(monkeypatch, clean_env):
    (clean_env / "auth0_client_secret").write_text("from-file\n")
    monkeypatch.setenv("AUTH0_CLIENT_SECRET", "from-env")
    assert settings.load_settings().auth0_client_secret == "from-file"


def test_empty_secret_file_falls_back_to_env(monkeypatch, clean_env):
    (clean_env / "auth0_client_secret").write_text("   ")
    monkeypatch.setenv("AUTH0_CLIENT_SECRET", "from-env")
    assert settings.load_settings().auth0_client_secret == "from-env"


def test_pagination_default_above_max_is_rejected(monkeypatch):
    monkeypatch.setenv("PAGINATE_DEFAULT", "60")
    monkeypatch.setenv("PAGINATE_MAX", "50")
    with pytest.raises(InvalidConfig, match="Max results per page should not be greater than default."):
        settings.load_settings()


def test_pagination_disabled(monkeypatch):
    monkeypatch.setenv("PAGINATE_DISABLED", "true")
    assert settings.load_settings().paginate is None


def test_malformed_integer(monkeypatch):
    monkeypatch.setenv("BULK_MAX_WORKERS", "many")
    with pytest.raises(InvalidConfig, match="BULK_MAX_WORKERS"):
        settings.load_settings()


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("true", True),
        ("false", False),
        ("", False),
        ("patch", ["patch"]),
        ("patch, remove", ["patch", "remove"]),
    ],
)
def test_users_multi(monkeypatch, raw, expected):
    monkeypatch.setenv("USERS_MULTI", raw)
    assert settings.load_settings().users_multi == expected


def test_password_policy_from_env(monkeypatch):
    monkeypatch.setenv("PASSWORD_MIN_LENGTH", "12")
    monkeypatch.setenv("PASSWORD_ALLOW_PASSPHRASES", "false")
    options = settings.load_settings().password_policy_options
    assert options["min_length"] == 12
    assert options["allow_passphrases"] is False
