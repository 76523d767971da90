"""Settings loader with environment variable and Docker secrets integration."""
from __future__ import annotations
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union

from auth0_manager.core.errors import InvalidConfig

SECRETS_DIR = Path("/run/secrets")


def _load_secret_from_file(secret_name: str, env_var: str | None = None) -> str | None:
    """
    Load secret from /run/secrets (Docker secrets pattern).

    Priority:
    1. /run/secrets/{secret_name} (Docker secrets mount)
    2. Environment variable (fallback)

    Args:
        secret_name: Name of the secret file in /run/secrets
        env_var: Optional environment variable name to check as fallback

    Returns:
        Secret value or None if not found
    """
    secret_file = SECRETS_DIR / secret_name

    # Priority 1: Read from /run/secrets
    if secret_file.exists() and secret_file.is_file():
        try:
            secret_value = secret_file.read_text().strip()
            if secret_value:
                print(f"[settings] ✓ Loaded {secret_name} from /run/secrets")
                return secret_value
        except OSError as e:
            print(f"[settings] ✗ Failed to read /run/secrets/{secret_name}: {e}")

    # Priority 2: Fallback to environment variable
    if env_var:
        secret_value = os.getenv(env_var)
        if secret_value:
            return secret_value

    return None


def _env_bool(var_name: str, default: bool) -> bool:
    return os.environ.get(var_name, str(default)).strip().lower() in {"1", "true", "yes"}


def _env_int(var_name: str, default: int) -> int:
    raw = os.environ.get(var_name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise InvalidConfig(f"Environment variable {var_name} must be an integer, got {raw!r}") from exc


def _parse_multi(raw: str) -> Union[bool, list[str]]:
    """``true``/``false`` or a comma-separated list of method names."""
    value = raw.strip().lower()
    if value in {"", "false", "0", "no"}:
        return False
    if value in {"true", "1", "yes"}:
        return True
    return [method.strip() for method in value.split(",") if method.strip()]


@dataclass
class AppConfig:
    """Application configuration container."""
    # Auth0 Management API
    auth0_domain: str = ""
    auth0_client_id: str = ""
    auth0_client_secret: str = ""
    auth0_audience: Optional[str] = None
    request_timeout: int = 10

    # Pagination (None when disabled)
    paginate: Optional[dict[str, int]] = field(default_factory=lambda: {"default": 10, "max": 50})

    # Users service
    users_multi: Union[bool, list[str]] = False
    bulk_max_workers: int = 10

    # Password policy
    password_min_length: int = 10
    password_max_length: int = 128
    password_min_phrase_length: int = 20
    password_min_optional_tests: int = 4
    password_allow_passphrases: bool = True

    @property
    def auth0_options(self) -> dict[str, Optional[str]]:
        """Credentials in the shape expected by ``init_app`` (``AUTH0_OPTIONS``)."""
        return {
            "domain": self.auth0_domain,
            "client_id": self.auth0_client_id,
            "client_secret": self.auth0_client_secret,
            "audience": self.auth0_audience,
        }

    @property
    def password_policy_options(self) -> dict[str, Union[int, bool]]:
        return {
            "min_length": self.password_min_length,
            "max_length": self.password_max_length,
            "min_phrase_length": self.password_min_phrase_length,
            "min_optional_tests": self.password_min_optional_tests,
            "allow_passphrases": self.password_allow_passphrases,
        }


def load_settings() -> AppConfig:
    """Load application settings from environment and /run/secrets.

    Raises:
        InvalidConfig: If a numeric variable is malformed or the pagination
            default is greater than its max
    """
    auth0_client_secret = _load_secret_from_file("auth0_client_secret", "AUTH0_CLIENT_SECRET") or ""

    # Pagination
    if _env_bool("PAGINATE_DISABLED", False):
        paginate = None
    else:
        paginate = {
            "default": _env_int("PAGINATE_DEFAULT", 10),
            "max": _env_int("PAGINATE_MAX", 50),
        }
        if paginate["default"] > paginate["max"]:
            raise InvalidConfig("Max results per page should not be greater than default.", paginate)

    config = AppConfig(
        auth0_domain=os.environ.get("AUTH0_DOMAIN", "").strip(),
        auth0_client_id=os.environ.get("AUTH0_CLIENT_ID", "").strip(),
        auth0_client_secret=auth0_client_secret,
        auth0_audience=os.environ.get("AUTH0_AUDIENCE") or None,
        request_timeout=_env_int("REQUEST_TIMEOUT", 10),
        paginate=paginate,
        users_multi=_parse_multi(os.environ.get("USERS_MULTI", "false")),
        bulk_max_workers=_env_int("BULK_MAX_WORKERS", 10),
        password_min_length=_env_int("PASSWORD_MIN_LENGTH", 10),
        password_max_length=_env_int("PASSWORD_MAX_LENGTH", 128),
        password_min_phrase_length=_env_int("PASSWORD_MIN_PHRASE_LENGTH", 20),
        password_min_optional_tests=_env_int("PASSWORD_MIN_OPTIONAL_TESTS", 4),
        password_allow_passphrases=_env_bool("PASSWORD_ALLOW_PASSPHRASES", True),
    )

    print(
        f"[settings] domain={config.auth0_domain or 'UNSET'}; client_id={config.auth0_client_id or 'UNSET'}; "
        f"secret={'***' if config.auth0_client_secret else 'EMPTY'}; paginate={config.paginate}"
    )
    return config
