"""
Runtime configuration.

Settings are read once per process from environment variables, after loading a
``.env`` file from the working directory when one exists. API credentials are
grouped per provider; an adapter whose provider has no credentials is disabled
rather than failing the resolution.
"""

import os
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Dict, Mapping, Optional, Tuple

from dotenv import load_dotenv

DEFAULT_AVATAR_PROXY_URL = "http://overtar.appspot.com/"
DEFAULT_USER_AGENT = "profilefinder/0.3 (+https://pypi.org/project/profilefinder/)"

# provider -> {credential field: environment variable}
CREDENTIAL_ENV_VARS: Dict[str, Dict[str, str]] = {
    "flickr": {"key": "FLICKR_API_KEY"},
    "yahoo": {"key": "YAHOO_APP_ID"},
    "43things": {"key": "FORTYTHREETHINGS_API_KEY"},
    "vimeo": {"key": "VIMEO_API_KEY"},
    "amazon": {"key": "AMAZON_ACCESS_KEY", "secret": "AMAZON_SECRET_KEY"},
    "aim": {"key": "AIM_API_KEY"},
    "rapleaf": {"key": "RAPLEAF_API_KEY"},
    "dandyid": {"key": "DANDYID_API_KEY"},
}


def load_env() -> None:
    """Load .env from the working directory if present."""
    env_path = Path.cwd() / ".env"
    if env_path.exists():
        load_dotenv(dotenv_path=env_path)


@dataclass(frozen=True)
class Settings:
    log_level: str = "INFO"
    log_dir: Optional[str] = None

    http_timeout_seconds: float = 15.0
    http_max_retries: int = 0
    user_agent: str = DEFAULT_USER_AGENT

    max_workers: int = 8
    adapter_timeout_seconds: float = 20.0
    resolution_timeout_seconds: Optional[float] = None

    avatar_proxy_url: str = DEFAULT_AVATAR_PROXY_URL
    db_path: str = "data/profiles.db"

    # Legacy local lookup; disabled unless a command is configured
    skype_command: Tuple[str, ...] = ()

    credentials: Mapping[str, Mapping[str, str]] = field(default_factory=dict)

    def credentials_for(self, provider: Optional[str]) -> Mapping[str, str]:
        if not provider:
            return {}
        return self.credentials.get(provider, {})


def _float_env(name: str, default: Optional[float]) -> Optional[float]:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}")


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")


def read_credentials(environ: Optional[Mapping[str, str]] = None) -> Dict[str, Dict[str, str]]:
    """Collect non-empty provider credentials from the environment."""
    environ = os.environ if environ is None else environ
    credentials: Dict[str, Dict[str, str]] = {}
    for provider, env_vars in CREDENTIAL_ENV_VARS.items():
        values = {}
        for name, var in env_vars.items():
            value = (environ.get(var) or "").strip()
            if value:
                values[name] = value
        if values:
            credentials[provider] = values
    return credentials


def settings_from_env() -> Settings:
    skype = os.getenv("SKYPE_COMMAND", "").split()
    return Settings(
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        log_dir=os.getenv("LOG_DIR") or None,
        http_timeout_seconds=_float_env("HTTP_TIMEOUT_SECONDS", 15.0),
        http_max_retries=_int_env("HTTP_MAX_RETRIES", 0),
        user_agent=os.getenv("USER_AGENT", DEFAULT_USER_AGENT),
        max_workers=_int_env("MAX_WORKERS", 8),
        adapter_timeout_seconds=_float_env("ADAPTER_TIMEOUT_SECONDS", 20.0),
        resolution_timeout_seconds=_float_env("RESOLUTION_TIMEOUT_SECONDS", None),
        avatar_proxy_url=os.getenv("AVATAR_PROXY_URL", DEFAULT_AVATAR_PROXY_URL),
        db_path=os.getenv("DB_PATH", "data/profiles.db"),
        skype_command=tuple(skype),
        credentials=read_credentials(),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    load_env()
    return settings_from_env()
