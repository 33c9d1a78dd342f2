import getpass
import json
import os
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from soundbored.errors import ConfigError
from soundbored.logger import get_logger

API_SUFFIX = "/api"

CONFIG_DIR = Path.home() / ".config" / "soundbored"
DEFAULT_CONFIG_PATH = CONFIG_DIR / "config.json"

# Checked in order; the first one set wins.
BASE_URL_ENV_VARS = ("SOUNDBORED_API_BASE_URL", "SOUNDBORED_BASE_URL")
TOKEN_ENV_VAR = "SOUNDBORED_TOKEN"

logger = get_logger("config")


def normalize_api_base_url(url: str) -> str:
    """Return the API base for a server URL, e.g. ``https://x/`` -> ``https://x/api``."""
    s = (url or "").strip().rstrip("/")
    if s.endswith(API_SUFFIX):
        return s
    return s + API_SUFFIX


def api_base_to_base_url(api_base_url: str) -> str:
    s = (api_base_url or "").strip().rstrip("/")
    if s.endswith(API_SUFFIX):
        return s[: -len(API_SUFFIX)]
    return s


def redact_token(token: str) -> str:
    if len(token) <= 8:
        return "*" * len(token)
    return token[:4] + "*" * (len(token) - 8) + token[-4:]


@dataclass(frozen=True)
class Config:
    api_base_url: str
    token: str

    @classmethod
    def from_dict(cls, data: Any) -> "Config":
        if not isinstance(data, dict):
            raise ConfigError("config must be a JSON object")
        api_base_url = data.get("apiBaseUrl")
        token = data.get("token")
        if not isinstance(api_base_url, str) or not api_base_url:
            raise ConfigError("config is missing 'apiBaseUrl'")
        if not isinstance(token, str) or not token:
            raise ConfigError("config is missing 'token'")
        return cls(api_base_url=normalize_api_base_url(api_base_url), token=token)

    @classmethod
    def create(cls, base_url: str, token: str) -> "Config":
        return cls(api_base_url=normalize_api_base_url(base_url), token=token.strip())

    def to_dict(self) -> dict[str, str]:
        return {"apiBaseUrl": self.api_base_url, "token": self.token}


def _is_url(value: str) -> bool:
    return value.startswith("http")


def prompt_for_config(
    default: Config | None = None,
    input_fn: Callable[[str], str] = input,
    secret_fn: Callable[[str], str] = getpass.getpass,
) -> Config:
    """Ask the user for a base URL and token, re-asking until both are valid."""
    default_url = api_base_to_base_url(default.api_base_url) if default else ""
    default_token = default.token if default else ""

    if default is None:
        print("First-time setup: configure Soundbored API access")

    try:
        while True:
            label = f"Base URL [{default_url}]: " if default_url else "Base URL: "
            base_url = input_fn(label).strip() or default_url
            if _is_url(base_url):
                break
            print("Enter a valid URL")

        while True:
            label = "API token [keep current]: " if default_token else "API token: "
            token = secret_fn(label).strip() or default_token
            if token:
                break
            print("Token is required")
    except (EOFError, KeyboardInterrupt) as e:
        raise ConfigError("configuration prompt was cancelled") from e

    return Config.create(base_url, token)


class ConfigStore:
    """Reads and writes the single per-user config record."""

    def __init__(self, path: Path | str = DEFAULT_CONFIG_PATH) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> Config | None:
        if not self._path.exists():
            return None
        try:
            with open(self._path, encoding="utf-8") as f:
                data = json.load(f)
            return Config.from_dict(data)
        except (OSError, ValueError, ConfigError) as e:
            logger.warning(f"Ignoring unusable config at {self._path}: {e}")
            return None

    def save(self, config: Config) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        with open(self._path, "w", encoding="utf-8") as f:
            json.dump(config.to_dict(), f, indent=2)
        logger.info(f"Saved config to {self._path}")

    def ensure(
        self,
        environ: Mapping[str, str] | None = None,
        ask: Callable[[], Config] = prompt_for_config,
    ) -> Config:
        """Persisted config, else one built from the environment, else prompt."""
        existing = self.load()
        if existing is not None:
            return existing

        env = os.environ if environ is None else environ
        env_base = next((env[k] for k in BASE_URL_ENV_VARS if env.get(k)), None)
        env_token = (env.get(TOKEN_ENV_VAR) or "").strip()
        if env_base and env_token:
            logger.info("Creating config from environment variables")
            config = Config.create(env_base, env_token)
        else:
            config = ask()

        self.save(config)
        return config
