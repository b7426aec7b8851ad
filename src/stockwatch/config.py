"""
Configuration for stockwatch.

Settings are resolved in three layers: built-in defaults, an optional TOML
file (``~/.stockwatch/config.toml``), then environment variables.

Example config.toml::

    [api]
    key = "YOUR_KEY"
    timeout = 5

    [cache]
    path = "~/.stockwatch/cache.db"
    max_size = 50
    default_ttl = 900

    [cache.ttl]
    TOP_GAINERS_LOSERS = 300
"""

import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Optional

from stockwatch.core.exceptions import ConfigError
from stockwatch.core.models import Endpoint

# Handle tomli import for Python 3.10 vs 3.11+
if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

CONFIG_DIR = Path.home() / ".stockwatch"
DEFAULT_CONFIG_PATH = CONFIG_DIR / "config.toml"
DEFAULT_CACHE_PATH = CONFIG_DIR / "cache.db"

DEFAULT_BASE_URL = "https://www.alphavantage.co"
DEFAULT_API_KEY = "demo"

ENV_API_KEY = "ALPHAVANTAGE_API_KEY"
ENV_CACHE_PATH = "STOCKWATCH_CACHE_PATH"
ENV_CACHE_MAX_SIZE = "STOCKWATCH_CACHE_MAX_SIZE"


def default_ttls() -> dict[str, float]:
    """Per-endpoint cache durations in seconds."""
    return {
        # Movers change constantly during market hours
        Endpoint.TOP_GAINERS_LOSERS.value: 5 * 60,
        # Fundamentals are relatively static
        Endpoint.COMPANY_OVERVIEW.value: 60 * 60,
        Endpoint.SYMBOL_SEARCH.value: 30 * 60,
    }


@dataclass
class CacheConfig:
    """Configuration for the expiring cache."""

    prefix: str = "@stockwatch_cache_"
    index_key: str = "@stockwatch_cache_index"
    max_size: int = 50
    default_ttl: float = 15 * 60
    ttls: dict[str, float] = field(default_factory=default_ttls)

    def ttl_for(self, endpoint: str) -> float:
        """Return the TTL for ``endpoint``, falling back to the default."""
        return self.ttls.get(str(endpoint), self.default_ttl)


@dataclass
class Settings:
    """Runtime settings for the client and its cache."""

    api_key: str = DEFAULT_API_KEY
    base_url: str = DEFAULT_BASE_URL
    timeout: int = 5
    cache_path: Path = DEFAULT_CACHE_PATH
    cache: CacheConfig = field(default_factory=CacheConfig)


def _positive_number(source: str, name: str, value: Any, cast: type = float) -> Any:
    try:
        number = cast(value)
    except (TypeError, ValueError):
        raise ConfigError(source, f"{name} must be a number, got {value!r}")
    if number <= 0:
        raise ConfigError(source, f"{name} must be positive, got {value!r}")
    return number


def _read_toml(path: Path) -> dict[str, Any]:
    try:
        return tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(str(path), str(e))
    except OSError as e:
        raise ConfigError(str(path), str(e))


def _apply_file(settings: Settings, data: dict[str, Any], source: str) -> None:
    api = data.get("api", {})
    cache = data.get("cache", {})
    if not isinstance(api, dict) or not isinstance(cache, dict):
        raise ConfigError(source, "[api] and [cache] must be tables")

    if "key" in api:
        settings.api_key = str(api["key"])
    if "base_url" in api:
        settings.base_url = str(api["base_url"]).rstrip("/")
    if "timeout" in api:
        settings.timeout = _positive_number(source, "api.timeout", api["timeout"], int)

    if "path" in cache:
        settings.cache_path = Path(str(cache["path"])).expanduser()
    if "max_size" in cache:
        settings.cache.max_size = _positive_number(
            source, "cache.max_size", cache["max_size"], int
        )
    if "default_ttl" in cache:
        settings.cache.default_ttl = _positive_number(
            source, "cache.default_ttl", cache["default_ttl"]
        )

    ttls = cache.get("ttl", {})
    if not isinstance(ttls, dict):
        raise ConfigError(source, "[cache.ttl] must be a table")
    for endpoint, seconds in ttls.items():
        settings.cache.ttls[str(endpoint)] = _positive_number(
            source, f"cache.ttl.{endpoint}", seconds
        )


def load_settings(
    path: Optional[Path] = None,
    env: Optional[Mapping[str, str]] = None,
) -> Settings:
    """Load settings from defaults, a TOML file and the environment.

    Args:
        path: Config file to read. Defaults to ~/.stockwatch/config.toml,
            which may be absent; an explicit path must exist.
        env: Environment mapping. Defaults to ``os.environ``.

    Returns:
        Resolved Settings.

    Raises:
        ConfigError: If the file or a value is invalid.
    """
    if env is None:
        env = os.environ

    settings = Settings()

    if path is not None:
        if not path.exists():
            raise ConfigError(str(path), "File not found")
        _apply_file(settings, _read_toml(path), str(path))
    elif DEFAULT_CONFIG_PATH.exists():
        _apply_file(settings, _read_toml(DEFAULT_CONFIG_PATH), str(DEFAULT_CONFIG_PATH))

    if env.get(ENV_API_KEY):
        settings.api_key = env[ENV_API_KEY]
    if env.get(ENV_CACHE_PATH):
        settings.cache_path = Path(env[ENV_CACHE_PATH]).expanduser()
    if env.get(ENV_CACHE_MAX_SIZE):
        settings.cache.max_size = _positive_number(
            ENV_CACHE_MAX_SIZE, ENV_CACHE_MAX_SIZE, env[ENV_CACHE_MAX_SIZE], int
        )

    return settings
