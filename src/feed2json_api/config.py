"""Configuration loader for feed2json-api."""

import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml
from dotenv import load_dotenv

load_dotenv()

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/42.0.2311.135 Safari/537.36 Edge/12.246"
)
DEFAULT_ACCEPT = "text/html,application/xhtml+xml"

CONFIG_DIR = Path(__file__).resolve().parent / "configs"


@dataclass
class CacheConfig:
    dir: str = "cache"
    cache_conversion_errors: bool = True


@dataclass
class FetchConfig:
    timeout_seconds: float = 10.0
    user_agent: str = DEFAULT_USER_AGENT
    accept: str = DEFAULT_ACCEPT
    max_bytes: int = 10 * 1024 * 1024


@dataclass
class ServerConfig:
    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "info"
    static_dir: str | None = "static"


@dataclass
class APIConfig:
    cache: CacheConfig = field(default_factory=CacheConfig)
    fetch: FetchConfig = field(default_factory=FetchConfig)
    server: ServerConfig = field(default_factory=ServerConfig)

    @property
    def cache_path(self) -> Path:
        return Path(self.cache.dir)


def load_config(config_name: str | None = None) -> APIConfig:
    """Load configuration from a YAML file, applying environment overrides.

    Args:
        config_name: Name of config file (without .yaml extension). Falls back
            to FEED2JSON_CONFIG, then "prod".

    Returns:
        APIConfig instance

    Raises:
        FileNotFoundError: If the config file does not exist.
    """
    if config_name is None:
        config_name = os.getenv("FEED2JSON_CONFIG", "prod")

    config_path = CONFIG_DIR / f"{config_name}.yaml"
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path) as f:
        raw = yaml.safe_load(f) or {}

    cache_raw = raw.get("cache", {})
    cache_config = CacheConfig(
        dir=os.getenv("FEED2JSON_CACHE_DIR", cache_raw.get("dir", "cache")),
        cache_conversion_errors=cache_raw.get("cache_conversion_errors", True),
    )

    fetch_raw = raw.get("fetch", {})
    fetch_config = FetchConfig(
        timeout_seconds=float(
            os.getenv("FEED2JSON_FETCH_TIMEOUT", fetch_raw.get("timeout_seconds", 10))
        ),
        user_agent=fetch_raw.get("user_agent", DEFAULT_USER_AGENT),
        accept=fetch_raw.get("accept", DEFAULT_ACCEPT),
        max_bytes=int(fetch_raw.get("max_bytes", 10 * 1024 * 1024)),
    )

    server_raw = raw.get("server", {})
    server_config = ServerConfig(
        host=os.getenv("HOST", server_raw.get("host", "0.0.0.0")),
        port=int(os.getenv("PORT", server_raw.get("port", 3000))),
        log_level=server_raw.get("log_level", "info"),
        static_dir=server_raw.get("static_dir"),
    )

    return APIConfig(cache=cache_config, fetch=fetch_config, server=server_config)


# Global config instance (lazy loaded)
_config: APIConfig | None = None


def get_config() -> APIConfig:
    """Get the global config instance."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def set_config(config: APIConfig) -> None:
    """Set the global config instance (for testing)."""
    global _config
    _config = config


def reset_config() -> None:
    """Forget the global config, forcing a reload on next get_config()."""
    global _config
    _config = None
