import os
from dataclasses import dataclass

from dotenv import load_dotenv

from lochub.errors import ConfigurationError


@dataclass(frozen=True)
class Settings:
    db_url: str
    client_id: str
    client_secret: str
    app_slug: str = "tokeihub"
    workspace_root: str = "./repos"
    api_base: str = "https://api.github.com"
    web_base: str = "https://github.com"
    metadata_timeout: float = 8.0
    clone_timeout: int = 120
    exchange_timeout: float = 10.0
    state_ttl: int = 600
    host: str = "127.0.0.1"
    port: int = 8080
    log_level: str = "INFO"
    cors_origins: tuple = ("*",)


def _require(name: str) -> str:
    value = os.getenv(name, "").strip()
    if not value:
        raise ConfigurationError(f"{name} must be set (environment or .env)")
    return value


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}")


def _origins_env() -> tuple:
    # Comma-separated list; wildcard when unset
    origins_env = os.getenv("FRONTEND_ORIGIN", "").strip()
    if origins_env:
        return tuple(o.strip() for o in origins_env.split(",") if o.strip())
    return ("*",)


def load_settings(dotenv_path: str | None = None) -> Settings:
    """Read settings from a .env file (if present) and the process environment."""
    load_dotenv(dotenv_path)
    return Settings(
        db_url=_require("DB_URL"),
        client_id=_require("GH_CLIENT_ID"),
        client_secret=_require("GH_CLIENT_SECRET"),
        app_slug=os.getenv("GH_APP_SLUG", "tokeihub").strip() or "tokeihub",
        workspace_root=os.getenv("WORKSPACE_ROOT", "./repos").strip() or "./repos",
        clone_timeout=_int_env("CLONE_TIMEOUT", 120),
        state_ttl=_int_env("STATE_TTL_SECONDS", 600),
        host=os.getenv("HOST", "127.0.0.1").strip() or "127.0.0.1",
        port=_int_env("PORT", 8080),
        log_level=os.getenv("LOG_LEVEL", "INFO").strip() or "INFO",
        cors_origins=_origins_env(),
    )
