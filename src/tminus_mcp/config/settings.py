from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Dict, Optional, Tuple

from dotenv import load_dotenv
from platformdirs import user_data_dir

load_dotenv()

APP_NAME = "tminus-mcp"
APP_AUTHOR = "TMinus"
DATA_DIR = Path(user_data_dir(APP_NAME, APP_AUTHOR))


@dataclass(frozen=True)
class ServerSettings:
    host: str = "127.0.0.1"
    port: int = 8787
    environment: str = "development"
    allowed_origins: Tuple[str, ...] = ("*",)

    @property
    def is_production(self) -> bool:
        return self.environment == "production"


@dataclass(frozen=True)
class StorageSettings:
    database_path: Path = DATA_DIR / "tminus.db"


@dataclass(frozen=True)
class SupabaseSettings:
    url: Optional[str] = None
    anon_key: Optional[str] = None

    @property
    def is_configured(self) -> bool:
        return bool(self.url and self.anon_key)


@dataclass(frozen=True)
class BindingSettings:
    usergraph_url: Optional[str] = None
    commitments_url: Optional[str] = None
    token: Optional[str] = None
    timeout_seconds: float = 10.0


@dataclass(frozen=True)
class LoggingSettings:
    level: str = "INFO"
    directory: Path = DATA_DIR / "logs"
    logger_levels: Tuple[Tuple[str, str], ...] = (("httpx", "WARNING"),)

    @property
    def log_file(self) -> Path:
        return self.directory / "tminus_mcp.log"


@dataclass(frozen=True)
class AppSettings:
    server: ServerSettings = field(default_factory=ServerSettings)
    storage: StorageSettings = field(default_factory=StorageSettings)
    supabase: SupabaseSettings = field(default_factory=SupabaseSettings)
    bindings: BindingSettings = field(default_factory=BindingSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)


def _int_from_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _float_from_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _origins_from_env(name: str) -> Tuple[str, ...]:
    raw = os.getenv(name, "*")
    origins = tuple(origin.strip() for origin in raw.split(",") if origin.strip())
    return origins or ("*",)


def _path_from_env(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    return Path(raw).expanduser() if raw else default


def _logger_levels_from_env(name: str, default: Tuple[Tuple[str, str], ...]) -> Tuple[Tuple[str, str], ...]:
    """Parse ``logger=LEVEL`` pairs, e.g. ``tminus_mcp.api.dispatch=DEBUG,httpx=WARNING``."""

    raw = os.getenv(name)
    if not raw:
        return default
    levels: Dict[str, str] = dict(default)
    for item in raw.split(","):
        logger_name, sep, level = item.partition("=")
        if not sep or not logger_name.strip() or not level.strip():
            continue
        levels[logger_name.strip()] = level.strip().upper()
    return tuple(levels.items())


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    server = ServerSettings(
        host=os.getenv("TMINUS_HOST", "127.0.0.1"),
        port=_int_from_env("TMINUS_PORT", 8787),
        environment=os.getenv("TMINUS_ENVIRONMENT", "development"),
        allowed_origins=_origins_from_env("TMINUS_ALLOWED_ORIGINS"),
    )

    storage = StorageSettings(
        database_path=_path_from_env("TMINUS_DATABASE_PATH", DATA_DIR / "tminus.db"),
    )

    supabase = SupabaseSettings(
        url=os.getenv("SUPABASE_URL"),
        anon_key=os.getenv("SUPABASE_ANON_KEY"),
    )

    bindings = BindingSettings(
        usergraph_url=os.getenv("TMINUS_USERGRAPH_URL"),
        commitments_url=os.getenv("TMINUS_COMMITMENTS_URL"),
        token=os.getenv("TMINUS_BINDING_TOKEN"),
        timeout_seconds=_float_from_env("TMINUS_BINDING_TIMEOUT", 10.0),
    )

    logging_settings = LoggingSettings(
        level=os.getenv("TMINUS_LOG_LEVEL", "INFO"),
        directory=_path_from_env("TMINUS_LOG_DIR", DATA_DIR / "logs"),
        logger_levels=_logger_levels_from_env("TMINUS_LOG_LEVELS", LoggingSettings.logger_levels),
    )

    return AppSettings(
        server=server,
        storage=storage,
        supabase=supabase,
        bindings=bindings,
        logging=logging_settings,
    )
