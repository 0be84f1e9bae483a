# /src/fanpress/config.py
# Runtime settings loaded from the environment (and an optional .env file)

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from dotenv import find_dotenv, load_dotenv

from .errors import ConfigError


DEFAULT_PORT = 3002
DEFAULT_WS_PATH = "/ws"
DEFAULT_QUEUE_SIZE = 256


@dataclass
class Settings:
    """Service settings. Every field has a default suitable for local use."""
    host: str = "0.0.0.0"
    port: int = DEFAULT_PORT
    data_file: Path = Path("./data.json")
    static_dir: Optional[Path] = None
    ws_path: str = DEFAULT_WS_PATH
    session_queue_size: int = DEFAULT_QUEUE_SIZE
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, dotenv: bool = True) -> "Settings":
        """Build settings from environment variables.

        Args:
            environ: Mapping to read from (defaults to os.environ)
            dotenv: Load a .env file into os.environ first

        Raises:
            ConfigError: If a numeric variable is not an integer
        """
        if environ is None:
            if dotenv:
                load_dotenv(find_dotenv(usecwd=True))
            environ = os.environ

        static_dir = environ.get("FANPRESS_STATIC_DIR")
        ws_path = environ.get("FANPRESS_WS_PATH", DEFAULT_WS_PATH)
        if not ws_path.startswith("/"):
            ws_path = "/" + ws_path

        return cls(
            host=environ.get("HOST", "0.0.0.0"),
            port=_int_setting(environ, "PORT", DEFAULT_PORT),
            data_file=Path(environ.get("FANPRESS_DATA_FILE", "./data.json")),
            static_dir=Path(static_dir) if static_dir else None,
            ws_path=ws_path,
            session_queue_size=_int_setting(environ, "FANPRESS_SESSION_QUEUE_SIZE", DEFAULT_QUEUE_SIZE),
            log_level=environ.get("FANPRESS_LOG_LEVEL", "INFO").upper(),
        )


def _int_setting(environ: Mapping[str, str], name: str, default: int) -> int:
    raw = environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from None
    if value <= 0:
        raise ConfigError(f"{name} must be positive, got {value}")
    return value
