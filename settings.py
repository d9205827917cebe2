import logging
import os
from dataclasses import dataclass

logger = logging.getLogger(__name__)

SERIALIZED = "serialized"
UNSERIALIZED = "unserialized"
WRITE_MODES = (UNSERIALIZED, SERIALIZED)


@dataclass(frozen=True)
class Settings:
    todos_file: str = os.path.join("data", "todos.json")
    event_log_file: str = os.path.join("data", "logs.txt")
    write_mode: str = UNSERIALIZED
    host: str = "127.0.0.1"
    port: int = 3000
    log_level: str = "INFO"


def load_env_from_dotenv(dotenv_path: str = ".env") -> None:
    """
    Seed os.environ from a .env file. Lines look like KEY=value,
    KEY="value with spaces" or export KEY=value.
    Variables that are already set win over the file.
    """
    if not os.path.isfile(dotenv_path):
        return
    try:
        with open(dotenv_path, "r", encoding="utf-8") as f:
            lines = f.read().splitlines()
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Ignoring unreadable env file %s: %s", dotenv_path, e)
        return

    for raw_line in lines:
        line = raw_line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        if line.startswith("export "):
            line = line[len("export "):].lstrip()
        key, val = line.split("=", 1)
        key = key.strip()
        val = val.strip()
        if len(val) >= 2 and val[0] == val[-1] and val[0] in ("'", '"'):
            val = val[1:-1]
        if key:
            os.environ.setdefault(key, val)


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("Invalid %s=%r, using %s", name, raw, default)
        return default


def load_settings(load_dotenv: bool = True) -> Settings:
    if load_dotenv:
        load_env_from_dotenv(".env.local")
        load_env_from_dotenv(".env")

    defaults = Settings()
    write_mode = os.getenv("TODOS_WRITE_MODE", defaults.write_mode).strip().lower()
    if write_mode not in WRITE_MODES:
        logger.warning("Unknown TODOS_WRITE_MODE=%r, using %s", write_mode, defaults.write_mode)
        write_mode = defaults.write_mode

    return Settings(
        todos_file=os.getenv("TODOS_FILE", defaults.todos_file),
        event_log_file=os.getenv("TODOS_EVENT_LOG", defaults.event_log_file),
        write_mode=write_mode,
        host=os.getenv("TODOS_HOST", defaults.host),
        port=_int_env("TODOS_PORT", defaults.port),
        log_level=os.getenv("TODOS_LOG_LEVEL", defaults.log_level),
    )
