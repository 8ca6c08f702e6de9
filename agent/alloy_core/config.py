"""
Paths, logging setup, config load/save, safe_print.
"""

import os
import json
import sys
import logging
from pathlib import Path

from .errors import ConfigError


# ─── Paths ───────────────────────────────────────────────────────
# Fixed per-machine location regardless of where the exe runs from.
_FOLDER_NAME = "AlloyAttachmentAgent"

if sys.platform == "win32":
    BASE_DIR = Path(os.environ.get("PROGRAMDATA", "C:\\ProgramData")) / _FOLDER_NAME
else:
    BASE_DIR = Path(__file__).parent.parent

CONFIG_FILE = BASE_DIR / "config.json"
LOG_FILE = BASE_DIR / "alloy_agent.log"

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"
MAX_LOG_BYTES = 1_000_000

# Config keys that may be overridden from the environment.
ENV_OVERRIDES = {
    "baseUrl": "ALLOY_BASE_URL",
    "clientId": "ALLOY_CLIENT_ID",
    "clientSecret": "ALLOY_CLIENT_SECRET",
    "maxTries": "ALLOY_MAX_TRIES",
    "auditIdFile": "ALLOY_AUDIT_ID_FILE",
}

# Never written back to disk by save_config().
SECRET_KEYS = ("clientSecret",)

log = logging.getLogger("alloy")


# ─── Safe print (no crash when --noconsole) ──────────────────────

def safe_print(*args, **kwargs):
    try:
        print(*args, **kwargs)
    except (OSError, ValueError, AttributeError):
        pass


# ─── Logging ─────────────────────────────────────────────────────

def setup_logging(log_file=LOG_FILE, verbose=False):
    """File + console logging on the "alloy" logger. Safe to call twice."""
    level = logging.DEBUG if verbose else logging.INFO
    log.setLevel(level)
    if log.handlers:
        return log

    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATEFMT)

    try:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        if log_file.exists() and log_file.stat().st_size > MAX_LOG_BYTES:
            log_file.write_text("")
        file_handler = logging.FileHandler(str(log_file), encoding="utf-8")
        file_handler.setFormatter(formatter)
        log.addHandler(file_handler)
    except OSError as e:
        safe_print(f"Log file unavailable ({e}); logging to console only")

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    log.addHandler(console_handler)
    return log


# ─── Config Management ──────────────────────────────────────────

def load_config(path=CONFIG_FILE):
    """Load config from disk. Returns dict ({} when the file is absent)."""
    path = Path(path)
    if not path.exists():
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (json.JSONDecodeError, OSError) as e:
        raise ConfigError(f"Cannot read config {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"Config {path} must hold a JSON object")
    return data


def save_config(config, path=CONFIG_FILE):
    """Save config dict to disk, leaving secrets out."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    data = {k: v for k, v in config.items() if k not in SECRET_KEYS and v is not None}
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)
    log.info("Config saved to %s", path)


def apply_env_overrides(config, environ=None):
    """Return a copy of config with ALLOY_* environment variables applied."""
    environ = os.environ if environ is None else environ
    merged = dict(config)
    for key, env_name in ENV_OVERRIDES.items():
        value = environ.get(env_name)
        if value:
            merged[key] = value
    return merged


def parse_max_tries(value):
    """Coerce a maxTries setting to int. None/blank → unlimited (0)."""
    if value is None or value == "":
        return 0
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"maxTries must be an integer, got {value!r}") from e


def parse_timeout(value):
    """Coerce requestTimeoutSec to a positive float. None/blank → no timeout."""
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise ConfigError(f"requestTimeoutSec must be a number of seconds, got {value!r}")
    try:
        timeout = float(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"requestTimeoutSec must be a number of seconds, got {value!r}") from e
    if timeout <= 0:
        raise ConfigError(f"requestTimeoutSec must be positive, got {value!r}")
    return timeout
