from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path

import streamlit as st

CONFIG_FILE_NAME = "settings.json"
ENV_DATA_DIR = "DAYPASS_DATA_DIR"
ENV_CURRENCY = "DAYPASS_CURRENCY"
ENV_ALLOW_SIGNUP = "DAYPASS_ALLOW_SIGNUP"
ENV_LOG_LEVEL = "DAYPASS_LOG_LEVEL"

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass(frozen=True)
class Settings:
    data_dir: Path
    db_path: Path
    currency: str = "R$"
    allow_signup: bool = True
    log_level: str = "INFO"


def _default_data_dir() -> Path:
    return Path.home() / ".daypass"


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _load_persisted_settings(data_dir: Path) -> dict:
    cfg = data_dir / CONFIG_FILE_NAME
    if cfg.exists():
        try:
            return json.loads(cfg.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            logger.warning("Ignoring unreadable %s", cfg)
            return {}
    return {}


def persist_data_dir(data_dir_str: str) -> None:
    data_dir = Path(data_dir_str).expanduser().resolve()
    data_dir.mkdir(parents=True, exist_ok=True)

    cfg = data_dir / CONFIG_FILE_NAME
    payload = {"data_dir": str(data_dir)}
    cfg.write_text(json.dumps(payload, indent=2), encoding="utf-8")

    # Update session for immediate effect
    st.session_state["daypass_data_dir"] = str(data_dir)


def configure_logging(level: str | None = None) -> None:
    """Install a root handler once; later calls only adjust the level."""
    level = (level or os.getenv(ENV_LOG_LEVEL) or "INFO").upper()
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(format=LOG_FORMAT)
    logging.getLogger("daypass").setLevel(level)


@st.cache_resource
def get_settings() -> Settings:
    # Priority order:
    # 1) Session state (set via Data Management page)
    # 2) Environment variable
    # 3) Persisted settings in default folder
    # 4) Default folder
    if "daypass_data_dir" in st.session_state:
        data_dir = Path(st.session_state["daypass_data_dir"]).expanduser().resolve()
    elif os.getenv(ENV_DATA_DIR):
        data_dir = Path(os.getenv(ENV_DATA_DIR, "")).expanduser().resolve()
    else:
        default_dir = _default_data_dir()
        persisted = _load_persisted_settings(default_dir)
        data_dir = Path(persisted.get("data_dir", default_dir)).expanduser().resolve()

    data_dir.mkdir(parents=True, exist_ok=True)
    db_path = data_dir / "daypass.db"
    return Settings(
        data_dir=data_dir,
        db_path=db_path,
        currency=os.getenv(ENV_CURRENCY, "R$"),
        allow_signup=_env_flag(ENV_ALLOW_SIGNUP, True),
        log_level=(os.getenv(ENV_LOG_LEVEL) or "INFO").upper(),
    )
