from __future__ import annotations

import dataclasses
import os
import tomllib
from pathlib import Path
from typing import Optional

_home_env = os.getenv("PAGECHAT_HOME", "")
APP_DIR = Path(_home_env).expanduser() if _home_env else Path.home() / ".pagechat"
CONFIG_FILE = APP_DIR / "config.toml"
LOG_DIR = APP_DIR / "logs"

MSG_MAX = 16_384          # bytes per frame
LOGIN_TIMEOUT_S = 10
INPUT_POLL_S = 0.1
HOME_PAGE_NAME = "pagechat"
GROUP_PREFIX = "#"

WELCOME_BANNER = [
    "-----------------------------------",
    "Welcome to pagechat!",
    "-----------------------------------",
    "",
]


@dataclasses.dataclass
class Config:
    user: str
    user_option_2: str
    password: str
    server_address: str  # host:port


def load_config(path: Optional[Path] = None) -> Config:
    """Read the TOML config file; ``PAGECHAT_SERVER`` overrides the address."""
    path = Path(path or CONFIG_FILE).expanduser()
    with open(path, "rb") as handle:
        data = tomllib.load(handle)
    try:
        config = Config(**data)
    except TypeError as e:
        raise ValueError(
            f"Config schema mismatch in {path}: {e}. "
            "Expected keys: user, user_option_2, password, server_address."
        ) from e
    server_env = os.getenv("PAGECHAT_SERVER", "")
    if server_env:
        config.server_address = server_env
    return config
