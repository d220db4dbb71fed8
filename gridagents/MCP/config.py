from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

DEFAULT_HOST = "151.216.74.213"
DEFAULT_PORT = 4000
DEFAULT_USERNAME = "MASTER CONTROL PROGRAM"
DEFAULT_GREETING = "You shouldn't have come back, Flynn."
USERNAME_FILE = "./username"
PASSWORD_FILE = "./password"

PathLike = Union[str, Path]


class ConfigError(RuntimeError):
    """Raised when the credentials cannot be loaded."""


@dataclass
class ClientConfig:
    username: str
    password: str
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    greeting: Optional[str] = DEFAULT_GREETING
    verbose: bool = True


def read_username(path: PathLike = USERNAME_FILE) -> str:
    """Username from ``path``, or the built-in default when it cannot be read."""
    try:
        username = Path(path).read_text(encoding="utf-8").strip()
    except OSError:
        return DEFAULT_USERNAME
    return username or DEFAULT_USERNAME


def read_password(path: PathLike = PASSWORD_FILE) -> str:
    try:
        return Path(path).read_text(encoding="utf-8").strip()
    except OSError as e:
        raise ConfigError(f"Cannot read password from file: \"{path}\" ({e})") from e


def load_config(
    username_file: PathLike = USERNAME_FILE,
    password_file: PathLike = PASSWORD_FILE,
    username: Optional[str] = None,
    password: Optional[str] = None,
    **overrides,
) -> ClientConfig:
    """Build the client settings; explicit values win over the files."""
    if username is None:
        username = read_username(username_file)
    if password is None:
        password = read_password(password_file)
    return ClientConfig(username=username, password=password, **overrides)
