"""Configuration management for tileview.

Settings are loaded with Dynaconf from multiple locations in order of
increasing priority:

1. Global settings (/etc/tileview/)
2. User settings (~/.config/tileview/)
3. Current directory settings (./)
4. Environment variable specified file (TILEVIEW_SETTINGS_FILE_FOR_DYNACONF)

Any key can also be overridden with a ``TILEVIEW_`` prefixed environment
variable, e.g. ``TILEVIEW_RELAY_URL``.

Attributes
----------
USER_DIR : pathlib.Path
    Path to user configuration directory.
GLOB_DIR : pathlib.Path
    Path to global configuration directory.
CURR_DIR : pathlib.Path
    Path to current working directory.
settings : Dynaconf
    The Dynaconf settings object with loaded configuration.
"""
import os
import pathlib

from dynaconf import Dynaconf

USER_DIR = pathlib.Path("~/.config/tileview").expanduser()
GLOB_DIR = pathlib.Path("/etc/tileview/")
CURR_DIR = pathlib.Path("./").absolute()
settings_files = [
    GLOB_DIR / "settings.toml",
    GLOB_DIR / ".secrets.toml",
    USER_DIR / "settings.toml",
    USER_DIR / ".secrets.toml",
    CURR_DIR / "settings.toml",
    CURR_DIR / ".secrets.toml"
    ]
extra_file = os.getenv("TILEVIEW_SETTINGS_FILE_FOR_DYNACONF")
if extra_file:
    settings_files.append(pathlib.Path(extra_file).absolute())

# Fallbacks used when no settings file defines the key
DEFAULT_RELAY_URL = "https://dcw.kijiharu3112.workers.dev/"
DEFAULT_TILE_SIZE = 256
DEFAULT_REQUEST_TIMEOUT = 30.0
DEFAULT_BACKEND = "XY"

settings = Dynaconf(
    merge_enabled = True,
    envvar_prefix="TILEVIEW",
    DEBUG_LEVEL_FOR_DYNACONF='DEBUG',
    settings_files=settings_files,
    environments=True,
    load_dotenv=True,
)


def change_env(new_env):
    """Change the active Dynaconf environment.

    Parameters
    ----------
    new_env : str
        The environment name to switch to (e.g., 'development', 'production').
    """
    settings.setenv(new_env)
    settings.reload()


def relay_url():
    """Return the cross-origin relay prefix, or an empty string to disable it."""
    return settings.get("relay_url", DEFAULT_RELAY_URL) or ""


def request_timeout():
    return float(settings.get("request_timeout", DEFAULT_REQUEST_TIMEOUT))


def tile_size_pair():
    size = settings.get("tile_size", DEFAULT_TILE_SIZE)
    if isinstance(size, (int, float)):
        return (int(size), int(size))
    return tuple(int(s) for s in size)
