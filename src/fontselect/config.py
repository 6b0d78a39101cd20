# -*- coding: utf-8 -*-
"""
src/fontselect/config.py

Module for handling application configuration.

This module defines default settings for font selection, such as the word
budget used when scoring candidates and the directories holding the raw and
optimized font binaries. User-defined settings are loaded from a configuration
file (config.ini), which is created with default values on the first run.
"""

import configparser
import logging
import os
import platform
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

# --- Constants ---
APP_NAME = "FontSelect"
DEFAULT_CONFIG_FILENAME = "config.ini"
DEFAULT_WORD_BUDGET = 500
DEFAULT_WORKER_COUNT = 2
HOME_ENV_VAR = "FONTSELECT_HOME"


def get_app_dir() -> Path:
    """
    Gets the application's data directory in a cross-platform way.

    - $FONTSELECT_HOME, when set
    - Windows: %APPDATA%/FontSelect
    - macOS: ~/Library/Application Support/FontSelect
    - Linux: ~/.config/FontSelect

    Returns:
        Path: A Path object to the application's data directory.
    """
    override = os.environ.get(HOME_ENV_VAR)
    if override:
        app_dir = Path(override)
    elif platform.system() == "Windows":
        app_dir = Path.home() / "AppData" / "Roaming" / APP_NAME
    elif platform.system() == "Darwin":  # macOS
        app_dir = Path.home() / "Library" / "Application Support" / APP_NAME
    else:  # Linux and other Unix-like
        app_dir = Path.home() / ".config" / APP_NAME

    app_dir.mkdir(parents=True, exist_ok=True)
    return app_dir


class Config:
    """
    Manages application configuration by loading defaults and overriding
    them with settings from a user-specific config file.
    """

    def __init__(self, app_dir: Optional[Path] = None):
        self.parser = configparser.ConfigParser()
        self.app_dir = app_dir or get_app_dir()
        self.config_file_path = self.app_dir / DEFAULT_CONFIG_FILENAME

        self._load_defaults()
        self._load_from_file()

    def _load_defaults(self):
        """Sets the default configuration values in the parser object."""
        self.parser["Selection"] = {
            "word_budget": str(DEFAULT_WORD_BUDGET),
        }
        self.parser["Fonts"] = {
            "raw_dir": "fonts/raw",
            "opt_dir": "",
            "use_optimized": "False",
        }
        self.parser["Workers"] = {
            "count": str(DEFAULT_WORKER_COUNT),
        }
        self.parser["Logging"] = {
            "level": "INFO",
        }

    def _load_from_file(self):
        """
        Loads settings from the config.ini file, overriding defaults.
        If the file doesn't exist, it will be created with default values.
        """
        if not self.config_file_path.exists():
            self._save_defaults()
        else:
            self.parser.read(self.config_file_path)

    def _save_defaults(self):
        """Saves the current (default) configuration to the config file."""
        try:
            with open(self.config_file_path, 'w') as configfile:
                configfile.write(f"# {APP_NAME} Configuration File\n")
                configfile.write("# Relative font directories are resolved against this file's directory.\n\n")
                self.parser.write(configfile)
        except IOError as e:
            # Non-critical: the defaults are still usable in memory.
            logger.error(f"Could not write to config file at {self.config_file_path}: {e}")

    def _resolve_dir(self, value: str) -> Optional[Path]:
        if not value:
            return None
        path = Path(value).expanduser()
        if not path.is_absolute():
            path = self.app_dir / path
        return path

    # --- Properties to access settings easily and with correct types ---

    @property
    def word_budget(self) -> int:
        """Number of OCR words examined before a candidate's score is final."""
        return self.parser.getint("Selection", "word_budget", fallback=DEFAULT_WORD_BUDGET)

    @property
    def raw_font_dir(self) -> Optional[Path]:
        """Directory holding the raw font binaries."""
        return self._resolve_dir(self.parser.get("Fonts", "raw_dir", fallback=""))

    @property
    def opt_font_dir(self) -> Optional[Path]:
        """Directory holding the size-optimized font binaries, if any."""
        return self._resolve_dir(self.parser.get("Fonts", "opt_dir", fallback=""))

    @property
    def use_optimized(self) -> bool:
        """Whether optimized fonts are active at start-up."""
        return self.parser.getboolean("Fonts", "use_optimized", fallback=False)

    @property
    def worker_count(self) -> int:
        return self.parser.getint("Workers", "count", fallback=DEFAULT_WORKER_COUNT)

    @property
    def log_level(self) -> str:
        return self.parser.get("Logging", "level", fallback="INFO").upper()


# --- Singleton Instance ---
# Other modules can import this instance directly:
# from fontselect.config import config
config = Config()
