"""Defines a global set of configurations that define how covariance post-processing operates."""

from __future__ import annotations

# Standard Library Imports
from configparser import ConfigParser
from configparser import Error as ConfigError
from importlib import resources
from logging import CRITICAL, DEBUG, ERROR, INFO, NOTSET, WARNING
from pathlib import Path
from typing import TYPE_CHECKING, NamedTuple

# Type Checking Imports
if TYPE_CHECKING:
    # Standard Library Imports
    from typing import Any, Final


class SubConfig:
    """Class that represents a section in the configuration.

    Enforce improved config convention:
        `BehavioralConfig.section.value` rather than something like `BehavioralConfig["section"]["value"]`.
    """

    def __init__(self, section: str):
        """Instantiate a `SubConfig` object.

        Args:
            section (``str``): name of section that this SubConfig object represents
        """
        self.section = section
        if not isinstance(self.section, str):
            raise TypeError("Config section must be a string")

    def setonce(self, name: str, value: Any):
        """Set the field for this `SubConfig`, but raise an error if the field was already set.

        Args:
            name (``str``): name of field to set
            value (``any``): value to set the field to
        """
        if already_set := getattr(self, name, None):
            raise AttributeError(
                f"SubConfig {self.section!r} already has a value set for {name!r}:{already_set!r}",
            )
        setattr(self, name, value)


class CustomConfigParser(ConfigParser):
    """Perform custom parsing operations on our custom config convention."""

    LOGGING_LEVELS: Final[dict[str, int]] = {
        "CRITICAL": CRITICAL,
        "ERROR": ERROR,
        "WARNING": WARNING,
        "INFO": INFO,
        "DEBUG": DEBUG,
        "NOTSET": NOTSET,
    }

    def getlogginglevel(self, section: str, option: str) -> int:
        """Return logging level for this config file."""
        got = self.get(section, option)

        return self.LOGGING_LEVELS.get(got, NOTSET)

    def getNullFloat(self, section: str, option: str) -> float | None:
        """Return a float for this option, allowing for null values."""
        got = self.get(section, option)
        return None if got.lower() in ("null", "none") else float(got)


class ConfigItem(NamedTuple):
    """Default value of a config option, and the :class:`.CustomConfigParser` method that reads it."""

    getter: str
    default: Any


class BehavioralConfig:
    """Singleton, config settings class."""

    DEFAULT_CONFIG_FILE: Final[str] = "default_behavior.config"

    DEFAULT_SECTIONS: Final[dict[str, dict[str, ConfigItem]]] = {
        "logging": {
            "OutputLocation": ConfigItem("get", "stdout"),
            "Level": ConfigItem("getlogginglevel", DEBUG),
            "MaxFileSize": ConfigItem("getint", 1048576),
            "MaxFileCount": ConfigItem("getint", 50),
            "AllowMultipleHandlers": ConfigItem("getboolean", False),
        },
        "database": {
            "DatabasePath": ConfigItem("get", "sqlite://"),
        },
        "estimation": {
            "UsePseudoInverse": ConfigItem("getboolean", False),
            "PseudoInverseRcond": ConfigItem("getNullFloat", None),
            "TimeTolerance": ConfigItem("getfloat", 1e-9),
            "EmitFinalPartialInterval": ConfigItem("getboolean", True),
        },
    }

    __shared_inst: BehavioralConfig | None = None

    def __init__(self, config_file_path: str | None = None):
        """Initialize the configuration object.

        Args:
            config_file_path (``str``, optional): config file to read. Defaults to ``None``, which
                reads the packaged default file. Options missing from the file, or a file that
                doesn't exist, fall back to :attr:`.DEFAULT_SECTIONS`.
        """
        self._parser = CustomConfigParser()

        if config_file_path is None:
            res = resources.files("odcov.common").joinpath(self.DEFAULT_CONFIG_FILE)
            with (
                resources.as_file(res) as res_filepath,
                open(res_filepath, encoding="utf-8") as config_file,
            ):
                self._parser.read_file(config_file)

        elif Path(config_file_path).exists():
            with open(config_file_path, encoding="utf-8") as config_file:
                self._parser.read_file(config_file)

        for section, section_config in self.DEFAULT_SECTIONS.items():
            setattr(self, section, self._readSection(section, section_config))

        BehavioralConfig.__shared_inst = self

    def _readSection(self, section: str, section_config: dict[str, ConfigItem]) -> SubConfig:
        """Build the :class:`.SubConfig` of `section`, using defaults for options that aren't set."""
        sub = SubConfig(section)
        for key, (getter_name, default) in section_config.items():
            try:
                value = getattr(self._parser, getter_name)(section, key)
            except ConfigError:
                value = default
            sub.setonce(key, value)

        return sub

    @classmethod
    def getConfig(cls, config_file_path: str | None = None) -> BehavioralConfig:
        """Return a reference to the singleton shared config."""
        if cls.__shared_inst is None:
            if not config_file_path:
                cls.__shared_inst = BehavioralConfig()

            else:
                cls.__shared_inst = BehavioralConfig(config_file_path=config_file_path)

        return cls.__shared_inst
