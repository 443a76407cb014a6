"""Loading, initialising and sanitising the ``mod-manager.toml`` settings file."""

from __future__ import annotations

import copy
import logging
import tomllib
from collections.abc import Mapping, MutableMapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import tomli_w

log = logging.getLogger(__name__)

ALLOWED_SECTION_KEYS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("factorio", ("username", "token")),
    (
        "mod-manager",
        (
            "autoupdate-mods",
            "autoupdate-server",
            "autostart-when-finished",
        ),
    ),
)


class ConfigError(Exception):
    """Raised when the configuration file cannot be read or understood."""


@dataclass
class FactorioConfig:
    """Credentials for the mod portal."""

    username: str = "my-username"
    token: str = "token"


@dataclass
class ModManagerConfig:
    """Behaviour switches of the manager."""

    autoupdate_mods: bool = True
    autoupdate_server: bool = True
    autostart_when_finished: bool = True


@dataclass
class Config:
    """The whole configuration file."""

    factorio: FactorioConfig = field(default_factory=FactorioConfig)
    mod_manager: ModManagerConfig = field(default_factory=ModManagerConfig)

    def to_dict(self) -> dict[str, dict[str, Any]]:
        """Return the configuration as the TOML document structure."""
        return {
            "factorio": {
                "username": self.factorio.username,
                "token": self.factorio.token,
            },
            "mod-manager": {
                "autoupdate-mods": self.mod_manager.autoupdate_mods,
                "autoupdate-server": self.mod_manager.autoupdate_server,
                "autostart-when-finished": self.mod_manager.autostart_when_finished,
            },
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Config:
        """Build a configuration from a parsed TOML document, checking types."""
        factorio = _section(data, "factorio")
        manager = _section(data, "mod-manager")
        return cls(
            factorio=FactorioConfig(
                username=_typed(factorio, "factorio", "username", str),
                token=_typed(factorio, "factorio", "token", str),
            ),
            mod_manager=ModManagerConfig(
                autoupdate_mods=_typed(manager, "mod-manager", "autoupdate-mods", bool),
                autoupdate_server=_typed(manager, "mod-manager", "autoupdate-server", bool),
                autostart_when_finished=_typed(
                    manager, "mod-manager", "autostart-when-finished", bool
                ),
            ),
        )


def _section(data: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    if name not in data:
        raise ConfigError(f"missing section '{name}'")
    value = data[name]
    if not isinstance(value, Mapping):
        raise ConfigError(f"section '{name}' must be a table, got {type(value).__name__}")
    return value


def _typed(section: Mapping[str, Any], section_name: str, key: str, kind: type) -> Any:
    if key not in section:
        raise ConfigError(f"missing field '{key}' in '{section_name}'")
    value = section[key]
    if not isinstance(value, kind):
        raise ConfigError(
            f"field '{key}' in '{section_name}' must be {kind.__name__}, "
            f"got {type(value).__name__}"
        )
    return value


def load_or_init(path: str | Path) -> Config:
    """Load the config at ``path``, writing defaults if it is missing.

    An existing file is sanitised (unknown keys dropped, missing keys filled
    in) and written back before being returned.
    """
    path = Path(path)
    log.info("Loading config from %s", path)
    if not path.exists():
        return _create_default(path)
    return _sanitize_existing(path)


def _create_default(path: Path) -> Config:
    log.info("Config not found, writing default to %s", path)
    cfg = Config()
    path.write_text(tomli_w.dumps(cfg.to_dict()), encoding="utf-8")
    return cfg


def _sanitize_existing(path: Path) -> Config:
    log.info("Found config at %s, reading…", path)
    contents = path.read_text(encoding="utf-8")
    try:
        doc = tomllib.loads(contents)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Invalid TOML in {path}: {exc}") from exc

    defaults = Config().to_dict()
    for section, allowed_keys in ALLOWED_SECTION_KEYS:
        sanitize_section(doc, section, allowed_keys, defaults[section])

    path.write_text(tomli_w.dumps(doc), encoding="utf-8")
    log.info("Sanitized config written back to %s", path)

    cfg = Config.from_dict(doc)
    log.info("Loaded configuration: %r", cfg)
    return cfg


def sanitize_section(
    root: MutableMapping[str, Any],
    section: str,
    allowed_keys: Sequence[str],
    default_section: Mapping[str, Any],
) -> None:
    """Make ``root[section]`` a table holding exactly the allowed keys.

    A missing or non-table section is replaced by a copy of the default.
    """
    entry = root.setdefault(section, copy.deepcopy(default_section))
    if not isinstance(entry, MutableMapping):
        log.warning(
            "'%s' was not a table (got %r), resetting to default", section, entry
        )
        root[section] = copy.deepcopy(default_section)
        return

    for key in [k for k in entry if k not in allowed_keys]:
        log.debug("Removing disallowed key '%s' from '%s'", key, section)
        del entry[key]

    for key in allowed_keys:
        if key not in entry:
            log.warning("Missing '%s' in '%s' config, inserting default", key, section)
            if isinstance(default_section, Mapping) and key in default_section:
                entry[key] = copy.deepcopy(default_section[key])