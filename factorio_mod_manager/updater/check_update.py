"""Checking installed mods against the mod portal and updating stale ones."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import requests
from semver import Version

from factorio_mod_manager.config import Config
from factorio_mod_manager.updater import mod_updater
from factorio_mod_manager.updater.mod_updater import UpdateError

log = logging.getLogger(__name__)

API_URL = "https://mods.factorio.com/api/mods/{name}/full"
SKIPPED_DIRS = frozenset({"base", "core"})

_RECOVERABLE = (
    OSError,
    ValueError,
    KeyError,
    TypeError,
    requests.RequestException,
    UpdateError,
)


def _require_str(data: Mapping[str, Any], key: str, what: str) -> str:
    if not isinstance(data, Mapping):
        raise ValueError(f"{what} must be a JSON object")
    if key not in data:
        raise ValueError(f"missing field '{key}' in {what}")
    value = data[key]
    if not isinstance(value, str):
        raise ValueError(f"field '{key}' in {what} must be a string")
    return value


@dataclass(frozen=True)
class LocalInfo:
    """Name and version of an installed mod, from its ``info.json``."""

    name: str
    version: str

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> LocalInfo:
        return cls(
            name=_require_str(data, "name", "info.json"),
            version=_require_str(data, "version", "info.json"),
        )


@dataclass(frozen=True)
class Release:
    """One release of a mod as listed by the mod portal."""

    version: str
    download_url: str
    file_name: str
    sha1: str

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> Release:
        return cls(
            version=_require_str(data, "version", "release"),
            download_url=_require_str(data, "download_url", "release"),
            file_name=_require_str(data, "file_name", "release"),
            sha1=_require_str(data, "sha1", "release"),
        )


def check_mod_updates(data_dir: str | Path, cfg: Config) -> list[str]:
    """Check every mod folder in ``data_dir`` and update outdated ones.

    Failures on a single mod are logged and skipped. Returns the names of the
    mods that were updated.
    """
    data_dir = Path(data_dir)
    log.info("Starting mod update check in %s", data_dir)

    updated: list[str] = []
    with requests.Session() as session:
        for path in sorted(data_dir.iterdir()):
            if not should_process_mod(path):
                continue
            try:
                name = process_mod_dir(path, session, cfg)
            except _RECOVERABLE as exc:
                log.warning("Failed to process mod at %s: %r", path, exc)
                continue
            if name is not None:
                updated.append(name)

    log.info("Mod update check complete")
    return updated


def should_process_mod(path: str | Path) -> bool:
    """Tell whether ``path`` is a mod directory worth checking."""
    path = Path(path)
    skip = not path.is_dir() or path.name in SKIPPED_DIRS
    if skip:
        log.debug("Skipping %s", path)
    return not skip


def process_mod_dir(
    path: str | Path, session: requests.Session, cfg: Config
) -> str | None:
    """Check one mod folder and update it if needed.

    Returns the mod name when an update was installed, else ``None``.
    """
    local = read_local_info(path)
    log.info("Local mod '%s' version: %s", local.name, local.version)

    releases = fetch_remote_releases(local.name, session)
    log.debug("Found %d releases for '%s'", len(releases), local.name)

    latest = pick_latest(releases)
    if latest is None:
        log.warning("No valid releases found for '%s'", local.name)
        return None
    remote_ver, rel = latest
    return local.name if compare_and_update(local, remote_ver, rel, cfg) else None


def read_local_info(path: str | Path) -> LocalInfo:
    """Read and parse ``info.json`` inside the mod folder ``path``."""
    info_path = Path(path) / "info.json"
    log.debug("Reading local info from %s", info_path)
    data = json.loads(info_path.read_text(encoding="utf-8"))
    return LocalInfo.from_json(data)


def fetch_remote_releases(name: str, session: requests.Session) -> list[Release]:
    """Fetch the full list of releases of mod ``name`` from the portal."""
    url = API_URL.format(name=name)
    log.info("Fetching remote metadata from %s", url)
    payload = session.get(url).json()
    if not isinstance(payload, Mapping) or "releases" not in payload:
        raise ValueError(f"missing field 'releases' in response for {name}")
    releases = payload["releases"]
    if not isinstance(releases, list):
        raise ValueError(f"field 'releases' for {name} must be a list")
    return [Release.from_json(item) for item in releases]


def _parsed(releases: Iterable[Release]) -> Iterable[tuple[Version, Release]]:
    for rel in releases:
        try:
            yield Version.parse(rel.version), rel
        except (ValueError, TypeError):
            continue


def pick_latest(releases: Iterable[Release]) -> tuple[Version, Release] | None:
    """Return the release with the highest valid semantic version, if any.

    Among equal versions the last one listed wins.
    """
    best: tuple[Version, Release] | None = None
    for candidate in _parsed(releases):
        if best is None or candidate[0] >= best[0]:
            best = candidate
    return best


def compare_and_update(
    local: LocalInfo, remote_ver: Version, rel: Release, cfg: Config
) -> bool:
    """Install ``rel`` when it is newer than ``local``; return whether it was."""
    log.info("Latest remote version for '%s' is %s", local.name, remote_ver)
    local_ver = Version.parse(local.version)
    if remote_ver <= local_ver:
        log.debug(
            "No update needed for '%s': local %s >= remote %s",
            local.name,
            local.version,
            remote_ver,
        )
        return False

    log.info("Updating '%s' from %s → %s", local.name, local.version, rel.version)
    mod_updater.update_mod(
        rel.file_name,
        rel.download_url,
        rel.sha1,
        cfg.factorio.username,
        cfg.factorio.token,
    )
    log.info("Successfully updated '%s'", local.name)
    return True