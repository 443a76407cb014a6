"""Downloading, verifying and installing a single mod release."""

from __future__ import annotations

import hashlib
import io
import logging
import shutil
import zipfile
from collections.abc import Iterator
from pathlib import Path
from urllib.parse import urlencode, urlsplit, urlunsplit

import requests

log = logging.getLogger(__name__)

DATA_DIR = Path("data")
TEMP_DIR = Path("temp")
MODS_BASE_URL = "https://mods.factorio.com/"


class UpdateError(Exception):
    """Raised when a mod cannot be downloaded, verified or installed."""


def update_mod(
    name: str, download_url: str, expected_sha: str, username: str, token: str
) -> str:
    """Download, verify and install a mod; return the installed folder name."""
    log.info("Starting update for mod '%s'", name)

    DATA_DIR.mkdir(parents=True, exist_ok=True)
    url = build_download_url(download_url, username, token)

    log.info("Downloading '%s' from %s", name, url)
    data = download_zip(url)

    verify_sha(data, expected_sha, name)

    temp_dir = prepare_temp_dir()
    extract_zip(data, temp_dir)

    extracted_root = find_extracted_root(temp_dir, name)
    neat = derive_neat_name(extracted_root, name)

    clean_old_versions(neat)
    install_new_mod(extracted_root, neat)
    shutil.rmtree(temp_dir)

    log.info("Mod '%s' installed as '%s'", name, neat)
    return neat


def build_download_url(raw_url: str, user: str, token: str) -> str:
    """Make an absolute download URL carrying the portal credentials."""
    base = raw_url if raw_url.startswith("http") else f"{MODS_BASE_URL}{raw_url}"
    try:
        parts = urlsplit(base)
    except ValueError as exc:
        raise UpdateError(f"Invalid download URL '{raw_url}': {exc}") from exc
    if not parts.scheme or not parts.netloc:
        raise UpdateError(f"Invalid download URL '{raw_url}': no host")

    credentials = urlencode([("username", user), ("token", token)])
    query = f"{parts.query}&{credentials}" if parts.query else credentials
    return urlunsplit(parts._replace(query=query))


def download_zip(url: str) -> bytes:
    """Fetch ``url`` and return the response body."""
    response = requests.get(url)
    if not response.ok:
        status = f"{response.status_code} {response.reason}".strip()
        log.error("HTTP %s at %s", status, response.url)
        raise UpdateError(f"Download failed: HTTP {status}")
    data = response.content
    log.debug("Downloaded %d bytes", len(data))
    return data


def verify_sha(data: bytes, expected: str, name: str) -> None:
    """Check that the SHA-1 of ``data`` equals the hex digest ``expected``."""
    got = hashlib.sha1(data).hexdigest()
    log.debug("SHA1 for '%s': %s", name, got)
    if got != expected:
        log.error("SHA mismatch for '%s': expected %s, got %s", name, expected, got)
        raise UpdateError(f"SHA mismatch for {name}")


def prepare_temp_dir() -> Path:
    """Create an empty ``temp`` directory, removing any previous one."""
    if TEMP_DIR.exists():
        shutil.rmtree(TEMP_DIR)
    TEMP_DIR.mkdir(parents=True)
    return TEMP_DIR


def extract_zip(data: bytes, temp: str | Path) -> None:
    """Unpack the zip archive held in ``data`` into ``temp``."""
    try:
        archive = zipfile.ZipFile(io.BytesIO(data))
    except zipfile.BadZipFile as exc:
        raise UpdateError(f"Failed to read zip: {exc}") from exc
    with archive:
        try:
            archive.extractall(temp)
        except (zipfile.BadZipFile, OSError) as exc:
            raise UpdateError(f"Failed to extract zip: {exc}") from exc
    log.info("Extracted archive to '%s'", temp)


def _walk(root: Path) -> Iterator[Path]:
    yield root
    if root.is_dir() and not root.is_symlink():
        try:
            children = sorted(root.iterdir())
        except OSError:
            return
        for child in children:
            yield from _walk(child)


def find_extracted_root(temp: str | Path, name: str) -> Path:
    """Return the directory holding the first ``info.json`` under ``temp``."""
    for entry in _walk(Path(temp)):
        if entry.name == "info.json":
            return entry.parent
    raise UpdateError(f"Missing info.json in archive for {name}")


def derive_neat_name(extracted: str | Path, name: str) -> str:
    """Return the folder name of ``extracted`` without trailing ``.zip``."""
    raw = Path(extracted).name
    if not raw:
        raise UpdateError(f"Bad folder name for {name}")
    while raw.endswith(".zip"):
        raw = raw[: -len(".zip")]
    return raw


def clean_old_versions(neat: str) -> None:
    """Remove mod folders in ``data`` sharing the slug of ``neat`` but not its name."""
    slug = neat.split("_", 1)[0]
    for entry in list(DATA_DIR.iterdir()):
        if entry.is_dir() and not entry.is_symlink():
            if entry.name.startswith(slug) and entry.name != neat:
                log.info("Removing old version '%s'", entry)
                shutil.rmtree(entry)


def install_new_mod(src: str | Path, neat: str) -> Path:
    """Move the extracted mod into ``data/<neat>`` and return the new path."""
    dest = DATA_DIR / neat
    Path(src).rename(dest)
    return dest