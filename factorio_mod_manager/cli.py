"""Command-line entry point: check the server layout and update mods."""

from __future__ import annotations

import argparse
import logging
import shutil
import sys
from collections.abc import Sequence
from pathlib import Path

from factorio_mod_manager import config, logsetup
from factorio_mod_manager.updater import check_update

log = logging.getLogger(__name__)

CONFIG_FILE = Path("mod-manager.toml")
FACTORIO_BINARY = Path("bin/x64/factorio")
DATA_DIR = Path("data")
TEMP_DIR = Path("temp")
DOCS_URL = "https://wiki.factorio.com/Multiplayer#Dedicated/Headless_server"


class StartupError(Exception):
    """Raised when the working directory is not a usable Factorio installation."""


def _hyperlink(url: str) -> str:
    return f"\x1b]8;;{url}\x1b\\{url}\x1b]8;;\x1b\\"


def ensure_path_exists(path: str | Path, message: str) -> Path:
    """Return ``path`` if it exists, else raise :class:`StartupError`."""
    path = Path(path)
    if not path.exists():
        raise StartupError(message)
    return path


def ensure_path_is_dir(path: str | Path, message: str) -> Path:
    """Return ``path`` if it is a directory, else raise :class:`StartupError`."""
    path = ensure_path_exists(path, message)
    if not path.is_dir():
        raise StartupError(message)
    return path


def cleanup_temp_dir(path: str | Path) -> bool:
    """Remove a left-over temporary directory; return whether it was removed."""
    path = Path(path)
    if not path.exists():
        return False
    try:
        shutil.rmtree(path)
    except OSError as exc:
        log.warning("Failed to clean up temp directory `%s`: %r", path, exc)
        return False
    return True


def _build_parser() -> argparse.ArgumentParser:
    return argparse.ArgumentParser(
        prog="factorio-mod-manager",
        description=(
            "Update the mods of a headless Factorio server. "
            "Run from the Factorio root directory."
        ),
    )


def _run() -> None:
    cfg = config.load_or_init(CONFIG_FILE)

    ensure_path_exists(
        FACTORIO_BINARY,
        "factorio not found — run me from the Factorio root directory. "
        f"If you do not have the headless server, see {_hyperlink(DOCS_URL)}.",
    )
    ensure_path_is_dir(
        DATA_DIR,
        "data directory missing or not a directory — "
        "please run the Factorio server at least once",
    )
    cleanup_temp_dir(TEMP_DIR)

    check_update.check_mod_updates(DATA_DIR, cfg)


def main(argv: Sequence[str] | None = None) -> int:
    """Run the manager in the current directory and return the exit status."""
    _build_parser().parse_args(argv)
    logsetup.init("info")
    log.info("Starting factorio mod manager")

    try:
        _run()
    except (StartupError, config.ConfigError, OSError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    log.info("Terminating factorio mod manager")
    return 0


if __name__ == "__main__":
    sys.exit(main())