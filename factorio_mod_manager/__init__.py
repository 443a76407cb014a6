"""Keep the mods of a headless Factorio server up to date from the mod portal."""

__version__ = "0.1.0"