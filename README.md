# factorio-mod-manager

This tool keeps the mods of a headless Factorio server current. It looks at
every directory inside the server's `data` directory, except `base` and `core`.
For each one it reads `info.json` to get the mod's name and version. It then asks
the Factorio mod portal (`/api/mods/<name>/full`) for the releases of that mod
and picks the one with the highest valid semantic version. When that release is
newer than the installed one, the tool does the following:

1. It downloads the release, adding your `username` and `token` to the URL.
2. It checks the SHA-1 checksum against the one the portal gives.
3. It unpacks the archive into `temp`.
4. It moves the folder that holds the archive's `info.json` to `data/<folder name>`.
   A trailing `.zip` is removed from the folder name.

Before moving the new folder in, the tool looks at the part of the folder name
before the first `_`. It removes every directory in `data` whose name starts
with that prefix, except the new folder's own name.

A mod that cannot be processed is logged as a warning and skipped. Causes
include a missing or malformed `info.json`, a network error, a bad checksum and
a broken archive. The check then goes on with the next mod.

## Installation

```
pip install .
```

## Usage

Run the command from the Factorio root directory, the one that holds
`bin/x64/factorio`:

```
factorio-mod-manager
```

The command takes no options other than `--help`. It exits with status 0 on
success. It prints `Error: ...` to standard error and exits with status 1 in
these cases:

- the Factorio binary `bin/x64/factorio` is missing;
- the `data` directory is missing or is not a directory (start the server once to create it);
- `mod-manager.toml` is not valid TOML, or holds values of the wrong type;
- a file-system error occurs.

A `temp` directory left behind by an earlier run is removed at startup.

## Configuration

The first run writes `mod-manager.toml` to the current directory:

```toml
[factorio]
username = "my-username"
token = "token"

[mod-manager]
autoupdate-mods = true
autoupdate-server = true
autostart-when-finished = true
```

Replace `username` and `token` with your factorio.com account name and API
token. The portal needs both to allow downloads.

On each later run the file is cleaned up and written back:

- unknown keys in the `factorio` and `mod-manager` sections are removed;
- missing keys are set back to their defaults;
- a missing section, or a section that is not a table, is reset to its default.

`username` and `token` must be strings. The `mod-manager` keys must be booleans.

## Logging

Log lines go to standard output. Each line carries an RFC 3339 local timestamp,
the level and the logger name. The default level is `info`. To choose another
level, set `FACTORIO_MOD_MANAGER_LOG` to one of `trace`, `debug`, `info`,
`warn`, `warning`, `error` or `off`. `trace` logs the same as `debug`. An
unknown value is ignored.

## Use as a library

- `factorio_mod_manager.config.load_or_init(path)` loads, cleans up or creates the settings file and returns a `Config`.
- `factorio_mod_manager.updater.check_update.check_mod_updates(data_dir, cfg)` checks a data directory and returns the names of the mods it updated.
- `factorio_mod_manager.updater.mod_updater.update_mod(name, download_url, expected_sha, username, token)` installs one release and returns the installed folder name.

`update_mod` always works on `data` and `temp` relative to the current directory.

## What it does not do

- It never reads the `mod-manager` settings. `autoupdate-mods`,
  `autoupdate-server` and `autostart-when-finished` are written and kept in the
  file, but mods are always updated.
- It does not update the Factorio server itself.
- It does not start the server.
- It only handles mods unpacked as directories in `data`. Zipped mod files and
  the `mods` directory are not looked at.

## Tests

```
pip install .[test]
pytest
```