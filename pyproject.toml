[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "factorio-mod-manager"
version = "0.1.0"
description = "Keeps the mods of a headless Factorio server up to date from the Factorio mod portal."
requires-python = ">=3.11"
keywords = ["factorio", "mods", "server", "updater", "headless"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: System Administrators",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Games/Entertainment",
]
dependencies = [
    "requests>=2.31",
    "semver>=3.0",
    "tomli-w>=1.0",
]

[project.optional-dependencies]
test = [
    "pytest>=7.4",
    "responses>=0.24",
]

[project.scripts]
factorio-mod-manager = "factorio_mod_manager.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["factorio_mod_manager"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py311"

[tool.ruff.lint]
select = ["E", "F", "I", "B", "UP"]

[tool.mypy]
python_version = "3.11"
warn_unused_ignores = true
