"""Configuration file discovery.

When no explicit config file or inline configuration is given, the first
existing file from ``DEFAULT_CONFIG_FILES`` in the work directory is used.
"""

from __future__ import annotations

from pathlib import Path

from context_toolkit.errors import ConfigLoadError

DEFAULT_CONFIG_FILES = ("context.yaml", "context.yml", "context.json")


def get_work_dir(work_dir: str | Path | None = None) -> Path:
    """Return the expanded, absolute work directory."""
    return Path(work_dir or ".").expanduser().resolve()


def find_config_file(work_dir: str | Path) -> Path:
    """Locate the default configuration file in ``work_dir``.

    Raises:
        ConfigLoadError: If none of the default file names exist.
    """
    base = get_work_dir(work_dir)
    for name in DEFAULT_CONFIG_FILES:
        candidate = base / name
        if candidate.is_file():
            return candidate
    msg = f"No configuration file found in {base} (looked for {', '.join(DEFAULT_CONFIG_FILES)})"
    raise ConfigLoadError(msg)


def resolve_config_path(config_file: str | Path, cwd: str | Path | None = None) -> Path:
    """Resolve a user-supplied config path against ``cwd`` when relative.

    A directory is accepted and searched for the default file names.
    """
    path = Path(config_file).expanduser()
    if not path.is_absolute():
        path = Path(cwd or Path.cwd()) / path
    if path.is_dir():
        return find_config_file(path)
    return path.resolve()
