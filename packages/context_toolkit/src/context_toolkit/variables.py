"""Variable scopes and flat token substitution.

Two token forms are supported:

* ``{{KEY}}`` inside document, source and prompt content, resolved against the
  registry's merged variables.
* ``${KEY}`` inside import directive paths, URLs and headers, resolved against
  environment-derived variables (process environment plus an optional
  ``.env``-style file).

Substitution is a single pass: replaced values are never rescanned, and unknown
keys are left verbatim.
"""

from __future__ import annotations

import getpass
import os
import platform
import re
import socket
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from types import MappingProxyType
from typing import Any

from dotenv import dotenv_values

_TEMPLATE_TOKEN = re.compile(r"\{\{\s*([A-Za-z0-9_.\-]+)\s*\}\}")
_ENV_TOKEN = re.compile(r"\$\{\s*([A-Za-z0-9_.\-]+)\s*\}")


def _stringify(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return ""
    return str(value)


@dataclass(frozen=True)
class VariableScope(Mapping[str, str]):
    """Immutable key to string mapping with functional merge."""

    values: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        normalized = {str(key): _stringify(value) for key, value in self.values.items()}
        object.__setattr__(self, "values", MappingProxyType(normalized))

    def __getitem__(self, key: str) -> str:
        return self.values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self.values)

    def __len__(self) -> int:
        return len(self.values)

    def __hash__(self) -> int:
        return hash(tuple(sorted(self.values.items())))

    @classmethod
    def merge(cls, base: Mapping[str, Any], override: Mapping[str, Any]) -> VariableScope:
        """Return a new scope where ``override`` wins on key collision."""
        return cls({**base, **override})

    def merged_with(self, override: Mapping[str, Any]) -> VariableScope:
        return VariableScope.merge(self, override)

    def to_dict(self) -> dict[str, str]:
        return dict(self.values)


def substitute(text: str, scope: Mapping[str, str]) -> str:
    """Replace ``{{KEY}}`` tokens found in ``scope``; leave the rest untouched."""
    if not text or "{{" not in text:
        return text

    def _replace(match: re.Match[str]) -> str:
        key = match.group(1)
        return scope[key] if key in scope else match.group(0)

    return _TEMPLATE_TOKEN.sub(_replace, text)


def substitute_env(text: str, scope: Mapping[str, str]) -> str:
    """Replace ``${KEY}`` tokens found in ``scope``; leave the rest untouched."""
    if not text or "${" not in text:
        return text

    def _replace(match: re.Match[str]) -> str:
        key = match.group(1)
        return scope[key] if key in scope else match.group(0)

    return _ENV_TOKEN.sub(_replace, text)


def unresolved_tokens(text: str) -> list[str]:
    """Return the ``{{KEY}}`` names still present in ``text``."""
    return _TEMPLATE_TOKEN.findall(text or "")


def load_env_variables(env_file: str | Path | None = None) -> VariableScope:
    """Build the scope used for ``${KEY}`` tokens.

    The process environment is overlaid by the values of ``env_file`` when it
    is given and exists.
    """
    values: dict[str, str] = dict(os.environ)
    if env_file:
        path = Path(env_file).expanduser()
        if path.is_file():
            values.update(
                {key: value for key, value in dotenv_values(path).items() if value is not None}
            )
    return VariableScope(values)


def predefined_variables(root_dir: str | Path) -> VariableScope:
    """System variables available to every configuration at lowest priority."""
    now = datetime.now(UTC)
    try:
        user = getpass.getuser()
    except (KeyError, OSError):
        user = os.getenv("USER", "")
    return VariableScope(
        {
            "DATETIME": now.strftime("%Y-%m-%d %H:%M:%S"),
            "DATE": now.strftime("%Y-%m-%d"),
            "TIME": now.strftime("%H:%M:%S"),
            "TIMESTAMP": str(int(now.timestamp())),
            "USER": user,
            "HOME": str(Path.home()),
            "OS": platform.system(),
            "HOSTNAME": socket.gethostname(),
            "ROOT_PATH": str(Path(root_dir).resolve()),
        }
    )
