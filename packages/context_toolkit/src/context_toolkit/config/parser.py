"""Parse a single configuration file into a ``RawConfig``.

The parser knows nothing about imports: it only turns JSON or YAML text into
validated models. Documents and import directives must be well formed; prompt
and tool entries are parsed leniently so that one bad entry is dropped with a
warning instead of failing the whole file.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any, Literal

import yaml
from pydantic import ValidationError

from context_toolkit.config.registry import ConfigDiagnostics
from context_toolkit.errors import ConfigLoadError, ConfigParseError
from context_toolkit.models.config import Document, ImportDirective, Prompt, RawConfig, Tool

if TYPE_CHECKING:
    from pydantic import BaseModel

logger = logging.getLogger(__name__)

ConfigFormat = Literal["json", "yaml"]

_SUFFIX_FORMATS: dict[str, ConfigFormat] = {
    ".json": "json",
    ".yaml": "yaml",
    ".yml": "yaml",
}


def detect_format(name: str) -> ConfigFormat | None:
    """Guess the format from a file name or URL path."""
    return _SUFFIX_FORMATS.get(Path(name.split("?", 1)[0]).suffix.lower())


def _describe(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error.get("loc", ()))
        parts.append(f"{location}: {error['msg']}" if location else error["msg"])
    return "; ".join(parts)


def _stringify(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return ""
    if isinstance(value, (dict, list)):
        return json.dumps(value)
    return str(value)


def _load_data(text: str, fmt: ConfigFormat | None, origin: str) -> Any:
    if fmt == "json":
        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            msg = f"Invalid JSON in {origin}: {exc}"
            raise ConfigParseError(msg) from exc
    if fmt is None:
        try:
            return json.loads(text)
        except json.JSONDecodeError:
            pass
    try:
        return yaml.safe_load(text)
    except yaml.YAMLError as exc:
        msg = f"Invalid YAML in {origin}: {exc}"
        raise ConfigParseError(msg) from exc


def _section_list(data: dict[str, Any], key: str, origin: str) -> list[Any]:
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        msg = f"The '{key}' property in {origin} must be a list"
        raise ConfigParseError(msg)
    return value


class ConfigParser:
    """Turn raw configuration text into a ``RawConfig``."""

    def parse(
        self,
        text: str,
        *,
        origin: str = "<inline>",
        fmt: ConfigFormat | None = None,
        diagnostics: ConfigDiagnostics | None = None,
    ) -> RawConfig:
        """Parse configuration text; raise ``ConfigParseError`` when malformed."""
        diagnostics = diagnostics if diagnostics is not None else ConfigDiagnostics()
        data = _load_data(text, fmt, origin)
        if data is None:
            return RawConfig()
        if not isinstance(data, dict):
            msg = f"Configuration in {origin} must be a mapping at the top level"
            raise ConfigParseError(msg)

        imports = [
            self._strict(ImportDirective, entry, f"import at index {index}", origin)
            for index, entry in enumerate(_section_list(data, "import", origin))
        ]
        documents = [
            self._strict(Document, entry, f"document at index {index}", origin)
            for index, entry in enumerate(_section_list(data, "documents", origin))
        ]
        prompts = self._lenient(
            Prompt, _section_list(data, "prompts", origin), "prompt", origin, diagnostics
        )
        tools = self._lenient(
            Tool, _section_list(data, "tools", origin), "tool", origin, diagnostics
        )

        variables = data.get("variables") or {}
        if not isinstance(variables, dict):
            msg = f"The 'variables' property in {origin} must be a mapping"
            raise ConfigParseError(msg)

        logger.debug(
            "Parsed %s: %d imports, %d documents, %d prompts, %d tools",
            origin,
            len(imports),
            len(documents),
            len(prompts),
            len(tools),
        )
        return RawConfig(
            imports=imports,
            variables={str(key): _stringify(value) for key, value in variables.items()},
            documents=documents,
            prompts=prompts,
            tools=tools,
        )

    def parse_file(
        self, path: str | Path, diagnostics: ConfigDiagnostics | None = None
    ) -> RawConfig:
        """Read and parse a configuration file."""
        file_path = Path(path)
        try:
            text = file_path.read_text(encoding="utf-8")
        except OSError as exc:
            msg = f"Unable to read configuration file {file_path}: {exc.strerror or exc}"
            raise ConfigLoadError(msg) from exc
        except UnicodeDecodeError as exc:
            msg = f"Configuration file {file_path} is not valid UTF-8: {exc.reason}"
            raise ConfigParseError(msg) from exc
        return self.parse(
            text,
            origin=str(file_path),
            fmt=detect_format(file_path.name),
            diagnostics=diagnostics,
        )

    @staticmethod
    def _strict(model: type[BaseModel], entry: Any, label: str, origin: str) -> Any:
        try:
            return model.model_validate(entry)
        except ValidationError as exc:
            msg = f"Invalid {label} in {origin}: {_describe(exc)}"
            raise ConfigParseError(msg) from exc

    @staticmethod
    def _lenient(
        model: type[BaseModel],
        entries: list[Any],
        label: str,
        origin: str,
        diagnostics: ConfigDiagnostics,
    ) -> list[Any]:
        parsed: list[Any] = []
        for index, entry in enumerate(entries):
            if not isinstance(entry, dict):
                diagnostics.warn(f"Skipping {label} at index {index} in {origin}: not a mapping")
                continue
            try:
                parsed.append(model.model_validate(entry))
            except ValidationError as exc:
                diagnostics.warn(f"Skipping {label} at index {index} in {origin}: {_describe(exc)}")
        return parsed
