"""Pydantic models for the configuration schema."""

from __future__ import annotations

from pathlib import PurePosixPath, PureWindowsPath
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

_MODEL_CONFIG = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")


def _as_list(value: Any) -> list[Any]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value] if value.strip() else []
    return list(value)


class ModifierRef(BaseModel):
    """Reference to a named content modifier with optional options."""

    model_config = _MODEL_CONFIG

    name: str
    options: dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _from_name(cls, data: Any) -> Any:
        if isinstance(data, str):
            return {"name": data}
        return data


class SourceBase(BaseModel):
    """Fields shared by every source type."""

    model_config = _MODEL_CONFIG

    description: str = ""
    tag: str = ""
    modifiers: list[ModifierRef] = Field(default_factory=list)

    @field_validator("modifiers", mode="before")
    @classmethod
    def _normalize_modifiers(cls, value: Any) -> list[Any]:
        return _as_list(value)


class PathFilteredSource(SourceBase):
    """Base for sources selecting files by path and glob pattern."""

    source_paths: list[str] = Field(default_factory=list, alias="sourcePaths")
    file_pattern: list[str] = Field(default_factory=lambda: ["*"], alias="filePattern")
    not_path: list[str] = Field(default_factory=list, alias="notPath")

    @field_validator("source_paths", "not_path", mode="before")
    @classmethod
    def _normalize_paths(cls, value: Any) -> list[Any]:
        return _as_list(value)

    @field_validator("file_pattern", mode="before")
    @classmethod
    def _normalize_pattern(cls, value: Any) -> list[Any]:
        return _as_list(value) or ["*"]


class TextSource(SourceBase):
    type: Literal["text"]
    content: str = ""
    tag: str = "INSTRUCTION"


class FileSource(PathFilteredSource):
    type: Literal["file"]
    contains: list[str] = Field(default_factory=list)
    not_contains: list[str] = Field(default_factory=list, alias="notContains")
    show_tree_view: bool = Field(default=False, alias="showTreeView")

    @field_validator("contains", "not_contains", mode="before")
    @classmethod
    def _normalize_filters(cls, value: Any) -> list[Any]:
        return _as_list(value)


class TreeSource(PathFilteredSource):
    type: Literal["tree"]
    max_depth: int = Field(default=0, alias="maxDepth")


class UrlSource(SourceBase):
    type: Literal["url"]
    urls: list[str] = Field(default_factory=list)
    headers: dict[str, str] = Field(default_factory=dict)

    @field_validator("urls", mode="before")
    @classmethod
    def _normalize_urls(cls, value: Any) -> list[Any]:
        return _as_list(value)


class GithubSource(PathFilteredSource):
    type: Literal["github"]
    repository: str
    branch: str = "main"
    github_token: str | None = Field(default=None, alias="githubToken")


class GitlabServer(BaseModel):
    """Connection settings for a GitLab instance."""

    model_config = _MODEL_CONFIG

    url: str = "https://gitlab.com"
    token: str | None = None
    headers: dict[str, str] = Field(default_factory=dict)


class GitlabSource(PathFilteredSource):
    type: Literal["gitlab"]
    repository: str
    branch: str = "main"
    server: GitlabServer = Field(default_factory=GitlabServer)


class GitDiffSource(SourceBase):
    type: Literal["git_diff"]
    repository: str = "."
    commit: str = "staged"
    file_pattern: list[str] = Field(default_factory=lambda: ["*"], alias="filePattern")
    show_stats: bool = Field(default=True, alias="showStats")

    @field_validator("file_pattern", mode="before")
    @classmethod
    def _normalize_pattern(cls, value: Any) -> list[Any]:
        return _as_list(value) or ["*"]


Source = Annotated[
    TextSource | FileSource | TreeSource | UrlSource | GithubSource | GitlabSource | GitDiffSource,
    Field(discriminator="type"),
]


class Document(BaseModel):
    """A compilation unit producing one Markdown file."""

    model_config = _MODEL_CONFIG

    description: str = ""
    output_path: str = Field(alias="outputPath")
    overwrite: bool = True
    tags: list[str] = Field(default_factory=list)
    sources: list[Source] = Field(default_factory=list)
    modifiers: list[ModifierRef] = Field(default_factory=list)

    @field_validator("output_path")
    @classmethod
    def _require_output_path(cls, value: str) -> str:
        if not value.strip():
            msg = "outputPath must be non-empty"
            raise ValueError(msg)
        value = value.strip()
        if PurePosixPath(value).is_absolute() or PureWindowsPath(value).is_absolute():
            msg = f"outputPath must be relative to the work dir, got '{value}'"
            raise ValueError(msg)
        return value

    @field_validator("tags", "modifiers", mode="before")
    @classmethod
    def _normalize_lists(cls, value: Any) -> list[Any]:
        return _as_list(value)


class TagFilter(BaseModel):
    model_config = _MODEL_CONFIG

    include: list[str] = Field(default_factory=list)
    exclude: list[str] = Field(default_factory=list)

    def accepts(self, tags: list[str]) -> bool:
        """Keep when tags intersect ``include`` (or it is empty) and miss ``exclude``."""
        tag_set = set(tags)
        if self.include and not tag_set.intersection(self.include):
            return False
        return not tag_set.intersection(self.exclude)


class ImportFilter(BaseModel):
    """Selective import filter applied to prompts and tools."""

    model_config = _MODEL_CONFIG

    tags: TagFilter | None = None
    ids: list[str] | None = None

    def accepts(self, item_id: str, tags: list[str]) -> bool:
        if self.ids is not None and item_id not in self.ids:
            return False
        return self.tags is None or self.tags.accepts(tags)


class ImportDirective(BaseModel):
    """Instruction to merge another configuration into the current one."""

    model_config = _MODEL_CONFIG

    path: str | None = None
    url: str | None = None
    type: Literal["local", "url"] = "local"
    path_prefix: str | None = Field(default=None, alias="pathPrefix")
    docs: list[str] | None = None
    filter: ImportFilter | None = None
    headers: dict[str, str] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _infer_type(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        result = dict(data)
        if not result.get("type"):
            result["type"] = "url" if result.get("url") and not result.get("path") else "local"
        return result

    @model_validator(mode="after")
    def _require_target(self) -> ImportDirective:
        if self.type == "local" and not self.path:
            msg = "local import requires 'path'"
            raise ValueError(msg)
        if self.type == "url" and not (self.url or self.path):
            msg = "url import requires 'url'"
            raise ValueError(msg)
        return self

    @property
    def target(self) -> str:
        """The raw path or URL this directive points at."""
        if self.type == "url":
            return self.url or self.path or ""
        return self.path or ""

    def has_wildcard(self) -> bool:
        return self.type == "local" and any(ch in self.target for ch in "*?[")


class Message(BaseModel):
    model_config = _MODEL_CONFIG

    role: str = ""
    content: str = ""

    @model_validator(mode="before")
    @classmethod
    def _coerce(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return {}
        result = dict(data)
        content = result.get("content")
        if isinstance(content, dict):
            content = content.get("text", "")
        result["content"] = "" if content is None else str(content)
        result["role"] = "" if result.get("role") is None else str(result["role"])
        return result


class PromptExtension(BaseModel):
    model_config = _MODEL_CONFIG

    id: str = ""
    arguments: dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _coerce(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return {}
        result = dict(data)
        result["id"] = "" if result.get("id") is None else str(result["id"])
        if not isinstance(result.get("arguments"), dict):
            result["arguments"] = {}
        return result


class Prompt(BaseModel):
    """Prompt or reusable template definition."""

    model_config = _MODEL_CONFIG

    id: str = ""
    type: Literal["prompt", "template"] = "prompt"
    description: str = ""
    tags: list[str] = Field(default_factory=list)
    input_schema: dict[str, Any] | None = Field(default=None, alias="schema")
    messages: list[Message] = Field(default_factory=list)
    extend: list[PromptExtension] = Field(default_factory=list)

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> str:
        return "" if value is None else str(value).strip()

    @field_validator("type", mode="before")
    @classmethod
    def _default_type(cls, value: Any) -> Any:
        return value or "prompt"

    @field_validator("messages", "extend", "tags", mode="before")
    @classmethod
    def _normalize_lists(cls, value: Any) -> list[Any]:
        return _as_list(value)

    @property
    def is_template(self) -> bool:
        return self.type == "template"


class Tool(BaseModel):
    """Tool declaration carried through the registry unchanged."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="allow")

    id: str
    description: str = ""
    type: str = "run"
    tags: list[str] = Field(default_factory=list)

    @field_validator("tags", mode="before")
    @classmethod
    def _normalize_tags(cls, value: Any) -> list[Any]:
        return _as_list(value)

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class RawConfig(BaseModel):
    """One parsed configuration file, before import resolution."""

    model_config = _MODEL_CONFIG

    imports: list[ImportDirective] = Field(default_factory=list, alias="import")
    variables: dict[str, str] = Field(default_factory=dict)
    documents: list[Document] = Field(default_factory=list)
    prompts: list[Prompt] = Field(default_factory=list)
    tools: list[Tool] = Field(default_factory=list)
