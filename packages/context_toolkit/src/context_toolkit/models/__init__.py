from context_toolkit.models.config import (
    Document,
    FileSource,
    GitDiffSource,
    GithubSource,
    GitlabServer,
    GitlabSource,
    ImportDirective,
    ImportFilter,
    Message,
    ModifierRef,
    Prompt,
    PromptExtension,
    RawConfig,
    Source,
    TagFilter,
    TextSource,
    Tool,
    TreeSource,
    UrlSource,
)
from context_toolkit.models.settings import Settings, load_settings

__all__ = [
    "Document",
    "FileSource",
    "GitDiffSource",
    "GithubSource",
    "GitlabServer",
    "GitlabSource",
    "ImportDirective",
    "ImportFilter",
    "Message",
    "ModifierRef",
    "Prompt",
    "PromptExtension",
    "RawConfig",
    "Settings",
    "Source",
    "TagFilter",
    "TextSource",
    "Tool",
    "TreeSource",
    "UrlSource",
    "load_settings",
]
