from context_toolkit.config.imports import ImportResolver
from context_toolkit.config.parser import ConfigParser, detect_format
from context_toolkit.config.paths import (
    DEFAULT_CONFIG_FILES,
    find_config_file,
    get_work_dir,
    resolve_config_path,
)
from context_toolkit.config.prompts import (
    FlattenedPrompt,
    FlattenResult,
    PromptTemplateResolver,
    flatten_prompts,
)
from context_toolkit.config.registry import (
    AppliedImport,
    ConfigDiagnostics,
    DocumentEntry,
    ResolvedRegistry,
)

__all__ = [
    "DEFAULT_CONFIG_FILES",
    "AppliedImport",
    "ConfigDiagnostics",
    "ConfigParser",
    "DocumentEntry",
    "FlattenResult",
    "FlattenedPrompt",
    "ImportResolver",
    "PromptTemplateResolver",
    "ResolvedRegistry",
    "detect_format",
    "find_config_file",
    "flatten_prompts",
    "get_work_dir",
    "resolve_config_path",
]
