from context_toolkit.compiler import (
    CompiledDocument,
    ContextGenerator,
    DocumentCompiler,
    DocumentResult,
    GenerationReport,
)
from context_toolkit.config import (
    ConfigParser,
    FlattenedPrompt,
    ImportResolver,
    PromptTemplateResolver,
    ResolvedRegistry,
    flatten_prompts,
)
from context_toolkit.errors import (
    CollectedError,
    ConfigLoadError,
    ConfigParseError,
    ContextToolkitError,
    ErrorCollector,
    ImportSourceError,
    ModifierError,
    SourceFetchError,
)
from context_toolkit.models import Settings, load_settings
from context_toolkit.variables import VariableScope, substitute

__all__ = [
    "CollectedError",
    "CompiledDocument",
    "ConfigLoadError",
    "ConfigParseError",
    "ConfigParser",
    "ContextGenerator",
    "ContextToolkitError",
    "DocumentCompiler",
    "DocumentResult",
    "ErrorCollector",
    "FlattenedPrompt",
    "GenerationReport",
    "ImportResolver",
    "ImportSourceError",
    "ModifierError",
    "PromptTemplateResolver",
    "ResolvedRegistry",
    "Settings",
    "SourceFetchError",
    "VariableScope",
    "flatten_prompts",
    "load_settings",
    "substitute",
]
