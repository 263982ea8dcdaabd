from context_toolkit.compiler.document import CompiledDocument, DocumentCompiler
from context_toolkit.compiler.pipeline import ContextGenerator
from context_toolkit.compiler.report import DocumentResult, GenerationReport

__all__ = [
    "CompiledDocument",
    "ContextGenerator",
    "DocumentCompiler",
    "DocumentResult",
    "GenerationReport",
]
