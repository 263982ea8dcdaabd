"""Run-level generation report."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Literal

from context_toolkit.errors import ErrorCollector

if TYPE_CHECKING:
    from context_toolkit.compiler.document import CompiledDocument
    from context_toolkit.config.prompts import FlattenedPrompt
    from context_toolkit.config.registry import AppliedImport
    from context_toolkit.models.config import Tool

MESSAGE_SUCCESS = "Documents compiled successfully"
MESSAGE_NO_DOCUMENTS = "No documents found in configuration."
MESSAGE_LOAD_FAILED = "Failed to load configuration"


@dataclass(frozen=True)
class DocumentResult:
    context_path: str
    output_path: str
    status: str
    errors: list[str] = field(default_factory=list)

    @classmethod
    def from_compiled(cls, compiled: CompiledDocument, context_path: str) -> DocumentResult:
        return cls(
            context_path=context_path,
            output_path=compiled.output_path,
            status=compiled.status,
            errors=compiled.errors.messages(),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "context_path": self.context_path,
            "output_path": self.output_path,
            "status": self.status,
            "errors": list(self.errors),
        }


@dataclass
class GenerationReport:
    """Outcome of one generation run, serializable with ``to_dict``."""

    status: Literal["success", "error"] = "success"
    message: str = MESSAGE_SUCCESS
    results: list[DocumentResult] = field(default_factory=list)
    imports: list[AppliedImport] = field(default_factory=list)
    prompts: list[FlattenedPrompt] = field(default_factory=list)
    tools: list[Tool] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    errors: ErrorCollector = field(default_factory=ErrorCollector)

    @property
    def ok(self) -> bool:
        return self.status == "success"

    @classmethod
    def failed(cls, message: str, errors: ErrorCollector) -> GenerationReport:
        return cls(status="error", message=message, errors=errors)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "status": self.status,
            "message": self.message,
            "result": [item.to_dict() for item in self.results],
            "imports": [{"path": item.path, "type": item.type} for item in self.imports],
            "prompts": [prompt.to_dict() for prompt in self.prompts],
            "tools": [tool.to_dict() for tool in self.tools],
            "warnings": list(self.warnings),
        }
        if self.errors.has_errors():
            payload["errors"] = self.errors.messages()
        return payload
