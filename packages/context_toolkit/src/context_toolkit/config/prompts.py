"""Flatten prompt ``extend`` chains into standalone prompts."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from context_toolkit.models.config import Message
from context_toolkit.variables import VariableScope, substitute

if TYPE_CHECKING:
    from collections.abc import Iterable

    from context_toolkit.config.registry import ResolvedRegistry
    from context_toolkit.models.config import Prompt

logger = logging.getLogger(__name__)

VALID_ROLES = frozenset({"user", "assistant"})


@dataclass(frozen=True)
class FlattenResult:
    """Outcome of flattening one prompt node: messages or a failure reason."""

    messages: tuple[Message, ...] = ()
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def failure(cls, reason: str) -> FlattenResult:
        return cls(error=reason)


@dataclass(frozen=True)
class FlattenedPrompt:
    """A prompt whose inherited messages have been inlined."""

    id: str
    description: str
    messages: tuple[Message, ...]
    tags: tuple[str, ...] = ()
    input_schema: dict[str, Any] | None = None
    extend: tuple[dict[str, Any], ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "id": self.id,
            "type": "prompt",
            "description": self.description,
            "tags": list(self.tags),
            "messages": [
                {"role": message.role, "content": message.content} for message in self.messages
            ],
            "extend": [dict(item) for item in self.extend],
        }
        if self.input_schema is not None:
            payload["schema"] = self.input_schema
        return payload


def _validate_messages(prompt: Prompt) -> str | None:
    for index, message in enumerate(prompt.messages):
        if message.role not in VALID_ROLES:
            role = message.role or "<missing>"
            return f"message at index {index} has invalid role '{role}'"
        if not message.content.strip():
            return f"message at index {index} has empty content"
    return None


class PromptTemplateResolver:
    """Resolve ``extend`` chains among prompts and templates."""

    def __init__(self, prompts: Iterable[Prompt]) -> None:
        self._prompts: dict[str, Prompt] = {}
        for prompt in prompts:
            self._prompts.pop(prompt.id, None)
            self._prompts[prompt.id] = prompt

    def flatten(self) -> tuple[list[FlattenedPrompt], list[str]]:
        """Return emitted prompts and the warnings for rejected ones."""
        accepted: list[FlattenedPrompt] = []
        warnings: list[str] = []
        for prompt in self._prompts.values():
            if prompt.is_template:
                continue
            if not prompt.id:
                warnings.append("Prompt rejected: prompt must have a non-empty id")
                continue
            result = self._flatten(prompt, ())
            if not result.ok:
                warnings.append(f"Prompt '{prompt.id}' rejected: {result.error}")
                continue
            accepted.append(
                FlattenedPrompt(
                    id=prompt.id,
                    description=prompt.description,
                    messages=result.messages,
                    tags=tuple(prompt.tags),
                    input_schema=prompt.input_schema,
                    extend=tuple(
                        {"id": item.id, "arguments": dict(item.arguments)} for item in prompt.extend
                    ),
                )
            )
        for warning in warnings:
            logger.warning(warning)
        return accepted, warnings

    def _flatten(self, prompt: Prompt, visiting: tuple[str, ...]) -> FlattenResult:
        if prompt.id in visiting:
            chain = " -> ".join((*visiting, prompt.id))
            return FlattenResult.failure(f"circular template extension ({chain})")
        visiting = (*visiting, prompt.id)

        inherited: list[Message] = []
        for index, extension in enumerate(prompt.extend):
            if not extension.id:
                return FlattenResult.failure(f"extension at index {index} has no template id")
            template = self._prompts.get(extension.id)
            if template is None:
                return FlattenResult.failure(f"template '{extension.id}' not found")
            parent = self._flatten(template, visiting)
            if not parent.ok:
                if parent.error and parent.error.startswith("circular"):
                    return parent
                reason = f"template '{extension.id}' is invalid: {parent.error}"
                return FlattenResult.failure(reason)
            arguments = VariableScope(extension.arguments)
            inherited.extend(
                Message(role=message.role, content=substitute(message.content, arguments))
                for message in parent.messages
            )

        error = _validate_messages(prompt)
        if error is not None:
            return FlattenResult.failure(error)

        messages = (*inherited, *prompt.messages)
        if not messages:
            kind = "template" if prompt.is_template else "prompt"
            return FlattenResult.failure(f"{kind} has no messages")
        return FlattenResult(messages=tuple(messages))


def flatten_prompts(registry: ResolvedRegistry) -> tuple[list[FlattenedPrompt], list[str]]:
    """Flatten every emitted prompt of a resolved registry."""
    return PromptTemplateResolver(registry.prompts).flatten()
