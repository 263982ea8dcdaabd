"""Named content modifiers and the chain that applies them."""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, Any, Protocol

from context_toolkit.errors import ModifierError

if TYPE_CHECKING:
    from collections.abc import Iterable

    from context_toolkit.models.config import ModifierRef

logger = logging.getLogger(__name__)


class ContentModifier(Protocol):
    """Transform fetched content; returning ``None`` drops it."""

    name: str

    def apply(self, text: str, options: dict[str, Any]) -> str | None: ...


class ModifierRegistry:
    def __init__(self) -> None:
        self._modifiers: dict[str, ContentModifier] = {}

    def register(self, modifier: ContentModifier) -> None:
        self._modifiers[modifier.name] = modifier

    def get(self, name: str) -> ContentModifier:
        modifier = self._modifiers.get(name)
        if modifier is None:
            msg = f"Unknown modifier '{name}' (available: {', '.join(self.names())})"
            raise ModifierError(msg)
        return modifier

    def names(self) -> list[str]:
        return sorted(self._modifiers)


class ContentModifierChain:
    """Apply a sequence of modifier references in declaration order."""

    def __init__(self, registry: ModifierRegistry) -> None:
        self._registry = registry

    def apply(self, text: str, modifiers: Iterable[ModifierRef], *, origin: str = "") -> str | None:
        """Run every modifier over ``text``.

        Returns ``None`` as soon as one modifier drops the content. Unknown
        modifiers and invalid options raise ``ModifierError``.
        """
        current = text
        for ref in modifiers:
            modifier = self._registry.get(ref.name)
            try:
                result = modifier.apply(current, dict(ref.options))
            except ModifierError:
                raise
            except (ValueError, TypeError, re.error) as exc:
                msg = f"Modifier '{ref.name}' failed: {exc}"
                raise ModifierError(msg) from exc
            if result is None:
                logger.debug("Modifier %s dropped content from %s", ref.name, origin or "-")
                return None
            current = result
        return current
