from context_toolkit.modifiers.builtin import (
    ContentFilterModifier,
    KeywordRule,
    RegexRule,
    SanitizerModifier,
    build_rule,
)
from context_toolkit.modifiers.registry import (
    ContentModifier,
    ContentModifierChain,
    ModifierRegistry,
)


def build_default_modifiers() -> ModifierRegistry:
    """Create a registry holding every built-in modifier."""
    registry = ModifierRegistry()
    registry.register(SanitizerModifier())
    registry.register(ContentFilterModifier())
    return registry


__all__ = [
    "ContentFilterModifier",
    "ContentModifier",
    "ContentModifierChain",
    "KeywordRule",
    "ModifierRegistry",
    "RegexRule",
    "SanitizerModifier",
    "build_default_modifiers",
    "build_rule",
]
