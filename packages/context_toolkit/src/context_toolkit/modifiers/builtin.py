"""Built-in modifiers: ``sanitizer`` and ``content-filter``."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any

from context_toolkit.errors import ModifierError

PREDEFINED_PATTERNS: dict[str, dict[str, str]] = {
    "credit-card": {r"\b(?:\d{4}[-\s]?){3}\d{4}\b|\b\d{16}\b": "[CREDIT_CARD_REMOVED]"},
    "email": {r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b": "[EMAIL_REMOVED]"},
    "api-key": {
        r"\b[A-Za-z0-9_-]{32,}\b"
        r"|\b[A-Za-z0-9]{8}-[A-Za-z0-9]{4}-[A-Za-z0-9]{4}-[A-Za-z0-9]{4}-[A-Za-z0-9]{12}\b": (
            "[API_KEY_REMOVED]"
        )
    },
    "ip-address": {r"\b(?:\d{1,3}\.){3}\d{1,3}\b": "[IP_ADDRESS_REMOVED]"},
    "jwt": {
        r"\beyJ[a-zA-Z0-9_-]{10,}\.[a-zA-Z0-9_-]{10,}\.[a-zA-Z0-9_-]{10,}\b": "[JWT_TOKEN_REMOVED]"
    },
    "phone-number": {
        r"\b(?:\+\d{1,3}[-\s]?)?\(?\d{3}\)?[-\s]?\d{3}[-\s]?\d{4}\b": "[PHONE_NUMBER_REMOVED]"
    },
    "password-field": {
        r"(?i)\b(?:password|passwd|pwd|secret)\s*=\s*[\"'].*?[\"']": "[PASSWORD_REMOVED]"
    },
    "url": {
        r"https?://(?:www\.)?[-a-zA-Z0-9@:%._+~#=]{1,256}\.[a-zA-Z0-9()]{1,6}\b"
        r"(?:[-a-zA-Z0-9()@:%_+.~#?&/=]*)": "[URL_REMOVED]"
    },
    "social-security": {r"\b\d{3}-\d{2}-\d{4}\b": "[SSN_REMOVED]"},
    "aws-key": {r"\bAKIA[0-9A-Z]{16}\b": "[AWS_KEY_REMOVED]"},
    "private-key": {
        r"-----BEGIN (?:RSA|DSA|EC|OPENSSH|PRIVATE) KEY-----": "[PRIVATE_KEY_REMOVED]"
    },
    "database-conn": {
        r"(?:jdbc:(?:mysql|postgresql|oracle)://[^\s\"']+|mongodb(?:\+srv)?://[^\s\"']+)": (
            "[DATABASE_CONNECTION_REMOVED]"
        )
    },
}

_BLANK_RUNS = re.compile(r"\n[ \t]*\n(?:[ \t]*\n)+")


@dataclass(frozen=True)
class KeywordRule:
    """Replace keywords, or whole lines containing them."""

    keywords: list[str]
    replacement: str = "[REMOVED]"
    case_sensitive: bool = False
    remove_lines: bool = True

    def apply(self, text: str) -> str:
        keywords = [keyword for keyword in self.keywords if keyword]
        if not keywords:
            return text
        flags = 0 if self.case_sensitive else re.IGNORECASE
        pattern = re.compile("|".join(re.escape(keyword) for keyword in keywords), flags)
        if not self.remove_lines:
            return pattern.sub(self.replacement, text)
        return "\n".join(
            self.replacement if pattern.search(line) else line for line in text.split("\n")
        )


@dataclass(frozen=True)
class RegexRule:
    """Replace every match of each pattern with its replacement."""

    patterns: dict[str, str] = field(default_factory=dict)

    def apply(self, text: str) -> str:
        for pattern, replacement in self.patterns.items():
            text = re.sub(pattern, replacement, text)
        return text


def build_rule(config: Any) -> KeywordRule | RegexRule:
    """Create a sanitizer rule from its configuration mapping."""
    if not isinstance(config, dict) or "type" not in config:
        msg = "Sanitizer rule must be a mapping with a 'type' field"
        raise ModifierError(msg)

    rule_type = config["type"]
    if rule_type == "keyword":
        keywords = config.get("keywords")
        if not isinstance(keywords, list):
            msg = "Keyword rule must include a 'keywords' list"
            raise ModifierError(msg)
        return KeywordRule(
            keywords=[str(keyword) for keyword in keywords],
            replacement=str(config.get("replacement", "[REMOVED]")),
            case_sensitive=bool(config.get("caseSensitive", False)),
            remove_lines=bool(config.get("removeLines", True)),
        )

    if rule_type == "regex":
        patterns = config.get("patterns") or {}
        if not isinstance(patterns, dict):
            msg = "Regex rule 'patterns' must be a mapping of pattern to replacement"
            raise ModifierError(msg)
        merged = {str(key): str(value) for key, value in patterns.items()}
        for alias in config.get("usePatterns") or []:
            merged.update(PREDEFINED_PATTERNS.get(alias, {}))
        if not merged:
            msg = "Regex rule must include 'patterns' or 'usePatterns'"
            raise ModifierError(msg)
        return RegexRule(patterns=merged)

    msg = f"Unsupported sanitizer rule type: {rule_type}"
    raise ModifierError(msg)


class SanitizerModifier:
    """Redact sensitive content with keyword and regex rules."""

    name = "sanitizer"

    def apply(self, text: str, options: dict[str, Any]) -> str | None:
        rules = options.get("rules") or []
        if not isinstance(rules, list):
            msg = "sanitizer 'rules' must be a list"
            raise ModifierError(msg)
        for rule in rules:
            text = build_rule(rule).apply(text)
        return text


class ContentFilterModifier:
    """Keep or drop lines by regular expression and cap the output length.

    Options:
        include: Patterns; when given, only matching lines are kept.
        exclude: Patterns; matching lines are removed.
        max_lines: Keep at most this many lines (0 means unlimited).
        collapse_blank_lines: Squash runs of blank lines (default ``True``).
        drop_empty: Drop the content entirely when nothing is left.
    """

    name = "content-filter"

    def apply(self, text: str, options: dict[str, Any]) -> str | None:
        include = [re.compile(pattern) for pattern in options.get("include") or []]
        exclude = [re.compile(pattern) for pattern in options.get("exclude") or []]
        max_lines = int(options.get("max_lines", options.get("maxLines", 0)) or 0)
        if max_lines < 0:
            msg = "content-filter 'max_lines' must not be negative"
            raise ModifierError(msg)

        lines = text.split("\n")
        if include:
            lines = [line for line in lines if any(p.search(line) for p in include)]
        if exclude:
            lines = [line for line in lines if not any(p.search(line) for p in exclude)]
        if max_lines:
            lines = lines[:max_lines]

        result = "\n".join(lines)
        if options.get("collapse_blank_lines", True):
            result = _BLANK_RUNS.sub("\n\n", result)
        if options.get("drop_empty", False) and not result.strip():
            return None
        return result
