"""Markdown rendering helpers."""

from __future__ import annotations

from pathlib import PurePosixPath


def title(text: str, level: int = 1) -> str:
    """Render a Markdown heading."""
    level = min(max(level, 1), 6)
    return f"{'#' * level} {text.strip()}".rstrip()


def tagged(content: str, tag: str) -> str:
    """Wrap content in ``<tag>...</tag>``; return it unchanged when tag is empty."""
    if not tag:
        return content
    body = content.strip("\n")
    return f"<{tag}>\n{body}\n</{tag}>"


def code_block(code: str, language: str | None = None, path: str | None = None) -> str:
    """Render a fenced code block with an optional path comment."""
    fence = "```"
    while fence in code:
        fence += "`"
    header = f"{fence}{language or ''}"
    lines = [header]
    if path:
        lines.append(f"// Path: {path}")
    lines.append(code.rstrip("\n"))
    lines.append(fence)
    return "\n".join(lines)


def language_for(path: str) -> str | None:
    """Guess the code fence language from a file extension."""
    suffix = PurePosixPath(path).suffix.lstrip(".").lower()
    return suffix or None


def render_tree(paths: list[str], root_label: str = "") -> str:
    """Render relative POSIX paths as an ASCII directory tree."""
    tree: dict[str, dict] = {}
    for path in sorted(paths):
        node = tree
        for part in PurePosixPath(path).parts:
            node = node.setdefault(part, {})

    lines: list[str] = [root_label] if root_label else []

    def _walk(node: dict[str, dict], prefix: str) -> None:
        # directories first, then files, each alphabetically
        items = sorted(node.items(), key=lambda item: (not item[1], item[0]))
        for index, (name, children) in enumerate(items):
            last = index == len(items) - 1
            connector = "└── " if last else "├── "
            lines.append(f"{prefix}{connector}{name}{'/' if children else ''}")
            if children:
                _walk(children, prefix + ("    " if last else "│   "))

    _walk(tree, "")
    return "\n".join(lines)

