from __future__ import annotations

from context_toolkit.markdown_utils import code_block, language_for, render_tree, tagged, title


def test_title_clamps_level() -> None:
    assert title("Overview") == "# Overview"
    assert title("Deep", level=9) == "###### Deep"


def test_tagged_skips_empty_tag() -> None:
    assert tagged("body", "") == "body"
    assert tagged("\nbody\n", "NOTE") == "<NOTE>\nbody\n</NOTE>"


def test_code_block_grows_fence_around_backticks() -> None:
    block = code_block("```inner```", "md", "README.md")

    assert block == "````md\n// Path: README.md\n```inner```\n````"


def test_language_for_uses_suffix() -> None:
    assert language_for("src/app.PY") == "py"
    assert language_for("Makefile") is None


def test_render_tree_with_root_label() -> None:
    assert render_tree(["b.txt", "a/x.py"], root_label="repo") == (
        "repo\n├── a/\n│   └── x.py\n└── b.txt"
    )
