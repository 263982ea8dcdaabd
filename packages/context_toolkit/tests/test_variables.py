from __future__ import annotations

from pathlib import Path

import pytest
from context_toolkit.variables import (
    VariableScope,
    load_env_variables,
    predefined_variables,
    substitute,
    substitute_env,
    unresolved_tokens,
)


def test_merge_prefers_override_and_keeps_operands() -> None:
    base = VariableScope({"A": "base", "B": "kept"})
    override = VariableScope({"A": "override"})

    merged = VariableScope.merge(base, override)

    assert merged["A"] == "override"
    assert merged["B"] == "kept"
    assert base["A"] == "base"
    assert dict(override) == {"A": "override"}


def test_values_are_stringified() -> None:
    scope = VariableScope({"FLAG": True, "COUNT": 3, "EMPTY": None})

    assert scope.to_dict() == {"FLAG": "true", "COUNT": "3", "EMPTY": ""}


def test_scope_is_immutable() -> None:
    scope = VariableScope({"A": "1"})

    with pytest.raises(TypeError):
        scope.values["A"] = "2"  # type: ignore[index]


def test_substitute_replaces_known_and_keeps_unknown_tokens() -> None:
    scope = VariableScope({"NAME": "world"})

    assert substitute("Hello {{NAME}} and {{ MISSING }}", scope) == (
        "Hello world and {{ MISSING }}"
    )


def test_substitute_is_single_pass() -> None:
    scope = VariableScope({"A": "{{B}}", "B": "nested"})

    assert substitute("{{A}}", scope) == "{{B}}"


def test_substitute_env_only_touches_dollar_tokens() -> None:
    scope = VariableScope({"HOST": "example.com"})

    assert substitute_env("https://${HOST}/{{HOST}}", scope) == "https://example.com/{{HOST}}"


def test_unresolved_tokens_lists_remaining_keys() -> None:
    assert unresolved_tokens("{{A}} text {{ B }}") == ["A", "B"]


def test_env_file_overrides_process_environment(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("CONTEXT_TEST_TOKEN", "from-process")
    env_file = tmp_path / ".env.test"
    env_file.write_text("CONTEXT_TEST_TOKEN=from-file\nEXTRA=1\n", encoding="utf-8")

    scope = load_env_variables(env_file)

    assert scope["CONTEXT_TEST_TOKEN"] == "from-file"
    assert scope["EXTRA"] == "1"


def test_predefined_variables_include_root_path(tmp_path: Path) -> None:
    scope = predefined_variables(tmp_path)

    assert scope["ROOT_PATH"] == str(tmp_path.resolve())
    assert {"DATE", "TIME", "DATETIME", "TIMESTAMP", "OS"} <= set(scope)
