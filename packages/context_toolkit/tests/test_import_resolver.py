from __future__ import annotations

from pathlib import Path

import httpx
import pytest
from context_toolkit.config import ImportResolver
from context_toolkit.errors import ConfigLoadError
from context_toolkit.http_client import HttpClient
from context_toolkit.models import FileSource
from context_toolkit.variables import VariableScope


def _write(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def _doc(output_path: str) -> str:
    return f"  - description: {output_path}\n    outputPath: {output_path}\n"


def _outputs(resolver: ImportResolver, config: Path) -> list[str]:
    registry, _ = resolver.resolve(config)
    return [document.output_path for document in registry.documents]


def test_diamond_import_keeps_documents_once(tmp_path: Path) -> None:
    _write(tmp_path / "b.yaml", "documents:\n" + _doc("b.md"))
    _write(tmp_path / "c.yaml", "import:\n  - path: b.yaml\ndocuments:\n" + _doc("c.md"))
    _write(
        tmp_path / "a.yaml",
        "import:\n  - path: b.yaml\n  - path: c.yaml\ndocuments:\n" + _doc("a.md"),
    )

    assert _outputs(ImportResolver(tmp_path), tmp_path / "a.yaml") == ["b.md", "c.md", "a.md"]


def test_circular_import_is_skipped_with_warning(tmp_path: Path) -> None:
    _write(tmp_path / "a.yaml", "import:\n  - path: b.yaml\ndocuments:\n" + _doc("a.md"))
    _write(tmp_path / "b.yaml", "import:\n  - path: a.yaml\ndocuments:\n" + _doc("b.md"))

    registry, warnings = ImportResolver(tmp_path).resolve(tmp_path / "a.yaml")

    assert [document.output_path for document in registry.documents] == ["b.md", "a.md"]
    assert any("Circular import detected" in warning for warning in warnings)


def test_self_import_terminates(tmp_path: Path) -> None:
    _write(tmp_path / "a.yaml", "import:\n  - path: a.yaml\ndocuments:\n" + _doc("a.md"))

    registry, warnings = ImportResolver(tmp_path).resolve("a.yaml")

    assert [document.output_path for document in registry.documents] == ["a.md"]
    assert warnings


def test_selective_import_by_docs(tmp_path: Path) -> None:
    _write(
        tmp_path / "base.yaml",
        "documents:\n" + _doc("first.md") + _doc("second.md") + _doc("third.md"),
    )
    _write(
        tmp_path / "main.yaml",
        "import:\n  - path: base.yaml\n    docs: [first.md, third.md]\n",
    )

    assert _outputs(ImportResolver(tmp_path), tmp_path / "main.yaml") == ["first.md", "third.md"]


def test_path_prefix_applies_before_docs_filter(tmp_path: Path) -> None:
    _write(tmp_path / "base.yaml", "documents:\n" + _doc("one.md") + _doc("two.md"))
    _write(
        tmp_path / "main.yaml",
        "import:\n  - path: base.yaml\n    pathPrefix: api/\n    docs: [api/two.md]\n",
    )

    assert _outputs(ImportResolver(tmp_path), tmp_path / "main.yaml") == ["api/two.md"]


def test_wildcard_import_is_sorted(tmp_path: Path) -> None:
    _write(tmp_path / "parts" / "b.yaml", "documents:\n" + _doc("b.md"))
    _write(tmp_path / "parts" / "a.yaml", "documents:\n" + _doc("a.md"))
    _write(tmp_path / "main.yaml", "import:\n  - path: parts/*.yaml\n")

    registry, _ = ImportResolver(tmp_path).resolve(tmp_path / "main.yaml")

    assert [document.output_path for document in registry.documents] == ["a.md", "b.md"]
    assert [item.path for item in registry.imports] == ["parts/a.yaml", "parts/b.yaml"]


def test_wildcard_without_matches_warns(tmp_path: Path) -> None:
    _write(tmp_path / "main.yaml", "import:\n  - path: nothing/*.yaml\n")

    registry, warnings = ImportResolver(tmp_path).resolve(tmp_path / "main.yaml")

    assert registry.documents == []
    assert any("No files match" in warning for warning in warnings)


def test_missing_import_is_a_warning(tmp_path: Path) -> None:
    _write(tmp_path / "main.yaml", "import:\n  - path: missing.yaml\ndocuments:\n" + _doc("a.md"))

    registry, warnings = ImportResolver(tmp_path).resolve(tmp_path / "main.yaml")

    assert [document.output_path for document in registry.documents] == ["a.md"]
    assert any("Failed to import 'missing.yaml'" in warning for warning in warnings)


def test_malformed_import_is_a_warning(tmp_path: Path) -> None:
    _write(tmp_path / "broken.json", "{not json")
    _write(tmp_path / "main.yaml", "import:\n  - path: broken.json\ndocuments:\n" + _doc("a.md"))

    registry, warnings = ImportResolver(tmp_path).resolve(tmp_path / "main.yaml")

    assert len(registry.documents) == 1
    assert any("Invalid JSON" in warning for warning in warnings)


def test_non_utf8_import_is_a_warning(tmp_path: Path) -> None:
    (tmp_path / "latin.yaml").write_bytes(b"documents: \xff\xfe\n")
    _write(tmp_path / "main.yaml", "import:\n  - path: latin.yaml\ndocuments:\n" + _doc("m.md"))

    registry, warnings = ImportResolver(tmp_path).resolve(tmp_path / "main.yaml")

    assert [document.output_path for document in registry.documents] == ["m.md"]
    assert any("Failed to import 'latin.yaml'" in warning for warning in warnings)
    assert any("not valid UTF-8" in warning for warning in warnings)


def test_missing_root_config_raises(tmp_path: Path) -> None:
    with pytest.raises(ConfigLoadError):
        ImportResolver(tmp_path).resolve(tmp_path / "context.yaml")


def test_importer_variables_override_imported(tmp_path: Path) -> None:
    _write(
        tmp_path / "base.yaml",
        "variables:\n  SHARED_VAR: base-shared-value\n  BASE_VAR: base-variable-value\n",
    )
    _write(
        tmp_path / "main.yaml",
        "import:\n  - path: base.yaml\nvariables:\n  SHARED_VAR: main-shared-value\n",
    )
    resolver = ImportResolver(tmp_path, base_variables=VariableScope({"BASE_VAR": "predefined"}))

    registry, _ = resolver.resolve(tmp_path / "main.yaml")

    assert registry.variables["SHARED_VAR"] == "main-shared-value"
    assert registry.variables["BASE_VAR"] == "base-variable-value"


def test_env_tokens_expand_in_import_paths(tmp_path: Path) -> None:
    _write(tmp_path / "shared" / "base.yaml", "documents:\n" + _doc("base.md"))
    _write(tmp_path / "main.yaml", "import:\n  - path: ${SHARED_DIR}/base.yaml\n")
    resolver = ImportResolver(tmp_path, env=VariableScope({"SHARED_DIR": "shared"}))

    assert _outputs(resolver, tmp_path / "main.yaml") == ["base.md"]


def test_imported_source_paths_are_rebased(tmp_path: Path) -> None:
    _write(
        tmp_path / "sub" / "base.yaml",
        "documents:\n  - outputPath: base.md\n    sources:\n"
        "      - type: file\n        sourcePaths: [src]\n",
    )
    _write(tmp_path / "main.yaml", "import:\n  - path: sub/base.yaml\n")

    registry, _ = ImportResolver(tmp_path).resolve(tmp_path / "main.yaml")

    source = registry.documents[0].sources[0]
    assert isinstance(source, FileSource)
    assert source.source_paths == ["sub/src"]


def test_local_declarations_win_over_imports(tmp_path: Path) -> None:
    _write(
        tmp_path / "base.yaml",
        "prompts:\n  - id: greet\n    messages:\n      - role: user\n        content: base\n",
    )
    _write(
        tmp_path / "main.yaml",
        "import:\n  - path: base.yaml\n"
        "prompts:\n  - id: greet\n    messages:\n      - role: user\n        content: main\n",
    )

    registry, _ = ImportResolver(tmp_path).resolve(tmp_path / "main.yaml")

    assert len(registry.prompts) == 1
    assert registry.prompts[0].messages[0].content == "main"


def test_import_filter_selects_prompts_by_id_and_tag(tmp_path: Path) -> None:
    _write(
        tmp_path / "base.yaml",
        """
prompts:
  - id: keep
    tags: [review]
    messages: [{role: user, content: a}]
  - id: wrong-tag
    tags: [draft]
    messages: [{role: user, content: b}]
  - id: other
    tags: [review]
    messages: [{role: user, content: c}]
tools:
  - id: keep
    tags: [review]
""",
    )
    _write(
        tmp_path / "main.yaml",
        """
import:
  - path: base.yaml
    filter:
      ids: [keep, wrong-tag]
      tags:
        include: [review]
""",
    )

    registry, _ = ImportResolver(tmp_path).resolve(tmp_path / "main.yaml")

    assert [prompt.id for prompt in registry.prompts] == ["keep"]
    assert [tool.id for tool in registry.tools] == ["keep"]


def test_url_import_uses_http_client(tmp_path: Path) -> None:
    requested: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requested.append(str(request.url))
        assert request.headers["Authorization"] == "Bearer secret"
        return httpx.Response(
            200,
            headers={"content-type": "application/json"},
            text='{"documents": [{"outputPath": "remote.md"}]}',
        )

    http = HttpClient(client=httpx.Client(transport=httpx.MockTransport(handler)))
    _write(
        tmp_path / "main.yaml",
        "import:\n  - url: https://example.com/shared\n"
        "    headers:\n      Authorization: Bearer ${TOKEN}\n",
    )
    resolver = ImportResolver(tmp_path, env=VariableScope({"TOKEN": "secret"}), http=http)

    registry, warnings = resolver.resolve(tmp_path / "main.yaml")

    assert requested == ["https://example.com/shared"]
    assert [document.output_path for document in registry.documents] == ["remote.md"]
    assert [(item.path, item.type) for item in registry.imports] == [
        ("https://example.com/shared", "url")
    ]
    assert warnings == []


def test_url_import_failure_is_a_warning(tmp_path: Path) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, text="missing")

    http = HttpClient(client=httpx.Client(transport=httpx.MockTransport(handler)))
    _write(tmp_path / "main.yaml", "import:\n  - url: https://example.com/c.yaml\n")

    registry, warnings = ImportResolver(tmp_path, http=http).resolve(tmp_path / "main.yaml")

    assert registry.documents == []
    assert any("status code: 404" in warning for warning in warnings)


def test_inline_configuration_resolves_against_root(tmp_path: Path) -> None:
    _write(tmp_path / "base.yaml", "documents:\n" + _doc("base.md"))

    registry, _ = ImportResolver(tmp_path).resolve_inline(
        '{"import": [{"path": "base.yaml"}], "documents": [{"outputPath": "inline.md"}]}'
    )

    assert [document.output_path for document in registry.documents] == ["base.md", "inline.md"]
