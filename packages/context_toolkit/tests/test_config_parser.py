from __future__ import annotations

from pathlib import Path

import pytest
from context_toolkit.config import ConfigDiagnostics, ConfigParser, detect_format
from context_toolkit.errors import ConfigLoadError, ConfigParseError
from context_toolkit.models import FileSource, TextSource


class TestConfigParser:
    """Parsing a single configuration file."""

    def test_parses_yaml_documents_and_sources(self) -> None:
        text = """
variables:
  NAME: demo
  ENABLED: true
documents:
  - description: Overview
    outputPath: docs/overview.md
    tags: [core]
    sources:
      - type: text
        content: Hello {{NAME}}
      - type: file
        sourcePaths: src
        filePattern: "*.py"
"""
        raw = ConfigParser().parse(text, fmt="yaml")

        assert raw.variables == {"NAME": "demo", "ENABLED": "true"}
        document = raw.documents[0]
        assert document.output_path == "docs/overview.md"
        assert isinstance(document.sources[0], TextSource)
        assert document.sources[0].tag == "INSTRUCTION"
        assert isinstance(document.sources[1], FileSource)
        assert document.sources[1].source_paths == ["src"]
        assert document.sources[1].file_pattern == ["*.py"]

    def test_sniffs_json_without_format(self) -> None:
        raw = ConfigParser().parse('{"documents": [{"outputPath": "a.md"}]}')

        assert raw.documents[0].output_path == "a.md"

    def test_empty_file_yields_empty_config(self) -> None:
        raw = ConfigParser().parse("", fmt="yaml")

        assert raw.documents == []
        assert raw.imports == []

    def test_invalid_json_raises_parse_error(self) -> None:
        with pytest.raises(ConfigParseError, match="Invalid JSON"):
            ConfigParser().parse("{not json", fmt="json")

    def test_top_level_must_be_mapping(self) -> None:
        with pytest.raises(ConfigParseError, match="mapping"):
            ConfigParser().parse("- a\n- b\n", fmt="yaml")

    def test_document_without_output_path_is_rejected(self) -> None:
        with pytest.raises(ConfigParseError, match="document at index 0"):
            ConfigParser().parse('{"documents": [{"description": "x"}]}')

    def test_absolute_output_path_is_rejected(self) -> None:
        with pytest.raises(ConfigParseError, match="outputPath must be relative"):
            ConfigParser().parse('{"documents": [{"outputPath": "/etc/context.md"}]}')

    def test_unknown_source_type_is_rejected(self) -> None:
        text = '{"documents": [{"outputPath": "a.md", "sources": [{"type": "ftp"}]}]}'
        with pytest.raises(ConfigParseError):
            ConfigParser().parse(text)

    def test_bad_prompt_entries_are_dropped_with_warning(self) -> None:
        diagnostics = ConfigDiagnostics()
        text = """
prompts:
  - id: good
    messages:
      - role: user
        content: Hi
  - just-a-string
tools:
  - description: missing id
"""
        raw = ConfigParser().parse(text, fmt="yaml", diagnostics=diagnostics)

        assert [prompt.id for prompt in raw.prompts] == ["good"]
        assert raw.tools == []
        assert len(diagnostics.warnings) == 2

    def test_import_type_is_inferred(self) -> None:
        text = """
import:
  - path: base.yaml
  - url: https://example.com/shared.yaml
"""
        raw = ConfigParser().parse(text, fmt="yaml")

        assert [item.type for item in raw.imports] == ["local", "url"]

    def test_import_without_target_is_rejected(self) -> None:
        with pytest.raises(ConfigParseError):
            ConfigParser().parse('{"import": [{"docs": ["a.md"]}]}')

    def test_parse_file_missing_raises_load_error(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigLoadError, match="Unable to read"):
            ConfigParser().parse_file(tmp_path / "missing.yaml")


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("context.yaml", "yaml"),
        ("context.YML", "yaml"),
        ("https://example.com/c.json?ref=main", "json"),
        ("context.toml", None),
    ],
)
def test_detect_format(name: str, expected: str | None) -> None:
    assert detect_format(name) == expected
