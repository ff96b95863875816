"""
Tests for the botblocks command line.
"""

import json

import pytest
from typer.testing import CliRunner

from botblocks.cli import app
from botblocks.core.ir import Category
from botblocks.flex import convert_container

runner = CliRunner()


def _said(result) -> str:
    """Command output with rich line wrapping undone."""
    return " ".join(result.output.split())


@pytest.fixture
def project(tmp_path, hello_logic, bubble_graph):
    path = tmp_path / "project.json"
    data = {
        "logicBlocks": [b.to_dict() for b in hello_logic],
        "flexBlocks": [b.to_dict() for b in bubble_graph],
    }
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def _write_project(tmp_path, logic, flex=()):
    path = tmp_path / "custom.json"
    path.write_text(json.dumps({"logicBlocks": list(logic), "flexBlocks": list(flex)}), encoding="utf-8")
    return path


class TestCompileCommand:
    def test_source_to_file(self, project, tmp_path):
        out = tmp_path / "app.py"

        result = runner.invoke(app, ["compile", str(project), "-o", str(out)])

        assert result.exit_code == 0
        assert "Wrote" in _said(result)
        source = out.read_text(encoding="utf-8")
        assert "def handle_text_message_0(event):" in source
        assert "def flex_message_" in source

    def test_source_to_stdout(self, project):
        result = runner.invoke(app, ["compile", str(project)])

        assert result.exit_code == 0
        assert 'reply_messages.append(TextSendMessage(text="Hello"))' in result.output

    def test_document(self, project, tmp_path, bubble_graph):
        out = tmp_path / "card.json"

        result = runner.invoke(app, ["compile", str(project), "--mode", "document", "--output", str(out)])

        assert result.exit_code == 0
        assert json.loads(out.read_text(encoding="utf-8")) == convert_container(bubble_graph)

    def test_unknown_mode(self, project):
        result = runner.invoke(app, ["compile", str(project), "-m", "binary"])

        assert result.exit_code != 0

    def test_missing_project(self, tmp_path):
        result = runner.invoke(app, ["compile", str(tmp_path / "nope.json")])

        assert result.exit_code == 1
        assert "Cannot read project" in _said(result)

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{", encoding="utf-8")

        result = runner.invoke(app, ["compile", str(path)])

        assert result.exit_code == 1
        assert "not valid JSON" in _said(result)

    def test_fail_on_error(self, tmp_path, hello_logic):
        logic = [*(b.to_dict() for b in hello_logic), {"category": "reply", "blockType": "reply"}]
        path = _write_project(tmp_path, logic)
        out = tmp_path / "app.py"

        lenient = runner.invoke(app, ["compile", str(path), "-o", str(out)])
        strict = runner.invoke(app, ["compile", str(path), "--fail-on-error"])

        assert lenient.exit_code == 0
        assert out.exists()
        assert strict.exit_code == 1
        assert "error(s)" in _said(strict)

    def test_invalid_document_not_written(self, tmp_path, block):
        ids = [f"b{i}" for i in range(11)]
        flex = [block("carousel", Category.FLEX_CONTAINER, {"containerType": "carousel"}, children=ids).to_dict()]
        flex += [
            block(i, Category.FLEX_CONTAINER, {"containerType": "bubble"}, parent="carousel").to_dict() for i in ids
        ]
        path = _write_project(tmp_path, [], flex)
        out = tmp_path / "card.json"

        result = runner.invoke(app, ["compile", str(path), "-m", "document", "-o", str(out)])

        assert result.exit_code == 1
        assert "failed validation" in _said(result)
        assert not out.exists()


class TestValidateCommand:
    def test_valid_project(self, project):
        result = runner.invoke(app, ["validate", str(project)])

        assert result.exit_code == 0
        assert "OK: project is valid." in _said(result)

    def test_invalid_project(self, tmp_path, hello_logic):
        path = _write_project(tmp_path, [b.to_dict() for b in hello_logic], [hello_logic[0].to_dict()])

        result = runner.invoke(app, ["validate", str(path)])

        assert result.exit_code == 1
        assert "ERROR" in _said(result)

    def test_strict_config(self, tmp_path):
        path = _write_project(tmp_path, [])
        config = tmp_path / "botblocks.toml"
        config.write_text("[compiler]\nstrict = true\n", encoding="utf-8")

        lenient = runner.invoke(app, ["validate", str(path)])
        strict = runner.invoke(app, ["validate", str(path), "--config", str(config)])

        assert lenient.exit_code == 0
        assert strict.exit_code == 1

    def test_bad_config(self, project, tmp_path):
        config = tmp_path / "botblocks.toml"
        config.write_text("[limits]\nmax_widgets = 1\n", encoding="utf-8")

        result = runner.invoke(app, ["validate", str(project), "-c", str(config)])

        assert result.exit_code == 1
        assert "Unknown limit" in _said(result)


class TestRegistryCommands:
    def test_blocks(self):
        result = runner.invoke(app, ["blocks"])

        assert result.exit_code == 0
        assert "Block definitions" in _said(result)

    def test_blocks_by_category(self):
        result = runner.invoke(app, ["blocks", "--category", "reply", "--context", "logic"])

        assert result.exit_code == 0
        assert "reply" in _said(result)

    def test_blocks_no_match(self):
        result = runner.invoke(app, ["blocks", "--search", "zzzz-nothing"])

        assert result.exit_code == 1
        assert "No matching blocks" in _said(result)

    def test_blocks_bad_category(self):
        result = runner.invoke(app, ["blocks", "--category", "widget"])

        assert result.exit_code != 0

    def test_aliases(self):
        result = runner.invoke(app, ["aliases", "text_reply"])

        assert result.exit_code == 0
        assert "text_reply -> reply (text)" in _said(result)
        assert "text-reply" in _said(result)

    def test_aliases_of_family(self):
        result = runner.invoke(app, ["aliases", "setting"])

        assert result.exit_code == 0

    def test_no_aliases(self):
        result = runner.invoke(app, ["aliases", "mystery"])

        assert result.exit_code == 1
        assert "No aliases for 'mystery'" in _said(result)


def test_version():
    result = runner.invoke(app, ["--version"])

    assert result.exit_code == 0
    assert result.output.startswith("botblocks ")
