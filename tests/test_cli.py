from __future__ import annotations

import base64
import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from markviewer.cli import cli


@pytest.fixture
def runner(tmp_path: Path, monkeypatch) -> CliRunner:
    monkeypatch.chdir(tmp_path)
    return CliRunner()


def test_render_writes_html(runner: CliRunner, tmp_path: Path) -> None:
    source = tmp_path / "doc.md"
    source.write_text("# Hello\n\n```mermaid\ngraph TD\n```\n")

    result = runner.invoke(cli, ["render", str(source)])

    assert result.exit_code == 0, result.output
    page = (tmp_path / "doc.html").read_text()
    assert "<title>Hello</title>" in page
    assert 'id="special-block-0"' in page


def test_render_uses_config_theme(runner: CliRunner, tmp_path: Path) -> None:
    (tmp_path / "markviewer.yaml").write_text("theme: dark\n")
    source = tmp_path / "doc.md"
    source.write_text("text")

    result = runner.invoke(cli, ["render", str(source), "-o", str(tmp_path / "out.html")])

    assert result.exit_code == 0, result.output
    assert '<body class="dark">' in (tmp_path / "out.html").read_text()


def test_render_json(runner: CliRunner, tmp_path: Path) -> None:
    source = tmp_path / "doc.md"
    source.write_text("```chart\n{}\n```\n")

    result = runner.invoke(cli, ["render", str(source), "--json"])

    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert payload["special_blocks"] == [
        {"block_type": "chart", "content": "{}", "placeholder_id": "special-block-0"}
    ]


def test_invalid_config_is_reported(runner: CliRunner, tmp_path: Path) -> None:
    (tmp_path / "markviewer.yaml").write_text("theme: sepia\n")

    result = runner.invoke(cli, ["css"])

    assert result.exit_code != 0
    assert "Invalid theme" in result.output


def test_highlight_uses_file_extension(runner: CliRunner, tmp_path: Path) -> None:
    source = tmp_path / "main.rs"
    source.write_text("fn main() {}\n")

    result = runner.invoke(cli, ["highlight", str(source)])

    assert result.exit_code == 0, result.output
    assert 'class="hl-' in result.stdout
    assert "fn" in result.stdout


def test_css(runner: CliRunner) -> None:
    result = runner.invoke(cli, ["css", "--theme", "dark"])

    assert result.exit_code == 0, result.output
    assert ".dark .hl-keyword" in result.stdout


def test_paste_image(runner: CliRunner, tmp_path: Path) -> None:
    data = base64.b64encode(b"image-bytes").decode("ascii")

    result = runner.invoke(
        cli, ["paste-image", str(tmp_path / "doc.md"), "--filename", "p.png"], input=data
    )

    assert result.exit_code == 0, result.output
    assert result.stdout.strip() == "![image](images/p.png)"
    assert (tmp_path / "images" / "p.png").read_bytes() == b"image-bytes"


def test_paste_image_bad_data(runner: CliRunner, tmp_path: Path) -> None:
    result = runner.invoke(cli, ["paste-image", str(tmp_path / "doc.md")], input="%%%")

    assert result.exit_code != 0
    assert "Failed to decode base64" in result.output


def test_stats(runner: CliRunner, tmp_path: Path) -> None:
    source = tmp_path / "doc.md"
    source.write_text("# Hello world")

    result = runner.invoke(cli, ["stats", str(source)])

    assert result.exit_code == 0, result.output
    assert "Words" in result.output


def test_init_config(runner: CliRunner, tmp_path: Path) -> None:
    result = runner.invoke(cli, ["init-config"])
    assert result.exit_code == 0, result.output
    assert "theme: light" in (tmp_path / "markviewer.yaml").read_text()

    again = runner.invoke(cli, ["init-config"])
    assert again.exit_code != 0
    assert "already exists" in again.output


def test_render_log_file(runner: CliRunner, tmp_path: Path) -> None:
    source = tmp_path / "app.log"
    source.write_text("[WARN] disk almost full\n  ├─ free: 2%\n", encoding="utf-8")

    result = runner.invoke(cli, ["render", str(source)])

    assert result.exit_code == 0, result.output
    page = (tmp_path / "app.html").read_text()
    assert '<div class="log-entry log-level-warn">' in page
    assert "└─" in page


def test_render_log_file_json(runner: CliRunner, tmp_path: Path) -> None:
    source = tmp_path / "app.log"
    source.write_text("2024-01-15 10:30:00 [INFO] ready\n")

    result = runner.invoke(cli, ["render", str(source), "--json"])

    assert result.exit_code == 0, result.output
    (entry,) = json.loads(result.output)
    assert entry["level"] == "info"
    assert entry["timestamp"] == "2024-01-15 10:30:00"
    assert entry["message"] == "ready"
