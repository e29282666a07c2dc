from __future__ import annotations

from pathlib import Path

import pytest

from markviewer.config import ViewerConfig, load_config, write_config
from markviewer.errors import ConfigError


def test_defaults_without_file(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    assert load_config() == ViewerConfig()


def test_load_from_working_directory(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    (tmp_path / "markviewer.yaml").write_text("theme: dark\npage_size: Letter\n")

    config = load_config()
    assert config.theme == "dark"
    assert config.page_size == "Letter"
    assert config.margins == "normal"


def test_explicit_path_must_exist(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="not found"):
        load_config(tmp_path / "missing.yaml")


def test_empty_file_gives_defaults(tmp_path: Path) -> None:
    path = tmp_path / "c.yaml"
    path.write_text("")
    assert load_config(path) == ViewerConfig()


@pytest.mark.parametrize(
    "body, message",
    [
        ("theme: sepia\n", "Invalid theme"),
        ("page_size: A3\n", "Invalid page_size"),
        ("margins: huge\n", "Invalid margins"),
        ("max_image_width: -5\n", "Invalid max_image_width"),
        ("max_image_width: true\n", "Invalid max_image_width"),
        ("- just\n- a list\n", "mapping"),
        ("theme: [unclosed\n", "Could not parse"),
    ],
)
def test_invalid_config(tmp_path: Path, body: str, message: str) -> None:
    path = tmp_path / "c.yaml"
    path.write_text(body)
    with pytest.raises(ConfigError, match=message):
        load_config(path)


def test_write_then_load(tmp_path: Path) -> None:
    path = tmp_path / "markviewer.yaml"
    config = ViewerConfig(theme="dark", page_size="Legal", margins="wide", max_image_width=640)

    write_config(config, path)

    assert load_config(path) == config
