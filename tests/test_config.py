import json
from pathlib import Path

import pytest

from richtext_converter.config import AppConfig, apply_settings, dump_config, load_config
from richtext_converter.settings import Settings, _parse_bool


def test_missing_file_gives_defaults(tmp_path: Path) -> None:
    config = load_config(tmp_path / "missing.toml")
    assert config == AppConfig()
    assert config.document_properties().font_size == 11


def test_load_sections(tmp_path: Path) -> None:
    path = tmp_path / "config.toml"
    path.write_text(
        "\n".join(
            [
                "[document]",
                'font_family = "Calibri"',
                "font_size = 14",
                "font_color = [10, 20, 30]",
                "legacy_underline = true",
                "[document.style_map]",
                "underline = ['\\ul\\ulth ', '\\ulnone ']",
                "[detection]",
                "min_confidence = 0.75",
                "[external]",
                'backend = "Pandoc"',
                "[runtime]",
                'log_file = "logs/run.jsonl"',
                "enable_local_api = true",
                "[api]",
                "port = 9000",
            ]
        ),
        encoding="utf-8",
    )
    config = load_config(path)
    props = config.document_properties()
    assert props.font_family == "Calibri"
    assert props.half_points == 28
    assert props.font_color == (10, 20, 30)
    assert props.legacy_underline
    assert props.style("underline") == ("\\ul\\ulth ", "\\ulnone ")
    assert props.style("bold") == ("\\b ", "\\b0 ")
    assert config.detection.min_confidence == pytest.approx(0.75)
    assert config.external.backend == "pandoc"
    assert config.runtime.log_file == Path("logs/run.jsonl")
    assert config.runtime.enable_local_api
    assert config.api.port == 9000
    assert config.api.host == "127.0.0.1"


def test_unknown_backend_is_rejected(tmp_path: Path) -> None:
    path = tmp_path / "config.toml"
    path.write_text('[external]\nbackend = "word"\n', encoding="utf-8")
    with pytest.raises(ValueError):
        load_config(path)


@pytest.mark.parametrize("value", ["10.5", "11.0", "\"11\"", "true"])
def test_font_size_must_be_whole_points(tmp_path: Path, value: str) -> None:
    path = tmp_path / "config.toml"
    path.write_text(f"[document]\nfont_size = {value}\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_config(path)


def test_boolean_strings_are_parsed(tmp_path: Path) -> None:
    path = tmp_path / "config.toml"
    path.write_text(
        '[document]\nlegacy_underline = "false"\n[runtime]\nenable_local_api = "no"\n',
        encoding="utf-8",
    )
    config = load_config(path)
    assert config.document.legacy_underline is False
    assert config.runtime.enable_local_api is False


def test_unrecognised_boolean_is_rejected(tmp_path: Path) -> None:
    path = tmp_path / "config.toml"
    path.write_text('[runtime]\nenable_local_api = "sometimes"\n', encoding="utf-8")
    with pytest.raises(ValueError):
        load_config(path)


def test_settings_override_config() -> None:
    config = apply_settings(AppConfig(), Settings(enable_local_api=True, external_backend="markitdown"))
    assert config.runtime.enable_local_api
    assert config.external.backend == "markitdown"
    untouched = apply_settings(AppConfig(), Settings())
    assert untouched == AppConfig()


def test_parse_bool() -> None:
    assert _parse_bool("Yes") is True
    assert _parse_bool("off") is False
    assert _parse_bool("maybe") is None
    assert _parse_bool(None) is None


def test_dump_config_is_json() -> None:
    payload = json.loads(dump_config(AppConfig()))
    assert payload["document"]["font_size"] == 11
    assert payload["document"]["style_map"]["bold"] == ["\\b ", "\\b0 "]
    assert payload["external"]["backend"] == "regex"
    assert payload["runtime"]["log_file"] is None
