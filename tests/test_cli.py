from pathlib import Path

from typer.testing import CliRunner

from richtext_converter.cli import app
from richtext_converter.emitter import emit_preamble
from richtext_converter.models import DocumentProperties

runner = CliRunner()


def _write(tmp_path: Path, name: str, text: str) -> Path:
    path = tmp_path / name
    path.write_text(text, encoding="utf-8")
    return path


def test_convert_writes_sibling_file(tmp_path: Path) -> None:
    source = _write(tmp_path, "notes.md", "# Title\n\n- one\n- two\n")
    result = runner.invoke(app, ["convert", str(source), "--to", "rtf", "--config", str(tmp_path / "none.toml")])
    assert result.exit_code == 0, result.output
    output = (tmp_path / "notes.rtf").read_text(encoding="utf-8")
    assert output.startswith(emit_preamble(DocumentProperties()))


def test_convert_to_stdout(tmp_path: Path) -> None:
    source = _write(tmp_path, "page.html", "<p>Hello <b>there</b></p>")
    result = runner.invoke(
        app,
        ["convert", str(source), "--to", "markdown", "--output", "-", "--config", str(tmp_path / "none.toml")],
    )
    assert result.exit_code == 0, result.output
    assert result.output == "Hello **there**"


def test_convert_rejects_unknown_format(tmp_path: Path) -> None:
    source = _write(tmp_path, "notes.md", "# Title")
    result = runner.invoke(app, ["convert", str(source), "--to", "docx"])
    assert result.exit_code != 0


def test_convert_missing_file(tmp_path: Path) -> None:
    result = runner.invoke(app, ["convert", str(tmp_path / "absent.md"), "--to", "rtf"])
    assert result.exit_code == 1


def test_detect_prints_format(tmp_path: Path) -> None:
    source = _write(tmp_path, "data.txt", "a,b,c\n1,2,3\n")
    result = runner.invoke(app, ["detect", str(source), "--config", str(tmp_path / "none.toml")])
    assert result.exit_code == 0, result.output
    assert "csv" in result.output


def test_validate_exit_codes(tmp_path: Path) -> None:
    good = _write(tmp_path, "good.rtf", emit_preamble(DocumentProperties()) + "Hi\\par\n")
    bad = _write(tmp_path, "bad.rtf", "{\\rtf1\\ansi {\\b open")
    assert runner.invoke(app, ["validate", str(good)]).exit_code == 0
    assert runner.invoke(app, ["validate", str(bad)]).exit_code == 1


def test_preamble_and_config(tmp_path: Path) -> None:
    preamble = runner.invoke(app, ["preamble", "--lists", "--config", str(tmp_path / "none.toml")])
    assert preamble.exit_code == 0
    assert preamble.output.startswith("{\\rtf1\\ansi")
    assert "\\listtable" in preamble.output
    shown = runner.invoke(app, ["config", "--config", str(tmp_path / "none.toml")])
    assert shown.exit_code == 0
    assert '"backend": "regex"' in shown.output
