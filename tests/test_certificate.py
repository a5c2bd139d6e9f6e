import re
import subprocess
from pathlib import Path

import pytest

import generate_certificate
from knowcode.services import certificate


def test_base36() -> None:
    assert certificate.base36(0) == "0"
    assert certificate.base36(35) == "Z"
    assert certificate.base36(36) == "10"
    with pytest.raises(ValueError):
        certificate.base36(-1)


def test_default_certificate_number() -> None:
    assert re.fullmatch(r"20WPM-[0-9A-Z]+", certificate.default_certificate_number())
    assert certificate.default_certificate_number(36 ** 3) == "20WPM-1000"


def test_render_replaces_every_placeholder() -> None:
    svg = certificate.render_certificate_svg(
        "{{CALLSIGN}} {{DATE}} {{CERT_NO}} {{CALLSIGN}}", "k6xx", "May 1, 2024", "N-1"
    )
    assert svg == "K6XX May 1, 2024 N-1 K6XX"


def test_svg_output_path() -> None:
    assert certificate.svg_output_path(Path("out/cert.pdf")) == Path("out/cert.svg")
    assert certificate.svg_output_path(Path("cert.pdf.pdf")) == Path("cert.svg.pdf")


def test_cli_svg_only(tmp_path, capsys) -> None:
    output = tmp_path / "cert.pdf"
    code = generate_certificate.main(
        ["-c", "w6jsv", "-d", "May 1, 2024", "-n", "TEST-1", "-o", str(output), "--svg-only"]
    )

    assert code == 0
    written = tmp_path / "cert.svg"
    svg = written.read_text(encoding="utf-8")
    assert "W6JSV" in svg
    assert "May 1, 2024" in svg
    assert "TEST-1" in svg
    assert "{{" not in svg
    assert not output.exists()
    assert "SVG certificate saved to" in capsys.readouterr().out


def test_cli_missing_template_fails(tmp_path) -> None:
    code = generate_certificate.main(
        ["-c", "W6JSV", "-o", str(tmp_path / "c.pdf"), "--svg-only", "--template", str(tmp_path / "nope.svg")]
    )
    assert code == 1
    assert not (tmp_path / "c.svg").exists()


def test_render_pdf_failure_leaves_no_file(tmp_path, monkeypatch) -> None:
    def fake_run(cmd, **kwargs):
        return subprocess.CompletedProcess(cmd, 1, stdout="", stderr="boom")

    monkeypatch.setattr(certificate.subprocess, "run", fake_run)
    output = tmp_path / "cert.pdf"

    with pytest.raises(RuntimeError):
        certificate.render_pdf("<svg/>", output, chrome="/usr/bin/chromium")
    assert not output.exists()


def test_render_pdf_moves_output(tmp_path, monkeypatch) -> None:
    def fake_run(cmd, **kwargs):
        target = next(a for a in cmd if a.startswith("--print-to-pdf="))
        Path(target.split("=", 1)[1]).write_bytes(b"%PDF-1.4")
        return subprocess.CompletedProcess(cmd, 0, stdout="", stderr="")

    monkeypatch.setattr(certificate.subprocess, "run", fake_run)
    output = tmp_path / "nested" / "cert.pdf"

    assert certificate.render_pdf("<svg/>", output, chrome="chromium") == output.resolve()
    assert output.read_bytes() == b"%PDF-1.4"


def test_find_chrome_prefers_env(tmp_path, monkeypatch) -> None:
    browser = tmp_path / "my-chrome"
    browser.write_text("")
    monkeypatch.setenv("CHROME_PATH", str(browser))
    assert certificate.find_chrome() == str(browser)


def test_find_chrome_missing(monkeypatch) -> None:
    monkeypatch.delenv("CHROME_PATH", raising=False)
    monkeypatch.setattr(certificate, "CHROME_PATH", None)
    monkeypatch.setattr(certificate.shutil, "which", lambda name: None)
    monkeypatch.setattr(certificate, "MAC_CHROME", Path("/nonexistent/chrome"))
    assert certificate.find_chrome() is None
    with pytest.raises(RuntimeError):
        certificate.render_pdf("<svg/>", Path("unused.pdf"))
