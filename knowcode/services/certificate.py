"""Certificate rendering: template substitution and headless-browser PDF export."""
from __future__ import annotations

import logging
import os
import shutil
import subprocess
import tempfile
import time
from datetime import date
from pathlib import Path

from knowcode.config import (
    CERTIFICATE_HEIGHT_PX,
    CERTIFICATE_TEMPLATE_PATH,
    CERTIFICATE_WIDTH_PX,
    CHROME_PATH,
    PDF_RENDER_TIMEOUT_SECONDS,
)
from knowcode.utils.time_utils import format_long_date

log = logging.getLogger(__name__)

CERT_PREFIX = "20WPM"
PLACEHOLDERS = ("{{CALLSIGN}}", "{{DATE}}", "{{CERT_NO}}")

_BASE36 = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ"

BROWSER_NAMES = (
    "chromium",
    "chromium-browser",
    "google-chrome",
    "google-chrome-stable",
    "chrome",
)
MAC_CHROME = Path("/Applications/Google Chrome.app/Contents/MacOS/Google Chrome")


def base36(value: int) -> str:
    """Upper-case base-36 digits of a non-negative integer."""
    if value < 0:
        raise ValueError("base36 expects a non-negative integer")
    if value == 0:
        return "0"
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def timestamp_code(now_ms: int | None = None) -> str:
    """Base-36 millisecond timestamp used in generated certificate numbers."""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    return base36(now_ms)


def default_certificate_number(now_ms: int | None = None) -> str:
    return f"{CERT_PREFIX}-{timestamp_code(now_ms)}"


def default_date(day: date | None = None) -> str:
    return format_long_date(day)


def load_template(path: Path | None = None) -> str:
    path = Path(path or CERTIFICATE_TEMPLATE_PATH)
    return path.read_text(encoding="utf-8")


def render_certificate_svg(template: str, callsign: str, date_text: str, cert_no: str) -> str:
    """Replace every placeholder occurrence; the callsign is upper-cased."""
    return (
        template.replace("{{CALLSIGN}}", callsign.upper())
        .replace("{{DATE}}", date_text)
        .replace("{{CERT_NO}}", cert_no)
    )


def svg_output_path(output: Path) -> Path:
    """``--svg-only`` target: the first ``.pdf`` in the path becomes ``.svg``."""
    return Path(str(output).replace(".pdf", ".svg", 1))


def wrap_html(svg: str) -> str:
    """Minimal page sized to the certificate so the browser prints one page."""
    width, height = CERTIFICATE_WIDTH_PX, CERTIFICATE_HEIGHT_PX
    return (
        "<!DOCTYPE html>\n"
        "<html>\n<head>\n<meta charset=\"utf-8\">\n<style>\n"
        f"@page {{ size: {width}px {height}px; margin: 0; }}\n"
        "html, body { margin: 0; padding: 0; }\n"
        f"body {{ width: {width}px; height: {height}px; overflow: hidden; "
        "-webkit-print-color-adjust: exact; print-color-adjust: exact; }\n"
        f"svg {{ display: block; width: {width}px; height: {height}px; }}\n"
        "</style>\n</head>\n<body>\n"
        f"{svg}\n"
        "</body>\n</html>\n"
    )


def find_chrome() -> str | None:
    """
    Returns path to a Chromium-family browser, or None if not found.
    ``CHROME_PATH`` wins when it points at an existing file.
    """
    env = os.environ.get("CHROME_PATH") or CHROME_PATH
    if env and Path(env).exists():
        return str(env)

    for name in BROWSER_NAMES:
        p = shutil.which(name)
        if p:
            return str(p)

    if MAC_CHROME.exists():
        return str(MAC_CHROME)
    return None


def render_pdf(svg: str, output: Path, chrome: str | None = None) -> Path:
    """Print ``svg`` to ``output`` with headless Chromium.

    A failed render leaves no file at ``output``.
    """
    chrome = chrome or find_chrome()
    if not chrome:
        raise RuntimeError(
            "Could not find Chrome or Chromium. Install it or set CHROME_PATH."
        )

    output = Path(output).resolve()
    output.parent.mkdir(parents=True, exist_ok=True)
    with tempfile.TemporaryDirectory(prefix="knowcode_cert_") as tmp:
        html_path = Path(tmp) / "certificate.html"
        html_path.write_text(wrap_html(svg), encoding="utf-8")
        pdf_path = Path(tmp) / "certificate.pdf"

        log.info("Rendering PDF via %s", chrome)
        try:
            r = subprocess.run(
                [
                    chrome,
                    "--headless",
                    "--disable-gpu",
                    "--no-sandbox",
                    "--no-pdf-header-footer",
                    f"--user-data-dir={Path(tmp) / 'profile'}",
                    f"--print-to-pdf={pdf_path}",
                    html_path.as_uri(),
                ],
                capture_output=True,
                text=True,
                check=False,
                timeout=PDF_RENDER_TIMEOUT_SECONDS,
            )
        except subprocess.TimeoutExpired as exc:
            raise RuntimeError("PDF rendering timed out") from exc

        if r.returncode != 0 or not pdf_path.exists():
            log.error(
                "Chrome print failed rc=%s stderr=%s", r.returncode, (r.stderr or "").strip()
            )
            raise RuntimeError("PDF rendering failed")
        shutil.move(str(pdf_path), output)
    return output


def write_certificate(
    callsign: str,
    output: Path,
    date_text: str | None = None,
    cert_no: str | None = None,
    svg_only: bool = False,
    template_path: Path | None = None,
) -> tuple[Path, str, str]:
    """Render one certificate. Returns ``(written path, date, cert no)``."""
    date_text = date_text or default_date()
    cert_no = cert_no or default_certificate_number()
    svg = render_certificate_svg(load_template(template_path), callsign, date_text, cert_no)

    if svg_only:
        target = svg_output_path(output)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(svg, encoding="utf-8")
        return target, date_text, cert_no
    return render_pdf(svg, output), date_text, cert_no
