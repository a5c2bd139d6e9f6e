"""Generate a 20 WPM Extra Class certificate from the SVG template.

Usage:
    generate-certificate --callsign W6JSV
    generate-certificate --callsign W6JSV --date "January 17, 2025" --cert-no "20WPM-ABC123"
"""
import argparse
import logging
import sys
from pathlib import Path

from knowcode.config import CERTIFICATE_TEMPLATE_PATH
from knowcode.services.certificate import write_certificate
from logging_setup import setup_console_logging

log = logging.getLogger("generate_certificate")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Generate Know Code Extra certificates")
    parser.add_argument("-c", "--callsign", required=True, help="Amateur radio callsign")
    parser.add_argument("-d", "--date", help="Date to display (default: today)")
    parser.add_argument("-n", "--cert-no", help="Certificate number")
    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=Path("certificate.pdf"),
        help="Output PDF path",
    )
    parser.add_argument(
        "--svg-only",
        action="store_true",
        help="Output SVG instead of PDF",
    )
    parser.add_argument(
        "--template",
        type=Path,
        default=CERTIFICATE_TEMPLATE_PATH,
        help="SVG template with {{CALLSIGN}}, {{DATE}} and {{CERT_NO}} placeholders",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    setup_console_logging()
    args = parse_args(argv)
    try:
        path, date_text, cert_no = write_certificate(
            args.callsign,
            args.output,
            date_text=args.date,
            cert_no=args.cert_no,
            svg_only=args.svg_only,
            template_path=args.template,
        )
    except Exception:
        log.exception("Error generating certificate")
        return 1

    if args.svg_only:
        print(f"✓ SVG certificate saved to: {path}")
        return 0

    print("✓ Know-Code Extra certificate generated!")
    print(f"  Callsign: {args.callsign.upper()}")
    print(f"  Date: {date_text}")
    print(f"  Certificate #: {cert_no}")
    print(f"  Output: {path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
