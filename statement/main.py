"""
Render the account statement: data.json + templates/statement.html -> dist/output.html,
and dist/output.pdf with ``--pdf``.

Usage:
  cd statement
  python main.py [--pdf]
"""
from __future__ import annotations

import argparse
import json
import logging
import shutil
import sys
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from config import RendererSettings, get_settings
from errors import StatementInputError, StatementRenderError
from models import StatementData
from pdf_gateway import WeasyPrintGateway
from reporting.pagination import PaginationOutcome, render_with_page_feedback
from reporting.statement_builder import fallback_page_count
from reporting.tokens import find_placeholders

_LOG = logging.getLogger("statement")

OUTPUT_HTML_NAME = "output.html"
OUTPUT_PDF_NAME = "output.pdf"


def configure_logging(level: str) -> None:
    logging.basicConfig(
        format="%(asctime)s | %(levelname)-8s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        level=getattr(logging, level, logging.INFO),
    )


def load_statement_data(path: Path) -> dict[str, Any]:
    """
    Read data.json and check its shape. Any problem here is fatal for the run.

    The validated model is only a shape check: nulls are allowed wherever the
    renderers accept them, and rendering works on the raw mapping so unknown
    keys still reach the template.
    """
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise StatementInputError(f"Failed to read data file {path}: {e}") from e
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise StatementInputError(f"Data file {path} is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise StatementInputError(f"Data file {path} must contain a JSON object, got {type(data).__name__}")
    try:
        StatementData.model_validate(data)
    except ValidationError as e:
        raise StatementInputError(f"Data file {path} does not match the statement shape: {e}") from e
    return data


def load_template(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except OSError as e:
        raise StatementInputError(f"Failed to read template {path}: {e}") from e


def copy_directory_if_exists(source: Path, destination: Path) -> bool:
    if not source.is_dir():
        return False
    shutil.copytree(source, destination, dirs_exist_ok=True)
    return True


def read_stylesheets(styles_dir: Path) -> list[str]:
    if not styles_dir.is_dir():
        return []
    return [p.read_text(encoding="utf-8") for p in sorted(styles_dir.glob("*.css"))]


def pdf_page_count(path: Path) -> int | None:
    """Pages in a finished PDF, or None when it cannot be read."""
    try:
        from pypdf import PdfReader
        from pypdf.errors import PyPdfError
    except ImportError:
        raise ImportError("pypdf required: pip install pypdf")
    try:
        return len(PdfReader(str(path)).pages)
    except (OSError, PyPdfError) as e:
        _LOG.warning("STATEMENT_PDF_UNREADABLE path=%s err=%s", path, e)
        return None


def _report_unresolved(outcome: PaginationOutcome) -> None:
    unresolved = find_placeholders(outcome.html)
    if unresolved:
        _LOG.info("STATEMENT_UNRESOLVED count=%d tokens=%s", len(unresolved), ", ".join(unresolved))


def generate_statement(
    settings: RendererSettings,
    create_pdf: bool,
    gateway: WeasyPrintGateway | None = None,
) -> Path:
    """Run the whole pipeline; returns the path of the last artifact written."""
    data = load_statement_data(settings.data_path)
    template = load_template(settings.template_path)
    gateway = gateway or WeasyPrintGateway(settings)

    output_dir = settings.output_dir
    output_dir.mkdir(parents=True, exist_ok=True)
    # Copied before probing so the page count sees the same stylesheets and images
    copy_directory_if_exists(settings.styles_dir, output_dir / "styles")
    copy_directory_if_exists(settings.assets_dir, output_dir / "assets")

    stylesheets = read_stylesheets(settings.styles_dir) if settings.inline_styles else None
    output_html_path = output_dir / OUTPUT_HTML_NAME
    outcome = render_with_page_feedback(
        template,
        data,
        output_html_path,
        lambda path: gateway.count_pages(path).page_count,
        fallback_page_count=fallback_page_count(data),
        stylesheets=stylesheets,
    )
    _report_unresolved(outcome)

    if not create_pdf:
        _LOG.info("HTML generated at %s", output_html_path)
        return output_html_path

    pdf_output_path = output_dir / OUTPUT_PDF_NAME
    gateway.render_pdf(output_html_path, pdf_output_path)
    size_kib = pdf_output_path.stat().st_size / 1024
    _LOG.info("PDF generated at %s (%.1f KiB)", pdf_output_path, size_kib)

    pages = pdf_page_count(pdf_output_path)
    if pages is not None and outcome.detected_page_count is not None and pages != outcome.detected_page_count:
        _LOG.warning(
            "STATEMENT_PAGE_MISMATCH probed=%d rendered=%d",
            outcome.detected_page_count,
            pages,
        )
    return pdf_output_path


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="render-statement", description="Render the account statement to HTML.")
    parser.add_argument("--pdf", action="store_true", help="also produce dist/output.pdf with WeasyPrint")
    args = parser.parse_args(argv)

    try:
        settings = get_settings()
    except ValueError as e:
        configure_logging("INFO")
        _LOG.error("Invalid renderer settings: %s", e)
        return 1
    configure_logging(settings.log_level)

    try:
        generate_statement(settings, create_pdf=args.pdf)
    except StatementRenderError as e:
        _LOG.error("Failed to generate document: %s", e)
        return 1
    return 0


def cli() -> None:
    sys.exit(main())


if __name__ == "__main__":
    cli()
