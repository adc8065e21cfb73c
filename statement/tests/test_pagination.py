"""Two-pass render: provisional write, page-count probe, conditional final write."""
import os
from pathlib import Path

from models import RenderContext
from reporting.pagination import (
    PaginationState,
    final_context,
    render_with_page_feedback,
)

TEMPLATE = (
    '<body class="{{document.singlePageBodyClass}}" data-single="{{document.isSinglePage}}">'
    "{{document.title}} pages={{document.pageCount}}</body>"
)
DATA = {"document": {"title": "Statement"}}


class _Probe:
    def __init__(self, result):
        self.result = result
        self.seen = []

    def __call__(self, path: Path):
        # The probe must see a real file holding the provisional render
        self.seen.append(path.read_text(encoding="utf-8"))
        return self.result


def test_final_context_rules():
    assert final_context(1) == RenderContext(is_single_page=True, page_count=1)
    assert final_context(2) == RenderContext(is_single_page=False, page_count=2)
    assert final_context(None, fallback_page_count=4) == RenderContext(is_single_page=False, page_count=4)
    assert final_context(None) == RenderContext(is_single_page=False, page_count=None)


def test_probe_reports_one_page(tmp_path):
    out = tmp_path / "output.html"
    probe = _Probe(1)
    outcome = render_with_page_feedback(TEMPLATE, DATA, out, probe)

    assert probe.seen == [outcome.provisional_html]
    assert 'data-single="false"' in outcome.provisional_html
    assert outcome.probe_state is PaginationState.COUNT_KNOWN
    assert outcome.state is PaginationState.FINAL_RENDERED
    assert outcome.history == [
        PaginationState.INITIAL,
        PaginationState.PROBE_RENDERED,
        PaginationState.COUNT_KNOWN,
        PaginationState.FINAL_RENDERED,
    ]
    assert outcome.context.is_single_page is True
    assert outcome.rewritten is True
    written = out.read_text(encoding="utf-8")
    assert written == outcome.html
    assert 'class="document--single"' in written
    assert "pages=1" in written


def test_probe_reports_two_pages(tmp_path):
    outcome = render_with_page_feedback(TEMPLATE, DATA, tmp_path / "output.html", _Probe(2))
    assert outcome.context == RenderContext(is_single_page=False, page_count=2)
    assert 'data-single="false"' in outcome.html
    assert "pages=2" in outcome.html


def test_probe_failure_uses_fallback_without_second_warning(tmp_path, caplog):
    caplog.set_level("INFO")
    outcome = render_with_page_feedback(
        TEMPLATE,
        DATA,
        tmp_path / "output.html",
        _Probe(None),
        fallback_page_count=3,
    )
    assert outcome.probe_state is PaginationState.COUNT_UNKNOWN
    assert outcome.detected_page_count is None
    assert outcome.context == RenderContext(is_single_page=False, page_count=3)
    assert "pages=3" in outcome.html
    assert any(r.levelname == "INFO" and "pages=unknown" in r.getMessage() for r in caplog.records)
    assert not [r for r in caplog.records if r.levelname == "WARNING"]


def test_identical_final_render_is_not_rewritten(tmp_path):
    template = "<p>{{document.title}}</p>"
    out = tmp_path / "output.html"
    old = 1_000_000_000

    def probe(path: Path):
        # Pin mtime after the provisional write; a second write would move it
        os.utime(path, (old, old))
        return None

    outcome = render_with_page_feedback(template, DATA, out, probe)
    assert outcome.rewritten is False
    assert outcome.html == outcome.provisional_html
    assert out.stat().st_mtime == old


def test_changed_final_render_is_rewritten(tmp_path):
    out = tmp_path / "output.html"
    old = 1_000_000_000

    def probe(path: Path):
        os.utime(path, (old, old))
        return 1

    outcome = render_with_page_feedback(TEMPLATE, DATA, out, probe)
    assert outcome.rewritten is True
    assert out.stat().st_mtime != old


def test_stylesheets_are_inlined_in_both_passes(tmp_path):
    template = '<head><link rel="stylesheet" href="s.css"></head>{{document.title}}'
    probe = _Probe(1)
    outcome = render_with_page_feedback(template, DATA, tmp_path / "o.html", probe, stylesheets=["p { x: 1; }"])
    assert "<style>" in probe.seen[0]
    assert "<style>" in outcome.html


def test_unavailable_page_counter_logs_one_warning(tmp_path, caplog):
    from config import RendererSettings
    from pdf_gateway import WeasyPrintGateway

    def nothing_installed(argv, **kwargs):
        raise FileNotFoundError(2, "No such file or directory", argv[0])

    gateway = WeasyPrintGateway(RendererSettings(), run=nothing_installed)
    caplog.set_level("INFO")
    outcome = render_with_page_feedback(
        TEMPLATE, DATA, tmp_path / "output.html", lambda path: gateway.count_pages(path).page_count
    )
    warnings = [r for r in caplog.records if r.levelname == "WARNING"]
    assert outcome.probe_state is PaginationState.COUNT_UNKNOWN
    assert len(warnings) == 1
    assert "STATEMENT_PAGE_COUNT_UNAVAILABLE" in warnings[0].getMessage()
