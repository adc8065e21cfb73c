"""
Two-pass rendering driven by the external renderer's page count.

The footer and page-count text change the document's length, so the only way
to learn the real pagination is to render the full statement, measure it, then
render again with the measured state:

    initial -> probe_rendered -> count_known | count_unknown -> final_rendered

The provisional pass is written to the final output path because the page
counter works on files. If the process dies between the two writes the
provisional HTML stays on disk; running again replaces it.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Mapping, Optional, Sequence

from models import RenderContext

from .statement_builder import render_statement

_LOG = logging.getLogger(__name__)

PageCounter = Callable[[Path], Optional[int]]


class PaginationState(str, Enum):
    INITIAL = "initial"
    PROBE_RENDERED = "probe_rendered"
    COUNT_KNOWN = "count_known"
    COUNT_UNKNOWN = "count_unknown"
    FINAL_RENDERED = "final_rendered"


@dataclass
class PaginationOutcome:
    history: list[PaginationState]
    context: RenderContext
    detected_page_count: int | None
    provisional_html: str
    html: str
    rewritten: bool

    @property
    def state(self) -> PaginationState:
        return self.history[-1]

    @property
    def probe_state(self) -> PaginationState:
        """COUNT_KNOWN or COUNT_UNKNOWN, whichever the probe produced."""
        return self.history[2]


PROVISIONAL_CONTEXT = RenderContext(is_single_page=False, page_count=None)


def final_context(detected_page_count: int | None, fallback_page_count: int | None = None) -> RenderContext:
    """Single page only when the count is known and exactly 1; unknown counts use the fallback."""
    if detected_page_count is None:
        return RenderContext(is_single_page=False, page_count=fallback_page_count)
    return RenderContext(is_single_page=detected_page_count == 1, page_count=detected_page_count)


def _write_html(path: Path, html_text: str) -> None:
    path.write_bytes(html_text.encode("utf-8"))


def render_with_page_feedback(
    template: str,
    data: Mapping[str, Any],
    output_path: Path,
    count_pages: PageCounter,
    *,
    fallback_page_count: int | None = None,
    stylesheets: Sequence[str] | None = None,
) -> PaginationOutcome:
    output_path = Path(output_path)
    history = [PaginationState.INITIAL]

    provisional_html = render_statement(template, data, PROVISIONAL_CONTEXT, stylesheets=stylesheets)
    _write_html(output_path, provisional_html)
    history.append(PaginationState.PROBE_RENDERED)
    _LOG.debug("STATEMENT_PROVISIONAL path=%s chars=%d", output_path, len(provisional_html))

    detected = count_pages(output_path)
    if detected is None:
        history.append(PaginationState.COUNT_UNKNOWN)
        # failure details are logged by the page counter
        _LOG.info(
            "STATEMENT_PROBE pages=unknown fallback=%s; rendering the multi-page layout",
            fallback_page_count,
        )
    else:
        history.append(PaginationState.COUNT_KNOWN)
        _LOG.info("STATEMENT_PROBE pages=%d", detected)

    context = final_context(detected, fallback_page_count)
    html_out = render_statement(template, data, context, stylesheets=stylesheets)
    rewritten = html_out != provisional_html
    if rewritten:
        _write_html(output_path, html_out)
    history.append(PaginationState.FINAL_RENDERED)
    _LOG.info(
        "STATEMENT_FINAL single_page=%s page_count=%s rewritten=%s",
        context.is_single_page,
        context.page_count,
        rewritten,
    )

    return PaginationOutcome(
        history=history,
        context=context,
        detected_page_count=detected,
        provisional_html=provisional_html,
        html=html_out,
        rewritten=rewritten,
    )
