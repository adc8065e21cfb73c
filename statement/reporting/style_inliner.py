"""Swap linked stylesheets for one embedded <style> block."""
from __future__ import annotations

import re
from typing import Sequence

STYLESHEET_LINK_RE = re.compile(
    r"<link\b[^>]*\brel\s*=\s*[\"']?stylesheet[\"']?[^>]*>",
    re.IGNORECASE,
)


def _line_bounds(html: str, start: int, end: int) -> tuple[int, int]:
    line_start = html.rfind("\n", 0, start) + 1
    line_end = html.find("\n", end)
    if line_end == -1:
        line_end = len(html)
    return line_start, line_end


def _style_block(css_sources: Sequence[str], indent: str) -> str:
    css = "\n".join(source.strip("\n") for source in css_sources if source.strip())
    if not css:
        return "<style></style>"
    body = "\n".join(f"{indent}  {line}" if line.strip() else "" for line in css.splitlines())
    return f"<style>\n{body}\n{indent}</style>"


def inline_stylesheets(html: str, css_sources: Sequence[str]) -> str:
    """
    Replace the first ``<link rel="stylesheet">`` with the concatenated CSS and
    drop every later stylesheet link. Documents without a link come back unchanged.
    """
    matches = list(STYLESHEET_LINK_RE.finditer(html))
    if not matches:
        return html

    first = matches[0]
    line_start, _ = _line_bounds(html, first.start(), first.end())
    prefix = html[line_start:first.start()]
    indent = prefix if not prefix.strip() else " " * len(prefix)

    out = html
    # Back to front so earlier offsets stay valid
    for match in reversed(matches[1:]):
        start, end = match.start(), match.end()
        line_start, line_end = _line_bounds(out, start, end)
        alone = not out[line_start:start].strip() and not out[end:line_end].strip()
        if alone:
            cut_end = line_end + 1 if line_end < len(out) else line_end
            out = out[:line_start] + out[cut_end:]
        else:
            out = out[:start] + out[end:]

    return out[:first.start()] + _style_block(css_sources, indent) + out[first.end():]
