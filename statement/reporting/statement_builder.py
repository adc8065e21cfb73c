"""
Build the token mapping for one statement render pass and apply it to the template.

Scalar fields come from the flattened data record; list-shaped fields come from
the fragment renderers; pagination fields come from the RenderContext handed in
by the pagination controller.
"""
from __future__ import annotations

from typing import Any, Mapping, Sequence

from models import RenderContext

from .flatten import flatten_record
from .format_utils import format_currency, format_page_count_label, format_scalar
from .fragments import render_address, render_balance_rows, render_summary_rows, render_transactions
from .style_inliner import inline_stylesheets
from .tokens import replace_tokens

SINGLE_PAGE_BODY_CLASS = "document--single"
FOOTER_SINGLE_CLASS = "statement-footer--single"
FOOTER_MULTI_CLASS = "statement-footer--multi"

_META_ALIASES = ("statementNumber", "accountNumber", "statementPeriod", "statementDate")
_BALANCE_AMOUNTS = ("opening", "withdrawals", "deposits", "closing")


def _mapping(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


def _sequence(value: Any) -> Sequence[Any]:
    return value if isinstance(value, list) else []


def data_page_count(data: Mapping[str, Any]) -> Any:
    """Page count carried by the data file itself, used when probing is unavailable."""
    document = _mapping(data.get("document"))
    value = document.get("pageCount")
    if value is None:
        value = _mapping(document.get("meta")).get("pageCount")
    return value


def fallback_page_count(data: Mapping[str, Any]) -> int | None:
    value = data_page_count(data)
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(str(value).strip())
    except ValueError:
        return None


def _pagination_tokens(data: Mapping[str, Any], context: RenderContext) -> dict[str, str]:
    if context.page_count is not None:
        page_count = str(context.page_count)
    else:
        fallback = data_page_count(data)
        page_count = format_scalar(fallback) if fallback is not None else ""
    return {
        "document.isSinglePage": "true" if context.is_single_page else "false",
        "document.singlePageBodyClass": SINGLE_PAGE_BODY_CLASS if context.is_single_page else "",
        "document.footerVariant": FOOTER_SINGLE_CLASS if context.is_single_page else FOOTER_MULTI_CLASS,
        "document.pageCount": page_count,
        "document.pageCountLabel": format_page_count_label(context.page_count),
    }


def build_template_replacements(data: Mapping[str, Any], context: RenderContext) -> dict[str, str]:
    document = _mapping(data.get("document"))
    meta = _mapping(document.get("meta"))
    recipient = _mapping(data.get("recipient"))
    balances = _mapping(data.get("balances"))
    transactions = _sequence(data.get("transactions"))

    replacements = flatten_record(data)
    replacements["recipient.addressHtml"] = render_address(_sequence(recipient.get("addressLines")))
    replacements["transactions.rows"] = render_transactions(transactions)
    replacements["transactions.count"] = str(len(transactions))
    replacements["summary.rows"] = render_summary_rows(_sequence(data.get("summary")))
    replacements["balances.rows"] = render_balance_rows(balances)

    # Short aliases for the statement header; null fields stay unresolved
    for key in _META_ALIASES:
        if meta.get(key) is not None:
            replacements[f"document.{key}"] = format_scalar(meta[key])
    for key in _BALANCE_AMOUNTS:
        if balances.get(key) is not None:
            replacements[f"balances.{key}"] = format_currency(balances[key])

    replacements.update(_pagination_tokens(data, context))
    return replacements


def render_statement(
    template: str,
    data: Mapping[str, Any],
    context: RenderContext,
    stylesheets: Sequence[str] | None = None,
) -> str:
    """One render pass. Pass ``stylesheets`` to embed them in place of the linked CSS."""
    html_out = replace_tokens(template, build_template_replacements(data, context))
    if stylesheets is not None:
        html_out = inline_stylesheets(html_out, stylesheets)
    return html_out
