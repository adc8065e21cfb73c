"""
HTML fragments for the list-shaped parts of a statement.

Values are interpolated as-is: the data file is trusted input and may carry
markup of its own (line breaks, emphasis) that must reach the template intact.
"""
from __future__ import annotations

from typing import Any, Mapping, Sequence

from .format_utils import format_currency

TRANSACTION_COLUMNS = 7
EMPTY_TRANSACTIONS_TEXT = "No transactions recorded."


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def render_address(lines: Sequence[Any]) -> str:
    return "".join(f"<p>{_text(line)}</p>" for line in lines)


def render_transactions(rows: Sequence[Mapping[str, Any]]) -> str:
    if not rows:
        return (
            f'<tr><td colspan="{TRANSACTION_COLUMNS}" class="empty-state">'
            f"{EMPTY_TRANSACTIONS_TEXT}</td></tr>"
        )
    return "".join(
        "<tr>"
        f'<td>{_text(r.get("postedDate"))}</td>'
        f'<td>{_text(r.get("transactionDate"))}</td>'
        f'<td>{_text(r.get("cardId"))}</td>'
        f'<td>{_text(r.get("details"))}</td>'
        f'<td class="numeric">{format_currency(r.get("withdrawals"))}</td>'
        f'<td class="numeric">{format_currency(r.get("deposits"))}</td>'
        f'<td class="numeric">{format_currency(r.get("balance"))}</td>'
        "</tr>"
        for r in rows
    )


def _summary_row_class(row: Mapping[str, Any]) -> str:
    classes = ["summary-row"]
    if row.get("emphasized") is True:
        classes.append("summary-row--emphasized")
    if row.get("divider") is True:
        classes.append("summary-row--divider")
    return " ".join(classes)


def _summary_row(row: Mapping[str, Any]) -> str:
    amount = format_currency(row.get("amount"))
    if row.get("emphasized") is True and amount:
        amount = f"<strong>{amount}</strong>"
    note = row.get("note")
    note_html = f'<span class="summary-note">{_text(note)}</span>' if note else ""
    return (
        f'<tr class="{_summary_row_class(row)}">'
        f'<th scope="row">{_text(row.get("label"))}{note_html}</th>'
        f'<td class="numeric">{amount}</td>'
        "</tr>"
    )


def render_summary_rows(rows: Sequence[Mapping[str, Any]]) -> str:
    return "".join(_summary_row(r) for r in rows)


def render_balance_rows(balances: Mapping[str, Any]) -> str:
    """Opening, withdrawals, deposits and the emphasized closing line."""
    rows = [
        {"label": "Opening balance", "amount": balances.get("opening")},
        {"label": "Total withdrawals", "amount": balances.get("withdrawals")},
        {"label": "Total deposits", "amount": balances.get("deposits"), "divider": True},
        {
            "label": balances.get("closingLabel") or "Closing balance",
            "amount": balances.get("closing"),
            "emphasized": True,
        },
    ]
    return render_summary_rows(rows)
