"""Token mapping and full-template renders against the bundled statement template."""
import copy

from models import RenderContext, StatementData
from reporting.statement_builder import (
    build_template_replacements,
    fallback_page_count,
    render_statement,
)
from reporting.tokens import find_placeholders


def test_sample_data_matches_statement_model(sample_data):
    data = StatementData.model_validate(sample_data)
    assert data.balances.closing == 5587.15
    assert len(data.transactions) == 6


def test_fully_populated_record_leaves_no_placeholders(sample_data, template_text):
    for context in (RenderContext(), RenderContext(is_single_page=True, page_count=1)):
        html_out = render_statement(template_text, sample_data, context)
        assert find_placeholders(html_out) == []


def test_null_field_marker_is_preserved(sample_data, template_text):
    data = copy.deepcopy(sample_data)
    data["document"]["companyDescription"] = None
    data["document"]["meta"]["statementNumber"] = None
    data["balances"]["opening"] = None
    html_out = render_statement(template_text, data, RenderContext())
    assert "{{document.companyDescription}}" in html_out
    assert "{{document.statementNumber}}" in html_out
    assert "{{balances.opening}}" in html_out
    assert set(find_placeholders(html_out)) == {
        "document.companyDescription",
        "document.statementNumber",
        "balances.opening",
    }


def test_replacements_format_balances_and_aliases(sample_data):
    tokens = build_template_replacements(sample_data, RenderContext())
    assert tokens["balances.opening"] == "$4,210.55"
    assert tokens["balances.deposits"] == "$3,250.00"
    assert tokens["balances.closingLabel"] == "Closing balance"
    assert tokens["document.statementNumber"] == "ST-2026-0914"
    assert tokens["transactions.count"] == "6"
    assert "transactions" not in tokens
    assert "summary" not in tokens


def test_pagination_tokens_multi_page_provisional(sample_data):
    tokens = build_template_replacements(sample_data, RenderContext())
    assert tokens["document.isSinglePage"] == "false"
    assert tokens["document.singlePageBodyClass"] == ""
    assert tokens["document.footerVariant"] == "statement-footer--multi"
    # No measured count yet: falls back to the count stored in the data file
    assert tokens["document.pageCount"] == "1"
    assert tokens["document.pageCountLabel"] == ""


def test_pagination_tokens_single_page(sample_data):
    tokens = build_template_replacements(sample_data, RenderContext(is_single_page=True, page_count=1))
    assert tokens["document.isSinglePage"] == "true"
    assert tokens["document.singlePageBodyClass"] == "document--single"
    assert tokens["document.footerVariant"] == "statement-footer--single"
    assert tokens["document.pageCount"] == "1"
    assert tokens["document.pageCountLabel"] == "1 page"


def test_page_count_token_empty_without_any_source():
    tokens = build_template_replacements({"document": {}}, RenderContext())
    assert tokens["document.pageCount"] == ""


def test_fallback_page_count_prefers_document_level():
    assert fallback_page_count({"document": {"pageCount": "3", "meta": {"pageCount": "2"}}}) == 3
    assert fallback_page_count({"document": {"meta": {"pageCount": 2}}}) == 2
    assert fallback_page_count({"document": {"meta": {"pageCount": "many"}}}) is None
    assert fallback_page_count({}) is None


def test_empty_transactions_render_empty_state(sample_data, template_text):
    data = copy.deepcopy(sample_data)
    data["transactions"] = []
    html_out = render_statement(template_text, data, RenderContext())
    assert html_out.count("No transactions recorded.") == 1
    assert "Transactions (0)" in html_out


def test_render_with_inlined_styles(sample_data, template_text):
    html_out = render_statement(template_text, sample_data, RenderContext(), stylesheets=[".a { color: red; }"])
    assert 'rel="stylesheet"' not in html_out
    assert ".a { color: red; }" in html_out
