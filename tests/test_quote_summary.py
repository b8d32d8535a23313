from types import SimpleNamespace

import pytest

from src.services.errors import InvalidInput
from src.services.quote_summary import summarize


def test_empty_quote():
    s = summarize([])
    assert (s.total_cases, s.total_value, s.bipoc_fraction) == (0, 0, 0)
    assert summarize(None).line_count == 0
    assert summarize({"items": []}).bipoc_fraction == 0


def test_totals_and_bipoc_share():
    lines = [
        {"cases": 100, "line_total": 3672.84, "bipoc": False},
        {"cases": 20, "line_total": 1000.0, "bipoc": True},
        {"cases": 5, "line_total": 200.0, "bipoc": True},
        {"cases": 1, "line_total": 50.0},
    ]
    s = summarize(lines)
    assert s.total_cases == 126
    assert s.total_value == pytest.approx(4922.84)
    assert s.bipoc_count == 2
    assert s.line_count == 4
    assert s.bipoc_fraction == 0.5


def test_camel_case_quote_from_frontend():
    quote = {"items": [{"cases": 10, "lineTotal": 120.5, "bipoc": True}]}
    s = summarize(quote)
    assert s.total_cases == 10
    assert s.total_value == 120.5
    assert s.bipoc_fraction == 1


def test_object_lines():
    quote = SimpleNamespace(items=[
        SimpleNamespace(cases=3, line_total=30.0, bipoc=False),
        SimpleNamespace(cases=7, line_total=70.0, bipoc=True),
    ])
    s = summarize(quote)
    assert s.total_cases == 10
    assert s.total_value == 100.0
    assert 0 <= s.bipoc_fraction <= 1


def test_summary_does_not_touch_lines():
    lines = [{"cases": 1, "line_total": 10.0, "bipoc": True}]
    before = [dict(line) for line in lines]
    summarize(lines)
    assert lines == before


def test_quote_row_without_lines():
    import uuid

    from src.server.models import Quote

    s = summarize(Quote(organization_id=uuid.uuid4()))
    assert s.line_count == 0
    assert s.total_cases == 0
    assert summarize(SimpleNamespace(status="draft")).line_count == 0


def test_non_numeric_values_rejected():
    with pytest.raises(InvalidInput, match="cases"):
        summarize([{"cases": "lots", "line_total": 1}])
    with pytest.raises(InvalidInput, match="lineTotal"):
        summarize({"items": [{"cases": 1, "lineTotal": "a lot"}]})


def test_scalar_lines_rejected():
    with pytest.raises(InvalidInput):
        summarize(["not a line"])
