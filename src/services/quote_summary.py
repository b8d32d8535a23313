from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Iterable

from src.services.errors import InvalidInput


@dataclass(frozen=True)
class QuoteSummary:
    total_cases: int
    total_value: float
    bipoc_fraction: float
    line_count: int = 0
    bipoc_count: int = 0

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _field(line: Any, *names: str, default: Any = None) -> Any:
    """
    Reads the first present field from a line.

    Lines are either rows/objects (snake_case attributes) or dicts coming from
    an AI request context (camelCase keys from the frontend).
    """
    for name in names:
        if isinstance(line, dict):
            if line.get(name) is not None:
                return line[name]
        else:
            value = getattr(line, name, None)
            if value is not None:
                return value
    return default


def _number(value: Any, name: str) -> float:
    try:
        return float(value or 0)
    except (TypeError, ValueError):
        raise InvalidInput(f"Quote line {name} must be a number, got {value!r}")


def _lines_of(quote: Any) -> Iterable[Any]:
    if quote is None:
        return []
    if isinstance(quote, dict):
        return quote.get("items") or []
    if isinstance(quote, (list, tuple)):
        return quote
    items = getattr(quote, "items", None)
    if isinstance(items, (list, tuple)):
        return items
    # a bare quote row carries no lines
    return []


def summarize(quote: Any) -> QuoteSummary:
    """
    Totals for a quote's line items.

    `quote` is a list of lines, or anything carrying them under `items`
    (a quote dict from the frontend or a loaded quote with its items).

    - total_cases:    sum of cases (0 for an empty quote)
    - total_value:    sum of line totals
    - bipoc_fraction: share of lines whose product is BIPOC-sourced, 0 when empty

    Only used for descriptive output; stored quote state is never touched.
    """
    total_cases = 0
    total_value = 0.0
    line_count = 0
    bipoc_count = 0

    for line in _lines_of(quote):
        if line is None or isinstance(line, (str, bytes, int, float)):
            raise InvalidInput(f"Quote line must be an object, got {line!r}")
        line_count += 1
        total_cases += int(_number(_field(line, "cases", default=0), "cases"))
        total_value += _number(_field(line, "line_total", "lineTotal", default=0), "lineTotal")
        if _field(line, "bipoc", default=False):
            bipoc_count += 1

    fraction = bipoc_count / line_count if line_count else 0.0

    return QuoteSummary(
        total_cases=total_cases,
        total_value=total_value,
        bipoc_fraction=fraction,
        line_count=line_count,
        bipoc_count=bipoc_count,
    )
