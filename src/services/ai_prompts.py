from __future__ import annotations

from typing import Any, Dict, Optional

from src.services.errors import InvalidInput
from src.services.quote_summary import summarize

BASE_PROMPT = """You are a pricing assistant for {organization}, a mission-driven food hub that connects BIPOC farmers to underserved communities.

Your role is to help optimize quotes, analyze pricing strategies, and provide actionable recommendations. Always be concise and specific with numbers.

Key priorities:
1. Maintain sustainable margins (typically 15-25% depending on customer type)
2. Maximize BIPOC vendor sourcing
3. Keep pricing competitive for food banks and schools
4. Optimize logistics costs through volume and route efficiency
"""

ANALYSIS_PROMPT = """Analyze this quote and provide:
1. Overall assessment (is this quote competitive and profitable?)
2. Margin analysis (are margins appropriate for this customer type?)
3. Freight optimization opportunities
4. BIPOC sourcing percentage and recommendations
5. Specific actionable recommendations

Be concise and use specific numbers from the quote."""

MARGIN_SYSTEM_PROMPT = (
    "You are a pricing expert for a food distribution company. "
    "Give concise, actionable margin recommendations."
)


def _money(value: Any) -> str:
    try:
        return f"${float(value):.2f}"
    except (TypeError, ValueError):
        return "$?"


def _quote_section(quote: Dict[str, Any]) -> str:
    text = "\n\nCURRENT QUOTE CONTEXT:\n"
    text += f"Customer: {quote.get('customerName') or 'Not selected'}\n"
    text += f"Customer Type: {quote.get('customerType') or 'Unknown'}\n"
    distance = quote.get("distance")
    text += f"Delivery Distance: {distance if distance is not None else 'Unknown'} miles\n"

    items = quote.get("items") or []
    if not items:
        return text
    if not isinstance(items, list) or not all(isinstance(i, dict) for i in items):
        raise InvalidInput("Quote items must be a list of objects")

    summary = summarize(items)
    text += f"Total Cases: {summary.total_cases}\n"
    text += f"Total Value: {_money(summary.total_value)}\n"
    text += (
        f"BIPOC Items: {summary.bipoc_count} of {summary.line_count} "
        f"({round(summary.bipoc_fraction * 100)}%)\n"
    )

    text += "\nLine Items:\n"
    for item in items:
        price = item.get("pricePerCase")
        price_text = _money(price) if price is not None else "$?"
        text += (
            f"- {item.get('product') or item.get('productName') or 'Product'}: "
            f"{item.get('cases')} cases @ {price_text}/case, "
            f"{item.get('marginPercent')}% margin, "
            f"{'BIPOC' if item.get('bipoc') else 'non-BIPOC'}\n"
        )
    return text


def _settings_section(settings: Dict[str, Any]) -> str:
    text = "\nPRICING SETTINGS:\n"
    text += f"Base Freight Rate: ${settings.get('baseFreightRate')}/pallet\n"
    text += f"Per-Mile Rate: ${settings.get('perMileRate')}/mile/pallet\n"
    text += f"Pallet Break Surcharge: {settings.get('palletBreakSurcharge')}%\n"
    if settings.get("minFreight") is not None:
        text += f"Minimum Freight: ${settings.get('minFreight')}/line\n"

    tiers = settings.get("volumeTiers")
    if tiers:
        if not isinstance(tiers, list) or not all(isinstance(t, dict) for t in tiers):
            raise InvalidInput("volumeTiers must be a list of objects")
        text += "Volume Discount Tiers:\n"
        for tier in tiers:
            max_cases = tier.get("maxCases")
            upper = max_cases if max_cases is not None else "+"
            text += f"  {tier.get('minCases')}-{upper} cases: {tier.get('discount')}% off freight\n"
    return text


def build_system_prompt(
    context: Optional[Dict[str, Any]],
    organization_name: Optional[str] = None,
) -> str:
    """
    System prompt for the pricing assistant.

    context (all optional):
      {"quote": {customerName, customerType, distance, items: [...]},
       "settings": {baseFreightRate, perMileRate, ..., volumeTiers}}

    Raises InvalidInput when client-supplied lines are malformed.
    """
    prompt = BASE_PROMPT.format(organization=organization_name or "our organization")

    if not context:
        return prompt

    quote = context.get("quote")
    if isinstance(quote, dict):
        prompt += _quote_section(quote)

    settings = context.get("settings")
    if isinstance(settings, dict):
        prompt += _settings_section(settings)

    return prompt


def build_margin_prompt(
    customer_type: Optional[str],
    total_cases: Any,
    total_value: Any,
) -> str:
    return (
        f"For a {customer_type or 'general'} customer ordering {total_cases or 0} cases "
        f"(approximately ${total_value or 0} total value), what margin percentage would you recommend?\n\n"
        "Consider:\n"
        "- Customer type (Food Banks typically get 15-20%, Schools 15-18%, Corporate 20-30%)\n"
        "- Order volume (larger orders can have slightly lower margins)\n"
        "- Product mix and typical market rates\n\n"
        "Provide a specific recommended margin percentage and brief reasoning."
    )
