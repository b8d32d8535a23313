import sys
from typing import Any, Dict, Optional

import openai
from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session

from src.server.api.deps import CurrentUser, get_owned, http_error, optional_auth
from src.server.db.session import get_session
from src.server.models import Organization, Quote
from src.server.schemas.ai import AnalyzeQuoteIn, ChatIn, SuggestMarginIn
from src.server.settings.config import settings
from src.services.ai_client import AIClient, AIReply
from src.services.ai_prompts import (
    ANALYSIS_PROMPT,
    MARGIN_SYSTEM_PROMPT,
    build_margin_prompt,
    build_system_prompt,
)
from src.services.errors import AIServiceUnavailable, InvalidInput
from src.services.org_settings import settings_for
from src.services.quote_service import ai_quote_context

router = APIRouter(prefix="/api/ai", tags=["ai"])


def get_ai_client() -> Optional[AIClient]:
    """None when no API key is configured; the routes answer 503 in that case."""
    try:
        return AIClient(api_key=settings.openai_api_key, model=settings.openai_model)
    except AIServiceUnavailable:
        return None


def _require_client(client: Optional[AIClient]) -> AIClient:
    if client is None:
        raise HTTPException(
            status_code=503,
            detail="AI service not configured. Please set OPENAI_API_KEY.",
        )
    return client


def _ask(client: AIClient, *, system: str, user: str, max_tokens: int, context: str) -> AIReply:
    """Calls the model and maps SDK errors to HTTP errors."""
    try:
        return client.complete(system=system, user=user, max_tokens=max_tokens)
    except openai.AuthenticationError as e:
        print(f"[ai] {context}: authentication failed: {e}", file=sys.stderr)
        raise HTTPException(status_code=503, detail="AI service authentication failed")
    except openai.RateLimitError as e:
        print(f"[ai] {context}: rate limited: {e}", file=sys.stderr)
        raise HTTPException(status_code=429, detail="AI rate limit exceeded. Please try again later.")
    except openai.OpenAIError as e:
        print(f"[ai] {context}: {e}", file=sys.stderr)
        raise HTTPException(status_code=500, detail="Failed to get AI response")


def _system_prompt(context: Dict[str, Any], organization_name: Optional[str]) -> str:
    try:
        return build_system_prompt(context, organization_name)
    except InvalidInput as e:
        raise http_error(e)


def _organization_name(session: Session, user: Optional[CurrentUser]) -> Optional[str]:
    if user is None:
        return None
    org = session.get(Organization, user.organization_id)
    return org.name if org else None


@router.post("/chat")
def chat(
    payload: ChatIn,
    user: Optional[CurrentUser] = Depends(optional_auth),
    session: Session = Depends(get_session),
    client: Optional[AIClient] = Depends(get_ai_client),
):
    """
    Pricing question with optional quote context.

    Context comes from the request body, or, for signed-in callers passing
    quoteId, from the stored quote plus the organization's settings.
    """
    if not payload.message or not payload.message.strip():
        raise HTTPException(status_code=400, detail="Message is required")

    context = dict(payload.context or {})
    if payload.quote_id is not None:
        if user is None:
            raise HTTPException(status_code=401, detail="Authentication required for quoteId")
        quote = get_owned(session, Quote, payload.quote_id, user, "Quote")
        context["quote"] = ai_quote_context(session, quote)
        context.setdefault("settings", settings_for(session, user.organization_id).to_document())

    system = _system_prompt(context, _organization_name(session, user))
    ai = _require_client(client)
    reply = _ask(
        ai,
        system=system,
        user=payload.message,
        max_tokens=settings.ai_max_tokens,
        context="chat",
    )
    return {"response": reply.text, "usage": reply.usage}


@router.post("/analyze-quote")
def analyze_quote(
    payload: AnalyzeQuoteIn,
    user: Optional[CurrentUser] = Depends(optional_auth),
    session: Session = Depends(get_session),
    client: Optional[AIClient] = Depends(get_ai_client),
):
    quote = payload.quote or {}
    if not quote.get("items"):
        raise HTTPException(status_code=400, detail="Quote with items is required")

    system = _system_prompt(
        {"quote": quote, "settings": payload.settings},
        _organization_name(session, user),
    )
    ai = _require_client(client)
    reply = _ask(
        ai,
        system=system,
        user=ANALYSIS_PROMPT,
        max_tokens=max(settings.ai_max_tokens, 1500),
        context="analyze-quote",
    )
    return {"analysis": reply.text}


@router.post("/suggest-margin")
def suggest_margin(
    payload: SuggestMarginIn,
    user: Optional[CurrentUser] = Depends(optional_auth),
    client: Optional[AIClient] = Depends(get_ai_client),
):
    ai = _require_client(client)
    reply = _ask(
        ai,
        system=MARGIN_SYSTEM_PROMPT,
        user=build_margin_prompt(payload.customer_type, payload.total_cases, payload.total_value),
        max_tokens=500,
        context="suggest-margin",
    )
    return {"suggestion": reply.text}
