from __future__ import annotations

import sys
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from openai import OpenAI

from src.services.errors import AIServiceUnavailable


@dataclass
class AIReply:
    text: str
    usage: Dict[str, Optional[int]] = field(default_factory=dict)


class AIClient:
    """
    Thin wrapper around the chat-completions API for the pricing assistant.

    Handles:
      - free-form pricing questions (with quote context in the system prompt)
      - quote analysis
      - margin suggestions
    """

    def __init__(
        self,
        api_key: Optional[str],
        model: str = "gpt-4.1",
        *,
        client: Optional[Any] = None,
    ) -> None:
        if client is None and not api_key:
            raise AIServiceUnavailable(
                "AI service not configured. Please set OPENAI_API_KEY."
            )

        self.client = client if client is not None else OpenAI(api_key=api_key)
        self.model = model

    @staticmethod
    def _content_text(raw: Any) -> str:
        # Content can come back as a plain string or as a list of parts
        if raw is None:
            return ""
        if isinstance(raw, list):
            parts = []
            for part in raw:
                if isinstance(part, dict) and "text" in part:
                    parts.append(str(part["text"]))
                else:
                    parts.append(str(part))
            return "\n".join(parts)
        return str(raw)

    def complete(self, *, system: str, user: str, max_tokens: int = 1024) -> AIReply:
        """
        One system + user exchange. Returns the assistant text and token usage.

        API errors from the SDK are not caught here; the router maps them to
        HTTP status codes.
        """
        response = self.client.chat.completions.create(
            model=self.model,
            max_tokens=max_tokens,
            messages=[
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
        )

        text = self._content_text(response.choices[0].message.content)

        usage = getattr(response, "usage", None)
        usage_dict = {
            "input_tokens": getattr(usage, "prompt_tokens", None),
            "output_tokens": getattr(usage, "completion_tokens", None),
        }

        if not text:
            print(f"[ai] Empty completion from model {self.model}", file=sys.stderr)

        return AIReply(text=text, usage=usage_dict)
