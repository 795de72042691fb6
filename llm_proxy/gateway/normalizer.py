"""Message and reply normalization between the proxy protocol and vendor formats.

Outbound (request side):
  - OpenAI: messages pass through as {role, content}
  - Anthropic: first system message lifted into a separate ``system`` field
  - Gemini: system messages dropped from ``contents``, assistant -> model

Inbound (reply side):
  - Extract the assistant text from each vendor's response shape
  - Multi-segment replies are joined with no separator
"""

from __future__ import annotations

from llm_proxy.gateway.types import ChatMessage, ChatRequest, ModelDescriptor, Role

# Gemini calls the assistant side of the conversation "model"
_GEMINI_ROLES = {Role.ASSISTANT: "model"}


def to_openai_messages(messages: list[ChatMessage]) -> list[dict]:
    return [{"role": m.role.value, "content": m.content} for m in messages]


def to_anthropic_messages(request: ChatRequest) -> list[dict]:
    return [{"role": m.role.value, "content": m.content} for m in request.turns]


def to_gemini_contents(request: ChatRequest) -> list[dict]:
    return [
        {
            "role": _GEMINI_ROLES.get(m.role, "user"),
            "parts": [{"text": m.content}],
        }
        for m in request.turns
    ]


def openai_reply_text(data: dict) -> str:
    choices = data.get("choices") or []
    if not choices:
        return ""
    message = choices[0].get("message") or {}
    return message.get("content") or ""


def anthropic_reply_text(data: dict) -> str:
    blocks = data.get("content") or []
    return "".join(b.get("text") or "" for b in blocks if b.get("type", "text") == "text")


def gemini_reply_text(data: dict) -> str:
    candidates = data.get("candidates") or []
    if not candidates:
        return ""
    parts = (candidates[0].get("content") or {}).get("parts") or []
    return "".join(p.get("text") or "" for p in parts)


def sorted_models(ids: list[str]) -> list[ModelDescriptor]:
    """Build model descriptors sorted ascending by id."""
    return [ModelDescriptor(id=model_id) for model_id in sorted(ids)]
