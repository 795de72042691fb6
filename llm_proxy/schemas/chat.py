import math
from typing import Any, Literal

from pydantic import BaseModel

from llm_proxy.core.exceptions import ValidationError
from llm_proxy.gateway.types import ChatMessage, ChatRequest, Provider, Role


class ChatMessageIn(BaseModel):
    role: Literal["system", "user", "assistant"]
    content: str


def _numeric(value: Any) -> float | None:
    """JSON numbers that fit a finite float; anything else counts as absent."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    try:
        value = float(value)
    except OverflowError:
        return None
    return value if math.isfinite(value) else None


class ChatBody(BaseModel):
    provider: str | None = None
    model: str | None = None
    messages: list[ChatMessageIn] = []
    # Anything that is not a JSON number is treated as absent
    temperature: Any = None

    def to_request(self) -> ChatRequest:
        if not self.provider or not self.model:
            raise ValidationError("provider and model required")

        return ChatRequest(
            provider=Provider.parse(self.provider),
            model=self.model,
            messages=[ChatMessage(role=Role(m.role), content=m.content) for m in self.messages],
            temperature=_numeric(self.temperature),
        )


class ChatResponseOut(BaseModel):
    content: str


class ModelOut(BaseModel):
    id: str
