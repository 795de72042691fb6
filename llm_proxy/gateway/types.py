"""Core types and DTOs for the provider gateway."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum

from llm_proxy.core.exceptions import ValidationError

# Content type assumed for uploads that arrive without one
DEFAULT_AUDIO_TYPE = "audio/m4a"


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class Provider(str, Enum):
    """Supported LLM providers."""

    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    GEMINI = "gemini"

    @classmethod
    def parse(cls, value: str | None) -> Provider:
        """Resolve a client-supplied provider name, raising ValidationError if unknown."""
        if not value:
            raise ValidationError("provider is required")
        try:
            return cls(value)
        except ValueError:
            raise ValidationError(f"Unknown provider: {value}") from None


class Role(str, Enum):
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


# ---------------------------------------------------------------------------
# Chat
# ---------------------------------------------------------------------------


@dataclass
class ChatMessage:
    role: Role
    content: str


@dataclass
class ChatRequest:
    """A normalized chat request, independent of the provider wire format."""

    provider: Provider
    model: str
    messages: list[ChatMessage] = field(default_factory=list)
    temperature: float | None = None  # only set when the client sent a number

    @property
    def system_prompt(self) -> str:
        """Content of the first system message, or "" if there is none."""
        for message in self.messages:
            if message.role == Role.SYSTEM:
                return message.content
        return ""

    @property
    def turns(self) -> list[ChatMessage]:
        """Non-system messages in conversation order."""
        return [m for m in self.messages if m.role != Role.SYSTEM]


@dataclass
class ChatResponse:
    content: str = ""

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class ModelDescriptor:
    id: str

    def to_dict(self) -> dict:
        return asdict(self)


# ---------------------------------------------------------------------------
# Identity & transcription
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Principal:
    """Authenticated caller, derived from verified identity-token claims."""

    subject_id: str = ""
    email: str = ""


@dataclass
class TranscriptionJob:
    """An uploaded audio payload staged on local disk for one request."""

    path: str
    filename: str
    content_type: str = DEFAULT_AUDIO_TYPE
