"""Tests for the provider gateway types and the message/reply normalizer."""

from __future__ import annotations

import pytest

from llm_proxy.core.exceptions import ValidationError
from llm_proxy.gateway.normalizer import (
    anthropic_reply_text,
    gemini_reply_text,
    openai_reply_text,
    sorted_models,
    to_anthropic_messages,
    to_gemini_contents,
    to_openai_messages,
)
from llm_proxy.gateway.types import ChatMessage, ChatRequest, ChatResponse, Principal, Provider, Role


def _conversation() -> list[ChatMessage]:
    return [
        ChatMessage(Role.SYSTEM, "Be terse."),
        ChatMessage(Role.USER, "Hi"),
        ChatMessage(Role.ASSISTANT, "Hello."),
        ChatMessage(Role.SYSTEM, "Ignored second system prompt."),
        ChatMessage(Role.USER, "What is 2+2?"),
    ]


# ==========================================================================
# Test: Gateway Types
# ==========================================================================


class TestGatewayTypes:
    def test_provider_parse(self):
        assert Provider.parse("openai") is Provider.OPENAI
        assert Provider.parse("anthropic") is Provider.ANTHROPIC
        assert Provider.parse("gemini") is Provider.GEMINI

    def test_provider_parse_unknown(self):
        with pytest.raises(ValidationError, match="Unknown provider: mistral"):
            Provider.parse("mistral")

    def test_provider_parse_missing(self):
        with pytest.raises(ValidationError):
            Provider.parse(None)
        with pytest.raises(ValidationError):
            Provider.parse("")

    def test_system_prompt_is_first_system_message(self):
        req = ChatRequest(Provider.ANTHROPIC, "claude-3-5-haiku", _conversation())
        assert req.system_prompt == "Be terse."

    def test_system_prompt_empty_without_system_message(self):
        req = ChatRequest(Provider.ANTHROPIC, "claude-3-5-haiku", [ChatMessage(Role.USER, "Hi")])
        assert req.system_prompt == ""

    def test_turns_exclude_all_system_messages(self):
        req = ChatRequest(Provider.GEMINI, "models/gemini-1.5-pro", _conversation())
        assert [m.content for m in req.turns] == ["Hi", "Hello.", "What is 2+2?"]

    def test_chat_response_to_dict(self):
        assert ChatResponse(content="4").to_dict() == {"content": "4"}

    def test_principal_defaults_empty(self):
        p = Principal()
        assert p.subject_id == ""
        assert p.email == ""


# ==========================================================================
# Test: Normalizer, outbound
# ==========================================================================


class TestOutboundMessages:
    def test_openai_passthrough_preserves_order_and_roles(self):
        msgs = to_openai_messages(_conversation())
        assert msgs == [
            {"role": "system", "content": "Be terse."},
            {"role": "user", "content": "Hi"},
            {"role": "assistant", "content": "Hello."},
            {"role": "system", "content": "Ignored second system prompt."},
            {"role": "user", "content": "What is 2+2?"},
        ]

    def test_anthropic_drops_system_messages(self):
        req = ChatRequest(Provider.ANTHROPIC, "claude-3-5-haiku", _conversation())
        msgs = to_anthropic_messages(req)
        assert all(m["role"] != "system" for m in msgs)
        assert [m["content"] for m in msgs] == ["Hi", "Hello.", "What is 2+2?"]

    def test_gemini_maps_assistant_to_model(self):
        req = ChatRequest(Provider.GEMINI, "models/gemini-1.5-pro", _conversation())
        contents = to_gemini_contents(req)
        assert [c["role"] for c in contents] == ["user", "model", "user"]
        assert contents[1]["parts"] == [{"text": "Hello."}]

    def test_gemini_empty_conversation(self):
        req = ChatRequest(Provider.GEMINI, "models/gemini-1.5-pro", [])
        assert to_gemini_contents(req) == []


# ==========================================================================
# Test: Normalizer, inbound
# ==========================================================================


class TestReplyText:
    def test_openai_first_choice(self):
        data = {"choices": [{"message": {"content": "first"}}, {"message": {"content": "second"}}]}
        assert openai_reply_text(data) == "first"

    def test_openai_missing_content(self):
        assert openai_reply_text({}) == ""
        assert openai_reply_text({"choices": []}) == ""
        assert openai_reply_text({"choices": [{"message": {"content": None}}]}) == ""

    def test_anthropic_joins_text_blocks_without_separator(self):
        data = {
            "content": [
                {"type": "text", "text": "Hello"},
                {"type": "tool_use", "id": "x", "name": "noop", "input": {}},
                {"type": "text", "text": "world"},
            ]
        }
        assert anthropic_reply_text(data) == "Helloworld"

    def test_anthropic_empty(self):
        assert anthropic_reply_text({"content": []}) == ""
        assert anthropic_reply_text({}) == ""

    def test_gemini_joins_parts_of_first_candidate(self):
        data = {
            "candidates": [
                {"content": {"parts": [{"text": "4"}, {"text": " exactly"}]}},
                {"content": {"parts": [{"text": "other"}]}},
            ]
        }
        assert gemini_reply_text(data) == "4 exactly"

    def test_gemini_no_candidates(self):
        assert gemini_reply_text({"candidates": []}) == ""
        assert gemini_reply_text({"promptFeedback": {"blockReason": "SAFETY"}}) == ""
        assert gemini_reply_text({"candidates": [{"finishReason": "SAFETY"}]}) == ""

    def test_sorted_models(self):
        models = sorted_models(["gpt-4o", "dall-e-3", "gpt-4.1"])
        assert [m.id for m in models] == ["dall-e-3", "gpt-4.1", "gpt-4o"]

    def test_sorted_models_empty(self):
        assert sorted_models([]) == []
