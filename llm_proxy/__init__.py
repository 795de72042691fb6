"""Request-translation proxy for OpenAI, Anthropic and Gemini chat, model listing and transcription."""

__version__ = "1.0.0"
