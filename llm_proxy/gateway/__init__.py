"""Provider gateway.

Stateless adapters that translate the proxy's chat / model-listing protocol
to each vendor's wire format, plus the speech-to-text adapter:
  - Vendor-Specific Adapters (OpenAI, Anthropic, Gemini)
  - Message & Reply Normalizer
  - Transcription Adapter
"""
