"""Model listing across providers."""

from fastapi import APIRouter, Depends, Query

from llm_proxy.core.config import Settings
from llm_proxy.core.dependencies import enforce_quota, get_settings
from llm_proxy.gateway.types import Provider
from llm_proxy.gateway.vendor_adapters import adapter_for
from llm_proxy.schemas.chat import ModelOut

router = APIRouter(tags=["models"])


@router.get("/models", response_model=list[ModelOut], dependencies=[Depends(enforce_quota)])
async def list_models(
    provider: str | None = Query(None, description="openai | anthropic | gemini"),
    settings: Settings = Depends(get_settings),
):
    adapter = adapter_for(Provider.parse(provider), settings)
    models = await adapter.list_models()
    return [m.to_dict() for m in models]
