from fastapi import APIRouter, Depends

from llm_proxy.core.config import Settings
from llm_proxy.core.dependencies import enforce_quota, get_settings
from llm_proxy.gateway.vendor_adapters import adapter_for
from llm_proxy.schemas.chat import ChatBody, ChatResponseOut

router = APIRouter(tags=["chat"])


@router.post("/chat", response_model=ChatResponseOut, dependencies=[Depends(enforce_quota)])
async def chat(body: ChatBody, settings: Settings = Depends(get_settings)):
    request = body.to_request()
    adapter = adapter_for(request.provider, settings)
    reply = await adapter.complete(request)
    return reply.to_dict()
