from fastapi import APIRouter

from llm_proxy.api.chat import router as chat_router
from llm_proxy.api.models import router as models_router
from llm_proxy.api.transcribe import router as transcribe_router

api_router = APIRouter()
api_router.include_router(models_router)
api_router.include_router(chat_router)
api_router.include_router(transcribe_router)
