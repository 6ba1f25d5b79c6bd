"""
FastAPI 依赖注入

存储和 LLM 客户端在应用启动时创建并挂在 app.state 上，
这里按请求取出，不使用模块级全局单例。
"""
from fastapi import Depends, Request

from core.config import Settings, get_settings
from core.llm.client import LLMClient
from core.services.chat_service import ChatService
from core.store.memory_store import MoleculeStore


def get_app_settings(request: Request) -> Settings:
    return getattr(request.app.state, "settings", None) or get_settings()


def get_store(request: Request) -> MoleculeStore:
    """
    获取分子存储

    使用方式:
    @router.get("/example")
    async def example(store: MoleculeStore = Depends(get_store)):
        ...
    """
    return request.app.state.store


def get_llm_client(request: Request) -> LLMClient:
    return request.app.state.llm_client


def get_chat_service(
    store: MoleculeStore = Depends(get_store),
    llm: LLMClient = Depends(get_llm_client),
) -> ChatService:
    return ChatService(store=store, llm=llm)
