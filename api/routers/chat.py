"""
分子问答 API 路由
"""
from fastapi import APIRouter, Depends, Path
from typing import List
import structlog

from api.dependencies import get_chat_service
from api.metrics import increment_chat
from api.schemas.chat import ChatCreate, ChatResponse
from core.llm.client import UpstreamFailure
from core.services.chat_service import ChatService
from core.store.memory_store import MissingMoleculeError

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.post("", response_model=ChatResponse)
async def ask_question(
    payload: ChatCreate,
    service: ChatService = Depends(get_chat_service),
):
    """
    针对分子提问

    - 分子不存在: 500
    - LLM 调用失败: 500
    - 回复无法解析: 使用兜底回答并正常保存
    """
    try:
        outcome = await service.ask(payload.question, payload.molecule_id)
    except (MissingMoleculeError, UpstreamFailure):
        increment_chat("failed")
        raise

    increment_chat("fallback" if outcome.used_fallback else "success")
    return ChatResponse.from_domain(outcome.chat)


@router.get("/{molecule_id}", response_model=List[ChatResponse])
async def list_chats(
    molecule_id: int = Path(..., description="分子 ID"),
    service: ChatService = Depends(get_chat_service),
):
    """按创建顺序返回分子的问答历史（可能为空）"""
    return [ChatResponse.from_domain(c) for c in service.history(molecule_id)]
