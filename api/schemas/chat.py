"""
对话相关数据模型
"""
from pydantic import Field
from typing import Optional

from core.molecules.models import Chat
from .molecule import CamelModel


class ChatCreate(CamelModel):
    """提问请求"""
    question: str = Field(..., min_length=1, max_length=4000, description="问题")
    molecule_id: Optional[int] = Field(None, description="分子 ID（缺失时返回 500）")


class ChatResponse(CamelModel):
    """问答记录"""
    id: int = Field(..., description="对话 ID")
    question: str = Field(..., description="问题")
    answer: str = Field(..., description="回答")
    molecule_id: int = Field(..., description="所属分子 ID")

    @classmethod
    def from_domain(cls, chat: Chat) -> "ChatResponse":
        return cls(
            id=chat.id,
            question=chat.question,
            answer=chat.answer,
            molecule_id=chat.molecule_id,
        )
