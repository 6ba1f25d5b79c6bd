"""
分子问答服务

串联存储与 LLM:
1. 查找分子（不存在则 MissingMoleculeError）
2. 调用 LLM 获取回答（失败则 UpstreamFailure，不写入任何记录）
3. 保存并返回问答记录
"""
from dataclasses import dataclass
from typing import List, Optional

import structlog

from core.llm.client import LLMClient, MoleculeContext
from core.molecules.models import Chat
from core.store.memory_store import MoleculeStore, MissingMoleculeError

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ChatOutcome:
    chat: Chat
    used_fallback: bool


class ChatService:
    """分子问答服务"""

    def __init__(self, store: MoleculeStore, llm: LLMClient):
        self.store = store
        self.llm = llm

    async def ask(self, question: str, molecule_id: Optional[int]) -> ChatOutcome:
        """
        针对指定分子提问

        Raises:
            MissingMoleculeError: 分子不存在
            UpstreamFailure: LLM 调用失败
        """
        molecule = self.store.get_molecule(molecule_id)
        if molecule is None:
            logger.warning("chat_molecule_missing", molecule_id=molecule_id)
            raise MissingMoleculeError(molecule_id)

        answer = await self.llm.answer(MoleculeContext.from_molecule(molecule), question)

        chat = self.store.create_chat(
            question=question,
            answer=answer.text,
            molecule_id=molecule.id,
        )
        return ChatOutcome(chat=chat, used_fallback=answer.used_fallback)

    def history(self, molecule_id: int) -> List[Chat]:
        return self.store.get_chats_for_molecule(molecule_id)
