"""
问答会话

每个查看中的分子对应一个会话，同一时间只允许一个未完成的提问。
"""

from threading import Lock
from typing import List

from .client import MolViewClient
from .exceptions import ChatPendingError
from .models import ChatInfo

EMPTY_HISTORY_TEXT = "No chat history yet. Ask a question to get started!"


class ChatSession:
    """
    分子问答会话

    Example:
        ```python
        session = ChatSession(client, molecule_id=1)
        session.ask("What is the bond angle of water?")
        print(session.format_transcript())
        ```
    """

    def __init__(self, client: MolViewClient, molecule_id: int):
        self.client = client
        self.molecule_id = molecule_id
        self._history: List[ChatInfo] = []
        self._pending = Lock()

    @property
    def pending(self) -> bool:
        """是否有未完成的提问"""
        return self._pending.locked()

    @property
    def history(self) -> List[ChatInfo]:
        return list(self._history)

    def refresh(self) -> List[ChatInfo]:
        """从服务端重新拉取历史"""
        self._history = self.client.list_chats(self.molecule_id)
        return self.history

    def ask(self, question: str) -> ChatInfo:
        """
        提交问题并在成功后刷新历史

        Raises:
            ValueError: 问题为空
            ChatPendingError: 已有未完成的提问
        """
        question = question.strip()
        if not question:
            raise ValueError("Question must not be empty")

        if not self._pending.acquire(blocking=False):
            raise ChatPendingError(self.molecule_id)
        try:
            chat = self.client.ask(question, self.molecule_id)
            self.refresh()
            return chat
        finally:
            self._pending.release()

    def format_transcript(self) -> str:
        """把问答历史渲染为文本"""
        if not self._history:
            return EMPTY_HISTORY_TEXT

        blocks = []
        for chat in self._history:
            blocks.append(f"Question:\n  {chat.question}\nAnswer:\n  {chat.answer}")
        return "\n\n".join(blocks)
