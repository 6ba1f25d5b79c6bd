"""
大语言模型客户端

通过兼容 OpenAI 的 chat-completions 接口回答关于分子的问题。

输入: 分子名称、化学式、原子数、键数、用户问题
输出: {"answer": str}

回复不是合法 JSON、不是对象或缺少 answer 字段时，
返回配置中的兜底回答（默认 "No answer provided"），并记录警告。
网络错误、超时和接口错误统一抛出 UpstreamFailure，不自动重试。
"""
import json
from dataclasses import dataclass
from typing import Optional, Tuple

import structlog
from openai import AsyncOpenAI, OpenAIError

from core.config import LLMSettings
from core.molecules.models import Molecule

logger = structlog.get_logger(__name__)


class UpstreamFailure(Exception):
    """外部 LLM 调用失败"""

    def __init__(self, message: str, *, model: Optional[str] = None):
        self.model = model
        super().__init__(message)


@dataclass(frozen=True)
class MoleculeContext:
    """提供给 LLM 的分子上下文"""
    name: str
    formula: str
    atom_count: int
    bond_count: int

    @classmethod
    def from_molecule(cls, molecule: Molecule) -> "MoleculeContext":
        return cls(
            name=molecule.name,
            formula=molecule.formula,
            atom_count=molecule.structure.atom_count,
            bond_count=molecule.structure.bond_count,
        )


@dataclass(frozen=True)
class LLMAnswer:
    text: str
    used_fallback: bool = False


def build_system_prompt(context: MoleculeContext) -> str:
    return (
        f"You are a chemistry expert. You are discussing the molecule {context.name} "
        f"({context.formula}). Its molecular structure consists of {context.atom_count} atoms "
        f"and {context.bond_count} bonds. Answer questions about this molecule and provide "
        f"answers in JSON format with an 'answer' field."
    )


def parse_answer(content: Optional[str], fallback: str) -> Tuple[str, bool]:
    """
    解析模型回复

    Returns:
        (回答文本, 是否使用了兜底回答)
    """
    try:
        payload = json.loads(content or "{}")
    except json.JSONDecodeError:
        logger.warning("llm_response_unparsable", content_preview=(content or "")[:200])
        return fallback, True

    if not isinstance(payload, dict):
        logger.warning("llm_response_not_object", payload_type=type(payload).__name__)
        return fallback, True

    answer = payload.get("answer")
    if not isinstance(answer, str) or not answer:
        logger.warning("llm_response_missing_answer")
        return fallback, True

    return answer, False


class LLMClient:
    """
    分子问答 LLM 客户端

    Args:
        settings: LLM 配置
        client: 预先构建的 AsyncOpenAI 客户端（测试时注入）
    """

    def __init__(self, settings: LLMSettings, client: Optional[AsyncOpenAI] = None):
        self.settings = settings
        self._client = client

    def _get_client(self) -> AsyncOpenAI:
        if self._client is None:
            if not self.settings.api_key:
                raise UpstreamFailure("LLM API key is not configured", model=self.settings.model)
            self._client = AsyncOpenAI(
                api_key=self.settings.api_key,
                base_url=self.settings.base_url,
                timeout=self.settings.timeout,
                max_retries=0,
            )
        return self._client

    async def answer(self, context: MoleculeContext, question: str) -> LLMAnswer:
        """
        向模型提问

        Raises:
            UpstreamFailure: 调用失败或超时
        """
        client = self._get_client()
        request = {
            "model": self.settings.model,
            "messages": [
                {"role": "system", "content": build_system_prompt(context)},
                {"role": "user", "content": question},
            ],
            "response_format": {"type": "json_object"},
        }
        if self.settings.temperature is not None:
            request["temperature"] = self.settings.temperature

        try:
            response = await client.chat.completions.create(**request)
        except OpenAIError as e:
            logger.error(
                "llm_request_failed",
                model=self.settings.model,
                error_type=type(e).__name__,
                error=str(e),
            )
            raise UpstreamFailure(f"LLM request failed: {e}", model=self.settings.model) from e

        content = response.choices[0].message.content if response.choices else None
        text, used_fallback = parse_answer(content, self.settings.fallback_answer)

        logger.info(
            "llm_request_completed",
            model=self.settings.model,
            molecule=context.name,
            used_fallback=used_fallback,
        )
        return LLMAnswer(text=text, used_fallback=used_fallback)

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()
            self._client = None
