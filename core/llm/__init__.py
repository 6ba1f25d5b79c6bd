# LLM 集成
from .client import (
    LLMClient,
    LLMAnswer,
    MoleculeContext,
    UpstreamFailure,
    build_system_prompt,
    parse_answer,
)

__all__ = [
    "LLMClient",
    "LLMAnswer",
    "MoleculeContext",
    "UpstreamFailure",
    "build_system_prompt",
    "parse_answer",
]
