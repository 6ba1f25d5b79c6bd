# API Pydantic 数据模型
from .response import APIResponse
from .molecule import (
    AtomSchema,
    BondSchema,
    LonePairSchema,
    StructureSchema,
    MoleculeCreate,
    MoleculeResponse,
    MoleculeGeometryResponse,
)
from .chat import ChatCreate, ChatResponse

__all__ = [
    "APIResponse",
    "AtomSchema",
    "BondSchema",
    "LonePairSchema",
    "StructureSchema",
    "MoleculeCreate",
    "MoleculeResponse",
    "MoleculeGeometryResponse",
    "ChatCreate",
    "ChatResponse",
]
