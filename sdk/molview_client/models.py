"""
数据模型定义

使用 dataclass 定义 API 返回的数据结构。
"""

from dataclasses import dataclass, field
from typing import Dict, Any, List


@dataclass
class MoleculeInfo:
    """
    分子信息

    Attributes:
        id: 分子 ID
        name: 分子名称
        formula: 化学式
        structure: 结构原始数据 {atoms, bonds, lonePairs?}
    """
    id: int
    name: str
    formula: str
    structure: Dict[str, Any] = field(default_factory=dict)

    @property
    def atoms(self) -> List[Dict[str, Any]]:
        return self.structure.get("atoms", [])

    @property
    def bonds(self) -> List[Dict[str, Any]]:
        return self.structure.get("bonds", [])

    @property
    def atom_count(self) -> int:
        return len(self.atoms)

    @property
    def bond_count(self) -> int:
        return len(self.bonds)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MoleculeInfo":
        """从字典创建"""
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            formula=data.get("formula", ""),
            structure=data.get("structure", {}),
        )


@dataclass
class ChatInfo:
    """
    问答记录

    Attributes:
        id: 对话 ID
        question: 问题
        answer: 回答
        molecule_id: 所属分子 ID
    """
    id: int
    question: str
    answer: str
    molecule_id: int

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ChatInfo":
        """从字典创建"""
        return cls(
            id=data["id"],
            question=data.get("question", ""),
            answer=data.get("answer", ""),
            molecule_id=data.get("moleculeId", data.get("molecule_id")),
        )
