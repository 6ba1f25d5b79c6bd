"""
分子与对话记录

由 MoleculeStore 独占持有，创建后不再修改。
"""
from dataclasses import dataclass
from typing import Dict, Any

from .structure import Structure


@dataclass(frozen=True)
class Molecule:
    """分子记录"""
    id: int
    name: str
    formula: str
    structure: Structure

    def matches_name(self, name: str) -> bool:
        """名称比较（大小写不敏感）"""
        return self.name.lower() == name.lower()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "formula": self.formula,
            "structure": self.structure.to_dict(),
        }


@dataclass(frozen=True)
class Chat:
    """一次问答记录，通过 molecule_id 弱引用分子"""
    id: int
    question: str
    answer: str
    molecule_id: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "question": self.question,
            "answer": self.answer,
            "moleculeId": self.molecule_id,
        }
