"""
内存分子存储

进程生命周期内的分子与对话记录注册表:
- 启动时创建并注入到请求处理函数（不使用全局单例）
- 只追加、不删除，ID 从 1 开始顺序分配
- 进程重启后数据丢失（不做持久化）
"""
from threading import Lock
from typing import Dict, List, Optional, Iterable

import structlog

from core.molecules.models import Chat, Molecule
from core.molecules.predefined import PREDEFINED_MOLECULES, PredefinedMolecule
from core.molecules.structure import Structure

logger = structlog.get_logger(__name__)


class MissingMoleculeError(Exception):
    """对话引用的分子不存在"""

    def __init__(self, molecule_id: Optional[int]):
        self.molecule_id = molecule_id
        if molecule_id is None:
            message = "moleculeId is required"
        else:
            message = f"Molecule {molecule_id} not found"
        super().__init__(message)


class MoleculeStore:
    """
    分子与对话的内存存储

    ID 分配与写入在同一把锁内完成，保证自增与插入是一个原子步骤。
    """

    def __init__(self):
        self._molecules: Dict[int, Molecule] = {}
        self._chats: Dict[int, Chat] = {}
        self._next_molecule_id = 1
        self._next_chat_id = 1
        self._lock = Lock()

    # ===== 分子 =====

    def create_molecule(self, name: str, formula: str, structure: Structure) -> Molecule:
        """
        创建分子

        Args:
            name: 分子名称
            formula: 化学式
            structure: 分子结构（调用方负责校验）

        Returns:
            分配了 ID 的分子记录
        """
        with self._lock:
            molecule = Molecule(
                id=self._next_molecule_id,
                name=name,
                formula=formula,
                structure=structure,
            )
            self._molecules[molecule.id] = molecule
            self._next_molecule_id += 1

        logger.info(
            "molecule_created",
            molecule_id=molecule.id,
            name=name,
            formula=formula,
            n_atoms=structure.atom_count,
            n_bonds=structure.bond_count,
        )
        return molecule

    def get_molecule(self, molecule_id: int) -> Optional[Molecule]:
        return self._molecules.get(molecule_id)

    def get_molecule_by_name(self, name: str) -> Optional[Molecule]:
        """按名称查找（大小写不敏感，先创建者优先）"""
        for molecule in self._molecules.values():
            if molecule.matches_name(name):
                return molecule
        return None

    def list_molecules(self) -> List[Molecule]:
        return list(self._molecules.values())

    # ===== 对话 =====

    def create_chat(self, question: str, answer: str, molecule_id: Optional[int]) -> Chat:
        """
        保存一次问答

        Raises:
            MissingMoleculeError: molecule_id 为空或分子不存在（不会改动存储）
        """
        with self._lock:
            if molecule_id is None or molecule_id not in self._molecules:
                raise MissingMoleculeError(molecule_id)

            chat = Chat(
                id=self._next_chat_id,
                question=question,
                answer=answer,
                molecule_id=molecule_id,
            )
            self._chats[chat.id] = chat
            self._next_chat_id += 1

        logger.info("chat_created", chat_id=chat.id, molecule_id=molecule_id)
        return chat

    def get_chats_for_molecule(self, molecule_id: int) -> List[Chat]:
        """按创建顺序返回某分子的全部对话"""
        return [chat for chat in self._chats.values() if chat.molecule_id == molecule_id]

    # ===== 统计 =====

    @property
    def molecule_count(self) -> int:
        return len(self._molecules)

    @property
    def chat_count(self) -> int:
        return len(self._chats)


def seed_predefined_molecules(
    store: MoleculeStore,
    molecules: Iterable[PredefinedMolecule] = PREDEFINED_MOLECULES,
) -> List[Molecule]:
    """写入内置分子（水、甲烷）"""
    created = [
        store.create_molecule(name=m.name, formula=m.formula, structure=m.structure)
        for m in molecules
    ]
    logger.info("predefined_molecules_seeded", count=len(created))
    return created
