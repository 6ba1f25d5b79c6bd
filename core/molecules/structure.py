"""
分子结构数据模型

Structure 描述原子、化学键和（可选的）孤对电子，
由分子独占持有。所有类型均为不可变对象，
键长缩放等显示效果只在几何引擎中派生，不回写坐标。
"""
from dataclasses import dataclass, field
import math
from typing import Dict, Any, List, Tuple, Iterator, Iterable, Union

from .errors import MalformedStructure

Point3 = Tuple[float, float, float]
AtomIdPair = Tuple[int, int]

# 成键原子间距小于该值视为重合
COINCIDENT_TOLERANCE = 1e-9


@dataclass(frozen=True)
class Atom:
    """原子"""
    id: int
    x: float
    y: float
    z: float
    color: int = 0xFFFFFF               # 0xRRGGBB

    @property
    def position(self) -> Point3:
        return (float(self.x), float(self.y), float(self.z))

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "x": self.x, "y": self.y, "z": self.z, "color": self.color}


@dataclass(frozen=True)
class Bond:
    """化学键，只由两端原子 ID 标识"""
    atom_ids: AtomIdPair

    def __post_init__(self):
        ids = tuple(self.atom_ids)
        if len(ids) != 2:
            raise MalformedStructure(f"A bond must reference exactly two atoms, got {ids}")
        object.__setattr__(self, "atom_ids", ids)

    def involves(self, atom_id: int) -> bool:
        return atom_id in self.atom_ids

    def other(self, atom_id: int) -> int:
        """返回键另一端的原子 ID"""
        first, second = self.atom_ids
        if atom_id == first:
            return second
        if atom_id == second:
            return first
        raise ValueError(f"Atom {atom_id} is not part of bond {self.atom_ids}")

    def to_dict(self) -> Dict[str, Any]:
        return {"atomIds": list(self.atom_ids)}


@dataclass(frozen=True)
class LonePair:
    """孤对电子（仅用于显示）"""
    x: float
    y: float
    z: float

    @property
    def position(self) -> Point3:
        return (float(self.x), float(self.y), float(self.z))

    def to_dict(self) -> Dict[str, Any]:
        return {"x": self.x, "y": self.y, "z": self.z}


BondLike = Union[Bond, Iterable[int]]


def as_bond(bond: BondLike) -> Bond:
    """接受 Bond 对象或原子 ID 对"""
    if isinstance(bond, Bond):
        return bond
    return Bond(atom_ids=tuple(bond))


@dataclass(frozen=True)
class Structure:
    """
    分子结构

    不变量（由 validate() 检查）:
    - 原子 ID 唯一
    - 坐标为有限实数
    - 每个化学键引用两个不同且存在的原子
    - 成键原子位置不重合
    """
    atoms: Tuple[Atom, ...]
    bonds: Tuple[Bond, ...] = ()
    lone_pairs: Tuple[LonePair, ...] = field(default=())

    def __post_init__(self):
        object.__setattr__(self, "atoms", tuple(self.atoms))
        object.__setattr__(self, "bonds", tuple(as_bond(b) for b in self.bonds))
        object.__setattr__(self, "lone_pairs", tuple(self.lone_pairs))

    @property
    def atom_count(self) -> int:
        return len(self.atoms)

    @property
    def bond_count(self) -> int:
        return len(self.bonds)

    def atom_map(self) -> Dict[int, Atom]:
        """构建 {atom_id: Atom}，原子 ID 重复时报错"""
        atoms: Dict[int, Atom] = {}
        for atom in self.atoms:
            if atom.id in atoms:
                raise MalformedStructure(f"Duplicate atom id: {atom.id}", atom_id=atom.id)
            atoms[atom.id] = atom
        return atoms

    def get_atom(self, atom_id: int) -> Atom:
        for atom in self.atoms:
            if atom.id == atom_id:
                return atom
        raise MalformedStructure(f"Unknown atom id: {atom_id}", atom_id=atom_id)

    def validate(self) -> None:
        """检查结构不变量，不合法时抛出 MalformedStructure"""
        atoms = self.atom_map()
        for atom in self.atoms:
            if not all(math.isfinite(c) for c in atom.position):
                raise MalformedStructure(
                    f"Atom {atom.id} has a non-finite coordinate", atom_id=atom.id
                )
        for bond in self.bonds:
            first, second = bond.atom_ids
            if first == second:
                raise MalformedStructure(
                    f"Bond {bond.atom_ids} connects an atom to itself", atom_id=first
                )
            for atom_id in bond.atom_ids:
                if atom_id not in atoms:
                    raise MalformedStructure(
                        f"Bond {bond.atom_ids} references unknown atom {atom_id}",
                        atom_id=atom_id,
                    )
            if math.dist(atoms[first].position, atoms[second].position) < COINCIDENT_TOLERANCE:
                raise MalformedStructure(
                    f"Atoms {first} and {second} share the same position", atom_id=second
                )

    def bonds_of(self, atom_id: int) -> Iterator[Bond]:
        return (b for b in self.bonds if b.involves(atom_id))

    def connection_counts(self) -> Dict[int, int]:
        """每个原子的成键数（按原子顺序，无键为 0）"""
        counts = {atom.id: 0 for atom in self.atoms}
        for bond in self.bonds:
            for atom_id in bond.atom_ids:
                if atom_id in counts:
                    counts[atom_id] += 1
        return counts

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "atoms": [a.to_dict() for a in self.atoms],
            "bonds": [b.to_dict() for b in self.bonds],
        }
        if self.lone_pairs:
            data["lonePairs"] = [lp.to_dict() for lp in self.lone_pairs]
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Structure":
        """从 JSON 形式构建（不做校验）"""
        atoms: List[Atom] = [
            Atom(
                id=a["id"],
                x=a["x"],
                y=a["y"],
                z=a["z"],
                color=a.get("color", 0xFFFFFF),
            )
            for a in data.get("atoms", [])
        ]
        bonds = [Bond(atom_ids=b.get("atomIds", b.get("atom_ids"))) for b in data.get("bonds", [])]
        lone_pairs = [
            LonePair(x=lp["x"], y=lp["y"], z=lp["z"])
            for lp in (data.get("lonePairs") or data.get("lone_pairs") or [])
        ]
        return cls(atoms=atoms, bonds=bonds, lone_pairs=lone_pairs)
