"""
分子相关数据模型

JSON 字段使用 camelCase（atomIds、lonePairs），Python 属性使用 snake_case。
"""
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Optional, List, Tuple, Dict

from core.molecules.models import Molecule
from core.molecules.structure import Atom, Bond, LonePair, Structure


class CamelModel(BaseModel):
    # 坐标必须是有限实数，NaN / Infinity 在校验阶段即被拒绝
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, allow_inf_nan=False)


class AtomSchema(CamelModel):
    """原子"""
    id: int = Field(..., description="原子 ID（结构内唯一）")
    x: float = Field(..., description="x 坐标")
    y: float = Field(..., description="y 坐标")
    z: float = Field(..., description="z 坐标")
    color: int = Field(default=0xFFFFFF, ge=0, le=0xFFFFFF, description="显示颜色 0xRRGGBB")


class BondSchema(CamelModel):
    """化学键"""
    atom_ids: Tuple[int, int] = Field(..., description="两端原子 ID")


class LonePairSchema(CamelModel):
    """孤对电子"""
    x: float
    y: float
    z: float


class StructureSchema(CamelModel):
    """分子结构"""
    atoms: List[AtomSchema] = Field(..., min_length=1, description="原子列表")
    bonds: List[BondSchema] = Field(default_factory=list, description="化学键列表")
    lone_pairs: Optional[List[LonePairSchema]] = Field(None, description="孤对电子（可选）")

    def to_domain(self) -> Structure:
        return Structure(
            atoms=[Atom(id=a.id, x=a.x, y=a.y, z=a.z, color=a.color) for a in self.atoms],
            bonds=[Bond(atom_ids=b.atom_ids) for b in self.bonds],
            lone_pairs=[LonePair(x=lp.x, y=lp.y, z=lp.z) for lp in (self.lone_pairs or [])],
        )

    @classmethod
    def from_domain(cls, structure: Structure) -> "StructureSchema":
        return cls.model_validate(structure.to_dict())


class MoleculeCreate(CamelModel):
    """创建分子请求"""
    name: str = Field(..., min_length=1, max_length=200, description="分子名称")
    formula: str = Field(..., min_length=1, max_length=200, description="化学式")
    structure: StructureSchema = Field(..., description="分子结构")


class MoleculeResponse(CamelModel):
    """分子记录"""
    id: int = Field(..., description="分子 ID")
    name: str = Field(..., description="分子名称")
    formula: str = Field(..., description="化学式")
    structure: StructureSchema = Field(..., description="分子结构")

    @classmethod
    def from_domain(cls, molecule: Molecule) -> "MoleculeResponse":
        return cls(
            id=molecule.id,
            name=molecule.name,
            formula=molecule.formula,
            structure=StructureSchema.from_domain(molecule.structure),
        )


class BondPlacementSchema(CamelModel):
    atom_ids: Tuple[int, int]
    start: Tuple[float, float, float]
    end: Tuple[float, float, float]
    midpoint: Tuple[float, float, float]
    length: float
    direction: Tuple[float, float, float]
    orientation: Tuple[float, float, float, float] = Field(..., description="四元数 (w, x, y, z)")


class AngleArcSchema(CamelModel):
    center: Tuple[float, float, float]
    radius: float
    start_angle: float
    sweep: float
    normal: Tuple[float, float, float]
    x_axis: Tuple[float, float, float]
    y_axis: Tuple[float, float, float]
    bisector: Tuple[float, float, float]
    orientation: Tuple[float, float, float, float]


class BondAngleSchema(CamelModel):
    common_atom_id: int
    bond_a: Tuple[int, int]
    bond_b: Tuple[int, int]
    degrees: float
    arc: AngleArcSchema


class MoleculeGeometryResponse(CamelModel):
    """服务端计算的渲染几何"""
    molecule_id: int
    bond_length_factor: float
    positions: Dict[str, Tuple[float, float, float]]
    bonds: List[BondPlacementSchema]
    angles: List[BondAngleSchema]
    lone_pairs: List[Tuple[float, float, float]]
