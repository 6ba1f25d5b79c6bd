"""
分子几何引擎

根据 Structure 计算渲染所需的全部几何量:
- 显示坐标（键长缩放后的原子位置）
- 化学键放置（中点、长度、方向、姿态四元数）
- 键角及键角弧线描述
- 孤对电子位置

所有函数均为纯函数: 不修改输入，不依赖全局可变状态，
相同输入重复调用得到完全相同的结果。

键长缩放规则:
    每个连通分量围绕其锚定原子整体缩放 bond_length_factor 倍。
    锚定原子为成键数最多的原子；成键数相同时取离坐标原点最近者；
    仍相同时取原子列表中靠前者。这样分量内每根键（包括成环键）
    都恰好伸缩 factor 倍，键角保持不变，孤立原子不移动。
"""
import math
from dataclasses import dataclass
from itertools import combinations
from typing import Dict, Any, List, Tuple, Iterator, Optional, Iterable

import numpy as np

from core.molecules.errors import MalformedStructure, InvalidGeometryArgument
from core.molecules.structure import Structure, BondLike, as_bond
from .vectors import (
    EPSILON,
    X_AXIS,
    Y_AXIS,
    Z_AXIS,
    Point3,
    Quaternion,
    angle_between,
    as_vector,
    is_parallel,
    length,
    midpoint,
    normalize,
    quaternion_from_unit_vectors,
    rotate_vector,
    to_point,
)

DEFAULT_BOND_LENGTH_FACTOR = 1.0

# 键角弧半径 = 较短键长 * 该比例
ARC_RADIUS_FRACTION = 0.3

# 圆柱体的规范轴
BOND_AXIS: Point3 = Y_AXIS

# 共线时按顺序尝试的备用参考轴
_FALLBACK_AXES: Tuple[Point3, ...] = (Z_AXIS, X_AXIS, Y_AXIS)


@dataclass(frozen=True)
class BondPlacement:
    """化学键的渲染放置"""
    atom_ids: Tuple[int, int]
    start: Point3
    end: Point3
    midpoint: Point3
    length: float
    direction: Point3
    orientation: Quaternion           # 把 BOND_AXIS 旋转到 direction

    def to_dict(self) -> Dict[str, Any]:
        return {
            "atomIds": list(self.atom_ids),
            "start": list(self.start),
            "end": list(self.end),
            "midpoint": list(self.midpoint),
            "length": self.length,
            "direction": list(self.direction),
            "orientation": list(self.orientation),
        }


@dataclass(frozen=True)
class AngleArc:
    """
    键角弧线描述

    弧位于两根键张成的平面内，以 center 为圆心，
    从 start_angle 开始逆时针（绕 normal）扫过 sweep 弧度。
    角度均在局部坐标系 (x_axis, y_axis) 中度量。
    """
    center: Point3
    radius: float
    start_angle: float
    sweep: float
    normal: Point3
    x_axis: Point3
    y_axis: Point3
    bisector: Point3
    orientation: Quaternion           # 把 +Z 旋转到 normal

    @property
    def sweep_degrees(self) -> float:
        return math.degrees(self.sweep)

    def point_at(self, t: float) -> Point3:
        """弧上参数 t ∈ [0, 1] 处的点"""
        theta = self.start_angle + self.sweep * t
        offset = (
            math.cos(theta) * as_vector(self.x_axis)
            + math.sin(theta) * as_vector(self.y_axis)
        )
        return to_point(as_vector(self.center) + self.radius * offset)

    def label_position(self, scale: float = 1.4) -> Point3:
        """角度标签位置（角平分线方向，略超出弧线）"""
        return to_point(
            as_vector(self.center) + self.radius * scale * as_vector(self.bisector)
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "center": list(self.center),
            "radius": self.radius,
            "startAngle": self.start_angle,
            "sweep": self.sweep,
            "normal": list(self.normal),
            "xAxis": list(self.x_axis),
            "yAxis": list(self.y_axis),
            "bisector": list(self.bisector),
            "orientation": list(self.orientation),
        }


@dataclass(frozen=True)
class BondAngle:
    """共享原子的两根键之间的键角"""
    common_atom_id: int
    bond_a: Tuple[int, int]
    bond_b: Tuple[int, int]
    degrees: float
    arc: AngleArc

    def to_dict(self) -> Dict[str, Any]:
        return {
            "commonAtomId": self.common_atom_id,
            "bondA": list(self.bond_a),
            "bondB": list(self.bond_b),
            "degrees": self.degrees,
            "arc": self.arc.to_dict(),
        }


@dataclass(frozen=True)
class MoleculeGeometry:
    """一次完整的几何计算结果"""
    bond_length_factor: float
    positions: Dict[int, Point3]
    bonds: Tuple[BondPlacement, ...]
    angles: Tuple[BondAngle, ...]
    lone_pairs: Tuple[Point3, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "bondLengthFactor": self.bond_length_factor,
            "positions": {str(k): list(v) for k, v in self.positions.items()},
            "bonds": [b.to_dict() for b in self.bonds],
            "angles": [a.to_dict() for a in self.angles],
            "lonePairs": [list(p) for p in self.lone_pairs],
        }


def check_bond_length_factor(factor: float) -> float:
    """键长缩放因子必须为有限正数"""
    try:
        value = float(factor)
    except (TypeError, ValueError) as e:
        raise InvalidGeometryArgument(f"bond_length_factor must be a number, got {factor!r}") from e
    if not math.isfinite(value) or value <= 0:
        raise InvalidGeometryArgument(f"bond_length_factor must be a positive finite number, got {factor!r}")
    return value


def _connected_components(structure: Structure) -> List[List[int]]:
    """按原子顺序划分成键连通分量"""
    adjacency: Dict[int, List[int]] = {atom.id: [] for atom in structure.atoms}
    for bond in structure.bonds:
        first, second = bond.atom_ids
        adjacency[first].append(second)
        adjacency[second].append(first)

    seen = set()
    components = []
    for atom in structure.atoms:
        if atom.id in seen:
            continue
        component = []
        stack = [atom.id]
        seen.add(atom.id)
        while stack:
            current = stack.pop()
            component.append(current)
            for neighbor in adjacency[current]:
                if neighbor not in seen:
                    seen.add(neighbor)
                    stack.append(neighbor)
        components.append(component)
    return components


def select_anchor_atom(structure: Structure, atom_ids: Optional[Iterable[int]] = None) -> int:
    """
    选出键长缩放时保持不动的锚定原子

    Args:
        structure: 分子结构
        atom_ids: 候选原子（默认全部原子）
    """
    atoms = structure.atom_map()
    order = {atom.id: index for index, atom in enumerate(structure.atoms)}
    counts = structure.connection_counts()
    candidates = list(atom_ids) if atom_ids is not None else list(atoms)
    if not candidates:
        raise InvalidGeometryArgument("Cannot select an anchor from an empty atom set")

    def rank(atom_id: int):
        return (
            -counts[atom_id],
            length(as_vector(atoms[atom_id].position)),
            order[atom_id],
        )

    return min(candidates, key=rank)


def compute_display_positions(
    structure: Structure,
    bond_length_factor: float = DEFAULT_BOND_LENGTH_FACTOR,
) -> Dict[int, Point3]:
    """
    计算键长缩放后的原子显示坐标

    factor 为 1.0 时原样返回存储坐标。
    """
    factor = check_bond_length_factor(bond_length_factor)
    structure.validate()
    atoms = structure.atom_map()

    if factor == 1.0:
        return {atom_id: atom.position for atom_id, atom in atoms.items()}

    positions: Dict[int, Point3] = {}
    for component in _connected_components(structure):
        anchor_id = select_anchor_atom(structure, component)
        anchor = as_vector(atoms[anchor_id].position)
        for atom_id in component:
            if atom_id == anchor_id:
                positions[atom_id] = atoms[atom_id].position
            else:
                offset = as_vector(atoms[atom_id].position) - anchor
                positions[atom_id] = to_point(anchor + offset * factor)

    # 保持原子顺序
    return {atom.id: positions[atom.id] for atom in structure.atoms}


def _bond_vector(structure_atoms, first: int, second: int) -> np.ndarray:
    vector = as_vector(structure_atoms[second].position) - as_vector(structure_atoms[first].position)
    if length(vector) < EPSILON:
        raise MalformedStructure(
            f"Atoms {first} and {second} share the same position", atom_id=second
        )
    return vector


def compute_bond_placement(
    structure: Structure,
    bond_length_factor: float = DEFAULT_BOND_LENGTH_FACTOR,
) -> List[BondPlacement]:
    """
    计算每根化学键的中点、长度与姿态

    length 为存储坐标间的欧氏距离乘以 bond_length_factor；
    orientation 把圆柱规范轴 +Y 旋转到键方向（起点指向终点）。

    Raises:
        MalformedStructure: 键引用了不存在的原子或成键原子重合
        InvalidGeometryArgument: 缩放因子非法
    """
    factor = check_bond_length_factor(bond_length_factor)
    positions = compute_display_positions(structure, factor)
    atoms = structure.atom_map()

    placements = []
    for bond in structure.bonds:
        first, second = bond.atom_ids
        vector = _bond_vector(atoms, first, second)
        direction = normalize(vector)
        start = positions[first]
        end = positions[second]
        placements.append(BondPlacement(
            atom_ids=(first, second),
            start=start,
            end=end,
            midpoint=midpoint(start, end),
            length=length(vector) * factor,
            direction=to_point(direction),
            orientation=quaternion_from_unit_vectors(as_vector(BOND_AXIS), direction),
        ))
    return placements


def compute_bond_angle(
    structure: Structure,
    common_atom_id: int,
    bond_a: BondLike,
    bond_b: BondLike,
) -> float:
    """
    计算共享原子的两根键之间的夹角（度）

    使用 acos(normalize(v1)·normalize(v2))。共线时返回 180°（或 0°），不报错。

    Raises:
        InvalidGeometryArgument: 任一键不包含共享原子
        MalformedStructure: 键引用了不存在的原子或成键原子重合
    """
    bond_a = as_bond(bond_a)
    bond_b = as_bond(bond_b)
    for bond in (bond_a, bond_b):
        if not bond.involves(common_atom_id):
            raise InvalidGeometryArgument(
                f"Bond {bond.atom_ids} does not contain atom {common_atom_id}"
            )

    structure.validate()
    atoms = structure.atom_map()
    if common_atom_id not in atoms:
        raise MalformedStructure(f"Unknown atom id: {common_atom_id}", atom_id=common_atom_id)
    for bond in (bond_a, bond_b):
        for atom_id in bond.atom_ids:
            if atom_id not in atoms:
                raise MalformedStructure(
                    f"Bond {bond.atom_ids} references unknown atom {atom_id}", atom_id=atom_id
                )

    v1 = _bond_vector(atoms, common_atom_id, bond_a.other(common_atom_id))
    v2 = _bond_vector(atoms, common_atom_id, bond_b.other(common_atom_id))
    return math.degrees(angle_between(v1, v2))


def _arc_normal(v1: np.ndarray, v2: np.ndarray) -> np.ndarray:
    """弧所在平面的法向；共线时取固定参考轴构造"""
    cross = np.cross(v1, v2)
    if length(cross) >= EPSILON:
        return normalize(cross)
    for axis in _FALLBACK_AXES:
        reference = as_vector(axis)
        if not is_parallel(v1, reference):
            return normalize(np.cross(v1, reference))
    # 不可达: v1 不可能同时平行于三个坐标轴
    raise InvalidGeometryArgument("Cannot determine a plane for the angle arc")


def compute_angle_arc_geometry(
    center: Iterable[float],
    v1: Iterable[float],
    v2: Iterable[float],
    radius: Optional[float] = None,
    radius_fraction: float = ARC_RADIUS_FRACTION,
) -> AngleArc:
    """
    计算表示键角的弧线

    Args:
        center: 共享原子的位置
        v1: 第一根键向量（从共享原子出发）
        v2: 第二根键向量
        radius: 弧半径；默认取较短键长 * radius_fraction

    共线（叉积模长 ≈ 0）时法向依次尝试 +Z、+X、+Y 参考轴，
    结果仍确定。
    """
    origin = as_vector(center)
    a = as_vector(v1)
    b = as_vector(v2)
    if length(a) < EPSILON or length(b) < EPSILON:
        raise InvalidGeometryArgument("Bond vectors for an angle arc must be non-zero")

    a_unit = normalize(a)
    b_unit = normalize(b)
    sweep = angle_between(a_unit, b_unit)

    normal = _arc_normal(a_unit, b_unit)
    orientation = quaternion_from_unit_vectors(as_vector(Z_AXIS), normal)
    x_axis = rotate_vector(orientation, X_AXIS)
    y_axis = rotate_vector(orientation, Y_AXIS)

    start_angle = math.atan2(float(np.dot(a_unit, y_axis)), float(np.dot(a_unit, x_axis)))
    middle = start_angle + sweep / 2.0
    bisector = math.cos(middle) * x_axis + math.sin(middle) * y_axis

    if radius is None:
        radius = radius_fraction * min(length(a), length(b))
    if radius <= 0:
        raise InvalidGeometryArgument(f"Arc radius must be positive, got {radius}")

    return AngleArc(
        center=to_point(origin),
        radius=float(radius),
        start_angle=start_angle,
        sweep=sweep,
        normal=to_point(normal),
        x_axis=to_point(x_axis),
        y_axis=to_point(y_axis),
        bisector=to_point(bisector),
        orientation=orientation,
    )


def compute_all_bond_angles(
    structure: Structure,
    bond_length_factor: float = DEFAULT_BOND_LENGTH_FACTOR,
    radius_fraction: float = ARC_RADIUS_FRACTION,
) -> List[BondAngle]:
    """
    计算所有共享原子的键对的键角及弧线

    按原子顺序、再按键顺序两两组合；弧线位于显示坐标上。
    """
    positions = compute_display_positions(structure, bond_length_factor)
    atoms = structure.atom_map()

    angles = []
    for atom in structure.atoms:
        bonds = list(structure.bonds_of(atom.id))
        for bond_a, bond_b in combinations(bonds, 2):
            other_a = bond_a.other(atom.id)
            other_b = bond_b.other(atom.id)
            # 检查存储坐标是否重合
            _bond_vector(atoms, atom.id, other_a)
            _bond_vector(atoms, atom.id, other_b)

            center = as_vector(positions[atom.id])
            v1 = as_vector(positions[other_a]) - center
            v2 = as_vector(positions[other_b]) - center
            angles.append(BondAngle(
                common_atom_id=atom.id,
                bond_a=bond_a.atom_ids,
                bond_b=bond_b.atom_ids,
                degrees=math.degrees(angle_between(v1, v2)),
                arc=compute_angle_arc_geometry(center, v1, v2, radius_fraction=radius_fraction),
            ))
    return angles


def collect_lone_pair_positions(structure: Structure) -> Iterator[Point3]:
    """惰性产出孤对电子位置；未声明时为空"""
    for lone_pair in structure.lone_pairs:
        yield lone_pair.position


def compute_geometry(
    structure: Structure,
    bond_length_factor: float = DEFAULT_BOND_LENGTH_FACTOR,
    radius_fraction: float = ARC_RADIUS_FRACTION,
) -> MoleculeGeometry:
    """一次性计算渲染所需的全部几何量"""
    factor = check_bond_length_factor(bond_length_factor)
    return MoleculeGeometry(
        bond_length_factor=factor,
        positions=compute_display_positions(structure, factor),
        bonds=tuple(compute_bond_placement(structure, factor)),
        angles=tuple(compute_all_bond_angles(structure, factor, radius_fraction)),
        lone_pairs=tuple(collect_lone_pair_positions(structure)),
    )
