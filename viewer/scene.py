"""
场景描述

把几何引擎的输出转换为与图形库无关的场景图元（球、圆柱、弧线、标签）。
这一步是纯计算，不需要图形上下文即可测试；
真正创建网格与 actor 的工作由 SceneRenderer 完成。
"""
from dataclasses import dataclass, replace, field
from typing import Optional, Tuple

from core.config import ViewerSettings
from core.geometry import (
    ARC_RADIUS_FRACTION,
    DEFAULT_BOND_LENGTH_FACTOR,
    check_bond_length_factor,
    collect_lone_pair_positions,
    compute_all_bond_angles,
    compute_bond_placement,
    compute_display_positions,
)
from core.geometry.vectors import Point3, Quaternion
from core.molecules.structure import Structure


def to_hex_color(color: int) -> str:
    """0xRRGGBB -> '#rrggbb'"""
    return f"#{color & 0xFFFFFF:06x}"


@dataclass(frozen=True)
class SceneOptions:
    """交互开关"""
    show_lone_pairs: bool = False
    show_bond_angles: bool = False
    bond_length_factor: float = DEFAULT_BOND_LENGTH_FACTOR

    def __post_init__(self):
        object.__setattr__(self, "bond_length_factor", check_bond_length_factor(self.bond_length_factor))

    def with_changes(self, **changes) -> "SceneOptions":
        return replace(self, **changes)


@dataclass(frozen=True)
class SceneStyle:
    """外观参数"""
    atom_radius: float = 0.5
    bond_radius: float = 0.1
    bond_color: int = 0xCCCCCC
    lone_pair_radius: float = 0.15
    lone_pair_color: int = 0xFFFF00
    angle_color: int = 0x00FF00
    arc_radius_fraction: float = ARC_RADIUS_FRACTION
    arc_resolution: int = 32
    sphere_resolution: int = 32

    @classmethod
    def from_settings(cls, settings: ViewerSettings) -> "SceneStyle":
        return cls(
            atom_radius=settings.atom_radius,
            bond_radius=settings.bond_radius,
            bond_color=settings.bond_color,
            lone_pair_radius=settings.lone_pair_radius,
            lone_pair_color=settings.lone_pair_color,
            angle_color=settings.angle_color,
            arc_radius_fraction=settings.arc_radius_fraction,
            sphere_resolution=settings.sphere_resolution,
        )


@dataclass(frozen=True)
class SphereSpec:
    key: str
    center: Point3
    radius: float
    color: int


@dataclass(frozen=True)
class CylinderSpec:
    key: str
    center: Point3
    direction: Point3
    height: float
    radius: float
    color: int
    orientation: Quaternion


@dataclass(frozen=True)
class ArcSpec:
    key: str
    points: Tuple[Point3, ...]
    color: int


@dataclass(frozen=True)
class LabelSpec:
    key: str
    position: Point3
    text: str
    color: int


@dataclass(frozen=True)
class SceneDescription:
    """一次重建需要的全部图元"""
    spheres: Tuple[SphereSpec, ...] = ()
    cylinders: Tuple[CylinderSpec, ...] = ()
    arcs: Tuple[ArcSpec, ...] = ()
    labels: Tuple[LabelSpec, ...] = ()
    options: Optional[SceneOptions] = field(default=None, compare=False)

    @property
    def primitive_count(self) -> int:
        return len(self.spheres) + len(self.cylinders) + len(self.arcs) + len(self.labels)


def build_scene(
    structure: Structure,
    options: SceneOptions = SceneOptions(),
    style: SceneStyle = SceneStyle(),
) -> SceneDescription:
    """
    根据结构与开关生成场景描述

    - 原子: 显示坐标处的球
    - 化学键: 中点处、沿键方向的圆柱
    - 孤对电子（可选）: 小球
    - 键角（可选）: 弧线 + 角度标签
    """
    factor = options.bond_length_factor
    positions = compute_display_positions(structure, factor)

    spheres = [
        SphereSpec(
            key=f"atom-{atom.id}",
            center=positions[atom.id],
            radius=style.atom_radius,
            color=atom.color,
        )
        for atom in structure.atoms
    ]

    cylinders = [
        CylinderSpec(
            key=f"bond-{p.atom_ids[0]}-{p.atom_ids[1]}-{index}",
            center=p.midpoint,
            direction=p.direction,
            height=p.length,
            radius=style.bond_radius,
            color=style.bond_color,
            orientation=p.orientation,
        )
        for index, p in enumerate(compute_bond_placement(structure, factor))
    ]

    if options.show_lone_pairs:
        spheres.extend(
            SphereSpec(
                key=f"lone-pair-{index}",
                center=position,
                radius=style.lone_pair_radius,
                color=style.lone_pair_color,
            )
            for index, position in enumerate(collect_lone_pair_positions(structure))
        )

    arcs = []
    labels = []
    if options.show_bond_angles:
        steps = max(style.arc_resolution, 2)
        for index, angle in enumerate(
            compute_all_bond_angles(structure, factor, style.arc_radius_fraction)
        ):
            key = f"angle-{angle.common_atom_id}-{index}"
            arcs.append(ArcSpec(
                key=key,
                points=tuple(angle.arc.point_at(i / (steps - 1)) for i in range(steps)),
                color=style.angle_color,
            ))
            labels.append(LabelSpec(
                key=f"{key}-label",
                position=angle.arc.label_position(),
                text=f"{angle.degrees:.1f}°",
                color=style.angle_color,
            ))

    return SceneDescription(
        spheres=tuple(spheres),
        cylinders=tuple(cylinders),
        arcs=tuple(arcs),
        labels=tuple(labels),
        options=options,
    )
