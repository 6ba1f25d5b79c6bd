# 分子几何引擎
from core.molecules.errors import GeometryError, MalformedStructure, InvalidGeometryArgument
from .engine import (
    ARC_RADIUS_FRACTION,
    BOND_AXIS,
    DEFAULT_BOND_LENGTH_FACTOR,
    AngleArc,
    BondAngle,
    BondPlacement,
    MoleculeGeometry,
    check_bond_length_factor,
    collect_lone_pair_positions,
    compute_all_bond_angles,
    compute_angle_arc_geometry,
    compute_bond_angle,
    compute_bond_placement,
    compute_display_positions,
    compute_geometry,
    select_anchor_atom,
)

__all__ = [
    "GeometryError",
    "MalformedStructure",
    "InvalidGeometryArgument",
    "ARC_RADIUS_FRACTION",
    "BOND_AXIS",
    "DEFAULT_BOND_LENGTH_FACTOR",
    "AngleArc",
    "BondAngle",
    "BondPlacement",
    "MoleculeGeometry",
    "check_bond_length_factor",
    "collect_lone_pair_positions",
    "compute_all_bond_angles",
    "compute_angle_arc_geometry",
    "compute_bond_angle",
    "compute_bond_placement",
    "compute_display_positions",
    "compute_geometry",
    "select_anchor_atom",
]
