"""
内置分子

服务启动时按顺序写入存储，因此水的 ID 为 1，甲烷为 2。
"""
from typing import List, NamedTuple

from .structure import Atom, Bond, Structure

# CPK 配色
OXYGEN_RED = 0xFF0000
CARBON_GRAY = 0x808080
HYDROGEN_WHITE = 0xFFFFFF


class PredefinedMolecule(NamedTuple):
    name: str
    formula: str
    structure: Structure


WATER = PredefinedMolecule(
    name="water",
    formula="H2O",
    structure=Structure(
        atoms=(
            Atom(id=1, x=0.0, y=0.0, z=0.0, color=OXYGEN_RED),
            Atom(id=2, x=-0.8, y=0.6, z=0.0, color=HYDROGEN_WHITE),
            Atom(id=3, x=0.8, y=0.6, z=0.0, color=HYDROGEN_WHITE),
        ),
        bonds=(
            Bond(atom_ids=(1, 2)),
            Bond(atom_ids=(1, 3)),
        ),
    ),
)

METHANE = PredefinedMolecule(
    name="methane",
    formula="CH4",
    structure=Structure(
        atoms=(
            Atom(id=1, x=0.0, y=0.0, z=0.0, color=CARBON_GRAY),
            Atom(id=2, x=1.0, y=1.0, z=1.0, color=HYDROGEN_WHITE),
            Atom(id=3, x=-1.0, y=-1.0, z=1.0, color=HYDROGEN_WHITE),
            Atom(id=4, x=1.0, y=-1.0, z=-1.0, color=HYDROGEN_WHITE),
            Atom(id=5, x=-1.0, y=1.0, z=-1.0, color=HYDROGEN_WHITE),
        ),
        bonds=(
            Bond(atom_ids=(1, 2)),
            Bond(atom_ids=(1, 3)),
            Bond(atom_ids=(1, 4)),
            Bond(atom_ids=(1, 5)),
        ),
    ),
)

PREDEFINED_MOLECULES: List[PredefinedMolecule] = [WATER, METHANE]
