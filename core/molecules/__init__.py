# 分子数据模型
from .errors import GeometryError, MalformedStructure, InvalidGeometryArgument
from .structure import Atom, Bond, LonePair, Structure, as_bond
from .models import Molecule, Chat
from .predefined import PREDEFINED_MOLECULES, PredefinedMolecule

__all__ = [
    "GeometryError",
    "MalformedStructure",
    "InvalidGeometryArgument",
    "Atom",
    "Bond",
    "LonePair",
    "Structure",
    "as_bond",
    "Molecule",
    "Chat",
    "PREDEFINED_MOLECULES",
    "PredefinedMolecule",
]
