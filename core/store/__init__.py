# 内存存储
from .memory_store import MoleculeStore, MissingMoleculeError, seed_predefined_molecules

__all__ = [
    "MoleculeStore",
    "MissingMoleculeError",
    "seed_predefined_molecules",
]
