"""
结构与几何计算异常类型
"""
from typing import Optional


class GeometryError(Exception):
    """几何计算基础异常"""
    pass


class MalformedStructure(GeometryError):
    """
    结构不合法

    例如化学键引用了不存在的原子、原子 ID 重复、
    成键原子坐标重合等。
    """

    def __init__(self, message: str, *, atom_id: Optional[int] = None):
        self.atom_id = atom_id
        super().__init__(message)


class InvalidGeometryArgument(GeometryError, ValueError):
    """几何计算参数非法（例如非正的键长缩放因子）"""
    pass
