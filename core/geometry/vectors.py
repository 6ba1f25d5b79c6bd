"""
向量与四元数工具

基于 numpy 的三维向量运算。对外返回普通 float 元组，
保证结果可比较、可序列化。
四元数统一使用 (w, x, y, z) 顺序。
"""
import math
from typing import Iterable, Tuple

import numpy as np

from core.molecules.errors import InvalidGeometryArgument

Point3 = Tuple[float, float, float]
Quaternion = Tuple[float, float, float, float]

EPSILON = 1e-9

X_AXIS: Point3 = (1.0, 0.0, 0.0)
Y_AXIS: Point3 = (0.0, 1.0, 0.0)
Z_AXIS: Point3 = (0.0, 0.0, 1.0)
IDENTITY_QUATERNION: Quaternion = (1.0, 0.0, 0.0, 0.0)


def as_vector(point: Iterable[float]) -> np.ndarray:
    return np.asarray(tuple(point), dtype=np.float64)


def to_point(vector: np.ndarray) -> Point3:
    return (float(vector[0]), float(vector[1]), float(vector[2]))


def length(vector: np.ndarray) -> float:
    return float(np.linalg.norm(vector))


def distance(a: Iterable[float], b: Iterable[float]) -> float:
    """欧氏距离"""
    return length(as_vector(b) - as_vector(a))


def normalize(vector: np.ndarray) -> np.ndarray:
    """单位化，零向量报错"""
    norm = length(vector)
    if norm < EPSILON:
        raise InvalidGeometryArgument("Cannot normalize a zero-length vector")
    return vector / norm


def midpoint(a: Iterable[float], b: Iterable[float]) -> Point3:
    return to_point((as_vector(a) + as_vector(b)) / 2.0)


def is_parallel(a: np.ndarray, b: np.ndarray) -> bool:
    """两个向量是否共线（叉积模长接近 0）"""
    return length(np.cross(a, b)) < EPSILON


def quaternion_from_unit_vectors(v_from: np.ndarray, v_to: np.ndarray) -> Quaternion:
    """
    计算把单位向量 v_from 旋转到 v_to 的最短旋转

    两者反向时旋转轴取任意一个与 v_from 垂直的方向，
    结果依然是确定的。
    """
    r = float(np.dot(v_from, v_to)) + 1.0

    if r < EPSILON:
        # 反向: 取垂直轴旋转 180°
        if abs(v_from[0]) > abs(v_from[2]):
            x, y, z, w = -v_from[1], v_from[0], 0.0, 0.0
        else:
            x, y, z, w = 0.0, -v_from[2], v_from[1], 0.0
    else:
        cx, cy, cz = np.cross(v_from, v_to)
        x, y, z, w = cx, cy, cz, r

    norm = math.sqrt(w * w + x * x + y * y + z * z)
    return (float(w / norm), float(x / norm), float(y / norm), float(z / norm))


def rotate_vector(q: Quaternion, vector: Iterable[float]) -> np.ndarray:
    """用单位四元数旋转向量"""
    w = q[0]
    u = np.asarray(q[1:], dtype=np.float64)
    v = as_vector(vector)
    t = 2.0 * np.cross(u, v)
    return v + w * t + np.cross(u, t)


def angle_between(a: np.ndarray, b: np.ndarray) -> float:
    """两个非零向量的夹角（弧度），acos 参数截断到 [-1, 1]"""
    cosine = float(np.dot(normalize(a), normalize(b)))
    return math.acos(max(-1.0, min(1.0, cosine)))
