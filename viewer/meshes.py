"""
PyVista 网格工厂

把场景图元转换为 PyVista 网格。
"""
import numpy as np
import pyvista as pv

from .scene import SphereSpec, CylinderSpec, ArcSpec


class PyVistaMeshFactory:
    """用 PyVista 几何体构建网格"""

    def __init__(self, resolution: int = 32):
        self.resolution = resolution

    def sphere(self, spec: SphereSpec) -> pv.PolyData:
        return pv.Sphere(
            radius=spec.radius,
            center=spec.center,
            theta_resolution=self.resolution,
            phi_resolution=self.resolution,
        )

    def cylinder(self, spec: CylinderSpec) -> pv.PolyData:
        # pv.Cylinder 沿 direction 放置，等价于用 orientation 旋转 +Y 轴
        return pv.Cylinder(
            center=spec.center,
            direction=spec.direction,
            radius=spec.radius,
            height=spec.height,
            resolution=self.resolution,
        )

    def arc(self, spec: ArcSpec) -> pv.PolyData:
        return pv.lines_from_points(np.asarray(spec.points, dtype=float))
