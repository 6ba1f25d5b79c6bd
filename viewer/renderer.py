"""
场景渲染器

持有 plotter 上的全部 actor。任一输入（结构、开关、键长系数）变化时
整体丢弃并重建，相机位置在重建之间保持不变。
"""
from typing import Any, List, Optional

from core.molecules.structure import Structure
from logging_config import get_logger

from .scene import SceneDescription, SceneOptions, SceneStyle, build_scene, to_hex_color

logger = get_logger(__name__)


class SceneRenderer:
    """
    把 SceneDescription 落到 plotter 上

    Args:
        plotter: pyvista.Plotter 或兼容对象
        style: 外观参数
        mesh_factory: 负责生成网格，默认使用 PyVistaMeshFactory
        options: 初始开关
    """

    def __init__(
        self,
        plotter: Any,
        style: Optional[SceneStyle] = None,
        mesh_factory: Any = None,
        options: Optional[SceneOptions] = None,
    ):
        self.plotter = plotter
        self.style = style or SceneStyle()
        if mesh_factory is None:
            from .meshes import PyVistaMeshFactory
            mesh_factory = PyVistaMeshFactory(resolution=self.style.sphere_resolution)
        self.meshes = mesh_factory
        self.options = options or SceneOptions()

        self._structure: Optional[Structure] = None
        self._actors: List[Any] = []
        self._camera_framed = False
        self.rebuild_count = 0
        self.scene: Optional[SceneDescription] = None

    @property
    def structure(self) -> Optional[Structure]:
        return self._structure

    @property
    def actors(self) -> List[Any]:
        return list(self._actors)

    def update(self, structure: Optional[Structure] = None, **changes) -> bool:
        """
        更新输入，有变化时重建

        Args:
            structure: 新结构，None 表示保持当前结构
            **changes: show_lone_pairs / show_bond_angles / bond_length_factor

        Returns:
            是否发生了重建
        """
        new_structure = self._structure if structure is None else structure
        new_options = self.options.with_changes(**changes) if changes else self.options

        if new_structure is None:
            self.options = new_options
            return False
        if new_structure is self._structure and new_options == self.options and self.scene is not None:
            return False

        # 先算场景，失败时保留原有 actor
        scene = build_scene(new_structure, new_options, self.style)
        self._structure = new_structure
        self.options = new_options
        self._draw(scene)
        return True

    def rebuild(self) -> None:
        """按当前输入强制重建"""
        if self._structure is None:
            return
        self._draw(build_scene(self._structure, self.options, self.style))

    def _draw(self, scene: SceneDescription) -> None:
        self.clear(render=False)

        for spec in scene.spheres:
            self._add_mesh(self.meshes.sphere(spec), spec.color, spec.key)
        for spec in scene.cylinders:
            self._add_mesh(self.meshes.cylinder(spec), spec.color, spec.key)
        for spec in scene.arcs:
            self._add_mesh(self.meshes.arc(spec), spec.color, spec.key, line_width=2)
        for spec in scene.labels:
            actor = self.plotter.add_point_labels(
                [spec.position],
                [spec.text],
                text_color=to_hex_color(spec.color),
                font_size=14,
                shape=None,
                show_points=False,
                always_visible=True,
                name=spec.key,
                reset_camera=False,
                render=False,
            )
            self._actors.append(actor)

        # 只在第一次构建时对准相机
        if not self._camera_framed:
            self.plotter.reset_camera()
            self._camera_framed = True

        self.scene = scene
        self.rebuild_count += 1
        self.plotter.render()

        logger.debug(
            "scene_rebuilt",
            actors=len(self._actors),
            bond_length_factor=self.options.bond_length_factor,
            show_lone_pairs=self.options.show_lone_pairs,
            show_bond_angles=self.options.show_bond_angles,
        )

    def _add_mesh(self, mesh: Any, color: int, name: str, **kwargs) -> None:
        actor = self.plotter.add_mesh(
            mesh,
            color=to_hex_color(color),
            smooth_shading=True,
            name=name,
            reset_camera=False,
            render=False,
            **kwargs,
        )
        self._actors.append(actor)

    def clear(self, render: bool = True) -> None:
        """移除本渲染器添加的全部 actor"""
        for actor in self._actors:
            self.plotter.remove_actor(actor, reset_camera=False, render=False)
        self._actors = []
        if render:
            self.plotter.render()
