"""
交互式分子视图

打开窗口、布置灯光和控件，并在退出时释放全部图形资源。
"""
from typing import Any, Callable, Optional

import pyvista as pv

from core.config import ViewerSettings, get_settings
from core.molecules.structure import Structure
from logging_config import get_logger

from .renderer import SceneRenderer
from .scene import SceneStyle, to_hex_color

logger = get_logger(__name__)

AMBIENT_INTENSITY = 0.25
KEY_LIGHT_POSITION = (10.0, 10.0, 10.0)


class MoleculeView:
    """
    分子 3D 视图

    Example:
        ```python
        with MoleculeView(water.structure, title="water") as view:
            view.show()
        ```
    """

    def __init__(
        self,
        structure: Structure,
        title: str = "MolView",
        settings: Optional[ViewerSettings] = None,
        plotter_factory: Optional[Callable[..., Any]] = None,
        mesh_factory: Any = None,
        off_screen: bool = False,
    ):
        self.structure = structure
        self.title = title
        self.settings = settings or get_settings().viewer
        self.style = SceneStyle.from_settings(self.settings)
        self._plotter_factory = plotter_factory or pv.Plotter
        self._mesh_factory = mesh_factory
        self.off_screen = off_screen

        self.plotter: Any = None
        self.renderer: Optional[SceneRenderer] = None

    @property
    def is_open(self) -> bool:
        return self.plotter is not None

    def open(self) -> "MoleculeView":
        """创建窗口、灯光、控件并完成首次构建"""
        if self.is_open:
            return self

        self.plotter = self._plotter_factory(
            window_size=self.settings.window_size,
            title=self.title,
            off_screen=self.off_screen,
            lighting="none",
        )
        try:
            self._setup_scene()
        except BaseException:
            self.close()
            raise
        logger.info("viewer_opened", title=self.title, atoms=self.structure.atom_count)
        return self

    def _setup_scene(self) -> None:
        self.plotter.set_background(to_hex_color(self.settings.background))
        self.plotter.add_light(pv.Light(light_type="headlight", intensity=AMBIENT_INTENSITY))
        self.plotter.add_light(pv.Light(
            position=KEY_LIGHT_POSITION,
            focal_point=(0.0, 0.0, 0.0),
            light_type="scene light",
            intensity=1.0,
        ))
        self.plotter.enable_trackball_style()

        self.renderer = SceneRenderer(self.plotter, self.style, self._mesh_factory)
        self._add_controls()
        self.renderer.update(
            structure=self.structure,
            bond_length_factor=self.settings.bond_length_factor,
        )

    def _add_controls(self) -> None:
        self.plotter.add_checkbox_button_widget(
            self.toggle_lone_pairs,
            value=False,
            position=(10, 10),
            size=30,
        )
        self.plotter.add_text("Lone pairs", position=(50, 14), font_size=10)

        self.plotter.add_checkbox_button_widget(
            self.toggle_bond_angles,
            value=False,
            position=(10, 50),
            size=30,
        )
        self.plotter.add_text("Bond angles", position=(50, 54), font_size=10)

        self.plotter.add_slider_widget(
            self.set_bond_length_factor,
            rng=[self.settings.bond_length_factor_min, self.settings.bond_length_factor_max],
            value=self.settings.bond_length_factor,
            title="Bond length",
            pointa=(0.6, 0.08),
            pointb=(0.95, 0.08),
            style="modern",
            interaction_event="always",
        )

    # ===== 控件回调 =====

    def toggle_lone_pairs(self, state: bool) -> None:
        self.renderer.update(show_lone_pairs=bool(state))

    def toggle_bond_angles(self, state: bool) -> None:
        self.renderer.update(show_bond_angles=bool(state))

    def set_bond_length_factor(self, value: float) -> None:
        self.renderer.update(bond_length_factor=float(value))

    def set_structure(self, structure: Structure) -> None:
        """切换显示的分子，相机保持不动"""
        self.structure = structure
        if self.renderer is not None:
            self.renderer.update(structure=structure)

    def show(self) -> None:
        """进入交互循环，窗口关闭时返回"""
        if not self.is_open:
            self.open()
        self.plotter.show(auto_close=False)

    def close(self) -> None:
        """释放控件、actor 与窗口"""
        if not self.is_open:
            return
        self.plotter.clear_button_widgets()
        self.plotter.clear_slider_widgets()
        if self.renderer is not None:
            self.renderer.clear(render=False)
        self.plotter.close()
        self.plotter = None
        self.renderer = None
        logger.info("viewer_closed", title=self.title)

    def __enter__(self) -> "MoleculeView":
        return self.open()

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
