"""
几何引擎测试
"""
import math
import types

import pytest

from core.geometry import (
    InvalidGeometryArgument,
    MalformedStructure,
    collect_lone_pair_positions,
    compute_all_bond_angles,
    compute_angle_arc_geometry,
    compute_bond_angle,
    compute_bond_placement,
    compute_display_positions,
    compute_geometry,
    select_anchor_atom,
)
from core.geometry.vectors import distance, rotate_vector, Y_AXIS
from core.molecules import Atom, Bond, LonePair, Structure

WATER_ANGLE = math.degrees(math.acos(-0.28))
TETRAHEDRAL_ANGLE = math.degrees(math.acos(-1.0 / 3.0))


def assert_point(actual, expected, tol=1e-9):
    assert actual == pytest.approx(expected, abs=tol)


def carbon_dioxide(axis=(1.0, 0.0, 0.0)):
    ax, ay, az = axis
    return Structure(
        atoms=[
            Atom(id=1, x=0.0, y=0.0, z=0.0),
            Atom(id=2, x=-ax, y=-ay, z=-az),
            Atom(id=3, x=ax, y=ay, z=az),
        ],
        bonds=[(1, 2), (1, 3)],
    )


class TestDisplayPositions:
    """显示坐标测试"""

    def test_factor_one_returns_stored_coordinates(self, methane):
        positions = compute_display_positions(methane, 1.0)
        for atom in methane.atoms:
            assert positions[atom.id] == atom.position

    def test_scales_around_most_connected_atom(self, water):
        positions = compute_display_positions(water, 2.0)
        assert positions[1] == (0.0, 0.0, 0.0)
        assert_point(positions[2], (-1.6, 1.2, 0.0))
        assert_point(positions[3], (1.6, 1.2, 0.0))

    def test_ring_bonds_scale_exactly(self):
        """环上每根键都按相同倍数伸缩"""
        ring = Structure(
            atoms=[
                Atom(id=1, x=0.0, y=0.0, z=0.0),
                Atom(id=2, x=1.0, y=0.0, z=0.0),
                Atom(id=3, x=0.0, y=1.0, z=0.0),
            ],
            bonds=[(1, 2), (2, 3), (3, 1)],
        )
        positions = compute_display_positions(ring, 1.5)
        for placement in compute_bond_placement(ring, 1.5):
            first, second = placement.atom_ids
            assert distance(positions[first], positions[second]) == pytest.approx(placement.length)

    def test_isolated_atom_does_not_move(self):
        structure = Structure(
            atoms=[
                Atom(id=1, x=0.0, y=0.0, z=0.0),
                Atom(id=2, x=1.0, y=0.0, z=0.0),
                Atom(id=3, x=5.0, y=5.0, z=5.0),
            ],
            bonds=[(1, 2)],
        )
        positions = compute_display_positions(structure, 2.0)
        assert positions[3] == (5.0, 5.0, 5.0)
        assert_point(positions[2], (2.0, 0.0, 0.0))

    def test_input_is_not_modified(self, water):
        before = water.to_dict()
        compute_geometry(water, 1.7)
        assert water.to_dict() == before


class TestAnchorSelection:
    """锚定原子选择测试"""

    def test_most_connections_wins(self, methane):
        assert select_anchor_atom(methane) == 1

    def test_tie_broken_by_distance_to_origin(self):
        structure = Structure(
            atoms=[Atom(id=7, x=3.0, y=0.0, z=0.0), Atom(id=4, x=1.0, y=0.0, z=0.0)],
            bonds=[(7, 4)],
        )
        assert select_anchor_atom(structure) == 4

    def test_tie_broken_by_atom_order(self):
        structure = Structure(
            atoms=[Atom(id=9, x=-1.0, y=0.0, z=0.0), Atom(id=2, x=1.0, y=0.0, z=0.0)],
            bonds=[(9, 2)],
        )
        assert select_anchor_atom(structure) == 9


class TestBondPlacement:
    """化学键放置测试"""

    def test_water_bonds(self, water):
        placements = compute_bond_placement(water)
        assert [p.atom_ids for p in placements] == [(1, 2), (1, 3)]
        assert placements[0].length == pytest.approx(1.0)
        assert_point(placements[0].midpoint, (-0.4, 0.3, 0.0))
        assert_point(placements[0].direction, (-0.8, 0.6, 0.0))

    def test_length_scales_with_factor(self, methane):
        base = compute_bond_placement(methane, 1.0)
        scaled = compute_bond_placement(methane, 0.5)
        for a, b in zip(base, scaled):
            assert b.length == pytest.approx(a.length * 0.5)

    def test_orientation_maps_cylinder_axis_onto_bond(self, methane):
        for placement in compute_bond_placement(methane):
            assert_point(tuple(rotate_vector(placement.orientation, Y_AXIS)), placement.direction)

    def test_antiparallel_bond_orientation(self):
        structure = Structure(
            atoms=[Atom(id=1, x=0.0, y=1.0, z=0.0), Atom(id=2, x=0.0, y=-1.0, z=0.0)],
            bonds=[(1, 2)],
        )
        placement = compute_bond_placement(structure)[0]
        assert_point(tuple(rotate_vector(placement.orientation, Y_AXIS)), (0.0, -1.0, 0.0))

    def test_dangling_bond_raises(self):
        structure = Structure(atoms=[Atom(id=1, x=0.0, y=0.0, z=0.0)], bonds=[(1, 2)])
        with pytest.raises(MalformedStructure) as exc_info:
            compute_bond_placement(structure)
        assert exc_info.value.atom_id == 2

    def test_coincident_atoms_raise(self):
        structure = Structure(
            atoms=[Atom(id=1, x=1.0, y=1.0, z=1.0), Atom(id=2, x=1.0, y=1.0, z=1.0)],
            bonds=[(1, 2)],
        )
        with pytest.raises(MalformedStructure):
            compute_bond_placement(structure)

    @pytest.mark.parametrize("factor", [0, -1.0, float("nan"), float("inf")])
    def test_invalid_factor(self, water, factor):
        with pytest.raises(InvalidGeometryArgument):
            compute_bond_placement(water, factor)

    def test_invalid_factor_is_value_error(self, water):
        with pytest.raises(ValueError):
            compute_bond_placement(water, 0)


class TestBondAngle:
    """键角测试"""

    def test_water_angle(self, water):
        assert compute_bond_angle(water, 1, (1, 2), (1, 3)) == pytest.approx(WATER_ANGLE)

    def test_accepts_bond_objects(self, water):
        angle = compute_bond_angle(water, 1, water.bonds[0], water.bonds[1])
        assert angle == pytest.approx(WATER_ANGLE)

    def test_colinear_is_180(self):
        assert compute_bond_angle(carbon_dioxide(), 1, (1, 2), (1, 3)) == pytest.approx(180.0)

    def test_bond_without_common_atom(self, water):
        with pytest.raises(InvalidGeometryArgument):
            compute_bond_angle(water, 2, (1, 2), (1, 3))

    def test_methane_angles(self, methane):
        angles = compute_all_bond_angles(methane)
        assert len(angles) == 6
        for angle in angles:
            assert angle.common_atom_id == 1
            assert angle.degrees == pytest.approx(TETRAHEDRAL_ANGLE)

    def test_angles_unchanged_by_factor(self, water):
        for factor in (0.5, 2.0):
            angle = compute_all_bond_angles(water, factor)[0]
            assert angle.degrees == pytest.approx(WATER_ANGLE)


class TestAngleArc:
    """键角弧线测试"""

    def test_arc_spans_from_first_to_second_bond(self, water):
        angle = compute_all_bond_angles(water)[0]
        arc = angle.arc
        assert arc.radius == pytest.approx(0.3)
        assert arc.sweep_degrees == pytest.approx(WATER_ANGLE)
        assert_point(arc.point_at(0.0), (-0.24, 0.18, 0.0))
        assert_point(arc.point_at(1.0), (0.24, 0.18, 0.0))

    def test_bisector_points_between_bonds(self, water):
        arc = compute_all_bond_angles(water)[0].arc
        assert_point(arc.bisector, (0.0, 1.0, 0.0))

    def test_explicit_radius(self):
        arc = compute_angle_arc_geometry((0, 0, 0), (2, 0, 0), (0, 3, 0), radius=0.5)
        assert arc.radius == 0.5
        assert_point(arc.normal, (0.0, 0.0, 1.0))
        assert arc.sweep == pytest.approx(math.pi / 2)

    def test_default_radius_uses_shorter_bond(self):
        arc = compute_angle_arc_geometry((0, 0, 0), (2, 0, 0), (0, 3, 0))
        assert arc.radius == pytest.approx(0.6)

    def test_colinear_uses_z_reference(self):
        arc = compute_all_bond_angles(carbon_dioxide())[0].arc
        assert_point(arc.normal, (0.0, 1.0, 0.0))
        assert arc.sweep == pytest.approx(math.pi)
        assert_point(arc.point_at(1.0), (0.3, 0.0, 0.0))

    def test_colinear_along_z_uses_x_reference(self):
        arc = compute_all_bond_angles(carbon_dioxide(axis=(0.0, 0.0, 1.0)))[0].arc
        assert_point(arc.normal, (0.0, -1.0, 0.0))
        assert_point(arc.point_at(0.0), (0.0, 0.0, -0.3))
        assert_point(arc.point_at(1.0), (0.0, 0.0, 0.3))

    def test_zero_vector_rejected(self):
        with pytest.raises(InvalidGeometryArgument):
            compute_angle_arc_geometry((0, 0, 0), (0, 0, 0), (1, 0, 0))


class TestLonePairs:
    """孤对电子测试"""

    def test_generator_yields_positions(self):
        structure = Structure(
            atoms=[Atom(id=1, x=0.0, y=0.0, z=0.0)],
            lone_pairs=[LonePair(x=0.0, y=-0.5, z=0.3), LonePair(x=0.0, y=-0.5, z=-0.3)],
        )
        positions = collect_lone_pair_positions(structure)
        assert isinstance(positions, types.GeneratorType)
        assert list(positions) == [(0.0, -0.5, 0.3), (0.0, -0.5, -0.3)]

    def test_empty_when_undeclared(self, water):
        assert list(collect_lone_pair_positions(water)) == []


class TestComputeGeometry:
    """完整几何计算测试"""

    def test_deterministic(self, methane):
        assert compute_geometry(methane, 1.3) == compute_geometry(methane, 1.3)

    def test_to_dict(self, water):
        data = compute_geometry(water).to_dict()
        assert data["bondLengthFactor"] == 1.0
        assert set(data["positions"]) == {"1", "2", "3"}
        assert len(data["bonds"]) == 2
        assert len(data["angles"]) == 1
        assert data["angles"][0]["commonAtomId"] == 1
        assert data["lonePairs"] == []

    def test_structure_without_bonds(self):
        structure = Structure(atoms=[Atom(id=1, x=1.0, y=2.0, z=3.0)])
        geometry = compute_geometry(structure, 2.0)
        assert geometry.positions == {1: (1.0, 2.0, 3.0)}
        assert geometry.bonds == ()
        assert geometry.angles == ()

    def test_bond_construction_requires_two_atoms(self):
        with pytest.raises(MalformedStructure):
            Bond(atom_ids=(1, 2, 3))
