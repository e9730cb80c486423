import itertools
import math

from finance_tracker import DEFAULT_CENTER, UNIT_OFFSET, Location, Transaction, map_view, offset
from finance_tracker.geo import FOCUSED_ZOOM, OVERVIEW_ZOOM, spiral_offset


def _at(lat, lng, id_):
    return Transaction(id=id_, type="expense", amount=10, location=Location(lat=lat, lng=lng))


def _distance(marker):
    return math.hypot(marker.lat - marker.original_lat, marker.lng - marker.original_lng)


def test_three_records_at_same_point_are_spread_apart():
    txs = [_at(12.90, 77.60, f"t{i}") for i in range(3)]
    markers = offset(txs)

    assert [m.id for m in markers] == ["t0", "t1", "t2"]
    assert (markers[0].lat, markers[0].lng) == (12.90, 77.60)
    coords = {(m.lat, m.lng) for m in markers}
    assert len(coords) == 3
    for m in markers[1:]:
        assert _distance(m) <= 2 * UNIT_OFFSET + 1e-12


def test_displacement_grows_by_unit_per_occurrence():
    markers = offset([_at(1.0, 2.0, i) for i in range(6)])
    for m in markers:
        assert m.occurrence == m.id
        assert math.isclose(_distance(m), m.occurrence * UNIT_OFFSET, abs_tol=1e-12)
        assert _distance(m) <= (len(markers) - 1) * UNIT_OFFSET + 1e-12


def test_distinct_coordinates_across_mixed_groups():
    txs = [
        _at(12.9, 77.6, "a1"),
        _at(28.6, 77.2, "b1"),
        _at(12.9, 77.6, "a2"),
        _at(28.6, 77.2, "b2"),
        _at(12.9, 77.6, "a3"),
        _at(19.0, 72.8, "c1"),
    ]
    markers = offset(txs)
    for m1, m2 in itertools.combinations(markers, 2):
        assert (m1.lat, m1.lng) != (m2.lat, m2.lng)
    # Each group's first occurrence stays put.
    firsts = {m.id: (m.lat, m.lng) for m in markers if m.occurrence == 0}
    assert firsts == {"a1": (12.9, 77.6), "b1": (28.6, 77.2), "c1": (19.0, 72.8)}


def test_grouping_uses_exact_coordinates():
    # Values within a rounding tolerance are still different groups.
    markers = offset([_at(12.9, 77.6, "a"), _at(12.9000001, 77.6, "b")])
    assert [m.occurrence for m in markers] == [0, 0]


def test_spiral_angle_uses_golden_angle_in_radians():
    d_lat, d_lng = spiral_offset(1)
    angle = math.radians(137.5)
    assert math.isclose(d_lat, math.cos(angle) * UNIT_OFFSET)
    assert math.isclose(d_lng, math.sin(angle) * UNIT_OFFSET)

    d_lat3, d_lng3 = spiral_offset(3)
    angle3 = math.radians((3 * 137.5) % 360)
    assert math.isclose(d_lat3, math.cos(angle3) * 3 * UNIT_OFFSET)
    assert math.isclose(d_lng3, math.sin(angle3) * 3 * UNIT_OFFSET)
    assert spiral_offset(0) == (0.0, 0.0)


def test_offset_is_deterministic_and_skips_untagged_records():
    txs = [
        _at(12.9, 77.6, "a"),
        Transaction(id="no-geo", type="expense", amount=5),
        _at(12.9, 77.6, "b"),
    ]
    first = offset(txs)
    second = offset(txs)
    assert first == second
    assert [m.id for m in first] == ["a", "b"]


def test_markers_carry_display_fields():
    tx = Transaction(
        id="x",
        type="expense",
        amount=99,
        category="food",
        description="Lunch",
        location=Location(lat=1.5, lng=2.5),
    )
    (marker,) = offset([tx])
    assert (marker.category, marker.description, marker.amount, marker.type) == (
        "food",
        "Lunch",
        99,
        "expense",
    )


def test_map_view_centers_on_first_original_coordinate():
    txs = [
        Transaction(id="plain"),
        _at(12.9, 77.6, "a"),
        _at(12.9, 77.6, "b"),
        _at(28.6, 77.2, "c"),
    ]
    view = map_view(txs)
    assert view.has_center
    assert view.center == (12.9, 77.6)
    assert view.zoom_hint == FOCUSED_ZOOM
    assert len(view.markers) == 3


def test_map_view_falls_back_without_geo_tags():
    view = map_view([Transaction(id="plain")])
    assert not view.has_center
    assert view.center == DEFAULT_CENTER
    assert view.zoom_hint == OVERVIEW_ZOOM
    assert view.markers == ()


def test_displaced_marker_skips_coordinate_held_by_another_group():
    d_lat, d_lng = spiral_offset(1)
    markers = offset([_at(d_lat, d_lng, "p"), _at(0.0, 0.0, "z1"), _at(0.0, 0.0, "z2")])

    assert len({(m.lat, m.lng) for m in markers}) == 3
    assert (markers[0].lat, markers[0].lng) == (d_lat, d_lng)
    assert (markers[1].lat, markers[1].lng) == (0.0, 0.0)
    assert (markers[2].lat, markers[2].lng) == spiral_offset(2)
    assert markers[2].occurrence == 1


def test_anchor_moves_when_an_earlier_marker_took_its_coordinate():
    d_lat, d_lng = spiral_offset(1)
    markers = offset([_at(0.0, 0.0, "z1"), _at(0.0, 0.0, "z2"), _at(d_lat, d_lng, "p")])

    assert len({(m.lat, m.lng) for m in markers}) == 3
    assert (markers[1].lat, markers[1].lng) == (d_lat, d_lng)
    assert (markers[2].lat, markers[2].lng) != (d_lat, d_lng)
