"""Route reconciliation tests."""
import pytest

from routing import reconcile, routable_waypoints
from schemas import Location

pytestmark = pytest.mark.unit


def loc(name, lat=None, lon=None):
    return Location(name=name, latitude=lat, longitude=lon)


def names(route):
    return [p.name for p in route]


class TestReconcile:
    def test_origin_and_destination_only(self):
        assert names(reconcile(loc("Shanghai"), loc("Rotterdam"), [])) == ["Shanghai", "Rotterdam"]

    def test_intermediates_kept_in_input_order(self):
        route = reconcile(loc("A"), loc("D"), [loc("C"), loc("B")])
        assert names(route) == ["A", "C", "B", "D"]

    def test_intermediates_matching_anchors_are_dropped(self):
        route = reconcile(loc("A"), loc("D"), [loc("A"), loc("B"), loc("D")])
        assert names(route) == ["A", "B", "D"]

    def test_duplicate_intermediates_first_occurrence_wins(self):
        route = reconcile(loc("A"), loc("D"), [loc("B", 1.0, 2.0), loc("C"), loc("B", 9.0, 9.0)])
        assert names(route) == ["A", "B", "C", "D"]
        assert route[1].latitude == 1.0

    def test_same_origin_and_destination_merge(self):
        assert names(reconcile(loc("A"), loc("A"), [])) == ["A"]

    def test_no_anchors_gives_empty_route(self):
        assert reconcile(None, None, []) == []

    def test_missing_origin(self):
        assert names(reconcile(None, loc("D"), [loc("B")])) == ["B", "D"]

    def test_missing_destination(self):
        assert names(reconcile(loc("A"), None, [loc("B")])) == ["A", "B"]

    def test_none_entries_are_ignored(self):
        assert names(reconcile(loc("A"), loc("D"), [None, loc("B"), None])) == ["A", "B", "D"]

    def test_intermediates_may_be_omitted(self):
        assert names(reconcile(loc("A"), loc("D"))) == ["A", "D"]

    def test_is_idempotent(self):
        args = (loc("A"), loc("D"), [loc("B"), loc("C"), loc("B")])
        assert reconcile(*args) == reconcile(*args)

    def test_rerunning_on_own_output_is_stable(self):
        origin, dest = loc("A"), loc("D")
        first = reconcile(origin, dest, [loc("B"), loc("C")])
        assert reconcile(origin, dest, first) == first

    def test_inputs_are_not_mutated(self):
        origin = loc("A", 1.0, 1.0)
        route = reconcile(origin, loc("D"), [])
        assert route[0] == origin
        assert route[0] is not origin

    @pytest.mark.parametrize("intermediates", [
        ["A", "A", "A"],
        ["D", "B", "D", "B"],
        ["C", "B", "C", "A", "D", "E", "E"],
    ])
    def test_no_duplicates_and_anchored(self, intermediates):
        route = reconcile(loc("A"), loc("D"), [loc(n) for n in intermediates])
        assert len(names(route)) == len(set(names(route)))
        assert route[0].name == "A"
        assert route[-1].name == "D"


class TestRoutableWaypoints:
    def test_keeps_only_points_with_both_coordinates(self):
        route = [loc("A", 1.0, 2.0), loc("B"), loc("C", 3.0, None), loc("D", 4.0, 5.0)]
        assert names(routable_waypoints(route)) == ["A", "D"]
