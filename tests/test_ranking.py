"""
Tests for the Ranking Pipeline

Unit tests for distance math, filtering, sorting, and nearest lookups.
"""

import math
from datetime import datetime, timezone

import pytest

from wheelmate.errors import LocationUnavailableError, NoFacilityFoundError
from wheelmate.models.facility import Facility, GeoPoint
from wheelmate.services import ranking


ORIGIN = GeoPoint(lat=0.0, lng=0.0)


def make_facility(name, facility_type="hospital", lat=0.0, lng=0.0,
                  address="Somewhere", average=0.0, facility_id=None):
    return Facility(
        id=facility_id or name,
        name=name,
        type=facility_type,
        location={"lat": lat, "lng": lng},
        address=address,
        average_rating=average,
        created_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
    )


def at_km(name, km, facility_type="hospital"):
    """Facility on the equator `km` east of the origin."""
    return make_facility(name, facility_type, lat=0.0, lng=math.degrees(km / 6371.0))


def names(items):
    return [f.name for f in items]


class TestHaversine:
    """Tests for haversine_km."""

    def test_identical_points_are_zero(self):
        assert ranking.haversine_km(40.7128, -74.0060, 40.7128, -74.0060) == 0.0

    def test_symmetric(self):
        a = ranking.haversine_km(40.7128, -74.0060, 34.0522, -118.2437)
        b = ranking.haversine_km(34.0522, -118.2437, 40.7128, -74.0060)
        assert a == pytest.approx(b)

    def test_new_york_to_los_angeles(self):
        d = ranking.haversine_km(40.7128, -74.0060, 34.0522, -118.2437)
        assert d == pytest.approx(3936, rel=0.01)

    def test_antipodal_is_half_circumference(self):
        d = ranking.haversine_km(0.0, 0.0, 0.0, 180.0)
        assert d == pytest.approx(math.pi * 6371.0)
        assert d <= 20015.1

    def test_one_degree_on_equator(self):
        d = ranking.haversine_km(0.0, 0.0, 0.0, 1.0)
        assert d == pytest.approx(111.195, rel=1e-4)


class TestAnnotateDistance:
    """Tests for annotate_distance."""

    def test_without_observer_distance_is_unknown(self):
        views = ranking.annotate_distance([at_km("A", 1.0), at_km("B", 2.0)], None)

        assert [v.distance for v in views] == [None, None]

    def test_with_observer(self):
        views = ranking.annotate_distance([at_km("A", 1.0), at_km("B", 2.5)], ORIGIN)

        assert views[0].distance == pytest.approx(1.0)
        assert views[1].distance == pytest.approx(2.5)

    def test_inputs_not_mutated(self):
        facility = at_km("A", 1.0)
        ranking.annotate_distance([facility], ORIGIN)

        assert not hasattr(facility, "distance")


class TestFilterFacilities:
    """Tests for filter_facilities."""

    @pytest.fixture
    def feed(self):
        return [
            make_facility("City Hospital", "hospital", address="1 Main St"),
            make_facility("Central Police", "police", address="2 Elm St"),
            make_facility("Green Cafe", "restaurant", address="3 Main St"),
            make_facility("Public Toilet", "toilet", address="Park Rd"),
        ]

    def test_no_filters_is_identity(self, feed):
        assert names(ranking.filter_facilities(feed, "", "all")) == names(feed)
        assert names(ranking.filter_facilities(feed, None, None)) == names(feed)

    def test_category(self, feed):
        result = ranking.filter_facilities(feed, category="police")

        assert names(result) == ["Central Police"]

    def test_search_matches_name_case_insensitive(self, feed):
        result = ranking.filter_facilities(feed, search_term="HOSPITAL")

        assert names(result) == ["City Hospital"]

    def test_search_matches_address(self, feed):
        result = ranking.filter_facilities(feed, search_term="main st")

        assert names(result) == ["City Hospital", "Green Cafe"]

    def test_category_and_search_combined(self, feed):
        result = ranking.filter_facilities(feed, search_term="main", category="restaurant")

        assert names(result) == ["Green Cafe"]

    def test_no_match_returns_empty(self, feed):
        assert ranking.filter_facilities(feed, search_term="zzz") == []


class TestSortFacilities:
    """Tests for sort_facilities."""

    def test_distance_ascending(self):
        views = ranking.annotate_distance(
            [at_km("Far", 9.0), at_km("Near", 1.0), at_km("Mid", 4.0)], ORIGIN
        )

        assert names(ranking.sort_facilities(views, "distance")) == ["Near", "Mid", "Far"]

    def test_unknown_distances_trail_in_input_order(self):
        known = ranking.annotate_distance([at_km("Far", 9.0), at_km("Near", 1.0)], ORIGIN)
        unknown = ranking.annotate_distance([at_km("X", 0.5), at_km("Y", 0.1)], None)
        mixed = [unknown[0], known[0], unknown[1], known[1]]

        result = ranking.sort_facilities(mixed, "distance")

        assert names(result) == ["Near", "Far", "X", "Y"]

    def test_rating_descending_stable(self):
        feed = [
            make_facility("A", average=3.0),
            make_facility("B", average=5.0),
            make_facility("C", average=3.0),
            make_facility("D", average=0.0),
        ]

        assert names(ranking.sort_facilities(feed, "rating")) == ["B", "A", "C", "D"]

    def test_name_ignores_case_and_accents(self):
        feed = [make_facility("cafe"), make_facility("Zoo"), make_facility("Ápple"), make_facility("bank")]

        assert names(ranking.sort_facilities(feed, "name")) == ["Ápple", "bank", "cafe", "Zoo"]

    def test_unknown_key_keeps_input_order(self):
        feed = [make_facility("B"), make_facility("A"), make_facility("C")]

        assert names(ranking.sort_facilities(feed, "popularity")) == ["B", "A", "C"]
        assert names(ranking.sort_facilities(feed, None)) == ["B", "A", "C"]

    @pytest.mark.parametrize("key", ["distance", "rating", "name"])
    def test_sort_is_idempotent(self, key):
        feed = ranking.annotate_distance(
            [at_km("b", 3.0), at_km("A", 1.0), at_km("c", 3.0)], ORIGIN
        )
        feed[0].average_rating = 2.0
        feed[1].average_rating = 4.0

        once = ranking.sort_facilities(feed, key)
        twice = ranking.sort_facilities(once, key)

        assert names(once) == names(twice)

    def test_does_not_mutate_input(self):
        feed = [make_facility("B"), make_facility("A")]
        ranking.sort_facilities(feed, "name")

        assert names(feed) == ["B", "A"]


class TestRankFacilities:
    """Tests for the combined explore pipeline."""

    def test_filter_then_sort(self):
        feed = [
            at_km("Far Hospital", 8.0),
            at_km("Cafe", 1.0, "restaurant"),
            at_km("Near Hospital", 2.0),
        ]

        result = ranking.rank_facilities(feed, ORIGIN, None, "hospital", "distance")

        assert names(result) == ["Near Hospital", "Far Hospital"]
        assert result[0].distance == pytest.approx(2.0)

    def test_defaults_without_observer_keep_feed_order(self):
        feed = [at_km("B", 8.0), at_km("A", 1.0)]

        result = ranking.rank_facilities(feed)

        assert names(result) == ["B", "A"]
        assert all(v.distance is None for v in result)


class TestFindNearestOfType:
    """Tests for find_nearest_of_type."""

    def test_returns_closest(self):
        feed = [at_km("H1", 12.3), at_km("H2", 4.1), at_km("H3", 7.0)]

        nearest = ranking.find_nearest_of_type(feed, "hospital", ORIGIN)

        assert nearest.name == "H2"
        assert nearest.distance == pytest.approx(4.1)

    def test_ignores_other_types(self):
        feed = [at_km("Cafe", 0.1, "restaurant"), at_km("H", 3.0)]

        assert ranking.find_nearest_of_type(feed, "hospital", ORIGIN).name == "H"

    def test_first_of_equal_distances_wins(self):
        feed = [at_km("First", 2.0), at_km("Second", 2.0)]

        assert ranking.find_nearest_of_type(feed, "hospital", ORIGIN).name == "First"

    def test_without_location(self):
        with pytest.raises(LocationUnavailableError) as exc:
            ranking.find_nearest_of_type([at_km("H", 1.0)], "hospital", None)

        assert exc.value.kind == "validation"

    def test_none_of_type(self):
        with pytest.raises(NoFacilityFoundError) as exc:
            ranking.find_nearest_of_type([at_km("H", 1.0)], "police", ORIGIN)

        assert exc.value.message == "No police nearby."
        assert exc.value.kind == "not_found"


class TestFindNearby:
    """Tests for find_nearby."""

    def test_within_radius_in_feed_order(self):
        feed = [at_km("Out", 6.0), at_km("B", 3.0), at_km("A", 1.0)]

        result = ranking.find_nearby(feed, ORIGIN)

        assert names(result) == ["B", "A"]

    def test_limit(self):
        feed = [at_km(str(i), 0.5 * i) for i in range(1, 6)]

        assert names(ranking.find_nearby(feed, ORIGIN)) == ["1", "2", "3"]
        assert len(ranking.find_nearby(feed, ORIGIN, limit=10)) == 5

    def test_radius_is_exclusive(self):
        feed = [make_facility("Edge", lat=0.0, lng=0.0)]

        assert ranking.find_nearby(feed, ORIGIN, radius_km=0.0) == []

    def test_without_observer(self):
        assert ranking.find_nearby([at_km("A", 1.0)], None) == []
