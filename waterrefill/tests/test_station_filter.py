"""Tests for station display filters."""

from waterrefill.models.station import LocationType, RefillCost
from waterrefill.services.station_filter import StationFilter, filter_stations
from waterrefill.tests.conftest import make_station


def _stations():
    return [
        make_station(name="Fountain", location_type=LocationType.WATER_FOUNTAIN, cost=RefillCost.FREE),
        make_station(name="Cafe", location_type=LocationType.CAFE, cost=RefillCost.PURCHASE_REQUIRED,
                     is_car_accessible=True),
        make_station(name="Pub", location_type=LocationType.PUB, cost=RefillCost.PAID, is_car_accessible=False),
        make_station(name="Draft", is_draft=True),
    ]


def test_default_filter_hides_only_drafts():
    assert [s.name for s in StationFilter().apply(_stations())] == ["Fountain", "Cafe", "Pub"]


def test_filter_by_type_and_cost():
    visible = filter_stations(
        _stations(),
        {LocationType.CAFE, LocationType.PUB},
        {RefillCost.PAID},
    )

    assert [s.name for s in visible] == ["Pub"]


def test_car_accessible_only_excludes_unknown():
    visible = filter_stations(_stations(), set(LocationType), set(RefillCost), car_accessible_only=True)

    assert [s.name for s in visible] == ["Cafe"]


def test_last_selection_cannot_be_removed():
    filters = StationFilter()
    for cost in (RefillCost.FREE, RefillCost.PURCHASE_REQUIRED):
        assert filters.toggle_cost(cost)

    assert filters.toggle_cost(RefillCost.PAID) is False
    assert filters.selected_costs == {RefillCost.PAID}


def test_toggle_twice_restores_and_reset_selects_everything():
    filters = StationFilter()
    filters.toggle_type(LocationType.PUB)
    assert LocationType.PUB not in filters.selected_types

    filters.toggle_type(LocationType.PUB)
    assert LocationType.PUB in filters.selected_types

    filters.toggle_type(LocationType.CAFE)
    filters.car_accessible_only = True
    filters.reset()
    assert filters.selected_types == set(LocationType)
    assert filters.car_accessible_only is False
