"""Display filters applied to loaded stations."""

from __future__ import annotations

from typing import AbstractSet, Iterable, List, Set

from ..models.station import LocationType, RefillCost, Station


def filter_stations(
    stations: Iterable[Station],
    selected_types: AbstractSet[LocationType],
    selected_costs: AbstractSet[RefillCost],
    car_accessible_only: bool = False,
) -> List[Station]:
    """Stations that are submitted and match every active filter."""
    return [
        station
        for station in stations
        if not station.is_draft
        and station.location_type in selected_types
        and station.cost in selected_costs
        and (not car_accessible_only or station.is_car_accessible is True)
    ]


class StationFilter:
    """Current filter selections; at least one type and one cost stay selected."""

    def __init__(self) -> None:
        self.selected_types: Set[LocationType] = set(LocationType)
        self.selected_costs: Set[RefillCost] = set(RefillCost)
        self.car_accessible_only = False

    def toggle_type(self, location_type: LocationType) -> bool:
        """Flip a type; returns False if it is the last one selected."""
        return self._toggle(self.selected_types, location_type)

    def toggle_cost(self, cost: RefillCost) -> bool:
        return self._toggle(self.selected_costs, cost)

    @staticmethod
    def _toggle(selection: set, value) -> bool:
        if value in selection:
            if len(selection) == 1:
                return False
            selection.discard(value)
        else:
            selection.add(value)
        return True

    def reset(self) -> None:
        self.selected_types = set(LocationType)
        self.selected_costs = set(RefillCost)
        self.car_accessible_only = False

    def apply(self, stations: Iterable[Station]) -> List[Station]:
        return filter_stations(
            stations, self.selected_types, self.selected_costs, self.car_accessible_only
        )
