from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from ..core.constants import (
    DEFAULT_GEOFENCE_RADIUS_METERS,
    DEFAULT_MESS_LATITUDE,
    DEFAULT_MESS_LONGITUDE,
    ERR_GEOLOCATION_REQUIRED,
)
from .distance import Coordinate, distance_meters


@dataclass(frozen=True)
class GeofenceConfig:
    """Mess reference point and the radius a scan must fall inside.

    ``require_location`` is off by default: a scan without coordinates
    passes the geofence, which means a client that omits its location is
    never checked. Deployments that want to close that gap switch it on.
    """

    mess_location: Coordinate = field(
        default_factory=lambda: Coordinate(DEFAULT_MESS_LATITUDE, DEFAULT_MESS_LONGITUDE)
    )
    max_radius_meters: float = DEFAULT_GEOFENCE_RADIUS_METERS
    require_location: bool = False


@dataclass(frozen=True)
class GeofenceCheck:
    valid: bool
    error: Optional[str] = None
    distance_meters: Optional[float] = None


def check_geolocation(presented: Optional[Coordinate], config: GeofenceConfig) -> GeofenceCheck:
    if presented is None:
        if config.require_location:
            return GeofenceCheck(valid=False, error=ERR_GEOLOCATION_REQUIRED)
        return GeofenceCheck(valid=True)

    # whole meters; the radius comparison uses the rounded value too
    distance = float(round(distance_meters(presented, config.mess_location)))
    if distance <= config.max_radius_meters:
        return GeofenceCheck(valid=True, distance_meters=distance)

    return GeofenceCheck(
        valid=False,
        error=(
            f"You are {distance:.0f}m away from the mess. "
            f"Maximum allowed distance is {config.max_radius_meters:g}m"
        ),
        distance_meters=distance,
    )
