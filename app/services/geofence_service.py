"""
Geofence geometry normalization and point containment
"""
import logging
import math
from collections.abc import Mapping
from typing import Any, Iterable, List, NamedTuple, Optional, Sequence, Tuple
from app.models.geofence import GeofenceType

logger = logging.getLogger(__name__)

# Mean Earth radius in meters
EARTH_RADIUS_METERS = 6371000.0

# Fields whose change forces the canonical geometry to be re-derived
GEOMETRY_FIELDS = frozenset({"fence_type", "coordinates", "center", "radius"})

MIN_VERTICES = {
    GeofenceType.POLYGON: 3,
    GeofenceType.RECTANGLE: 2,
}


class GeometryValidationError(ValueError):
    """Shape fields are insufficient for the declared geofence type"""


class Coordinate(NamedTuple):
    lat: float
    lng: float

    @classmethod
    def from_value(cls, value: Any) -> "Coordinate":
        """Build a coordinate from a mapping or any object with lat/lng"""
        if isinstance(value, Coordinate):
            return value
        if isinstance(value, Mapping):
            return cls(float(value["lat"]), float(value["lng"]))
        return cls(float(value.lat), float(value.lng))


class GeofenceService:
    """Service for geofence geometry and containment checks"""

    @staticmethod
    def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
        """
        Calculate the great circle distance between two points
        on the earth (specified in decimal degrees).
        Returns distance in meters.
        """
        # Convert to radians
        lat1, lon1, lat2, lon2 = map(math.radians, [lat1, lon1, lat2, lon2])

        # Haversine formula
        dlat = lat2 - lat1
        dlon = lon2 - lon1
        a = math.sin(dlat/2)**2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlon/2)**2
        # Rounding near the antipode can push a past 1
        a = min(1.0, a)
        c =2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

        return EARTH_RADIUS_METERS * c

    @staticmethod
    def point_in_polygon(lat: float, lon: float, polygon: Sequence[Coordinate]) -> bool:
        """
        Check if a point is inside a polygon using ray casting algorithm.
        The ring may be open or closed; fewer than 3 vertices never contains.
        """
        n = len(polygon)
        if n < 3:
            return False

        inside = False

        j = n - 1
        for i in range(n):
            xi, yi = polygon[i].lng, polygon[i].lat
            xj, yj = polygon[j].lng, polygon[j].lat

            if ((yi > lat) != (yj > lat)) and \
               (lon < (xj - xi) * (lat - yi) / (yj - yi) + xi):
                inside = not inside
            j = i

        return inside

    @staticmethod
    def normalize_geometry(
        fence_type: Any,
        coordinates: Optional[Iterable[Any]] = None,
        center: Optional[Any] = None,
        radius: Optional[float] = None
    ) -> dict:
        """
        Derive the GeoJSON geometry stored alongside a geofence.

        Circles become a Point at the center (the radius stays a separate
        field). Polygons and rectangles become a single closed ring of
        [lng, lat] pairs. Raises GeometryValidationError when the shape
        fields cannot describe the declared type.
        """
        try:
            fence_type = GeofenceType(fence_type)
        except ValueError:
            raise GeometryValidationError(f"Unknown geofence type: {fence_type!r}")

        if fence_type == GeofenceType.CIRCLE and center is None:
            raise GeometryValidationError("Circle geofence requires a center")

        try:
            if fence_type == GeofenceType.CIRCLE:
                point = Coordinate.from_value(center)
                return {"type": "Point", "coordinates": [point.lng, point.lat]}

            vertices = [Coordinate.from_value(c) for c in coordinates or []]
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise GeometryValidationError(f"Malformed coordinate: {e}")

        required = MIN_VERTICES[fence_type]
        if len(vertices) < required:
            raise GeometryValidationError(
                f"{fence_type.value.capitalize()} geofence requires at least "
                f"{required} coordinates"
            )

        ring = [[v.lng, v.lat] for v in vertices]
        # Close the ring
        if ring[0] != ring[-1]:
            ring.append(list(ring[0]))

        return {"type": "Polygon", "coordinates": [ring]}

    def prepare_update(self, geofence: Any, update_data: dict) -> dict:
        """
        Return the field changes to apply to a geofence, adding a freshly
        derived geometry when any shape field is part of the update.
        Raises before anything is applied, so a rejected update leaves the
        record untouched.
        """
        changes = dict(update_data)
        if not GEOMETRY_FIELDS & changes.keys():
            return changes

        merged = {
            field: changes[field] if field in changes else getattr(geofence, field)
            for field in GEOMETRY_FIELDS
        }
        if merged["fence_type"] == GeofenceType.CIRCLE and merged["radius"] is None:
            raise GeometryValidationError("Circle geofence requires center and radius")

        changes["geometry"] = self.normalize_geometry(**merged)
        if merged["fence_type"] == GeofenceType.CIRCLE:
            changes["coordinates"] = self.circle_vertices(merged["center"])
        return changes

    @staticmethod
    def circle_vertices(center: Any) -> List[dict]:
        """A circle keeps its center as its only vertex"""
        return [Coordinate.from_value(center)._asdict()]

    def check_point(
        self,
        geofence: Any,
        point: Any
    ) -> Tuple[bool, Optional[float]]:
        """
        Check if a point is within a geofence.
        Returns (is_inside, distance_from_center); the distance is only
        reported for circles. Incomplete shape data is never inside.
        """
        point = Coordinate.from_value(point)

        try:
            fence_type = GeofenceType(geofence.fence_type)
        except ValueError:
            logger.debug(f"Skipping geofence with unknown type {geofence.fence_type!r}")
            return False, None

        try:
            if fence_type == GeofenceType.CIRCLE:
                if geofence.center is None or geofence.radius is None:
                    return False, None
                center = Coordinate.from_value(geofence.center)
                distance = self.haversine_distance(
                    point.lat, point.lng, center.lat, center.lng
                )
                return distance <= geofence.radius, distance

            # Rectangles are stored as their corner list and share the polygon test
            vertices = [Coordinate.from_value(c) for c in geofence.coordinates or []]
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            logger.debug(f"Malformed shape data on geofence {getattr(geofence, 'id', None)}: {e}")
            return False, None

        return self.point_in_polygon(point.lat, point.lng, vertices), None

    def contains(self, geofence: Any, point: Any) -> bool:
        """Check if a point is within a geofence"""
        return self.check_point(geofence, point)[0]

    def find_containing(self, geofences: Iterable[Any], point: Any) -> List[Any]:
        """Geofences containing the point, in input order"""
        point = Coordinate.from_value(point)
        return [geofence for geofence in geofences if self.contains(geofence, point)]


geofence_service = GeofenceService()
