"""
Arc flattening for the globe renderer.

The renderer draws one arc per connection. Arcs are derived on the fly from
the marker list and never stored.
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, Tuple

from src.core.store import Marker


@dataclass(frozen=True)
class Arc:
    """
    One rendered arc, from a marker to one of its connection targets.

    Parameters
    ----------
    order : int
        Animation sequencing hint copied from the connection
    start_lat, start_lng : float
        Owning marker's coordinates
    end_lat, end_lng : float
        Connection target coordinates
    arc_alt : float
        Arc height hint
    color : str
        Color token
    """

    order: int
    start_lat: float
    start_lng: float
    end_lat: float
    end_lng: float
    arc_alt: float
    color: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "order": self.order,
            "startLat": self.start_lat,
            "startLng": self.start_lng,
            "endLat": self.end_lat,
            "endLng": self.end_lng,
            "arcAlt": self.arc_alt,
            "color": self.color,
        }


def build_arcs(markers: Iterable[Marker]) -> Tuple[Arc, ...]:
    """
    Flatten every marker's connections into arcs.

    Order is marker-then-connection: all arcs of the first marker, in
    connection order, then those of the second marker, and so on.
    """
    return tuple(
        Arc(
            order=connection.order,
            start_lat=marker.coordinates.lat,
            start_lng=marker.coordinates.lng,
            end_lat=connection.target_coordinates.lat,
            end_lng=connection.target_coordinates.lng,
            arc_alt=connection.arc_alt,
            color=connection.color,
        )
        for marker in markers
        for connection in marker.connections
    )
