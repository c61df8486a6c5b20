"""
Renderer-facing configuration and payload.

The 3D globe itself is an external collaborator; this module only packages
what it consumes: the arc list, the marker list and a configuration object.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple

from src.client.controller import LoadState, MarkersState


@dataclass(frozen=True)
class GlobeConfig:
    """Visual settings passed through to the globe renderer."""

    point_size: float = 0.8
    globe_color: str = "#2B0957"
    show_atmosphere: bool = True
    atmosphere_color: str = "#A25CFA"
    atmosphere_altitude: float = 0.15
    emissive: str = "#2B0957"
    emissive_intensity: float = 0.2
    shininess: float = 0.9
    polygon_color: str = "#FFF"
    ambient_light: str = "#F8F9FE"
    directional_left_light: str = "#B89EFF"
    directional_top_light: str = "#A25CFA"
    point_light: str = "#A6FA45"
    arc_time: int = 1000  # ms
    arc_length: float = 0.9
    rings: int = 1
    max_rings: int = 3
    initial_position: Tuple[float, float] = (22.3193, 114.1694)
    auto_rotate: bool = True
    auto_rotate_speed: float = 0.5

    def to_dict(self) -> Dict[str, Any]:
        lat, lng = self.initial_position
        return {
            "pointSize": self.point_size,
            "globeColor": self.globe_color,
            "showAtmosphere": self.show_atmosphere,
            "atmosphereColor": self.atmosphere_color,
            "atmosphereAltitude": self.atmosphere_altitude,
            "emissive": self.emissive,
            "emissiveIntensity": self.emissive_intensity,
            "shininess": self.shininess,
            "polygonColor": self.polygon_color,
            "ambientLight": self.ambient_light,
            "directionalLeftLight": self.directional_left_light,
            "directionalTopLight": self.directional_top_light,
            "pointLight": self.point_light,
            "arcTime": self.arc_time,
            "arcLength": self.arc_length,
            "rings": self.rings,
            "maxRings": self.max_rings,
            "initialPosition": {"lat": lat, "lng": lng},
            "autoRotate": self.auto_rotate,
            "autoRotateSpeed": self.auto_rotate_speed,
        }


@dataclass(frozen=True)
class GlobeView:
    """What the renderer receives for one controller state."""

    config: GlobeConfig
    arcs: List[Dict[str, Any]] = field(default_factory=list)
    markers: List[Dict[str, Any]] = field(default_factory=list)

    @classmethod
    def from_state(
        cls, state: MarkersState, config: GlobeConfig = GlobeConfig()
    ) -> "GlobeView":
        # Loading and error screens replace the globe entirely.
        if state.status is not LoadState.SUCCESS:
            return cls(config=config)
        return cls(
            config=config,
            arcs=[a.to_dict() for a in state.arcs],
            markers=[m.to_dict() for m in state.markers],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "globeConfig": self.config.to_dict(),
            "data": self.arcs,
            "markers": self.markers,
        }
