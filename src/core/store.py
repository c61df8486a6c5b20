"""
Marker Graph Data Models.

This module defines the immutable data structures for the globe's marker
graph: markers (nodes), their outbound connections (edges), the derived
statistics and the static dataset that holds them.

Key principles:
- Models are frozen (the dataset is loaded once and never mutated)
- Connections are owned by exactly one marker
- Python attributes are snake_case, the JSON wire format is camelCase
- Statistics are derived from whatever marker subset is in view
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Literal, Optional, Tuple

logger = logging.getLogger(__name__)

MarkerType = Literal["capital", "city", "city-state", "other"]
MARKER_TYPES: Tuple[str, ...] = ("capital", "city", "city-state", "other")


class DatasetError(Exception):
    """Raised when the static marker dataset cannot be loaded."""


@dataclass(frozen=True)
class Coordinates:
    """
    Latitude/longitude pair in degrees.

    Values are treated as opaque numbers; no range validation is applied.
    """

    lat: float
    lng: float

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Coordinates":
        return cls(lat=float(data["lat"]), lng=float(data["lng"]))

    def to_dict(self) -> Dict[str, float]:
        return {"lat": self.lat, "lng": self.lng}


@dataclass(frozen=True)
class Connection:
    """
    Directed edge owned by a single marker.

    Parameters
    ----------
    id : str
        Unique connection identifier
    target : str
        Descriptive label of the destination (need not be a marker id)
    target_coordinates : Coordinates
        Where the arc ends, independent of ``target``
    arc_alt : float
        Rendered arc height hint
    color : str
        Color token, opaque to this layer
    order : int
        Animation sequencing hint
    description : str
        Free text
    """

    id: str
    target: str
    target_coordinates: Coordinates
    arc_alt: float = 0.1
    color: str = ""
    order: int = 0
    description: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Connection":
        return cls(
            id=str(data["id"]),
            target=str(data.get("target", "")),
            target_coordinates=Coordinates.from_dict(data["targetCoordinates"]),
            arc_alt=float(data.get("arcAlt", 0.1)),
            color=str(data.get("color", "")),
            order=int(data.get("order", 0)),
            description=str(data.get("description", "")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "target": self.target,
            "targetCoordinates": self.target_coordinates.to_dict(),
            "arcAlt": self.arc_alt,
            "color": self.color,
            "order": self.order,
            "description": self.description,
        }


@dataclass(frozen=True)
class Marker:
    """
    Node of the marker graph.

    Parameters
    ----------
    id : str
        Unique stable identifier
    name : str
        Display name
    country : str
        Country name
    region : str
        Region name (the only grouping/filter dimension)
    coordinates : Coordinates
        Marker position
    type : str
        One of: 'capital', 'city', 'city-state', 'other'
    population : int
        Non-negative, display-only
    connections : Tuple[Connection, ...]
        Outbound edges, in order
    """

    id: str
    name: str
    country: str
    region: str
    coordinates: Coordinates
    type: MarkerType = "other"
    population: int = 0
    connections: Tuple[Connection, ...] = field(default_factory=tuple)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Marker":
        return cls(
            id=str(data["id"]),
            name=str(data.get("name", "")),
            country=str(data.get("country", "")),
            region=str(data.get("region", "")),
            coordinates=Coordinates.from_dict(data["coordinates"]),
            type=data.get("type", "other"),
            population=int(data.get("population", 0)),
            connections=tuple(
                Connection.from_dict(c) for c in data.get("connections", [])
            ),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "country": self.country,
            "coordinates": self.coordinates.to_dict(),
            "connections": [c.to_dict() for c in self.connections],
            "type": self.type,
            "population": self.population,
            "region": self.region,
        }


@dataclass(frozen=True)
class Statistics:
    """
    Aggregates over a marker subset.

    Never stored alongside a different subset: recompute with
    ``calculate_statistics`` whenever the visible markers change.
    """

    total_markers: int = 0
    total_connections: int = 0
    regions: Dict[str, int] = field(default_factory=dict)
    types: Dict[str, int] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Statistics":
        return cls(
            total_markers=int(data.get("totalMarkers", 0)),
            total_connections=int(data.get("totalConnections", 0)),
            regions={str(k): int(v) for k, v in data.get("regions", {}).items()},
            types={str(k): int(v) for k, v in data.get("types", {}).items()},
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalMarkers": self.total_markers,
            "totalConnections": self.total_connections,
            "regions": dict(self.regions),
            "types": dict(self.types),
        }


@dataclass(frozen=True)
class Metadata:
    """Static descriptive info about the dataset, unrelated to filtering."""

    version: str = ""
    last_updated: str = ""
    source: str = ""
    description: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Metadata":
        return cls(
            version=str(data.get("version", "")),
            last_updated=str(data.get("lastUpdated", "")),
            source=str(data.get("source", "")),
            description=str(data.get("description", "")),
        )

    def to_dict(self) -> Dict[str, str]:
        return {
            "version": self.version,
            "lastUpdated": self.last_updated,
            "source": self.source,
            "description": self.description,
        }


@dataclass(frozen=True)
class MarkerDataset:
    """
    Immutable marker graph as loaded from the static document.

    Parameters
    ----------
    markers : Tuple[Marker, ...]
        All markers, in document order
    statistics : Statistics
        Statistics as stored in the document (over the full set)
    metadata : Metadata
        Passthrough descriptive info
    message : str
        Envelope message of the document
    """

    markers: Tuple[Marker, ...]
    statistics: Statistics = field(default_factory=Statistics)
    metadata: Metadata = field(default_factory=Metadata)
    message: str = ""

    @classmethod
    def from_envelope(cls, document: Dict[str, Any]) -> "MarkerDataset":
        """
        Build a dataset from a ``{success, message, timestamp, data}`` document.

        Raises
        ------
        DatasetError
            If the document does not carry a marker list
        """
        data = document.get("data") if isinstance(document, dict) else None
        if not isinstance(data, dict) or not isinstance(data.get("markers"), list):
            raise DatasetError("Dataset document has no data.markers list")

        try:
            markers = tuple(Marker.from_dict(m) for m in data["markers"])
        except (KeyError, TypeError, ValueError) as e:
            raise DatasetError(f"Invalid marker in dataset: {e}") from e

        return cls(
            markers=markers,
            statistics=Statistics.from_dict(data.get("statistics") or {}),
            metadata=Metadata.from_dict(data.get("metadata") or {}),
            message=str(document.get("message", "")),
        )

    def to_envelope(self, timestamp: Optional[str] = None) -> Dict[str, Any]:
        """
        Convert dataset to its JSON-serializable document form.

        Parameters
        ----------
        timestamp : Optional[str]
            ISO-8601 timestamp to stamp the envelope with

        Returns
        -------
        dict
            ``{success, message, timestamp, data: {markers, statistics, metadata}}``
        """
        return {
            "success": True,
            "message": self.message,
            "timestamp": timestamp or "",
            "data": {
                "markers": [m.to_dict() for m in self.markers],
                "statistics": self.statistics.to_dict(),
                "metadata": self.metadata.to_dict(),
            },
        }


def load_dataset(path: Path) -> MarkerDataset:
    """
    Load the static marker dataset from a JSON file.

    Parameters
    ----------
    path : Path
        Location of the dataset document

    Returns
    -------
    MarkerDataset
        Immutable dataset

    Raises
    ------
    DatasetError
        If the file is missing, is not valid JSON or is not shaped as a dataset
    """
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            document = json.load(f)
    except FileNotFoundError as e:
        raise DatasetError(f"Dataset file not found: {path}") from e
    except json.JSONDecodeError as e:
        raise DatasetError(f"Dataset file is not valid JSON: {path}: {e}") from e

    dataset = MarkerDataset.from_envelope(document)
    logger.info(f"Loaded {len(dataset.markers)} markers from {path}")
    return dataset
