"""Builders for marker documents used across tests."""

from pathlib import Path

BUNDLED_DATASET = Path(__file__).parent.parent / "data" / "markers-api.json"


def marker_dict(marker_id, region, type, connections=(), lat=0.0, lng=0.0):
    """Build a marker document as it appears on the wire."""
    return {
        "id": marker_id,
        "name": marker_id.upper(),
        "country": "Brazil",
        "coordinates": {"lat": lat, "lng": lng},
        "connections": [
            {
                "id": f"{marker_id}-{target}",
                "target": target,
                "targetCoordinates": {"lat": end_lat, "lng": end_lng},
                "arcAlt": 0.2,
                "color": "#06b6d4",
                "order": order,
                "description": f"{marker_id} to {target}",
            }
            for order, (target, end_lat, end_lng) in enumerate(connections, start=1)
        ],
        "type": type,
        "population": 1000,
        "region": region,
    }


def envelope(markers, success=True, message="Markers loaded successfully"):
    """Wrap marker documents in the API envelope."""
    return {
        "success": success,
        "message": message,
        "timestamp": "2025-01-15T12:00:00.000Z",
        "data": {
            "markers": markers,
            "statistics": {
                "totalMarkers": len(markers),
                "totalConnections": sum(len(m["connections"]) for m in markers),
                "regions": {},
                "types": {},
            },
            "metadata": {
                "version": "1.0.0",
                "lastUpdated": "2025-01-15T12:00:00.000Z",
                "source": "tests",
                "description": "Test markers",
            },
        },
    }
