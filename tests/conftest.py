"""Shared fixtures for the globe marker tests."""

import json

import pytest
from fastapi.testclient import TestClient

from backend.api import create_app
from backend.config import Settings
from src.core.store import Marker
from tests.helpers import BUNDLED_DATASET, envelope, marker_dict


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def sp_rj_markers():
    """São Paulo (capital, one connection to Rio) followed by Rio (no connections)."""
    return [
        Marker.from_dict(
            marker_dict(
                "sp",
                "Southeast",
                "capital",
                connections=[("rj", -22.9068, -43.1729)],
                lat=-23.5505,
                lng=-46.6333,
            )
        ),
        Marker.from_dict(
            marker_dict("rj", "Southeast", "city", lat=-22.9068, lng=-43.1729)
        ),
    ]


@pytest.fixture
def mixed_markers():
    """Markers across several regions and types, in a fixed order."""
    return [
        Marker.from_dict(marker_dict("sp", "Southeast", "capital", [("rj", 1, 1)])),
        Marker.from_dict(marker_dict("poa", "South", "city", [("sp", 2, 2), ("rj", 3, 3)])),
        Marker.from_dict(marker_dict("rg", "Rio Grande", "city")),
        Marker.from_dict(marker_dict("mao", "North", "other", [("bsb", 4, 4)])),
        Marker.from_dict(marker_dict("sgp", "Asia", "city-state")),
        Marker.from_dict(marker_dict("rj", "Southeast", "city", [("lis", 5, 5)])),
    ]


@pytest.fixture
def dataset_file(tmp_path):
    """Write a small dataset document and return its path."""
    path = tmp_path / "markers-api.json"
    markers = [
        marker_dict("sp", "Southeast", "capital", [("rj", -22.9, -43.1)], -23.5, -46.6),
        marker_dict("rj", "Southeast", "city", [], -22.9, -43.1),
    ]
    path.write_text(json.dumps(envelope(markers)), encoding="utf-8")
    return path


@pytest.fixture
def settings():
    return Settings(data_path=BUNDLED_DATASET, artificial_delay_ms=0)


@pytest.fixture
def api_client(settings):
    """TestClient over an app serving the bundled dataset without delay."""
    return TestClient(create_app(settings=settings))
