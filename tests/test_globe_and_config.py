"""Tests for the renderer payload and the API settings."""

import json

import pytest

from backend.config import DEFAULT_DATA_PATH, MAX_DELAY_MS, Settings, load_settings
from src.client.controller import LoadState, MarkerDataController, MarkersState
from src.client.globe import GlobeConfig, GlobeView
from src.client.sources import FileMarkerSource


class TestGlobeView:
    def test_default_config_wire_keys(self):
        config = GlobeConfig().to_dict()

        assert config["pointSize"] == 0.8
        assert config["initialPosition"] == {"lat": 22.3193, "lng": 114.1694}
        assert config["autoRotate"] is True

    @pytest.mark.anyio
    async def test_view_from_successful_state(self, dataset_file):
        async with MarkerDataController(FileMarkerSource(dataset_file)) as controller:
            view = GlobeView.from_state(controller.state).to_dict()

        assert len(view["data"]) == 1
        assert view["data"][0]["startLat"] == -23.5
        assert [m["id"] for m in view["markers"]] == ["sp", "rj"]
        assert view["globeConfig"]["globeColor"] == "#2B0957"

    @pytest.mark.parametrize("status", [LoadState.IDLE, LoadState.LOADING, LoadState.ERROR])
    def test_non_success_states_render_nothing(self, status):
        view = GlobeView.from_state(MarkersState(status=status))

        assert view.arcs == []
        assert view.markers == []


class TestSettings:
    def test_defaults_without_config_file(self, tmp_path, monkeypatch):
        for name in ("GLOBE_MARKERS_DATA", "GLOBE_ENV", "GLOBE_API_DELAY_MS"):
            monkeypatch.delenv(name, raising=False)

        settings = load_settings(tmp_path / "missing.json")

        assert settings == Settings()
        assert settings.data_path == DEFAULT_DATA_PATH
        assert settings.is_production is False
        assert settings.delay_seconds == 0.5

    def test_config_file_values(self, tmp_path, monkeypatch):
        for name in ("GLOBE_MARKERS_DATA", "GLOBE_ENV", "GLOBE_API_DELAY_MS"):
            monkeypatch.delenv(name, raising=False)
        config_path = tmp_path / "config.json"
        config_path.write_text(
            json.dumps(
                {
                    "markers_data_path": str(tmp_path / "markers.json"),
                    "environment": "production",
                    "artificial_delay_ms": 0,
                    "backend": {"port": 9000},
                }
            )
        )

        settings = load_settings(config_path)

        assert settings.data_path == tmp_path / "markers.json"
        assert settings.is_production is True
        assert settings.delay_seconds == 0
        assert settings.port == 9000

    def test_environment_overrides_config(self, tmp_path, monkeypatch):
        config_path = tmp_path / "config.json"
        config_path.write_text(json.dumps({"environment": "development"}))
        monkeypatch.setenv("GLOBE_ENV", "production")
        monkeypatch.setenv("GLOBE_API_DELAY_MS", "25")

        settings = load_settings(config_path)

        assert settings.environment == "production"
        assert settings.artificial_delay_ms == 25

    def test_invalid_delay_falls_back_to_default(self, tmp_path, monkeypatch):
        monkeypatch.setenv("GLOBE_API_DELAY_MS", "soon")
        assert load_settings(tmp_path / "missing.json").artificial_delay_ms == 500

    def test_delay_is_bounded(self):
        assert Settings(artificial_delay_ms=10**9).delay_seconds == MAX_DELAY_MS / 1000
        assert Settings(artificial_delay_ms=-5).delay_seconds == 0
