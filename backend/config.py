"""
Configuration for the marker API.

Settings come from ``config.json`` at the repository root, with environment
variables taking precedence:

- ``GLOBE_MARKERS_DATA``: path of the static marker dataset
- ``GLOBE_ENV``: ``development`` (default) or ``production``
- ``GLOBE_API_DELAY_MS``: artificial latency for ``GET /api/markers``
"""

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

ROOT_DIR = Path(__file__).parent.parent
DEFAULT_CONFIG_PATH = ROOT_DIR / "config.json"
DEFAULT_DATA_PATH = ROOT_DIR / "data" / "markers-api.json"
DEFAULT_PORT = 4301
DEFAULT_DELAY_MS = 500
MAX_DELAY_MS = 5000


@dataclass(frozen=True)
class Settings:
    """
    Runtime settings for the API.

    Parameters
    ----------
    data_path : Path
        Static marker dataset document
    environment : str
        'development' or 'production'; error details are hidden in production
    artificial_delay_ms : int
        Simulated network latency, 0 disables it (capped at MAX_DELAY_MS)
    port : int
        Port for the standalone server
    """

    data_path: Path = DEFAULT_DATA_PATH
    environment: str = "development"
    artificial_delay_ms: int = DEFAULT_DELAY_MS
    port: int = DEFAULT_PORT

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def delay_seconds(self) -> float:
        return max(0, min(self.artificial_delay_ms, MAX_DELAY_MS)) / 1000.0


def _read_config_file(config_path: Path) -> Dict[str, Any]:
    try:
        with open(config_path, "r") as f:
            config = json.load(f)
        logger.info(f"Loaded config from {config_path}")
        return config if isinstance(config, dict) else {}
    except FileNotFoundError:
        logger.info(f"No config file at {config_path}, using defaults")
    except Exception as e:
        logger.warning(f"Could not load {config_path}: {e}, using defaults")
    return {}


def load_settings(config_path: Optional[Path] = None) -> Settings:
    """
    Build settings from the config file and the environment.

    Parameters
    ----------
    config_path : Optional[Path]
        Config file to read (default: ``config.json`` at the repository root)

    Returns
    -------
    Settings
        Resolved settings
    """
    config = _read_config_file(Path(config_path or DEFAULT_CONFIG_PATH))

    data_path = os.environ.get("GLOBE_MARKERS_DATA") or config.get("markers_data_path")
    if data_path:
        data_path = Path(data_path)
        if not data_path.is_absolute():
            data_path = ROOT_DIR / data_path
    else:
        data_path = DEFAULT_DATA_PATH

    environment = os.environ.get("GLOBE_ENV") or config.get("environment") or "development"

    raw_delay = os.environ.get("GLOBE_API_DELAY_MS", config.get("artificial_delay_ms"))
    try:
        delay_ms = DEFAULT_DELAY_MS if raw_delay is None else int(raw_delay)
    except (TypeError, ValueError):
        logger.warning(f"Invalid artificial delay {raw_delay!r}, using {DEFAULT_DELAY_MS}ms")
        delay_ms = DEFAULT_DELAY_MS

    port = config.get("backend", {}).get("port", DEFAULT_PORT)

    return Settings(
        data_path=data_path,
        environment=str(environment),
        artificial_delay_ms=delay_ms,
        port=int(port),
    )
